import os
import re

from setuptools import setup, find_packages


def read_version():
    init_file = os.path.join(os.path.dirname(__file__), 'aduana', '__init__.py')
    with open(init_file) as f:
        return re.search(r"^__version__ = '([^']+)'", f.read(), re.M).group(1)


def include_readme():
    readme_file = os.path.join(os.path.dirname(__file__), 'README.md')
    try:
        with open(readme_file) as rf:
            return rf.read()
    except IOError:
        return ''


setup(
    name='aduana',
    version=read_version(),
    packages=find_packages(exclude=['test', 'test.*']),
    install_requires=['requests'],
    license='MIT',
    description='Inspects the images and tags stored on a private Docker Registry v2.',
    long_description=include_readme(),
    long_description_content_type='text/markdown',
    platforms=['OS Independent'],
    keywords=['docker', 'registry', 'images', 'tags', 'manifest'],
    classifiers=[
        'Environment :: Web Environment',
        'Intended Audience :: Developers',
        'License :: OSI Approved :: MIT License',
        'Operating System :: OS Independent',
        'Programming Language :: Python',
        'Programming Language :: Python :: 3',
        'Topic :: Software Development :: Libraries :: Python Modules',
        'Topic :: System :: Software Distribution',
        'Development Status :: 4 - Beta',
    ],
    python_requires='>=3.6',
    include_package_data=True,
)
