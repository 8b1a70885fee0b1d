from collections import namedtuple

from .errors import ConfigError


Descriptor = namedtuple('Descriptor', ['digest', 'size', 'media_type'])
Manifest = namedtuple('Manifest', ['schema_version', 'media_type', 'config', 'layers'])
ImageConfig = namedtuple('ImageConfig', ['architecture', 'os', 'created', 'user', 'env', 'cmd', 'working_dir',
                                         'labels'])


def empty_config():
    return ImageConfig(None, None, None, None, (), (), None, {})


class Image:
    """
    A repository on the registry along with its tags, as returned by the registry at the time of the lookup.

    :param name: Repository name.
    :type name: str
    :param tags: Tags of the repository, in the order the registry returned them.
    :type tags: list[str] | tuple[str]
    :param inspector: Inspector instance the image was retrieved from, used for looking up tag details.
    :type inspector: aduana.inspector.AduanaInspector
    """
    __slots__ = ('_name', '_tags', '_inspector')

    def __init__(self, name, tags, inspector=None):
        self._name = name
        self._tags = tuple(tags)
        self._inspector = inspector

    def __eq__(self, other):
        if not isinstance(other, Image):
            return NotImplemented
        return self._name == other._name and self._tags == other._tags

    def __ne__(self, other):
        result = self.__eq__(other)
        if result is NotImplemented:
            return result
        return not result

    def __hash__(self):
        return hash((self._name, self._tags))

    def __repr__(self):
        return '<{0} {1} {2}>'.format(self.__class__.__name__, self._name, list(self._tags))

    @property
    def name(self):
        """
        Repository name.

        :rtype: str
        """
        return self._name

    @property
    def tags(self):
        """
        Tags of this repository.

        :rtype: tuple[str]
        """
        return self._tags

    def bind(self, inspector):
        return Image(self._name, self._tags, inspector)

    def details(self, tag, config=False):
        """
        Retrieves the details of one tag of this image.

        :param tag: Image tag.
        :type tag: str
        :param config: Also fetch the image configuration (architecture, environment, labels etc.).
        :type config: bool
        :return: Image details.
        :rtype: ImageDetails
        """
        if self._inspector is None:
            raise ConfigError("Image is not associated with a registry.", self._name)
        return self._inspector.details(self._name, tag, config=config)


_IMAGE_DETAIL_FIELDS = ['name', 'tag', 'manifest_digest', 'manifest_media_type', 'schema_version', 'media_type',
                        'digest', 'size', 'layers', 'architecture', 'os', 'created', 'user', 'env', 'cmd',
                        'working_dir', 'labels']


class ImageDetails(namedtuple('ImageDetails', _IMAGE_DETAIL_FIELDS)):
    """
    Manifest and (optionally) configuration details of a tagged image.

    ``digest``, ``size``, and ``media_type`` describe the image configuration, i.e. ``digest`` is the image id.
    ``manifest_digest`` is the digest of the manifest as reported by the registry, if it did.
    ``manifest_media_type`` and ``schema_version`` tell a Docker schema 2 manifest from an OCI image manifest.
    Configuration fields (``architecture`` through ``labels``) are only set if the configuration blob was retrieved.
    """
    __slots__ = ()

    @classmethod
    def from_manifest(cls, name, tag, manifest, manifest_digest=None, config=None):
        """
        :param name: Repository name.
        :type name: str
        :param tag: Image tag.
        :type tag: str
        :param manifest: Decoded manifest.
        :type manifest: Manifest
        :param manifest_digest: Digest of the manifest.
        :type manifest_digest: str
        :param config: Decoded configuration blob. If not provided, configuration fields are left empty.
        :type config: ImageConfig
        :rtype: ImageDetails
        """
        if config is None:
            config = empty_config()
        return cls(
            name=name,
            tag=tag,
            manifest_digest=manifest_digest,
            manifest_media_type=manifest.media_type,
            schema_version=manifest.schema_version,
            media_type=manifest.config.media_type,
            digest=manifest.config.digest,
            size=manifest.config.size,
            layers=tuple(manifest.layers),
            **config._asdict()
        )

    @property
    def layers_size(self):
        """
        Total (compressed) size of all layers in bytes.

        :rtype: int
        """
        return sum(layer.size for layer in self.layers)
