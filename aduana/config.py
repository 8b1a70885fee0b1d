import json
import logging
import os
from collections import namedtuple
from urllib.parse import urlsplit, urlunsplit

from requests.auth import AuthBase, HTTPBasicAuth

from .errors import ConfigError

DEFAULT_TIMEOUT = 30
DOCKER_CONFIG_FILE = os.path.expanduser('~/.docker/config.json')

log = logging.getLogger(__name__)


def value_or_false(value):
    if not value or str(value).lower() in ('false', '0', 'no', 'none'):
        return False
    return value


def verify_value(value):
    if str(value).lower() in ('true', '1', 'yes'):
        return True
    return value_or_false(value)


def normalize_url(base_url):
    """
    Validates the registry URL and reduces it to scheme and location. A missing scheme defaults to ``https``; a
    trailing ``/v2`` path is removed, as the client adds it to every request.

    :param base_url: Registry URL, e.g. ``https://registry.example.com`` or ``localhost:5000``.
    :type base_url: str
    :return: Normalized URL without trailing slash.
    :rtype: str
    """
    if not isinstance(base_url, str) or not base_url.strip():
        raise ConfigError("No registry URL provided.", base_url)
    url = base_url.strip()
    if '://' not in url:
        url = 'https://{0}'.format(url)
    try:
        parts = urlsplit(url)
        # Accessing the port validates it.
        parts.port
    except ValueError as e:
        raise ConfigError("Invalid registry URL.", base_url) from e
    if parts.scheme not in ('http', 'https'):
        raise ConfigError("Unsupported URL scheme, expected http or https.", base_url)
    if not parts.hostname:
        raise ConfigError("Registry URL has no host name.", base_url)
    if parts.query or parts.fragment:
        raise ConfigError("Registry URL must not contain a query or fragment.", base_url)
    path = parts.path.rstrip('/')
    if path.endswith('/v2'):
        path = path[:-3]
    return urlunsplit((parts.scheme, parts.netloc, path, '', ''))


def get_docker_auth(registry, config_file=DOCKER_CONFIG_FILE):
    """
    Looks up the base64-encoded credentials of a registry as stored by ``docker login``.

    :param registry: Registry name as used in the Docker CLI config, e.g. ``registry.example.com``.
    :type registry: str
    :param config_file: Path to the Docker CLI config.
    :type config_file: str
    :return: Encoded credentials, or ``None`` if there are none.
    :rtype: str | NoneType
    """
    try:
        with open(config_file) as f:
            config_data = json.load(f)
    except (IOError, ValueError):
        return None
    auth_data = config_data.get('auths')
    if not auth_data:
        return None
    registry_data = auth_data.get(registry)
    if not registry_data:
        return None
    return registry_data.get('auth')


class HTTPBase64Auth(AuthBase):
    """
    Similar to HTTPBasicAuth, but handles the base64 encoded string directly instead of dividing it into user name
    and password.
    """
    def __init__(self, auth):
        self.auth = auth

    def __eq__(self, other):
        return self.auth == getattr(other, 'auth', None)

    def __ne__(self, other):
        return not self == other

    def __call__(self, r):
        r.headers['Authorization'] = 'Basic {0}'.format(self.auth)
        return r


class RegistryEndpoint(namedtuple('RegistryEndpoint', ['base_url', 'auth', 'verify', 'cert', 'timeout'])):
    """
    Immutable connection settings of a registry.

    :param base_url: Normalized registry URL, excluding the ``v2`` path.
    :type base_url: str
    :param auth: Authentication handler for :mod:`requests`, or ``None``.
    :param verify: Whether to verify TLS certificates, or the path to a CA bundle.
    :type verify: bool | str
    :param cert: Client certificate path, or a tuple of certificate and key path.
    :type cert: str | (str, str) | NoneType
    :param timeout: Timeout in seconds applied to each request.
    :type timeout: float
    """
    __slots__ = ()

    @classmethod
    def create(cls, base_url, user=None, password=None, auth=None, verify=True, cert=None,
               timeout=DEFAULT_TIMEOUT):
        """
        Validates the given settings and returns a new endpoint.

        :param base_url: Registry URL. If no scheme is included, ``https`` is assumed.
        :type base_url: str
        :param user: User name for basic authentication.
        :type user: str
        :param password: Password for basic authentication.
        :type password: str
        :param auth: Alternatively to ``user`` and ``password``, any authentication handler supported by
          :mod:`requests`.
        :param verify: Set to ``False`` to skip TLS verification, or pass the path to a CA bundle, e.g. for a
          self-signed registry certificate.
        :type verify: bool | str
        :param cert: Client certificate path, or a tuple of certificate and key path.
        :type cert: str | (str, str)
        :param timeout: Timeout in seconds for each request.
        :type timeout: float
        :return: New endpoint.
        :rtype: RegistryEndpoint
        """
        url = normalize_url(base_url)
        if user:
            if auth is not None:
                raise ConfigError("Provide either user and password or an authentication handler, not both.")
            auth = HTTPBasicAuth(user, password or '')
        elif password:
            raise ConfigError("A password was provided without user name.")
        if isinstance(verify, str):
            if not os.path.isfile(verify):
                raise ConfigError("CA bundle not found.", verify)
        elif not isinstance(verify, bool):
            raise ConfigError("Expected a boolean or a CA bundle path for verify.", verify)
        if isinstance(timeout, bool) or not isinstance(timeout, (int, float)) or timeout <= 0:
            raise ConfigError("Timeout must be a positive number of seconds.", timeout)
        return cls(url, auth, verify, cert, timeout)

    @classmethod
    def from_env(cls, environ=None, docker_config=DOCKER_CONFIG_FILE):
        """
        Creates an endpoint from environment variables:

        * ``REGISTRY``: Registry name or URL (required).
        * ``REGISTRY_USER`` and ``REGISTRY_PASSWORD``: Basic authentication. If no user is set, the credentials
          stored by ``docker login`` are used if available.
        * ``REGISTRY_VERIFY``: CA bundle path; ``true``, ``1`` or ``yes`` verifies against the default CA bundle,
          ``false``, ``0``, ``no`` or ``none`` disables verification.
        * ``REGISTRY_CLIENT_CERT`` and ``REGISTRY_CLIENT_KEY``: Client certificate and key.
        * ``REGISTRY_TIMEOUT``: Request timeout in seconds.

        :param environ: Mapping to read from instead of ``os.environ``.
        :type environ: dict[str, str]
        :param docker_config: Path to the Docker CLI config.
        :type docker_config: str
        :return: New endpoint.
        :rtype: RegistryEndpoint
        """
        if environ is None:
            environ = os.environ
        registry = environ.get('REGISTRY')
        if not registry:
            raise ConfigError("No registry provided through the environment variable REGISTRY.")
        kwargs = {}
        user = environ.get('REGISTRY_USER')
        if user:
            kwargs['user'] = user
            kwargs['password'] = environ.get('REGISTRY_PASSWORD')
        else:
            config_auth = get_docker_auth(registry, docker_config)
            if config_auth:
                log.debug("Using credentials from %s for %s.", docker_config, registry)
                kwargs['auth'] = HTTPBase64Auth(config_auth)
        verify = environ.get('REGISTRY_VERIFY')
        if verify is not None:
            kwargs['verify'] = verify_value(verify)
        client_cert = environ.get('REGISTRY_CLIENT_CERT')
        if client_cert:
            client_key = environ.get('REGISTRY_CLIENT_KEY')
            kwargs['cert'] = (client_cert, client_key) if client_key else client_cert
        timeout = environ.get('REGISTRY_TIMEOUT')
        if timeout:
            try:
                kwargs['timeout'] = float(timeout)
            except ValueError as e:
                raise ConfigError("Invalid timeout.", timeout) from e
        return cls.create(registry, **kwargs)

    def with_verify(self, verify):
        """
        Returns a copy of this endpoint with different TLS verification.

        :param verify: ``True``/``False`` or the path to a CA bundle.
        :type verify: bool | str
        :rtype: RegistryEndpoint
        """
        return self.create(self.base_url, auth=self.auth, verify=verify, cert=self.cert, timeout=self.timeout)
