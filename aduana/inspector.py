import logging

from .client import RegistryClient
from .config import RegistryEndpoint
from .decoder import decode_catalog, decode_image_config, decode_manifest, decode_tag_list
from .models import ImageDetails

log = logging.getLogger(__name__)


def _warn_truncated(res, what):
    if 'Link' in res.headers:
        log.warning("Registry returned a paginated %s; only the first page is used.", what)


class AduanaInspector:
    """
    Retrieves the images stored on a registry, and their details per tag as needed.

    Only the first page of paginated catalog and tag list responses is considered, so this is not suitable for large
    registries.

    :param base_url: Registry URL, excluding the ``v2`` path. E.g. if your registry is ``registry.example.com``, the
      base URL should be ``https://registry.example.com``. Can also be a ready-made endpoint.
    :type base_url: str | aduana.config.RegistryEndpoint
    :param kwargs: Additional connection settings (e.g. for authentication or TLS), see
      :meth:`aduana.config.RegistryEndpoint.create`.
    """
    def __init__(self, base_url, **kwargs):
        if isinstance(base_url, RegistryEndpoint):
            endpoint = base_url
        else:
            endpoint = RegistryEndpoint.create(base_url, **kwargs)
        self._client = RegistryClient(endpoint)

    @classmethod
    def from_endpoint(cls, endpoint):
        """
        Creates an inspector from existing connection settings.

        :param endpoint: Registry connection settings.
        :type endpoint: aduana.config.RegistryEndpoint
        :rtype: AduanaInspector
        """
        return cls(endpoint)

    @classmethod
    def from_env(cls, environ=None):
        """
        Creates an inspector configured through environment variables, see
        :meth:`aduana.config.RegistryEndpoint.from_env`.

        :rtype: AduanaInspector
        """
        return cls.from_endpoint(RegistryEndpoint.from_env(environ))

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    def close(self):
        """
        Releases the connections of the underlying client.
        """
        self._client.close()

    def __repr__(self):
        endpoint = self._client.endpoint
        return '<{0} {1} auth={2} verify={3}>'.format(self.__class__.__name__, endpoint.base_url,
                                                      endpoint.auth is not None, endpoint.verify)

    @property
    def url(self):
        """
        Registry base URL.

        :rtype: str
        """
        return self._client.base_url

    @property
    def client(self):
        """
        Returns the API client used for requests.

        :return: Docker Registry API client.
        :rtype: aduana.client.RegistryClient
        """
        return self._client

    def with_cert(self, ca_bundle):
        """
        Returns a new inspector that verifies the registry certificate against the given CA bundle, e.g. for a
        registry with a self-signed certificate. This instance remains unchanged and keeps its own connections
        until it is closed.

        :param ca_bundle: Path to a PEM file with trusted certificates.
        :type ca_bundle: str
        :rtype: AduanaInspector
        """
        return self.from_endpoint(self._client.endpoint.with_verify(ca_bundle))

    def ping(self):
        """
        Checks if the registry responds to the API base endpoint.

        :return: ``True`` if the registry responded successfully.
        :rtype: bool
        """
        self._client.ping()
        return True

    def images(self):
        """
        Retrieves all repositories of the registry along with their tags. Fails as a whole if any of the
        repositories cannot be looked up.

        :return: List of images, in the order of the registry catalog.
        :rtype: list[aduana.models.Image]
        """
        res = self._client.get_catalog()
        _warn_truncated(res, "catalog")
        names = decode_catalog(res.content)
        log.info("Found %s repositories.", len(names))
        return [self.tags(name) for name in names]

    def tags(self, name):
        """
        Retrieves the tags of a single repository.

        :param name: Repository name.
        :type name: str
        :return: Image with its tags.
        :rtype: aduana.models.Image
        """
        log.debug("Retrieving tags of '%s'.", name)
        res = self._client.get_tags(name)
        _warn_truncated(res, "tag list of '{0}'".format(name))
        return decode_tag_list(res.content, name).bind(self)

    def details(self, image, tag, config=False):
        """
        Retrieves the manifest details of an image tag.

        :param image: Repository name.
        :type image: str
        :param tag: Image tag.
        :type tag: str
        :param config: Also fetch the image configuration blob, for filling in architecture, os, creation time,
          user, environment, command, working directory and labels.
        :type config: bool
        :return: Image details.
        :rtype: aduana.models.ImageDetails
        """
        log.debug("Retrieving manifest of %s:%s.", image, tag)
        res = self._client.get_manifest(image, tag)
        manifest = decode_manifest(res.content)
        manifest_digest = res.headers.get('Docker-Content-Digest')
        if config:
            log.debug("Retrieving configuration %s of %s:%s.", manifest.config.digest, image, tag)
            blob = self._client.get_blob(image, manifest.config.digest)
            image_config = decode_image_config(blob.content)
        else:
            image_config = None
        return ImageDetails.from_manifest(image, tag, manifest, manifest_digest, image_config)
