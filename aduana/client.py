import logging

import requests

from .errors import HttpError, NetworkError

MANIFEST_MEDIA_TYPES = (
    'application/vnd.docker.distribution.manifest.v2+json',
    'application/vnd.oci.image.manifest.v1+json',
)

log = logging.getLogger(__name__)


class RegistryClient:
    """
    A lightweight, minimalistic API client to the Docker registry, for Registry v2+. Only issues read requests.

    All functions return the unparsed responses, as in some cases (e.g. manifests) header information may be useful.
    For more detailed information on the client functions and response contents, refer to the
    [Docker Registry API docs](https://docs.docker.com/registry/spec/api/).

    :param endpoint: Connection settings of the registry.
    :type endpoint: aduana.config.RegistryEndpoint
    """
    def __init__(self, endpoint):
        self._endpoint = endpoint
        self._session = requests.Session()
        self._session.headers['Accept'] = ', '.join(MANIFEST_MEDIA_TYPES)
        self._session.auth = endpoint.auth
        self._session.verify = endpoint.verify
        self._session.cert = endpoint.cert

    def _request(self, method, *args, **kwargs):
        request_url = '{0}/v2/{1}'.format(self._endpoint.base_url, '/'.join(args))
        kwargs.setdefault('timeout', self._endpoint.timeout)
        log.debug("%s %s", method, request_url)
        try:
            res = self._session.request(method, request_url, **kwargs)
        except requests.exceptions.Timeout as e:
            log.error("Request to %s timed out: %s", request_url, e)
            raise NetworkError("Request timed out.", request_url) from e
        except requests.exceptions.RequestException as e:
            log.error("Request to %s failed: %s", request_url, e)
            raise NetworkError("Cannot connect to registry: {0}".format(e), request_url) from e
        if not 200 <= res.status_code < 300:
            log.debug("%s %s returned status %s.", method, request_url, res.status_code)
            raise HttpError("Registry responded with status {0} {1} for url: {2}".format(
                res.status_code, res.reason or '', request_url), res.status_code, request_url)
        return res

    @property
    def base_url(self):
        """
        Base URL to the Docker Registry, excluding the ``v2`` path.

        :return: Registry base URL.
        :rtype: str
        """
        return self._endpoint.base_url

    @property
    def endpoint(self):
        """
        Connection settings this client was created with.

        :rtype: aduana.config.RegistryEndpoint
        """
        return self._endpoint

    @property
    def session(self):
        """
        The client's :class:`requests.Session` instance.

        :return: Session object.
        :rtype: requests.Session
        """
        return self._session

    def close(self):
        """
        Closes the connections held by the session.
        """
        self._session.close()

    def ping(self):
        return self._request('GET', '')

    def get_catalog(self):
        return self._request('GET', '_catalog')

    def get_tags(self, name):
        return self._request('GET', name, 'tags', 'list')

    def get_manifest(self, name, reference):
        return self._request('GET', name, 'manifests', reference)

    def get_blob(self, name, digest):
        return self._request('GET', name, 'blobs', digest)
