class AduanaError(Exception):
    """
    Base class of all errors raised while talking to a registry.
    """
    pass


class ConfigError(AduanaError):
    """
    Invalid client configuration, e.g. a malformed registry URL. Raised on construction of the client.
    """
    pass


class NetworkError(AduanaError):
    """
    The registry could not be reached: connection refused, TLS failure, or timeout.
    """
    def __init__(self, message, url, *args, **kwargs):
        super().__init__(message, url, *args, **kwargs)

    @property
    def url(self):
        return self.args[1]


class HttpError(AduanaError):
    """
    The registry responded with a non-2xx status code.
    """
    def __init__(self, message, status, url, *args, **kwargs):
        super().__init__(message, status, url, *args, **kwargs)

    @property
    def status(self):
        return self.args[1]

    @property
    def url(self):
        return self.args[2]


class DecodeError(AduanaError):
    """
    A response body did not match the expected structure.

    :param message: Error description.
    :type message: str
    :param field: Dotted path of the missing or invalid field, e.g. ``layers[0].digest``. ``None`` if the body as a
      whole could not be decoded.
    :type field: str | NoneType
    """
    def __init__(self, message, field=None, *args, **kwargs):
        super().__init__(message, field, *args, **kwargs)

    @property
    def field(self):
        return self.args[1]
