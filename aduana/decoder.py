"""
Decoding of registry API responses. All functions take the raw response body and ignore any fields they do not
know about.
"""
import json

from .errors import DecodeError
from .models import Descriptor, Image, ImageConfig, Manifest

_MISSING = object()
_TYPE_NAMES = {
    str: 'string',
    int: 'integer',
    list: 'array',
    dict: 'object',
}


def _load_object(content):
    if isinstance(content, bytes):
        try:
            content = content.decode('utf-8')
        except UnicodeDecodeError as e:
            raise DecodeError("Response body is not valid UTF-8.") from e
    try:
        data = json.loads(content)
    except ValueError as e:
        raise DecodeError("Response body is not valid JSON: {0}".format(e)) from e
    if not isinstance(data, dict):
        raise DecodeError("Expected a JSON object, found {0}.".format(type(data).__name__))
    return data


def _is_type(value, expected_type):
    # JSON booleans are no numbers.
    if expected_type is int and isinstance(value, bool):
        return False
    return isinstance(value, expected_type)


def _get(data, key, expected_type, path=None, required=True, default=None, nullable=False):
    field = '{0}.{1}'.format(path, key) if path else key
    value = data.get(key, _MISSING)
    if value is _MISSING:
        if required:
            raise DecodeError("Missing field '{0}'.".format(field), field)
        return default
    if value is None:
        if required and not nullable:
            raise DecodeError("Field '{0}' must not be null.".format(field), field)
        return default
    if not _is_type(value, expected_type):
        raise DecodeError("Field '{0}' must be of type {1}.".format(field, _TYPE_NAMES[expected_type]), field)
    return value


def _get_str_list(data, key, path=None, required=True):
    field = '{0}.{1}'.format(path, key) if path else key
    values = _get(data, key, list, path, required=required, default=[], nullable=True)
    for i, value in enumerate(values):
        if not isinstance(value, str):
            item_field = '{0}[{1}]'.format(field, i)
            raise DecodeError("Field '{0}' must be of type string.".format(item_field), item_field)
    return values


def _get_str_dict(data, key, path):
    field = '{0}.{1}'.format(path, key) if path else key
    values = _get(data, key, dict, path, required=False, default={})
    for k, v in values.items():
        if not isinstance(v, str):
            item_field = '{0}.{1}'.format(field, k)
            raise DecodeError("Field '{0}' must be of type string.".format(item_field), item_field)
    return dict(values)


def _descriptor(data, path):
    if not isinstance(data, dict):
        raise DecodeError("Field '{0}' must be of type object.".format(path), path)
    return Descriptor(
        digest=_get(data, 'digest', str, path),
        size=_get(data, 'size', int, path),
        media_type=_get(data, 'mediaType', str, path, required=False, default=''),
    )


def decode_catalog(content):
    """
    Decodes the response of the catalog endpoint ``/v2/_catalog``.

    :param content: Response body.
    :type content: bytes | str
    :return: Repository names in the order returned by the registry.
    :rtype: list[str]
    """
    data = _load_object(content)
    return _get_str_list(data, 'repositories')


def decode_tag_list(content, name=None):
    """
    Decodes the response of the tag list endpoint ``/v2/<name>/tags/list``. A ``null`` tag list, as returned by the
    registry for repositories without any remaining tags, results in an empty list.

    :param content: Response body.
    :type content: bytes | str
    :param name: Repository name that was requested, used if the response does not include it.
    :type name: str
    :return: Image with its tags.
    :rtype: aduana.models.Image
    """
    data = _load_object(content)
    tags = _get_str_list(data, 'tags')
    repo_name = _get(data, 'name', str, required=name is None, default=name)
    return Image(repo_name, tags)


def decode_manifest(content):
    """
    Decodes an image manifest (Docker schema 2 or OCI image manifest). Layers are kept in their original order.

    :param content: Response body.
    :type content: bytes | str
    :return: Manifest.
    :rtype: aduana.models.Manifest
    """
    data = _load_object(content)
    schema_version = _get(data, 'schemaVersion', int, required=False)
    media_type = _get(data, 'mediaType', str, required=False)
    config = _get(data, 'config', dict)
    layers = _get(data, 'layers', list)
    return Manifest(
        schema_version=schema_version,
        media_type=media_type,
        config=_descriptor(config, 'config'),
        layers=[_descriptor(layer, 'layers[{0}]'.format(i)) for i, layer in enumerate(layers)],
    )


def decode_image_config(content):
    """
    Decodes an image configuration blob, as referenced by the ``config`` descriptor of a manifest.

    :param content: Response body.
    :type content: bytes | str
    :return: Image configuration.
    :rtype: aduana.models.ImageConfig
    """
    data = _load_object(content)
    container_config = _get(data, 'config', dict, required=False, default={})
    return ImageConfig(
        architecture=_get(data, 'architecture', str, required=False),
        os=_get(data, 'os', str, required=False),
        created=_get(data, 'created', str, required=False),
        user=_get(container_config, 'User', str, 'config', required=False),
        env=tuple(_get_str_list(container_config, 'Env', 'config', required=False)),
        cmd=tuple(_get_str_list(container_config, 'Cmd', 'config', required=False)),
        working_dir=_get(container_config, 'WorkingDir', str, 'config', required=False),
        labels=_get_str_dict(container_config, 'Labels', 'config'),
    )
