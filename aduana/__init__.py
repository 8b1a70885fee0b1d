from .config import RegistryEndpoint
from .errors import AduanaError, ConfigError, DecodeError, HttpError, NetworkError
from .inspector import AduanaInspector
from .models import Descriptor, Image, ImageDetails

__version__ = '0.2.0'
