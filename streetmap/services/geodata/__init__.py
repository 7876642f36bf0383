# Geodata acquisition package
from .errors import GeodataError, ServiceUnavailable, TransportFailure, UnknownCategory
from .normalizer import GeodataNormalizer
from .overpass_client import OverpassClient

__all__ = [
    "GeodataError",
    "GeodataNormalizer",
    "OverpassClient",
    "ServiceUnavailable",
    "TransportFailure",
    "UnknownCategory",
]
