# Geodata cache package
from .category_cache import CategoryCache
from .road_cache import RoadCache

__all__ = ["CategoryCache", "RoadCache"]
