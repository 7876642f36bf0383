# Search package
from .debouncer import SearchDebouncer
from .search_index import SearchIndex

__all__ = ["SearchDebouncer", "SearchIndex"]
