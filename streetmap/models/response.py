"""
Response models for the search and map API
"""
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from pydantic import BaseModel

from streetmap.models.entities import EntityKind
from streetmap.models.layers import CircleMarker


class SearchHit(BaseModel):
    """A single search result, with the matched span split out for bold rendering"""
    kind: EntityKind
    id: int
    name: str
    type_label: str
    category: Optional[str] = None
    highlight: Tuple[str, str, str]


class SearchResults(BaseModel):
    query: str = ""
    places: List[SearchHit] = []
    roads: List[SearchHit] = []

    @property
    def is_empty(self) -> bool:
        return not self.places and not self.roads


class LoadState(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    READY = "ready"
    FAILED = "failed"


class LoadStatus(BaseModel):
    """User-visible state of the road dataset load"""
    state: LoadState = LoadState.IDLE
    message: str = ""
    attempt: int = 0
    named_count: int = 0
    total_count: int = 0


class CategorySummary(BaseModel):
    key: str
    label: str
    color: str
    icon: str
    loaded: bool = False
    count: Optional[int] = None
    active: bool = False


class CategorySelection(BaseModel):
    """Result of toggling a category"""
    category: str
    active: bool
    loaded: bool
    markers: List[CircleMarker] = []
    count: Optional[int] = None


class MapCommandBatch(BaseModel):
    commands: List[Dict[str, Any]] = []
