"""
POI Category Configuration
Fixed set of place categories, the Overpass tags that select them and
their marker styling.
"""

from dataclasses import dataclass
from typing import Dict, List, Mapping, Optional, Tuple


@dataclass(frozen=True)
class TagRule:
    """A single tag predicate; ``value=None`` matches any value of ``key``."""

    key: str
    value: Optional[str] = None

    @classmethod
    def parse(cls, spec: str) -> "TagRule":
        if "=" not in spec:
            return cls(key=spec)
        key, value = spec.split("=", 1)
        return cls(key=key, value=value)

    def matches(self, tags: Mapping[str, str]) -> bool:
        if self.key not in tags:
            return False
        return self.value is None or tags[self.key] == self.value


@dataclass(frozen=True)
class CategoryDefinition:
    key: str
    label: str
    singular: str
    rules: Tuple[TagRule, ...]
    color: str
    icon: str

    def matching_rule(self, tags: Mapping[str, str]) -> Optional[TagRule]:
        """Rules are evaluated in order; the first satisfied one wins."""
        for rule in self.rules:
            if rule.matches(tags):
                return rule
        return None

    def matches(self, tags: Mapping[str, str]) -> bool:
        return self.matching_rule(tags) is not None


def _rules(*specs: str) -> Tuple[TagRule, ...]:
    return tuple(TagRule.parse(spec) for spec in specs)


# Ordered: evaluation and search-result order both follow this list.
CATEGORY_DEFINITIONS: List[CategoryDefinition] = [
    CategoryDefinition(
        key="hotels",
        label="Hotels",
        singular="Hotel",
        rules=_rules(
            "tourism=hotel", "tourism=guest_house", "tourism=hostel", "tourism=motel"
        ),
        color="#8e24aa",
        icon="\U0001F3E8",
    ),
    CategoryDefinition(
        key="restaurants",
        label="Restaurants",
        singular="Restaurant",
        rules=_rules("amenity=restaurant", "amenity=cafe", "amenity=fast_food"),
        color="#e65100",
        icon="\U0001F37D",
    ),
    CategoryDefinition(
        key="banks",
        label="Banks",
        singular="Bank",
        rules=_rules("amenity=bank", "amenity=atm", "amenity=money_transfer"),
        color="#1565c0",
        icon="\U0001F3E6",
    ),
    CategoryDefinition(
        key="malls",
        label="Malls",
        singular="Mall",
        rules=_rules(
            "shop=mall", "shop=department_store", "shop=supermarket", "building=retail"
        ),
        color="#c62828",
        icon="\U0001F3EC",
    ),
]

CATEGORIES: Dict[str, CategoryDefinition] = {
    definition.key: definition for definition in CATEGORY_DEFINITIONS
}

CATEGORY_KEYS: List[str] = [definition.key for definition in CATEGORY_DEFINITIONS]


def get_category(key: str) -> CategoryDefinition:
    """Get a category definition, raising UnknownCategory for foreign keys."""
    from streetmap.services.geodata.errors import UnknownCategory

    try:
        return CATEGORIES[key]
    except KeyError:
        raise UnknownCategory(key) from None


def is_valid_category(key: str) -> bool:
    return key in CATEGORIES


# Name tags in resolution priority: local name, English, Somali.
NAME_TAG_PRIORITY: List[str] = ["name", "name:en", "name:so"]

# Secondary-language name shown beside the primary one.
ALTERNATE_NAME_TAG_PRIORITY: List[str] = ["name:so", "name:en"]


def resolve_name(
    tags: Mapping[str, str], priority: List[str] = NAME_TAG_PRIORITY
) -> Optional[str]:
    """Return the first non-empty name tag in priority order."""
    for key in priority:
        value = tags.get(key)
        if value and value.strip():
            return value.strip()
    return None
