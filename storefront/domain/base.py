"""Base classes for catalog domain objects.

Attribute values, option pairs and price bounds are value objects;
persisted variants are entities identified by their ID.
"""

from abc import ABC
from dataclasses import dataclass


# ============================================================================
# Value Object Base
# ============================================================================


@dataclass(frozen=True)
class ValueObject(ABC):
    """Immutable catalog value compared field by field.

    Subclasses are frozen dataclasses, so they can be used as dict keys
    (e.g., attributes keyed to their selected values).

    Example:
        @dataclass(frozen=True)
        class PriceBounds(ValueObject):
            min: int
            max: int
    """


# ============================================================================
# Entity Base
# ============================================================================


@dataclass
class Entity(ABC):
    """Catalog record with a stable ID.

    Subclasses declare ``@dataclass(eq=False)`` to keep ID-based equality.

    Attributes:
        id: Record ID.
    """

    id: str

    def __eq__(self, other: object) -> bool:
        """Compare by ID within the same type."""
        if not isinstance(other, self.__class__):
            return False
        return self.id == other.id

    def __hash__(self) -> int:
        """Hash by ID."""
        return hash(self.id)
