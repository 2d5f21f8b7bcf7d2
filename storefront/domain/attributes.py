"""Attribute model shared by facet aggregation and variant generation.

An attribute (e.g. "Size") owns an ordered set of values. Its priority class
drives naming and SKU segment order for generated variants; its value kind
decides whether values carry a color swatch.

Classification is a pure function of the attribute name (and its declared
type, when one is given), never of the values currently selected.
"""

from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from enum import Enum, IntEnum
from typing import Any

from storefront.domain.base import ValueObject


class PriorityClass(IntEnum):
    """Attribute priority classes, lowest sorts first."""

    SIZE = 1
    COLOR = 2
    MATERIAL = 3
    STYLE = 4
    OTHER = 5


class ValueKind(str, Enum):
    """Declared value type of an attribute."""

    TEXT = "text"
    COLOR = "color"


# Keywords are matched as case-insensitive substrings of the attribute name.
# Checked in priority order, so "Shoe Size Color" classifies as SIZE.
_VOCABULARIES: tuple[tuple[PriorityClass, tuple[str, ...]], ...] = (
    (PriorityClass.SIZE, ("size", "размер")),
    (PriorityClass.COLOR, ("color", "colour", "цвет")),
    (PriorityClass.MATERIAL, ("material", "fabric", "материал", "ткань")),
    (PriorityClass.STYLE, ("style", "model", "type", "стиль", "модель", "тип")),
)


def classify(attribute_name: str) -> PriorityClass:
    """Classify an attribute by its name.

    Args:
        attribute_name: Display name of the attribute (e.g., "Size", "Цвет").

    Returns:
        Matching priority class, OTHER when no vocabulary matches.
    """
    name = attribute_name.strip().lower()
    for priority_class, keywords in _VOCABULARIES:
        if any(keyword in name for keyword in keywords):
            return priority_class
    return PriorityClass.OTHER


@dataclass(frozen=True)
class AttributeValue(ValueObject):
    """A single value of an attribute.

    Attributes:
        id: Value identifier.
        value: Display value, unique within the owning attribute.
        color_hex: Swatch color (#RRGGBB) for color attributes.
        sort_order: Declared position within the attribute.
    """

    id: str
    value: str
    color_hex: str | None = None
    sort_order: int = 0

    def __post_init__(self) -> None:
        """Validate value."""
        if not self.value or not self.value.strip():
            raise ValueError("Attribute value cannot be empty")

    @property
    def metadata(self) -> dict[str, Any]:
        """Get value metadata.

        Returns:
            Metadata dict, with "color_hex" only when a swatch is set.
        """
        if self.color_hex is None:
            return {}
        return {"color_hex": self.color_hex}


@dataclass(frozen=True)
class Attribute(ValueObject):
    """An attribute with its ordered values.

    When ``priority_class`` or ``value_kind`` are not given they are
    derived from the name once, at construction.

    Attributes:
        id: Attribute identifier.
        name: Display name.
        slug: URL-safe identifier, unique within an attribute set.
        values: Ordered values.
        priority_class: Naming/sorting class.
        value_kind: Declared value type.
    """

    id: str
    name: str
    slug: str
    values: tuple[AttributeValue, ...] = ()
    priority_class: PriorityClass | None = field(default=None)
    value_kind: ValueKind | None = field(default=None)

    def __post_init__(self) -> None:
        """Validate values and derive classification."""
        if not self.slug:
            raise ValueError("Attribute slug cannot be empty")

        values = tuple(sorted(self.values, key=lambda v: v.sort_order))
        seen: set[str] = set()
        for value in values:
            if value.value in seen:
                raise ValueError(
                    f"Duplicate value '{value.value}' in attribute '{self.slug}'"
                )
            seen.add(value.value)
        object.__setattr__(self, "values", values)

        if self.priority_class is None:
            object.__setattr__(self, "priority_class", classify(self.name))
        if self.value_kind is None:
            kind = ValueKind.COLOR if _is_color_name(self.name) else ValueKind.TEXT
            object.__setattr__(self, "value_kind", kind)

    @property
    def is_color(self) -> bool:
        """Check if values of this attribute carry color swatches."""
        return self.value_kind == ValueKind.COLOR

    @property
    def value_names(self) -> list[str]:
        """Get values in declared order."""
        return [v.value for v in self.values]

    def resolve(self, token: str) -> AttributeValue | None:
        """Find a value by its id or by its display value.

        Args:
            token: Value id or value.

        Returns:
            Matching value, None if the attribute has no such value.
        """
        for value in self.values:
            if value.id == token:
                return value
        for value in self.values:
            if value.value == token:
                return value
        return None

    def position(self, value: str) -> int | None:
        """Get declared position of a value, None if not declared."""
        for index, candidate in enumerate(self.values):
            if candidate.value == value:
                return index
        return None


def _is_color_name(name: str) -> bool:
    return classify(name) == PriorityClass.COLOR


def is_color_attribute(attribute: Attribute) -> bool:
    """Check whether an attribute is a color attribute.

    Depends only on the attribute's declared type and name.

    Args:
        attribute: Attribute to check.

    Returns:
        True if values should carry a color_hex swatch.
    """
    return attribute.value_kind == ValueKind.COLOR or _is_color_name(attribute.name)


def order_attributes(attributes: Iterable[Attribute]) -> list[Attribute]:
    """Sort attributes by priority class, keeping input order for ties."""
    return sorted(attributes, key=lambda a: int(a.priority_class or PriorityClass.OTHER))


def find_by_slug(attributes: Sequence[Attribute], slug: str) -> Attribute | None:
    """Find an attribute by slug."""
    for attribute in attributes:
        if attribute.slug == slug:
            return attribute
    return None
