"""Variant combination preview.

Pure functions: given attributes and chosen values, produce the Cartesian
product in canonical order with synthesized names and SKUs. Nothing here
touches storage, so the same input always yields the same output.

Canonical order:
    attributes  by priority class (size, color, material, style, other),
                ties keep the order they were selected in
    values      by the attribute's declared value order

Naming and SKUs:
    name        "M / Red"
    sku         "<ROOT>-M-RED", root from the product SKU, or "VAR" plus a
                token of the product ID when the product has no SKU
"""

import hashlib
import itertools
import re
import unicodedata
from collections.abc import Iterable, Mapping

from storefront.domain.attributes import Attribute, AttributeValue, order_attributes
from storefront.domain.exceptions import EmptySelectionError, UnknownOptionError
from storefront.domain.variants import OptionPair, VariantCombination

NAME_SEPARATOR = " / "
DEFAULT_SKU_SEPARATOR = "-"
DEFAULT_SKU_ROOT = "VAR"

_NON_TOKEN = re.compile(r"[^A-Z0-9]+")


def sku_token(value: str) -> str:
    """Derive a stable SKU token from a display value.

    The value is NFKD-folded, uppercased and reduced to [A-Z0-9]. Values
    that fold to nothing (e.g., non-Latin scripts) get a short hash token.

    Args:
        value: Display value (e.g., "Navy Blue", "Größe 42").

    Returns:
        Token (e.g., "NAVYBLUE", "GROSSE42").
    """
    folded = unicodedata.normalize("NFKD", value)
    folded = "".join(c for c in folded if not unicodedata.combining(c))
    token = _NON_TOKEN.sub("", folded.upper())
    if token:
        return token
    digest = hashlib.md5(value.strip().encode("utf-8")).hexdigest()
    return f"X{digest[:5].upper()}"


def product_token(product_id: str) -> str:
    """Derive a short stable token from a product ID (e.g., "3F9A1C")."""
    return hashlib.md5(product_id.encode("utf-8")).hexdigest()[:6].upper()


def sku_root(
    product_sku: str | None,
    fallback: str = DEFAULT_SKU_ROOT,
    product_id: str | None = None,
) -> str:
    """Get the SKU root for a product.

    Args:
        product_sku: Product SKU, if any.
        fallback: Root used when the product has no usable SKU.
        product_id: Product ID appended to the fallback as a token, so
            SKU-less products do not share a root.

    Returns:
        Product SKU reduced to [A-Z0-9], or the fallback root.
    """
    if product_sku:
        root = _NON_TOKEN.sub("", product_sku.upper())
        if root:
            return root
    if product_id:
        return f"{fallback}{product_token(product_id)}"
    return fallback


def build_sku(
    root: str,
    values: Iterable[str],
    separator: str = DEFAULT_SKU_SEPARATOR,
) -> str:
    """Join a root and value tokens into a SKU."""
    return separator.join([root, *(sku_token(v) for v in values)])


def build_name(values: Iterable[str]) -> str:
    """Join values into a variant name (e.g., "M / Red")."""
    return NAME_SEPARATOR.join(values)


def resolve_values(attribute: Attribute, tokens: Iterable[str]) -> list[AttributeValue]:
    """Resolve selected value ids (or values) in declared order.

    Duplicates collapse into one value.

    Args:
        attribute: Attribute the values belong to.
        tokens: Selected value ids or display values.

    Returns:
        Resolved values ordered by the attribute's declared order.

    Raises:
        UnknownOptionError: If a token matches no value of the attribute.
    """
    resolved: dict[str, AttributeValue] = {}
    for token in tokens:
        value = attribute.resolve(token)
        if value is None:
            raise UnknownOptionError(attribute.slug, token)
        resolved[value.id] = value
    return [v for v in attribute.values if v.id in resolved]


def preview_combinations(
    selections: Mapping[Attribute, Iterable[str]],
    *,
    product_sku: str | None = None,
    product_id: str | None = None,
    separator: str = DEFAULT_SKU_SEPARATOR,
    fallback_root: str = DEFAULT_SKU_ROOT,
) -> list[VariantCombination]:
    """Preview every combination of the selected attribute values.

    Example:
        preview_combinations({size: ["S", "M"], color: ["Red"]})
        # -> "S / Red" (VAR-S-RED), "M / Red" (VAR-M-RED)

    Args:
        selections: Attribute -> selected value ids (or values), in selection order.
        product_sku: Product SKU used as SKU root.
        product_id: Product ID, tokenized into the root when there is no SKU.
        separator: SKU segment separator.
        fallback_root: SKU root when the product has no SKU.

    Returns:
        Combinations in canonical order.

    Raises:
        EmptySelectionError: If nothing is selected or an attribute has no values.
        UnknownOptionError: If a selected value does not belong to its attribute.
    """
    if not selections:
        raise EmptySelectionError([])

    resolved = {attribute: resolve_values(attribute, tokens) for attribute, tokens in selections.items()}
    empty = [attribute.slug for attribute, values in resolved.items() if not values]
    if empty:
        raise EmptySelectionError(empty)

    root = sku_root(product_sku, fallback_root, product_id)
    ordered = order_attributes(resolved.keys())

    combinations: list[VariantCombination] = []
    seen: set[tuple[str, ...]] = set()
    for product in itertools.product(*(resolved[a] for a in ordered)):
        options = tuple(
            OptionPair(
                attribute_slug=attribute.slug,
                value=value.value,
                attribute_name=attribute.name,
                value_id=value.id,
                color_hex=value.color_hex if attribute.is_color else None,
            )
            for attribute, value in zip(ordered, product)
        )
        values = tuple(o.value for o in options)
        if values in seen:
            continue
        seen.add(values)
        combinations.append(
            VariantCombination(
                options=options,
                name=build_name(values),
                sku=build_sku(root, values, separator),
            )
        )
    return combinations
