"""Domain exceptions.

All domain-level errors raised by the catalog core. Validation errors that
make an operation meaningless abort it; per-item and advisory errors are
collected or logged by the caller instead of propagating.
"""

from typing import Any


class DomainError(Exception):
    """Base class for all domain exceptions.

    All domain errors should inherit from this class to allow
    catching domain-specific errors at the application layer.
    """

    error_code = "DOMAIN_ERROR"

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        """Initialize domain error.

        Args:
            message: Human-readable error message.
            details: Optional dictionary with additional error context.
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}


# ============================================================================
# State Machine Errors
# ============================================================================


class InvalidStateTransitionError(DomainError):
    """Raised when an invalid state transition is attempted."""

    error_code = "INVALID_STATE_TRANSITION"

    def __init__(
        self,
        entity_type: str,
        current_state: str,
        target_state: str,
        allowed_transitions: list[str] | None = None,
    ) -> None:
        """Initialize invalid state transition error.

        Args:
            entity_type: Type of the state holder (e.g., "FilterState").
            current_state: Current state.
            target_state: Attempted target state.
            allowed_transitions: List of allowed target states from current state.
        """
        allowed = allowed_transitions or []
        message = (
            f"Cannot transition {entity_type} "
            f"from '{current_state}' to '{target_state}'. "
            f"Allowed transitions: {allowed}"
        )
        super().__init__(
            message,
            details={
                "entity_type": entity_type,
                "current_state": current_state,
                "target_state": target_state,
                "allowed_transitions": allowed,
            },
        )


# ============================================================================
# Filter Errors
# ============================================================================


class FilterError(DomainError):
    """Base class for filter-related errors."""

    pass


class InvalidPriceRangeError(FilterError):
    """Raised when a price range has its lower bound above its upper bound."""

    error_code = "INVALID_PRICE_RANGE"

    def __init__(self, minimum: int, maximum: int) -> None:
        """Initialize invalid price range error.

        Args:
            minimum: Requested lower bound.
            maximum: Requested upper bound.
        """
        super().__init__(
            f"Invalid price range [{minimum}, {maximum}]: minimum exceeds maximum",
            details={"min": minimum, "max": maximum},
        )


class UnknownDimensionError(FilterError):
    """A filter referenced an attribute slug that is not part of the scope.

    Facet computation recovers from this by ignoring the filter key.
    """

    error_code = "UNKNOWN_DIMENSION"

    def __init__(self, attribute_slug: str, category_slug: str) -> None:
        """Initialize unknown dimension error.

        Args:
            attribute_slug: Slug referenced by the filter.
            category_slug: Scope the filter was applied to.
        """
        super().__init__(
            f"Attribute '{attribute_slug}' is not filterable in '{category_slug}'",
            details={"attribute_slug": attribute_slug, "category_slug": category_slug},
        )


class InvalidScopeError(FilterError):
    """The requested category does not exist.

    Facet computation recovers from this by returning empty facets.
    """

    error_code = "INVALID_SCOPE"

    def __init__(self, category_slug: str) -> None:
        """Initialize invalid scope error.

        Args:
            category_slug: Unknown category slug.
        """
        super().__init__(
            f"Category '{category_slug}' not found",
            details={"category_slug": category_slug},
        )


# ============================================================================
# Variant Errors
# ============================================================================


class VariantError(DomainError):
    """Base class for variant-related errors."""

    pass


class EmptySelectionError(VariantError):
    """Raised when a generation request has an attribute with no chosen values."""

    error_code = "EMPTY_SELECTION"

    def __init__(self, attribute_slugs: list[str]) -> None:
        """Initialize empty selection error.

        Args:
            attribute_slugs: Attributes that contributed zero values. Empty
                when the request selected no attributes at all.
        """
        if attribute_slugs:
            message = f"No values selected for attributes: {', '.join(attribute_slugs)}"
        else:
            message = "No attributes selected for variant generation"
        super().__init__(message, details={"attribute_slugs": attribute_slugs})


class UnknownOptionError(VariantError):
    """Raised when a selection references an attribute or value the product lacks."""

    error_code = "UNKNOWN_OPTION"

    def __init__(self, attribute_slug: str, value: str | None = None) -> None:
        """Initialize unknown option error.

        Args:
            attribute_slug: Attribute referenced by the selection.
            value: Value id or value that could not be resolved, if any.
        """
        if value is None:
            message = f"Unknown attribute '{attribute_slug}'"
        else:
            message = f"Unknown value '{value}' for attribute '{attribute_slug}'"
        super().__init__(
            message,
            details={"attribute_slug": attribute_slug, "value": value},
        )


class ProductNotFoundError(VariantError):
    """Raised when a variant operation targets a product that does not exist."""

    error_code = "PRODUCT_NOT_FOUND"

    def __init__(self, product_id: str) -> None:
        """Initialize product not found error.

        Args:
            product_id: Missing product ID.
        """
        super().__init__(
            f"Product {product_id} not found",
            details={"product_id": product_id},
        )


class SkuCollisionError(VariantError):
    """Raised when a variant SKU is already taken by another variant.

    Reported per combination during batch generation rather than
    aborting the batch.
    """

    error_code = "SKU_COLLISION"

    def __init__(self, sku: str, product_id: str | None = None) -> None:
        """Initialize SKU collision error.

        Args:
            sku: The conflicting SKU.
            product_id: Product the variant was being created for.
        """
        super().__init__(
            f"SKU '{sku}' is already in use",
            details={"sku": sku, "product_id": product_id},
        )
