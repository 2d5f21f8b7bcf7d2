"""Two-stage (draft/applied) filter state with debounced commit.

UI controls mutate the draft immediately. The draft is committed to the
applied stage either explicitly (apply) or after a quiet window with no
further mutation. Facets are recomputed only when the applied stage
changes, and results computed for an older applied revision are dropped.

Example usage:
    state = FilterState(debounce_seconds=0.8)
    feed = FacetFeed(aggregator, state, "clothing")

    state.toggle(Dimension.SIZES, "M")       # PENDING, window started
    state.toggle(Dimension.COLORS, "Red")    # window restarted
    await state.wait_applied()               # committed after 0.8s quiet
    feed.facets                              # facets for sizes={M}, colors={Red}
"""

import asyncio
from collections.abc import Callable
from dataclasses import dataclass, replace

import structlog

from storefront.catalog.facets import FacetAggregator, FacetResult
from storefront.domain.filters import Dimension, FilterSet
from storefront.domain.state_machines import FilterStatus, validate_filter_transition

logger = structlog.get_logger()

DEFAULT_DEBOUNCE_SECONDS = 0.8


@dataclass(frozen=True)
class AppliedSnapshot:
    """An applied FilterSet tagged with the revision it was committed at."""

    revision: int
    filters: FilterSet


AppliedListener = Callable[[AppliedSnapshot], None]


class FilterState:
    """Draft and applied filters of one listing view.

    Not thread-safe; all calls are expected on the event loop thread.
    """

    def __init__(
        self,
        debounce_seconds: float = DEFAULT_DEBOUNCE_SECONDS,
        initial: FilterSet | None = None,
    ) -> None:
        """Initialize state.

        Args:
            debounce_seconds: Quiet window before an automatic commit.
            initial: Filters applied at start.
        """
        if debounce_seconds < 0:
            raise ValueError(f"debounce_seconds cannot be negative: {debounce_seconds}")
        self.debounce_seconds = debounce_seconds
        self._draft = initial or FilterSet()
        self._applied = self._draft
        self._revision = 0
        self._status = FilterStatus.IDLE
        self._timer: asyncio.TimerHandle | None = None
        self._listeners: list[AppliedListener] = []
        self._idle = asyncio.Event()
        self._idle.set()

    @property
    def draft(self) -> FilterSet:
        """Get filters as currently edited."""
        return self._draft

    @property
    def applied(self) -> FilterSet:
        """Get filters facets are computed against."""
        return self._applied

    @property
    def revision(self) -> int:
        """Get number of applied changes so far."""
        return self._revision

    @property
    def status(self) -> FilterStatus:
        """Get lifecycle status."""
        return self._status

    @property
    def is_pending(self) -> bool:
        """Check if a commit is waiting for the quiet window."""
        return self._status.is_pending()

    @property
    def snapshot(self) -> AppliedSnapshot:
        """Get the current applied snapshot."""
        return AppliedSnapshot(revision=self._revision, filters=self._applied)

    def subscribe(self, listener: AppliedListener) -> Callable[[], None]:
        """Register a callback invoked after each applied change.

        Args:
            listener: Called with the new snapshot.

        Returns:
            Function that removes the listener.
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    # ========================================================================
    # Draft mutations
    # ========================================================================

    def update(self, filters: FilterSet) -> None:
        """Replace the draft and restart the quiet window."""
        self._draft = filters
        self._schedule()

    def toggle(self, dimension: str, value: str) -> None:
        """Add a value to or remove it from a multi-select dimension."""
        self.update(self._draft.toggled(dimension, value))

    def set_price_range(self, price_range: tuple[int, int] | None) -> None:
        """Set or clear the price range.

        Raises:
            InvalidPriceRangeError: If min exceeds max. The draft is unchanged.
        """
        self.update(replace(self._draft, price_range=price_range))

    def set_flag(self, dimension: str, enabled: bool) -> None:
        """Set the in-stock or on-sale flag.

        Raises:
            ValueError: If dimension is not a flag.
        """
        if dimension == Dimension.IN_STOCK:
            self.update(replace(self._draft, in_stock=enabled))
        elif dimension == Dimension.ON_SALE:
            self.update(replace(self._draft, on_sale=enabled))
        else:
            raise ValueError(f"Dimension '{dimension}' is not a flag")

    def remove(self, dimension: str, value: str | None = None) -> None:
        """Remove one value of a dimension, or the whole dimension.

        Args:
            dimension: Dimension name.
            value: Value to drop. None clears the dimension.
        """
        if value is None:
            self.update(self._draft.cleared(dimension))
            return
        current = self._draft.selected(dimension)
        if value in current:
            self.update(self._draft.with_selected(dimension, current - {value}))

    def clear(self) -> None:
        """Drop every draft constraint and commit immediately."""
        self._draft = FilterSet()
        self.apply()

    # ========================================================================
    # Commit
    # ========================================================================

    def apply(self) -> AppliedSnapshot:
        """Commit the draft now, cancelling any pending window.

        The revision only advances when the applied filters actually change.

        Returns:
            Applied snapshot after the commit.
        """
        self._cancel_timer()
        self._transition(FilterStatus.COMMITTING)
        changed = self._draft != self._applied
        if changed:
            self._applied = self._draft
            self._revision += 1
        self._transition(FilterStatus.IDLE)
        self._idle.set()

        snapshot = self.snapshot
        if changed:
            logger.debug(
                "Filters applied",
                revision=snapshot.revision,
                filters=snapshot.filters.to_dict(),
            )
            for listener in list(self._listeners):
                listener(snapshot)
        return snapshot

    async def wait_applied(self) -> AppliedSnapshot:
        """Wait until no commit is pending.

        Returns:
            Applied snapshot once idle.
        """
        await self._idle.wait()
        return self.snapshot

    def _schedule(self) -> None:
        self._cancel_timer()
        self._transition(FilterStatus.PENDING)
        self._idle.clear()
        loop = asyncio.get_running_loop()
        self._timer = loop.call_later(self.debounce_seconds, self._on_quiet)

    def _on_quiet(self) -> None:
        self._timer = None
        self.apply()

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _transition(self, target: FilterStatus) -> None:
        validate_filter_transition(self._status, target)
        self._status = target


# ============================================================================
# Facet Feed
# ============================================================================


class FacetFeed:
    """Keeps facets in sync with a FilterState's applied filters.

    Every applied change starts a recomputation tagged with its revision.
    A result arriving for a revision older than the latest applied one is
    discarded, so the last applied filters always win.
    """

    def __init__(
        self,
        aggregator: FacetAggregator,
        state: FilterState,
        category_slug: str,
    ) -> None:
        """Initialize feed and subscribe to applied changes.

        Args:
            aggregator: Facet aggregator.
            state: Filter state to follow.
            category_slug: Scope of the listing.
        """
        self.aggregator = aggregator
        self.state = state
        self.category_slug = category_slug
        self.facets: list[FacetResult] = []
        self.revision: int | None = None
        self.discarded = 0
        self._tasks: set[asyncio.Task[None]] = set()
        self._unsubscribe = state.subscribe(self._on_applied)

    async def refresh(self) -> list[FacetResult]:
        """Compute facets for the current applied snapshot now."""
        await self._compute(self.state.snapshot)
        return self.facets

    async def drain(self) -> None:
        """Wait for every in-flight recomputation.

        Recomputations cancelled by close() are skipped.

        Raises:
            Exception: The first error a recomputation failed with.
        """
        while self._tasks:
            outcomes = await asyncio.gather(*list(self._tasks), return_exceptions=True)
            for outcome in outcomes:
                if isinstance(outcome, Exception):
                    raise outcome

    def close(self) -> None:
        """Stop following the state and cancel in-flight recomputations."""
        self._unsubscribe()
        for task in list(self._tasks):
            task.cancel()

    def _on_applied(self, snapshot: AppliedSnapshot) -> None:
        task = asyncio.get_running_loop().create_task(self._compute(snapshot))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _compute(self, snapshot: AppliedSnapshot) -> None:
        facets = await self.aggregator.compute_facets(self.category_slug, snapshot.filters)
        if snapshot.revision != self.state.revision:
            self.discarded += 1
            logger.debug(
                "Discarding stale facets",
                category_slug=self.category_slug,
                computed_for=snapshot.revision,
                current=self.state.revision,
            )
            return
        self.facets = facets
        self.revision = snapshot.revision
