"""Card catalog caching layer.

This module builds the ``/cards`` listing: every Battlegrounds minion a
caller might place on a board, as ``{id, name}`` pairs sorted by name. The
listing is expensive to compute (it scans the full card database), so the
serialized JSON is kept until the catalog reports a change.

Key Features:
- Lock-guarded cache slot; readers never see a half-written value
- "Not ready" answers are never cached, so the first call after the
  initial catalog load computes the real listing
- Invalidation hooks registered on the catalog's change notifications
- Hit/miss metrics tracking

Usage:
    cache = CardCatalogCache(catalog, live_game)
    cache.register_hooks()
    body = cache.get_json()
"""

import threading
from dataclasses import dataclass
from typing import Any

from bgsim.core.logging_config import get_logger
from bgsim.models.catalog_models import (
    BACON_BUDDY,
    BATTLEGROUNDS_SET,
    IS_BACON_POOL_MINION,
    TECH_LEVEL,
    CatalogCard,
)
from bgsim.models.simulator_models import Race
from bgsim.models.snapshot_models import CardEntry, CardListing
from bgsim.services.interfaces import CardCatalog, LiveGame

logger = get_logger(__name__)

BATTLEGROUNDS_ID_PREFIXES = ("bgs_", "bg_", "tb_bacon")
BATTLEGROUNDS_ONLY_TAGS = (TECH_LEVEL, IS_BACON_POOL_MINION, BACON_BUDDY)


# =============================================================================
# Cache Metrics
# =============================================================================


@dataclass
class CacheMetrics:
    """Metrics for cache performance tracking.

    Attributes:
        hits: Calls answered from the cached listing.
        misses: Calls that computed the listing (or found the catalog not ready).
        invalidations: Number of times the cached listing was cleared.
    """

    hits: int = 0
    misses: int = 0
    invalidations: int = 0

    @property
    def total_requests(self) -> int:
        """Total number of cache requests."""
        return self.hits + self.misses

    def to_dict(self) -> dict[str, Any]:
        return {
            "hits": self.hits,
            "misses": self.misses,
            "invalidations": self.invalidations,
            "total_requests": self.total_requests,
        }


# =============================================================================
# Listing
# =============================================================================


def is_battlegrounds_minion(card: CatalogCard) -> bool:
    """Heuristic for Battlegrounds minions outside the current pool.

    Catches tokens, buddies and rotated-out minions: Battlegrounds id
    prefixes, the Battlegrounds card set, or any Battlegrounds-only tag.
    """
    if not card.is_minion:
        return False

    if (card.id or "").lower().startswith(BATTLEGROUNDS_ID_PREFIXES):
        return True

    if card.card_set == BATTLEGROUNDS_SET:
        return True

    return any(card.tag(tag) > 0 for tag in BATTLEGROUNDS_ONLY_TAGS)


def build_card_listing(catalog: CardCatalog, is_duos: bool = False) -> CardListing:
    """Compute the listing from a loaded catalog.

    Pool cards come first so they win over the heuristic scan for the same
    id; the merged list is sorted by display name.
    """
    races = catalog.battlegrounds_races()
    if not races:
        races = {race for race in Race if race not in (Race.INVALID, Race.ALL)}

    pool_cards = [card for card in catalog.get_cards_by_races(races, is_duos) if card.is_minion]
    extra_cards = [card for card in catalog.all_cards() if is_battlegrounds_minion(card)]

    seen: set[str] = set()
    entries = []
    for card in pool_cards + extra_cards:
        if card.id in seen:
            continue
        seen.add(card.id)
        entries.append(CardEntry(id=card.id, name=card.display_name))

    entries.sort(key=lambda entry: (entry.name.casefold(), entry.name, entry.id))
    return CardListing(ready=True, cards=entries)


# =============================================================================
# Card Catalog Cache
# =============================================================================


class CardCatalogCache:
    """Memoized JSON listing of Battlegrounds minions.

    Thread Safety:
        A single lock guards both the read-check and the write of the
        cached string, and the computation itself. An invalidation that
        arrives mid-computation waits for it and then clears the result,
        so the next reader recomputes.
    """

    def __init__(self, catalog: CardCatalog, live_game: LiveGame | None = None):
        """Initialize the cache.

        Args:
            catalog: Card database to project.
            live_game: Live match reader, used for the Duos pool flag.
        """
        self.catalog = catalog
        self.live_game = live_game
        self._lock = threading.Lock()
        self._cached_json: str | None = None
        self._metrics = CacheMetrics()
        self._hooks_registered = False

    def register_hooks(self) -> None:
        """Subscribe to the catalog's change and initial-load notifications."""
        with self._lock:
            if self._hooks_registered:
                return
            self._hooks_registered = True

        self.catalog.subscribe(
            on_cards_changed=self.invalidate,
            on_initial_load=self.invalidate,
        )

    def get_json(self) -> str:
        """Get the serialized ``{ready, cards}`` listing."""
        with self._lock:
            if self._cached_json is not None:
                self._metrics.hits += 1
                return self._cached_json

            self._metrics.misses += 1
            if not self.catalog.is_initial_load_complete():
                return CardListing(ready=False).model_dump_json()

            is_duos = self.live_game.is_duos_match() if self.live_game else False
            listing = build_card_listing(self.catalog, is_duos)
            self._cached_json = listing.model_dump_json()
            logger.debug(
                "Card listing computed",
                extra={"extra_data": {"cards": len(listing.cards), **self._metrics.to_dict()}},
            )
            return self._cached_json

    def invalidate(self) -> None:
        """Drop the cached listing."""
        with self._lock:
            if self._cached_json is not None:
                self._metrics.invalidations += 1
            self._cached_json = None

    def get_metrics(self) -> CacheMetrics:
        return self._metrics
