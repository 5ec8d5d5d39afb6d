"""JSON-file backed card catalog.

Stands in for the game client's card database when the service runs on its
own. The file holds a list of HearthstoneJSON-style card dictionaries (or
an object with a ``cards`` list); see ``CatalogCard.from_dict`` for the
recognized keys.
"""

import json
import threading
from collections.abc import Iterable
from pathlib import Path

from bgsim.core.logging_config import get_logger
from bgsim.models.catalog_models import IS_BACON_DUOS_EXCLUSIVE, IS_BACON_POOL_MINION, CatalogCard
from bgsim.models.simulator_models import Race
from bgsim.services.interfaces import CardCatalog, CatalogListener

logger = get_logger(__name__)


class JsonCardCatalog(CardCatalog):
    """Card catalog loaded from a JSON file.

    The catalog reports "not loaded" until ``load()`` (or ``replace_cards()``)
    completes. The first completed load notifies initial-load listeners;
    later ones notify change listeners.
    """

    def __init__(self, path: str | Path | None = None):
        """Initialize an empty, not yet loaded catalog.

        Args:
            path: Card definitions file. None loads an empty catalog.
        """
        self.path = Path(path) if path else None
        self._lock = threading.Lock()
        self._cards: dict[str, CatalogCard] = {}
        self._loaded = False
        self._changed_listeners: list[CatalogListener] = []
        self._initial_listeners: list[CatalogListener] = []

    def load(self) -> int:
        """Read the card file and publish its cards.

        Returns:
            Number of cards loaded.

        Raises:
            OSError: If the file cannot be read.
            ValueError: If the file is not valid card JSON.
        """
        cards: list[CatalogCard] = []
        if self.path is not None:
            with self.path.open(encoding="utf-8") as f:
                data = json.load(f)
            if isinstance(data, dict):
                data = data.get("cards", [])
            if not isinstance(data, list):
                raise ValueError(f"Card file {self.path} must hold a list of cards")
            for index, entry in enumerate(data):
                if not isinstance(entry, dict):
                    raise ValueError(
                        f"Card file {self.path} entry {index} is {type(entry).__name__}, not an object"
                    )
                if entry.get("id"):
                    cards.append(CatalogCard.from_dict(entry))

        self.replace_cards(cards)
        logger.info(
            "Card catalog loaded",
            extra={"extra_data": {"path": str(self.path) if self.path else None, "cards": len(cards)}},
        )
        return len(cards)

    def replace_cards(self, cards: Iterable[CatalogCard]) -> None:
        """Swap in a new card set and notify listeners."""
        with self._lock:
            self._cards = {card.id: card for card in cards}
            first_load = not self._loaded
            self._loaded = True
            listeners = list(self._initial_listeners if first_load else self._changed_listeners)

        for listener in listeners:
            listener()

    # -------------------------------------------------------------------------
    # CardCatalog
    # -------------------------------------------------------------------------

    def is_initial_load_complete(self) -> bool:
        return self._loaded

    def battlegrounds_races(self) -> set[Race]:
        races: set[Race] = set()
        for card in self._pool_cards():
            races.update(card.races)
        races.discard(Race.INVALID)
        races.discard(Race.ALL)
        return races

    def get_cards_by_races(self, races: Iterable[Race], is_duos: bool) -> list[CatalogCard]:
        wanted = set(races)
        cards = []
        for card in self._pool_cards():
            if card.tag(IS_BACON_DUOS_EXCLUSIVE) > 0 and not is_duos:
                continue
            # Neutral minions and amalgams belong to every lobby
            if not card.races or Race.ALL in card.races or wanted.intersection(card.races):
                cards.append(card)
        return cards

    def all_cards(self) -> list[CatalogCard]:
        with self._lock:
            return list(self._cards.values())

    def get_card(self, card_id: str) -> CatalogCard | None:
        with self._lock:
            return self._cards.get(card_id)

    def subscribe(
        self,
        on_cards_changed: CatalogListener,
        on_initial_load: CatalogListener,
    ) -> None:
        with self._lock:
            self._changed_listeners.append(on_cards_changed)
            self._initial_listeners.append(on_initial_load)

    def _pool_cards(self) -> list[CatalogCard]:
        return [
            card for card in self.all_cards()
            if card.is_minion and card.tag(IS_BACON_POOL_MINION) > 0
        ]
