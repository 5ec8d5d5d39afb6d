"""Interfaces of the collaborators the service depends on.

The combat simulator, the live game reader and the card database live
outside this package. Implementations are plugged in through these
abstract base classes; the bundled adapters in ``card_catalog``,
``live_game`` and ``simulator`` cover running without a game client.
"""

from abc import ABC, abstractmethod
from collections.abc import Callable, Iterable

from bgsim.models.catalog_models import CatalogCard
from bgsim.models.simulator_models import Anomaly, Minion, Race, SimulatorInput
from bgsim.models.snapshot_models import SimulationOptions, SimulationResult

CatalogListener = Callable[[], None]


class MinionFactory(ABC):
    """Builds simulator minions from card ids."""

    # Card ids whose attacks also hit adjacent minions
    cleave_card_ids: frozenset[str] = frozenset()
    # Card ids with no premium implementation; golden copies get doubled vanilla stats
    card_ids_without_premium: frozenset[str] = frozenset()

    @abstractmethod
    def create_from_card_id(self, card_id: str, is_player: bool) -> Minion:
        """Create a minion with the card's default stats and keywords.

        Args:
            card_id: Card id of the minion.
            is_player: True for the player's side, False for the opponent's.

        Raises:
            UnknownCardError: If the card id cannot be built.
        """


class AnomalyFactory(ABC):
    """Resolves anomaly card ids."""

    @abstractmethod
    def create(self, card_id: str) -> Anomaly:
        """Resolve an anomaly.

        Raises:
            UnknownAnomalyError: If the id is not a known anomaly.
        """


class CombatSimulator(ABC):
    """Runs randomized battle resolutions for a simulator input.

    Implementations may keep shared working state; callers serialize access
    through the simulation gate.
    """

    minion_factory: MinionFactory
    anomaly_factory: AnomalyFactory

    @abstractmethod
    def simulate(
        self, sim_input: SimulatorInput, options: SimulationOptions
    ) -> SimulationResult | None:
        """Simulate a battle; None when the run produced no result."""


class LiveGame(ABC):
    """Read access to the match currently running in the game client."""

    @abstractmethod
    def is_battlegrounds_match(self) -> bool:
        """Whether a Battlegrounds match is in progress."""

    @abstractmethod
    def is_duos_match(self) -> bool:
        """Whether the current match is Battlegrounds Duos."""

    @abstractmethod
    def available_races(self) -> set[Race]:
        """Races in the current lobby; empty when unknown."""

    @abstractmethod
    def simulate_current(self, options: SimulationOptions) -> SimulationResult | None:
        """Simulate the combat of the current match state."""


class CardCatalog(ABC):
    """Card database with load and change notifications."""

    @abstractmethod
    def is_initial_load_complete(self) -> bool:
        """Whether the first card load has finished."""

    @abstractmethod
    def battlegrounds_races(self) -> set[Race]:
        """Races present in the Battlegrounds minion pool."""

    @abstractmethod
    def get_cards_by_races(self, races: Iterable[Race], is_duos: bool) -> list[CatalogCard]:
        """Pool cards belonging to any of ``races`` (plus neutral ones)."""

    @abstractmethod
    def all_cards(self) -> list[CatalogCard]:
        """Every card definition."""

    @abstractmethod
    def get_card(self, card_id: str) -> CatalogCard | None:
        """Look up one card by id."""

    @abstractmethod
    def subscribe(
        self,
        on_cards_changed: CatalogListener,
        on_initial_load: CatalogListener,
    ) -> None:
        """Register change and initial-load listeners."""
