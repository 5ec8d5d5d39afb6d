"""Minion and anomaly factories backed by a card catalog.

These build simulator inputs from printed card data only. A full simulator
ships its own factories with per-card behavior; these are what the bundled
adapters use, and what tests use to exercise the translator end to end.
"""

from bgsim.core.errors import UnknownAnomalyError, UnknownCardError
from bgsim.models.catalog_models import ANOMALY_TYPE
from bgsim.models.simulator_models import Anomaly, Minion
from bgsim.services.interfaces import AnomalyFactory, CardCatalog, MinionFactory

# Foe Reaper 4000 and Cave Hydra
DEFAULT_CLEAVE_CARD_IDS = frozenset({"GVG_113", "LOOT_078"})

# WINDFURY tag value marking mega-windfury
MEGA_WINDFURY_VALUE = 3


class CatalogMinionFactory(MinionFactory):
    """Builds minions from printed stats and keyword tags.

    Printed stats do not depend on the owning side, so ``is_player`` has no
    effect here.
    """

    def __init__(
        self,
        catalog: CardCatalog,
        cleave_card_ids: frozenset[str] = DEFAULT_CLEAVE_CARD_IDS,
        card_ids_without_premium: frozenset[str] = frozenset(),
    ):
        self.catalog = catalog
        self.cleave_card_ids = cleave_card_ids
        self.card_ids_without_premium = card_ids_without_premium

    def create_from_card_id(self, card_id: str, is_player: bool) -> Minion:
        card = self.catalog.get_card(card_id)
        if card is None or not card.is_minion:
            raise UnknownCardError(card_id)

        windfury = card.tag("WINDFURY")
        return Minion(
            card_id=card.id,
            base_attack=card.attack,
            max_attack=card.attack,
            base_health=card.health,
            max_health=card.health,
            vanilla_attack=card.attack,
            vanilla_health=card.health,
            tier=card.tech_level,
            taunt=card.tag("TAUNT") > 0,
            div=1 if card.tag("DIVINE_SHIELD") > 0 else 0,
            reborn=card.tag("REBORN") > 0,
            poisonous=card.tag("POISONOUS") > 0,
            venomous=card.tag("VENOMOUS") > 0,
            windfury=0 < windfury < MEGA_WINDFURY_VALUE,
            mega_windfury=windfury >= MEGA_WINDFURY_VALUE,
            stealth=card.tag("STEALTH") > 0,
        )


class CatalogAnomalyFactory(AnomalyFactory):
    """Resolves anomalies to catalog cards of the anomaly type."""

    def __init__(self, catalog: CardCatalog):
        self.catalog = catalog

    def create(self, card_id: str) -> Anomaly:
        card = self.catalog.get_card(card_id)
        if card is None or card.card_type != ANOMALY_TYPE:
            raise UnknownAnomalyError(card_id)
        return Anomaly(card_id=card.id, name=card.display_name)
