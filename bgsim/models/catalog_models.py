"""Card definitions as exposed by a card catalog."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from bgsim.models.simulator_models import Race

MINION_TYPE = "MINION"
ANOMALY_TYPE = "BATTLEGROUND_ANOMALY"
BATTLEGROUNDS_SET = "BATTLEGROUNDS"

# Battlegrounds-only game tags
TECH_LEVEL = "TECH_LEVEL"
IS_BACON_POOL_MINION = "IS_BACON_POOL_MINION"
BACON_BUDDY = "BACON_BUDDY"
IS_BACON_DUOS_EXCLUSIVE = "IS_BACON_DUOS_EXCLUSIVE"


@dataclass(frozen=True)
class CatalogCard:
    """A single card definition.

    Attributes:
        id: Card id (e.g. "BGS_004").
        name: Internal (English) name.
        localized_name: Name in the client's locale, if known.
        card_type: Card type such as "MINION".
        card_set: Card set such as "BATTLEGROUNDS".
        races: Minion races printed on the card.
        attack: Printed attack.
        health: Printed health.
        tags: Game tags with integer values.
    """

    id: str
    name: str | None = None
    localized_name: str | None = None
    card_type: str = ""
    card_set: str = ""
    races: tuple[Race, ...] = ()
    attack: int = 0
    health: int = 0
    tags: dict[str, int] = field(default_factory=dict, hash=False, compare=False)

    @property
    def display_name(self) -> str:
        return self.localized_name or self.name or self.id

    @property
    def is_minion(self) -> bool:
        return self.card_type == MINION_TYPE

    @property
    def tech_level(self) -> int:
        return self.tag(TECH_LEVEL)

    def tag(self, name: str) -> int:
        """Get a game tag value, 0 when absent."""
        return self.tags.get(name, 0)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> CatalogCard:
        """Build a card from a HearthstoneJSON-style dictionary.

        Races may be given as a ``races`` list or a single ``race``; a
        ``techLevel`` key is folded into the TECH_LEVEL tag.
        """
        raw_races = data.get("races")
        if raw_races is None:
            raw_races = [data["race"]] if data.get("race") else []
        races = tuple(
            race for race in (Race.parse(r) for r in raw_races)
            if race is not None and race != Race.INVALID
        )

        tags = {str(k).upper(): int(v) for k, v in (data.get("tags") or {}).items()}
        if data.get("techLevel") is not None:
            tags[TECH_LEVEL] = int(data["techLevel"])
        if data.get("isBattlegroundsPoolMinion"):
            tags[IS_BACON_POOL_MINION] = 1

        return cls(
            id=str(data["id"]),
            name=data.get("name"),
            localized_name=data.get("localizedName"),
            card_type=str(data.get("type") or "").upper(),
            card_set=str(data.get("set") or "").upper(),
            races=races,
            attack=int(data.get("attack") or 0),
            health=int(data.get("health") or 0),
            tags=tags,
        )
