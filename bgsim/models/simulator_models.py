"""Input structures understood by the combat simulator.

These are the strict, fully populated counterparts of the wire snapshot
models. The snapshot translator builds them; simulator implementations
consume them. Field names follow the simulator's vocabulary (``div`` is a
divine shield count, ``vanilla_*`` the card's printed stats).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum


class Race(IntEnum):
    """Minion races known to the card catalog.

    ``INVALID`` is the sentinel for "no race" and is never a valid pool
    restriction. ``ALL`` marks amalgam-style minions that count as every race.
    """

    INVALID = 0
    UNDEAD = 11
    MURLOC = 14
    DEMON = 15
    MECHANICAL = 17
    ELEMENTAL = 18
    BEAST = 20
    TOTEM = 21
    PIRATE = 23
    DRAGON = 24
    BLANK = 25
    ALL = 26
    EGG = 38
    QUILBOAR = 43
    NAGA = 92

    @classmethod
    def parse(cls, value: str | int) -> Race | None:
        """Parse a race name or numeric value, ignoring case.

        Returns:
            The matching Race, or None if the value is not recognized.
        """
        if isinstance(value, int):
            try:
                return cls(value)
            except ValueError:
                return None

        text = str(value).strip()
        if not text:
            return None
        if text.lstrip("-").isdigit():
            return cls.parse(int(text))
        return cls.__members__.get(text.upper())


@dataclass
class Minion:
    """One minion as the simulator sees it."""

    card_id: str
    golden: bool = False
    base_attack: int = 0
    max_attack: int = 0
    base_health: int = 0
    max_health: int = 0
    vanilla_attack: int = 0
    vanilla_health: int = 0
    tier: int = 0
    taunt: bool = False
    div: int = 0
    reborn: bool = False
    poisonous: bool = False
    venomous: bool = False
    windfury: bool = False
    mega_windfury: bool = False
    stealth: bool = False
    cleave: bool = False
    script_data_num1: int = 0
    script_data_num2: int = 0
    script_data_num3: int = 0
    # 1-based board position, numbered independently per side
    game_id: int = 0


@dataclass(frozen=True)
class Anomaly:
    """A board-modifying anomaly resolved from its card id."""

    card_id: str
    name: str = ""


@dataclass
class PlayerSide:
    """One combatant: hero pool plus the ordered board."""

    health: int = 40
    damage_taken: int = 0
    tier: int = 0
    side: list[Minion] = field(default_factory=list)


@dataclass
class SimulatorInput:
    """Complete input for one simulation run."""

    player: PlayerSide = field(default_factory=PlayerSide)
    opponent: PlayerSide = field(default_factory=PlayerSide)
    available_races: list[Race] = field(default_factory=list)
    # None leaves the simulator's own damage cap in effect
    damage_cap: int | None = None
    anomaly: Anomaly | None = None
