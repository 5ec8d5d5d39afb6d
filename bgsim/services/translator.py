"""Snapshot translation: wire battle snapshots to simulator inputs.

The translator is pure apart from the factories it is handed. It fills the
defaults a partially populated snapshot leaves out, resolves the minion pool
restriction, and maps keyword tags onto the simulator's flags.

Usage:
    sim_input = translate_snapshot(
        snapshot,
        minion_factory=simulator.minion_factory,
        anomaly_factory=simulator.anomaly_factory,
        live_races=live_game.available_races(),
    )
"""

from __future__ import annotations

from collections.abc import Iterable
from enum import Enum

from bgsim.core.errors import MissingSideError
from bgsim.core.logging_config import get_logger
from bgsim.models.simulator_models import Minion, PlayerSide, Race, SimulatorInput
from bgsim.models.snapshot_models import BattleSnapshot, MinionSnapshot, SideSnapshot
from bgsim.services.interfaces import AnomalyFactory, MinionFactory

logger = get_logger(__name__)

DEFAULT_HEALTH = 40
DEFAULT_ARMOR = 0
DEFAULT_TIER = 0
DEFAULT_DAMAGE_TAKEN = 0


# =============================================================================
# Keywords
# =============================================================================


class Keyword(str, Enum):
    """Keyword tags accepted on a minion snapshot."""

    TAUNT = "taunt"
    DIVINE_SHIELD = "divineshield"
    REBORN = "reborn"
    POISONOUS = "poisonous"
    VENOMOUS = "venomous"
    WINDFURY = "windfury"
    MEGA_WINDFURY = "megawindfury"
    STEALTH = "stealth"
    GOLDEN = "golden"

    @classmethod
    def parse_all(cls, tags: Iterable[str] | None) -> set[Keyword]:
        """Parse tag strings ignoring case; unrecognized tags are dropped."""
        keywords = set()
        for tag in tags or ():
            try:
                keywords.add(cls(str(tag).strip().lower()))
            except ValueError:
                continue
        return keywords


# Boolean minion attributes set from keyword presence
BOOLEAN_KEYWORD_FLAGS: dict[Keyword, str] = {
    Keyword.TAUNT: "taunt",
    Keyword.REBORN: "reborn",
    Keyword.POISONOUS: "poisonous",
    Keyword.VENOMOUS: "venomous",
    Keyword.WINDFURY: "windfury",
    Keyword.MEGA_WINDFURY: "mega_windfury",
    Keyword.STEALTH: "stealth",
}


# =============================================================================
# Race resolution
# =============================================================================


def resolve_available_races(
    snapshot: BattleSnapshot,
    live_races: Iterable[Race] | None = None,
) -> list[Race]:
    """Resolve the minion pool restriction for a snapshot.

    Precedence:
    1. Explicit ``available_races`` on the snapshot, when non-empty. Entries
       that do not parse, or parse to INVALID, are skipped.
    2. The races of the live match, when known.
    3. Every race except INVALID.
    """
    if snapshot.available_races:
        races = []
        for name in snapshot.available_races:
            race = Race.parse(name)
            if race is not None and race != Race.INVALID:
                races.append(race)
        return races

    live = sorted(set(live_races or ()))
    if live:
        return live

    return [race for race in Race if race != Race.INVALID]


# =============================================================================
# Translation
# =============================================================================


def translate_snapshot(
    snapshot: BattleSnapshot,
    minion_factory: MinionFactory,
    anomaly_factory: AnomalyFactory,
    live_races: Iterable[Race] | None = None,
) -> SimulatorInput:
    """Translate a battle snapshot into a simulator input.

    Args:
        snapshot: Parsed request body.
        minion_factory: Factory building minions from card ids.
        anomaly_factory: Factory resolving anomaly ids.
        live_races: Races of the live match, used when the snapshot has none.

    Returns:
        Fully populated SimulatorInput.

    Raises:
        MissingSideError: If the player or opponent side is absent.
        UnknownAnomalyError: If the anomaly id cannot be resolved.
        UnknownCardError: If a minion's card id cannot be built.
    """
    if snapshot.player is None:
        raise MissingSideError("player")
    if snapshot.opponent is None:
        raise MissingSideError("opponent")

    sim_input = SimulatorInput()
    sim_input.available_races = resolve_available_races(snapshot, live_races)

    if snapshot.damage_cap is not None:
        sim_input.damage_cap = snapshot.damage_cap

    anomaly_id = (snapshot.anomaly_card_id or "").strip()
    if anomaly_id:
        sim_input.anomaly = anomaly_factory.create(anomaly_id)

    sim_input.player = translate_side(snapshot.player, minion_factory, is_player=True)
    sim_input.opponent = translate_side(snapshot.opponent, minion_factory, is_player=False)

    logger.debug(
        "Translated snapshot",
        extra={
            "extra_data": {
                "player_minions": len(sim_input.player.side),
                "opponent_minions": len(sim_input.opponent.side),
                "races": [race.name for race in sim_input.available_races],
                "anomaly": anomaly_id or None,
            }
        },
    )
    return sim_input


def translate_side(
    side: SideSnapshot,
    minion_factory: MinionFactory,
    is_player: bool,
) -> PlayerSide:
    """Translate one side; armor is folded into the health pool."""
    health = side.health if side.health is not None else DEFAULT_HEALTH
    armor = side.armor if side.armor is not None else DEFAULT_ARMOR

    target = PlayerSide(
        health=health + armor,
        damage_taken=side.damage_taken if side.damage_taken is not None else DEFAULT_DAMAGE_TAKEN,
        tier=side.tier if side.tier is not None else DEFAULT_TIER,
    )

    # Blank entries still use up a position
    for position, snap in enumerate(side.minions or (), start=1):
        minion = translate_minion(snap, minion_factory, is_player)
        if minion is None:
            continue
        minion.game_id = position
        target.side.append(minion)

    return target


def translate_minion(
    snap: MinionSnapshot,
    minion_factory: MinionFactory,
    is_player: bool,
) -> Minion | None:
    """Build one minion, or None when the card id is blank."""
    card_id = (snap.card_id or "").strip()
    if not card_id:
        return None

    minion = minion_factory.create_from_card_id(card_id, is_player)
    keywords = Keyword.parse_all(snap.tags)

    if snap.golden is not None or Keyword.GOLDEN in keywords:
        minion.golden = bool(snap.golden) or Keyword.GOLDEN in keywords

    # Base and max start equal when overridden
    if snap.atk is not None:
        minion.base_attack = snap.atk
        minion.max_attack = snap.atk
    if snap.hp is not None:
        minion.base_health = snap.hp
        minion.max_health = snap.hp
    if snap.tier is not None:
        minion.tier = snap.tier

    for keyword, attribute in BOOLEAN_KEYWORD_FLAGS.items():
        setattr(minion, attribute, keyword in keywords)
    minion.div = 1 if Keyword.DIVINE_SHIELD in keywords else 0
    minion.cleave = minion.card_id in minion_factory.cleave_card_ids

    if snap.script_data_num1 is not None:
        minion.script_data_num1 = snap.script_data_num1
    if snap.script_data_num2 is not None:
        minion.script_data_num2 = snap.script_data_num2
    if snap.script_data_num3 is not None:
        minion.script_data_num3 = snap.script_data_num3

    if minion.golden and minion.card_id in minion_factory.card_ids_without_premium:
        minion.vanilla_attack *= 2
        minion.vanilla_health *= 2

    return minion
