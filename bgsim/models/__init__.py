"""Pydantic and dataclass models for the Battlegrounds simulation API."""

from bgsim.models.simulator_models import (
    Anomaly,
    Minion,
    PlayerSide,
    Race,
    SimulatorInput,
)
from bgsim.models.snapshot_models import (
    BattleSnapshot,
    CardEntry,
    CardListing,
    MinionSnapshot,
    SideSnapshot,
    SimulationOptions,
    SimulationResponse,
    SimulationResult,
)

__all__ = [
    # Wire models
    "BattleSnapshot",
    "CardEntry",
    "CardListing",
    "MinionSnapshot",
    "SideSnapshot",
    "SimulationOptions",
    "SimulationResponse",
    "SimulationResult",
    # Simulator input
    "Anomaly",
    "Minion",
    "PlayerSide",
    "Race",
    "SimulatorInput",
]
