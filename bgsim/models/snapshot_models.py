"""Pydantic models for the local simulation API wire format.

Request bodies arrive from the builder page or other local tools, so the
models are lenient: every field except a minion's card id is optional, keys
are camelCase on the wire but matched without regard to case, and unknown
keys are ignored. Defaults that depend on game rules (starting health, empty
boards) are applied by the snapshot translator, not here.
"""

from __future__ import annotations

import math
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

# Tolerance for the win + tie + lose == 1 check
PROBABILITY_TOLERANCE = 1e-6


class WireModel(BaseModel):
    """Base for camelCase wire models with case-insensitive keys."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )

    @model_validator(mode="before")
    @classmethod
    def _match_keys_ignoring_case(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data

        aliases = {}
        for name, info in cls.model_fields.items():
            aliases[name.lower()] = name
            aliases[(info.alias or name).lower()] = info.alias or name
        return {aliases.get(str(key).lower(), key): value for key, value in data.items()}


class MinionSnapshot(WireModel):
    """One minion on a side, in board order."""

    card_id: str | None = Field(default=None, description="Card id; blank entries are dropped")
    atk: int | None = Field(default=None, description="Attack override")
    hp: int | None = Field(default=None, description="Health override")
    golden: bool | None = Field(default=None, description="Golden (premium) minion")
    tier: int | None = Field(default=None, description="Tavern tier override")
    tags: list[str] | None = Field(
        default=None,
        description="Keyword tags such as taunt or divineShield (case-insensitive)",
    )
    script_data_num1: int | None = None
    script_data_num2: int | None = None
    script_data_num3: int | None = None


class SideSnapshot(WireModel):
    """One combatant's hero and board."""

    health: int | None = Field(default=None, description="Hero health (default 40)")
    armor: int | None = Field(default=None, description="Hero armor (default 0)")
    tier: int | None = Field(default=None, description="Tavern tier (default 0)")
    damage_taken: int | None = Field(default=None, description="Damage already taken")
    minions: list[MinionSnapshot] | None = Field(
        default=None,
        description="Minions in board order",
    )


class BattleSnapshot(WireModel):
    """A complete combat supplied by the caller."""

    player: SideSnapshot | None = None
    opponent: SideSnapshot | None = None
    damage_cap: int | None = Field(default=None, description="Cap on hero damage this fight")
    available_races: list[str] | None = Field(
        default=None,
        description="Race names restricting the minion pool",
    )
    anomaly_card_id: str | None = Field(default=None, description="Active anomaly card id")


class SimulationOptions(BaseModel):
    """Iteration, time and thread controls for one run."""

    iterations: int = Field(default=10000, gt=0, description="Monte-Carlo trials requested")
    timeout_ms: int | None = Field(
        default=None,
        gt=0,
        description="Wall-clock budget; the simulator may stop early",
    )
    thread_count: int | None = Field(default=None, gt=0, description="Parallelism hint")


class SimulationResult(BaseModel):
    """Outcome probabilities reported by the simulator."""

    win: float = Field(ge=0.0, le=1.0)
    tie: float = Field(ge=0.0, le=1.0)
    lose: float = Field(ge=0.0, le=1.0)
    simulations_run: int = Field(ge=0, description="Completed trials")

    @model_validator(mode="after")
    def _check_probabilities(self) -> SimulationResult:
        if self.simulations_run > 0:
            total = self.win + self.tie + self.lose
            if not math.isclose(total, 1.0, abs_tol=PROBABILITY_TOLERANCE):
                raise ValueError(f"win + tie + lose must equal 1, got {total}")
        return self


class SimulationResponse(BaseModel):
    """Success body of both simulate endpoints."""

    win: float
    tie: float
    lose: float
    simulations: int

    @classmethod
    def from_result(cls, result: SimulationResult) -> SimulationResponse:
        return cls(
            win=result.win,
            tie=result.tie,
            lose=result.lose,
            simulations=result.simulations_run,
        )


class CardEntry(BaseModel):
    """Minimal card listing entry for search and autocomplete."""

    id: str
    name: str


class CardListing(BaseModel):
    """Body of the /cards endpoint."""

    ready: bool
    cards: list[CardEntry] = Field(default_factory=list)
