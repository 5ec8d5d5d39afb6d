"""Battle simulation service.

Ties the snapshot translator, the simulation gate and the external combat
simulator together. Both simulation kinds (live match and custom snapshot)
run through the same gate, so at most one simulation executes at a time.
"""

import importlib
import time
from typing import Any

from bgsim.core.errors import SimulatorLoadError, TranslationError
from bgsim.core.logging_config import get_logger
from bgsim.models.simulator_models import SimulatorInput
from bgsim.models.snapshot_models import BattleSnapshot, SimulationOptions, SimulationResult
from bgsim.services.catalog_factories import CatalogAnomalyFactory, CatalogMinionFactory
from bgsim.services.gate import SimulationGate
from bgsim.services.interfaces import CardCatalog, CombatSimulator, LiveGame
from bgsim.services.translator import translate_snapshot

logger = get_logger(__name__)


class UnavailableSimulator(CombatSimulator):
    """Placeholder used when no combat simulator is configured.

    Snapshots are still translated (so unknown cards and anomalies are
    reported), but every run ends without a result.
    """

    def __init__(self, catalog: CardCatalog):
        self.minion_factory = CatalogMinionFactory(catalog)
        self.anomaly_factory = CatalogAnomalyFactory(catalog)

    def simulate(
        self, sim_input: SimulatorInput, options: SimulationOptions
    ) -> SimulationResult | None:
        logger.warning("No combat simulator configured; set BGSIM_SIMULATOR to enable simulations")
        return None


def load_collaborator(import_path: str, **kwargs: Any) -> Any:
    """Instantiate a collaborator from a ``module:callable`` import path.

    Args:
        import_path: Dotted module path and factory name, e.g.
            ``"bobs_buddy.adapter:create_simulator"``.
        **kwargs: Arguments passed to the factory.

    Raises:
        SimulatorLoadError: If the path is malformed or cannot be imported.
    """
    module_name, _, attr = import_path.partition(":")
    if not module_name or not attr:
        raise SimulatorLoadError(f"Expected 'module:callable', got {import_path!r}")

    try:
        module = importlib.import_module(module_name)
    except ImportError as e:
        raise SimulatorLoadError(f"Cannot import {module_name!r}: {e}") from e

    factory = getattr(module, attr, None)
    if factory is None:
        raise SimulatorLoadError(f"{module_name!r} has no attribute {attr!r}")
    return factory(**kwargs)


class SimulationService:
    """Runs live and custom simulations one at a time.

    Typical usage:
        service = SimulationService(simulator, live_game)
        result = await service.simulate_custom(snapshot, options)
        if result is None:
            # translation or simulation failed
    """

    def __init__(
        self,
        simulator: CombatSimulator,
        live_game: LiveGame,
        gate: SimulationGate | None = None,
    ):
        self.simulator = simulator
        self.live_game = live_game
        self.gate = gate or SimulationGate()

    def is_in_battlegrounds(self) -> bool:
        return self.live_game.is_battlegrounds_match()

    async def simulate_current(self, options: SimulationOptions) -> SimulationResult | None:
        """Simulate the combat of the live match."""
        return await self.gate.run(self._run_current, options)

    async def simulate_custom(
        self, snapshot: BattleSnapshot, options: SimulationOptions
    ) -> SimulationResult | None:
        """Translate and simulate a caller-supplied snapshot.

        Returns:
            The result, or None when translation or simulation failed.
        """
        return await self.gate.run(self._run_custom, snapshot, options)

    # Gate worker thread only

    def _run_current(self, options: SimulationOptions) -> SimulationResult | None:
        return self._timed("live", options, self.live_game.simulate_current, options)

    def _run_custom(
        self, snapshot: BattleSnapshot, options: SimulationOptions
    ) -> SimulationResult | None:
        try:
            sim_input = translate_snapshot(
                snapshot,
                minion_factory=self.simulator.minion_factory,
                anomaly_factory=self.simulator.anomaly_factory,
                live_races=self.live_game.available_races(),
            )
        except TranslationError as e:
            logger.warning(
                "Snapshot rejected",
                extra={"extra_data": {"error": str(e), "error_type": type(e).__name__}},
            )
            return None
        except Exception as e:
            # Plugged-in factories signal unknown ids with their own exceptions
            logger.exception(
                "Snapshot translation raised",
                extra={"extra_data": {"error_type": type(e).__name__}},
            )
            return None

        return self._timed("custom", options, self.simulator.simulate, sim_input, options)

    def _timed(
        self, kind: str, options: SimulationOptions, func: Any, *args: Any
    ) -> SimulationResult | None:
        start_time = time.perf_counter()
        try:
            result = func(*args)
        except Exception:
            logger.exception("Simulation raised", extra={"extra_data": {"kind": kind}})
            return None

        duration_ms = (time.perf_counter() - start_time) * 1000
        logger.info(
            f"Simulation finished: {kind}",
            extra={
                "extra_data": {
                    "kind": kind,
                    "iterations": options.iterations,
                    "timeout_ms": options.timeout_ms,
                    "threads": options.thread_count,
                    "simulations": result.simulations_run if result else None,
                    "duration_ms": round(duration_ms, 2),
                }
            },
        )
        return result
