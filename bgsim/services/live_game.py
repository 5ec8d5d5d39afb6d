"""Live game reader used when no game client is attached."""

from bgsim.models.simulator_models import Race
from bgsim.models.snapshot_models import SimulationOptions, SimulationResult
from bgsim.services.interfaces import LiveGame


class OfflineLiveGame(LiveGame):
    """Reports that no match is running."""

    def is_battlegrounds_match(self) -> bool:
        return False

    def is_duos_match(self) -> bool:
        return False

    def available_races(self) -> set[Race]:
        return set()

    def simulate_current(self, options: SimulationOptions) -> SimulationResult | None:
        return None
