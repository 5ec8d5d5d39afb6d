"""Service wiring shared by the API routers.

All process-lifetime state (card cache, simulation gate) lives in one
``AppServices`` instance attached to ``app.state``; routers reach it through
the dependency functions below instead of module-level singletons.
"""

import asyncio
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from fastapi import Request

from bgsim.core.config import ServiceConfig
from bgsim.core.logging_config import get_logger
from bgsim.services.card_catalog import JsonCardCatalog
from bgsim.services.cards_cache import CardCatalogCache
from bgsim.services.interfaces import CardCatalog, CombatSimulator, LiveGame
from bgsim.services.live_game import OfflineLiveGame
from bgsim.services.simulator import SimulationService, UnavailableSimulator, load_collaborator

logger = get_logger(__name__)


@dataclass
class AppServices:
    """Collaborators and shared state for one application instance.

    Attributes:
        catalog: Card database.
        live_game: Live match reader.
        cards_cache: Memoized /cards listing.
        simulation: Gate-protected simulation runner.
        catalog_loader: Called off the event loop at startup to load cards.
    """

    catalog: CardCatalog
    live_game: LiveGame
    cards_cache: CardCatalogCache
    simulation: SimulationService
    catalog_loader: Callable[[], Any] | None = None

    @classmethod
    def create(
        cls,
        catalog: CardCatalog,
        live_game: LiveGame,
        simulator: CombatSimulator,
        catalog_loader: Callable[[], Any] | None = None,
    ) -> "AppServices":
        cards_cache = CardCatalogCache(catalog, live_game)
        cards_cache.register_hooks()
        return cls(
            catalog=catalog,
            live_game=live_game,
            cards_cache=cards_cache,
            simulation=SimulationService(simulator, live_game),
            catalog_loader=catalog_loader,
        )

    async def startup(self) -> None:
        if self.catalog_loader is None:
            return
        try:
            await asyncio.to_thread(self.catalog_loader)
        except (OSError, ValueError, TypeError) as e:
            logger.error(
                "Card catalog failed to load; /cards will report not ready",
                extra={"extra_data": {"error": str(e)}},
                exc_info=True,
            )

    def shutdown(self) -> None:
        self.simulation.gate.shutdown()


def build_services(config: ServiceConfig) -> AppServices:
    """Wire the configured collaborators, falling back to offline adapters."""
    catalog = JsonCardCatalog(config.cards_path)

    live_game: LiveGame = OfflineLiveGame()
    if config.live_game:
        live_game = load_collaborator(config.live_game)

    simulator: CombatSimulator = UnavailableSimulator(catalog)
    if config.simulator:
        simulator = load_collaborator(config.simulator, catalog=catalog)

    logger.info(
        "Services configured",
        extra={
            "extra_data": {
                "cards_path": config.cards_path,
                "simulator": config.simulator or "unavailable",
                "live_game": config.live_game or "offline",
            }
        },
    )
    return AppServices.create(catalog, live_game, simulator, catalog_loader=catalog.load)


def get_services(request: Request) -> AppServices:
    return request.app.state.services


def get_simulation_service(request: Request) -> SimulationService:
    return get_services(request).simulation


def get_cards_cache(request: Request) -> CardCatalogCache:
    return get_services(request).cards_cache
