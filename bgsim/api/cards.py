"""Card API endpoints."""

from fastapi import APIRouter, Depends
from fastapi.responses import Response

from bgsim.api.dependencies import get_cards_cache
from bgsim.services.cards_cache import CardCatalogCache

router = APIRouter()


@router.get("/cards")
def list_cards(cache: CardCatalogCache = Depends(get_cards_cache)) -> Response:
    """List Battlegrounds minions as ``{ready, cards: [{id, name}]}``.

    Runs in the threadpool; the first call after a catalog change scans the
    whole card database.
    """
    return Response(content=cache.get_json(), media_type="application/json")
