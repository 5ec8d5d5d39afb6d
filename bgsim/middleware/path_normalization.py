"""ASGI middleware making routing forgiving about case and trailing slashes."""

from starlette.types import ASGIApp, Receive, Scope, Send


def normalize_path(path: str) -> str:
    """Lowercase a path and trim trailing slashes; an empty result is ``/``."""
    return path.rstrip("/").lower() or "/"


class PathNormalizationMiddleware:
    """Rewrites the request path and method before routing.

    ``/Cards/`` routes like ``/cards`` and ``post`` like ``POST``.
    """

    def __init__(self, app: ASGIApp) -> None:
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] == "http":
            path = normalize_path(scope["path"])
            scope = {
                **scope,
                "path": path,
                "method": scope["method"].upper(),
            }
        await self.app(scope, receive, send)
