"""Error codes and exceptions shared across the service."""

from enum import Enum


class ErrorCode(str, Enum):
    """Reason codes returned in ``{"error": <code>}`` bodies."""

    METHOD_NOT_ALLOWED = "method_not_allowed"
    EMPTY_BODY = "empty_body"
    INVALID_BODY = "invalid_body"
    NOT_IN_BATTLEGROUNDS = "not_in_battlegrounds"
    SIMULATION_FAILED = "simulation_failed"
    SERVER_ERROR = "server_error"
    NOT_FOUND = "not_found"
    CLIENT_CLOSED_REQUEST = "client_closed_request"


# =============================================================================
# Translation errors
# =============================================================================


class TranslationError(Exception):
    """Raised when a snapshot cannot become a simulator input."""

    pass


class MissingSideError(TranslationError):
    """Raised when the player or opponent side is absent."""

    def __init__(self, side: str):
        super().__init__(f"Snapshot is missing the {side} side")
        self.side = side


class UnknownCardError(TranslationError):
    """Raised by a minion factory for a card id it cannot build."""

    def __init__(self, card_id: str):
        super().__init__(f"Unknown card id: {card_id!r}")
        self.card_id = card_id


class UnknownAnomalyError(TranslationError):
    """Raised by an anomaly factory for an unrecognized anomaly id."""

    def __init__(self, card_id: str):
        super().__init__(f"Unknown anomaly id: {card_id!r}")
        self.card_id = card_id


# =============================================================================
# Collaborator loading
# =============================================================================


class SimulatorLoadError(Exception):
    """Raised when a configured collaborator import path cannot be loaded."""

    pass
