"""Local HTTP API for Hearthstone Battlegrounds combat simulations."""

__version__ = "0.1.0"
