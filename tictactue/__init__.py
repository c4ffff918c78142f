"""A networked two-player tic-tac-toe game server with rooms and game clocks."""

__version__ = "0.1.0"
__all__ = ["__version__"]