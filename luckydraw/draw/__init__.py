"""Winner selection for live draws."""

from .engine import DrawEngine
from .selection import Chooser, choose_uniform, scripted_chooser, seeded_chooser

__all__ = [
    "Chooser",
    "DrawEngine",
    "choose_uniform",
    "scripted_chooser",
    "seeded_chooser",
]
