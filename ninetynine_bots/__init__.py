"""AI strategies for Ninety-Nine."""

from .base import AIStrategy
from .driver import get_ai_strategy, take_ai_turn
from .easy import EasyStrategy
from .hard import HardStrategy
from .medium import MediumStrategy

__all__ = [
    "AIStrategy",
    "EasyStrategy",
    "MediumStrategy",
    "HardStrategy",
    "get_ai_strategy",
    "take_ai_turn",
]
