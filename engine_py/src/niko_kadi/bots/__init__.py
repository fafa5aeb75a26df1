from .base import BaseBot, BotAction
from .heuristic import HeuristicBot, Strategy, select_strategy

__all__ = ["BaseBot", "BotAction", "HeuristicBot", "Strategy", "select_strategy"]
