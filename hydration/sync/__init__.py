"""
Response synchronization: staleness guard and fan-in joins.
"""

from .staleness import Generations
from .join import FanInJoin

__all__ = ["Generations", "FanInJoin"]
