"""Sink parts package public surface.

Prefer importing from `sinkkit.base.sink` for the stable surface.
"""

from .state import SinkState
from .sink import Sink

__all__ = ["Sink", "SinkState"]
