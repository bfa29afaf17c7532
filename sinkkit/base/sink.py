"""Cancelable pipelined task wrapper (public API facade).

Purpose
-------
Expose the ``Sink`` primitive via the canonical ``sinkkit.base.sink`` import
path while the concrete implementation lives under ``sink_parts`` for
organization.

Notes
-----
- ``Sink`` gives a long-running, side-effect-producing async operation a
  single settlement future, a pipeline of stages, and a finalizer that runs
  exactly once.
- ``SinkState`` names the lifecycle states reported by ``Sink.state``.
"""

from .sink_parts.state import SinkState
from .sink_parts.sink import Finalizer, Setup, Sink

__all__ = ["Sink", "SinkState", "Finalizer", "Setup"]
