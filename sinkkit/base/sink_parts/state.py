"""Lifecycle states of a sink.

Module scoped to keep the sink class focused and to comply with
one-class-per-file policy for public types.
"""

from __future__ import annotations

from enum import Enum


class SinkState(str, Enum):
    """Lifecycle state of a :class:`~sinkkit.base.sink.Sink`.

    ``PENDING -> CANCELLING -> FULFILLED | REJECTED``. A setup failure moves
    straight from ``PENDING`` to ``REJECTED``. Terminal states never change.
    """

    PENDING = "pending"
    CANCELLING = "cancelling"
    FULFILLED = "fulfilled"
    REJECTED = "rejected"

    @property
    def settled(self) -> bool:
        return self in (SinkState.FULFILLED, SinkState.REJECTED)


__all__ = ["SinkState"]
