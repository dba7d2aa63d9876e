"""Query model for authz-simulator."""

from __future__ import annotations

from authz_simulator.query._model import Query

__all__ = ["Query"]
