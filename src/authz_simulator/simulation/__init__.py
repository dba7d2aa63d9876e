"""Permission simulation: request/result models and the orchestrator."""

from __future__ import annotations

from authz_simulator.simulation._models import (
    SIMULATION_MODES,
    SimulationRequest,
    SimulationResult,
)
from authz_simulator.simulation._orchestrator import Simulator, ensure_administrator, simulate

__all__ = [
    "SIMULATION_MODES",
    "SimulationRequest",
    "SimulationResult",
    "Simulator",
    "ensure_administrator",
    "simulate",
]
