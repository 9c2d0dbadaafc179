from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List

from .metrics import TickMetrics


@dataclass(slots=True)
class Snapshot:
    tick: int
    metrics: TickMetrics
    agents: List[Dict[str, Any]]
    parameters: Dict[str, Dict[str, float]]
    world: "SnapshotWorld"
    metadata: "SnapshotMetadata"


@dataclass(slots=True)
class SnapshotWorld:
    half_size: float


@dataclass(slots=True)
class SnapshotMetadata:
    half_size: float
    max_speed: float
    sim_dt: float
    tick_rate: float
    seed: int
    integration_mode: str
    config_version: str
