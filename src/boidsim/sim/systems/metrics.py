from __future__ import annotations

import math
from typing import Iterable

from ..core.agent import Agent
from ..types.metrics import TickMetrics


def create_metrics(
    tick: int,
    agents: Iterable[Agent],
    neighbor_checks: int,
    wraps: int,
    elapsed: float,
    duration_ms: float,
) -> TickMetrics:
    population = 0
    speed_sum = 0.0
    peak_speed = 0.0
    isolated = 0
    for agent in agents:
        population += 1
        speed = math.hypot(agent.velocity.x, agent.velocity.y)
        speed_sum += speed
        if speed > peak_speed:
            peak_speed = speed
        if agent.cohesion_count == 0:
            isolated += 1
    return TickMetrics(
        tick=tick,
        population=population,
        neighbor_checks=neighbor_checks,
        average_speed=0.0 if population == 0 else speed_sum / population,
        peak_speed=peak_speed,
        wraps=wraps,
        isolated=isolated,
        elapsed=elapsed,
        tick_duration_ms=duration_ms,
    )
