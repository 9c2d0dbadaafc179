from __future__ import annotations

import logging
from time import perf_counter
from typing import Any, Dict, List, Optional

from .agent import Agent, FrameAgent
from .config import SimulationConfig
from .parameters import ParameterSet
from .rng import DeterministicRng
from ..systems import integrator, metrics as metrics_system, steering
from ..systems.neighbors import NeighborScanner
from ..types.metrics import TickMetrics
from ..types.snapshot import Snapshot, SnapshotMetadata, SnapshotWorld
from ..utils.math2d import _heading_from_velocity, normalize_or_zero

logger = logging.getLogger(__name__)


class World:
    def __init__(self, config: SimulationConfig):
        self._config = config
        self._rng = DeterministicRng(config.seed)
        self._parameters = ParameterSet(config.parameters)
        self._agents: List[Agent] = []
        self._id_to_index: Dict[int, int] = {}
        self._next_id = 0
        self._metrics: TickMetrics | None = None
        self._bootstrap_population()

    @property
    def agents(self) -> List[Agent]:
        return self._agents

    @property
    def parameters(self) -> ParameterSet:
        return self._parameters

    @property
    def config(self) -> SimulationConfig:
        return self._config

    @property
    def metrics(self) -> TickMetrics | None:
        return self._metrics

    def agent(self, agent_id: int) -> Agent:
        return self._agents[self._id_to_index[agent_id]]

    def reset(self) -> None:
        self._agents.clear()
        self._id_to_index.clear()
        self._rng.reset()
        self._next_id = 0
        self._metrics = None
        self._bootstrap_population()

    def step(self, tick: int, elapsed: Optional[float] = None) -> TickMetrics:
        start = perf_counter()
        config = self._config
        dt = config.time_step if elapsed is None else max(0.0, float(elapsed))
        params = self._parameters.snapshot()

        frame = [FrameAgent.capture(agent) for agent in self._agents]
        scanner = NeighborScanner(frame)
        for agent, view in zip(self._agents, frame):
            agent.cohesion, agent.cohesion_count = steering.cohesion(scanner, view, params.cohesion_range)
            agent.separation = steering.separation(
                scanner, view, params.separation_range, average=config.separation_average
            )
            agent.alignment = steering.alignment(scanner, view, params.alignment_range)

        wraps = 0
        for agent in self._agents:
            if integrator.integrate(
                agent,
                params,
                dt,
                config.max_speed,
                config.half_size,
                mode=config.integration_mode,
            ):
                wraps += 1

        elapsed_ms = (perf_counter() - start) * 1000.0
        metrics = metrics_system.create_metrics(tick, self._agents, scanner.checks, wraps, dt, elapsed_ms)
        self._metrics = metrics
        logger.debug(
            "tick=%d agents=%d checks=%d wraps=%d avg_speed=%.3f ms=%.3f",
            tick,
            metrics.population,
            metrics.neighbor_checks,
            wraps,
            metrics.average_speed,
            elapsed_ms,
        )
        return metrics

    def snapshot(self, tick: int) -> Snapshot:
        metrics = self._metrics if self._metrics is not None else self._metrics_from_state(tick)
        metadata = SnapshotMetadata(
            half_size=self._config.half_size,
            max_speed=self._config.max_speed,
            sim_dt=self._config.time_step,
            tick_rate=0.0 if self._config.time_step <= 0 else 1.0 / self._config.time_step,
            seed=self._config.seed,
            integration_mode=self._config.integration_mode,
            config_version=self._config.config_version,
        )
        return Snapshot(
            tick=tick,
            metrics=metrics,
            agents=[self._agent_snapshot(agent) for agent in self._agents],
            parameters=self._parameters.as_dict(),
            world=SnapshotWorld(half_size=self._config.half_size),
            metadata=metadata,
        )

    def _bootstrap_population(self) -> None:
        half_size = self._config.half_size
        for _ in range(self._config.agent_count):
            position = self._rng.next_point_in_square(half_size)
            velocity = self._rng.next_unit_circle() * self._config.initial_speed
            agent = Agent(
                id=self._next_id,
                position=position,
                velocity=velocity,
                facing=normalize_or_zero(velocity),
                heading=_heading_from_velocity(velocity),
            )
            self._id_to_index[agent.id] = len(self._agents)
            self._agents.append(agent)
            self._next_id += 1
        logger.info(
            "Spawned %d agents in [-%g, %g] (seed=%d, mode=%s)",
            len(self._agents),
            half_size,
            half_size,
            self._config.seed,
            self._config.integration_mode,
        )

    def _agent_snapshot(self, agent: Agent) -> Dict[str, Any]:
        return {
            "id": agent.id,
            "x": agent.position.x,
            "y": agent.position.y,
            "vx": agent.velocity.x,
            "vy": agent.velocity.y,
            "fx": agent.facing.x,
            "fy": agent.facing.y,
            "heading": agent.heading,
            "speed": agent.velocity.length(),
        }

    def _metrics_from_state(self, tick: int) -> TickMetrics:
        return metrics_system.create_metrics(tick, self._agents, 0, 0, 0.0, 0.0)
