from __future__ import annotations

from pygame.math import Vector2

from ..core.agent import Agent
from ..core.parameters import FlockingParams
from ..utils.math2d import (
    _clamp_length_xy_f,
    _heading_from_velocity,
    _wrap_coordinate,
    normalize_or_zero,
)

# Classic mode scales the cohesion pull up relative to its slider value.
CLASSIC_COHESION_GAIN = 10.0


def steering_delta(agent: Agent, params: FlockingParams, mode: str = "weighted") -> Vector2:
    # Nobody in range: no pull at all.
    if agent.cohesion_count == 0:
        coherence_change = Vector2()
    else:
        coherence_change = agent.cohesion - agent.position
    if mode == "classic":
        return (
            normalize_or_zero(agent.separation) * params.separation_strength
            + normalize_or_zero(coherence_change) * (params.cohesion_strength * CLASSIC_COHESION_GAIN)
            + agent.alignment
        )
    return (
        agent.separation * params.separation_strength
        + coherence_change * params.cohesion_strength
        + agent.alignment * params.alignment_strength
    )


def integrate(
    agent: Agent,
    params: FlockingParams,
    elapsed: float,
    max_speed: float,
    half_size: float,
    mode: str = "weighted",
) -> bool:
    """Advance one agent by ``elapsed`` seconds. Returns True when it wrapped."""
    delta = steering_delta(agent, params, mode)
    vel_x, vel_y = _clamp_length_xy_f(
        agent.velocity.x + delta.x,
        agent.velocity.y + delta.y,
        max_speed,
    )
    pos_x = agent.position.x + vel_x * elapsed
    pos_y = agent.position.y + vel_y * elapsed
    wrapped_x = _wrap_coordinate(pos_x, half_size)
    wrapped_y = _wrap_coordinate(pos_y, half_size)
    agent.velocity.update(vel_x, vel_y)
    agent.position.update(wrapped_x, wrapped_y)
    agent.facing = normalize_or_zero(agent.velocity)
    if agent.velocity.length_squared() > 1e-8:
        agent.heading = _heading_from_velocity(agent.velocity)
    return wrapped_x != pos_x or wrapped_y != pos_y
