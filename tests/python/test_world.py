from __future__ import annotations

import pytest
from pygame.math import Vector2
from pytest import approx

from boidsim.sim.core.config import SimulationConfig
from boidsim.sim.core.world import World


def run_steps(config: SimulationConfig, steps: int):
    world = World(config)
    for tick in range(steps):
        world.step(tick)
    return [(round(agent.position.x, 6), round(agent.position.y, 6)) for agent in world.agents]


def test_deterministic_steps():
    result_a = run_steps(SimulationConfig(seed=1234, agent_count=40), 30)
    # recreate config to ensure RNG resets
    result_b = run_steps(SimulationConfig(seed=1234, agent_count=40), 30)
    assert result_a == result_b


def test_population_is_fixed_and_inside_domain():
    config = SimulationConfig(seed=7, agent_count=60, half_size=100.0, max_speed=100.0)
    world = World(config)
    ids = [agent.id for agent in world.agents]

    for tick in range(120):
        metrics = world.step(tick, elapsed=0.05)
        assert metrics.population == 60
        for agent in world.agents:
            assert agent.velocity.length() <= config.max_speed + 1e-9
            assert -config.half_size <= agent.position.x <= config.half_size
            assert -config.half_size <= agent.position.y <= config.half_size

    assert [agent.id for agent in world.agents] == ids


def test_initial_speed_and_still_start():
    moving = World(SimulationConfig(seed=3, agent_count=10, initial_speed=25.0))
    still = World(SimulationConfig(seed=3, agent_count=10, initial_speed=0.0))

    for agent in moving.agents:
        assert agent.velocity.length() == approx(25.0)
        assert agent.facing.length() == approx(1.0)
    for agent in still.agents:
        assert agent.velocity == Vector2()
        assert agent.facing == Vector2()


def test_single_agent_has_no_influences():
    world = World(SimulationConfig(seed=11, agent_count=1, initial_speed=0.0))
    agent = world.agents[0]
    agent.position.update(0.0, 0.0)
    start = Vector2(agent.position)

    metrics = world.step(0, elapsed=1.0)

    assert agent.cohesion == Vector2()
    assert agent.separation == Vector2()
    assert agent.alignment == Vector2()
    assert agent.position == start
    assert metrics.neighbor_checks == 0
    assert metrics.isolated == 1

    agent.velocity.update(10.0, 0.0)
    world.step(1, elapsed=1.0)
    assert agent.position.x == approx(10.0)
    assert agent.position.y == approx(0.0)


def test_zero_elapsed_leaves_positions_unchanged():
    world = World(SimulationConfig(seed=5, agent_count=30, initial_speed=80.0))
    before = [Vector2(agent.position) for agent in world.agents]

    world.step(0, elapsed=0.0)

    assert [agent.position for agent in world.agents] == before


def test_behaviors_read_positions_from_tick_start():
    config = SimulationConfig(seed=1, agent_count=2, initial_speed=0.0)
    world = World(config)
    first, second = world.agents
    first.position.update(10.0, 0.0)
    second.position.update(40.0, 40.0)
    first.velocity.update(90.0, 0.0)

    world.step(0, elapsed=1.0)

    # The second agent's centroid is where the first agent stood before moving.
    assert second.cohesion == Vector2(10.0, 0.0)
    assert first.cohesion == Vector2(40.0, 40.0)
    assert first.separation.x == approx(-30.0)
    assert first.separation.y == approx(-40.0)


def test_parameter_writes_take_effect_next_tick():
    world = World(SimulationConfig(seed=2, agent_count=2, initial_speed=0.0))
    first, second = world.agents
    first.position.update(0.0, 0.0)
    second.position.update(0.0, 20.0)

    world.parameters.set("separation_range", 10.0)
    world.step(0, elapsed=0.0)
    assert first.separation == Vector2()

    world.parameters.set("separation_range", 25.0)
    world.step(1, elapsed=0.0)
    assert first.separation.y == approx(-20.0)


def test_neighbor_checks_count_three_scans_per_agent():
    world = World(SimulationConfig(seed=4, agent_count=12))

    metrics = world.step(0)

    assert metrics.neighbor_checks == 3 * 12 * 11


def test_reset_restores_population_and_keeps_tuned_parameters():
    world = World(SimulationConfig(seed=8, agent_count=15))
    initial = [(agent.position.x, agent.position.y) for agent in world.agents]
    world.parameters.set("cohesion_range", 60.0)
    for tick in range(10):
        world.step(tick)

    world.reset()

    assert [(agent.position.x, agent.position.y) for agent in world.agents] == initial
    assert world.parameters.get("cohesion_range") == approx(60.0)
    assert world.metrics is None


def test_agent_lookup_by_id():
    world = World(SimulationConfig(seed=6, agent_count=5))

    assert world.agent(3) is world.agents[3]
    with pytest.raises(KeyError):
        world.agent(99)


def test_snapshot_contains_metadata_and_agent_signals():
    config = SimulationConfig(seed=7, time_step=0.5, half_size=42.0, agent_count=3)
    world = World(config)
    world.step(0)
    snapshot = world.snapshot(1)

    assert snapshot.world.half_size == approx(42.0)
    assert snapshot.metadata.sim_dt == approx(0.5)
    assert snapshot.metadata.tick_rate == approx(2.0)
    assert snapshot.metadata.seed == 7
    assert snapshot.metadata.integration_mode == "weighted"
    assert snapshot.metrics.population == 3
    assert set(snapshot.parameters) == set(world.parameters)

    payload = snapshot.agents[0]
    for key in ["id", "x", "y", "vx", "vy", "fx", "fy", "heading", "speed"]:
        assert key in payload
    assert payload["speed"] == approx(Vector2(payload["vx"], payload["vy"]).length())


def test_classic_mode_runs_within_bounds():
    config = SimulationConfig(seed=21, agent_count=40, half_size=150.0, integration_mode="classic")
    world = World(config)

    for tick in range(60):
        world.step(tick)

    for agent in world.agents:
        assert agent.velocity.length() <= config.max_speed + 1e-9
        assert abs(agent.position.x) <= config.half_size
        assert abs(agent.position.y) <= config.half_size


def test_neighbors_centered_on_origin_still_pull_and_count():
    world = World(SimulationConfig(seed=12, agent_count=3, initial_speed=0.0))
    pulled, left, right = world.agents
    pulled.position.update(0.0, 30.0)
    left.position.update(-5.0, 0.0)
    right.position.update(5.0, 0.0)
    world.parameters.set("cohesion_range", 100.0)
    world.parameters.set("cohesion_strength", 0.1)
    world.parameters.set("separation_range", 10.0)

    metrics = world.step(0, elapsed=0.0)

    assert pulled.cohesion == Vector2(0.0, 0.0)
    assert pulled.cohesion_count == 2
    assert pulled.velocity.x == approx(0.0)
    assert pulled.velocity.y == approx(-3.0)
    assert metrics.isolated == 0
