from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Optional

import yaml

INTEGRATION_MODES = ("weighted", "classic")

PARAMETER_NAMES = (
    "cohesion_range",
    "cohesion_strength",
    "separation_range",
    "separation_strength",
    "alignment_range",
    "alignment_strength",
)


@dataclass
class ParameterConfig:
    min: float
    max: float
    initial: Optional[float] = None

    def __post_init__(self) -> None:
        if self.max < self.min:
            raise ValueError(f"Parameter range is inverted: min={self.min} max={self.max}")

    @property
    def midpoint(self) -> float:
        return self.min + (self.max - self.min) * 0.5


def default_parameters() -> Dict[str, ParameterConfig]:
    return {
        "cohesion_strength": ParameterConfig(min=0.001, max=0.2),
        "cohesion_range": ParameterConfig(min=50.0, max=150.0),
        "separation_strength": ParameterConfig(min=0.001, max=0.2),
        "separation_range": ParameterConfig(min=10.0, max=100.0),
        "alignment_strength": ParameterConfig(min=0.001, max=0.1),
        "alignment_range": ParameterConfig(min=20.0, max=150.0),
    }


@dataclass
class SimulationConfig:
    time_step: float = 1.0 / 60.0
    agent_count: int = 200
    half_size: float = 500.0
    max_speed: float = 100.0
    # Magnitude of the random starting velocity; 0 starts every agent at rest.
    initial_speed: float = 50.0
    seed: int = 42
    integration_mode: str = "weighted"
    separation_average: bool = False
    config_version: str = "v1"
    parameters: Dict[str, ParameterConfig] = field(default_factory=default_parameters)

    def __post_init__(self) -> None:
        if self.integration_mode not in INTEGRATION_MODES:
            raise ValueError(f"Unknown integration mode: {self.integration_mode}")
        if self.half_size <= 0.0:
            raise ValueError(f"half_size must be positive, got {self.half_size}")
        if self.max_speed <= 0.0:
            raise ValueError(f"max_speed must be positive, got {self.max_speed}")
        missing = [name for name in PARAMETER_NAMES if name not in self.parameters]
        if missing:
            raise ValueError(f"Missing parameter definitions: {', '.join(missing)}")

    @staticmethod
    def from_yaml(path: Path) -> "SimulationConfig":
        data = yaml.safe_load(Path(path).read_text()) or {}
        return load_config(data)


@dataclass
class AppConfig:
    simulation: SimulationConfig = field(default_factory=SimulationConfig)
    broadcast_interval: int = 2


def load_config(raw: dict) -> SimulationConfig:
    parameters = default_parameters()
    for name, values in (raw.get("parameters") or {}).items():
        if name not in parameters:
            raise ValueError(f"Unknown parameter in config: {name}")
        default = parameters[name]
        parameters[name] = ParameterConfig(
            min=float(values.get("min", default.min)),
            max=float(values.get("max", default.max)),
            initial=None if values.get("initial") is None else float(values["initial"]),
        )
    sim_values = {k: v for k, v in raw.items() if k != "parameters"}
    return SimulationConfig(parameters=parameters, **sim_values)
