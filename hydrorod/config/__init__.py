"""Конфиги симулятора штанги.

Все секции — frozen dataclasses с eager-валидацией в __post_init__;
ошибки поднимаются как ConfigurationError с именем поля.
"""

from __future__ import annotations

from .models import (  # noqa: F401
    CylinderConfig,
    FluidConfig,
    InitialState,
    SimulationConfig,
    SolverConfig,
    SystemParams,
    ValveConfig,
    load_config,
)

__all__ = [
    "SystemParams",
    "FluidConfig",
    "CylinderConfig",
    "ValveConfig",
    "SolverConfig",
    "InitialState",
    "SimulationConfig",
    "load_config",
]
