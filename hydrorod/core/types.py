"""hydrorod.core.types

Типы данных состояния, общие для физики, интегратора и trace.

PistonState никогда не хранится отдельно: это view над RigidLoadState + L
(см. MechanicalLoad.piston_states).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal


ValveSide = Literal["a", "b"]


@dataclass(frozen=True, slots=True)
class RigidLoadState:
    """Состояние штанги: смещение/скорость центра и угол/угловая скорость."""

    z: float = 0.0
    zdot: float = 0.0
    theta: float = 0.0
    thetadot: float = 0.0


@dataclass(frozen=True, slots=True)
class PistonState:
    z: float
    zdot: float


@dataclass(frozen=True, slots=True)
class ValveCommand:
    """Заданные проходные сечения клапанов (м²)."""

    area_a: float
    area_b: float

    def area(self, side: ValveSide) -> float:
        if not isinstance(side, str):
            raise ValueError(f"Unknown valve side: {side!r}")
        side_norm = side.strip().lower()
        if side_norm == "a":
            return self.area_a
        if side_norm == "b":
            return self.area_b
        raise ValueError(f"Unknown valve side: {side}")
