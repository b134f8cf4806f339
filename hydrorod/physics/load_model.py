"""Механическая нагрузка: жёсткая штанга на двух поршнях.

Уравнения движения (малый угол поворота):

    M * z''     = F_b + F_a + F_ext
    I * theta'' = (L/2) * F_b - (L/2) * F_a

Положения/скорости поршней следуют из геометрии:

    z_a = z - theta * L/2,   z_b = z + theta * L/2

Соглашения:
- z — вертикальное смещение центра (вверх), theta — поворот по часовой стрелке.
- Состояние хранит интегратор; здесь только чистые функции.
"""

from __future__ import annotations

from typing import Tuple

from hydrorod.config.models import SystemParams
from hydrorod.core.types import PistonState, RigidLoadState


class MechanicalLoad:
    def __init__(self, params: SystemParams) -> None:
        self._p = params

    @property
    def params(self) -> SystemParams:
        return self._p

    def accelerations(self, F_a: float, F_b: float) -> Tuple[float, float]:
        """(z'', theta'') от сил поршней и внешней силы."""

        p = self._p
        zddot = (float(F_b) + float(F_a) + p.Fext) / p.mass_kg
        thetaddot = p.half_length_m * (float(F_b) - float(F_a)) / p.inertia_kg_m2
        return zddot, thetaddot

    def derivatives(self, state: RigidLoadState, F_a: float, F_b: float) -> Tuple[float, float, float, float]:
        """d/dt [z, zdot, theta, thetadot]."""

        zddot, thetaddot = self.accelerations(F_a, F_b)
        return state.zdot, zddot, state.thetadot, thetaddot

    def piston_states(self, state: RigidLoadState) -> Tuple[PistonState, PistonState]:
        h = self._p.half_length_m
        piston_a = PistonState(z=state.z - state.theta * h, zdot=state.zdot - state.thetadot * h)
        piston_b = PistonState(z=state.z + state.theta * h, zdot=state.zdot + state.thetadot * h)
        return piston_a, piston_b

    def is_small_angle(self, theta: float, limit_rad: float) -> bool:
        return abs(float(theta)) <= float(limit_rad)

    def __repr__(self) -> str:
        p = self._p
        return f"MechanicalLoad(L={p.rod_length_m}m, M={p.mass_kg}kg, I={p.inertia_kg_m2}kg*m2)"
