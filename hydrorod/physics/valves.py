"""Генератор профилей сечений клапанов A и B.

Клапан B задаётся повторяющейся кусочно-линейной последовательностью
(по умолчанию 0 -> 1.2e-5 м² за 0.01 с -> 0 за 0.02 с), клапан A — та же
последовательность, сдвинутая на полпериода (180° в противофазе).

Чистые функции времени, без состояния.
"""

from __future__ import annotations

from typing import Sequence, Union

import numpy as np

from hydrorod.config.models import ValveConfig
from hydrorod.core.types import ValveCommand, ValveSide


class RepeatingSequence:
    """Периодический кусочно-линейный сигнал по точкам одного периода."""

    def __init__(self, times: Sequence[float], values: Sequence[float]) -> None:
        t = np.asarray(times, dtype=np.float64)
        v = np.asarray(values, dtype=np.float64)
        if t.ndim != 1 or t.shape != v.shape or t.shape[0] < 2:
            raise ValueError("times and values must be 1-D sequences of equal length >= 2")
        if t[0] != 0.0 or np.any(np.diff(t) <= 0.0):
            raise ValueError("times must start at 0 and be strictly increasing")
        self._t = t
        self._v = v

    @property
    def period(self) -> float:
        return float(self._t[-1])

    def __call__(self, t: float) -> float:
        tau = float(t) % self.period
        value = float(np.interp(tau, self._t, self._v))
        # интерполяция не должна давать отрицательное сечение
        return max(0.0, value)

    def __repr__(self) -> str:
        return f"RepeatingSequence(period={self.period}, n_points={self._t.shape[0]})"


class ValveSchedule:
    def __init__(self, sequence: RepeatingSequence, *, phase_a_s: float | None = None) -> None:
        self._seq = sequence
        self._phase_a = 0.5 * sequence.period if phase_a_s is None else float(phase_a_s)

    @classmethod
    def from_config(cls, cfg: ValveConfig) -> "ValveSchedule":
        return cls(RepeatingSequence(cfg.times_s, cfg.areas_m2))

    @property
    def period(self) -> float:
        return self._seq.period

    def area_a(self, t: float) -> float:
        return self._seq(float(t) + self._phase_a)

    def area_b(self, t: float) -> float:
        return self._seq(float(t))

    def area(self, t: float, side: ValveSide) -> float:
        return self.command(t).area(side)

    def command(self, t: float) -> ValveCommand:
        return ValveCommand(area_a=self.area_a(t), area_b=self.area_b(t))

    def __repr__(self) -> str:
        return f"ValveSchedule({self._seq!r}, phase_a={self._phase_a})"


class ConstantValves:
    """Клапаны с фиксированными сечениями (закрытые/симметричные сценарии)."""

    def __init__(self, area_a: float, area_b: float) -> None:
        if area_a < 0.0 or area_b < 0.0:
            raise ValueError(f"valve areas must be >= 0, got a={area_a}, b={area_b}")
        self._cmd = ValveCommand(area_a=float(area_a), area_b=float(area_b))

    @classmethod
    def closed(cls) -> "ConstantValves":
        return cls(0.0, 0.0)

    def area(self, t: float, side: ValveSide) -> float:
        return self._cmd.area(side)

    def command(self, t: float) -> ValveCommand:
        return self._cmd

    def __repr__(self) -> str:
        return f"ConstantValves(a={self._cmd.area_a}, b={self._cmd.area_b})"


ValveProfile = Union[ValveSchedule, ConstantValves]


def build_valves(cfg: ValveConfig) -> ValveProfile:
    if cfg.mode == "constant":
        return ConstantValves(cfg.area_a_m2, cfg.area_b_m2)
    return ValveSchedule.from_config(cfg)
