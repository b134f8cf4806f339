"""Насос постоянной подачи и давление общей линии питания.

Насос отдаёт Qmax в общую линию; утечка насоса ~ C2*Ps. Давление линии Ps —
алгебраическое: из баланса расходов

    Qmax - C2*Ps - sum_i Q_valve_i(Ps - P_i) = 0

Левая часть строго убывает по Ps, поэтому корень единственный и ищется
бисекцией на [0, Qmax/C2 + max(P_i)].
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Iterable, Tuple

if TYPE_CHECKING:
    from hydrorod.physics.hydraulics import HydraulicCylinder


BISECTION_ITERATIONS = 60

# (цилиндр, сечение клапана м², давление камеры Па)
SupplyBranch = Tuple["HydraulicCylinder", float, float]


@dataclass(frozen=True)
class Pump:
    flow_m3_s: float = 0.005
    leakage_m3_s_Pa: float = 3.0e-9

    def flow(self) -> float:
        return float(self.flow_m3_s)

    def leakage(self, Ps: float) -> float:
        return float(self.leakage_m3_s_Pa) * float(Ps)

    def supply_pressure(self, branches: Iterable[SupplyBranch]) -> float:
        branches = list(branches)
        Q = self.flow()

        def balance(P: float) -> float:
            q = Q - self.leakage(P)
            for cyl, area, Pc in branches:
                q -= cyl.valve_flow(P, Pc, area)
            return q

        Plo = 0.0
        Phi = Q / max(self.leakage_m3_s_Pa, 1e-18) + max((max(0.0, Pc) for _, _, Pc in branches), default=0.0)

        if balance(Plo) <= 0.0:
            return Plo
        if balance(Phi) >= 0.0:
            return Phi

        a, b = Plo, Phi
        for _ in range(BISECTION_ITERATIONS):
            m = 0.5 * (a + b)
            if balance(m) > 0.0:
                a = m
            else:
                b = m
        return 0.5 * (a + b)
