"""Модель гидроцилиндра (экземпляры A и B).

Камера цилиндра сжимаемая: давление — дифференциальное состояние.

    Q_in  = Cd * A_v * sign(Ps - P) * sqrt(2 |Ps - P| / rho)   # через клапан от линии питания
    Q_leak = k_leak * P                                      # внутренняя утечка в бак
    V     = max(V_min, V_0 + A_c * z_i)
    dP/dt = K / V * (Q_in - Q_leak - A_c * dz_i/dt)
    dP/dt = max(0, dP/dt) при P <= 0
    F     = P * A_c

Единицы:
- Давление: Па
- Площадь: м²
- Расход: м³/с
- Сила: Н
"""

from __future__ import annotations

from dataclasses import dataclass
import math

from hydrorod.config.models import CylinderConfig, FluidConfig
from hydrorod.physics.pump import Pump


def orifice_flow(cd: float, area: float, dp: float, rho: float) -> float:
    # турбулентный режим (классика): Q = Cd*A*sign(dp)*sqrt(2*|dp|/rho)
    if area <= 0.0 or dp == 0.0:
        return 0.0
    q = cd * area * math.sqrt(2.0 * abs(dp) / max(rho, 1e-9))
    return float(q if dp > 0.0 else -q)


@dataclass(frozen=True)
class CylinderResponse:
    force_N: float
    pressure_Pa: float        # давление после clamp, по которому посчитана сила
    pressure_rate: float      # dP/dt, Па/с
    inflow_m3_s: float        # расход через клапан (>0 в камеру)
    leak_m3_s: float
    pressure_clamped: bool = False


class HydraulicCylinder:
    def __init__(self, name: str, cfg: CylinderConfig | None = None, fluid: FluidConfig | None = None) -> None:
        self.name = name
        self.cfg = cfg or CylinderConfig()
        self.fluid = fluid or FluidConfig()

    @property
    def piston_area_m2(self) -> float:
        return float(self.cfg.piston_area_m2)

    def chamber_volume(self, piston_position_m: float) -> float:
        c = self.cfg
        return max(c.min_volume_m3, c.dead_volume_m3 + c.piston_area_m2 * float(piston_position_m))

    def valve_flow(self, supply_pressure_Pa: float, chamber_pressure_Pa: float, valve_area_m2: float) -> float:
        return orifice_flow(
            self.cfg.cd,
            float(valve_area_m2),
            float(supply_pressure_Pa) - float(chamber_pressure_Pa),
            self.fluid.rho,
        )

    def force_from_pressure(self, P_Pa: float) -> float:
        return float(P_Pa) * self.piston_area_m2

    def evaluate(
        self,
        *,
        supply_pressure_Pa: float,
        valve_area_m2: float,
        chamber_pressure_Pa: float,
        piston_position_m: float,
        piston_velocity_m_s: float,
    ) -> CylinderResponse:
        P = float(chamber_pressure_Pa)
        clamped = P < 0.0
        if clamped:
            P = 0.0

        q_in = self.valve_flow(supply_pressure_Pa, P, valve_area_m2)
        q_leak = float(self.cfg.internal_leak_m3_s_Pa) * P
        V = self.chamber_volume(piston_position_m)

        dP_dt = (self.fluid.bulk_modulus / V) * (q_in - q_leak - self.piston_area_m2 * float(piston_velocity_m_s))
        # опустевшая камера не уходит в вакуум: давление держится на нуле
        if P <= 0.0 and dP_dt < 0.0:
            dP_dt = 0.0

        return CylinderResponse(
            force_N=self.force_from_pressure(P),
            pressure_Pa=P,
            pressure_rate=float(dP_dt),
            inflow_m3_s=q_in,
            leak_m3_s=q_leak,
            pressure_clamped=clamped,
        )

    def force(
        self,
        pump_flow_m3_s: float,
        valve_area_m2: float,
        piston_velocity_m_s: float,
        *,
        chamber_pressure_Pa: float,
        pump_leakage_m3_s_Pa: float,
        piston_position_m: float = 0.0,
    ) -> float:
        """Сила поршня, когда насос питает только этот цилиндр.

        Давление линии питания находится из баланса расходов насоса для
        одного клапана, дальше обычный evaluate().
        """

        pump = Pump(flow_m3_s=pump_flow_m3_s, leakage_m3_s_Pa=pump_leakage_m3_s_Pa)
        Ps = pump.supply_pressure([(self, valve_area_m2, max(0.0, chamber_pressure_Pa))])
        return self.evaluate(
            supply_pressure_Pa=Ps,
            valve_area_m2=valve_area_m2,
            chamber_pressure_Pa=chamber_pressure_Pa,
            piston_position_m=piston_position_m,
            piston_velocity_m_s=piston_velocity_m_s,
        ).force_N

    def __repr__(self) -> str:
        return f"HydraulicCylinder(name={self.name}, Ac={self.cfg.piston_area_m2}m2)"
