"""Динамика штанги с двумя гидроцилиндрами (правая часть ОДУ).

Порядок вычислений на каждом вызове rhs():
1. положения/скорости поршней из состояния штанги;
2. сечения клапанов на момент t;
3. подача насоса и давление линии питания;
4. силы F_a, F_b через модели цилиндров;
5. производные состояния штанги.

Вектор состояния: [z, zdot, theta, thetadot, p_a, p_b].
Давления в rhs clamp'ятся снизу нулём (отрицательное давление — вне модели).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

import numpy as np

from hydrorod.config.models import SimulationConfig
from hydrorod.core.types import PistonState, RigidLoadState, ValveCommand
from hydrorod.physics.hydraulics import CylinderResponse, HydraulicCylinder
from hydrorod.physics.load_model import MechanicalLoad
from hydrorod.physics.pump import Pump
from hydrorod.physics.valves import ValveProfile, build_valves


STATE_SIZE = 6
# индексы давлений камер в векторе состояния
PRESSURE_INDEX = {"a": 4, "b": 5}


@dataclass
class DynamicState:
    z: float
    zdot: float
    theta: float
    thetadot: float
    pressure_a: float
    pressure_b: float

    @property
    def load(self) -> RigidLoadState:
        return RigidLoadState(z=self.z, zdot=self.zdot, theta=self.theta, thetadot=self.thetadot)

    def to_vector(self) -> np.ndarray:
        return np.array(
            [
                self.z,
                self.zdot,
                self.theta,
                self.thetadot,
                self.pressure_a,
                self.pressure_b,
            ],
            dtype=np.float64,
        )

    @classmethod
    def from_vector(cls, y: np.ndarray) -> "DynamicState":
        y = np.asarray(y, dtype=np.float64)
        if y.shape != (STATE_SIZE,):
            raise ValueError(f"DynamicState vector must have shape ({STATE_SIZE},); got {y.shape}")

        return cls(
            z=float(y[0]),
            zdot=float(y[1]),
            theta=float(y[2]),
            thetadot=float(y[3]),
            pressure_a=float(y[4]),
            pressure_b=float(y[5]),
        )


@dataclass(frozen=True)
class StepDiagnostics:
    t: float
    load: RigidLoadState
    piston_a: PistonState
    piston_b: PistonState
    valves: ValveCommand
    supply_pressure: float
    cyl_a: CylinderResponse
    cyl_b: CylinderResponse

    @property
    def force_a(self) -> float:
        return self.cyl_a.force_N

    @property
    def force_b(self) -> float:
        return self.cyl_b.force_N

    @property
    def pressure_clamped(self) -> Tuple[bool, bool]:
        return self.cyl_a.pressure_clamped, self.cyl_b.pressure_clamped


class RodDynamics:
    def __init__(
        self,
        load: MechanicalLoad,
        pump: Pump,
        cyl_a: HydraulicCylinder,
        cyl_b: HydraulicCylinder,
        valves: ValveProfile,
    ) -> None:
        self._load = load
        self._pump = pump
        self._cyl_a = cyl_a
        self._cyl_b = cyl_b
        self._valves = valves

    @classmethod
    def from_config(cls, cfg: SimulationConfig) -> "RodDynamics":
        sp = cfg.system
        return cls(
            load=MechanicalLoad(sp),
            pump=Pump(flow_m3_s=sp.pump_flow_m3_s, leakage_m3_s_Pa=sp.leakage_m3_s_Pa),
            cyl_a=HydraulicCylinder("a", cfg.cylinder_a, cfg.fluid),
            cyl_b=HydraulicCylinder("b", cfg.cylinder_b, cfg.fluid),
            valves=build_valves(cfg.valves),
        )

    @property
    def load(self) -> MechanicalLoad:
        return self._load

    def evaluate(self, t: float, y: np.ndarray) -> Tuple[np.ndarray, StepDiagnostics]:
        _t = float(t)
        state = DynamicState.from_vector(y)
        load_state = state.load

        # 1) поршни: view над состоянием штанги
        piston_a, piston_b = self._load.piston_states(load_state)

        # 2) клапаны
        cmd = self._valves.command(_t)

        # 3) насос -> давление линии питания
        P_a = max(0.0, state.pressure_a)
        P_b = max(0.0, state.pressure_b)
        Ps = self._pump.supply_pressure(
            [
                (self._cyl_a, cmd.area_a, P_a),
                (self._cyl_b, cmd.area_b, P_b),
            ]
        )

        # 4) цилиндры
        resp_a = self._cyl_a.evaluate(
            supply_pressure_Pa=Ps,
            valve_area_m2=cmd.area_a,
            chamber_pressure_Pa=state.pressure_a,
            piston_position_m=piston_a.z,
            piston_velocity_m_s=piston_a.zdot,
        )
        resp_b = self._cyl_b.evaluate(
            supply_pressure_Pa=Ps,
            valve_area_m2=cmd.area_b,
            chamber_pressure_Pa=state.pressure_b,
            piston_position_m=piston_b.z,
            piston_velocity_m_s=piston_b.zdot,
        )

        # 5) штанга
        dz, dzdot, dtheta, dthetadot = self._load.derivatives(load_state, resp_a.force_N, resp_b.force_N)

        dy = np.array(
            [
                dz,
                dzdot,
                dtheta,
                dthetadot,
                resp_a.pressure_rate,
                resp_b.pressure_rate,
            ],
            dtype=np.float64,
        )
        diag = StepDiagnostics(
            t=_t,
            load=load_state,
            piston_a=piston_a,
            piston_b=piston_b,
            valves=cmd,
            supply_pressure=float(Ps),
            cyl_a=resp_a,
            cyl_b=resp_b,
        )
        return dy, diag

    def rhs(self, t: float, y: np.ndarray) -> np.ndarray:
        dy, _ = self.evaluate(t, y)
        return dy

    def __repr__(self) -> str:
        return f"RodDynamics(load={self._load!r}, valves={self._valves!r})"
