"""Интегратор: продвигает вектор [z, zdot, theta, thetadot, p_a, p_b] до tEnd.

- rk4: фиксированный шаг, t_k = k*dt, ceil(tEnd/dt) целых шагов. Детерминирован
  побитово.
- rk45: scipy.integrate.solve_ivp с заданными rtol/atol, выборка на той же
  сетке k*dt. Детерминирован для фиксированных допусков.

Прогон прерывается NumericDivergence (нефинитное или заведомо нефизичное
состояние) или SimulationBudgetExceeded (лимит шагов / wall-clock). В обоих
случаях исключение несёт последний валидный trace.
"""

from __future__ import annotations

from typing import Callable
import logging
import math
import time
import warnings

import numpy as np
from scipy.integrate import solve_ivp

from hydrorod.config.models import SimulationConfig, SolverConfig
from hydrorod.errors import NumericDivergence, PressureRangeWarning, SimulationBudgetExceeded
from hydrorod.physics.dynamics import PRESSURE_INDEX, DynamicState, RodDynamics, StepDiagnostics
from hydrorod.trace import SimulationTrace, TraceRecord

logger = logging.getLogger(__name__)

Rhs = Callable[[float, np.ndarray], np.ndarray]


def rk4_step(rhs: Rhs, t: float, y: np.ndarray, h: float) -> np.ndarray:
    k1 = rhs(t, y)
    k2 = rhs(t + 0.5 * h, y + 0.5 * h * k1)
    k3 = rhs(t + 0.5 * h, y + 0.5 * h * k2)
    k4 = rhs(t + h, y + h * k3)
    return y + (h / 6.0) * (k1 + 2.0 * k2 + 2.0 * k3 + k4)


def step_count(dt: float, t_end: float) -> int:
    # 0.04/1e-4 в float даёт 399.999..., поэтому допуск перед ceil
    return max(1, int(math.ceil(t_end / dt - 1e-9)))


def _record(diag: StepDiagnostics) -> TraceRecord:
    return TraceRecord(
        t=diag.t,
        load=diag.load,
        piston_a=diag.piston_a,
        piston_b=diag.piston_b,
        force_a=diag.force_a,
        force_b=diag.force_b,
        pressure_a=diag.cyl_a.pressure_Pa,
        pressure_b=diag.cyl_b.pressure_Pa,
        supply_pressure=diag.supply_pressure,
        area_a=diag.valves.area_a,
        area_b=diag.valves.area_b,
    )


class Integrator:
    def __init__(self, dynamics: RodDynamics, solver: SolverConfig | None = None) -> None:
        self._dyn = dynamics
        self._cfg = solver or SolverConfig()
        self._warned_pressure = {side: False for side in PRESSURE_INDEX}
        self._warned_angle = False

    @property
    def solver(self) -> SolverConfig:
        return self._cfg

    def run(self, y0: np.ndarray) -> SimulationTrace:
        y = np.asarray(y0, dtype=np.float64).copy()
        DynamicState.from_vector(y)  # проверка формы

        trace = SimulationTrace()
        self._warned_pressure = {side: False for side in PRESSURE_INDEX}
        self._warned_angle = False

        self._check_finite(0.0, y, trace)
        self._clamp_pressures(0.0, y, trace)
        _, diag = self._dyn.evaluate(0.0, y)
        self._accept(diag, trace)

        if self._cfg.method == "rk45":
            self._run_rk45(y, trace)
        else:
            self._run_rk4(y, trace)

        logger.debug("run finished: %d samples, clamps=%s", len(trace), trace.pressure_clamps)
        return trace.freeze()

    # ---------- fixed step ----------

    def _run_rk4(self, y: np.ndarray, trace: SimulationTrace) -> None:
        cfg = self._cfg
        dt = float(cfg.dt)
        n = step_count(dt, cfg.t_end)
        if n > cfg.max_steps:
            raise SimulationBudgetExceeded(
                f"{n} steps requested, max_steps={cfg.max_steps}", t=0.0, trace=trace.freeze()
            )

        started = time.perf_counter()
        for k in range(n):
            t = k * dt
            t_next = (k + 1) * dt
            with np.errstate(over="ignore", invalid="ignore"):
                y = rk4_step(self._dyn.rhs, t, y, dt)
            self._check_finite(t_next, y, trace)
            self._clamp_pressures(t_next, y, trace)

            _, diag = self._dyn.evaluate(t_next, y)
            self._accept(diag, trace)
            self._check_wall_clock(started, t_next, trace)

    # ---------- adaptive ----------

    def _run_rk45(self, y: np.ndarray, trace: SimulationTrace) -> None:
        cfg = self._cfg
        dt = float(cfg.dt)
        n = step_count(dt, cfg.t_end)
        t_eval = np.arange(n + 1, dtype=np.float64) * dt
        started = time.perf_counter()
        calls = 0

        def fun(t: float, yy: np.ndarray) -> np.ndarray:
            nonlocal calls
            calls += 1
            if calls > cfg.max_steps:
                raise SimulationBudgetExceeded(
                    f"rhs evaluations exceeded max_steps={cfg.max_steps}", t=float(t), trace=trace.freeze()
                )
            self._check_wall_clock(started, float(t), trace)
            return self._dyn.rhs(t, yy)

        with np.errstate(over="ignore", invalid="ignore"):
            sol = solve_ivp(
                fun,
                (0.0, float(t_eval[-1])),
                y,
                method="RK45",
                t_eval=t_eval,
                rtol=cfg.rtol,
                atol=cfg.atol,
                max_step=dt,
            )

        for j in range(1, sol.t.shape[0]):
            t_j = float(sol.t[j])
            y_j = np.array(sol.y[:, j], dtype=np.float64)
            self._check_finite(t_j, y_j, trace)
            self._clamp_pressures(t_j, y_j, trace)
            _, diag = self._dyn.evaluate(t_j, y_j)
            self._accept(diag, trace)

        if not sol.success:
            t_fail = float(sol.t[-1]) if sol.t.shape[0] else 0.0
            raise NumericDivergence(f"solve_ivp failed at t={t_fail}: {sol.message}", t=t_fail, trace=trace.freeze())

    # ---------- helpers ----------

    def _accept(self, diag: StepDiagnostics, trace: SimulationTrace) -> None:
        if not self._warned_angle and not self._dyn.load.is_small_angle(
            diag.load.theta, self._cfg.small_angle_limit_rad
        ):
            self._warned_angle = True
            logger.warning(
                "t=%.6f: |theta|=%.4f rad exceeds small-angle limit %.4f rad; rod model loses fidelity",
                diag.t,
                abs(diag.load.theta),
                self._cfg.small_angle_limit_rad,
            )
        trace.append(_record(diag))

    def _clamp_pressures(self, t: float, y: np.ndarray, trace: SimulationTrace) -> None:
        # давление в камере не бывает отрицательным
        for side, idx in PRESSURE_INDEX.items():
            if y[idx] < 0.0:
                self._note_clamp(side, t, float(y[idx]), trace)
                y[idx] = 0.0

    def _note_clamp(self, side: str, t: float, value: float, trace: SimulationTrace) -> None:
        trace.note_pressure_clamp(side)
        if self._warned_pressure[side]:
            return
        self._warned_pressure[side] = True
        logger.warning("cylinder %s: chamber pressure %.3e Pa < 0 at t=%.6f; clamped to 0", side, value, t)
        warnings.warn(
            f"cylinder {side}: chamber pressure {value:.3e} Pa < 0 at t={t:.6f}; clamped to 0",
            PressureRangeWarning,
            stacklevel=3,
        )

    def _check_finite(self, t: float, y: np.ndarray, trace: SimulationTrace) -> None:
        limit = self._cfg.divergence_limit
        if not np.all(np.isfinite(y)):
            bad = [i for i, v in enumerate(y) if not math.isfinite(v)]
            raise NumericDivergence(
                f"non-finite state components {bad} at t={t:.6g}; reduce dt", t=t, trace=trace.freeze()
            )
        if np.any(np.abs(y) > limit):
            raise NumericDivergence(
                f"state magnitude {float(np.max(np.abs(y))):.3e} exceeds divergence limit {limit:.1e} "
                f"at t={t:.6g}; reduce dt",
                t=t,
                trace=trace.freeze(),
            )

    def _check_wall_clock(self, started: float, t: float, trace: SimulationTrace) -> None:
        budget = self._cfg.max_wall_time_s
        if budget is not None and time.perf_counter() - started > budget:
            raise SimulationBudgetExceeded(
                f"wall-clock budget {budget}s exceeded at t={t:.6g}", t=t, trace=trace.freeze()
            )


def initial_vector(cfg: SimulationConfig) -> np.ndarray:
    s = cfg.initial
    return DynamicState(
        z=s.z,
        zdot=s.zdot,
        theta=s.theta,
        thetadot=s.thetadot,
        pressure_a=s.pressure_a,
        pressure_b=s.pressure_b,
    ).to_vector()


def simulate(cfg: SimulationConfig | None = None) -> SimulationTrace:
    cfg = cfg or SimulationConfig()
    dyn = RodDynamics.from_config(cfg)
    logger.info(
        "simulate: method=%s dt=%g tEnd=%g valves=%s",
        cfg.solver.method,
        cfg.solver.dt,
        cfg.solver.t_end,
        cfg.valves.mode,
    )
    return Integrator(dyn, cfg.solver).run(initial_vector(cfg))
