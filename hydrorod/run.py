#!/usr/bin/env python
"""
Run the two-cylinder rod simulation and (optionally) save the trace to HDF5.

Usage:
    python -m hydrorod.run [--config cfg.json] [--dt 1e-4] [--t-end 0.04] [--out out_trace]

Output (with --out):
    <out>/trace.h5          trace columns, one dataset per signal
    <out>/runs_meta.jsonl   run metadata
"""

from __future__ import annotations

import argparse
import logging
import sys
from typing import List, Optional

import numpy as np

from hydrorod.config import SimulationConfig, load_config
from hydrorod.core.units import BAR, LITRE_PER_MIN, MM2
from hydrorod.errors import ConfigurationError, SimulationAborted, SimulationBudgetExceeded
from hydrorod.integrator import simulate
from hydrorod.logger import H5TraceWriter, RunMeta
from hydrorod.trace import SimulationTrace

logger = logging.getLogger(__name__)


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Simulate a rigid rod carried by two hydraulic cylinders",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Default scenario (two valve periods)
  python -m hydrorod.run

  # Longer run with adaptive solver, saved to HDF5
  python -m hydrorod.run --t-end 0.5 --method rk45 --out out_trace

  # Parameters from JSON ({"L": 1.5, "M": 2500, "dt": 1e-4, ...})
  python -m hydrorod.run --config rod.json
        """,
    )
    parser.add_argument("--config", type=str, default=None, help="JSON config file")
    parser.add_argument("--dt", type=float, default=None, help="Integration step, s")
    parser.add_argument("--t-end", type=float, default=None, help="Simulation duration, s")
    parser.add_argument("--method", choices=("rk4", "rk45"), default=None, help="ODE solver")
    parser.add_argument("--out", type=str, default=None, help="Output directory for trace.h5")
    parser.add_argument("--quiet", action="store_true", help="Only warnings and errors")
    return parser.parse_args(argv)


def build_config(args: argparse.Namespace) -> SimulationConfig:
    cfg = load_config(args.config) if args.config else SimulationConfig()
    changes = {}
    if args.dt is not None:
        changes["dt"] = args.dt
    if args.t_end is not None:
        changes["t_end"] = args.t_end
    if args.method is not None:
        changes["method"] = args.method
    return cfg.with_solver(**changes) if changes else cfg


def summarize(trace: SimulationTrace, cfg: SimulationConfig | None = None) -> None:
    if len(trace) == 0:
        return
    if cfg is not None:
        logger.info(
            "pump %.1f L/min, valve area up to %.1f mm2",
            cfg.system.pump_flow_m3_s / LITRE_PER_MIN,
            cfg.valves.max_area_m2 / MM2,
        )
    arrays = trace.to_arrays()
    logger.info("samples: %d, t_end=%.4f s", len(trace), float(arrays["t"][-1]))
    logger.info("z final: %.5f m", float(arrays["z"][-1]))
    logger.info("theta range: [%.5f, %.5f] rad", float(np.min(arrays["theta"])), float(np.max(arrays["theta"])))
    logger.info(
        "peak pressure: A=%.1f bar, B=%.1f bar, supply=%.1f bar",
        float(np.max(arrays["p_a"])) / BAR,
        float(np.max(arrays["p_b"])) / BAR,
        float(np.max(arrays["p_supply"])) / BAR,
    )
    if any(trace.pressure_clamps.values()):
        logger.info("pressure clamps: %s", trace.pressure_clamps)


def write_trace(out_dir: str, cfg: SimulationConfig, trace: SimulationTrace, status: str) -> None:
    writer = H5TraceWriter(out_dir)
    try:
        writer.log_run(
            RunMeta(
                run_id=0,
                method=cfg.solver.method,
                dt=cfg.solver.dt,
                t_end=cfg.solver.t_end,
                n_samples=len(trace),
                status=status,
                pressure_clamps=dict(trace.pressure_clamps),
                config=cfg.to_dict(),
            ),
            trace,
        )
    finally:
        writer.close()
    logger.info("trace written to %s", writer.h5_path)


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.WARNING if args.quiet else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        cfg = build_config(args)
    except ConfigurationError as e:
        logger.error("configuration error: %s", e)
        return 1

    try:
        trace = simulate(cfg)
        status = "ok"
    except SimulationAborted as e:
        logger.error("simulation aborted at t=%.6g: %s", e.t, e)
        if args.out and len(e.trace):
            status = "budget_exceeded" if isinstance(e, SimulationBudgetExceeded) else "diverged"
            write_trace(args.out, cfg, e.trace, status)
        return 2

    summarize(trace, cfg)
    if args.out:
        write_trace(args.out, cfg, trace, status)
    return 0


if __name__ == "__main__":
    sys.exit(main())
