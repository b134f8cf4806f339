from __future__ import annotations
from dataclasses import asdict, dataclass
from typing import Any, Dict
from pathlib import Path
import json
import h5py
import numpy as np

from .trace import SimulationTrace


@dataclass
class RunMeta:
    run_id: int
    method: str
    dt: float
    t_end: float
    n_samples: int
    status: str                      # "ok" | "diverged" | "budget_exceeded"
    pressure_clamps: Dict[str, int]
    config: Dict[str, Any]


class H5TraceWriter:
    """Внешний sink для SimulationTrace: HDF5 + jsonl с метаданными прогонов."""

    def __init__(self, out_dir: str | Path):
        self.out_dir = Path(out_dir)
        self.out_dir.mkdir(parents=True, exist_ok=True)

        self.h5_path = self.out_dir / "trace.h5"
        self.meta_path = self.out_dir / "runs_meta.jsonl"

        self.h5 = h5py.File(self.h5_path, "w")
        self.grp = self.h5.create_group("runs")

        self._meta_f = open(self.meta_path, "w", encoding="utf-8")

    def log_run(self, meta: RunMeta, trace: SimulationTrace):
        rid = f"run_{meta.run_id:06d}"
        g = self.grp.create_group(rid)

        for k, arr in trace.to_arrays().items():
            g.create_dataset(k, data=np.asarray(arr, dtype=np.float64), compression="gzip", compression_opts=5)

        g.attrs["method"] = meta.method
        g.attrs["dt"] = meta.dt
        g.attrs["t_end"] = meta.t_end
        g.attrs["n_samples"] = meta.n_samples
        g.attrs["status"] = meta.status
        g.attrs["pressure_clamps_json"] = json.dumps(meta.pressure_clamps, ensure_ascii=False)
        g.attrs["config_json"] = json.dumps(meta.config, ensure_ascii=False)

        self._meta_f.write(json.dumps(asdict(meta), ensure_ascii=False) + "\n")
        self._meta_f.flush()

    def close(self):
        self._meta_f.close()
        self.h5.close()
