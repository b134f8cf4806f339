"""SimulationTrace: append-only история прогона.

Владелец — интегратор; после завершения прогона trace замораживается и
отдаётся внешним потребителям (отчёты, HDF5, графики) как неизменяемый.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterator, List, Tuple

import numpy as np
import pandas as pd

from hydrorod.core.types import PistonState, RigidLoadState


@dataclass(frozen=True, slots=True)
class TraceRecord:
    t: float
    load: RigidLoadState
    piston_a: PistonState
    piston_b: PistonState
    force_a: float
    force_b: float
    pressure_a: float
    pressure_b: float
    supply_pressure: float
    area_a: float
    area_b: float


# имя колонки -> путь к значению в TraceRecord
COLUMNS: Dict[str, Tuple[str, ...]] = {
    "t": ("t",),
    "z": ("load", "z"),
    "zdot": ("load", "zdot"),
    "theta": ("load", "theta"),
    "thetadot": ("load", "thetadot"),
    "z_a": ("piston_a", "z"),
    "zdot_a": ("piston_a", "zdot"),
    "z_b": ("piston_b", "z"),
    "zdot_b": ("piston_b", "zdot"),
    "F_a": ("force_a",),
    "F_b": ("force_b",),
    "p_a": ("pressure_a",),
    "p_b": ("pressure_b",),
    "p_supply": ("supply_pressure",),
    "area_a": ("area_a",),
    "area_b": ("area_b",),
}


def _pick(rec: TraceRecord, path: Tuple[str, ...]) -> float:
    obj: object = rec
    for attr in path:
        obj = getattr(obj, attr)
    return float(obj)  # type: ignore[arg-type]


class SimulationTrace:
    def __init__(self) -> None:
        self._records: List[TraceRecord] = []
        self._frozen = False
        self.pressure_clamps: Dict[str, int] = {"a": 0, "b": 0}

    @property
    def frozen(self) -> bool:
        return self._frozen

    def append(self, rec: TraceRecord) -> None:
        if self._frozen:
            raise RuntimeError("SimulationTrace is frozen; records can no longer be appended")
        if self._records and not rec.t > self._records[-1].t:
            raise ValueError(f"trace time must increase strictly: {rec.t} after {self._records[-1].t}")
        self._records.append(rec)

    def note_pressure_clamp(self, side: str) -> None:
        if self._frozen:
            raise RuntimeError("SimulationTrace is frozen")
        self.pressure_clamps[side] += 1

    def freeze(self) -> "SimulationTrace":
        self._frozen = True
        return self

    @property
    def records(self) -> Tuple[TraceRecord, ...]:
        return tuple(self._records)

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[TraceRecord]:
        return iter(tuple(self._records))

    def __getitem__(self, idx: int) -> TraceRecord:
        return self._records[idx]

    @property
    def last(self) -> TraceRecord | None:
        return self._records[-1] if self._records else None

    def column(self, name: str) -> np.ndarray:
        try:
            path = COLUMNS[name]
        except KeyError:
            raise KeyError(f"Unknown trace column: {name}; known: {', '.join(COLUMNS)}") from None
        return np.array([_pick(r, path) for r in self._records], dtype=np.float64)

    @property
    def t(self) -> np.ndarray:
        return self.column("t")

    @property
    def z(self) -> np.ndarray:
        return self.column("z")

    @property
    def zdot(self) -> np.ndarray:
        return self.column("zdot")

    @property
    def theta(self) -> np.ndarray:
        return self.column("theta")

    @property
    def thetadot(self) -> np.ndarray:
        return self.column("thetadot")

    def to_arrays(self) -> Dict[str, np.ndarray]:
        return {name: self.column(name) for name in COLUMNS}

    def to_dataframe(self) -> pd.DataFrame:
        arrays = self.to_arrays()
        df = pd.DataFrame(arrays)
        return df.set_index("t")

    def __repr__(self) -> str:
        span = f"t=[{self._records[0].t}, {self._records[-1].t}]" if self._records else "empty"
        return f"SimulationTrace(n={len(self._records)}, {span}, frozen={self._frozen})"
