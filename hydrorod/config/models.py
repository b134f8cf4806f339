from __future__ import annotations

from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, Dict, Literal, Mapping, Tuple
import json

from hydrorod.core.units import G, LITRE
from hydrorod.core.validation import (
    ensure_finite,
    ensure_in_range,
    ensure_non_negative,
    ensure_number,
    ensure_positive,
)
from hydrorod.errors import ConfigurationError


SolverMethod = Literal["rk4", "rk45"]


@dataclass(frozen=True)
class SystemParams:
    """Параметры штанги и насоса (SystemParams: L, M, I, Qmax, C2, Fext)."""

    rod_length_m: float = 1.5               # L
    mass_kg: float = 2500.0                 # M
    inertia_kg_m2: float = 100.0            # I
    pump_flow_m3_s: float = 0.005           # Qmax, постоянный расход насоса
    leakage_m3_s_Pa: float = 3.0e-9         # C2, утечка ~ C2*P
    external_force_N: float | None = None   # Fext; None => -g*M (гравитация в центре)

    def __post_init__(self) -> None:
        ensure_positive(self.rod_length_m, "L")
        ensure_positive(self.mass_kg, "M")
        ensure_positive(self.inertia_kg_m2, "I")
        ensure_non_negative(self.pump_flow_m3_s, "Qmax")
        # C2 = 0 делает давление линии питания неопределённым при закрытых клапанах
        ensure_positive(self.leakage_m3_s_Pa, "C2")
        if self.external_force_N is not None:
            ensure_finite(self.external_force_N, "Fext")

    @property
    def Fext(self) -> float:
        if self.external_force_N is None:
            return -G * self.mass_kg
        return float(self.external_force_N)

    @property
    def half_length_m(self) -> float:
        return 0.5 * self.rod_length_m


@dataclass(frozen=True)
class FluidConfig:
    rho: float = 800.0              # kg/m^3
    bulk_modulus: float = 7.0e8     # Pa

    def __post_init__(self) -> None:
        ensure_positive(self.rho, "fluid.rho")
        ensure_positive(self.bulk_modulus, "fluid.bulk_modulus")


@dataclass(frozen=True)
class CylinderConfig:
    piston_area_m2: float = 1.0e-3
    dead_volume_m3: float = 1.0 * LITRE    # объём камеры + линии при z_i = 0
    min_volume_m3: float = 1.0e-6          # нижняя отсечка объёма для избежания сингулярностей
    cd: float = 0.61                       # коэффициент расхода клапана
    internal_leak_m3_s_Pa: float = 1.0e-12 # утечка камеры в бак ~ k*P

    def __post_init__(self) -> None:
        ensure_positive(self.piston_area_m2, "cylinder.piston_area_m2")
        ensure_positive(self.dead_volume_m3, "cylinder.dead_volume_m3")
        ensure_positive(self.min_volume_m3, "cylinder.min_volume_m3")
        ensure_in_range(self.cd, 0.0, 1.0, "cylinder.cd")
        ensure_non_negative(self.internal_leak_m3_s_Pa, "cylinder.internal_leak_m3_s_Pa")


@dataclass(frozen=True)
class ValveConfig:
    """Профиль клапана B на одном периоде; клапан A сдвинут на полпериода.

    "constant" режим держит оба сечения постоянными (area_a_m2 / area_b_m2).
    """

    mode: Literal["periodic", "constant"] = "periodic"
    times_s: Tuple[float, ...] = (0.0, 0.01, 0.02)
    areas_m2: Tuple[float, ...] = (0.0, 1.2e-5, 0.0)
    area_a_m2: float = 0.0
    area_b_m2: float = 0.0

    def __post_init__(self) -> None:
        if self.mode not in ("periodic", "constant"):
            raise ConfigurationError("valves.mode", f"must be 'periodic' or 'constant', got {self.mode!r}")
        if len(self.times_s) < 2 or len(self.times_s) != len(self.areas_m2):
            raise ConfigurationError(
                "valves.times_s",
                f"needs >= 2 breakpoints matching valves.areas_m2 ({len(self.times_s)} vs {len(self.areas_m2)})",
            )
        if self.times_s[0] != 0.0:
            raise ConfigurationError("valves.times_s", f"must start at 0, got {self.times_s[0]}")
        for t0, t1 in zip(self.times_s, self.times_s[1:]):
            if t1 <= t0:
                raise ConfigurationError("valves.times_s", "must be strictly increasing")
        for a in self.areas_m2:
            ensure_non_negative(a, "valves.areas_m2")
        ensure_non_negative(self.area_a_m2, "valves.area_a_m2")
        ensure_non_negative(self.area_b_m2, "valves.area_b_m2")

    @property
    def period_s(self) -> float:
        return float(self.times_s[-1])

    @property
    def max_area_m2(self) -> float:
        return float(max(self.areas_m2))


@dataclass(frozen=True)
class SolverConfig:
    dt: float = 1.0e-4
    t_end: float = 0.04
    method: SolverMethod = "rk4"

    # только для rk45
    rtol: float = 1.0e-6
    atol: float = 1.0e-9

    # кооперативные ограничения прогона
    max_steps: int = 10_000_000
    max_wall_time_s: float | None = None

    # |y_i| выше этого порога считается расходимостью (давления ~1e7 Па)
    divergence_limit: float = 1.0e10
    small_angle_limit_rad: float = 0.2

    def __post_init__(self) -> None:
        ensure_positive(self.dt, "dt")
        ensure_positive(self.t_end, "tEnd")
        if self.method not in ("rk4", "rk45"):
            raise ConfigurationError("solver.method", f"must be 'rk4' or 'rk45', got {self.method!r}")
        ensure_positive(self.rtol, "solver.rtol")
        ensure_positive(self.atol, "solver.atol")
        if self.max_steps < 1:
            raise ConfigurationError("solver.max_steps", f"must be >= 1, got {self.max_steps}")
        if self.max_wall_time_s is not None:
            ensure_positive(self.max_wall_time_s, "solver.max_wall_time_s")
        ensure_positive(self.divergence_limit, "solver.divergence_limit")
        ensure_positive(self.small_angle_limit_rad, "solver.small_angle_limit_rad")


@dataclass(frozen=True)
class InitialState:
    """Начальное состояние; по умолчанию покой и сброшенные давления."""

    z: float = 0.0
    zdot: float = 0.0
    theta: float = 0.0
    thetadot: float = 0.0
    pressure_a: float = 0.0
    pressure_b: float = 0.0

    def __post_init__(self) -> None:
        for f in fields(self):
            ensure_finite(getattr(self, f.name), f"initial.{f.name}")
        ensure_non_negative(self.pressure_a, "initial.pressure_a")
        ensure_non_negative(self.pressure_b, "initial.pressure_b")


# Плоские ключи из внешнего формата конфига -> (секция, поле)
_FLAT_KEYS: Dict[str, Tuple[str, str]] = {
    "L": ("system", "rod_length_m"),
    "M": ("system", "mass_kg"),
    "I": ("system", "inertia_kg_m2"),
    "Qmax": ("system", "pump_flow_m3_s"),
    "C2": ("system", "leakage_m3_s_Pa"),
    "Fext": ("system", "external_force_N"),
    "dt": ("solver", "dt"),
    "tEnd": ("solver", "t_end"),
}

_SECTIONS: Dict[str, type] = {
    "system": SystemParams,
    "fluid": FluidConfig,
    "cylinder_a": CylinderConfig,
    "cylinder_b": CylinderConfig,
    "valves": ValveConfig,
    "solver": SolverConfig,
    "initial": InitialState,
}

# Поля, которые не являются float
_NON_FLOAT_FIELDS = {"mode", "method"}


def _coerce_section(section: str, cls: type, raw: Mapping[str, Any]) -> Dict[str, Any]:
    if not isinstance(raw, Mapping):
        raise ConfigurationError(section, f"must be a mapping, got {type(raw).__name__}")

    known = {f.name for f in fields(cls)}
    out: Dict[str, Any] = {}
    for key, value in raw.items():
        name = f"{section}.{key}"
        if key not in known:
            raise ConfigurationError(name, "is not a recognized option")
        if key in ("times_s", "areas_m2"):
            if not isinstance(value, (list, tuple)):
                raise ConfigurationError(name, f"must be a list of numbers, got {value!r}")
            out[key] = tuple(ensure_number(v, name) for v in value)
        elif key == "max_steps":
            steps = ensure_number(value, name)
            if not steps.is_integer():
                raise ConfigurationError(name, f"must be an integer, got {value!r}")
            out[key] = int(steps)
        elif key in ("max_wall_time_s", "external_force_N"):
            out[key] = None if value is None else ensure_number(value, name)
        elif key in _NON_FLOAT_FIELDS:
            out[key] = value
        else:
            out[key] = ensure_number(value, name)
    return out


@dataclass(frozen=True)
class SimulationConfig:
    system: SystemParams = SystemParams()
    fluid: FluidConfig = FluidConfig()
    cylinder_a: CylinderConfig = CylinderConfig()
    cylinder_b: CylinderConfig = CylinderConfig()
    valves: ValveConfig = ValveConfig()
    solver: SolverConfig = SolverConfig()
    initial: InitialState = InitialState()

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "SimulationConfig":
        """Собрать конфиг из словаря.

        Принимает плоские ключи {L, M, I, Qmax, C2, Fext, dt, tEnd} и
        вложенные секции (fluid, cylinder, cylinder_a, cylinder_b, valves,
        solver, initial). Ключ "cylinder" задаёт оба цилиндра сразу,
        cylinder_a / cylinder_b переопределяют его поля.
        """

        if not isinstance(data, Mapping):
            raise ConfigurationError("config", f"must be a mapping, got {type(data).__name__}")

        sections: Dict[str, Dict[str, Any]] = {k: {} for k in _SECTIONS}

        shared_cyl = data.get("cylinder")
        if shared_cyl is not None:
            coerced = _coerce_section("cylinder", CylinderConfig, shared_cyl)
            sections["cylinder_a"].update(coerced)
            sections["cylinder_b"].update(coerced)

        for key, value in data.items():
            if key == "cylinder":
                continue
            if key in _FLAT_KEYS:
                section, attr = _FLAT_KEYS[key]
                if key == "Fext" and value is None:
                    sections[section][attr] = None
                else:
                    sections[section][attr] = ensure_number(value, key)
            elif key in _SECTIONS:
                sections[key].update(_coerce_section(key, _SECTIONS[key], value))
            else:
                raise ConfigurationError(key, "is not a recognized option")

        built = {name: _SECTIONS[name](**kwargs) for name, kwargs in sections.items()}
        return cls(**built)

    def with_solver(self, **changes: Any) -> "SimulationConfig":
        return replace(self, solver=replace(self.solver, **changes))

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {}
        for f in fields(self):
            section = getattr(self, f.name)
            out[f.name] = {sf.name: getattr(section, sf.name) for sf in fields(section)}
        return out


def load_config(path: str | Path) -> SimulationConfig:
    p = Path(path)
    try:
        text = p.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise ConfigurationError(str(p), f"cannot be read: {e}") from e
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise ConfigurationError(str(p), f"is not valid JSON: {e}") from e
    return SimulationConfig.from_mapping(data)
