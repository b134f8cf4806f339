import json

import pytest

from hydrorod.config import SimulationConfig, SolverConfig, SystemParams, ValveConfig, load_config
from hydrorod.errors import ConfigurationError


def test_defaults_match_reference_scenario():
    cfg = SimulationConfig()
    sp = cfg.system
    assert sp.rod_length_m == pytest.approx(1.5)
    assert sp.mass_kg == pytest.approx(2500.0)
    assert sp.inertia_kg_m2 == pytest.approx(100.0)
    assert sp.pump_flow_m3_s == pytest.approx(0.005)
    assert sp.leakage_m3_s_Pa == pytest.approx(3e-9)
    assert cfg.solver.dt == pytest.approx(1e-4)
    assert cfg.solver.t_end == pytest.approx(0.04)
    assert cfg.valves.period_s == pytest.approx(0.02)
    assert cfg.valves.max_area_m2 == pytest.approx(1.2e-5)


def test_fext_defaults_to_gravity():
    assert SystemParams(mass_kg=1000.0).Fext == pytest.approx(-9810.0)
    assert SystemParams(external_force_N=0.0).Fext == 0.0


@pytest.mark.parametrize(
    "kwargs, field",
    [
        ({"mass_kg": 0.0}, "M"),
        ({"mass_kg": -1.0}, "M"),
        ({"rod_length_m": 0.0}, "L"),
        ({"inertia_kg_m2": -5.0}, "I"),
        ({"leakage_m3_s_Pa": 0.0}, "C2"),
    ],
)
def test_system_params_reject_unphysical(kwargs, field):
    with pytest.raises(ConfigurationError) as exc:
        SystemParams(**kwargs)
    assert exc.value.field == field


def test_solver_rejects_bad_step():
    with pytest.raises(ConfigurationError) as exc:
        SolverConfig(dt=0.0)
    assert exc.value.field == "dt"
    with pytest.raises(ConfigurationError):
        SolverConfig(method="euler")


def test_valve_config_validation():
    with pytest.raises(ConfigurationError):
        ValveConfig(times_s=(0.0, 0.01), areas_m2=(0.0,))
    with pytest.raises(ConfigurationError):
        ValveConfig(times_s=(0.0, 0.01, 0.01), areas_m2=(0.0, 1e-5, 0.0))
    with pytest.raises(ConfigurationError):
        ValveConfig(areas_m2=(0.0, -1e-5, 0.0))


class TestFromMapping:
    def test_flat_keys(self):
        cfg = SimulationConfig.from_mapping({"L": 2.0, "M": 1000, "dt": 5e-5, "tEnd": 0.01, "Fext": 0.0})
        assert cfg.system.rod_length_m == 2.0
        assert cfg.system.mass_kg == 1000.0
        assert cfg.system.Fext == 0.0
        assert cfg.solver.dt == pytest.approx(5e-5)
        assert cfg.solver.t_end == pytest.approx(0.01)

    def test_sections(self):
        cfg = SimulationConfig.from_mapping(
            {
                "cylinder": {"piston_area_m2": 2e-3},
                "cylinder_b": {"cd": 0.7},
                "valves": {"mode": "constant", "area_a_m2": 1e-6, "area_b_m2": 2e-6},
                "solver": {"method": "rk45", "max_steps": 1000},
            }
        )
        assert cfg.cylinder_a.piston_area_m2 == pytest.approx(2e-3)
        assert cfg.cylinder_b.piston_area_m2 == pytest.approx(2e-3)
        assert cfg.cylinder_a.cd == pytest.approx(0.61)
        assert cfg.cylinder_b.cd == pytest.approx(0.7)
        assert cfg.valves.mode == "constant"
        assert cfg.solver.method == "rk45"
        assert cfg.solver.max_steps == 1000

    def test_unknown_key(self):
        with pytest.raises(ConfigurationError) as exc:
            SimulationConfig.from_mapping({"mass": 10.0})
        assert exc.value.field == "mass"

    def test_unknown_section_key(self):
        with pytest.raises(ConfigurationError) as exc:
            SimulationConfig.from_mapping({"solver": {"step": 1e-4}})
        assert exc.value.field == "solver.step"

    def test_missing_value(self):
        with pytest.raises(ConfigurationError) as exc:
            SimulationConfig.from_mapping({"M": None})
        assert exc.value.field == "M"

    def test_negative_mass(self):
        with pytest.raises(ConfigurationError) as exc:
            SimulationConfig.from_mapping({"M": -1})
        assert exc.value.field == "M"

    @pytest.mark.parametrize(
        "data, field",
        [
            ({"valves": {"times_s": 0.02}}, "valves.times_s"),
            ({"valves": {"areas_m2": "0.0, 1e-5"}}, "valves.areas_m2"),
            ({"valves": {"times_s": [0.0, "x"]}}, "valves.times_s"),
            ({"solver": {"max_steps": 10.5}}, "solver.max_steps"),
            ({"solver": {"max_steps": "many"}}, "solver.max_steps"),
        ],
    )
    def test_malformed_section_values(self, data, field):
        with pytest.raises(ConfigurationError) as exc:
            SimulationConfig.from_mapping(data)
        assert exc.value.field == field

    def test_integral_max_steps_accepted(self):
        assert SimulationConfig.from_mapping({"solver": {"max_steps": 2000.0}}).solver.max_steps == 2000


def test_with_solver_and_to_dict():
    cfg = SimulationConfig().with_solver(dt=1e-3, method="rk45")
    assert cfg.solver.dt == pytest.approx(1e-3)
    assert cfg.solver.method == "rk45"

    d = cfg.to_dict()
    assert d["solver"]["dt"] == pytest.approx(1e-3)
    assert d["system"]["mass_kg"] == pytest.approx(2500.0)
    json.dumps(d)


def test_load_config(tmp_path):
    p = tmp_path / "rod.json"
    p.write_text(json.dumps({"M": 1200.0, "tEnd": 0.02}), encoding="utf-8")
    cfg = load_config(p)
    assert cfg.system.mass_kg == pytest.approx(1200.0)
    assert cfg.solver.t_end == pytest.approx(0.02)


def test_load_config_bad_json(tmp_path):
    p = tmp_path / "broken.json"
    p.write_text("{not json", encoding="utf-8")
    with pytest.raises(ConfigurationError):
        load_config(p)


def test_load_config_missing_file(tmp_path):
    p = tmp_path / "nope.json"
    with pytest.raises(ConfigurationError) as exc:
        load_config(p)
    assert exc.value.field == str(p)


def test_load_config_not_utf8(tmp_path):
    p = tmp_path / "latin1.json"
    p.write_bytes(b'{"M": "\xff"}')
    with pytest.raises(ConfigurationError):
        load_config(p)
