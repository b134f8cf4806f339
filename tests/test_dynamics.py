import numpy as np
import pytest

from hydrorod.config import SimulationConfig, SystemParams
from hydrorod.physics.dynamics import DynamicState, RodDynamics
from hydrorod.physics.hydraulics import HydraulicCylinder
from hydrorod.physics.load_model import MechanicalLoad
from hydrorod.physics.pump import Pump
from hydrorod.physics.valves import ConstantValves


@pytest.fixture()
def dynamics() -> RodDynamics:
    return RodDynamics.from_config(SimulationConfig())


def test_state_vector_round_trip():
    s = DynamicState(z=0.1, zdot=-0.2, theta=0.01, thetadot=0.3, pressure_a=1e5, pressure_b=2e5)
    y = s.to_vector()
    assert y.shape == (6,)
    assert DynamicState.from_vector(y) == s
    assert s.load.theta == 0.01


def test_state_vector_shape_checked():
    with pytest.raises(ValueError):
        DynamicState.from_vector(np.zeros(4))


def test_rhs_at_rest(dynamics):
    y = np.zeros(6)
    dy, diag = dynamics.evaluate(0.0, y)

    assert dy.shape == (6,)
    assert np.array_equal(dynamics.rhs(0.0, y), dy)
    assert dy[0] == 0.0
    assert dy[1] == pytest.approx(-9.81)
    assert dy[2] == 0.0
    assert dy[3] == 0.0
    # t=0: клапан A полностью открыт, B закрыт
    assert diag.valves.area_a == pytest.approx(1.2e-5)
    assert diag.valves.area_b == 0.0
    assert dy[4] > 0.0
    assert dy[5] == 0.0
    assert 0.0 < diag.supply_pressure < 0.005 / 3e-9


def test_diagnostics_follow_state(dynamics):
    y = DynamicState(z=-0.01, zdot=-0.1, theta=0.02, thetadot=0.0, pressure_a=1e6, pressure_b=3e6).to_vector()
    dy, diag = dynamics.evaluate(0.005, y)
    assert diag.t == 0.005
    assert diag.piston_a.z == pytest.approx(-0.01 - 0.02 * 0.75)
    assert diag.piston_b.z == pytest.approx(-0.01 + 0.02 * 0.75)
    assert diag.force_a == pytest.approx(1e3)
    assert diag.force_b == pytest.approx(3e3)
    assert dy[3] == pytest.approx(0.75 * 2e3 / 100.0)
    assert diag.pressure_clamped == (False, False)


def test_equal_forces_keep_angle():
    dyn = RodDynamics(
        load=MechanicalLoad(SystemParams()),
        pump=Pump(),
        cyl_a=HydraulicCylinder("a"),
        cyl_b=HydraulicCylinder("b"),
        valves=ConstantValves(5e-6, 5e-6),
    )
    y = DynamicState(z=0.0, zdot=-0.05, theta=0.0, thetadot=0.0, pressure_a=4e5, pressure_b=4e5).to_vector()
    dy = dyn.rhs(0.0, y)
    assert dy[2] == 0.0
    assert dy[3] == 0.0
    assert dy[4] == dy[5]
