import pytest

from hydrorod.config import SystemParams
from hydrorod.core.types import RigidLoadState
from hydrorod.physics.load_model import MechanicalLoad


@pytest.fixture()
def load() -> MechanicalLoad:
    return MechanicalLoad(SystemParams())


def test_gravity_only(load):
    zddot, thetaddot = load.accelerations(0.0, 0.0)
    assert zddot == pytest.approx(-9.81)
    assert thetaddot == 0.0


def test_balanced_forces_hold_load(load):
    F = 9.81 * 2500.0 / 2.0
    zddot, thetaddot = load.accelerations(F, F)
    assert zddot == pytest.approx(0.0, abs=1e-12)
    assert thetaddot == 0.0


def test_force_difference_rotates_rod(load):
    _, thetaddot = load.accelerations(0.0, 100.0)
    assert thetaddot == pytest.approx(0.75)
    _, thetaddot = load.accelerations(100.0, 0.0)
    assert thetaddot == pytest.approx(-0.75)


def test_derivatives(load):
    s = RigidLoadState(z=0.1, zdot=0.2, theta=0.01, thetadot=0.5)
    dz, dzdot, dtheta, dthetadot = load.derivatives(s, 0.0, 0.0)
    assert dz == 0.2
    assert dzdot == pytest.approx(-9.81)
    assert dtheta == 0.5
    assert dthetadot == 0.0


def test_piston_geometry(load):
    s = RigidLoadState(z=0.1, zdot=0.2, theta=0.01, thetadot=0.5)
    a, b = load.piston_states(s)
    assert a.z == pytest.approx(0.0925)
    assert b.z == pytest.approx(0.1075)
    assert a.zdot == pytest.approx(-0.175)
    assert b.zdot == pytest.approx(0.575)
    assert (a.z + b.z) / 2.0 == pytest.approx(s.z)
    assert b.z - a.z == pytest.approx(s.theta * 1.5)


def test_small_angle(load):
    assert load.is_small_angle(0.1, 0.2)
    assert load.is_small_angle(-0.2, 0.2)
    assert not load.is_small_angle(-0.3, 0.2)
