import numpy as np
import pytest

from hydrorod.config import ValveConfig
from hydrorod.physics.valves import ConstantValves, RepeatingSequence, ValveSchedule, build_valves


@pytest.fixture()
def schedule() -> ValveSchedule:
    return ValveSchedule.from_config(ValveConfig())


def test_valve_b_profile(schedule):
    assert schedule.period == pytest.approx(0.02)
    assert schedule.area_b(0.0) == pytest.approx(0.0)
    assert schedule.area_b(0.005) == pytest.approx(6e-6)
    assert schedule.area_b(0.01) == pytest.approx(1.2e-5)
    assert schedule.area_b(0.015) == pytest.approx(6e-6)
    # следующий период
    assert schedule.area_b(0.03) == pytest.approx(1.2e-5)


def test_valves_in_antiphase(schedule):
    assert schedule.area_a(0.0) == pytest.approx(1.2e-5)
    assert schedule.area_a(0.01) == pytest.approx(0.0, abs=1e-18)

    for t in np.linspace(0.0, 0.04, 81):
        cmd = schedule.command(t)
        assert 0.0 <= cmd.area_a <= 1.2e-5
        assert 0.0 <= cmd.area_b <= 1.2e-5
        assert cmd.area_a + cmd.area_b == pytest.approx(1.2e-5, abs=1e-12)


def test_a_is_b_shifted_by_half_period(schedule):
    for t in np.linspace(0.0, 0.03, 37):
        assert schedule.area_a(t) == pytest.approx(schedule.area_b(t + 0.01), abs=1e-15)


def test_area_by_side(schedule):
    assert schedule.area(0.005, "a") == pytest.approx(schedule.area_a(0.005))
    assert schedule.area(0.005, "b") == pytest.approx(schedule.area_b(0.005))
    with pytest.raises(ValueError):
        schedule.area(0.005, "c")
    with pytest.raises(ValueError):
        schedule.area(0.005, None)
    assert schedule.area(0.005, " B ") == pytest.approx(schedule.area_b(0.005))


def test_sequence_never_negative():
    seq = RepeatingSequence((0.0, 1.0, 2.0), (1.0, -1.0, 1.0))
    assert seq(0.25) == pytest.approx(0.5)
    assert seq(1.0) == 0.0
    assert seq(0.75) == 0.0


def test_sequence_rejects_bad_breakpoints():
    with pytest.raises(ValueError):
        RepeatingSequence((0.0,), (1.0,))
    with pytest.raises(ValueError):
        RepeatingSequence((0.1, 0.2), (0.0, 1.0))
    with pytest.raises(ValueError):
        RepeatingSequence((0.0, 0.2, 0.1), (0.0, 1.0, 0.0))


def test_constant_valves():
    v = ConstantValves(1e-6, 2e-6)
    assert v.command(0.0) == v.command(123.0)
    assert v.area(0.5, "b") == pytest.approx(2e-6)
    assert ConstantValves.closed().command(0.0).area_a == 0.0
    with pytest.raises(ValueError):
        ConstantValves(-1e-6, 0.0)


def test_build_valves_by_mode():
    assert isinstance(build_valves(ValveConfig()), ValveSchedule)
    v = build_valves(ValveConfig(mode="constant", area_a_m2=1e-6))
    assert isinstance(v, ConstantValves)
    assert v.area(0.0, "a") == pytest.approx(1e-6)
