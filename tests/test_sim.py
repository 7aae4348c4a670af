"""
Closed-loop tests: controller, actuator and plant together.
"""

# ruff:noqa:D103 pylint: disable=missing-function-docstring
from __future__ import annotations

import pytest

from numpy import allclose

from helm import Helm
from helm.plant import Actuator, Plant
from helm.sim import Record, simulate


def test_records():  # noqa:D103
    recs = list(simulate(Helm(), Plant(), Actuator(), 0.1, 1))
    assert len(recs) == 11
    assert recs[0] == (0, 0, 0, 0, 0)
    assert allclose([r.t for r in recs], [i / 10 for i in range(11)])
    assert all(isinstance(r, Record) for r in recs)


def test_record_format():  # noqa:D103
    line = Record(0.5, 1.25, 0, -2, 0.1 * 3).format()
    assert line.split("\t") == ["0.5", "1.25", "0", "-2", "0.3"]


@pytest.mark.parametrize("dt,final", [(0, 1), (-0.1, 1), (0.1, 0), (0.1, -1)])
def test_bad_interval(dt, final):  # noqa:D103
    with pytest.raises(ValueError):
        list(simulate(Helm(), Plant(), Actuator(), dt, final))


def test_proportional_only():  # noqa:D103
    # derivative on measurement: P alone never reacts to the setpoint
    recs = list(simulate(Helm().set_gains(5), Plant(), Actuator(), 0.1, 5))
    assert all(r.u == 0 for r in recs)


def test_converges():  # noqa:D103
    h = Helm().set_gains(1, 0.5, 0.5)
    recs = list(simulate(h, Plant(), Actuator(), 0.01, 80, r=2))
    last = recs[-1]
    assert last.y0 == pytest.approx(2, abs=1e-3)
    assert last.u == pytest.approx(2, abs=1e-3)


def _max_request(kt, upper=1.05, dt=0.01, final=60):
    h = Helm().set_gains(1, 1, kt=kt)
    plant = Plant()
    act = Actuator(upper=upper)
    h.approach()
    u = v = 0.0
    vmax = v
    for _ in range(int(final / dt)):
        v += h.step(dt, 1, u, v, plant.output)
        vmax = max(vmax, v)
        u = act(v)
        plant.advance(dt, u)
    return vmax, plant.output


def test_automatic_reset_limits_windup():  # noqa:D103
    plain, y_plain = _max_request(0)
    reset, y_reset = _max_request(5)
    assert plain > 1.5
    assert reset < 1.3
    assert y_plain == pytest.approx(1, abs=0.05)
    assert y_reset == pytest.approx(1, abs=0.05)


def test_blind_samples():  # noqa:D103
    # dropping every other sample still converges
    h = Helm().set_gains(1, 0.5).approach()
    plant = Plant()
    u = v = 0.0
    ys = []
    for i in range(8000):
        y = plant.output if i % 2 else None
        # dt is the time since the last sample actually used
        v += h.step(0.02, 1, u, v, y)
        u = v
        plant.advance(0.01, u)
        ys.append(plant.output)
    assert allclose(ys[-100:], 1, rtol=0.0, atol=1e-3)
