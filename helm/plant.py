"""
A simulated process and actuator, to exercise the controller.
"""

from __future__ import annotations

import logging
from math import inf

import numpy as np

from collections.abc import Sequence

logger = logging.getLogger(__name__)

__all__ = ["Actuator", "Plant", "advance"]


def advance(h: float, a: Sequence[float], b: float, u: float, y: np.ndarray) -> np.ndarray:
    """
    Advance the state of a process with transfer function
    ``b0 / (s^3 + a2 s^2 + a1 s + a0)`` by time ``h``.

    The matching state space model is::

        d/dt y = A y + B u

        A = [[  0,   1,   0],
             [  0,   0,   1],
             [-a0, -a1, -a2]]
        B = [0, 0, b0]

    A semi-implicit Euler step, ``y(t+h) = y(t) + h (A y(t+h) + B u(t))``,
    leaves the linear problem ``(I - hA) y(t+h) = y(t) + h B u(t)``.

    Args:
        h: the time step.
        a: coefficients a0, a1, a2.
        b: coefficient b0.
        u: the input, held constant during the step.
        y: the current state y0, y1, y2.

    Returns:
        the state at ``t+h``.
    """
    if h < 0:
        raise ValueError(f"Time step must not be negative, not {h}")
    a0, a1, a2 = a
    m = np.array(
        [
            [1.0, -h, 0.0],
            [0.0, 1.0, -h],
            [h * a0, h * a1, 1.0 + h * a2],
        ]
    )
    rhs = np.asarray(y, dtype=float) + np.array([0.0, 0.0, h * b * u])
    try:
        return np.linalg.solve(m, rhs)
    except np.linalg.LinAlgError as exc:
        raise ValueError(f"Singular step matrix for h={h} a={tuple(a)}") from exc


class Plant:
    """
    A third-order linear process.

    The default coefficients, a process ``1/(s+1)^3``, are those of the
    example in Astrom and Murray, figure 10.2.
    """

    def __init__(self, a: Sequence[float] = (1, 3, 3), b: float = 1, y=None):
        if len(a) != 3:
            raise ValueError(f"Need three coefficients, not {len(a)}")
        self.a = tuple(float(x) for x in a)
        self.b = float(b)
        self.y = np.zeros(3) if y is None else np.array(y, dtype=float)

    @property
    def output(self) -> float:
        "The observable process output."
        return float(self.y[0])

    def steady_state(self, u: float) -> float:
        "The output this plant settles at for a constant input."
        return self.b * u / self.a[0]

    def advance(self, h: float, u: float) -> np.ndarray:
        "Advance the state by time ``h`` with input ``u``."
        self.y = advance(h, self.a, self.b, u, self.y)
        return self.y


class Actuator:
    """
    An actuator which follows its request instantly, within limits.
    """

    lower: float
    upper: float

    def __init__(self, lower: float | None = None, upper: float | None = None):
        self.lower = -inf if lower is None else lower
        self.upper = inf if upper is None else upper
        if self.lower > self.upper:
            raise ValueError(f"Limits are reversed: {self.lower} > {self.upper}")

    def __call__(self, v: float) -> float:
        return min(max(v, self.lower), self.upper)

    def saturated(self, v: float) -> bool:
        "Check whether request ``v`` exceeds the limits."
        return not self.lower <= v <= self.upper
