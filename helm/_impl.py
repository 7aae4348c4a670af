"""
The incremental PID controller.

The discrete evolution equations, with ``a = dt / (Tf + dt)``:

    df = a * (y - f)
    dy = y - y_prev
    dv = kp * (dt * ((r - y) / Ti + (u - v) / Tt) + Td / Tf * (df - dy) - dy)

``f`` is an exponentially weighted moving average of ``y`` which permits a
varying sample rate. Only ``f`` and the previous ``y`` are carried across
steps.
"""

from __future__ import annotations

import logging
from math import inf, isinf, isnan

from collections.abc import Mapping
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from typing import Self

logger = logging.getLogger(__name__)

__all__ = ["Helm", "approach", "reset", "steady", "step"]


class Helm:
    """
    Tuning parameters and transient state of an incremental PID controller.

    Gain `kp` has units of actuator signal per process observable.
    `Tt` has units of time multiplied by that ratio; `Td`, `Tf` and `Ti`
    are times, scaled by whatever ``dt`` is passed to `step`.

    Attributes:
        kp: Unified gain, modifying P, I and D terms.
        Td: Derivative time scale. Zero disables derivative action.
        Tf: Filter time scale for the derivative. ``inf`` disables filtering.
        Ti: Integral time scale. ``inf`` disables integral action.
        Tt: Automatic reset time scale. ``inf`` disables automatic reset.
        y: The last process observable seen.
        f: The last filtered observable, ``None`` until seeded.
    """

    kp: float
    Td: float
    Tf: float
    Ti: float
    Tt: float

    y: float | None = None
    f: float | None = None

    def __init__(self):
        self.reset()

    def __repr__(self):
        return (
            f"<{self.__class__.__name__} kp={self.kp} Td={self.Td} Tf={self.Tf}"
            f" Ti={self.Ti} Tt={self.Tt} y={self.y} f={self.f}>"
        )

    def reset(self) -> Self:
        """
        Reset all tuning parameters, but *not* the transient state.

        The gain is set to one; filtering, integral, derivative and
        automatic reset are disabled. Enable them by setting their time
        scales.
        """
        self.kp = 1
        self.Td = 0
        self.Tf = inf
        self.Ti = inf
        self.Tt = inf
        return self

    def approach(self) -> Self:
        """
        Reset the transient state, but *not* the tuning parameters.

        Call this before the first `step`, and again whenever control
        returns to automatic after a period of manual control, so that
        the transition is bumpless.

        An invalid time scale is a configuration bug and fails the
        assertions below.
        """
        assert self.Td >= 0, self.Td
        assert self.Tf > 0, self.Tf
        assert self.Ti > 0, self.Ti
        assert self.Tt > 0, self.Tt
        logger.debug("Approach: %r", self)
        self.f = None
        return self

    @property
    def seeded(self) -> bool:
        "Flag whether a measurement has been seen since the last `approach`."
        return self.f is not None

    def step(self, dt: float, r: float, u: float, v: float, y: float | None) -> float:
        """
        Find the change to control signal ``v`` required to steady ``y``.

        Args:
            dt: Time since the last sample.
            r: Reference value, often called the "setpoint".
            u: Actuator signal currently observed.
            v: Actuator signal currently requested.
            y: Observed process output, or ``None`` (or NaN) if there is
               no fresh sample.

        Returns:
            the increment to add to ``v``.
        """
        if y is None or isnan(y):
            # don't drive blind
            return 0.0

        if self.f is None:
            # no startup kick
            self.y = y
            self.f = y

        a = dt / (self.Tf + dt)
        df = a * (y - self.f)
        dy = y - self.y

        dv = (r - y) / self.Ti  # integral
        dv += (u - v) / self.Tt  # automatic reset
        dv *= dt
        dv += (self.Td / self.Tf) * (df - dy)  # derivative
        dv -= dy  # proportional, assuming dr == 0
        dv *= self.kp

        self.y = y
        self.f += df
        return dv

    steady = step

    def set_gains(
        self, kp: float, ki: float = 0, kd: float = 0, kt: float = 0, nf: float = 10
    ) -> Self:
        """
        Set the time scales from the commonly used gain constants.

        Args:
            kp: Proportional gain.
            ki: Integral gain. Zero disables integral action.
            kd: Derivative gain. Zero disables derivative action.
            kt: Automatic reset gain. Zero disables automatic reset.
            nf: Ratio of derivative to filter time scale.
                Astrom and Murray suggest 2 to 20.
        """
        if not kp:
            raise ValueError("The gain must not be zero")
        if not nf > 0:
            raise ValueError(f"The filter ratio must be positive, not {nf}")

        self.kp = kp
        self.Td = kd / kp
        self.Tf = self.Td / nf if self.Td else inf
        self.Ti = kp / ki if ki else inf
        self.Tt = kp / kt if kt else inf
        logger.debug("Gains: %r", self)
        return self

    def get_gains(self) -> tuple[float, float, float, float]:
        """
        Get the gain constants.

        Returns:
            kp, ki, kd, kt. Disabled terms are reported as zero.
        """
        kp = self.kp
        return (
            kp,
            0 if isinf(self.Ti) else kp / self.Ti,
            kp * self.Td,
            0 if isinf(self.Tt) else kp / self.Tt,
        )

    def get_state(self) -> tuple[float | None, float | None]:
        """
        Get the transient state.

        Returns:
            y, f
        """
        return self.y, self.f

    def set_state(self, y: float | None, f: float | None) -> None:
        """
        Restore the transient state, as returned by `get_state`.

        A filter state requires a measurement.
        """
        if f is not None and y is None:
            raise ValueError("Cannot restore a filter state without a measurement")
        self.y = y
        self.f = f

    @classmethod
    def from_cfg(cls, cfg: Mapping) -> Self:
        """
        Create a controller from a configuration mapping::

            p: 2  # gains
            i: 0.5
            d: 0.1
            t: 0
            nf: 10  # Td/Tf

            Ti: 4  # explicit time scales win over gains

        Missing gains are zero; a missing ``p`` is one. An explicit ``Td``
        without ``Tf`` gets a filter time of ``Td / nf``.
        """
        h = cls()
        kp = cfg.get("p")
        h.set_gains(
            1 if kp is None else kp,
            cfg.get("i", 0) or 0,
            cfg.get("d", 0) or 0,
            cfg.get("t", 0) or 0,
            cfg.get("nf", 10),
        )
        for k in ("Td", "Tf", "Ti", "Tt"):
            if cfg.get(k) is not None:
                setattr(h, k, float(cfg[k]))
        if cfg.get("Td") is not None and cfg.get("Tf") is None:
            h.Tf = h.Td / cfg.get("nf", 10) if h.Td else inf
        return h


def reset(h: Helm | None = None) -> Helm:
    """
    Reset the tuning parameters of ``h``, or create a new controller.
    """
    if h is None:
        return Helm()
    return h.reset()


def approach(h: Helm) -> Helm:
    "Prepare ``h`` for a bumpless transition to automatic control."
    return h.approach()


def step(h: Helm, dt: float, r: float, u: float, v: float, y: float | None) -> float:
    "Run one controller step. See `Helm.step`."
    return h.step(dt, r, u, v, y)


steady = step
