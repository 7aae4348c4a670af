"""
This library contains an incremental
[PID controller](https://en.wikipedia.org/wiki/Proportional%E2%80%93integral%E2%80%93derivative_controller),
based largely on chapter 10 of Astrom and Murray, "Feedback Systems".

The controller features
- a low-pass filter on the process derivative
- windup protection by automatic reset on actuator saturation
- no kick on setpoint change ("derivative on measurement")
- incremental output, for bumpless manual-to-automatic transitions
- a unified gain parameter
- exposure of all independent physical time scales
- tolerance of a varying sample rate
- saving and restoring the controller's state

Usage::

    h = Helm().set_gains(kp, ki, kd, kt)
    h.approach()
    while True:
        y = process(dt, u)
        v += h.step(dt, r, u, v, y)
        u = actuate(dt, v)
"""

from __future__ import annotations

from ._impl import Helm as Helm
from ._impl import approach as approach
from ._impl import reset as reset
from ._impl import steady as steady
from ._impl import step as step

__all__ = ["Helm", "approach", "reset", "steady", "step"]
