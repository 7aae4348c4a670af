"""
Closed-loop simulation: controller, actuator and plant.
"""

from __future__ import annotations

import logging
from math import ceil
from typing import TYPE_CHECKING, NamedTuple

if TYPE_CHECKING:
    from collections.abc import Iterator

    from ._impl import Helm
    from .plant import Actuator, Plant

logger = logging.getLogger(__name__)

__all__ = ["Record", "simulate"]


class Record(NamedTuple):
    "One sample of a simulated trajectory."

    t: float
    u: float
    y0: float
    y1: float
    y2: float

    def format(self) -> str:
        "Tab-separated representation"
        return "\t".join(f"{x:.12g}" for x in self)


def simulate(
    helm: Helm,
    plant: Plant,
    actuator: Actuator,
    dt: float,
    final: float,
    r: float = 1.0,
) -> Iterator[Record]:
    """
    Run the controller against the plant, starting at rest, with a step
    to reference ``r`` at time zero.

    Args:
        helm: the controller. Its transient state is reset.
        plant: the process to control.
        actuator: limits the control signal.
        dt: sample interval.
        final: time to stop at.
        r: the reference value.

    Yields:
        a `Record` for time zero and after each step.
    """
    if not dt > 0:
        raise ValueError(f"The sample interval must be positive, not {dt}")
    if not final > 0:
        raise ValueError(f"The final time must be positive, not {final}")

    n = ceil(final / dt)
    logger.info("Simulate: %d steps of %g, ref %g, %r", n, dt, r, helm)

    v = 0.0
    u = actuator(v)
    sat = False
    helm.approach()
    y = plant.y
    yield Record(0.0, u, *map(float, y))

    for i in range(1, n + 1):
        v += helm.step(dt, r, u, v, plant.output)
        u = actuator(v)
        if actuator.saturated(v) != sat:
            sat = not sat
            logger.debug("Saturation %s at %g: v=%g", "on" if sat else "off", i * dt, v)
        y = plant.advance(dt, u)
        yield Record(i * dt, u, *map(float, y))
