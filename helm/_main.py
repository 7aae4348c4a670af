"""
Command line: control a third-order process across a step in the
setpoint and print the trajectory.
"""

from __future__ import annotations

import anyio
import logging
import logging.config
import os
import sys
from pathlib import Path as FSPath

import asyncclick as click
from moat.util import merge, to_attrdict, yload
from moat.util.main import read_cfg

from ._impl import Helm
from .plant import Actuator, Plant
from .sim import simulate

logger = logging.getLogger(__name__)

__all__ = ["cli", "cmd", "load_cfg", "main"]

NAME = "helm"


def load_cfg(path=None):
    """
    Load the default configuration, with the user's file (if any) merged
    on top.
    """
    with (FSPath(__file__).parent / "_cfg.yaml").open("r") as f:
        cfg = yload(f, attr=True)
    if (ucfg := read_cfg(NAME, path)) is not None:
        merge(cfg, ucfg, replace=True)
    return to_attrdict(cfg)


def setup_logging(cfg, verbose: int, log=()):
    """
    Configure logging. ``verbose`` is 0 (errors only) to 3 (debug).
    """
    lcfg = cfg.setdefault("logging", {})
    lcfg.setdefault("version", 1)
    lcfg.setdefault("root", {})["level"] = (
        "DEBUG" if verbose > 2 else "INFO" if verbose > 1 else "WARNING" if verbose else "ERROR"
    )
    for k in log:
        try:
            k, v = k.split("=")
        except ValueError:
            raise click.BadParameter(f"{k!r}: use 'name=LEVEL'", param_hint="'--log'") from None
        lcfg.setdefault("loggers", {}).setdefault(k, {})["level"] = v.upper()
    try:
        logging.config.dictConfig(lcfg)
    except ValueError as exc:
        raise click.BadParameter(str(exc), param_hint="'--log'") from exc
    logging.captureWarnings(verbose > 0)


def _check(ctx, h: Helm):
    bad = []
    if not h.Td >= 0:
        bad.append(f"Td={h.Td}")
    for k in ("Tf", "Ti", "Tt"):
        if not getattr(h, k) > 0:
            bad.append(f"{k}={getattr(h, k)}")
    if bad:
        raise click.UsageError(f"Invalid time scales: {' '.join(bad)}", ctx=ctx)


_pos = click.FloatRange(min=0, min_open=True)


@click.command(name=NAME, context_settings=dict(help_option_names=["-h", "--help"]))
@click.option("--a0", type=float, default=None, help="Process coefficient a0.")
@click.option("--a1", type=float, default=None, help="Process coefficient a1.")
@click.option("--a2", type=float, default=None, help="Process coefficient a2.")
@click.option("--b0", type=float, default=None, help="Process coefficient b0.")
@click.option("-p", "--kp", type=float, default=None, help="Proportional gain.")
@click.option("-i", "--ki", type=float, default=None, help="Integral gain.")
@click.option("-d", "--kd", type=float, default=None, help="Derivative gain.")
@click.option("-t", "--kt", type=float, default=None, help="Automatic reset gain.")
@click.option("-n", "--nf", type=_pos, default=None, help="Ratio of derivative to filter time.")
@click.option("--min", "umin", type=float, default=None, help="Lower actuator limit.")
@click.option("--max", "umax", type=float, default=None, help="Upper actuator limit.")
@click.option("-r", "--ref", type=float, default=None, help="Reference value.")
@click.option("-s", "--dt", type=_pos, default=None, help="Sample interval.")
@click.option("-T", "--final", type=_pos, default=None, help="Final simulation time.")
@click.option(
    "-c",
    "--cfg",
    type=click.Path(exists=True, dir_okay=False),
    default=None,
    help="Configuration file (YAML).",
)
@click.option("-V", "--verbose", count=True, help="Be more verbose. Can be used multiple times.")
@click.option("-Q", "--quiet", count=True, help="Be less verbose. Opposite of '--verbose'.")
@click.option(
    "-l",
    "--log",
    multiple=True,
    help="Adjust log level. Example: '--log helm.sim=DEBUG'.",
)
@click.pass_context
async def cli(ctx, cfg, verbose, quiet, log, **kw):
    """
    Control the process b0/(s^3 + a2 s^2 + a1 s + a0), starting at rest,
    across a step in the setpoint.

    Prints one tab-separated line per step: time, actuator signal,
    and the three process states.
    """
    cfg = load_cfg(cfg)
    setup_logging(cfg, max(0, 1 + verbose - quiet), log)

    for k, v in (
        ("b0", ("plant", "b")),
        ("kp", ("pid", "p")),
        ("ki", ("pid", "i")),
        ("kd", ("pid", "d")),
        ("kt", ("pid", "t")),
        ("nf", ("pid", "nf")),
        ("umin", ("actuator", "min")),
        ("umax", ("actuator", "max")),
        ("ref", ("sim", "ref")),
        ("dt", ("sim", "dt")),
        ("final", ("sim", "final")),
    ):
        if kw[k] is not None:
            cfg[v[0]][v[1]] = kw[k]
    logger.debug("Config: %r", cfg)

    try:
        if not isinstance(cfg.plant.a, (list, tuple)) or len(cfg.plant.a) != 3:
            raise ValueError(f"plant.a needs three coefficients, not {cfg.plant.a!r}")
        for k, v in (("a0", 0), ("a1", 1), ("a2", 2)):
            if kw[k] is not None:
                cfg.plant.a[v] = kw[k]
        h = Helm.from_cfg(cfg.pid)
        plant = Plant(cfg.plant.a, cfg.plant.b)
        act = Actuator(cfg.actuator.get("min"), cfg.actuator.get("max"))
        _check(ctx, h)
        for rec in simulate(h, plant, act, cfg.sim.dt, cfg.sim.final, r=cfg.sim.ref):
            print(rec.format())
    except (ValueError, TypeError) as exc:
        raise click.UsageError(str(exc), ctx=ctx) from exc


def cmd(args=None, backend="trio") -> int:
    """
    Run the command line, returning the exit code.

    Args:
        args: the argument list, `None` for ``sys.argv``.
    """

    async def runner():
        return await cli.main(args=args, prog_name=NAME, standalone_mode=False)

    try:
        res = anyio.run(runner, backend=backend)
    except click.exceptions.ClickException as exc:
        if "HELM_TB" in os.environ:
            raise
        exc.show()
        return exc.exit_code
    except click.exceptions.Abort:
        print("Aborted.", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        if "HELM_TB" in os.environ:
            raise
        print("\rInterrupted.   ", file=sys.stderr)
        return 9
    return res if isinstance(res, int) else 0


def main():
    "Console script entry point."
    sys.exit(cmd())
