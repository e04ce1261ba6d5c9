"""Command line entry point running a simulation from a YAML configuration."""
from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import Optional, Sequence

from lattice_pulse.config import load_config
from lattice_pulse.simulation import Simulation

logger = logging.getLogger(__name__)


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Run a lattice simulation from a YAML configuration.")
    parser.add_argument("config", type=Path, help="Path to the YAML configuration")
    parser.add_argument("--steps", type=int, default=None, help="Override the number of steps")
    parser.add_argument("--log-level", default="INFO", help="Logging level (DEBUG, INFO, ...)")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, args.log_level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    config = load_config(args.config)
    nr_steps = config.nr_steps if args.steps is None else args.steps

    with Simulation.from_config(config) as simulation:
        simulation.initialize()
        simulation.run(nr_steps)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
