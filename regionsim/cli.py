"""
Command line entry point: validate and run scenario documents.
"""

import argparse
import logging
import sys
from typing import List, Optional

from .config import ScenarioConfig
from .exceptions import SimulationError
from .schema_validator import validate_scenario_config_safe

logger = logging.getLogger(__name__)


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="regionsim-python",
        description="Multi-region, multi-variant epidemic simulator",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    validate = subparsers.add_parser("validate", help="Validate a scenario JSON file")
    validate.add_argument("scenario", type=str, help="Path to the scenario JSON file")

    run = subparsers.add_parser("run", help="Run a scenario")
    run.add_argument("scenario", type=str, help="Path to the scenario JSON file")
    run.add_argument(
        "--steps",
        type=int,
        default=None,
        help="Number of steps to run (default: simulation.steps of the scenario)",
    )
    run.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Random seed (default: simulation.seed of the scenario)",
    )
    run.add_argument(
        "--output",
        type=str,
        default=None,
        help="Write the observables to this netCDF file",
    )
    run.add_argument(
        "--log-level",
        type=str,
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Logging level (default: simulation.log_level of the scenario)",
    )
    return parser.parse_args(argv)


def validate_scenario(args: argparse.Namespace) -> int:
    config = ScenarioConfig.from_json(args.scenario)
    valid, errors = validate_scenario_config_safe(config.config, verbose=False)
    if valid:
        logger.info("Scenario %s is valid", args.scenario)
        return 0
    for error in errors:
        logger.error("%s", error)
    return 1


def run_scenario(args: argparse.Namespace) -> int:
    config = ScenarioConfig.from_json(args.scenario)
    logging.getLogger().setLevel(args.log_level or config.log_level)

    sim = config.build_simulator(seed=args.seed)
    steps = config.steps if args.steps is None else args.steps
    logger.info("Running %s for %d steps", args.scenario, steps)
    sim.run(steps)

    for region_name, virus_name in sim.active_pairs():
        state = sim.cumulative_state(region_name, virus_name)
        logger.info(
            "%s / %s: infected %d, deaths %d, recovered %d, population %d",
            region_name,
            virus_name,
            state.total_infected,
            state.deaths,
            state.recovered,
            state.population,
        )

    output = args.output or config.config["simulation"].get("output")
    if output:
        sim.save_history(output)
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    logging.basicConfig(
        level=logging.INFO, format="%(asctime)s %(name)s %(levelname)s: %(message)s"
    )
    args = parse_args(argv)
    try:
        if args.command == "validate":
            return validate_scenario(args)
        return run_scenario(args)
    except (FileNotFoundError, ValueError, SimulationError) as e:
        logger.error("%s", e)
        return 1


if __name__ == "__main__":
    sys.exit(main())
