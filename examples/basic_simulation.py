#!/usr/bin/env python3
"""
Basic RegionSim simulation example

This script loads the example scenario, runs it for the configured number of
steps and writes the observables to a netCDF file.
"""

import os
import sys
import logging

# Add the parent directory to the path to import regionsim
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from regionsim import ScenarioConfig

# Set up logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def main():
    """Run a basic simulation"""

    base_dir = os.path.dirname(os.path.abspath(__file__))
    scenario_file = os.path.join(base_dir, "scenario.json")
    output_file = os.path.join(base_dir, "..", "runs", "basic_simulation.nc")

    logger.info("Loading scenario from: %s", scenario_file)
    config = ScenarioConfig.from_json(scenario_file)

    logger.info("Building simulator")
    sim = config.build_simulator()

    logger.info("Running simulation for %d steps", config.steps)
    try:
        spawned = sim.run(config.steps)
    except Exception as e:
        logger.error("Simulation failed: %s", str(e))
        raise

    for region_name, variants in spawned.items():
        logger.info(
            "New variants in %s: %s", region_name, ", ".join(v.name for v in variants)
        )

    for region_name, virus_name in sim.active_pairs():
        state = sim.cumulative_state(region_name, virus_name)
        logger.info(
            "%s / %s: %d infected, %d deaths, %d recovered",
            region_name,
            virus_name,
            state.total_infected,
            state.deaths,
            state.recovered,
        )

    path = sim.save_history(output_file)
    logger.info("Observables saved to: %s", path)


if __name__ == "__main__":
    main()
