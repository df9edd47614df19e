#!/usr/bin/env python3
"""
Parameter sensitivity example

This script runs the example scenario for several contagion rates and
compares the total number of infections in every region.
"""

import os
import sys
import logging

import pandas as pd

# Add the parent directory to the path to import regionsim
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from regionsim import ScenarioConfig

# Set up logging
logging.basicConfig(level=logging.WARNING)
logger = logging.getLogger(__name__)
logger.setLevel(logging.INFO)


def main():
    """Run a contagion rate sweep"""

    scenario_file = os.path.join(os.path.dirname(os.path.abspath(__file__)), "scenario.json")
    base_config = ScenarioConfig.from_json(scenario_file)

    contagion_rates = [0.1, 0.2, 0.3, 0.4, 0.5]
    rows = []

    for rate in contagion_rates:
        base_config.reset()
        base_config.update_param("viruses.Flu.contagion_rate", rate)
        sim = base_config.build_simulator()
        sim.run(base_config.steps)

        for region_name, virus_name in sim.active_pairs():
            if virus_name != "Flu":
                continue
            state = sim.cumulative_state(region_name, virus_name)
            rows.append(
                {
                    "contagion_rate": rate,
                    "region": region_name,
                    "total_infected": state.total_infected,
                    "deaths": state.deaths,
                }
            )
        logger.info("Contagion rate %.1f done", rate)

    results = pd.DataFrame(rows).pivot(
        index="contagion_rate", columns="region", values="total_infected"
    )
    logger.info("Total Flu infections per region:\n%s", results)


if __name__ == "__main__":
    main()
