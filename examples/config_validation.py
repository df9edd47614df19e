#!/usr/bin/env python3
"""
Scenario validation example

This script demonstrates how to validate and edit scenario documents.
"""

import os
import sys
import logging

# Add the parent directory to the path to import regionsim
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from regionsim import ScenarioConfig, validate_scenario_config_safe

# Set up logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def main():
    """Validate the example scenario, then break it on purpose"""

    scenario_file = os.path.join(os.path.dirname(os.path.abspath(__file__)), "scenario.json")
    config = ScenarioConfig.from_json(scenario_file)

    logger.info("Validating %s", scenario_file)
    config.validate()

    logger.info("Editing parameters through dotted paths")
    config.inject(
        {
            "viruses.Flu.contagion_rate": 0.5,
            "regions.South.population": 650000,
            "simulation.steps": 90,
        }
    )
    config.validate(verbose=False)
    logger.info("Flu contagion rate is now %s", config.get_param("viruses.Flu.contagion_rate"))

    logger.info("Pointing a mobility edge at an undeclared region")
    config.update_param("mobility.0.to", "Atlantis")
    is_valid, errors = validate_scenario_config_safe(config.config, verbose=False)
    logger.info("Valid: %s", is_valid)
    for error in errors:
        logger.info("  %s", error)

    config.reset()
    logger.info("After reset: %s", config.get_param("mobility.0.to"))


if __name__ == "__main__":
    main()
