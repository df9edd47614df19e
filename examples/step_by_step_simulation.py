#!/usr/bin/env python3
"""
Step-by-step simulation with interventions

This script builds a small region network by hand and advances it one step
at a time, reacting to the epidemic with vaccinations, travel closures and
a lockdown.
"""

import os
import sys
import logging

# Add the parent directory to the path to import regionsim
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from regionsim import Confinement, Family, MutatingVirus, Region, Simulator, Vaccine

# Set up logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def build_simulator():
    """Three connected regions and one mutating influenza variant"""
    sim = Simulator(seed=2024)

    flu = sim.add_virus(
        MutatingVirus(
            "Flu",
            Family("Influenza", max_variation=10),
            disease_probability=0.3,
            incubation_time=3,
            latency_time=2,
            disease_duration=5,
            infection_duration=4,
            immunity_duration=60,
            mortality_rate=0.01,
            contagion_rate=0.4,
            copy_error_probability=0.02,
            recombination_probability=0.05,
        )
    )
    sim.add_vaccine(
        Vaccine.inhibiting("FluShot", flu, effectiveness=90, activation_time=4, duration=40)
    )

    for name, population, mobility in [
        ("Capital", 2000000, 4),
        ("Coast", 600000, 2.5),
        ("Mountains", 150000, 1.5),
    ]:
        sim.add_region(Region(name, population, mobility))

    sim.connect("Capital", "Coast", 3)
    sim.connect("Coast", "Capital", 6)
    sim.connect("Coast", "Mountains", 1)
    sim.connect("Mountains", "Coast", 4)

    sim.seed_infection("Capital", flu, 0.05)
    return sim


def main():
    """Run step-by-step simulation with policy updates"""

    sim = build_simulator()
    max_steps = 40
    lockdown_threshold = 20000

    for step in range(max_steps):
        spawned = sim.step()
        for region_name, variants in spawned.items():
            logger.info(
                "Step %d: %s spawned in %s",
                step,
                ", ".join(v.name for v in variants),
                region_name,
            )

        state = sim.current_state("Capital", "Flu")
        logger.info(
            "Step %d: Capital infectious=%d symptomatic=%d susceptible=%d",
            step,
            state.infectious,
            state.symptomatic,
            state.susceptible,
        )

        if step == 5:
            logger.info("Vaccinating 30% of the Capital")
            sim.apply_vaccination("Capital", "FluShot", 30)

        elif step == 10:
            logger.info("Closing travel from the Capital into the Coast")
            sim.close_flow("Coast", "Capital")

        elif state.symptomatic > lockdown_threshold and sim.regions["Capital"].lockdown is None:
            logger.info("Symptomatic cases above %d: locking down", lockdown_threshold)
            sim.apply_lockdown("Capital", Confinement(duration=7, mobility_reduction=1))

        elif step == 30:
            logger.info("Reopening the Coast")
            sim.open_flow("Coast", "Capital")

    frame = sim.regions["Capital"].history_frame(sim.viruses["Flu"])
    logger.info("Capital history:\n%s", frame[["infectious", "symptomatic", "deaths"]].tail())


if __name__ == "__main__":
    main()
