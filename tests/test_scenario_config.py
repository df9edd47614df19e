"""
Tests for ScenarioConfig
"""

import copy
import json
import os

import pytest

from regionsim import MutatingVirus, ScenarioConfig, Virus, load_scenario


class TestScenarioConfig:
    """Test cases for ScenarioConfig"""

    def test_init_with_dict(self, minimal_scenario):
        config = ScenarioConfig(minimal_scenario)
        assert config.names("regions") == ["North", "South"]
        assert config.steps == 5
        assert config.seed == 42
        assert config.log_level == "INFO"

    def test_init_copies_input(self, minimal_scenario):
        config = ScenarioConfig(minimal_scenario)
        config.update_param("simulation.steps", 50)
        assert minimal_scenario["simulation"]["steps"] == 5

    def test_init_invalid_input(self):
        with pytest.raises(ValueError, match="Invalid config"):
            ScenarioConfig("not a dict")

    def test_init_from_json(self, test_scenario_json):
        config = ScenarioConfig.from_json(str(test_scenario_json))
        assert config.names("viruses") == ["Flu", "Flu_B"]
        assert config.steps == 10

    def test_from_json_missing_file(self):
        with pytest.raises(FileNotFoundError):
            ScenarioConfig.from_json("/nonexistent/scenario.json")

    def test_validation_success(self, minimal_scenario):
        ScenarioConfig(minimal_scenario).validate(verbose=False)

    def test_validation_missing_section(self, minimal_scenario):
        bad = copy.deepcopy(minimal_scenario)
        del bad["simulation"]
        with pytest.raises(ValueError, match="Configuration validation failed"):
            ScenarioConfig(bad).validate(verbose=False)

    def test_validation_missing_key(self, minimal_scenario, test_helpers):
        bad = test_helpers.create_invalid_scenario_missing_key(
            minimal_scenario, "viruses", "contagion_rate"
        )
        with pytest.raises(ValueError, match="Configuration validation failed"):
            ScenarioConfig(bad).validate(verbose=False)

    def test_get_param_by_name(self, minimal_scenario):
        config = ScenarioConfig(minimal_scenario)
        assert config.get_param("viruses.Flu.contagion_rate") == 0.3
        assert config.get_param("regions.South.population") == 200000
        assert config.get_param("mobility.0.from") == "North"

    def test_get_param_missing(self, minimal_scenario):
        config = ScenarioConfig(minimal_scenario)
        with pytest.raises(KeyError):
            config.get_param("viruses.Measles.contagion_rate")
        with pytest.raises(KeyError):
            config.get_param("simulation.nothing")

    def test_update_scalar_param(self, minimal_scenario):
        config = ScenarioConfig(minimal_scenario)
        config.update_param("viruses.Flu.contagion_rate", 0.5)
        assert config.get_param("viruses.Flu.contagion_rate") == 0.5

    def test_update_adds_new_key(self, minimal_scenario):
        config = ScenarioConfig(minimal_scenario)
        config.update_param("simulation.output", "out.nc")
        assert config.get_param("simulation.output") == "out.nc"

    def test_update_list_entry_by_name(self, minimal_scenario):
        config = ScenarioConfig(minimal_scenario)
        new_region = {"name": "North", "population": 5, "internal_mobility": 1.0}
        config.update_param("regions.North", new_region)
        assert config.get_param("regions.North.population") == 5
        assert config.names("regions") == ["North", "South"]

    def test_update_param_invalid_scalar(self, minimal_scenario):
        config = ScenarioConfig(minimal_scenario)
        with pytest.raises(ValueError, match="Expected a scalar"):
            config.update_param("viruses.Flu.contagion_rate", [0.1, 0.2])

    def test_update_param_invalid_list(self, minimal_scenario):
        config = ScenarioConfig(minimal_scenario)
        with pytest.raises(ValueError, match="Expected a list"):
            config.update_param("mobility", 3)

    def test_inject_multiple_params(self, minimal_scenario):
        config = ScenarioConfig(minimal_scenario)
        config.inject(
            {
                "viruses.Flu.contagion_rate": 0.12,
                "regions.North.internal_mobility": 4.0,
                "simulation.steps": 30,
            }
        )
        assert config.get_param("viruses.Flu.contagion_rate") == 0.12
        assert config.get_param("regions.North.internal_mobility") == 4.0
        assert config.steps == 30

    def test_reset_config(self, minimal_scenario):
        config = ScenarioConfig(minimal_scenario)
        config.update_param("viruses.Flu.contagion_rate", 0.9)
        config.reset()
        assert config.get_param("viruses.Flu.contagion_rate") == 0.3

    def test_to_json(self, minimal_scenario, temp_dir, assertion_helpers):
        config = ScenarioConfig(minimal_scenario)
        config.update_param("simulation.steps", 12)

        output_path = os.path.join(temp_dir, "scenario.json")
        config.to_json(output_path)

        assertion_helpers.assert_config_saved_correctly(output_path, {"simulation.steps": 12})
        with open(output_path) as f:
            assert json.load(f)["viruses"][0]["name"] == "Flu"

    def test_load_scenario(self, minimal_scenario, test_scenario_json):
        assert load_scenario(minimal_scenario).steps == 5
        assert load_scenario(str(test_scenario_json)).steps == 10
        with pytest.raises(ValueError, match="Invalid config"):
            load_scenario(42)


class TestBuildSimulator:
    """Test cases for ScenarioConfig.build_simulator"""

    def test_build_from_fixture(self, test_scenario_json):
        sim = ScenarioConfig.from_json(str(test_scenario_json)).build_simulator()

        assert list(sim.regions) == ["North", "South", "East"]
        assert isinstance(sim.viruses["Flu"], MutatingVirus)
        assert type(sim.viruses["Flu_B"]) is Virus
        assert sim.viruses["Flu"].family is sim.viruses["Flu_B"].family
        assert sim.vaccines["FluShot"].is_inhibiting
        assert sim.vaccines["FluEase"].is_attenuating
        assert sim.vaccines["FluEase"].mortality_rate_reduction == 50

        north, south, east = (sim.regions[n] for n in ("North", "South", "East"))
        assert north.travel_percentage(south) == 2
        assert east.lockdown is not None
        assert east.is_closed(south)
        assert len(south.vaccinations) == 1
        assert sim.active_pairs() == [("North", "Flu"), ("South", "Flu_B")]
        assert sim.current_state("North", "Flu").infectious == 1000

    def test_seed_override(self, minimal_scenario):
        sim = ScenarioConfig(minimal_scenario).build_simulator(seed=7)
        other = ScenarioConfig(minimal_scenario).build_simulator(seed=7)
        sim.run(5)
        other.run(5)
        assert sim.active_pairs() == other.active_pairs()

    def test_build_validates(self, minimal_scenario):
        bad = copy.deepcopy(minimal_scenario)
        bad["viruses"][0]["family"] = "Unknown"
        with pytest.raises(ValueError, match="Configuration validation failed"):
            ScenarioConfig(bad).build_simulator()

    def test_closures_in_initial_state(self, minimal_scenario):
        scenario = copy.deepcopy(minimal_scenario)
        scenario["initial_state"]["closures"] = [{"region": "North", "targets": ["South"]}]
        sim = ScenarioConfig(scenario).build_simulator()
        assert sim.regions["North"].is_closed(sim.regions["South"])
