"""
pytest configuration and fixtures for regionsim tests
"""

import shutil
import tempfile
from pathlib import Path

import numpy as np
import pytest

from .test_helpers import AssertionHelpers, TestHelpers

# Test data directory
TEST_DATA_DIR = Path(__file__).parent / "fixtures"


class BaseTestCase:
    """Base test case class with common setup methods"""

    def setup_method(self):
        """Setup method called before each test method"""
        self.helpers = TestHelpers()
        self.assertions = AssertionHelpers()


@pytest.fixture
def temp_dir():
    """Create a temporary directory for test files"""
    temp_dir = tempfile.mkdtemp()
    yield temp_dir
    shutil.rmtree(temp_dir)


@pytest.fixture
def test_helpers():
    """Test helpers instance"""
    return TestHelpers()


@pytest.fixture
def assertion_helpers():
    """Assertion helpers instance"""
    return AssertionHelpers()


@pytest.fixture
def rng():
    """Seeded random generator"""
    return np.random.default_rng(20240501)


# Entity fixtures
@pytest.fixture
def family():
    """Influenza family with a 10% variation bound"""
    return TestHelpers.create_family()


@pytest.fixture
def other_family():
    """A second, unrelated family"""
    return TestHelpers.create_family("Coronavirus", 5.0)


@pytest.fixture
def virus(family):
    """Non-mutating variant"""
    return TestHelpers.create_virus(family)


@pytest.fixture
def mutating_virus(family):
    """Mutating variant with mutation disabled unless overridden"""
    return TestHelpers.create_virus(family, name="Flu", mutating=True)


@pytest.fixture
def region():
    """Region of one million people with mobility 3"""
    return TestHelpers.create_region()


@pytest.fixture
def simulator():
    """Simulator with two unconnected regions"""
    return TestHelpers.create_simulator()


@pytest.fixture
def triangle():
    """Three regions connected in both directions"""
    regions = [
        TestHelpers.create_region("A", 100000, 2),
        TestHelpers.create_region("B", 200000, 2),
        TestHelpers.create_region("C", 300000, 2),
    ]
    for a in regions:
        for b in regions:
            if a is not b:
                a.add_neighbor(b, 5.0)
    return regions


# Scenario fixtures
@pytest.fixture
def test_scenario_json():
    """Path to the test scenario JSON file"""
    return TEST_DATA_DIR / "test_scenario.json"


@pytest.fixture
def minimal_scenario():
    """Minimal valid scenario with two regions"""
    return TestHelpers.create_minimal_scenario(region_count=2)


@pytest.fixture(params=[1, 2, 4])
def parametrized_scenario(request):
    """Scenario with different numbers of regions"""
    return TestHelpers.create_minimal_scenario(region_count=request.param)
