# Shared fixtures and markers for the test suite.
# Long running tests are marked and only run in GitHub Actions.
import os
from datetime import timedelta

import numpy as np
import pytest

from contagion.disease import SIRDiseaseModel
from contagion.distributions import ConstantDistribution

IS_GITHUB_CI = os.environ.get("GITHUB_ACTION", False)
RANDOM_SEED = 1337


def pytest_configure(config):
    config.addinivalue_line("markers", "github_only: Mark test to run only in GitHub Actions")
    config.addinivalue_line(
        "markers", "benchmark: A test which benchmarks the performance of some code"
    )


def pytest_runtest_setup(item):
    for _ in item.iter_markers(name="benchmark"):
        if not IS_GITHUB_CI:
            pytest.skip("Long running test: run on GitHub only.")

    for marker in item.iter_markers(name="github_only"):
        if not IS_GITHUB_CI:
            pytest.skip("Long running test: run on GitHub only.")


def no_deaths(host, time_infected, context):
    return 0.0


@pytest.fixture
def rng():
    return np.random.default_rng(RANDOM_SEED)


@pytest.fixture
def certain_model():
    """
    A disease which always spreads, lasts exactly one day and never kills.
    """
    return SIRDiseaseModel(
        infection_duration=ConstantDistribution(timedelta(days=1)),
        transmission_rate=1.0,
        fatality_rate_function=no_deaths,
    )
