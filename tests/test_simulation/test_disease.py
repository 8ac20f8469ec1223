from datetime import timedelta

import numpy as np
import pytest

from contagion.disease import (
    NOTHING_CHANGED,
    Infected,
    ModelContext,
    NothingChanged,
    SIRDiseaseModel,
)
from contagion.distributions import ConstantDistribution
from contagion.entities import InfectionState, Sex
from contagion.population import cit
from contagion.state import CitizenState

RANDOM_SEED = 1337
ONE_DAY = timedelta(days=1)


def _state(name, infection_state):
    state = CitizenState(cit(name, 30, Sex.MALE))
    state.infection_state = infection_state
    return state


def _context():
    return ModelContext(np.random.default_rng(RANDOM_SEED), ticks_per_day=24)


def _model(transmission_rate=1.0, fatality_rate=0.0):
    return SIRDiseaseModel(
        infection_duration=ConstantDistribution(ONE_DAY),
        transmission_rate=transmission_rate,
        fatality_rate_function=lambda host, time_infected, context: fatality_rate,
    )


@pytest.mark.parametrize(
    "first, second",
    [
        (InfectionState.SUSCEPTIBLE, InfectionState.SUSCEPTIBLE),
        (InfectionState.INFECTED, InfectionState.INFECTED),
        (InfectionState.RECOVERED, InfectionState.RECOVERED),
        (InfectionState.INFECTED, InfectionState.RECOVERED),
        (InfectionState.RECOVERED, InfectionState.SUSCEPTIBLE),
    ],
)
def test_interact__nothing_to_transmit(first, second):
    model = _model()
    result = model.interact(_state("a", first), _state("b", second), _context())
    assert result is NOTHING_CHANGED
    assert isinstance(result, NothingChanged)


def test_interact__infected_party_is_always_the_source():
    model = _model()
    sick, healthy = _state("sick", InfectionState.INFECTED), _state("healthy", InfectionState.SUSCEPTIBLE)
    for first, second in [(sick, healthy), (healthy, sick)]:
        result = model.interact(first, second, _context())
        assert result == Infected(sick, healthy, ONE_DAY)


def test_interact__never_transmits_at_zero_rate():
    model = _model(transmission_rate=0.0)
    context = _context()
    sick, healthy = _state("sick", InfectionState.INFECTED), _state("healthy", InfectionState.SUSCEPTIBLE)
    assert all(model.interact(sick, healthy, context) is NOTHING_CHANGED for _ in range(100))


def test_interact__transmits_at_about_the_transmission_rate():
    model = _model(transmission_rate=0.25)
    context = _context()
    sick, healthy = _state("sick", InfectionState.INFECTED), _state("healthy", InfectionState.SUSCEPTIBLE)
    infections = sum(
        isinstance(model.interact(sick, healthy, context), Infected) for _ in range(10000)
    )
    assert 2300 < infections < 2700


@pytest.mark.parametrize("rate", [-0.1, 1.1])
def test_model__transmission_rate_is_validated(rate):
    with pytest.raises(ValueError):
        _model(transmission_rate=rate)


def test_recovered__is_idempotent():
    model = _model()
    context = _context()
    assert model.recovered(_state("a", InfectionState.INFECTED), context) == InfectionState.RECOVERED
    assert model.recovered(_state("b", InfectionState.RECOVERED), context) == InfectionState.RECOVERED
    assert (
        model.recovered(_state("c", InfectionState.SUSCEPTIBLE), context)
        == InfectionState.SUSCEPTIBLE
    )


def test_check_death__extremes():
    context = _context()
    host = _state("a", InfectionState.INFECTED)
    assert not any(_model(fatality_rate=0.0).check_death(host, ONE_DAY, context) for _ in range(100))
    assert all(_model(fatality_rate=1.0).check_death(host, ONE_DAY, context) for _ in range(100))


def test_check_death__uses_time_infected():
    model = SIRDiseaseModel(
        infection_duration=ConstantDistribution(ONE_DAY),
        transmission_rate=0.5,
        fatality_rate_function=lambda host, time_infected, context: 1.0 if time_infected > ONE_DAY else 0.0,
    )
    context = _context()
    host = _state("a", InfectionState.INFECTED)
    assert not model.check_death(host, ONE_DAY, context)
    assert model.check_death(host, 2 * ONE_DAY, context)


def test_fatality_rate__must_be_a_probability():
    with pytest.raises(ValueError):
        _model(fatality_rate=1.5).fatality_rate(_state("a", InfectionState.INFECTED), ONE_DAY, _context())
