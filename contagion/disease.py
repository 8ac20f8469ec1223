"""
This module contains the disease models, which decide transmission, recovery and death.
"""
from abc import ABC, abstractmethod
from datetime import timedelta
from typing import Callable

import numpy as np

from contagion.distributions import Distribution
from contagion.entities import InfectionState
from contagion.state import CitizenState


class ModelContext:
    """
    Passed to the disease model on every call.
    The random generator is shared with the rest of the simulation.
    """

    def __init__(self, rng: np.random.Generator, ticks_per_day: int):
        self.rng = rng
        self.ticks_per_day = ticks_per_day


class Interaction:
    """
    The outcome of two citizens interacting.

    :meta private:
    """


class Infected(Interaction):
    """
    The source citizen infected the target citizen.
    """

    def __init__(self, source: CitizenState, target: CitizenState, infection_duration: timedelta):
        self.source = source
        self.target = target
        self.infection_duration = infection_duration

    def __eq__(self, obj):
        return (
            isinstance(obj, Infected)
            and obj.source is self.source
            and obj.target is self.target
            and obj.infection_duration == self.infection_duration
        )

    def __hash__(self):
        return hash((id(self.source), id(self.target), self.infection_duration))

    def __repr__(self):
        return f"<Infected {self.source.citizen} -> {self.target.citizen} for {self.infection_duration}>"


class NothingChanged(Interaction):
    """
    The interaction had no effect on either citizen.
    """

    def __repr__(self):
        return "<NothingChanged>"


NOTHING_CHANGED = NothingChanged()

FatalityRateFunction = Callable[[CitizenState, timedelta, ModelContext], float]


class DiseaseModel(ABC):
    """
    Decides how a disease spreads, and how its hosts recover or die.
    """

    @property
    @abstractmethod
    def infection_duration(self) -> Distribution:
        """The distribution of how long an infection lasts."""
        pass

    @property
    @abstractmethod
    def transmission_rate(self) -> float:
        """The probability that an infected host infects a susceptible one they interact with."""
        pass

    @abstractmethod
    def interact(
        self, first_host: CitizenState, second_host: CitizenState, context: ModelContext
    ) -> Interaction:
        pass

    @abstractmethod
    def recovered(self, host: CitizenState, context: ModelContext) -> str:
        """
        Returns the infection state of a host whose infection has run its course.
        """
        pass

    @abstractmethod
    def fatality_rate(
        self, host: CitizenState, time_infected: timedelta, context: ModelContext
    ) -> float:
        pass

    def check_death(
        self, host: CitizenState, time_infected: timedelta, context: ModelContext
    ) -> bool:
        return context.rng.random() < self.fatality_rate(host, time_infected, context)


class SIRDiseaseModel(DiseaseModel):
    """
    A susceptible-infected-recovered disease model.
    Recovered hosts are immune, and an infected host infects a susceptible one at a fixed rate.

    Args:
        infection_duration: The distribution of how long an infection lasts.
        transmission_rate: The probability of transmission per interaction, between 0 and 1.
        fatality_rate_function: Returns the probability that a host dies during a tick,
            given how long they have been infected.

    Example:
        A disease lasting about a week which never kills anyone::

            model = SIRDiseaseModel(
                infection_duration=NormalDurationDistribution(timedelta(days=7), timedelta(days=1)),
                transmission_rate=0.05,
                fatality_rate_function=lambda host, time_infected, context: 0.0,
            )

    """

    def __init__(
        self,
        infection_duration: Distribution,
        transmission_rate: float,
        fatality_rate_function: FatalityRateFunction,
    ):
        if not 0 <= transmission_rate <= 1:
            raise ValueError(f"Transmission rate must be between 0 and 1, got {transmission_rate}")

        self._infection_duration = infection_duration
        self._transmission_rate = transmission_rate
        self._fatality_rate_function = fatality_rate_function

    @property
    def infection_duration(self) -> Distribution:
        return self._infection_duration

    @property
    def transmission_rate(self) -> float:
        return self._transmission_rate

    def interact(
        self, first_host: CitizenState, second_host: CitizenState, context: ModelContext
    ) -> Interaction:
        first_state = first_host.infection_state
        second_state = second_host.infection_state
        # Recovered hosts are immune, and hosts in the same state have nothing to pass on.
        if (
            first_state == InfectionState.RECOVERED
            or second_state == InfectionState.RECOVERED
            or first_state == second_state
        ):
            return NOTHING_CHANGED

        if context.rng.random() > self._transmission_rate:
            return NOTHING_CHANGED

        duration = self._infection_duration.sample(context.rng)
        if first_state == InfectionState.INFECTED:
            return Infected(first_host, second_host, duration)

        return Infected(second_host, first_host, duration)

    def recovered(self, host: CitizenState, context: ModelContext) -> str:
        if host.infection_state == InfectionState.INFECTED:
            return InfectionState.RECOVERED

        return host.infection_state

    def fatality_rate(
        self, host: CitizenState, time_infected: timedelta, context: ModelContext
    ) -> float:
        rate = self._fatality_rate_function(host, time_infected, context)
        if not 0 <= rate <= 1:
            raise ValueError(f"Fatality rate must be between 0 and 1, got {rate} for {host}")

        return rate
