"""
This module contains the main simulation class.
"""
import logging
from datetime import datetime, timedelta
from itertools import combinations
from types import MappingProxyType
from typing import Dict, Iterable, List, Mapping, Optional, Tuple

import numpy as np

from contagion.disease import DiseaseModel, Infected, ModelContext, NothingChanged
from contagion.entities import Citizen, CitizenId, InfectionState, Location, Sex
from contagion.listeners.base import SimulationListener
from contagion.movers import PeopleMover
from contagion.state import CitizenState, Infection, Tick

logger = logging.getLogger()

DEFAULT_STARTING_TIME = datetime(2020, 1, 1, 0, 0, 0)

# The source of every infection that the simulation starts with.
PATIENT_0 = Citizen(CitizenId("Patient 0"), 20, Sex.MALE)


class Simulation:
    """
    An agent based simulation of a disease spreading through a population.

    Each tick of the simulation runs four phases, in order:

        - recuperation: infected citizens whose infection has ended recover
        - death: infected citizens may die
        - relocation: every citizen is moved to wherever the people mover puts them
        - interaction: every pair of citizens at the same location interact

    Args:
        citizens: The citizens to simulate.
        locations: The locations the citizens can be at.
        disease_model: Decides transmission, recovery and death.
        people_mover: Decides where each citizen is at each tick.
        initial_infections (optional): Ids of the citizens who are infected at the start.
        starting_time (optional): The simulated time of the first tick. Defaults to 2020-01-01.
        ticks_per_day (optional): The number of ticks in a simulated day. Defaults to ``24``.
        rng (optional): The random generator used for every stochastic decision.
            Pass a seeded generator for reproducible runs.
        listeners (optional): Observers which are told about everything that happens.

    Attributes:
        citizens (Tuple[Citizen]): The simulated citizens, in the order they were supplied.
        locations (Tuple[Location]): The locations, in the order they were supplied.
        citizen_states (Mapping[CitizenId, CitizenState]): The disease state of each citizen.
        current_tick (Tick): The tick which is being, or will next be, simulated.

    """

    def __init__(
        self,
        citizens: Iterable[Citizen],
        locations: Iterable[Location],
        disease_model: DiseaseModel,
        people_mover: PeopleMover,
        initial_infections: Iterable[CitizenId] = (),
        starting_time: datetime = DEFAULT_STARTING_TIME,
        ticks_per_day: int = 24,
        rng: Optional[np.random.Generator] = None,
        listeners: Iterable[SimulationListener] = (),
    ):
        assert ticks_per_day > 0, f"Ticks per day must be positive, got {ticks_per_day}"
        self.citizens: Tuple[Citizen, ...] = tuple(dict.fromkeys(citizens))
        self.locations: Tuple[Location, ...] = tuple(dict.fromkeys(locations))
        self.disease_model = disease_model
        self.people_mover = people_mover
        self.starting_time = starting_time
        self.ticks_per_day = ticks_per_day
        self.tick_duration = timedelta(days=1) / ticks_per_day
        self._rng = rng if rng is not None else np.random.default_rng()
        self._listeners: List[SimulationListener] = list(listeners)
        self._model_context = ModelContext(self._rng, ticks_per_day)

        self._current_tick = Tick(1, starting_time, starting_time)
        self._citizen_states: Dict[CitizenId, CitizenState] = {
            c.id: CitizenState(c) for c in self.citizens
        }
        # Each location's citizens, in the order they arrived.
        # Dicts are used as insertion-ordered sets so that interactions happen in a stable order.
        self._citizens_by_location: Dict[Location, Dict[Citizen, None]] = {}
        self._citizen_locations: Dict[Citizen, Location] = {}

        initially_infected = set(initial_infections)
        for citizen_id in initially_infected:
            self._get_state(citizen_id)

        # Infect in citizen order rather than set order, so that a seeded run is reproducible.
        for citizen in self.citizens:
            if citizen.id in initially_infected:
                duration = self.disease_model.infection_duration.sample(self._rng)
                self._infect(PATIENT_0.id, self._citizen_states[citizen.id], duration)

    @property
    def current_tick(self) -> Tick:
        return self._current_tick

    @property
    def citizen_states(self) -> Mapping[CitizenId, CitizenState]:
        return MappingProxyType(self._citizen_states)

    @property
    def citizen_locations(self) -> Mapping[Citizen, Location]:
        return MappingProxyType(self._citizen_locations)

    @property
    def citizens_by_location(self) -> Mapping[Location, Tuple[Citizen, ...]]:
        return MappingProxyType(
            {location: tuple(bucket) for location, bucket in self._citizens_by_location.items()}
        )

    def add_listener(self, listener: SimulationListener):
        """
        Register a listener which will be told about everything that happens in the simulation.
        """
        self._listeners.append(listener)

    def run_for(self, duration: timedelta):
        """
        Runs the simulation until ``duration`` of simulated time has passed since it started.
        """
        logger.info(
            "Running simulation of %s citizens at %s locations for %s",
            len(self.citizens),
            len(self.locations),
            duration,
        )
        self._notify("begin_simulation", self)
        while self._current_tick.elapsed < duration:
            self._run_tick()

        self._notify("end_simulation", self)
        logger.info("Simulation finished after %s ticks", self._current_tick.count - 1)

    def _notify(self, event: str, *args):
        for listener in self._listeners:
            getattr(listener, event)(*args)

    def _get_state(self, citizen_id: CitizenId) -> CitizenState:
        try:
            return self._citizen_states[citizen_id]
        except KeyError:
            raise KeyError(f"Citizen {citizen_id} is not part of this simulation") from None

    def _run_tick(self):
        tick = self._current_tick
        logger.debug("Running tick %s at %s", tick.count, tick.current_date_time)
        self._notify("begin_tick", tick, self)

        self._recuperate()
        self._kill()
        self._relocate_citizens()
        self._interact()

        self._notify("end_tick", tick, self)
        self._current_tick = tick.advance(self.tick_duration)

    def _recuperate(self):
        self._notify("begin_recuperation_phase", self)
        now = self._current_tick.current_date_time
        for state in self._citizen_states.values():
            if (
                state.is_alive
                and state.infection_state == InfectionState.INFECTED
                and state.current_infection.ending_date_time <= now
            ):
                new_infection_state = self.disease_model.recovered(state, self._model_context)
                if new_infection_state == InfectionState.RECOVERED:
                    state.infection_state = new_infection_state
                    self._notify("on_recuperation", state.citizen.id, self)
                elif new_infection_state != InfectionState.INFECTED:
                    # Susceptible is never re-entered.
                    raise ValueError(
                        f"Disease model cannot move {state.citizen} from "
                        f"{InfectionState.INFECTED} to {new_infection_state}"
                    )

        self._notify("end_recuperation_phase", self)

    def _kill(self):
        self._notify("begin_kill_phase", self)
        now = self._current_tick.current_date_time
        for state in self._citizen_states.values():
            if not (state.is_alive and state.infection_state == InfectionState.INFECTED):
                continue

            time_infected = now - state.current_infection.starting_date_time
            if self.disease_model.check_death(state, time_infected, self._model_context):
                state.is_alive = False
                last_location = self._citizen_locations.get(state.citizen)
                if last_location is not None:
                    self._remove_from_location(last_location, state.citizen)

                self._notify("on_kill", state.citizen.id, self)

        self._notify("end_kill_phase", self)

    def _relocate_citizens(self):
        self._notify("begin_relocation_phase", self)
        for citizen in self.citizens:
            old_location = self._citizen_locations.get(citizen)
            new_location = self.people_mover.move(citizen, old_location, self._current_tick)
            if old_location != new_location:
                self._notify("on_relocation", citizen.id, old_location, new_location, self)
                if old_location is not None:
                    self._remove_from_location(old_location, citizen)

            if new_location is None:
                self._citizen_locations.pop(citizen, None)
                continue

            self._citizen_locations[citizen] = new_location
            # The dead keep their place in the citizen -> location map but never rejoin a location.
            if self._citizen_states[citizen.id].is_alive:
                self._citizens_by_location.setdefault(new_location, {})[citizen] = None

        self._notify("end_relocation_phase", self)

    def _remove_from_location(self, location: Location, citizen: Citizen):
        bucket = self._citizens_by_location.get(location)
        if bucket is None:
            return

        bucket.pop(citizen, None)
        if not bucket:
            del self._citizens_by_location[location]

    def _interact(self):
        self._notify("begin_interaction_phase", self)
        for bucket in list(self._citizens_by_location.values()):
            # Every pair at a location interacts before any outcome is applied,
            # so someone infected this tick cannot pass it on until the next tick.
            interactions = [
                self.disease_model.interact(
                    self._citizen_states[first.id],
                    self._citizen_states[second.id],
                    self._model_context,
                )
                for first, second in combinations(bucket, 2)
            ]
            for interaction in interactions:
                if isinstance(interaction, Infected):
                    # A citizen can be infected by several people in one tick:
                    # whoever comes first in the pair order is the one who infected them.
                    target_state = interaction.target.infection_state
                    if target_state == InfectionState.INFECTED:
                        continue

                    if target_state != InfectionState.SUSCEPTIBLE:
                        raise ValueError(
                            f"Disease model cannot infect {interaction.target.citizen}, "
                            f"who is {target_state}"
                        )

                    self._infect(
                        interaction.source.citizen.id,
                        interaction.target,
                        interaction.infection_duration,
                    )
                    self._notify("on_interaction", interaction, self)
                elif isinstance(interaction, NothingChanged):
                    self._notify("on_interaction", interaction, self)
                else:
                    raise TypeError(f"Unknown interaction: {interaction!r}")

        self._notify("end_interaction_phase", self)

    def _infect(self, source: CitizenId, target: CitizenState, duration: timedelta):
        now = self._current_tick.current_date_time
        target.add_infection(Infection(source, now, now + duration))
