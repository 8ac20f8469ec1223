"""
This module contains helpers to generate a population of citizens along with their schedules.
"""
from typing import Callable, Dict, Iterable, List, Set, Tuple

import numpy as np

from contagion.disease import DiseaseModel
from contagion.distributions import (
    HistogramDistribution,
    NormalDistribution,
    RateDistribution,
    UniformIntDistribution,
)
from contagion.entities import Citizen, CitizenId, Location, LocationId, LocationType, Sex
from contagion.listeners.base import SimulationListener
from contagion.movers import ScheduleBasedPeopleMover
from contagion.ranges import HalfOpenRange, PartPer10K
from contagion.schedule import Schedule, stay_at_home, work_9_to_5
from contagion.simulation import Simulation


class AgeBracket:
    CHILD = HalfOpenRange(0, 13)
    TEENAGER = HalfOpenRange(13, 20)
    ADULT = HalfOpenRange(20, 40)
    MIDDLE_AGE = HalfOpenRange(40, 65)
    ELDERLY = HalfOpenRange(65, 100)

    ALL = (CHILD, TEENAGER, ADULT, MIDDLE_AGE, ELDERLY)

    @staticmethod
    def for_age(age: int) -> HalfOpenRange:
        for bracket in AgeBracket.ALL:
            if bracket.contains(age):
                return bracket

        return AgeBracket.ELDERLY


def person_name(idx: int, sex: str, age: int) -> str:
    return f"Person{idx}_{sex[0].upper()}{age}"


def location_name(idx: int, location_type: str) -> str:
    return f"{location_type.capitalize()}_{idx}"


class PopulationModel:
    """
    Describes the makeup of a population to generate.

    Args:
        num_people: The number of citizens.
        age_bins: The age brackets and the share of the population in each. Shares must add up to 100%.
        num_workplaces: The number of workplaces.
        employment_rate: The chance that a citizen of working age has a job.
        working_age: The ages at which citizens can be employed.
        children_per_couple: The distribution of the number of children per couple.
        person_name_generator (optional): Names citizens from their index, sex and age.
        location_name_generator (optional): Names locations from their index and type.

    """

    def __init__(
        self,
        num_people: int,
        age_bins: List[Tuple[HalfOpenRange, PartPer10K]],
        num_workplaces: int,
        employment_rate: RateDistribution,
        working_age: HalfOpenRange,
        children_per_couple: NormalDistribution,
        person_name_generator: Callable[[int, str, int], str] = person_name,
        location_name_generator: Callable[[int, str], str] = location_name,
    ):
        assert num_people >= 2, f"A population needs at least 2 people, got {num_people}"
        assert num_workplaces > 0, f"A population needs at least 1 workplace, got {num_workplaces}"
        self.num_people = num_people
        self.age_bins = age_bins
        self.num_workplaces = num_workplaces
        self.employment_rate = employment_rate
        self.working_age = working_age
        # TODO: use children_per_couple once households are built from couples.
        self.children_per_couple = children_per_couple
        self.person_name_generator = person_name_generator
        self.location_name_generator = location_name_generator


def make_schedules(pop: PopulationModel, rng: np.random.Generator) -> Dict[Citizen, Schedule]:
    """
    Generates the citizens of a population, each with a daily schedule.

    Citizens of working age may be employed at a random workplace, in which case they work 9 to 5.
    Everyone else stays at home all day. Homes are shared by about two people on average.

    Args:
        pop: The makeup of the population.
        rng: The random generator used for every random choice.

    Returns:
        Dict[Citizen, Schedule]: Each citizen's schedule, in order of creation.

    """
    age_dist = HistogramDistribution(
        pop.age_bins, lambda r: UniformIntDistribution(r.from_, r.to)
    )
    citizens = []
    for idx in range(pop.num_people):
        age = age_dist.sample(rng)
        sex = Sex.MALE if rng.integers(2) == 1 else Sex.FEMALE
        citizen_id = CitizenId(pop.person_name_generator(idx, sex, age))
        citizens.append(Citizen(citizen_id, age, sex))

    workplaces = [
        Location(LocationId(pop.location_name_generator(idx, LocationType.WORK)), LocationType.WORK)
        for idx in range(pop.num_workplaces)
    ]
    workplace_dist = UniformIntDistribution(0, pop.num_workplaces)
    workplace_assignments: Dict[CitizenId, Location] = {}
    for bracket in AgeBracket.ALL:
        if not pop.working_age.overlaps_with(bracket):
            continue

        for citizen in citizens:
            if AgeBracket.for_age(citizen.age) != bracket:
                continue

            if pop.working_age.contains(citizen.age) and pop.employment_rate.sample(rng):
                workplace_assignments[citizen.id] = workplaces[workplace_dist.sample(rng)]

    homes = [
        Location(LocationId(pop.location_name_generator(idx, LocationType.HOME)), LocationType.HOME)
        for idx in range(pop.num_people // 2)
    ]
    home_dist = UniformIntDistribution(0, len(homes))
    home_assignments = {citizen.id: homes[home_dist.sample(rng)] for citizen in citizens}

    schedules = {}
    for citizen in citizens:
        home = home_assignments[citizen.id]
        work = workplace_assignments.get(citizen.id)
        schedules[citizen] = work_9_to_5(home, work) if work is not None else stay_at_home(home)

    return schedules


def make_sim(
    schedules: Dict[Citizen, Schedule],
    disease_model: DiseaseModel,
    initial_infections: Iterable[CitizenId],
    rng: np.random.Generator,
    *listeners: SimulationListener,
) -> Simulation:
    """
    Builds a simulation in which citizens follow their schedules.
    The simulated locations are all the locations found in the schedules.
    """
    locations = {}
    for sched in schedules.values():
        for event in sched.events:
            locations[event.location] = None

    return Simulation(
        citizens=schedules.keys(),
        locations=locations.keys(),
        disease_model=disease_model,
        people_mover=ScheduleBasedPeopleMover({c.id: s for c, s in schedules.items()}),
        initial_infections=initial_infections,
        rng=rng,
        listeners=listeners,
    )


def initial_infections(
    citizens: Iterable[Citizen], num_infections: int, rng: np.random.Generator
) -> Set[CitizenId]:
    """
    Chooses ``num_infections`` random citizens to be infected at the start of a simulation.
    """
    citizen_ids = [c.id for c in citizens]
    chosen = rng.permutation(len(citizen_ids))[:num_infections]
    return {citizen_ids[idx] for idx in chosen}


def cit(id: str, age: int, sex: str) -> Citizen:
    return Citizen(CitizenId(id), age, sex)


def loc(id: str, location_type: str = LocationType.HOME) -> Location:
    return Location(LocationId(id), location_type)
