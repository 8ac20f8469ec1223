"""
This module contains the mutable state of a simulation: ticks, infections and citizen states.
"""
from datetime import datetime, timedelta
from typing import List, Optional

from contagion.entities import Citizen, CitizenId, InfectionState


class Tick:
    """
    A single simulated instant.

    Args:
        count: The number of the tick, starting at 1.
        starting_date_time: When the simulation started.
        current_date_time: The simulated time of this tick.

    """

    def __init__(self, count: int, starting_date_time: datetime, current_date_time: datetime):
        self.count = count
        self.starting_date_time = starting_date_time
        self.current_date_time = current_date_time

    @property
    def elapsed(self) -> timedelta:
        return self.current_date_time - self.starting_date_time

    def advance(self, step: timedelta) -> "Tick":
        """
        Returns the next tick, ``step`` after this one.
        """
        return Tick(self.count + 1, self.starting_date_time, self.current_date_time + step)

    def __repr__(self) -> str:
        return f"<Tick {self.count} {self.current_date_time.isoformat()}>"


class Infection:
    """
    A single transmission of the disease to a citizen.
    """

    def __init__(self, source: CitizenId, starting_date_time: datetime, ending_date_time: datetime):
        self.source = source
        self.starting_date_time = starting_date_time
        self.ending_date_time = ending_date_time

    def __eq__(self, obj):
        return (
            isinstance(obj, Infection)
            and obj.source == self.source
            and obj.starting_date_time == self.starting_date_time
            and obj.ending_date_time == self.ending_date_time
        )

    def __hash__(self):
        return hash((self.source, self.starting_date_time, self.ending_date_time))

    def __repr__(self) -> str:
        return (
            f"<Infection from {self.source} "
            f"{self.starting_date_time.isoformat()} to {self.ending_date_time.isoformat()}>"
        )


class CitizenState:
    """
    The disease state of a single citizen.
    Only the simulation which owns this state should modify it.

    Attributes:
        citizen (Citizen): The citizen this state belongs to.
        infection_state (str): One of ``InfectionState``.
        infections (List[Infection]): Every infection the citizen has had, oldest first.
        current_infection (Optional[Infection]): The most recent infection, if any.
        is_alive (bool): Whether the citizen is alive.

    """

    def __init__(self, citizen: Citizen):
        self.citizen = citizen
        self.infection_state = InfectionState.SUSCEPTIBLE
        self.infections: List[Infection] = []
        self.current_infection: Optional[Infection] = None
        self.is_alive = True

    def add_infection(self, infection: Infection):
        self.infection_state = InfectionState.INFECTED
        self.infections.append(infection)
        self.current_infection = infection

    def __repr__(self) -> str:
        alive = "Alive" if self.is_alive else "Dead"
        return f"State({self.citizen}, {self.infection_state}, {alive})"
