"""
This module contains the people movers, which decide where each citizen is at each tick.
"""
from abc import ABC, abstractmethod
from typing import Dict, Optional

from contagion.entities import Citizen, CitizenId, Location
from contagion.schedule import Schedule
from contagion.state import Tick


class PeopleMover(ABC):
    """
    Decides the location of a citizen for a given tick.
    Returning None means the citizen is not at any location.
    """

    @abstractmethod
    def move(
        self, citizen: Citizen, current_location: Optional[Location], tick: Tick
    ) -> Optional[Location]:
        pass


class ScheduleBasedPeopleMover(PeopleMover):
    """
    Moves citizens according to their daily schedules.
    Citizens with no schedule, or no event at the current time, stay where they are.

    Args:
        schedules_for_citizens: The schedule of each citizen.

    """

    def __init__(self, schedules_for_citizens: Dict[CitizenId, Schedule]):
        self.schedules_for_citizens = schedules_for_citizens

    def move(
        self, citizen: Citizen, current_location: Optional[Location], tick: Tick
    ) -> Optional[Location]:
        schedule = self.schedules_for_citizens.get(citizen.id)
        if schedule is None:
            return current_location

        current_event = schedule.event_at_time(tick.current_date_time)
        if current_event is None:
            return current_location

        return current_event.location
