"""
This module contains the daily schedules which decide where citizens are at a given time.
"""
from datetime import datetime, time
from typing import Iterable, List, Optional

from contagion.entities import Location
from contagion.ranges import HalfOpenRange


class TimeRange(HalfOpenRange):
    """
    A range of times of day, from the start time (inclusive) to the end time (exclusive).
    """

    def __init__(self, start_time: time, end_time: time):
        super().__init__(start_time, end_time)


class ScheduleEvent:
    """
    A citizen being at a location for a range of time each day.
    """

    def __init__(self, location: Location, time_range: TimeRange):
        self.location = location
        self.time_range = time_range

    def __eq__(self, obj):
        return (
            isinstance(obj, ScheduleEvent)
            and obj.location == self.location
            and obj.time_range == self.time_range
        )

    def __hash__(self):
        return hash((self.location, self.time_range))

    def __repr__(self) -> str:
        return f"<ScheduleEvent {self.location} {self.time_range}>"


class Schedule:
    """
    A citizen's daily plan of which location they are at, and when.
    Two events at different locations cannot overlap in time, because a citizen cannot be in two places at once.

    Args:
        events: The events which make up the schedule, in order of precedence.

    """

    def __init__(self, events: Iterable[ScheduleEvent]):
        self.events = tuple(events)
        for e in self.events:
            for f in self.events:
                if (
                    e is not f
                    and e.location != f.location
                    and e.time_range.overlaps_with(f.time_range)
                ):
                    raise ValueError(f"Schedule puts someone in two places at once: {e} and {f}")

    def event_at_time(self, timestamp: datetime) -> Optional[ScheduleEvent]:
        """
        Returns the first event which is happening at the time of day of the given timestamp, if any.
        """
        time_of_day = timestamp.time()
        for event in self.events:
            if event.time_range.contains(time_of_day):
                return event

        return None

    def __eq__(self, obj):
        return isinstance(obj, Schedule) and obj.events == self.events

    def __hash__(self):
        return hash(self.events)

    def __repr__(self) -> str:
        return f"<Schedule {list(self.events)}>"


class ScheduleBuilder:
    """
    Builds up a schedule one event at a time.

    Example:
        Build a schedule for a night shift worker::

            sched = (
                ScheduleBuilder()
                .event(work, time(0, 0), time(6, 0))
                .event(home, time(6, 0), time(23, 59))
                .build()
            )

    """

    def __init__(self):
        self.events: List[ScheduleEvent] = []

    def event(self, location: Location, from_time: time, until_time: time) -> "ScheduleBuilder":
        self.events.append(ScheduleEvent(location, TimeRange(from_time, until_time)))
        return self

    def build(self) -> Schedule:
        return Schedule(self.events)


def schedule(*events: ScheduleEvent) -> Schedule:
    return Schedule(events)


def work_9_to_5(home: Location, work: Location) -> Schedule:
    return (
        ScheduleBuilder()
        .event(home, time(0, 0), time(9, 0))
        .event(work, time(9, 0), time(17, 0))
        .event(home, time(17, 0), time(23, 59))
        .build()
    )


def stay_at_home(home: Location) -> Schedule:
    return ScheduleBuilder().event(home, time(0, 0), time(23, 59)).build()
