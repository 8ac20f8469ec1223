"""
A listener which reports what happens during a simulation through the logging module.
"""
from __future__ import annotations

import logging
import time
from collections import Counter
from datetime import timedelta
from typing import TYPE_CHECKING, Optional

from contagion.disease import Infected, Interaction
from contagion.entities import CitizenId, InfectionState, Location
from contagion.listeners.base import SimulationListener
from contagion.state import Tick

if TYPE_CHECKING:
    from contagion.simulation import Simulation

logger = logging.getLogger()


class TracingListener(SimulationListener):
    """
    Logs the notable events of a simulation: day boundaries, recoveries, deaths,
    citizens appearing or disappearing and infections.
    A summary of the population's states is logged at the end of every day.

    Args:
        perf: Also log how long the simulation and each tick took to run.
        level: The logging level to report at.

    """

    def __init__(self, perf: bool = False, level: int = logging.INFO):
        self.perf = perf
        self.level = level
        self._sim_start = 0.0
        self._last_tick_start = 0.0

    def begin_simulation(self, simulation: Simulation):
        self._sim_start = time.perf_counter()
        now = simulation.current_tick.current_date_time
        first_run = simulation.current_tick.count == 1
        self._prominent(f"begin simulation {now.date()}")
        for state in simulation.citizen_states.values():
            if state.is_alive and state.infection_state == InfectionState.INFECTED:
                ending = state.current_infection.ending_date_time
                remaining = max(ending - now, timedelta(0))
                status = "started off infected" if first_run else "is infected"
                self._event(
                    f"{state.citizen} {status} and it will end at "
                    f"{ending.isoformat()} ({_pretty(remaining)})",
                    simulation,
                )

        self._summarize_states(simulation)

    def end_simulation(self, simulation: Simulation):
        msg = "end simulation"
        if self.perf:
            msg += f" (took {_pretty(timedelta(seconds=time.perf_counter() - self._sim_start))})"

        self._prominent(msg)

    def begin_tick(self, tick: Tick, simulation: Simulation):
        self._last_tick_start = time.perf_counter()
        if tick.current_date_time.hour == 0 and _is_first_tick_of_hour(tick):
            self._prominent(f"begin day: {tick.current_date_time.date()} (tick {tick.count})")

    def end_tick(self, tick: Tick, simulation: Simulation):
        if self.perf:
            took = timedelta(seconds=time.perf_counter() - self._last_tick_start)
            self._prominent(f"end tick (took {_pretty(took)})")

        next_time = tick.current_date_time + simulation.tick_duration
        if next_time.date() != tick.current_date_time.date():
            self._summarize_states(simulation)

    def on_recuperation(self, citizen: CitizenId, simulation: Simulation):
        self._event(f"{citizen} recovered!", simulation)

    def on_kill(self, citizen: CitizenId, simulation: Simulation):
        self._event(f"{citizen} died", simulation)

    def on_relocation(
        self,
        citizen: CitizenId,
        old_location: Optional[Location],
        new_location: Optional[Location],
        simulation: Simulation,
    ):
        if old_location is None and new_location is not None:
            self._event(f"{citizen} spawned at {new_location}", simulation)
        elif new_location is None and old_location is not None:
            self._event(f"{citizen} was at {old_location} but disappeared", simulation)

    def on_interaction(self, interaction: Interaction, simulation: Simulation):
        if isinstance(interaction, Infected):
            self._event(
                f"{interaction.source.citizen} infected {interaction.target.citizen} "
                f"and it will end at {_end_date(simulation, interaction.infection_duration)}",
                simulation,
            )

    def _summarize_states(self, simulation: Simulation):
        states = simulation.citizen_states.values()
        counts = Counter(s.infection_state for s in states if s.is_alive)
        for infection_state in InfectionState.ALL:
            self._indented(f"{infection_state}: {counts[infection_state]}", 2)

        living = sum(1 for s in states if s.is_alive)
        self._indented(f"Living: {living}", 2)
        self._indented(f"Dead: {len(states) - living}", 2)

    def _prominent(self, msg: str):
        logger.log(self.level, "---------- %s ----------", msg)

    def _event(self, msg: str, simulation: Simulation):
        now = simulation.current_tick.current_date_time.time()
        self._indented(f"({now}) {msg}", 1)

    def _indented(self, msg: str, times: int):
        logger.log(self.level, "%s%s", "    " * times, msg)


def _is_first_tick_of_hour(tick: Tick) -> bool:
    return tick.current_date_time.minute == 0 and tick.current_date_time.second == 0


def _end_date(simulation: Simulation, duration: timedelta) -> str:
    end = simulation.current_tick.current_date_time + duration
    return f"{end.isoformat()} ({_pretty(duration)})"


def _pretty(duration: timedelta) -> str:
    total_seconds = duration.total_seconds()
    if total_seconds < 60:
        seconds = int(total_seconds)
        millis = int((total_seconds - seconds) * 1000)
        return f"{seconds}s {millis}ms"

    minutes, seconds = divmod(int(total_seconds), 60)
    hours, minutes = divmod(minutes, 60)
    days, hours = divmod(hours, 24)
    return f"{days}d {hours}h {minutes}m {seconds}s"
