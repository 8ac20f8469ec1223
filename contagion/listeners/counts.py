"""
A listener which counts the citizens in each state at every tick.
"""
from __future__ import annotations

from typing import TYPE_CHECKING, List

import numpy as np
import pandas as pd

from contagion.entities import InfectionState
from contagion.listeners.base import SimulationListener
from contagion.state import Tick

if TYPE_CHECKING:
    from contagion.simulation import Simulation

LIVING = "living"
DEAD = "dead"
COLUMNS = [*InfectionState.ALL, LIVING, DEAD]


class StateCountListener(SimulationListener):
    """
    Records how many living citizens are in each infection state, and how many are dead,
    at the end of every tick.

    Example:
        Plot the epidemic curve of a simulation::

            counts = StateCountListener()
            simulation.add_listener(counts)
            simulation.run_for(timedelta(days=30))
            counts.to_dataframe()[["susceptible", "infected", "recovered"]].plot()

    """

    def __init__(self):
        self.times = []
        self._rows: List[np.ndarray] = []

    def end_tick(self, tick: Tick, simulation: Simulation):
        states = simulation.citizen_states.values()
        infection_states = np.array([s.infection_state for s in states], dtype=object)
        alive = np.array([s.is_alive for s in states], dtype=bool)
        row = np.zeros(len(COLUMNS), dtype=np.int64)
        for idx, infection_state in enumerate(InfectionState.ALL):
            row[idx] = np.count_nonzero(alive & (infection_states == infection_state))

        row[-2] = np.count_nonzero(alive)
        row[-1] = alive.size - row[-2]
        self.times.append(tick.current_date_time)
        self._rows.append(row)

    def to_dataframe(self) -> pd.DataFrame:
        """
        Returns the counts as a table with one row per tick, indexed by simulated time.
        """
        values = np.vstack(self._rows) if self._rows else np.zeros((0, len(COLUMNS)), dtype=np.int64)
        index = pd.DatetimeIndex(self.times, name="time")
        return pd.DataFrame(values, index=index, columns=COLUMNS)
