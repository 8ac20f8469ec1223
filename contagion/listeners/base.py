from __future__ import annotations

from typing import TYPE_CHECKING, Optional

from contagion.disease import Interaction
from contagion.entities import CitizenId, Location
from contagion.state import Tick

if TYPE_CHECKING:
    from contagion.simulation import Simulation


class SimulationListener:
    """
    Observes a simulation as it runs.

    The simulation calls these methods synchronously, in the order that things happen.
    Every method does nothing by default, so a listener only needs to override the events it cares about.
    Listeners must not modify the simulation.
    """

    def begin_simulation(self, simulation: Simulation):
        pass

    def end_simulation(self, simulation: Simulation):
        pass

    def begin_tick(self, tick: Tick, simulation: Simulation):
        pass

    def end_tick(self, tick: Tick, simulation: Simulation):
        pass

    def begin_recuperation_phase(self, simulation: Simulation):
        pass

    def on_recuperation(self, citizen: CitizenId, simulation: Simulation):
        pass

    def end_recuperation_phase(self, simulation: Simulation):
        pass

    def begin_kill_phase(self, simulation: Simulation):
        pass

    def on_kill(self, citizen: CitizenId, simulation: Simulation):
        pass

    def end_kill_phase(self, simulation: Simulation):
        pass

    def begin_relocation_phase(self, simulation: Simulation):
        pass

    def on_relocation(
        self,
        citizen: CitizenId,
        old_location: Optional[Location],
        new_location: Optional[Location],
        simulation: Simulation,
    ):
        pass

    def end_relocation_phase(self, simulation: Simulation):
        pass

    def begin_interaction_phase(self, simulation: Simulation):
        pass

    def on_interaction(self, interaction: Interaction, simulation: Simulation):
        pass

    def end_interaction_phase(self, simulation: Simulation):
        pass
