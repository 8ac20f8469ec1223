"""
A listener which tracks who infected whom during a simulation.
"""
from __future__ import annotations

import re
from datetime import timedelta
from typing import TYPE_CHECKING, Dict, List, Set

import networkx

from contagion.disease import Infected, Interaction
from contagion.entities import Citizen, CitizenId, InfectionState
from contagion.listeners.base import SimulationListener
from contagion.state import Tick

if TYPE_CHECKING:
    from contagion.simulation import Simulation


class GraphStyle:
    POINT = "point"
    CIRCLE = "circle"


FINAL_STATE_COLORS = {
    InfectionState.SUSCEPTIBLE: "darkgreen",
    InfectionState.INFECTED: "darkorange",
    InfectionState.RECOVERED: "darkgreen",
}
DEAD_COLOR = "crimson"


class InfectionRecord:
    """
    A single infection which happened during the simulation.
    """

    def __init__(self, source: Citizen, target: Citizen, duration: timedelta, tick: Tick):
        self.source = source
        self.target = target
        self.duration = duration
        self.tick = tick

    def __repr__(self):
        return f"<InfectionRecord {self.source} -> {self.target} at tick {self.tick.count}>"


class InfectionTrackingListener(SimulationListener):
    """
    Records every infection that happens during a simulation, along with each citizen's final state.

    Attributes:
        infections (List[InfectionRecord]): Every infection passed between citizens, in order.
        final_status (Dict[CitizenId, str]): The last known infection state of each citizen.
        dead (Set[CitizenId]): The citizens who died.

    """

    def __init__(self):
        self.infections: List[InfectionRecord] = []
        self.final_status: Dict[CitizenId, str] = {}
        self.dead: Set[CitizenId] = set()

    def on_recuperation(self, citizen: CitizenId, simulation: Simulation):
        self.final_status[citizen] = InfectionState.RECOVERED

    def on_interaction(self, interaction: Interaction, simulation: Simulation):
        if not isinstance(interaction, Infected):
            return

        record = InfectionRecord(
            interaction.source.citizen,
            interaction.target.citizen,
            interaction.infection_duration,
            simulation.current_tick,
        )
        self.infections.append(record)
        self.final_status[interaction.target.citizen.id] = interaction.target.infection_state

    def on_kill(self, citizen: CitizenId, simulation: Simulation):
        self.dead.add(citizen)

    def end_simulation(self, simulation: Simulation):
        for citizen_id, state in simulation.citizen_states.items():
            self.final_status[citizen_id] = state.infection_state

    def color_for_final_state(self, citizen_id: CitizenId) -> str:
        if citizen_id in self.dead:
            return DEAD_COLOR

        return FINAL_STATE_COLORS[self.final_status[citizen_id]]

    def transmission_graph(self) -> networkx.DiGraph:
        """
        Returns a directed graph of who infected whom.
        Nodes are citizen ids with a ``color`` attribute for their final state,
        edges carry the ``tick`` and ``duration`` of the infection.
        """
        graph = networkx.DiGraph()
        for record in self.infections:
            for citizen in (record.source, record.target):
                if citizen.id not in graph:
                    graph.add_node(citizen.id, color=self.color_for_final_state(citizen.id))

            graph.add_edge(
                record.source.id, record.target.id, tick=record.tick, duration=record.duration
            )

        return graph

    def to_dot(self, style: str = GraphStyle.POINT) -> str:
        """
        Renders the transmission graph in the Graphviz DOT language.
        """
        graph = self.transmission_graph()
        node_ids = {citizen_id: _dot_node_id(citizen_id) for citizen_id in graph.nodes}
        lines = ["digraph InfectionGraph {", "    nodesep=.05;"]
        for source, target in graph.edges:
            lines.append(f"    {node_ids[source]} -> {node_ids[target]};")

        for citizen_id, attrs in graph.nodes.items():
            node_id, color = node_ids[citizen_id], attrs["color"]
            if style == GraphStyle.POINT:
                lines.append(f'    {node_id} [label="" shape="point" color="{color}" width="0.5"];')
            elif style == GraphStyle.CIRCLE:
                lines.append(
                    f'    {node_id} [label="{citizen_id}" shape="circle" style=filled '
                    f'fillcolor="{color}" width="0.5"];'
                )
            else:
                raise ValueError(f"Unknown graph style: {style}")

        lines.append("}")
        return "\n".join(lines) + "\n"


def _dot_node_id(citizen_id: CitizenId) -> str:
    return re.sub("[^a-zA-Z0-9]", "_", citizen_id.id).lower()
