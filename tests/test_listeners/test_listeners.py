import logging
from datetime import datetime, timedelta

import numpy as np
import pandas as pd
import pytest
from numpy.testing import assert_array_equal
from pandas.testing import assert_index_equal

from contagion.disease import SIRDiseaseModel
from contagion.distributions import ConstantDistribution
from contagion.entities import InfectionState, Sex
from contagion.listeners import (
    GraphStyle,
    InfectionTrackingListener,
    StateCountListener,
    TracingListener,
)
from contagion.listeners.tracking import DEAD_COLOR, FINAL_STATE_COLORS
from contagion.movers import ScheduleBasedPeopleMover
from contagion.population import cit, loc
from contagion.schedule import stay_at_home
from contagion.simulation import Simulation

RANDOM_SEED = 1337
HOME = loc("Home")
DAY_1 = datetime(2020, 1, 1)


def _sim(model, *listeners, names=("a", "b", "c")):
    citizens = [cit(name, 30, Sex.FEMALE) for name in names]
    return Simulation(
        citizens=citizens,
        locations=[HOME],
        disease_model=model,
        people_mover=ScheduleBasedPeopleMover({c.id: stay_at_home(HOME) for c in citizens}),
        initial_infections=[citizens[0].id],
        rng=np.random.default_rng(RANDOM_SEED),
        listeners=listeners,
    )


def _dies_after_half_a_day():
    return SIRDiseaseModel(
        infection_duration=ConstantDistribution(timedelta(days=1)),
        transmission_rate=1.0,
        fatality_rate_function=lambda host, time_infected, context: (
            1.0 if time_infected >= timedelta(hours=12) else 0.0
        ),
    )


def test_tracking__records_who_infected_whom(certain_model):
    tracker = InfectionTrackingListener()
    sim = _sim(certain_model, tracker)
    sim.run_for(timedelta(days=3))

    assert [(r.source.id.id, r.target.id.id) for r in tracker.infections] == [("a", "b"), ("a", "c")]
    assert all(r.tick.count == 1 for r in tracker.infections)
    assert all(r.duration == timedelta(days=1) for r in tracker.infections)
    assert set(tracker.final_status.values()) == {InfectionState.RECOVERED}
    assert not tracker.dead


def test_tracking__transmission_graph(certain_model):
    tracker = InfectionTrackingListener()
    sim = _sim(certain_model, tracker)
    sim.run_for(timedelta(days=3))

    graph = tracker.transmission_graph()
    a, b, c = sim.citizens
    assert set(graph.nodes) == {a.id, b.id, c.id}
    assert set(graph.edges) == {(a.id, b.id), (a.id, c.id)}
    assert graph.out_degree(a.id) == 2
    assert graph.in_degree(a.id) == 0
    recovered_color = FINAL_STATE_COLORS[InfectionState.RECOVERED]
    assert all(attrs["color"] == recovered_color for _, attrs in graph.nodes.items())
    assert graph.edges[a.id, b.id]["tick"].count == 1


def test_tracking__dead_citizens_are_colored_as_dead():
    tracker = InfectionTrackingListener()
    sim = _sim(_dies_after_half_a_day(), tracker, names=("a", "b"))
    sim.run_for(timedelta(days=1))

    a, b = sim.citizens
    assert tracker.dead == {a.id, b.id}
    assert tracker.color_for_final_state(a.id) == DEAD_COLOR
    assert tracker.transmission_graph().nodes[b.id]["color"] == DEAD_COLOR


def test_tracking__to_dot(certain_model):
    """
    Expect the DOT output to have one edge per infection and one node per infected citizen.
    """
    tracker = InfectionTrackingListener()
    sim = _sim(certain_model, tracker, names=("Alice Smith", "Bob"))
    sim.run_for(timedelta(hours=1))

    point = tracker.to_dot()
    assert point.startswith("digraph InfectionGraph {\n")
    assert point.endswith("}\n")
    assert "    alice_smith -> bob;" in point
    assert '    bob [label="" shape="point" color="darkorange" width="0.5"];' in point

    circle = tracker.to_dot(GraphStyle.CIRCLE)
    assert 'alice_smith [label="Alice Smith" shape="circle" style=filled fillcolor="darkorange"' in circle


def test_tracking__unknown_style_is_rejected(certain_model):
    tracker = InfectionTrackingListener()
    sim = _sim(certain_model, tracker)
    sim.run_for(timedelta(hours=1))
    with pytest.raises(ValueError):
        tracker.to_dot("hexagon")


def test_counts__one_row_per_tick(certain_model):
    counts = StateCountListener()
    sim = _sim(certain_model, counts)
    sim.run_for(timedelta(days=2))

    df = counts.to_dataframe()
    assert list(df.columns) == ["susceptible", "infected", "recovered", "living", "dead"]
    assert len(df) == 48
    assert df.index.name == "time"
    assert df.index[0] == pd.Timestamp(DAY_1)
    assert df.index[-1] == pd.Timestamp(datetime(2020, 1, 2, 23))
    assert_array_equal(df.iloc[0].values, np.array([0, 3, 0, 3, 0]))
    assert_array_equal(df.iloc[-1].values, np.array([0, 0, 3, 3, 0]))
    assert (df[["susceptible", "infected", "recovered"]].sum(axis=1) == df["living"]).all()


def test_counts__dead_are_not_counted_as_living():
    counts = StateCountListener()
    sim = _sim(_dies_after_half_a_day(), counts, names=("a", "b"))
    sim.run_for(timedelta(days=1))

    df = counts.to_dataframe()
    before = df.loc[pd.Timestamp(datetime(2020, 1, 1, 11))]
    after = df.loc[pd.Timestamp(datetime(2020, 1, 1, 12))]
    assert_array_equal(before.values, np.array([0, 2, 0, 2, 0]))
    assert_array_equal(after.values, np.array([0, 0, 0, 0, 2]))


def test_counts__empty_before_running():
    df = StateCountListener().to_dataframe()
    assert df.empty
    assert_index_equal(df.columns, pd.Index(["susceptible", "infected", "recovered", "living", "dead"]))


def test_tracing__logs_notable_events(certain_model, caplog):
    sim = _sim(certain_model, TracingListener(), names=("a", "b"))
    with caplog.at_level(logging.INFO):
        sim.run_for(timedelta(days=2))

    messages = [r.getMessage() for r in caplog.records]
    assert "---------- begin simulation 2020-01-01 ----------" in messages
    assert "---------- begin day: 2020-01-02 (tick 25) ----------" in messages
    assert "---------- end simulation ----------" in messages
    assert "    (00:00:00) a started off infected and it will end at 2020-01-02T00:00:00 (1d 0h 0m 0s)" in messages
    assert "    (00:00:00) b spawned at Home (home)" in messages
    assert "    (00:00:00) a infected b and it will end at 2020-01-02T00:00:00 (1d 0h 0m 0s)" in messages
    assert "    (00:00:00) a recovered!" in messages
    # A summary at the start and the end of each day.
    assert messages.count("        Dead: 0") == 3
    assert messages.count("        recovered: 2") == 1


def test_tracing__logs_deaths_at_chosen_level(caplog):
    sim = _sim(_dies_after_half_a_day(), TracingListener(perf=True, level=logging.DEBUG), names=("a",))
    with caplog.at_level(logging.DEBUG):
        sim.run_for(timedelta(days=1))

    traced = [r for r in caplog.records if r.levelno == logging.DEBUG and "died" in r.getMessage()]
    assert [r.getMessage() for r in traced] == ["    (12:00:00) a died"]
    assert any("end simulation (took" in r.getMessage() for r in caplog.records)


def test_tracing__resumed_run_logs_actual_end_dates(caplog):
    """
    Expect a second run to report the infection's real end date, counted down from the current time.
    """
    model = SIRDiseaseModel(
        infection_duration=ConstantDistribution(timedelta(days=5)),
        transmission_rate=1.0,
        fatality_rate_function=lambda host, time_infected, context: 0.0,
    )
    sim = _sim(model, TracingListener(), names=("a",))
    with caplog.at_level(logging.INFO):
        sim.run_for(timedelta(days=1))
        sim.run_for(timedelta(days=2))

    messages = [r.getMessage() for r in caplog.records]
    assert "---------- begin simulation 2020-01-02 ----------" in messages
    assert "    (00:00:00) a started off infected and it will end at 2020-01-06T00:00:00 (5d 0h 0m 0s)" in messages
    assert "    (00:00:00) a is infected and it will end at 2020-01-06T00:00:00 (4d 0h 0m 0s)" in messages
    assert not any("2020-01-07" in m for m in messages)
