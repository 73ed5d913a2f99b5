"""Tests for population-wide metric rankings."""

from datetime import date

import pytest

from ffiec_mcp.ranking import percentile, rank_entity, rank_metric

PERIOD = date(2025, 6, 30)


@pytest.fixture
def five_banks(seed):
    for i, value in enumerate([10.0, 20.0, 30.0, 40.0, 50.0], 1):
        seed(f"R{i}", value * 1000, roa=value, efficiency_ratio=value)


def test_higher_is_better(five_banks, store):
    ranking = rank_metric(store, "R4", PERIOD, "roa")
    assert (ranking.rank, ranking.total, ranking.percentile) == (2, 5, 80)
    assert ranking.value == 40.0


def test_lower_is_better_for_efficiency(five_banks, store):
    ranking = rank_metric(store, "R1", PERIOD, "efficiency_ratio")
    assert (ranking.rank, ranking.total, ranking.percentile) == (1, 5, 100)
    assert ranking.value == 10.0


def test_missing_values_are_left_out(five_banks, store, seed):
    seed("NOVALUE", 1.0)
    ranking = rank_metric(store, "R4", PERIOD, "roa")
    assert ranking.total == 5
    assert rank_metric(store, "NOVALUE", PERIOD, "roa").rank is None


def test_absent_entity_is_all_none(five_banks, store):
    ranking = rank_metric(store, "NOPE", PERIOD, "roa")
    assert ranking.model_dump() == {"rank": None, "total": None, "percentile": None, "value": None}


def test_rank_entity_covers_every_metric(five_banks, store):
    rankings = rank_entity(store, "R5", PERIOD)
    assert rankings["roa"].rank == 1
    assert rankings["total_assets"].rank == 1
    assert rankings["efficiency_ratio"].rank == 5
    assert rankings["operating_leverage"].rank is None
    assert "nim" in rankings


def test_other_periods_not_in_population(five_banks, store, seed):
    seed("EARLIER", 1.0, date(2025, 3, 31), roa=99.0)
    assert rank_metric(store, "R5", PERIOD, "roa").rank == 1


def test_percentile_rounds_half_up():
    assert percentile(1, 1) == 100
    assert percentile(2, 5) == 80
    assert percentile(8, 8) == 13      # 12.5
    assert percentile(3, 8) == 75
    assert percentile(5, 6) == 33      # 33.33
