"""Tests for the peer analysis batch and operating-leverage refresh."""

from datetime import date

import pytest

from ffiec_mcp.peer_analysis import (
    generate_all_peer_analyses,
    generate_peer_analysis,
    largest_banks,
    refresh_operating_leverage,
    save_peer_analysis,
)

Q1 = date(2025, 3, 31)
Q2 = date(2025, 6, 30)


@pytest.fixture
def two_quarters(seed):
    for period in (Q1, Q2):
        seed("A", 1000.0, period, name="Alpha Bank", roa=1.0)
        seed("B", 2000.0, period, name="Beta Bank", roa=2.0)
        seed("C", 3000.0, period, name="Gamma Bank", roa=3.0)
    # D only reported in the first quarter, as the biggest bank
    seed("D", 9000.0, Q1, name="Delta Bank", roa=0.5)


def test_generate_peer_analysis_all_periods(two_quarters, store):
    result = generate_peer_analysis("B", store=store, n=10)

    assert result.idrssd == "B"
    assert result.name == "Beta Bank"
    assert [p.reporting_period for p in result.periods] == [Q1, Q2]

    q2 = result.periods[1]
    assert q2.peers.larger == ["C"]
    assert q2.peers.smaller == ["A"]
    assert q2.peer_averages["roa"] == pytest.approx(2.0)
    assert q2.rankings["roa"].rank == 2
    assert q2.rankings["roa"].total == 3
    assert q2.bank_metrics["total_assets"] == 2000.0

    assert result.periods[0].peers.larger == ["C", "D"]


def test_generate_peer_analysis_single_period(two_quarters, store):
    result = generate_peer_analysis("B", Q2, store=store, n=1)
    assert len(result.periods) == 1
    assert result.periods[0].peers.peer_ids == ["C", "A"]


def test_unknown_bank(two_quarters, store):
    assert generate_peer_analysis("ZZZ", store=store) is None


def test_period_without_peers_is_skipped(store, seed):
    seed("ONLY", 10.0, Q2)
    result = generate_peer_analysis("ONLY", store=store)
    assert result is not None
    assert result.periods == []


def test_save_peer_analysis(two_quarters, store):
    result = generate_peer_analysis("A", store=store)
    assert save_peer_analysis(result, store) == 2

    stored = store.get_statement("A", Q2)["peer_analysis"]
    assert stored["peers"]["larger"] == ["B", "C"]
    assert stored["rankings"]["roa"]["rank"] == 3
    assert stored["generated_at"] is not None
    assert "peer_analysis" not in store.get_statement("B", Q2)


def test_largest_banks_use_latest_quarter(two_quarters, store):
    assert largest_banks(store, 2) == ["D", "C"]
    # D's latest (only) quarter is Q1 with 9000, larger than everyone's Q2
    assert largest_banks(store, 4) == ["D", "C", "B", "A"]


def test_generate_all_peer_analyses(two_quarters, store):
    summary = generate_all_peer_analyses(top_n=2, store=store)

    assert summary == {"banks": 2, "processed": 2, "errors": 0}
    assert store.get_statement("D", Q1).get("peer_analysis") is not None
    assert store.get_statement("C", Q2).get("peer_analysis") is not None
    assert store.get_statement("A", Q2).get("peer_analysis") is None


def test_generate_all_counts_errors(two_quarters, store, monkeypatch):
    from ffiec_mcp import peer_analysis

    def boom(idrssd, *args, **kwargs):
        raise RuntimeError("store went away")

    monkeypatch.setattr(peer_analysis, "generate_peer_analysis", boom)
    summary = generate_all_peer_analyses(top_n=3, store=store)
    assert summary == {"banks": 3, "processed": 0, "errors": 3}


def test_refresh_operating_leverage(store, seed):
    seed("OL", 100.0, Q1, net_interest_income=800, noninterest_income=200, noninterest_expense=500)
    seed("OL", 100.0, Q2, net_interest_income=880, noninterest_income=220, noninterest_expense=525)

    assert refresh_operating_leverage(store, "OL") == 1
    assert store.get_statement("OL", Q2)["ratios"]["operating_leverage"] == pytest.approx(2.0)
    assert store.get_statement("OL", Q1)["ratios"]["operating_leverage"] is None
