"""Tests for MCP server helpers."""

from datetime import date

import pytest


def test_parse_period_formats():
    from ffiec_mcp.server import _parse_period
    assert _parse_period("2025-06-30") == date(2025, 6, 30)
    assert _parse_period(" 06302025 ") == date(2025, 6, 30)
    assert _parse_period(None) is None
    assert _parse_period("") is None


def test_parse_period_rejects_garbage():
    from ffiec_mcp.server import _parse_period
    with pytest.raises(ValueError):
        _parse_period("last quarter")


def test_server_registers_tools():
    from ffiec_mcp.server import mcp
    assert mcp.name == "FFIEC-MCP"


def _tool(name):
    from ffiec_mcp import server
    tool = getattr(server, name)
    # fastmcp 2.x wraps decorated functions in a FunctionTool
    return getattr(tool, "fn", tool)


@pytest.mark.parametrize("name, kwargs", [
    ("get_bank_financials", {"idrssd": "100"}),
    ("get_peer_comparison", {"idrssd": "100"}),
    ("run_peer_analysis", {"idrssd": "100"}),
    ("refresh_operating_leverage", {"idrssd": "100"}),
])
def test_tools_report_missing_store(monkeypatch, name, kwargs):
    from ffiec_mcp.errors import StoreUnavailableError

    def unavailable():
        raise StoreUnavailableError("MONGODB_URI is not set")

    monkeypatch.setattr("ffiec_mcp.server.get_store", unavailable)
    result = _tool(name)(**kwargs)
    assert result == {"idrssd": "100", "error": "MONGODB_URI is not set"}


@pytest.mark.parametrize("name", ["get_bank_financials", "get_peer_comparison", "run_peer_analysis"])
def test_tools_report_bad_period(monkeypatch, store, name):
    monkeypatch.setattr("ffiec_mcp.server.get_store", lambda: store)
    result = _tool(name)(idrssd="100", reporting_period="last quarter")
    assert result["idrssd"] == "100"
    assert "last quarter" in result["error"]


def test_bank_financials_from_store(monkeypatch, store, seed):
    seed("100", 1000.0)
    monkeypatch.setattr("ffiec_mcp.server.get_store", lambda: store)
    result = _tool("get_bank_financials")(idrssd="100", reporting_period="06302025")
    assert result["statement"]["reporting_period"] == "2025-06-30"
    assert result["institution"]["name"] == "Bank 100"
