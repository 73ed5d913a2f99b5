"""Tests for reporting-basis detection and prefix fallback."""

from ffiec_mcp.field_resolver import FieldResolver, determine_basis, resolve
from ffiec_mcp.mdrm_fields import FieldSpec, ReportingBasis, candidates


def test_basis_consolidated_when_rcfd_assets_positive():
    assert determine_basis({"RCFD2170": 5000, "RCON2170": 4000}) is ReportingBasis.CONSOLIDATED


def test_basis_skips_zero_consolidated_assets():
    assert determine_basis({"RCFD2170": 0, "RCON2170": 10}) is ReportingBasis.DOMESTIC


def test_basis_foreign_only():
    assert determine_basis({"RCFN2170": 3}) is ReportingBasis.FOREIGN


def test_basis_defaults_to_domestic():
    assert determine_basis({}) is ReportingBasis.DOMESTIC
    assert determine_basis({"RCFD2170": "n/a"}) is ReportingBasis.DOMESTIC


def test_candidate_order():
    assert candidates("2200", ReportingBasis.CONSOLIDATED) == ["RCFD2200", "RCON2200", "RCFN2200"]
    assert candidates("2200", ReportingBasis.DOMESTIC) == ["RCON2200", "RCFD2200", "RCFN2200"]
    assert candidates("2200", ReportingBasis.FOREIGN) == ["RCFN2200", "RCON2200", "RCFD2200"]


def test_falls_back_to_domestic_prefix():
    record = {"RCFD2170": 100, "RCON2200": 40}
    assert resolve(record, "2200") == 40


def test_governing_prefix_wins():
    record = {"RCFD2170": 100, "RCFD2200": 70, "RCON2200": 40}
    assert resolve(record, "2200") == 70


def test_reported_zero_is_kept():
    record = {"RCFD2170": 100, "RCFD2200": 0, "RCON2200": 40}
    assert resolve(record, "2200") == 0


def test_missing_everywhere():
    record = {"RCON2170": 10}
    assert resolve(record, "2200") == 0
    assert resolve(record, "2200", strict=True) is None


def test_text_cells_are_not_values():
    record = {"RCON2170": 10, "RCON2200": "n/a", "RCFD2200": 8}
    assert resolve(record, "2200") == 8


def test_fixed_prefix_spec():
    resolver = FieldResolver({"RIAD4340": 12, "RCON4340": 99})
    assert resolver.resolve_spec(FieldSpec("4340", "Net income", "RIAD")) == 12
    assert resolver.resolve_income(FieldSpec("4074", "NII", "RIAD")) == 0


def test_sum_bases():
    resolver = FieldResolver({"RCFD2170": 10, "RCFN2200": 3, "RCON2200": 4})
    assert resolver.sum_bases("2200", ReportingBasis.FOREIGN, ReportingBasis.DOMESTIC) == 7
    assert resolver.sum_bases("6631", ReportingBasis.FOREIGN, ReportingBasis.DOMESTIC) == 0

    strict = FieldResolver({"RCFD2170": 10}, strict=True)
    assert strict.sum_bases("6631", ReportingBasis.FOREIGN, ReportingBasis.DOMESTIC) is None


def test_explicit_basis_overrides_detection():
    resolver = FieldResolver({"RCFD1607": 9, "RCON1607": 5}, basis=ReportingBasis.CONSOLIDATED)
    assert resolver.resolve("1607") == 9
