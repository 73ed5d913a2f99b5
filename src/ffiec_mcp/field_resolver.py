"""Reporting-basis-aware field resolution for Call Report records.

A bank reports most balance-sheet items under exactly one of the RCFD /
RCON / RCFN prefixes.  The governing basis is picked once per bank from
total assets, then every item is looked up under that prefix first and the
remaining prefixes after it (see ``mdrm_fields.candidates``).

Known ambiguity: in the default (non-strict) mode an item reported under
no prefix resolves to 0, so "reported zero" and "not reported" look the
same downstream.  ``strict=True`` returns None for the latter instead.
"""

from __future__ import annotations

import math
from typing import Any

from ffiec_mcp.mdrm_fields import (
    FieldSpec,
    ReportingBasis,
    TOTAL_ASSETS_CODE,
    candidates,
    income_code,
)


def numeric(value: Any) -> float | None:
    """Return value as a number if it is a usable numeric cell, else None."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        if isinstance(value, float) and (math.isnan(value) or math.isinf(value)):
            return None
        return value
    return None


def determine_basis(record: dict[str, Any]) -> ReportingBasis:
    """Pick the governing reporting basis for one bank.

    Consolidated if RCFD total assets are reported and positive, else
    domestic, else foreign; banks reporting no total assets at all are
    treated as domestic filers.
    """
    for basis in (ReportingBasis.CONSOLIDATED, ReportingBasis.DOMESTIC, ReportingBasis.FOREIGN):
        total = numeric(record.get(f"{basis.value}{TOTAL_ASSETS_CODE}"))
        if total is not None and total > 0:
            return basis
    return ReportingBasis.DOMESTIC


class FieldResolver:
    """Resolves item codes for one bank's merged record."""

    def __init__(
        self,
        record: dict[str, Any],
        *,
        strict: bool = False,
        basis: ReportingBasis | None = None,
    ):
        self.record = record
        self.strict = strict
        self.basis = basis or determine_basis(record)

    @property
    def missing(self) -> float | None:
        """Value used when an item is absent under every prefix."""
        return None if self.strict else 0

    def reported(self, full_code: str) -> float | None:
        """Exact lookup of a fully-prefixed code; None when absent."""
        return numeric(self.record.get(full_code))

    def resolve(self, code: str) -> float | None:
        """First present value across the candidate prefixes for an item code."""
        for full_code in candidates(code, self.basis):
            value = self.reported(full_code)
            if value is not None:
                return value
        return self.missing

    def resolve_spec(self, spec: FieldSpec) -> float | None:
        """Resolve a registry entry, honouring fixed prefixes (RIAD ...)."""
        if spec.prefix is not None:
            value = self.reported(f"{spec.prefix}{spec.code}")
            return self.missing if value is None else value
        return self.resolve(spec.code)

    def resolve_income(self, spec: FieldSpec) -> float | None:
        value = self.reported(income_code(spec))
        return self.missing if value is None else value

    def sum_bases(self, code: str, *bases: ReportingBasis) -> float | None:
        """Add an item across several bases (used to rebuild consolidated deposits)."""
        values = [self.reported(f"{b.value}{code}") for b in bases]
        present = [v for v in values if v is not None]
        if not present:
            return self.missing
        return sum(present)


def resolve(record: dict[str, Any], base_code: str, *, strict: bool = False) -> float | None:
    """Resolve one item code for a record, deciding its basis on the fly.

    >>> resolve({"RCON2170": 500, "RCON2200": 400}, "2200")
    400
    """
    return FieldResolver(record, strict=strict).resolve(base_code)
