"""Shared fixtures: an in-process MongoDB store and Call Report schedule files."""

from datetime import date
from pathlib import Path

import mongomock
import pytest

from ffiec_mcp.config import Settings
from ffiec_mcp.db import FilingStore
from ffiec_mcp.models import (
    Assets,
    BalanceSheet,
    FinancialStatement,
    IncomeStatement,
    Institution,
    NoninterestExpense,
    NoninterestIncome,
    Ratios,
)

PERIOD = date(2025, 6, 30)


def write_schedule(path: Path, codes: list[str], rows: list[list], descriptions: list[str] | None = None) -> Path:
    """Write a schedule file the way the FFIEC bulk download lays it out."""
    descriptions = descriptions or [f"Description of {c}" for c in codes]
    lines = ["\t".join(f'"{c}"' for c in codes), "\t".join(descriptions)]
    for row in rows:
        lines.append("\t".join("" if v is None else str(v) for v in row))
    path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return path


@pytest.fixture
def store():
    return FilingStore(mongomock.MongoClient()["ffiec_test"])


@pytest.fixture
def settings():
    return Settings(
        _env_file=None,
        mongodb_uri="",
        import_workers=2,
        max_concurrent_writes=1,
        progress_interval=1,
    )


@pytest.fixture
def schedule_file(tmp_path):
    def _write(name, codes, rows, descriptions=None):
        return write_schedule(tmp_path / name, codes, rows, descriptions)
    return _write


@pytest.fixture
def call_report_dir(tmp_path):
    """One quarter for three banks.

    100  domestic filer, balanced, ROA 1.00% at June
    200  consolidated filer with an NII mismatch
    300  on the roster and in RC, but missing from RI
    """
    stamp = "06302025"
    write_schedule(
        tmp_path / f"FFIEC CDR Call Bulk POR {stamp}.txt",
        ["IDRSSD", "Financial Institution Name", "FDIC Certificate Number",
         "Financial Institution State", "Financial Institution Zip Code",
         "Last Date/Time Submission Updated On"],
        [
            [100, "First Community Bank", 1111, "NJ", 7102, "7/28/2025 10:15:00 AM"],
            [200, "Big National Bank", 2222, "NY", 10001, "7/30/2025 4:00:00 PM"],
            [300, "Roster Only Bank", 3333, "TX", 75001, "not a date"],
        ],
    )
    write_schedule(
        tmp_path / f"FFIEC CDR Call Schedule RC {stamp}.txt",
        ["IDRSSD", "RCFD2170", "RCON2170", "RCFD2948", "RCON2948", "RCFD3210",
         "RCON3210", "RCFDB528", "RCONB528", "RCON2200", "RCFN2200"],
        [
            [100, None, 1000, None, 900, None, 100, None, 600, 800, None],
            [200, 5000, 4200, 4500, 3800, 500, 400, 3000, 2500, 3000, 1000],
            [300, None, 50, None, 40, None, 10, None, 20, 30, None],
            [999, 1, 2],
        ],
    )
    write_schedule(
        tmp_path / f"FFIEC CDR Call Schedule RCCI {stamp}.txt",
        ["IDRSSD", "RCONB537", "RCFDB537", "RCON1763"],
        [
            [100, 50, None, 200],
            [200, 400, 700, 900],
        ],
    )
    write_schedule(
        tmp_path / f"FFIEC CDR Call Schedule RI {stamp}.txt",
        ["IDRSSD", "RIAD4107", "RIAD4073", "RIAD4074", "RIAD4079", "RIAD4093", "RIAD4340"],
        [
            [100, 50, 20, 30, 10, 25, 5],
            [200, 150, 40, 100, 60, 90, 50],
        ],
    )
    write_schedule(
        tmp_path / f"FFIEC CDR Call Schedule RCM {stamp}.txt",
        ["IDRSSD", "TEXT4087"],
        [
            [100, "www.firstcommunity.example"],
            [200, "https://bignational.example"],
        ],
    )
    return tmp_path


@pytest.fixture
def seed(store):
    """Upsert a minimal statement (and institution) into the store."""
    def _seed(
        idrssd,
        total_assets,
        period=PERIOD,
        *,
        name=None,
        net_interest_income=0.0,
        noninterest_income=0.0,
        noninterest_expense=0.0,
        **ratios,
    ):
        store.upsert_institution(Institution(idrssd=idrssd, name=name or f"Bank {idrssd}"))
        statement = FinancialStatement(
            idrssd=idrssd,
            reporting_period=period,
            balance_sheet=BalanceSheet(assets=Assets(total_assets=total_assets)),
            income_statement=IncomeStatement(
                net_interest_income=net_interest_income,
                noninterest_income=NoninterestIncome(total=noninterest_income),
                noninterest_expense=NoninterestExpense(total=noninterest_expense),
            ),
            ratios=Ratios(**ratios),
        )
        store.upsert_statement(statement)
        return statement
    return _seed
