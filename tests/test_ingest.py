from __future__ import annotations

import csv
from decimal import Decimal
from pathlib import Path

import pytest

from expense_ai.ingest import load_transactions_from_csv


def _write(tmp_path: Path, text: str, name: str = "statement.csv") -> Path:
    p = tmp_path / name
    p.write_text(text, encoding="utf-8")
    return p


def test_loads_rows_in_file_order(tmp_path: Path):
    p = _write(
        tmp_path,
        "Date,Description,Amount\n"
        "07/01/2024,Coffee Shop,-5.50\n"
        "2024-07-02,Salary   Deposit,\"$2,500.00\"\n"
        "07/04/24,Gas Station,(50.00)\n",
    )

    txs = load_transactions_from_csv(p)

    assert [t.date for t in txs] == ["2024-07-01", "2024-07-02", "2024-07-04"]
    assert [t.description for t in txs] == ["Coffee Shop", "Salary Deposit", "Gas Station"]
    assert [t.amount for t in txs] == [Decimal("-5.50"), Decimal("2500.00"), Decimal("-50.00")]
    assert all(t.id is None for t in txs)


def test_headers_case_insensitive_extra_columns_ignored_and_bom(tmp_path: Path):
    p = tmp_path / "bom.csv"
    p.write_text(
        "\ufeffAMOUNT, date ,Description,Balance\n-12.00,2024-06-01,Pharmacy,100.00\n",
        encoding="utf-8",
    )

    (tx,) = load_transactions_from_csv(p)

    assert tx.date == "2024-06-01"
    assert tx.description == "Pharmacy"
    assert tx.amount == Decimal("-12.00")


def test_missing_columns(tmp_path: Path):
    p = _write(tmp_path, "Date,Memo\n2024-06-01,x\n")
    with pytest.raises(csv.Error, match="Missing columns: description, amount"):
        load_transactions_from_csv(p)


def test_invalid_amount_reports_row(tmp_path: Path):
    p = _write(tmp_path, "Date,Description,Amount\n2024-06-01,ok,1\n2024-06-02,bad,abc\n")
    with pytest.raises(csv.Error, match="row 3"):
        load_transactions_from_csv(p)


def test_header_only_file_is_empty(tmp_path: Path):
    p = _write(tmp_path, "Date,Description,Amount\n")
    assert load_transactions_from_csv(p) == []


def test_empty_file(tmp_path: Path):
    p = _write(tmp_path, "")
    with pytest.raises(csv.Error):
        load_transactions_from_csv(p)


def test_missing_file(tmp_path: Path):
    with pytest.raises(FileNotFoundError):
        load_transactions_from_csv(tmp_path / "nope.csv")
