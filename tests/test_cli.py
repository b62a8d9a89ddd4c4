from __future__ import annotations

import os
from pathlib import Path

import pytest
from typer.testing import CliRunner

import expense_ai.classifier as classifier_mod
import expense_ai.cli as cli_mod
from expense_ai.cli import app

from tests.helpers.model_stub import ScriptedModel, StatusError, by_description

runner = CliRunner()

CSV = (
    "Date,Description,Amount\n"
    "2024-07-01,Coffee Shop,-5.50\n"
    "2024-07-02,Salary Deposit,2500.00\n"
    "2024-06-06,Electricity Bill,-120.00\n"
)

MAPPING = {
    "Coffee Shop": "Food",
    "Salary Deposit": "Income",
    "Electricity Bill": "Bills",
}


class _CliModel:
    """Categorizes via ``ScriptedModel`` and answers insight calls with fixed text."""

    def __init__(self, scripted: ScriptedModel) -> None:
        self.scripted = scripted
        self.summary_calls = 0

    def complete(self, instructions: str, prompt: str) -> str:
        if "BEGIN_TRANSACTIONS_JSON" in prompt:
            return self.scripted.complete(instructions, prompt)
        self.summary_calls += 1
        return "Bills dominate this statement."


@pytest.fixture(autouse=True)
def _quiet_logging(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(cli_mod, "configure_logging", lambda level=None: None)


@pytest.fixture
def api_key(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("OPENAI_API_KEY", "sk-test")


@pytest.fixture
def statement(tmp_path: Path) -> Path:
    p = tmp_path / "statement.csv"
    p.write_text(CSV, encoding="utf-8")
    return p


def _install_model(monkeypatch: pytest.MonkeyPatch, model: _CliModel) -> None:
    monkeypatch.setattr(classifier_mod, "OpenAIResponsesModel", lambda **_: model)


def test_categorize_prints_rows_totals_and_notification(
    monkeypatch: pytest.MonkeyPatch, api_key: None, statement: Path
):
    model = _CliModel(ScriptedModel(by_description(MAPPING)))
    _install_model(monkeypatch, model)

    result = runner.invoke(app, ["categorize", "--csv-path", str(statement)])

    assert result.exit_code == 0, result.output
    assert "2024-07-01\tCoffee Shop\t-5.50\tFood" in result.output
    assert "2024-07-02\tSalary Deposit\t2500.00\tIncome" in result.output
    assert "  Bills\t120.00" in result.output
    assert "  Food\t5.50" in result.output
    assert "  Total\t125.50" in result.output
    assert "Categorization complete: 3 categorized, 0 defaulted" in result.output
    assert model.summary_calls == 0


def test_categorize_month_filter_and_insights(
    monkeypatch: pytest.MonkeyPatch, api_key: None, statement: Path
):
    model = _CliModel(ScriptedModel(by_description(MAPPING)))
    _install_model(monkeypatch, model)

    result = runner.invoke(
        app, ["categorize", "--csv-path", str(statement), "--month", "2024-06", "--insights"]
    )

    assert result.exit_code == 0, result.output
    assert "Electricity Bill" in result.output
    assert "Coffee Shop" not in result.output
    assert "  Total\t120.00" in result.output
    assert "Bills dominate this statement." in result.output
    assert model.summary_calls == 1


def test_categorize_chunk_size_option(
    monkeypatch: pytest.MonkeyPatch, api_key: None, statement: Path
):
    scripted = ScriptedModel(by_description(MAPPING))
    _install_model(monkeypatch, _CliModel(scripted))

    result = runner.invoke(
        app, ["categorize", "--csv-path", str(statement), "--chunk-size", "1"]
    )

    assert result.exit_code == 0, result.output
    assert len(scripted.calls) == 3


def test_total_failure_defaults_everything_and_exits_nonzero(
    monkeypatch: pytest.MonkeyPatch, api_key: None, statement: Path
):
    def respond(items):
        raise StatusError(400)

    _install_model(monkeypatch, _CliModel(ScriptedModel(respond)))

    result = runner.invoke(
        app,
        ["categorize", "--csv-path", str(statement), "--default-category", "Uncategorized"],
    )

    assert result.exit_code == 1
    assert "2024-07-01\tCoffee Shop\t-5.50\tUncategorized" in result.output
    assert "AI categorization failed" in result.output
    assert "0 categorized, 3 defaulted" in result.output


def test_missing_api_key(statement: Path):
    result = runner.invoke(app, ["categorize", "--csv-path", str(statement)])
    assert result.exit_code == 1
    assert "OPENAI_API_KEY" in result.output


def test_api_key_loaded_from_dotenv(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path, statement: Path
):
    # The isolated environment runs from tmp_path, so the .env here is picked up.
    (tmp_path / ".env").write_text("OPENAI_API_KEY=sk-from-dotenv\n", encoding="utf-8")
    _install_model(monkeypatch, _CliModel(ScriptedModel(by_description(MAPPING))))

    try:
        result = runner.invoke(app, ["categorize", "--csv-path", str(statement)])
    finally:
        # load_dotenv writes os.environ directly.
        os.environ.pop("OPENAI_API_KEY", None)

    assert result.exit_code == 0, result.output


def test_bad_month(api_key: None, statement: Path):
    result = runner.invoke(app, ["categorize", "--csv-path", str(statement), "--month", "July"])
    assert result.exit_code == 2
    assert "YYYY-MM" in result.output


def test_missing_file(api_key: None, tmp_path: Path):
    result = runner.invoke(app, ["categorize", "--csv-path", str(tmp_path / "nope.csv")])
    assert result.exit_code == 1
    assert "File not found" in result.output


def test_bad_header(api_key: None, tmp_path: Path):
    p = tmp_path / "bad.csv"
    p.write_text("When,What\n2024-07-01,x\n", encoding="utf-8")
    result = runner.invoke(app, ["categorize", "--csv-path", str(p)])
    assert result.exit_code == 1
    assert "Missing columns" in result.output


def test_no_transactions(api_key: None, tmp_path: Path):
    p = tmp_path / "empty.csv"
    p.write_text("Date,Description,Amount\n", encoding="utf-8")
    result = runner.invoke(app, ["categorize", "--csv-path", str(p)])
    assert result.exit_code == 0
    assert "No transactions found" in result.output
