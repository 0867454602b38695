import json

import pytest

from budget_core.storage import DEFAULT_RESOURCE
from budget_planner.cli import main


@pytest.fixture
def run(tmp_path, capsys):
    data_dir = tmp_path / "data"

    def _run(*argv):
        code = main(["--data-dir", str(data_dir), *argv])
        captured = capsys.readouterr()
        return code, captured.out, captured.err

    _run.data_dir = data_dir
    return _run


def _slot(run):
    return json.loads((run.data_dir / DEFAULT_RESOURCE).read_text(encoding="utf-8"))


def _category_id(run, name):
    return next(category["id"] for category in _slot(run)["categories"] if category["name"] == name)


def test_income_and_summary(run):
    assert run("income", "set", "5000")[1] == "Income: 5000.00\n"
    code, out, _ = run("summary")
    assert code == 0
    assert "Unallocated:      5000.00" in out


def test_category_and_expense_flow(run):
    run("income", "set", "5000")
    code, out, _ = run("category", "add", "Food", "800")
    assert code == 0
    assert "Category added" in out
    food_id = _category_id(run, "Food")

    run("expense", "add", food_id, "Lunch", "50")
    run("expense", "add", food_id, "Dinner", "50")
    code, out, _ = run("category", "list")
    assert "Budget: 800.00 | Spent: 100.00 | Balance: 700.00 | Usage: 12.5%" in out
    assert "Usage: N/A" in out

    code, out, _ = run("expense", "list")
    assert out.startswith("Found 2 expenses (total 100.00):")


def test_invalid_category_is_a_noop(run):
    code, out, _ = run("category", "add", "Food", "0")
    assert code == 0
    assert out.startswith("Nothing changed")


def test_savings_cannot_be_deleted(run):
    code, out, _ = run("category", "delete", "savings")
    assert code == 0
    assert out.startswith("Nothing changed")


def test_unknown_category_fails(run):
    code, _, err = run("category", "budget", "missing", "10")
    assert code == 1
    assert "Category missing not found" in err


def test_delete_category_removes_expenses(run):
    run("category", "add", "Food", "800")
    food_id = _category_id(run, "Food")
    run("expense", "add", food_id, "Lunch", "50")
    code, out, _ = run("category", "delete", food_id)
    assert code == 0
    assert _slot(run)["expenses"] == []


def test_savings_rate(run):
    run("category", "budget", "savings", "1000")
    code, out, _ = run("savings", "rate", "6")
    assert code == 0
    assert "5.00 a month" in out
    assert "60.00 a year" in out


def test_report_to_stdout_and_file(run, tmp_path):
    run("category", "add", "Food", "800")
    code, out, _ = run("report")
    assert out.splitlines()[0] == "Category,Budget,Spent,Balance,Type"
    target = tmp_path / "finance-report.csv"
    code, out, _ = run("report", "--output", str(target))
    assert code == 0
    assert target.read_text(encoding="utf-8").splitlines()[-1] == "Food,800.00,0.00,800.00,Expense"
