"""Console interface for the budget planner."""

from __future__ import annotations

import argparse
import logging
import sys
from decimal import Decimal
from pathlib import Path
from typing import List, Optional, Tuple

from budget_core.config import load_settings
from budget_core.exceptions import PersistenceError, RecordNotFoundError
from budget_core.models import Category, Expense, LedgerSummary
from budget_core.report import DEFAULT_REPORT_FILENAME, to_csv, write_csv
from budget_core.services import LedgerService
from budget_core.storage import JSONStorage, LedgerPersistence


def _load_ledger(data_dir: Path, resource: str) -> Tuple[LedgerService, LedgerPersistence]:
    storage = JSONStorage(data_dir)
    persistence = LedgerPersistence(storage, resource)
    return LedgerService(persistence.load()), persistence


def _commit(ledger: LedgerService, persistence: LedgerPersistence) -> None:
    if not persistence.save(ledger.state):
        raise PersistenceError(f"Unable to save {persistence.resource}")


def _format_category(ledger: LedgerService, category: Category) -> str:
    usage = ledger.usage_percent(category.id)
    kind = "savings" if category.is_savings else "expense"
    usage_label = "N/A" if usage is None else f"{usage:.1f}%"
    return (
        f"[{category.id}] {category.name} ({kind})\n"
        f"  Budget: {category.budget:.2f} | Spent: {ledger.spent(category.id):.2f}"
        f" | Balance: {ledger.balance(category.id):.2f} | Usage: {usage_label}\n"
    )


def _format_expense(ledger: LedgerService, expense: Expense) -> str:
    category = ledger.find_category(expense.category_id)
    label = category.name if category else expense.category_id
    return f"[{expense.id}] {expense.date.isoformat()} {expense.amount:.2f} {label}: {expense.description}"


def _format_summary(summary: LedgerSummary) -> str:
    return (
        f"Income:           {summary.income:.2f}\n"
        f"Total budgeted:   {summary.total_budgeted:.2f}\n"
        f"Total spent:      {summary.total_spent:.2f}\n"
        f"Unallocated:      {summary.unallocated:.2f}\n"
        f"Savings pool:     {summary.savings_pool:.2f}"
        f" at {summary.savings_annual_rate.normalize():f}% a year\n"
        f"Monthly earnings: {summary.monthly_savings_earnings:.2f}\n"
        f"Annual earnings:  {summary.annual_savings_earnings:.2f}"
    )


def handle_income(args: argparse.Namespace, ledger: LedgerService, persistence: LedgerPersistence) -> None:
    if ledger.set_income(args.amount):
        _commit(ledger, persistence)
    print(f"Income: {ledger.state.income:.2f}")


def handle_savings(args: argparse.Namespace, ledger: LedgerService, persistence: LedgerPersistence) -> None:
    if args.command == "rate":
        if ledger.set_savings_rate(args.rate):
            _commit(ledger, persistence)
    summary = ledger.summary()
    print(
        f"Savings pool {summary.savings_pool:.2f} at {summary.savings_annual_rate.normalize():f}%:"
        f" {summary.monthly_savings_earnings:.2f} a month,"
        f" {summary.annual_savings_earnings:.2f} a year"
    )


def handle_category(args: argparse.Namespace, ledger: LedgerService, persistence: LedgerPersistence) -> None:
    if args.command == "add":
        category = ledger.add_category(args.name, args.budget)
        if category is None:
            print("Nothing changed: a category needs a name and a budget above zero.")
            return
        _commit(ledger, persistence)
        print("Category added:\n" + _format_category(ledger, category))
    elif args.command == "budget":
        category = ledger.get_category(args.id)
        if ledger.update_category_budget(category.id, args.budget):
            _commit(ledger, persistence)
        print(_format_category(ledger, ledger.get_category(args.id)))
    elif args.command == "delete":
        ledger.get_category(args.id)
        if not ledger.delete_category(args.id):
            print("Nothing changed: the savings category cannot be deleted.")
            return
        _commit(ledger, persistence)
        print(f"Category {args.id} deleted.")
    elif args.command == "list":
        for category in ledger.list_categories():
            print(_format_category(ledger, category))


def handle_expense(args: argparse.Namespace, ledger: LedgerService, persistence: LedgerPersistence) -> None:
    if args.command == "add":
        expense = ledger.add_expense(args.category, args.description, args.amount)
        if expense is None:
            print(
                "Nothing changed: an expense needs a spending category,"
                " a description and an amount above zero."
            )
            return
        _commit(ledger, persistence)
        print("Expense added:\n" + _format_expense(ledger, expense))
    elif args.command == "delete":
        if not ledger.delete_expense(args.id):
            raise RecordNotFoundError(f"Expense {args.id} not found")
        _commit(ledger, persistence)
        print(f"Expense {args.id} deleted.")
    elif args.command == "list":
        expenses = ledger.list_expenses(args.category)
        if not expenses:
            print("No expenses found.")
            return
        total = sum((expense.amount for expense in expenses), start=Decimal("0.00"))
        print(f"Found {len(expenses)} expenses (total {total:.2f}):")
        for expense in expenses:
            print(_format_expense(ledger, expense))


def handle_report(args: argparse.Namespace, ledger: LedgerService) -> None:
    if args.output is None:
        sys.stdout.write(to_csv(ledger.state))
        return
    try:
        path = write_csv(ledger.state, args.output)
    except OSError as exc:
        raise PersistenceError(f"Unable to write to {args.output}") from exc
    print(f"Report written to {path}")


def build_parser() -> argparse.ArgumentParser:
    settings = load_settings()
    parser = argparse.ArgumentParser(description="Budget Planner CLI")
    parser.add_argument(
        "--data-dir",
        default=settings.data_dir,
        type=Path,
        help="Directory to store the ledger JSON (default: $BUDGET_PLANNER_DATA_DIR or ./data)",
    )
    parser.add_argument("--resource", default=settings.resource, help=argparse.SUPPRESS)
    parser.add_argument("-v", "--verbose", action="store_true", help="Log storage activity")

    subparsers = parser.add_subparsers(dest="entity", required=True)

    income_parser = subparsers.add_parser("income", help="Set the monthly income")
    income_sub = income_parser.add_subparsers(dest="command", required=True)
    income_set = income_sub.add_parser("set", help="Replace the monthly income")
    income_set.add_argument("amount")

    savings_parser = subparsers.add_parser("savings", help="Savings pool and interest rate")
    savings_sub = savings_parser.add_subparsers(dest="command", required=True)
    savings_rate = savings_sub.add_parser("rate", help="Set the annual interest rate (percent)")
    savings_rate.add_argument("rate")
    savings_sub.add_parser("show", help="Show projected earnings")

    category_parser = subparsers.add_parser("category", help="Manage budget categories")
    category_sub = category_parser.add_subparsers(dest="command", required=True)
    category_add = category_sub.add_parser("add", help="Add a spending category")
    category_add.add_argument("name")
    category_add.add_argument("budget")
    category_budget = category_sub.add_parser("budget", help="Change a category's budget")
    category_budget.add_argument("id")
    category_budget.add_argument("budget")
    category_delete = category_sub.add_parser("delete", help="Delete a category and its expenses")
    category_delete.add_argument("id")
    category_sub.add_parser("list", help="List categories with balances")

    expense_parser = subparsers.add_parser("expense", help="Manage expenses")
    expense_sub = expense_parser.add_subparsers(dest="command", required=True)
    expense_add = expense_sub.add_parser("add", help="Record an expense dated today")
    expense_add.add_argument("category", help="Category id")
    expense_add.add_argument("description")
    expense_add.add_argument("amount")
    expense_delete = expense_sub.add_parser("delete", help="Delete an expense")
    expense_delete.add_argument("id")
    expense_list = expense_sub.add_parser("list", help="List expenses, newest first")
    expense_list.add_argument("--category")

    subparsers.add_parser("summary", help="Show dashboard totals")

    report_parser = subparsers.add_parser("report", help="Export the category report as CSV")
    report_parser.add_argument(
        "--output",
        type=Path,
        help=f"File to write (for example {DEFAULT_REPORT_FILENAME}); prints to stdout when omitted",
    )

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING)
    ledger, persistence = _load_ledger(args.data_dir, args.resource)

    try:
        if args.entity == "income":
            handle_income(args, ledger, persistence)
        elif args.entity == "savings":
            handle_savings(args, ledger, persistence)
        elif args.entity == "category":
            handle_category(args, ledger, persistence)
        elif args.entity == "expense":
            handle_expense(args, ledger, persistence)
        elif args.entity == "summary":
            print(_format_summary(ledger.summary()))
        elif args.entity == "report":
            handle_report(args, ledger)
        else:  # pragma: no cover - argparse should prevent this
            parser.error(f"Unknown entity: {args.entity}")
            return 2
    except RecordNotFoundError as exc:
        print(str(exc), file=sys.stderr)
        return 1
    except PersistenceError as exc:
        print(f"Storage error: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
