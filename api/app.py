"""Flask REST API exposing the budget planner ledger."""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from pathlib import Path
from typing import Any, Callable, Dict, Optional

from flask import Flask, Response, jsonify, request
from flask_cors import CORS

from budget_core.config import Settings, load_settings
from budget_core.exceptions import PersistenceError, RecordNotFoundError, ValidationError
from budget_core.generators import ColorFactory, IdFactory
from budget_core.report import DEFAULT_REPORT_FILENAME, to_csv
from budget_core.services import LedgerService
from budget_core.storage import JSONStorage, LedgerPersistence


def create_app(
    data_dir: Optional[Path] = None,
    *,
    settings: Optional[Settings] = None,
    id_factory: Optional[IdFactory] = None,
    color_factory: Optional[ColorFactory] = None,
    today: Optional[Callable[[], date]] = None,
) -> Flask:
    app = Flask(__name__)
    settings = settings or load_settings()

    if settings.is_development:
        CORS(app, resources={r"/*": {"origins": "*"}}, supports_credentials=True)
    elif settings.allowed_origins:
        CORS(app, resources={r"/*": {"origins": list(settings.allowed_origins)}}, supports_credentials=True)
    else:
        CORS(app)

    storage = JSONStorage(Path(data_dir or settings.data_dir))
    persistence = LedgerPersistence(storage, settings.resource)
    ledger = LedgerService(
        persistence.load(),
        id_factory=id_factory,
        color_factory=color_factory,
        today=today,
    )

    def _success(payload: Any, status: int = 200):
        if status == 204:
            return ("", status)
        return jsonify(payload), status

    def _unchanged():
        return _success({"changed": False})

    def _commit() -> None:
        if not persistence.save(ledger.state):
            app.logger.warning("Ledger change kept in memory only; save failed")

    def _handle_error(exc: Exception, status: int, message: str):
        app.logger.error("%s: %s", message, exc)
        return jsonify({"error": message, "details": str(exc)}), status

    @app.errorhandler(ValidationError)
    def handle_validation_error(exc: ValidationError):
        return _handle_error(exc, 400, "Validation error")

    @app.errorhandler(RecordNotFoundError)
    def handle_not_found(exc: RecordNotFoundError):
        return _handle_error(exc, 404, "Record not found")

    @app.errorhandler(PersistenceError)
    def handle_persistence_error(exc: PersistenceError):
        return _handle_error(exc, 500, "Persistence error")

    def _json_body() -> Dict[str, Any]:
        if not request.is_json:
            raise ValidationError("Request content must be application/json")
        data = request.get_json(silent=True)
        if not isinstance(data, dict):
            raise ValidationError("Malformed JSON body")
        return data

    @app.get("/ledger")
    def get_ledger():
        return _success({**ledger.snapshot(), "summary": ledger.summary().to_dict()})

    @app.get("/summary")
    def summary():
        return _success(ledger.summary().to_dict())

    @app.put("/income")
    def set_income():
        payload = _json_body()
        if ledger.set_income(payload.get("income")):
            _commit()
        return _success({"income": f"{ledger.state.income:.2f}"})

    @app.get("/savings")
    def get_savings():
        figures = ledger.summary()
        return _success({
            "pool": f"{figures.savings_pool:.2f}",
            "rate": f"{figures.savings_annual_rate.normalize():f}",
            "monthlyEarnings": f"{figures.monthly_savings_earnings:.2f}",
            "annualEarnings": f"{figures.annual_savings_earnings:.2f}",
        })

    @app.put("/savings/rate")
    def set_savings_rate():
        payload = _json_body()
        if ledger.set_savings_rate(payload.get("rate")):
            _commit()
        return get_savings()

    @app.get("/categories")
    def list_categories():
        return _success({"items": [row.to_dict() for row in ledger.category_overview()]})

    @app.post("/categories")
    def create_category():
        payload = _json_body()
        category = ledger.add_category(payload.get("name"), payload.get("budget"))
        if category is None:
            return _unchanged()
        _commit()
        return _success(ledger.category_row(category.id).to_dict(), 201)

    @app.get("/categories/<category_id>")
    def get_category(category_id: str):
        return _success(ledger.category_row(category_id).to_dict())

    @app.put("/categories/<category_id>/budget")
    def update_category_budget(category_id: str):
        ledger.get_category(category_id)
        payload = _json_body()
        if ledger.update_category_budget(category_id, payload.get("budget")):
            _commit()
        return _success(ledger.category_row(category_id).to_dict())

    @app.delete("/categories/<category_id>")
    def delete_category(category_id: str):
        ledger.get_category(category_id)
        if not ledger.delete_category(category_id):
            return _unchanged()
        _commit()
        return _success({}, 204)

    @app.get("/expenses")
    def list_expenses():
        category_id = request.args.get("category") or None
        expenses = ledger.list_expenses(category_id)
        total = sum((expense.amount for expense in expenses), start=Decimal("0.00"))
        return _success({
            "items": [expense.to_dict() for expense in expenses],
            "total": f"{total:.2f}",
        })

    @app.post("/expenses")
    def create_expense():
        payload = _json_body()
        expense = ledger.add_expense(
            str(payload.get("categoryId") or ""),
            payload.get("description"),
            payload.get("amount"),
        )
        if expense is None:
            return _unchanged()
        _commit()
        return _success(expense.to_dict(), 201)

    @app.delete("/expenses/<expense_id>")
    def delete_expense(expense_id: str):
        if not ledger.delete_expense(expense_id):
            return _unchanged()
        _commit()
        return _success({}, 204)

    @app.get("/report.csv")
    def export_report():
        return Response(
            to_csv(ledger.state),
            mimetype="text/csv",
            headers={"Content-Disposition": f"attachment; filename={DEFAULT_REPORT_FILENAME}"},
        )

    return app
