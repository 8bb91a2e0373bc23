from __future__ import annotations

import csv
import json
from pathlib import Path
from typing import Any

import typer
import uvicorn

from talentinsight.api.app import create_app
from talentinsight.config import get_settings
from talentinsight.core.accounts import AccountService
from talentinsight.core.historical import HistoricalArchive
from talentinsight.core.reconciliation import BulkReconciler
from talentinsight.db.init import init_database
from talentinsight.db.session import SessionLocal
from talentinsight.errors import InvalidSubmissionError, ReconciliationAbortedError
from talentinsight.logging_config import configure_logging

app = typer.Typer(help="TalentInsight Hub CLI")
historical_app = typer.Typer(help="Historical survey records")
companies_app = typer.Typer(help="Company accounts and preferences")
users_app = typer.Typer(help="User accounts")

app.add_typer(historical_app, name="historical")
app.add_typer(companies_app, name="companies")
app.add_typer(users_app, name="users")

_INITIALIZED = False


def ensure_initialized() -> None:
    global _INITIALIZED
    if _INITIALIZED:
        return
    init_database()
    _INITIALIZED = True


def read_rows(path: Path) -> list[Any]:
    """Read a CSV file (header row) or a JSON array of objects."""
    if path.suffix.lower() == ".json":
        payload = json.loads(path.read_text(encoding="utf-8"))
        if not isinstance(payload, list):
            raise typer.BadParameter(f"{path} must contain a JSON array")
        return payload
    with path.open(newline="", encoding="utf-8-sig") as handle:
        return list(csv.DictReader(handle))


def _echo_aborted(exc: ReconciliationAbortedError) -> None:
    typer.echo(json.dumps({"ok": False, "error": str(exc), **exc.summary.model_dump(by_alias=True)}, indent=2))
    raise typer.Exit(code=1)


@app.command("init")
def init_cmd() -> None:
    """Create the data directory and database tables."""
    configure_logging()
    result = init_database()
    typer.echo(json.dumps({"ok": True, **result}, indent=2))


@historical_app.command("import")
def historical_import(file: Path = typer.Option(..., "--file", exists=True, readable=True)) -> None:
    configure_logging()
    ensure_initialized()
    rows = read_rows(file)
    with SessionLocal() as db:
        try:
            summary = BulkReconciler(db).reconcile_historical_rows(rows)
        except InvalidSubmissionError as exc:
            raise typer.BadParameter(str(exc)) from exc
        except ReconciliationAbortedError as exc:
            _echo_aborted(exc)
            return
    typer.echo(json.dumps(summary.model_dump(by_alias=True), indent=2))


@historical_app.command("export")
def historical_export(file: Path = typer.Option(..., "--file")) -> None:
    configure_logging()
    ensure_initialized()
    with SessionLocal() as db:
        archive = HistoricalArchive(db)
        columns = archive.export_columns()
        rows = archive.export_rows()

    file.parent.mkdir(parents=True, exist_ok=True)
    with file.open("w", newline="", encoding="utf-8") as handle:
        writer = csv.DictWriter(handle, fieldnames=columns)
        writer.writeheader()
        writer.writerows(rows)
    typer.echo(json.dumps({"ok": True, "file": str(file), "rows": len(rows)}, indent=2))


@companies_app.command("import-preferences")
def companies_import_preferences(
    rankings: Path | None = typer.Option(None, "--rankings", exists=True, readable=True),
    assessments: Path | None = typer.Option(None, "--assessments", exists=True, readable=True),
) -> None:
    configure_logging()
    ensure_initialized()
    ranking_rows = read_rows(rankings) if rankings else []
    assessment_rows = read_rows(assessments) if assessments else []
    with SessionLocal() as db:
        try:
            summary = BulkReconciler(db).import_company_preferences(ranking_rows, assessment_rows)
        except InvalidSubmissionError as exc:
            raise typer.BadParameter(str(exc)) from exc
        except ReconciliationAbortedError as exc:
            _echo_aborted(exc)
            return
    typer.echo(json.dumps(summary.model_dump(by_alias=True), indent=2))


@users_app.command("list")
def users_list(role: str | None = typer.Option(None, "--role")) -> None:
    configure_logging()
    ensure_initialized()
    with SessionLocal() as db:
        users = AccountService(db).list_users(role=role)
        typer.echo(json.dumps([user.model_dump(by_alias=True) for user in users], indent=2))


@app.command("serve")
def serve(
    host: str | None = typer.Option(None, "--host"),
    port: int | None = typer.Option(None, "--port"),
) -> None:
    configure_logging()
    ensure_initialized()
    settings = get_settings()
    app_instance = create_app()
    uvicorn.run(app_instance, host=host or settings.app_host, port=port or settings.app_port)


if __name__ == "__main__":
    app()
