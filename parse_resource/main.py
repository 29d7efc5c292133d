from __future__ import annotations

import json
import sys
from typing import Any, Dict, List, NoReturn, Optional, Type

import typer

from parse_resource.config import get_settings
from parse_resource.exceptions import ParseResourceError
from parse_resource.orm.base import Record
from parse_resource.orm.registry import REGISTRY
from parse_resource.reporter import render_records, render_settings
from parse_resource.utils.logging import configure_logging, get_logger

app = typer.Typer(help="parse-resource CLI: inspect classes on a Parse-style backend.")

log = get_logger(__name__)


def _setup() -> None:
    settings = get_settings()
    configure_logging(level=settings.log_level, json_logs=settings.json_logs)


def _record_type(class_name: str) -> Type[Record]:
    return REGISTRY.get_or_define(class_name).record_type


def _parse_where(where: Optional[str]) -> Dict[str, Any]:
    if not where:
        return {}
    try:
        criteria = json.loads(where)
    except ValueError as exc:
        raise typer.BadParameter(f"--where must be a JSON object: {exc}") from exc
    if not isinstance(criteria, dict):
        raise typer.BadParameter("--where must be a JSON object")
    return criteria


def _fail(exc: ParseResourceError) -> NoReturn:
    log.debug(f"Command failed: {exc}")
    typer.echo(f"Error: {exc}", err=True)
    raise typer.Exit(code=1)


@app.command()
def info() -> None:
    """
    Show effective configuration values.
    """
    render_settings(get_settings())


@app.command()
def get(
    class_name: str = typer.Argument(..., help="Backend class name (e.g. Post, _User)."),
    object_id: str = typer.Argument(..., help="objectId of the record."),
) -> None:
    """
    Fetch one record and print its attributes as JSON.
    """
    _setup()
    try:
        record = _record_type(class_name).find(object_id)
    except ParseResourceError as exc:
        _fail(exc)
    if record is None:
        typer.echo(f"{class_name} {object_id} not found.", err=True)
        raise typer.Exit(code=1)
    typer.echo(json.dumps(record.attributes, indent=2, default=str))


@app.command("list")
def list_records(
    class_name: str = typer.Argument(..., help="Backend class name (e.g. Post, _User)."),
    where: Optional[str] = typer.Option(None, "--where", "-w", help="JSON filter criteria."),
    limit: Optional[int] = typer.Option(None, "--limit", "-n", min=0, help="Maximum records."),
    include: List[str] = typer.Option(
        [], "--include", "-i", help="Pointer field to inline (repeatable)."
    ),
) -> None:
    """
    List matching records as a table.
    """
    _setup()
    criteria = _parse_where(where)
    query = _record_type(class_name).where(criteria).include(*include)
    if limit is not None:
        query = query.limit(limit)
    try:
        records = query.all()
    except ParseResourceError as exc:
        _fail(exc)
    render_records(records, title=class_name)


@app.command()
def count(
    class_name: str = typer.Argument(..., help="Backend class name (e.g. Post, _User)."),
    where: Optional[str] = typer.Option(None, "--where", "-w", help="JSON filter criteria."),
) -> None:
    """
    Print the number of matching records.
    """
    _setup()
    criteria = _parse_where(where)
    try:
        total = _record_type(class_name).where(criteria).count()
    except ParseResourceError as exc:
        _fail(exc)
    typer.echo(str(total))


def main() -> None:
    try:
        app()
    except KeyboardInterrupt:
        typer.echo("Cancelled by user.", err=True)
        sys.exit(130)


if __name__ == "__main__":
    main()
