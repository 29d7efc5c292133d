from __future__ import annotations

import json
from typing import Any, Dict, List, Optional, Sequence

from rich import box
from rich.console import Console
from rich.table import Table

from parse_resource.config import Settings
from parse_resource.orm.attributes import CREATED_AT, OBJECT_ID, UPDATED_AT
from parse_resource.orm.base import Record


def mask_secret(value: Optional[str]) -> str:
    """Show only the last four characters of a credential."""
    if not value:
        return "<not set>"
    if len(value) <= 4:
        return "*" * len(value)
    return "*" * (len(value) - 4) + value[-4:]


def format_cell(value: Any) -> str:
    """Render a raw attribute value for a table cell."""
    if value is None:
        return ""
    if isinstance(value, dict):
        if value.get("__type") == "Pointer":
            return f"{value.get('className')}:{value.get('objectId')}"
        if value.get("__type") == "Date":
            return str(value.get("iso", ""))
    if isinstance(value, (dict, list)):
        return json.dumps(value, default=str)
    return str(value)


def columns_for(records: Sequence[Record]) -> List[str]:
    """
    Column order: objectId, declared fields, other keys in first-seen order, timestamps.
    """
    columns: List[str] = [OBJECT_ID]
    if records:
        columns.extend(name for name in type(records[0]).__schema__.fields if name not in columns)
    for record in records:
        for name in record.attributes:
            if name not in columns and name not in (CREATED_AT, UPDATED_AT):
                columns.append(name)
    columns.extend([CREATED_AT, UPDATED_AT])
    return columns


def render_records(
    records: Sequence[Record],
    columns: Optional[Sequence[str]] = None,
    console: Optional[Console] = None,
    title: Optional[str] = None,
) -> None:
    """
    Render records as a rich table.

    Cells show raw values; pointers are printed as `Class:objectId` and are
    never resolved, so rendering makes no network calls.
    """
    console = console or Console()

    if not records:
        console.print("[yellow]No records found.[/yellow]")
        return

    columns = list(columns or columns_for(records))
    table = Table(
        title=title or type(records[0]).class_name,
        box=box.ROUNDED,
        caption=f"{len(records)} record(s)",
    )
    for name in columns:
        style = "cyan" if name == OBJECT_ID else ("dim" if name in (CREATED_AT, UPDATED_AT) else None)
        table.add_column(name, style=style, no_wrap=name == OBJECT_ID)

    for record in records:
        raw = record.attributes
        table.add_row(*(format_cell(raw.get(name)) for name in columns))

    console.print(table)


def settings_rows(settings: Settings) -> Dict[str, str]:
    return {
        "API URL": settings.base_url,
        "Application ID": settings.app_id or "<not set>",
        "Master key": mask_secret(settings.master_key),
        "Environment": settings.app_env,
        "Config file": settings.config_file,
        "Request timeout (s)": f"{settings.request_timeout:g}",
        "Log level": settings.log_level,
    }


def render_settings(settings: Settings, console: Optional[Console] = None) -> None:
    """Render the effective configuration, with the master key masked."""
    console = console or Console()
    table = Table(title="parse-resource configuration", box=box.ROUNDED, show_header=False)
    table.add_column("Setting", style="cyan", no_wrap=True)
    table.add_column("Value", style="green")
    for name, value in settings_rows(settings).items():
        table.add_row(name, value)
    console.print(table)


__all__ = [
    "columns_for",
    "format_cell",
    "mask_secret",
    "render_records",
    "render_settings",
    "settings_rows",
]
