# cli_ui.py
import os
import re
import shutil
import sys
import unicodedata
from datetime import datetime

from rich import box
from rich.align import Align
from rich.console import Console, Group
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from dataquery.dataset import ABSENT, Dataset, cell_label
from dataquery.schemas import InsightResult, QueryHistoryEntry


ANSI_RE = re.compile(r"\x1b\[[0-9;]*m")

TABLE_PREVIEW_ROWS = 100
HISTORY_TEXT_WIDTH = 60

HELP_LINES = [
    ("<question>", "Ask a question about the loaded data"),
    ("/load PATH", "Load a CSV or Excel file"),
    ("/table [TERM]", "Show the data, optionally filtered by a search term"),
    ("/history", "List previous queries"),
    ("/rerun N", "Run query N from the history again"),
    ("/clear", "Clear the query history"),
    ("/suggest", "Show suggested questions"),
    ("exit", "Leave"),
]


def _strip_ansi(s: str) -> str:
    return ANSI_RE.sub("", s)


def _display_width(s: str) -> int:
    """Terminal display width, roughly handling wide chars (emoji/CJK)."""
    s = _strip_ansi(s)
    w = 0
    for ch in s:
        if unicodedata.combining(ch):
            continue
        w += 2 if unicodedata.east_asian_width(ch) in ("W", "F") else 1
    return w


def _truncate_to_width(s: str, width: int) -> str:
    if _display_width(s) <= width:
        return s
    out = ""
    for ch in s:
        if _display_width(out + ch) > width - 1:
            break
        out += ch
    return out + "…"


def _supports_color() -> bool:
    if os.getenv("NO_COLOR"):
        return False
    if os.getenv("FORCE_COLOR") and os.getenv("FORCE_COLOR") != "0":
        return True
    return sys.stdout.isatty()


def make_console() -> Console:
    return Console(no_color=not _supports_color())


def time_ago(timestamp: datetime, now: datetime | None = None) -> str:
    current = now or datetime.now(timestamp.tzinfo)
    seconds = max(0, int((current - timestamp).total_seconds()))
    if seconds < 45:
        return "less than a minute ago"
    minutes = round(seconds / 60)
    if minutes < 60:
        return f"{minutes} minute{'s' if minutes != 1 else ''} ago"
    hours = round(minutes / 60)
    if hours < 24:
        return f"about {hours} hour{'s' if hours != 1 else ''} ago"
    days = round(hours / 24)
    return f"{days} day{'s' if days != 1 else ''} ago"


def format_value(value: float) -> str:
    if float(value).is_integer():
        return f"{int(value):,}"
    return f"{value:,.2f}"


def print_startup_ui(
    console: Console,
    model: str,
    base_url: str,
    *,
    configured: bool,
    app_name: str = "DataQuery Dashboard",
    version: str | None = None,
    clear_screen: bool = True,
) -> None:
    if clear_screen and sys.stdout.isatty():
        console.clear()

    now = datetime.now().astimezone().strftime("%Y-%m-%d %H:%M:%S %Z")
    term_w = shutil.get_terminal_size((88, 20)).columns
    width = min(max(70, term_w), 96)

    title = Text.assemble(("⚡ ", "bold cyan"), (app_name, "bold cyan"))
    if version:
        title.append(f"  v{version}", style="dim")

    table = Table.grid(padding=(0, 1))
    table.add_column(justify="right", style="bold magenta", width=10)
    table.add_column(style="white")
    table.add_row("Model", f"[bold green]{escape(model)}[/bold green]")
    table.add_row("Base URL", f"[bold blue]{escape(base_url or 'default')}[/bold blue]")
    table.add_row("Time", f"[dim]{now}[/dim]")

    help_lines = Text.assemble(
        ("• ", "bold"),
        ("Load a file with ", ""),
        ("/load PATH", "bold"),
        (" and ask questions in natural language\n", ""),
        ("• ", "bold"),
        ("Type ", ""),
        ("/help", "bold"),
        (" for commands, ", ""),
        ("exit", "bold red"),
        (" to stop", ""),
    )

    panel = Panel(
        Group(Align.center(title), Text(""), Align.center(table), Text(""), help_lines),
        box=box.ROUNDED,
        border_style="cyan",
        padding=(1, 2),
        width=width,
    )
    console.print(panel)

    if not configured:
        console.print(
            "[bold yellow]API Key Required:[/bold yellow] set LLM_API_KEY (or OPENAI_API_KEY) "
            "to enable AI insights. Charts will use the local heuristic."
        )


def print_help(console: Console) -> None:
    table = Table(box=box.SIMPLE, show_header=False)
    table.add_column(style="bold cyan")
    table.add_column()
    for usage, description in HELP_LINES:
        table.add_row(usage, description)
    console.print(table)


def print_notice(console: Console, title: str, description: str, *, error: bool = False) -> None:
    style = "bold red" if error else "bold green"
    console.print(f"[{style}]{escape(title)}[/{style}] {escape(description)}")


def print_data_table(console: Console, dataset: Dataset, total_rows: int, columns: list[str] | None = None) -> None:
    if dataset.is_empty and total_rows == 0:
        return

    columns = columns or dataset.columns
    table = Table(title=f"{len(dataset)} of {total_rows} rows", box=box.SIMPLE_HEAVY)
    # cell text comes from the uploaded file, never parse it as markup
    for col in columns:
        table.add_column(Text(col))
    for row in dataset.preview(TABLE_PREVIEW_ROWS):
        table.add_row(*(Text(cell_label(row.get(col, ABSENT))) for col in columns))
    console.print(table)

    if len(dataset) > TABLE_PREVIEW_ROWS:
        console.print(f"[dim]Showing first {TABLE_PREVIEW_ROWS} of {len(dataset)} matching rows[/dim]")


def print_result(console: Console, query: str, result: InsightResult) -> None:
    table = Table(title=Text(f"{result.chart_type.upper()} chart · {query}"), box=box.ROUNDED)
    table.add_column("Name", style="cyan")
    table.add_column("Value", justify="right")
    for point in result.chart_data:
        table.add_row(Text(point.name), format_value(point.value))
    if not result.chart_data:
        table.add_row("[dim]no chartable data[/dim]", "")
    console.print(table)
    console.print(Panel(Text(result.insight), title="Insight", border_style="magenta", width=min(96, console.width)))


def print_history(console: Console, entries: list[QueryHistoryEntry]) -> None:
    if not entries:
        console.print("[dim]No queries yet. Your query history will appear here.[/dim]")
        return

    now = datetime.now().astimezone()
    table = Table(box=box.SIMPLE)
    table.add_column("#", justify="right", style="dim")
    table.add_column("Query")
    table.add_column("When", style="dim")
    for idx, entry in enumerate(entries, start=1):
        stamp = entry.timestamp if entry.timestamp.tzinfo else entry.timestamp.astimezone()
        table.add_row(str(idx), Text(_truncate_to_width(entry.text, HISTORY_TEXT_WIDTH)), time_ago(stamp, now))
    console.print(table)
