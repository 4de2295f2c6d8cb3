import argparse
import logging
from datetime import datetime

from rich.console import Console

from dataquery import __version__
from dataquery.cli_ui import (
    make_console,
    print_data_table,
    print_help,
    print_history,
    print_notice,
    print_result,
    print_startup_ui,
)
from dataquery.command_router import Command, CommandType, parse_command
from dataquery.config import ConfigError, Settings
from dataquery.dashboard import DashboardSession, QueryInProgressError, QueryValidationError
from dataquery.history_store import QueryHistoryStore
from dataquery.llm_service import InsightRequester
from dataquery.loader import DatasetLoadError, load_table_file


def _date_tag() -> str:
    return datetime.now().strftime("[%Y-%m-%d %H:%M:%S]")


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="DataQuery Dashboard CLI")
    parser.add_argument("--file", default=None, help="CSV or Excel file to load at startup")
    parser.add_argument("--env-file", default=".env", help="dotenv file with LLM settings")
    parser.add_argument("--max-points", type=int, default=None, help="maximum number of chart points")
    parser.add_argument("--history-path", default=None, help="where the query history is stored")
    parser.add_argument("--log-level", default="WARNING", help="logging level (DEBUG, INFO, WARNING, ...)")
    parser.add_argument("--no-clear", action="store_true", help="do not clear the screen at startup")
    return parser.parse_args(argv)


def _load_file(console: Console, session: DashboardSession, path: str) -> bool:
    if not path:
        print_notice(console, "No file given:", "usage is /load PATH", error=True)
        return False
    try:
        dataset = load_table_file(path)
    except DatasetLoadError as exc:
        print_notice(console, "Error:", str(exc), error=True)
        return False

    session.load_dataset(dataset)
    print_notice(console, "File loaded successfully:", f"{len(dataset)} rows of data imported")
    return True


def _run_query(console: Console, session: DashboardSession, query: str) -> None:
    try:
        result = session.process_query(query)
    except QueryValidationError as exc:
        print_notice(console, "Query required:" if session.dataset.rows else "No Data Available:", str(exc), error=True)
        return
    except QueryInProgressError as exc:
        print_notice(console, "Busy:", str(exc), error=True)
        return

    print_result(console, query, result)
    print_notice(console, "Query processed:", "Generated insights are ready to view")


def _rerun_history_entry(console: Console, session: DashboardSession, argument: str) -> None:
    entries = session.history()
    try:
        entry = entries[int(argument) - 1]
    except (ValueError, IndexError):
        print_notice(console, "Unknown entry:", "usage is /rerun N, see /history", error=True)
        return
    _run_query(console, session, session.select_history_entry(entry))


def handle_command(console: Console, session: DashboardSession, command: Command) -> bool:
    """Execute one command; returns False when the loop should stop."""
    if command.type == CommandType.EXIT:
        console.print("Bye!")
        return False

    if command.type == CommandType.LOAD:
        _load_file(console, session, command.argument)
    elif command.type == CommandType.TABLE:
        if session.dataset.is_empty:
            print_notice(console, "No Data Available:", "Please upload a CSV or Excel file first", error=True)
        else:
            print_data_table(
                console,
                session.dataset.search(command.argument),
                len(session.dataset),
                columns=session.dataset.columns,
            )
    elif command.type == CommandType.HISTORY:
        print_history(console, session.history())
    elif command.type == CommandType.RERUN:
        _rerun_history_entry(console, session, command.argument)
    elif command.type == CommandType.CLEAR:
        if session.clear_history():
            print_notice(console, "History cleared:", "Your query history has been cleared")
        else:
            print_notice(console, "Error clearing history:", "There was a problem clearing your history", error=True)
    elif command.type == CommandType.SUGGEST:
        for suggestion in session.suggested_queries():
            console.print(f"  • {suggestion}")
    elif command.type == CommandType.HELP:
        print_help(console)
    else:
        _run_query(console, session, command.argument)
    return True


def build_session(settings: Settings) -> DashboardSession:
    return DashboardSession(
        requester=InsightRequester(settings),
        history_store=QueryHistoryStore(settings.history_path),
    )


def main(argv: list[str] | None = None) -> int:
    args = _parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, str(args.log_level).upper(), logging.WARNING),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    console = make_console()

    try:
        settings = Settings.load(args.env_file)
    except ConfigError as exc:
        print_notice(console, "Config Error:", str(exc), error=True)
        return 2

    if args.max_points is not None:
        settings.max_chart_points = args.max_points
    if args.history_path:
        settings.history_path = args.history_path

    session = build_session(settings)
    print_startup_ui(
        console,
        model=settings.llm_model,
        base_url=settings.llm_base_url,
        configured=settings.is_configured,
        version=__version__,
        clear_screen=not args.no_clear,
    )

    if args.file:
        _load_file(console, session, args.file)

    while True:
        try:
            user_input = console.input(f"{_date_tag()}You> ").strip()
        except (EOFError, KeyboardInterrupt) as e:
            console.print(f"\n[Input Error] :{e}. Exiting.", markup=False)
            return 0

        command = parse_command(user_input)
        if command is None:
            continue
        if not handle_command(console, session, command):
            return 0


if __name__ == "__main__":
    raise SystemExit(main())
