import argparse
import asyncio
import datetime as dt
import logging

from providerdash.api_client import DataServiceClient
from providerdash.auth import AuthSession
from providerdash.config import Settings, load_settings
from providerdash.dashboard import Dashboard, DashboardView, run_once
from providerdash.domain import YearMonth
from providerdash.notifier import CompositeReporter, FailureReporter, LoggingReporter, TelegramReporter
from providerdash.render import render_dashboard


def _setup_logging(verbose: bool = False) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s - %(message)s",
    )


def _parse_month(raw: str) -> YearMonth:
    try:
        value = dt.datetime.strptime(raw, "%Y-%m")
    except ValueError as e:
        raise argparse.ArgumentTypeError(f"expected YYYY-MM, got {raw!r}") from e
    return YearMonth(value.year, value.month)


def _parse_day(raw: str) -> dt.date:
    try:
        return dt.date.fromisoformat(raw)
    except ValueError as e:
        raise argparse.ArgumentTypeError(f"expected YYYY-MM-DD, got {raw!r}") from e


def build_reporter(settings: Settings) -> FailureReporter:
    reporters: list[FailureReporter] = [LoggingReporter()]
    if settings.telegram_enabled and settings.telegram_bot_token:
        reporters.append(TelegramReporter(bot_token=settings.telegram_bot_token, chat_ids=settings.telegram_chat_ids))
    return CompositeReporter(reporters)


async def _show(settings: Settings, *, month: YearMonth | None, day: dt.date | None) -> DashboardView:
    auth = AuthSession.from_settings(settings)
    client = DataServiceClient(settings)
    auth.on_sign_out(lambda: client.set_token(None))

    dashboard = Dashboard(auth, client, tz=settings.display_timezone, reporter=build_reporter(settings))
    try:
        return await run_once(dashboard, month=month, day=day)
    finally:
        await dashboard.unmount()
        await client.aclose()


def main() -> int:
    parser = argparse.ArgumentParser(description="providerdash: provider scheduling dashboard")
    parser.add_argument("--month", type=_parse_month, help="Browse this month (YYYY-MM)")
    parser.add_argument("--date", type=_parse_day, help="Select this day (YYYY-MM-DD)")
    parser.add_argument("--verbose", action="store_true", help="Debug logging")
    args = parser.parse_args()

    _setup_logging(args.verbose)
    settings = load_settings()

    view = asyncio.run(_show(settings, month=args.month, day=args.date))
    print(render_dashboard(view), end="")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
