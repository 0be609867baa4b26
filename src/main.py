from __future__ import annotations

import argparse
import logging
import sys
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Sequence, TextIO

from config import AppSettings, load_settings
from domain.errors import TrackerError
from domain.pricing import PriceOracle
from domain.walker import LedgerWalker
from importers.crypto_com_importer import CryptoComCsvSource
from services.coingecko_client import CoinGeckoClient
from services.explorer_client import ExplorerAPIError, ExplorerClient, first_amount
from services.price_oracle import CoinGeckoPriceOracle, FixedPriceOracle
from sheets.console import ConsoleSink
from sheets.google_sheets import GoogleSheetsSink, authorize, open_worksheet
from sheets.report_writer import RenderSink, ReportSummary, ReportWriter

logger = logging.getLogger(__name__)


def build_price_oracle(settings: AppSettings, price_override: Decimal | None = None) -> PriceOracle:
    if price_override is not None:
        return FixedPriceOracle(price_override)
    client = CoinGeckoClient(base_url=settings.coingecko_base_url)
    return CoinGeckoPriceOracle(fiat=settings.fiat, asset_id=settings.coingecko_asset_id, client=client)


def build_sheets_sink(settings: AppSettings) -> GoogleSheetsSink:
    client = authorize(
        credentials_file=settings.credentials_file,
        authorized_user_file=settings.authorized_user_file,
    )
    worksheet = open_worksheet(client, spreadsheet_id=settings.spreadsheet_id, sheet_name=settings.sheet_name)
    return GoogleSheetsSink(worksheet)


def run_import(
    settings: AppSettings,
    *,
    price_oracle: PriceOracle,
    sink: RenderSink,
    apply_formatting: bool = True,
) -> ReportSummary:
    source = CryptoComCsvSource(settings.transactions_file)
    walker = LedgerWalker(fiat_symbol=settings.fiat, start_row=settings.start_row)
    rows = walker.walk(source.records(), price_oracle)
    return ReportWriter(sink, apply_formatting=apply_formatting).write(rows)


def print_account_summary(client: ExplorerClient, account_id: str, out: TextIO = sys.stdout) -> None:
    account = client.get_account(account_id).result
    out.write(
        f"total balance: {first_amount(account.total_balance)}\n"
        f"usable balance: {first_amount(account.balance)}\n"
        f"total rewards: {first_amount(account.total_rewards)}\n"
    )


def _decimal_arg(value: str) -> Decimal:
    try:
        parsed = Decimal(value)
    except InvalidOperation as exc:
        raise argparse.ArgumentTypeError(f"invalid price: {value!r}") from exc
    if not parsed.is_finite() or parsed <= 0:
        raise argparse.ArgumentTypeError(f"price must be a positive number, got {value!r}")
    return parsed


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="crypto-tracker",
        description="Import Crypto.com transactions into Google Sheets.",
    )
    parser.add_argument("--config", type=Path, default=None, help="env file with settings (default: .env)")
    parser.add_argument("-v", "--verbose", action="store_true", help="enable debug logging")
    subparsers = parser.add_subparsers(dest="command", required=True)

    import_parser = subparsers.add_parser("import", help="import crypto transaction csv data into google sheets")
    import_parser.add_argument("--fiat", default=None, help="type of fiat to use (USD or EUR)")
    import_parser.add_argument("-f", "--file", type=Path, default=None, help="crypto transactions csv file")
    import_parser.add_argument("-s", "--spreadsheet-id", default=None, help="id of google sheet (found in the URL)")
    import_parser.add_argument("-n", "--spreadsheet-name", default=None, help="name of the sheet tab")
    import_parser.add_argument("-a", "--account-id", default=None, help="crypto.org account id")
    import_parser.add_argument("--start-row", type=int, default=None, help="first sheet row of the report")
    import_parser.add_argument("--price", type=_decimal_arg, default=None, help="use this CRO price instead of CoinGecko")
    import_parser.add_argument("--dry-run", action="store_true", help="print rows instead of writing the sheet")

    subparsers.add_parser("login", help="authorize access to google sheets and cache the token")
    return parser


def _import_command(args: argparse.Namespace) -> None:
    settings = load_settings(
        args.config,
        fiat=args.fiat,
        transactions_file=args.file,
        spreadsheet_id=args.spreadsheet_id,
        sheet_name=args.spreadsheet_name,
        account_id=args.account_id,
        start_row=args.start_row,
    )
    if not args.dry_run:
        settings.validate_for_import()

    price_oracle = build_price_oracle(settings, args.price)
    sink: RenderSink = ConsoleSink(sys.stdout) if args.dry_run else build_sheets_sink(settings)
    summary = run_import(settings, price_oracle=price_oracle, sink=sink, apply_formatting=not args.dry_run)
    print(f"Imported {summary.data_rows} purchases from {settings.transactions_file}")

    if settings.account_id:
        print_account_summary(ExplorerClient(settings.explorer_url), settings.account_id)


def _login_command(args: argparse.Namespace) -> None:
    settings = load_settings(args.config)
    authorize(credentials_file=settings.credentials_file, authorized_user_file=settings.authorized_user_file)
    print(f"Authorized; token cached at {settings.authorized_user_file}")


def main(argv: Sequence[str] | None = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )

    try:
        if args.command == "import":
            _import_command(args)
        elif args.command == "login":
            _login_command(args)
    except (TrackerError, ExplorerAPIError) as exc:
        logger.error("%s", exc)
        raise SystemExit(1) from exc


if __name__ == "__main__":
    main()
