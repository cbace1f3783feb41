"""
CLI main entry point.
"""

import argparse
import logging
import sys
from pathlib import Path

from ..api_client import FusebillClient, FusebillError, validate_write_off
from ..config import Config, create_default_config, load_config

logger = logging.getLogger(__name__)


def setup_logging(verbose: bool = False) -> None:
    """Configure logging."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def create_cli() -> argparse.ArgumentParser:
    """Create CLI argument parser."""
    parser = argparse.ArgumentParser(
        prog="fusebill",
        description="Look up and write off Fusebill invoices",
    )

    parser.add_argument(
        "-c",
        "--config",
        type=Path,
        default=Path("config.yaml"),
        help="Path to config file (default: config.yaml)",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable verbose logging",
    )

    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    # balance command
    balance_parser = subparsers.add_parser(
        "balance", help="Show an invoice's outstanding balance"
    )
    balance_parser.add_argument("invoice_id", type=str, help="Fusebill invoice ID")

    # writeoff command
    writeoff_parser = subparsers.add_parser("writeoff", help="Write an invoice off")
    writeoff_parser.add_argument("invoice_id", type=str, help="Fusebill invoice ID")
    writeoff_parser.add_argument(
        "--amount",
        type=float,
        default=None,
        help="Amount to write off (default: the full outstanding balance)",
    )
    writeoff_parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Show what would be written off without doing it",
    )

    # login command
    subparsers.add_parser("login", help="Check private API credentials")

    # init command
    subparsers.add_parser("init", help="Create a default config file")

    return parser


def cmd_balance(config: Config, invoice_id: str) -> int:
    """Print an invoice's outstanding balance."""
    if not config.fusebill.has_token():
        print("❌ fusebill.token is required to read balances")
        return 1

    with FusebillClient.from_config(config.fusebill) as client:
        try:
            balance = client.get_invoice_balance(invoice_id)
        except FusebillError as e:
            print(f"❌ {e}")
            return 1

    print(f"Invoice {invoice_id}: outstanding balance {balance:.2f}")
    return 0


def cmd_writeoff(
    config: Config,
    invoice_id: str,
    amount: float | None = None,
    dry_run: bool = False,
) -> int:
    """Write an invoice off, defaulting to its full outstanding balance."""
    if amount is None:
        if not config.fusebill.has_token():
            print("❌ fusebill.token is required to look up the balance; pass --amount instead")
            return 1
        with FusebillClient.from_config(config.fusebill) as public_client:
            try:
                amount = public_client.get_invoice_balance(invoice_id)
            except FusebillError as e:
                print(f"❌ {e}")
                return 1
        logger.info(f"Invoice {invoice_id} outstanding balance is {amount:.2f}")

    try:
        validate_write_off(invoice_id, amount)
    except FusebillError as e:
        print(f"❌ {e}")
        return 1

    if dry_run:
        print(f"Would write off {amount:.2f} on invoice {invoice_id}")
        return 0

    if not config.fusebill.has_login():
        print("❌ fusebill.username and fusebill.password are required for write-offs")
        return 1

    with FusebillClient.from_config(config.fusebill, private=True) as client:
        try:
            client.write_off(invoice_id, amount)
        except FusebillError as e:
            print(f"❌ {e}")
            return 1

    print(f"✅ Wrote off {amount:.2f} on invoice {invoice_id}")
    return 0


def cmd_login(config: Config) -> int:
    """Check that the private API accepts the configured login."""
    if not config.fusebill.has_login():
        print("❌ fusebill.username and fusebill.password are required")
        return 1

    with FusebillClient.from_config(config.fusebill, private=True) as client:
        try:
            client.login()
        except FusebillError as e:
            print(f"❌ {e}")
            return 1

    print(f"✅ Logged in to Fusebill ({config.fusebill.mode})")
    return 0


def cmd_init(config_path: Path) -> int:
    """Write a default config file."""
    if config_path.exists():
        print(f"❌ {config_path} already exists")
        return 1
    create_default_config(config_path)
    print(f"✅ Created {config_path}")
    return 0


def main(args: list[str] | None = None) -> int:
    """Main entry point."""
    parser = create_cli()
    parsed = parser.parse_args(args)

    setup_logging(parsed.verbose)

    if not parsed.command:
        parser.print_help()
        return 1

    if parsed.command == "init":
        return cmd_init(parsed.config)

    # Load config
    try:
        config = load_config(parsed.config)
    except Exception as e:
        print(f"❌ Failed to load config: {e}")
        return 1

    errors = config.validate()
    if errors:
        for error in errors:
            print(f"❌ {error}")
        return 1

    # Route to command
    if parsed.command == "balance":
        return cmd_balance(config, parsed.invoice_id)
    elif parsed.command == "writeoff":
        return cmd_writeoff(config, parsed.invoice_id, parsed.amount, parsed.dry_run)
    elif parsed.command == "login":
        return cmd_login(config)
    else:
        parser.print_help()
        return 1


if __name__ == "__main__":
    sys.exit(main())
