"""Storefront management CLI.

Creates and drops database schemas, and runs the operations that sit
outside any request, such as flagging abandoned carts. Scheduling them
is left to cron or a similar job runner.

Usage:
    python src/manage.py setup-db               # Create all tables
    python src/manage.py drop-db                # Drop all tables
    python src/manage.py flag-abandoned-carts   # Flag idle carts, score their owners
    python src/manage.py flag-abandoned-carts --idle-hours 48
"""

import argparse
import sys


def _storefront():
    from storefront.domain import storefront

    print("Initializing storefront domain...")
    storefront.init()
    return storefront


def setup_database():
    domain = _storefront()
    print("Creating storefront database schema...")
    with domain.domain_context():
        domain.setup_database()
    print("Done.")


def drop_database():
    domain = _storefront()
    print("Dropping storefront database schema...")
    with domain.domain_context():
        domain.drop_database()
    print("Done.")


def flag_abandoned(idle_hours=None):
    from storefront.cart.abandonment import flag_abandoned_carts

    domain = _storefront()
    with domain.domain_context():
        flagged = flag_abandoned_carts(idle_threshold_hours=idle_hours)
    print(f"Flagged {len(flagged)} abandoned cart(s).")
    return flagged


def main(argv=None):
    parser = argparse.ArgumentParser(description="Storefront management")
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("setup-db", help="Create all database tables")
    subparsers.add_parser("drop-db", help="Drop all database tables")

    flag_parser = subparsers.add_parser("flag-abandoned-carts", help="Flag carts idle past the threshold")
    flag_parser.add_argument(
        "--idle-hours",
        type=int,
        default=None,
        help="Idle threshold in hours (default: ABANDONED_CART_IDLE_HOURS from config)",
    )

    args = parser.parse_args(argv)

    if args.command == "setup-db":
        setup_database()
    elif args.command == "drop-db":
        drop_database()
    elif args.command == "flag-abandoned-carts":
        flag_abandoned(args.idle_hours)
    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
