"""Storefront management CLI.

Creates and drops database schemas for SQL providers and runs the expired
cart sweep.

Usage:
    python src/manage.py setup-db      # Create all tables
    python src/manage.py drop-db       # Drop all tables
    python src/manage.py clean-carts   # Deactivate expired carts
"""

import argparse
import sys


def _domain():
    from storefront.domain import storefront

    print("Initializing storefront domain...")
    storefront.init()
    return storefront


def setup_database():
    from storefront.utils.db import setup_db

    domain = _domain()
    print("Creating database schema...")
    setup_db(domain)
    print("Done.")


def drop_database():
    from storefront.utils.db import drop_db

    domain = _domain()
    print("Dropping database schema...")
    drop_db(domain)
    print("Done.")


def clean_carts():
    from storefront.ordering.cart.expiry import CleanExpiredCarts

    domain = _domain()
    with domain.domain_context():
        count = domain.process(CleanExpiredCarts(), asynchronous=False)
    print(f"Deactivated {count} expired cart(s).")


def main():
    parser = argparse.ArgumentParser(description="Storefront management")
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("setup-db", help="Create all database tables")
    subparsers.add_parser("drop-db", help="Drop all database tables")
    subparsers.add_parser("clean-carts", help="Deactivate carts past their expiry")

    args = parser.parse_args()

    if args.command == "setup-db":
        setup_database()
    elif args.command == "drop-db":
        drop_database()
    elif args.command == "clean-carts":
        clean_carts()
    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
