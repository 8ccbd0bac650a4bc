"""Storefront database management CLI.

Provides commands to create and drop the schema and to seed demo data.
Reuses the setup_db/drop_db utilities from shared.utils.db.

Usage:
    python src/manage.py setup-db               # Create all tables
    python src/manage.py drop-db                # Drop all tables
    python src/manage.py seed-demo --user u-1   # Products and an address for u-1
"""

import argparse
import sys
from decimal import Decimal


def _database(url: str | None):
    from shared.config import Settings
    from shared.database import Database

    return Database(url or Settings.from_env().database_url)


def setup_database(url: str | None = None) -> None:
    """Create every table."""
    from shared.utils.db import setup_db

    database = _database(url)
    print(f"Creating schema on {database.url}...")
    setup_db(database)
    print("Done.")


def drop_database(url: str | None = None) -> None:
    """Drop every table."""
    from shared.utils.db import drop_db

    database = _database(url)
    print(f"Dropping schema on {database.url}...")
    drop_db(database)
    print("Done.")


DEMO_PRODUCTS = [
    ("Trail Runner Shoes", "trail-runner-shoes", Decimal("89.99"), True, 25),
    ("Merino Wool Socks", "merino-wool-socks", Decimal("14.50"), True, 5),
    ("Gift Card", "gift-card", Decimal("25.00"), False, 0),
]


def seed_demo(user_id: str, url: str | None = None) -> None:
    """Create demo products and a shipping address for ``user_id``."""
    from catalogue.product import Product
    from identity.address import Address
    from shared.utils.db import setup_db

    database = _database(url)
    setup_db(database)
    with database.transaction() as session:
        for name, slug, price, track_quantity, quantity in DEMO_PRODUCTS:
            product = Product(name=name, slug=slug, price=price, track_quantity=track_quantity, quantity=quantity)
            session.add(product)
            session.flush()
            print(f"  product {product.id}  {name}  {price}")

        address = Address(
            user_id=user_id,
            street="123 Main St",
            city="Springfield",
            state="IL",
            postal_code="62701",
            country="US",
        )
        session.add(address)
        session.flush()
        print(f"  address {address.id}  for user {user_id}")
    print("Done.")


def main():
    parser = argparse.ArgumentParser(description="Storefront database management")
    parser.add_argument("--database-url", help="Override DATABASE_URL")
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("setup-db", help="Create all database tables")
    subparsers.add_parser("drop-db", help="Drop all database tables")

    seed_parser = subparsers.add_parser("seed-demo", help="Insert demo products and an address")
    seed_parser.add_argument("--user", required=True, help="User id that owns the demo address")

    args = parser.parse_args()

    if args.command == "setup-db":
        setup_database(args.database_url)
    elif args.command == "drop-db":
        drop_database(args.database_url)
    elif args.command == "seed-demo":
        seed_demo(args.user, args.database_url)
    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
