#!/usr/bin/env python3
"""Maintenance commands for the order database.

Usage:
  python3 scripts/manage_orders.py import-csv orders.csv --overwrite --lookup bottomNumber
  python3 scripts/manage_orders.py export-csv orders.csv
  python3 scripts/manage_orders.py backup backup.json
  python3 scripts/manage_orders.py restore backup.json
  python3 scripts/manage_orders.py delete ID [ID ...]
  python3 scripts/manage_orders.py clear --yes

Uses DATABASE_URL from the environment / .env (see hermes.config.settings)
and creates the tables if they are missing.
"""
import sys
from pathlib import Path
import argparse

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from hermes.config.settings import settings
from hermes.crud import OrderStore
from hermes.db import init_db, make_engine, make_session_factory
from hermes.logging import setup_logging
from hermes.schemas import LookupField
from hermes.services import orders as order_service
from hermes.services.backup import dump_backup
from hermes.services.csv_codec import decode_csv_bytes
from hermes.services.exceptions import ServiceError


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Order database maintenance")
    parser.add_argument("--database-url", default=None, help="override DATABASE_URL")
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("import-csv", help="import orders from a CSV file")
    p.add_argument("path")
    p.add_argument("--overwrite", action="store_true", help="update records that already exist")
    p.add_argument("--lookup", choices=[f.value for f in LookupField], default=LookupField.ORDER_NUMBER.value)

    p = sub.add_parser("export-csv", help="export active orders to a CSV file")
    p.add_argument("path")

    p = sub.add_parser("backup", help="write a JSON backup of all orders")
    p.add_argument("path")

    p = sub.add_parser("restore", help="replace all orders with a JSON backup")
    p.add_argument("path")

    p = sub.add_parser("delete", help="delete orders by id")
    p.add_argument("ids", nargs="+")

    p = sub.add_parser("clear", help="delete all orders")
    p.add_argument("--yes", action="store_true", help="confirm deletion")
    return parser


def run(args, store: OrderStore) -> int:
    if args.command == "import-csv":
        text = decode_csv_bytes(Path(args.path).read_bytes())
        result = order_service.import_orders_csv(store, text, overwrite=args.overwrite, lookup_field=LookupField(args.lookup))
        print(f"Imported: {result.imported}, updated: {result.updated}, skipped: {result.skipped}, errors: {result.errors}, total: {result.total}")
    elif args.command == "export-csv":
        Path(args.path).write_text(order_service.export_orders_csv(store), encoding="utf-8")
        print(f"Exported to {args.path}")
    elif args.command == "backup":
        records = store.list()
        Path(args.path).write_text(dump_backup(records), encoding="utf-8")
        print(f"Backup written to {args.path} ({len(records)} records)")
    elif args.command == "restore":
        result = order_service.restore_backup(store, Path(args.path).read_bytes())
        print(f"Restored: {result.restored}, errors: {result.errors}, total: {result.total}")
    elif args.command == "delete":
        result = order_service.delete_orders(store, args.ids)
        print(f"Deleted: {result.deleted}, errors: {result.errors}")
    elif args.command == "clear":
        if not args.yes:
            print("Refusing to delete all orders without --yes")
            return 1
        print(f"Deleted {order_service.clear_orders(store)} orders")
    return 0


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging()

    engine = make_engine(args.database_url or settings.DATABASE_URL, echo=settings.ECHO_SQL)
    init_db(engine)
    session_factory = make_session_factory(engine)

    try:
        with session_factory() as db:
            return run(args, OrderStore(db))
    except ServiceError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    finally:
        engine.dispose()


if __name__ == '__main__':
    sys.exit(main())
