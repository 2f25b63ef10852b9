"""CLI main: argument parsing and subcommand dispatch."""

from __future__ import annotations

import argparse
import sys
from collections.abc import Callable, Sequence
from dataclasses import replace
from pathlib import Path
from uuid import uuid4

import yaml

from inventory_config import get_active_settings
from inventory_kernel.domain.dtos import (
    BulkUpdateFields,
    CreateItemRequest,
    ItemQuery,
    UpdateItemRequest,
)
from inventory_kernel.domain.ids import extract_item_id, public_item_url
from inventory_kernel.domain.normalize import normalize_date
from inventory_kernel.exceptions import (
    InventoryKernelError,
    ItemNotFoundError,
    LocationError,
    LocationNotFoundError,
)
from inventory_kernel.logging_config import LogContext
from inventory_kernel.selectors.dashboard_selector import DashboardSelector
from inventory_kernel.services.item_store import SORT_COLUMNS, coerce_status
from inventory_kernel.services.location_registry import LocationRegistry

from scripts.cli.bootstrap import App, build_app
from scripts.cli.util import error, print_json, setup_logging, warn
from scripts.cli.views import (
    show_history,
    show_import_result,
    show_item,
    show_item_table,
    show_locations,
    show_probe,
    show_summary,
)

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_INTERRUPTED = 130

# CLI option -> request field, shared by ``add`` and ``edit``.
_ITEM_OPTIONS = (
    ("--type", "item_type"),
    ("--color", "color"),
    ("--design", "design"),
    ("--team", "team"),
    ("--number", "number"),
    ("--size", "size"),
    ("--age", "age_group"),
    ("--namebar", "namebar"),
    ("--chest-logo", "chest_logo"),
    ("--notes", "notes"),
    ("--ordered", "date_ordered"),
    ("--invoiced", "date_invoiced"),
    ("--received", "date_received"),
    ("--delivered", "date_delivered"),
    ("--status", "status"),
    ("--payment", "payment_status"),
    ("--tracking", "tracking_number"),
    ("--location", "location"),
)

_DATE_FIELDS = ("date_ordered", "date_invoiced", "date_received", "date_delivered")


# =============================================================================
# Argument parsing
# =============================================================================


def _add_item_options(parser: argparse.ArgumentParser) -> None:
    for flag, dest in _ITEM_OPTIONS:
        parser.add_argument(flag, dest=dest, default=None)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="inventory",
        description="Apparel inventory: items, status history, locations, imports.",
    )
    parser.add_argument("--config", type=Path, default=None, help="Settings YAML file.")
    parser.add_argument("--db-url", default=None, help="Override the database URL.")
    parser.add_argument("--log-level", default=None, help="Override the log level.")

    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("init", help="Create tables, migrate, seed locations.")

    p = sub.add_parser("import", help="Import items from a .csv or .xlsx file.")
    p.add_argument("file", type=Path)
    p.add_argument("--sheet", default=None, help="Worksheet name (xlsx).")
    p.add_argument("--skip-rows", type=int, default=0)
    p.add_argument("--delimiter", default=None)

    p = sub.add_parser("probe", help="Preview a source file without importing.")
    p.add_argument("file", type=Path)
    p.add_argument("--sheet", default=None)
    p.add_argument("--delimiter", default=None)

    p = sub.add_parser("add", help="Create one item.")
    p.add_argument("--customer", required=True, dest="customer_name")
    p.add_argument("--qty", type=int, default=1, dest="quantity")
    p.add_argument("--remake", action="store_true", dest="needs_remake")
    _add_item_options(p)

    p = sub.add_parser("edit", help="Change fields of one item.")
    p.add_argument("item_id")
    p.add_argument("--customer", default=None, dest="customer_name")
    p.add_argument("--qty", type=int, default=None, dest="quantity")
    _add_item_options(p)

    p = sub.add_parser("list", help="List items.")
    p.add_argument("--status", default=None)
    p.add_argument("--location", default=None)
    p.add_argument("--search", default=None)
    p.add_argument("--sort", default=None, choices=sorted(SORT_COLUMNS))
    p.add_argument("--direction", default="desc", choices=("asc", "desc"))
    p.add_argument("--limit", type=int, default=None)
    p.add_argument("--json", action="store_true")

    p = sub.add_parser("show", help="Show one item (ID or scanned URL).")
    p.add_argument("item_id")
    p.add_argument("--json", action="store_true")

    p = sub.add_parser("history", help="Status history of one item.")
    p.add_argument("item_id")
    p.add_argument("--json", action="store_true")

    p = sub.add_parser("status", help="Set an item's status.")
    p.add_argument("item_id")
    p.add_argument("status")
    p.add_argument("--location", default=None)
    p.add_argument("--note", default=None)

    p = sub.add_parser("payment", help="Set an item's payment status.")
    p.add_argument("item_id")
    p.add_argument("payment_status")

    p = sub.add_parser("remake", help="Set or clear the remake flag.")
    p.add_argument("item_id")
    group = p.add_mutually_exclusive_group(required=True)
    group.add_argument("--on", action="store_true", dest="needs_remake")
    group.add_argument("--off", action="store_false", dest="needs_remake")

    p = sub.add_parser("bulk-update", help="Update several items at once.")
    p.add_argument("item_ids", nargs="+")
    p.add_argument("--status", default=None)
    p.add_argument("--payment", default=None, dest="payment_status")
    p.add_argument("--tracking", default=None, dest="tracking_number")
    p.add_argument("--delivered", default=None, dest="date_delivered")

    p = sub.add_parser("delete", help="Delete one item and its history.")
    p.add_argument("item_id")

    p = sub.add_parser("bulk-delete", help="Delete several items.")
    p.add_argument("item_ids", nargs="+")

    p = sub.add_parser("locations", help="Manage locations.")
    loc_sub = p.add_subparsers(dest="locations_command", required=True)
    loc_sub.add_parser("list")
    lp = loc_sub.add_parser("add")
    lp.add_argument("name")
    lp.add_argument("--description", default=None)
    lp = loc_sub.add_parser("remove")
    lp.add_argument("location", help="Location ID or name.")

    p = sub.add_parser("summary", help="Dashboard counts and recent items.")
    p.add_argument("--json", action="store_true")

    p = sub.add_parser("labels", help="Label URLs for many items.")
    p.add_argument("--status", default=None)

    p = sub.add_parser("label-url", help="Public URL printed on an item's label.")
    p.add_argument("item_id")

    p = sub.add_parser("scan", help="Look up an item from scanner input.")
    p.add_argument("text")

    return parser


def _parse_args(argv: Sequence[str] | None) -> argparse.Namespace:
    return _build_parser().parse_args(argv)


def _item_fields(args: argparse.Namespace) -> dict:
    """Item options the user actually gave, dates normalized."""
    values = {}
    for _, dest in _ITEM_OPTIONS:
        value = getattr(args, dest, None)
        if value is None:
            continue
        values[dest] = normalize_date(value) if dest in _DATE_FIELDS else value
    return values


def _source_options(args: argparse.Namespace) -> dict:
    options = {}
    if getattr(args, "sheet", None):
        options["sheet"] = args.sheet
    if getattr(args, "skip_rows", 0):
        options["skip_rows"] = args.skip_rows
    if getattr(args, "delimiter", None):
        options["delimiter"] = args.delimiter
    return options


# =============================================================================
# Commands
# =============================================================================


def cmd_init(app: App, args: argparse.Namespace) -> int:
    with app.reading() as session:
        names = LocationRegistry(session).names()
    items = app.controller.query_items()
    print(f"  Store ready: {app.settings.database_url}")
    print(f"  Items: {len(items)}  Locations: {', '.join(names) or '(none)'}")
    return EXIT_OK


def cmd_import(app: App, args: argparse.Namespace) -> int:
    source_path = args.file.resolve()
    if not source_path.is_file():
        error(f"File not found: {source_path}")
        return EXIT_ERROR
    print(f"  Importing {source_path}...")
    try:
        result = app.importer.import_file(source_path, _source_options(args))
    except ValueError as exc:
        error(str(exc))
        return EXIT_ERROR
    show_import_result(result)
    if result.has_errors and result.imported_count == 0:
        return EXIT_ERROR
    return EXIT_OK


def cmd_probe(app: App, args: argparse.Namespace) -> int:
    source_path = args.file.resolve()
    if not source_path.is_file():
        error(f"File not found: {source_path}")
        return EXIT_ERROR
    try:
        probe = app.importer.probe_file(source_path, _source_options(args))
    except ValueError as exc:
        error(str(exc))
        return EXIT_ERROR
    show_probe(probe)
    return EXIT_OK


def cmd_add(app: App, args: argparse.Namespace) -> int:
    request = CreateItemRequest(
        customer_name=args.customer_name,
        quantity=args.quantity,
        needs_remake=args.needs_remake,
        **_item_fields(args),
    )
    item_id = app.controller.create_item(request)
    print(item_id)
    return EXIT_OK


def cmd_edit(app: App, args: argparse.Namespace) -> int:
    changes = _item_fields(args)
    if args.customer_name is not None:
        changes["customer_name"] = args.customer_name
    if args.quantity is not None:
        changes["quantity"] = args.quantity
    # A new size without --age takes its age group from the size prefix.
    if "size" in changes and "age_group" not in changes:
        changes["age_group"] = None

    current = app.controller.find_item(args.item_id)
    if current is None:
        warn(f"Item not found: {args.item_id}")
        return EXIT_OK
    if not changes:
        warn("Nothing to change.")
        return EXIT_OK

    item = app.controller.update_item(args.item_id, UpdateItemRequest.from_item(current, **changes))
    print(f"  Updated {item.id}.")
    return EXIT_OK


def cmd_list(app: App, args: argparse.Namespace) -> int:
    query = ItemQuery(
        status=args.status,
        location=args.location,
        search=args.search,
        sort=args.sort,
        direction=args.direction,
        limit=args.limit,
    )
    items = app.controller.query_items(query)
    if args.json:
        print_json([item.to_dict() for item in items])
    else:
        show_item_table(items)
    return EXIT_OK


def cmd_show(app: App, args: argparse.Namespace) -> int:
    item_id = extract_item_id(args.item_id) or args.item_id
    item = app.controller.get_item(item_id)
    if args.json:
        print_json(item.to_dict())
    else:
        show_item(item, public_item_url(app.settings.base_url, item.id))
    return EXIT_OK


def cmd_history(app: App, args: argparse.Namespace) -> int:
    entries = app.controller.history(args.item_id)
    if args.json:
        print_json([entry.to_dict() for entry in entries])
    else:
        show_history(args.item_id, entries)
    return EXIT_OK


def cmd_status(app: App, args: argparse.Namespace) -> int:
    try:
        item = app.controller.set_status(args.item_id, args.status, args.location, args.note)
    except ItemNotFoundError:
        warn(f"Item not found: {args.item_id}")
        return EXIT_OK
    print(f"  {item.id}: {item.status_label}" + (f" @ {item.location}" if item.location else ""))
    return EXIT_OK


def cmd_payment(app: App, args: argparse.Namespace) -> int:
    try:
        item = app.controller.set_payment_status(args.item_id, args.payment_status)
    except ItemNotFoundError:
        warn(f"Item not found: {args.item_id}")
        return EXIT_OK
    print(f"  {item.id}: {item.payment_label}")
    return EXIT_OK


def cmd_remake(app: App, args: argparse.Namespace) -> int:
    try:
        item = app.controller.set_remake(args.item_id, args.needs_remake)
    except ItemNotFoundError:
        warn(f"Item not found: {args.item_id}")
        return EXIT_OK
    print(f"  {item.id}: remake {'on' if item.needs_remake else 'off'}")
    return EXIT_OK


def cmd_bulk_update(app: App, args: argparse.Namespace) -> int:
    fields = BulkUpdateFields(
        status=args.status,
        payment_status=args.payment_status,
        tracking_number=args.tracking_number,
        date_delivered=normalize_date(args.date_delivered) if args.date_delivered is not None else None,
    )
    if fields.is_empty:
        warn("No fields given; nothing updated.")
        return EXIT_OK
    count = app.controller.bulk_apply(args.item_ids, fields)
    print(f"  Updated {count} item(s).")
    return EXIT_OK


def cmd_delete(app: App, args: argparse.Namespace) -> int:
    try:
        app.controller.delete_item(args.item_id)
    except ItemNotFoundError:
        warn(f"Item not found: {args.item_id}")
        return EXIT_OK
    print(f"  Deleted {args.item_id}.")
    return EXIT_OK


def cmd_bulk_delete(app: App, args: argparse.Namespace) -> int:
    count = app.controller.bulk_delete(args.item_ids)
    print(f"  Deleted {count} item(s).")
    return EXIT_OK


def cmd_locations(app: App, args: argparse.Namespace) -> int:
    if args.locations_command == "list":
        with app.reading() as session:
            show_locations(LocationRegistry(session).list())
        return EXIT_OK

    try:
        with app.writing() as session:
            registry = LocationRegistry(session)
            if args.locations_command == "add":
                location = registry.add(args.name, args.description)
                message = f"  Added location {location.name} (id {location.id})."
            else:
                location_id = _location_id(registry, args.location)
                registry.remove(location_id)
                message = f"  Removed location {args.location}."
    except (LocationError, LocationNotFoundError) as exc:
        warn(str(exc))
        return EXIT_OK
    print(message)
    return EXIT_OK


def _location_id(registry: LocationRegistry, ref: str) -> int:
    if ref.isdigit():
        return int(ref)
    location = registry.get_by_name(ref)
    if location is None:
        raise LocationNotFoundError(ref)
    return location.id


def cmd_summary(app: App, args: argparse.Namespace) -> int:
    with app.reading() as session:
        summary = DashboardSelector(session).summary()
    if args.json:
        print_json(
            {
                "total": summary.total,
                "by_status": {s.value: n for s, n in summary.by_status.items()},
                "needs_remake": summary.needs_remake,
                "recent": [item.to_dict() for item in summary.recent],
            }
        )
    else:
        show_summary(summary)
    return EXIT_OK


def cmd_labels(app: App, args: argparse.Namespace) -> int:
    status = coerce_status(args.status) if args.status else None
    with app.reading() as session:
        labels = DashboardSelector(session).label_items(app.settings.base_url, status)
    for label in labels:
        print(f"{label.item.id}\t{label.url}")
    return EXIT_OK


def cmd_label_url(app: App, args: argparse.Namespace) -> int:
    item = app.controller.get_item(args.item_id)
    print(public_item_url(app.settings.base_url, item.id))
    return EXIT_OK


def cmd_scan(app: App, args: argparse.Namespace) -> int:
    item_id = extract_item_id(args.text)
    if item_id is None:
        error("Nothing scanned.")
        return EXIT_ERROR
    item = app.controller.find_item(item_id)
    if item is None:
        error(f"Item not found: {item_id}")
        return EXIT_ERROR
    show_item(item, public_item_url(app.settings.base_url, item.id))
    return EXIT_OK


COMMANDS: dict[str, Callable[[App, argparse.Namespace], int]] = {
    "init": cmd_init,
    "import": cmd_import,
    "probe": cmd_probe,
    "add": cmd_add,
    "edit": cmd_edit,
    "list": cmd_list,
    "show": cmd_show,
    "history": cmd_history,
    "status": cmd_status,
    "payment": cmd_payment,
    "remake": cmd_remake,
    "bulk-update": cmd_bulk_update,
    "delete": cmd_delete,
    "bulk-delete": cmd_bulk_delete,
    "locations": cmd_locations,
    "summary": cmd_summary,
    "labels": cmd_labels,
    "label-url": cmd_label_url,
    "scan": cmd_scan,
}


# =============================================================================
# Entry point
# =============================================================================


def _run(args: argparse.Namespace) -> int:
    try:
        settings = get_active_settings(args.config)
    except (OSError, KeyError, ValueError, yaml.YAMLError) as exc:
        error(f"Failed to load settings: {exc}")
        return EXIT_ERROR

    if args.db_url:
        settings = replace(settings, database_url=args.db_url)
    logger = setup_logging(args.log_level or settings.log_level)

    with LogContext.bind(correlation_id=uuid4().hex[:12], operation=f"cli.{args.command}"):
        try:
            app = build_app(settings)
        except Exception as exc:
            error(f"Database init failed: {exc}")
            return EXIT_ERROR

        try:
            return COMMANDS[args.command](app, args)
        except InventoryKernelError as exc:
            logger.warning("cli_command_failed", extra={"error_code": exc.code})
            error(f"{exc.code}: {exc}")
            return EXIT_ERROR
        finally:
            app.close()


def main(argv: Sequence[str] | None = None) -> int:
    args = _parse_args(argv)
    try:
        return _run(args)
    except KeyboardInterrupt:
        print("\n  Interrupted.", file=sys.stderr)
        return EXIT_INTERRUPTED
