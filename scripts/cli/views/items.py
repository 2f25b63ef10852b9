"""Item views: tables, detail card, history."""

from inventory_kernel.domain.dtos import HistoryEntryInfo, ItemInfo
from inventory_kernel.domain.statuses import REMAKE_LABEL, STATUS_LABELS

from scripts.cli.util import W, fmt_time, print_rule, truncate


def show_item_table(items: list[ItemInfo]) -> None:
    if not items:
        print("\n  No items.\n")
        return
    print()
    print(
        f"  {'ID':<13} {'Customer':<20} {'#':>4} {'Size':<5} {'Age':<5} "
        f"{'Status':<13} {'Payment':<9} {'Location':<10}"
    )
    print(f"  {'-' * (W - 2)}")
    for item in items:
        remake = " *" if item.needs_remake else ""
        print(
            f"  {item.id:<13} {truncate(item.customer_name, 20):<20} "
            f"{truncate(item.number, 4):>4} {truncate(item.size, 5):<5} "
            f"{item.age_group.value:<5} {item.status_label:<13} "
            f"{item.payment_label:<9} {truncate(item.location, 10):<10}{remake}"
        )
    print(f"\n  {len(items)} item(s)")
    if any(item.needs_remake for item in items):
        print(f"  * {REMAKE_LABEL}")
    print()


def show_item(item: ItemInfo, url: str | None = None) -> None:
    print()
    print_rule(f"ITEM {item.id}")
    rows = [
        ("Customer", item.customer_name),
        ("Team", item.team),
        ("Number", item.number),
        ("Name bar", item.namebar),
        ("Qty", str(item.quantity)),
        ("Type", item.item_type),
        ("Color", item.color),
        ("Design", item.design),
        ("Chest logo", item.chest_logo),
        ("Size", f"{item.size} ({item.age_group.value})"),
        ("Status", item.status_label),
        ("Payment", item.payment_label),
        ("Remake", REMAKE_LABEL if item.needs_remake else "no"),
        ("Location", item.location or ""),
        ("Ordered", item.date_ordered),
        ("Invoiced", item.date_invoiced),
        ("Received", item.date_received),
        ("Delivered", item.date_delivered),
        ("Tracking", item.tracking_number),
        ("Notes", item.notes),
        ("Created", fmt_time(item.created_at)),
        ("Updated", fmt_time(item.updated_at)),
    ]
    if url:
        rows.append(("Label URL", url))
    for label, value in rows:
        print(f"  {label:<12} {value}")
    print()


def show_history(item_id: str, entries: list[HistoryEntryInfo]) -> None:
    print()
    print_rule(f"HISTORY {item_id}")
    if not entries:
        print("  No history.\n")
        return
    for entry in entries:
        old = STATUS_LABELS[entry.old_status] if entry.old_status else "-"
        new = STATUS_LABELS[entry.new_status]
        line = f"  {fmt_time(entry.changed_at)}  {old:>13} -> {new:<13}"
        if entry.location:
            line += f"  @ {entry.location}"
        if entry.note:
            line += f"  ({entry.note})"
        print(line)
    print()
