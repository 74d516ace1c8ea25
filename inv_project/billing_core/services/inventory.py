import logging

from ..exceptions import LedgerValidationError, RecordNotFound
from ..models import InventoryItem
from .ledger import ledger_transaction
from .money import ZERO, check_amount, q2, to_decimal

logger = logging.getLogger(__name__)

ITEM_FIELDS = ("name", "hsn", "category", "rate", "stock", "unit", "gst_rate")


def _clean_item(fields):
    unknown = set(fields) - set(ITEM_FIELDS)
    if unknown:
        raise LedgerValidationError(f"Unknown item fields: {', '.join(sorted(unknown))}")
    data = dict(fields)
    for key in ("name", "hsn", "category", "unit"):
        if key in data:
            data[key] = (data[key] or "").strip()
    if "name" in data and not data["name"]:
        raise LedgerValidationError("Item name is required")
    if "rate" in data:
        data["rate"] = q2(check_amount(data["rate"], "Rate"))
        if data["rate"] < 0:
            raise LedgerValidationError("Rate must be >= 0")
    if "gst_rate" in data:
        data["gst_rate"] = q2(to_decimal(data["gst_rate"]))
    if "stock" in data:
        data["stock"] = int(to_decimal(data["stock"]))
    return data


def _name_taken(owner, name, exclude_pk=None):
    qs = InventoryItem.objects.for_owner(owner).filter(name__iexact=name)
    if exclude_pk is not None:
        qs = qs.exclude(pk=exclude_pk)
    return qs.exists()


def add_item(owner, **fields) -> InventoryItem:
    """Create an inventory item. Names are unique per owner, ignoring case."""
    data = _clean_item(fields)
    if not data.get("name"):
        raise LedgerValidationError("Item name is required")
    if _name_taken(owner, data["name"]):
        raise LedgerValidationError(f"An item named {data['name']!r} already exists")
    data.setdefault("rate", ZERO)
    with ledger_transaction("add_item", owner):
        item = InventoryItem(owner=owner, **data)
        item.save()
    logger.info("add_item owner=%s item=%s name=%s", owner.pk, item.pk, item.name)
    return item


def update_item(owner, item_id, **fields) -> InventoryItem:
    data = _clean_item(fields)
    item = InventoryItem.objects.for_owner(owner).filter(pk=item_id).first()
    if item is None:
        raise RecordNotFound(f"Item {item_id} not found")
    if "name" in data and _name_taken(owner, data["name"], exclude_pk=item.pk):
        raise LedgerValidationError(f"An item named {data['name']!r} already exists")
    with ledger_transaction("update_item", owner):
        for key, value in data.items():
            setattr(item, key, value)
        item.save()
    return item


def delete_item(owner, item_id):
    """Hard delete. Invoice lines that used the item keep their snapshot."""
    item = InventoryItem.objects.for_owner(owner).filter(pk=item_id).first()
    if item is None:
        raise RecordNotFound(f"Item {item_id} not found")
    with ledger_transaction("delete_item", owner):
        item.delete()
    logger.info("delete_item owner=%s item=%s", owner.pk, item_id)
