#!/usr/bin/env python3
"""
Shopping List Model
-------------------
- LineItem: name, unit price, quantity; total = price × quantity (2 decimals).
- Unit: a quantity-1 slice of a LineItem. Carries its source item id and a
  1-based unit index so a multi-quantity item can be spread over groups.
- Group: numbered bucket with a target amount; `total` is kept in step with
  membership by `add` / `remove` / `replace_at`.
- GroupSpec: (target_amount, count) → `count` groups sharing that target.
- ShoppingList: items + groups + split mode, with the list edits the app
  performs (add / remove / edit item) propagated into the groups.

Loading
-------
- `load_items(path)` reads CSV / JSON / XLSX via pandas.
  Columns: name, price, quantity (default 1), optional id.
"""

import json
import time
import uuid
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Dict, List, Optional

import pandas as pd


class InvalidArgument(ValueError):
    """Raised for caller errors (bad targets, group counts, item fields)."""


def round2(value: float) -> float:
    return round(float(value), 2)


def _new_id(prefix: str) -> str:
    return f"{prefix}-{int(time.time() * 1000)}-{uuid.uuid4().hex[:6]}"


# ---------- Models ----------
@dataclass
class LineItem:
    id: str
    name: str
    price: float
    quantity: int
    total: float = 0.0

    def __post_init__(self) -> None:
        self.name = str(self.name).strip()
        if not self.name:
            raise InvalidArgument("Item name is required")
        self.price = float(self.price)
        if self.price < 0:
            raise InvalidArgument(f"Price must be positive ({self.name}: {self.price})")
        if int(self.quantity) != self.quantity or self.quantity < 1:
            raise InvalidArgument(f"Quantity must be at least 1 ({self.name}: {self.quantity})")
        self.quantity = int(self.quantity)
        self.total = round2(self.price * self.quantity)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "price": self.price,
            "quantity": self.quantity,
            "total": self.total,
        }

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "LineItem":
        return cls(
            id=str(raw["id"]),
            name=str(raw["name"]),
            price=float(raw["price"]),
            quantity=int(raw.get("quantity", 1)),
        )


@dataclass(frozen=True)
class Unit:
    """One piece of a line item. Value is the item's unit price."""

    source_item_id: str
    unit_index: int
    name: str
    price: float
    original_quantity: int
    split_index: int

    @property
    def id(self) -> str:
        return f"{self.source_item_id}-{self.unit_index}"

    @property
    def value(self) -> float:
        return self.price

    @property
    def total(self) -> float:
        return self.price

    @property
    def quantity(self) -> int:
        return 1

    @property
    def label(self) -> str:
        if self.original_quantity > 1:
            return f"{self.name} ({self.split_index}/{self.original_quantity})"
        return self.name

    @classmethod
    def from_item(cls, item: LineItem, unit_index: int, split_index: Optional[int] = None) -> "Unit":
        return cls(
            source_item_id=item.id,
            unit_index=unit_index,
            name=item.name,
            price=item.price,
            original_quantity=item.quantity,
            split_index=unit_index if split_index is None else split_index,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "price": self.price,
            "quantity": 1,
            "total": self.total,
            "originalQuantity": self.original_quantity,
            "splitIndex": self.split_index,
            "sourceItemId": self.source_item_id,
            "unitIndex": self.unit_index,
        }

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "Unit":
        return cls(
            source_item_id=str(raw["sourceItemId"]),
            unit_index=int(raw["unitIndex"]),
            name=str(raw["name"]),
            price=float(raw["price"]),
            original_quantity=int(raw.get("originalQuantity", 1)),
            split_index=int(raw.get("splitIndex", raw["unitIndex"])),
        )


@dataclass
class GroupSpec:
    target_amount: float
    count: int = 1

    def __post_init__(self) -> None:
        if self.target_amount is None or float(self.target_amount) <= 0:
            raise InvalidArgument(f"Target amount must be positive (got {self.target_amount})")
        if int(self.count) != self.count or self.count < 1:
            raise InvalidArgument(f"Group count must be at least 1 (got {self.count})")
        self.target_amount = float(self.target_amount)
        self.count = int(self.count)


@dataclass
class Group:
    id: str
    number: int
    target_amount: float
    total: float = 0.0
    items: List[Unit] = field(default_factory=list)

    @property
    def excess(self) -> float:
        return max(0.0, round2(self.total - self.target_amount))

    @property
    def is_over_target(self) -> bool:
        return self.excess > 0

    @property
    def distance(self) -> float:
        """Absolute distance of the current total to the target."""
        return abs(self.total - self.target_amount)

    def add(self, unit: Unit) -> None:
        self.items.append(unit)
        self.total = round2(self.total + unit.value)

    def remove(self, unit: Unit) -> Optional[Unit]:
        """Take out the member with the same source item and unit index."""
        for idx, member in enumerate(self.items):
            if member.source_item_id == unit.source_item_id and member.unit_index == unit.unit_index:
                del self.items[idx]
                self.recompute()
                return member
        return None

    def replace_at(self, index: int, unit: Unit) -> Unit:
        old = self.items[index]
        self.items[index] = unit
        self.total = round2(self.total - old.value + unit.value)
        return old

    def recompute(self) -> None:
        self.total = round2(sum(u.value for u in self.items))

    def copy(self, **changes: Any) -> "Group":
        # Units are frozen, so a shallow copy of the list is enough
        items = changes.pop("items", self.items)
        return replace(self, items=list(items), **changes)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "number": self.number,
            "targetAmount": self.target_amount,
            "total": self.total,
            "items": [u.to_dict() for u in self.items],
        }

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "Group":
        group = cls(id=str(raw["id"]), number=int(raw["number"]), target_amount=float(raw["targetAmount"]))
        for u in raw.get("items", []):
            group.items.append(Unit.from_dict(u))
        group.recompute()
        return group


@dataclass
class ShoppingList:
    name: str
    id: str = field(default_factory=lambda: _new_id("list"))
    date: str = field(default_factory=lambda: time.strftime("%Y-%m-%dT%H:%M:%S"))
    items: List[LineItem] = field(default_factory=list)
    groups: List[Group] = field(default_factory=list)
    is_split_mode: bool = False

    @property
    def total(self) -> float:
        return round2(sum(item.total for item in self.items))

    def get_item(self, item_id: str) -> LineItem:
        for item in self.items:
            if item.id == item_id:
                return item
        raise InvalidArgument(f"Unknown item: {item_id}")

    def add_item(self, name: str, price: float, quantity: int = 1) -> LineItem:
        if not str(name).strip() or float(price) <= 0:
            raise InvalidArgument("Please enter a valid item name and price.")
        item = LineItem(id=_new_id("item"), name=name, price=price, quantity=quantity)
        self.items.append(item)
        return item

    def remove_item(self, item_id: str) -> None:
        """Drop the item and every unit of it from the groups."""
        self.items = [item for item in self.items if item.id != item_id]
        new_groups: List[Group] = []
        for g in self.groups:
            ng = g.copy(items=[u for u in g.items if u.source_item_id != item_id])
            ng.recompute()
            new_groups.append(ng)
        self.groups = new_groups

    def edit_item(self, item_id: str, price: float, quantity: int) -> LineItem:
        """Change price/quantity; grouped units follow the new values.

        If the new quantity is smaller than the number of grouped units,
        the units with the highest index are dropped. The grouped units that
        remain are renumbered 1..k in index order so that no label points
        past the new quantity.
        """
        old = self.get_item(item_id)
        item = LineItem(id=old.id, name=old.name, price=price, quantity=quantity)
        self.items = [item if it.id == item_id else it for it in self.items]

        grouped = sorted(u.unit_index for g in self.groups for u in g.items if u.source_item_id == item_id)
        kept = grouped[: item.quantity]
        renumber = {old_index: n for n, old_index in enumerate(kept, start=1)}

        new_groups: List[Group] = []
        for g in self.groups:
            units: List[Unit] = []
            for u in g.items:
                if u.source_item_id != item_id:
                    units.append(u)
                elif u.unit_index in renumber:
                    n = renumber[u.unit_index]
                    units.append(
                        replace(u, unit_index=n, split_index=n, price=item.price, original_quantity=item.quantity)
                    )
            ng = g.copy(items=units)
            ng.recompute()
            new_groups.append(ng)
        self.groups = new_groups
        return item

    def toggle_split_mode(self) -> None:
        # Entering split mode starts from empty groups; leaving keeps them
        if not self.is_split_mode:
            self.groups = []
        self.is_split_mode = not self.is_split_mode

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "id": self.id,
            "name": self.name,
            "date": self.date,
            "items": [item.to_dict() for item in self.items],
            "groups": [g.to_dict() for g in self.groups],
            "total": self.total,
            "isSplitMode": self.is_split_mode,
        }

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "ShoppingList":
        return cls(
            id=str(raw["id"]),
            name=str(raw["name"]),
            date=str(raw.get("date", "")),
            items=[LineItem.from_dict(r) for r in raw.get("items", [])],
            groups=[Group.from_dict(r) for r in raw.get("groups") or []],
            is_split_mode=bool(raw.get("isSplitMode", False)),
        )


# ---------- File I/O ----------
REQUIRED_COLUMNS = ("name", "price")


def _read_frame(p: Path) -> pd.DataFrame:
    suffix = p.suffix.lower()
    if suffix == ".csv":
        return pd.read_csv(p)
    if suffix in (".xlsx", ".xls"):
        return pd.read_excel(p)
    if suffix == ".json":
        raw = json.loads(p.read_text(encoding="utf-8"))
        rows = raw.get("items", []) if isinstance(raw, dict) else raw
        return pd.DataFrame(rows)
    raise InvalidArgument(f"Unsupported file type: {p.suffix or p.name}")


def load_items(path: str) -> List[LineItem]:
    p = Path(path)
    if not p.exists():
        raise FileNotFoundError(f"{path} not found.")
    df = _read_frame(p)
    if df.empty and len(df.columns) == 0:
        return []
    df.columns = [str(c).strip().lower() for c in df.columns]
    missing = [c for c in REQUIRED_COLUMNS if c not in df.columns]
    if missing:
        raise InvalidArgument(f"{path}: missing column(s) {', '.join(missing)}")
    if "quantity" not in df.columns:
        df["quantity"] = 1

    df["name"] = df["name"].fillna("").astype(str).str.strip()
    df = df[df["name"] != ""].copy()

    # Rows are reported 1-based, counting data rows only
    price = pd.to_numeric(df["price"], errors="coerce")
    bad_price = price[price.isna()]
    if not bad_price.empty:
        idx = bad_price.index[0]
        raise InvalidArgument(
            f"{path}: row {idx + 1} ({df.at[idx, 'name']}): unreadable price {df.at[idx, 'price']!r}"
        )
    qty = pd.to_numeric(df["quantity"], errors="coerce")
    bad_qty = qty[(qty.isna() & df["quantity"].notna()) | (qty.notna() & (qty % 1 != 0))]
    if not bad_qty.empty:
        idx = bad_qty.index[0]
        raise InvalidArgument(
            f"{path}: row {idx + 1} ({df.at[idx, 'name']}): quantity must be a whole number, "
            f"got {df.at[idx, 'quantity']!r}"
        )
    df["price"] = price
    df["quantity"] = qty.fillna(1).astype(int)

    out: List[LineItem] = []
    for n, row in enumerate(df.to_dict("records"), start=1):
        item_id = row.get("id")
        if item_id is None or pd.isna(item_id) or not str(item_id).strip():
            item_id = f"item-{n}"
        out.append(
            LineItem(
                id=str(item_id).strip(),
                name=row["name"],
                price=float(row["price"]),
                quantity=int(row["quantity"]),
            )
        )
    return out
