"""
Client-side shopping cart.

Lines are keyed by (product id, size) and kept in insertion order. The total
is rebuilt from the whole line list after every mutation, and every mutation
writes the cart back to durable storage.
"""
import json
import logging
import math
import os
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Tuple

from pydantic import ValidationError

from schemas import FREE_SIZE, CartLine, Product

logger = logging.getLogger(__name__)

Notifier = Callable[[str, str], None]


def log_notification(message: str, kind: str = "success") -> None:
    if kind == "error":
        logger.warning(message)
    else:
        logger.info(message)


DEFAULT_STATE_PATH = Path.home() / ".storefront" / "state.json"


class JsonFileStorage:
    """Persisted client state: {"cart": [...], "settings": {...}, "products": [...]}.

    Without an explicit path the file comes from STOREFRONT_CART_PATH, then
    ~/.storefront/state.json. Writes go to a sibling temp file that replaces
    the original, so a failed write leaves the previous state readable.
    """

    def __init__(self, path=None):
        self.path = Path(path or os.getenv("STOREFRONT_CART_PATH") or DEFAULT_STATE_PATH)

    def read(self) -> Dict[str, Any]:
        if not self.path.exists():
            return {}
        try:
            state = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            logger.warning(f"Ignoring unreadable storage file {self.path}: {e}")
            return {}
        if not isinstance(state, dict):
            logger.warning(f"Ignoring storage file {self.path}: not an object")
            return {}
        return state

    def read_section(self, name: str, default=None):
        return self.read().get(name, default)

    def write_section(self, name: str, value) -> None:
        state = self.read()
        state[name] = value
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_name(self.path.name + ".tmp")
        tmp.write_text(json.dumps(state, ensure_ascii=False, indent=2), encoding="utf-8")
        os.replace(tmp, self.path)


def _is_number(value) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool) and math.isfinite(value)


def restore_lines(raw) -> List[CartLine]:
    """Rebuild cart lines from persisted data, dropping anything malformed."""
    if not isinstance(raw, list):
        return []
    lines: List[CartLine] = []
    index: Dict[Tuple[str, str], int] = {}
    for item in raw:
        if not (isinstance(item, dict)
                and isinstance(item.get("productId"), str)
                and _is_number(item.get("unitPrice"))
                and _is_number(item.get("quantity"))
                and item["quantity"] > 0):
            logger.warning(f"Discarding malformed cart line: {item!r}")
            continue
        try:
            line = CartLine.model_validate(item)
        except ValidationError as e:
            logger.warning(f"Discarding invalid cart line {item.get('productId')}: {e.error_count()} errors")
            continue
        key = (line.product_id, line.size)
        if key in index:
            existing = lines[index[key]]
            lines[index[key]] = existing.model_copy(update={"quantity": existing.quantity + line.quantity})
        else:
            index[key] = len(lines)
            lines.append(line)
    return lines


class Cart:
    def __init__(self, lines: Optional[List[CartLine]] = None, storage: Optional[JsonFileStorage] = None,
                 notify: Optional[Notifier] = None):
        self._lines: List[CartLine] = list(lines or [])
        self._total = 0
        self.storage = storage
        self.notify = notify or log_notification
        self._recompute_total()

    @classmethod
    def load(cls, storage: JsonFileStorage, notify: Optional[Notifier] = None) -> "Cart":
        return cls(restore_lines(storage.read_section("cart")), storage=storage, notify=notify)

    @property
    def lines(self) -> List[CartLine]:
        return list(self._lines)

    @property
    def total(self) -> int:
        return self._total

    def __len__(self) -> int:
        return len(self._lines)

    def __iter__(self):
        return iter(list(self._lines))

    def is_empty(self) -> bool:
        return not self._lines

    def find(self, product_id: str, size: str) -> Optional[CartLine]:
        for line in self._lines:
            if line.product_id == product_id and line.size == size:
                return line
        return None

    # -----------------
    # Mutations
    # -----------------
    def add_item(self, product: Product, quantity: int = 1, size: Optional[str] = None) -> None:
        if not size:
            if product.sizes == [FREE_SIZE]:
                size = FREE_SIZE
            else:
                self.notify("Please select a size.", "error")
                return
        if quantity <= 0:
            self.notify("Quantity must be at least 1.", "error")
            return

        product_id = product.id or product.product_id
        existing = self.find(product_id, size)
        if existing:
            self._lines = [
                line.model_copy(update={"quantity": line.quantity + quantity}) if line is existing else line
                for line in self._lines
            ]
            self.notify(f"Quantity updated for {product.name} (Size: {size})!", "success")
        else:
            # Price, name and image are frozen here; later catalog changes do not reach the cart
            self._lines.append(CartLine(
                product_id=product_id,
                display_product_id=product.product_id or product.id,
                name=product.name,
                unit_price=product.price,
                quantity=quantity,
                image_url=product.images[0] if product.images else "",
                size=size,
            ))
            self.notify(f"{product.name} (Size: {size}) added to cart!", "success")
        self._changed()

    def update_quantity(self, product_id: str, size: str, new_quantity: int) -> None:
        if new_quantity <= 0:
            self._lines = [
                line for line in self._lines
                if not (line.product_id == product_id and line.size == size)
            ]
        else:
            self._lines = [
                line.model_copy(update={"quantity": new_quantity})
                if line.product_id == product_id and line.size == size else line
                for line in self._lines
            ]
        self._changed()

    def remove_item(self, product_id: str, size: str) -> None:
        self.update_quantity(product_id, size, 0)

    def clear(self) -> None:
        self._lines = []
        self._changed()

    # -----------------
    # Derived state
    # -----------------
    def _recompute_total(self) -> None:
        self._total = sum(line.unit_price * line.quantity for line in self._lines)

    def _changed(self) -> None:
        self._recompute_total()
        if self.storage is not None:
            self.storage.write_section("cart", self.to_json())

    def to_json(self) -> List[Dict[str, Any]]:
        return [line.model_dump(mode="json", by_alias=True) for line in self._lines]
