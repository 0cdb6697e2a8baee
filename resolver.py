"""
Brand/product selection and per-product price overrides.

The Resolver decides which cost and RRP the form shows. For each field on its
own, a price the user typed for the selected product wins, then the catalog
default, then 0. The session's state lives in a SelectionState that callers
hand to every Resolver method; the Resolver itself keeps none.
"""

import logging
import math
import re
import threading
from dataclasses import dataclass, field
from typing import Dict, Optional

from catalog import Catalog, Product
from pricing import parse_amount, to_number

logger = logging.getLogger(__name__)

PRICE_FIELDS = ("cost", "price")
CUSTOM_PREFIX = "custom:"


def _is_number(value) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool) and math.isfinite(value)


class PriceOverrides:
    """
    Cost/price values the user typed, keyed by product id.

    Each field is stored under its own key, so recording a cost never touches a
    previously recorded price for the same product. Writes are serialised with
    a lock.
    """

    def __init__(self, data: Optional[Dict[str, Dict[str, float]]] = None):
        self._lock = threading.Lock()
        self._data: Dict[str, Dict[str, float]] = {}
        for product_id, values in (data or {}).items():
            if not isinstance(values, dict):
                continue
            kept = {k: float(v) for k, v in values.items() if k in PRICE_FIELDS and _is_number(v)}
            if kept:
                self._data[str(product_id)] = kept

    def get(self, product_id, default=None):
        with self._lock:
            values = self._data.get(product_id)
            return dict(values) if values is not None else default

    def record(self, product_id: str, field_name: str, value: float):
        if field_name not in PRICE_FIELDS:
            raise ValueError(f"Unknown price field '{field_name}'")
        with self._lock:
            self._data.setdefault(product_id, {})[field_name] = value

    def to_dict(self) -> Dict[str, Dict[str, float]]:
        with self._lock:
            return {k: dict(v) for k, v in self._data.items()}

    def __contains__(self, product_id):
        with self._lock:
            return product_id in self._data

    def __len__(self):
        with self._lock:
            return len(self._data)

    def __repr__(self):
        return f"PriceOverrides({self.to_dict()!r})"


@dataclass
class SelectionState:
    brand: str = ""
    product_id: Optional[str] = None
    product_name: str = ""
    cost: float = 0.0
    price: float = 0.0
    overrides: PriceOverrides = field(default_factory=PriceOverrides)

    def to_dict(self) -> dict:
        return {
            'brand': self.brand,
            'product_id': self.product_id,
            'product_name': self.product_name,
            'cost': self.cost,
            'price': self.price,
            'overrides': self.overrides.to_dict(),
        }


def resolve_defaults(product: Product, overrides) -> Dict[str, float]:
    """
    Effective cost and price for a product.

    overrides can be a PriceOverrides or a plain {product_id: {field: value}}
    mapping. Precedence is applied per field: override, catalog default, 0.
    """
    override = overrides.get(product.id) or {}
    defaults = {'cost': product.default_cost, 'price': product.default_price}

    resolved = {}
    for name in PRICE_FIELDS:
        if _is_number(override.get(name)):
            resolved[name] = float(override[name])
        elif _is_number(defaults[name]):
            resolved[name] = float(defaults[name])
        else:
            resolved[name] = 0.0
    return resolved


def custom_product_id(name: str) -> str:
    slug = re.sub(r"[^a-z0-9]+", "-", name.lower()).strip("-")
    return CUSTOM_PREFIX + (slug or name)


class Resolver:
    def __init__(self, catalog: Catalog, catalog_locked: bool = True):
        self.catalog = catalog
        self.catalog_locked = catalog_locked

    def initial_state(self) -> SelectionState:
        """Fresh state on the first brand and its first product"""
        state = SelectionState()
        brands = self.catalog.list_brands()
        if brands:
            self.on_brand_changed(state, brands[0])
        return state

    def current_product(self, state: SelectionState) -> Optional[Product]:
        if not state.product_id:
            return None
        if state.product_id.startswith(CUSTOM_PREFIX):
            return Product(id=state.product_id, name=state.product_name)
        return self.catalog.get_product(state.brand, state.product_id)

    def _select(self, state: SelectionState, product: Optional[Product]):
        if product is None:
            # Nothing to resolve; live cost/price stay as they are
            state.product_id = None
            state.product_name = ""
            return
        resolved = resolve_defaults(product, state.overrides)
        state.product_id = product.id
        state.product_name = product.name
        state.cost = resolved['cost']
        state.price = resolved['price']

    def on_brand_changed(self, state: SelectionState, new_brand: str) -> Optional[Product]:
        """
        Switch brand. Always jumps to the brand's first product, the previous
        product is not carried over.
        """
        state.brand = new_brand
        products = self.catalog.list_products(new_brand)
        product = products[0] if products else None
        self._select(state, product)
        return product

    def on_product_changed(self, state: SelectionState, new_product_id: str) -> Optional[Product]:
        product = self.catalog.get_product(state.brand, new_product_id)
        if product is None:
            # Stale id, fall back to the first product of the brand
            products = self.catalog.list_products(state.brand)
            product = products[0] if products else None
            logger.debug("Product %r not in brand %r, using %r", new_product_id, state.brand,
                         product.id if product else None)
        self._select(state, product)
        return product

    def on_product_name_edited(self, state: SelectionState, name: str) -> Optional[Product]:
        """Free-text product name, only when the catalog is unlocked"""
        if self.catalog_locked:
            raise ValueError("Product names come from the catalog while it is locked")
        name = (name or "").strip()
        product = Product(id=custom_product_id(name), name=name) if name else None
        self._select(state, product)
        return product

    def on_field_edited(self, state: SelectionState, field_name: str, raw_value) -> float:
        """
        Apply a typed cost or price.

        The parsed value becomes the live value and, when a product is selected,
        is remembered as that product's override.
        """
        if field_name not in PRICE_FIELDS:
            raise ValueError(f"Unknown price field '{field_name}'")
        value = parse_amount(raw_value)
        setattr(state, field_name, value)
        if state.product_id:
            state.overrides.record(state.product_id, field_name, value)
            logger.debug("Override %s=%s recorded for %s", field_name, value, state.product_id)
        return value

    def restore_selection(self, data: Optional[dict]) -> SelectionState:
        """
        Rebuild a state from saved data.

        Brands or products that no longer exist in the catalog fall back to the
        first available option. Cost and price are re-resolved for the selected
        product, so saved overrides apply.
        """
        data = data or {}
        state = SelectionState(
            cost=to_number(data.get('cost', 0)),
            price=to_number(data.get('price', 0)),
            overrides=PriceOverrides(data.get('overrides') if isinstance(data.get('overrides'), dict) else None),
        )

        brands = self.catalog.list_brands()
        brand = data.get('brand')
        if brand not in brands:
            if brand:
                logger.info("Saved brand %r no longer in catalog", brand)
            brand = brands[0] if brands else ""
        state.brand = brand

        product_id = data.get('product_id')
        if not self.catalog_locked and isinstance(product_id, str) and product_id.startswith(CUSTOM_PREFIX):
            self.on_product_name_edited(state, str(data.get('product_name') or ""))
        elif product_id:
            self.on_product_changed(state, product_id)
        else:
            self.on_brand_changed(state, brand)
        return state
