# catalog.py: static brand/product catalog + JSON loader

import json
import logging
import os
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import config

logger = logging.getLogger(__name__)

# ---------- simple in-process cache ----------
_CATALOG_CACHE = None
_CATALOG_MTIME = None


class CatalogError(ValueError):
    """Raised when the catalog configuration is malformed"""


@dataclass(frozen=True)
class Product:
    id: str
    name: str
    default_cost: Optional[float] = None
    default_price: Optional[float] = None


@dataclass
class Catalog:
    brands: Dict[str, List[Product]] = field(default_factory=dict)
    version: str = "0.0.0"

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "Catalog":
        """
        Build a catalog from its configuration mapping.

        Brand order follows the mapping's insertion order. Product ids must be
        unique across the whole catalog and defaults, when present, must be
        non-negative numbers.
        """
        brands_raw = raw.get("brands")
        if not isinstance(brands_raw, dict):
            raise CatalogError("Catalog has no 'brands' mapping")

        seen_ids = set()
        brands: Dict[str, List[Product]] = {}
        for brand, items in brands_raw.items():
            if not isinstance(items, list):
                raise CatalogError(f"Brand '{brand}' must map to a list of products")
            products = []
            for item in items:
                if not isinstance(item, dict):
                    raise CatalogError(f"Product under '{brand}' must be an object, got {item!r}")
                product_id = item.get("id")
                name = item.get("name")
                if not product_id or not name:
                    raise CatalogError(f"Product under '{brand}' is missing 'id' or 'name'")
                if product_id in seen_ids:
                    raise CatalogError(f"Duplicate product id '{product_id}' in catalog")
                seen_ids.add(product_id)
                products.append(Product(
                    id=str(product_id),
                    name=str(name),
                    default_cost=_default_amount(item, "default_cost"),
                    default_price=_default_amount(item, "default_price"),
                ))
            brands[str(brand)] = products

        return cls(brands=brands, version=str(raw.get("version", "0.0.0")))

    def list_brands(self) -> List[str]:
        return list(self.brands.keys())

    def list_products(self, brand: str) -> List[Product]:
        # Unknown brands yield nothing rather than raising
        return list(self.brands.get(brand, []))

    def get_product(self, brand: str, product_id: str) -> Optional[Product]:
        for product in self.brands.get(brand, []):
            if product.id == product_id:
                return product
        return None


def _default_amount(item: Dict[str, Any], key: str) -> Optional[float]:
    value = item.get(key)
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise CatalogError(f"Product '{item.get('id')}' has a non-numeric {key}: {value!r}")
    if value < 0:
        raise CatalogError(f"Product '{item.get('id')}' has a negative {key}: {value}")
    return float(value)


def _read_catalog_from_disk(path: str) -> Catalog:
    if not os.path.exists(path):
        raise FileNotFoundError(f"Missing catalog at {path}")
    with open(path, "r", encoding="utf-8") as f:
        try:
            data = json.load(f)
        except json.JSONDecodeError as e:
            raise CatalogError(f"Catalog at {path} is not valid JSON: {e}") from e
    catalog = Catalog.from_dict(data)
    logger.info("Loaded catalog v%s from %s (%d brands)", catalog.version, path, len(catalog.brands))
    return catalog


def load_catalog(path: Optional[str] = None) -> Catalog:
    global _CATALOG_CACHE, _CATALOG_MTIME
    path = path or config.CATALOG_PATH
    try:
        mtime = (path, os.path.getmtime(path))
    except OSError:
        mtime = (path, None)

    if _CATALOG_CACHE is None or _CATALOG_MTIME != mtime:
        _CATALOG_CACHE = _read_catalog_from_disk(path)
        _CATALOG_MTIME = mtime
    return _CATALOG_CACHE


def reload_catalog(path: Optional[str] = None) -> Catalog:
    """
    Force cache invalidation + re-read from disk.
    """
    global _CATALOG_CACHE, _CATALOG_MTIME
    _CATALOG_CACHE = None
    _CATALOG_MTIME = None
    return load_catalog(path)
