import pytest

from catalog import Catalog
from resolver import Resolver


@pytest.fixture
def catalog():
    return Catalog.from_dict({
        "version": "test",
        "brands": {
            "REF Stockholm": [
                {"id": "ref-gift-set", "name": "REF Gift Set", "default_cost": 0, "default_price": 0},
            ],
            "MY.ORGANICS": [
                {"id": "myorg-retail-shampoo", "name": "MY.ORGANICS RETAIL SHAMPOO",
                 "default_cost": 10.45, "default_price": 20.99},
                {"id": "myorg-conditioner", "name": "MY.ORGANICS CONDITIONER"},
                {"id": "myorg-mask", "name": "MY.ORGANICS MASK", "default_cost": 9.5},
            ],
            "Coming Soon": [],
        },
    })


@pytest.fixture
def resolver(catalog):
    return Resolver(catalog)
