from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from storefront.database import Database
from storefront.errors import ProductNotFoundError
from storefront.products import ProductService
from storefront.schemas import ProductData


@pytest.fixture()
def service(tmp_path: Path) -> ProductService:
    database = Database(tmp_path / "storefront.sqlite3")
    database.initialize()
    return ProductService(database)


def _data(**overrides) -> ProductData:
    fields = {"name": "Toy mouse", "maker": "Codesoom", "price": 5000, "image_url": None}
    fields.update(overrides)
    return ProductData(**fields)


def test_products_are_listed_in_creation_order(service: ProductService) -> None:
    assert service.get_products() == []

    first = service.create_product(_data())
    second = service.create_product(_data(name="Ball", price=1200))

    assert [product.id for product in service.get_products()] == [first.id, second.id]


def test_get_product_with_missing_id(service: ProductService) -> None:
    with pytest.raises(ProductNotFoundError) as excinfo:
        service.get_product(1000)
    assert excinfo.value.product_id == 1000


def test_ids_beyond_integer_range_are_not_found(service: ProductService) -> None:
    with pytest.raises(ProductNotFoundError):
        service.get_product(2**63)
    with pytest.raises(ProductNotFoundError):
        service.update_product(2**63, _data())
    with pytest.raises(ProductNotFoundError):
        service.delete_product(2**63)


def test_update_product_replaces_every_field(service: ProductService) -> None:
    product = service.create_product(_data(image_url="https://example.com/mouse.png"))

    updated = service.update_product(product.id, _data(name="Cat tower", maker="Catnip Co", price=9900))

    assert updated.id == product.id
    assert updated.name == "Cat tower"
    assert updated.maker == "Catnip Co"
    assert updated.price == 9900
    assert updated.image_url is None
    assert service.get_product(product.id) == updated


def test_update_product_with_missing_id(service: ProductService) -> None:
    with pytest.raises(ProductNotFoundError):
        service.update_product(1000, _data())


def test_delete_product_returns_removed_product(service: ProductService) -> None:
    product = service.create_product(_data())

    removed = service.delete_product(product.id)

    assert removed == product
    with pytest.raises(ProductNotFoundError):
        service.get_product(product.id)
    with pytest.raises(ProductNotFoundError):
        service.delete_product(product.id)


@pytest.mark.parametrize(
    "overrides",
    [{"name": "   "}, {"maker": ""}, {"price": -1}, {"price": 2**63}],
)
def test_product_data_rejects_invalid_fields(overrides) -> None:
    with pytest.raises(ValidationError):
        _data(**overrides)
