"""Product catalogue operations."""
from __future__ import annotations

import logging
from typing import List

from .database import Database, UnitOfWork
from .errors import ProductNotFoundError
from .models import Product
from .schemas import ProductData

logger = logging.getLogger("storefront.products")


class ProductService:
    def __init__(self, database: Database) -> None:
        self._database = database

    def get_products(self) -> List[Product]:
        with self._database.unit_of_work() as uow:
            return uow.products.list_all()

    def get_product(self, product_id: int) -> Product:
        with self._database.unit_of_work() as uow:
            return _find_product(uow, product_id)

    def create_product(self, data: ProductData) -> Product:
        with self._database.unit_of_work() as uow:
            product = uow.products.add(
                name=data.name,
                maker=data.maker,
                price=data.price,
                image_url=data.image_url,
            )
        logger.info("Created product %s (%s)", product.id, product.name)
        return product

    def update_product(self, product_id: int, data: ProductData) -> Product:
        with self._database.unit_of_work() as uow:
            product = uow.products.update(
                product_id,
                name=data.name,
                maker=data.maker,
                price=data.price,
                image_url=data.image_url,
            )
            if product is None:
                raise ProductNotFoundError(product_id)
        logger.info("Updated product %s", product_id)
        return product

    def delete_product(self, product_id: int) -> Product:
        """Remove the product and return its last stored state."""

        with self._database.unit_of_work() as uow:
            product = _find_product(uow, product_id)
            uow.products.delete(product_id)
        logger.info("Deleted product %s", product_id)
        return product


def _find_product(uow: UnitOfWork, product_id: int) -> Product:
    product = uow.products.get(product_id)
    if product is None:
        raise ProductNotFoundError(product_id)
    return product


__all__ = ["ProductService"]
