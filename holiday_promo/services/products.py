"""Business logic for managing uploaded product photos."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from holiday_promo.db import models
from holiday_promo.errors import NotFoundOrUnauthorized
from holiday_promo.storage.backend import StorageBackend

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class ProductView:
    """Product row together with its resolved display URL."""

    product: models.Product
    image_url: str | None


class ProductService:
    """Facade over product rows; every access is scoped to the owner."""

    async def create(
        self,
        session: AsyncSession,
        *,
        user_id: str,
        image_id: str,
        name: str | None = None,
        description: str | None = None,
    ) -> models.Product:
        """Persist a product that points at an already stored image."""

        product = models.Product(
            user_id=user_id,
            image_id=image_id,
            name=name,
            description=description,
        )
        session.add(product)
        await session.commit()
        await session.refresh(product)
        return product

    async def list_for_owner(
        self,
        session: AsyncSession,
        storage: StorageBackend,
        *,
        user_id: str,
    ) -> list[ProductView]:
        """Return the user's products with display URLs."""

        stmt = select(models.Product).where(models.Product.user_id == user_id).order_by(models.Product.id)
        result = await session.execute(stmt)
        return [
            ProductView(product=product, image_url=await storage.resolve_url(product.image_id))
            for product in result.scalars().all()
        ]

    async def get_owned(
        self,
        session: AsyncSession,
        *,
        user_id: str,
        product_id: int,
    ) -> models.Product:
        """Return the product if it exists and belongs to ``user_id``."""

        product = await session.get(models.Product, product_id)
        if product is None or product.user_id != user_id:
            raise NotFoundOrUnauthorized()
        return product

    async def delete(
        self,
        session: AsyncSession,
        *,
        user_id: str,
        product_id: int,
    ) -> None:
        """Remove the product row; generations keep their reference to it."""

        product = await self.get_owned(session, user_id=user_id, product_id=product_id)
        await session.delete(product)
        await session.commit()
        logger.info("Deleted product %s for user %s", product_id, user_id)
