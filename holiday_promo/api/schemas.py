"""Request and response models for the HTTP API."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from holiday_promo.db import models
from holiday_promo.imggen.prompt_builder import StyleOption
from holiday_promo.services.generations import GenerationView
from holiday_promo.services.products import ProductView


class ThemeOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    description: str
    prompt: str
    is_active: bool


class SeedResult(BaseModel):
    message: str


class StyleOut(BaseModel):
    id: str
    name: str
    description: str

    @classmethod
    def from_option(cls, option: StyleOption) -> "StyleOut":
        return cls(id=option.id, name=option.name, description=option.description)


class UploadUrlOut(BaseModel):
    upload_url: str


class StoredBlobOut(BaseModel):
    """Body returned to whoever posted bytes to an upload URL."""

    model_config = ConfigDict(populate_by_name=True)

    storage_id: str = Field(alias="storageId")


class ProductCreate(BaseModel):
    image_id: str = Field(min_length=1)
    name: str | None = None
    description: str | None = None


class ProductOut(BaseModel):
    id: int
    image_id: str
    image_url: str | None
    name: str | None
    description: str | None
    created_at: datetime

    @classmethod
    def from_view(cls, view: ProductView) -> "ProductOut":
        return cls.from_product(view.product, view.image_url)

    @classmethod
    def from_product(cls, product: models.Product, image_url: str | None) -> "ProductOut":
        return cls(
            id=product.id,
            image_id=product.image_id,
            image_url=image_url,
            name=product.name,
            description=product.description,
            created_at=product.created_at,
        )


class GenerationCreate(BaseModel):
    product_ids: list[int]
    theme: str
    style: str


class GenerationCreated(BaseModel):
    id: int
    status: str


class GenerationOut(BaseModel):
    id: int
    product_ids: list[int]
    theme: str
    style: str
    prompt: str
    status: str
    result_image_id: str | None
    result_image_url: str | None
    error_message: str | None
    created_at: datetime

    @classmethod
    def from_view(cls, view: GenerationView) -> "GenerationOut":
        generation = view.generation
        return cls(
            id=generation.id,
            product_ids=list(generation.product_ids),
            theme=generation.theme,
            style=generation.style,
            prompt=generation.prompt,
            status=generation.status,
            result_image_id=generation.result_image_id,
            result_image_url=view.result_image_url,
            error_message=generation.error_message,
            created_at=generation.created_at,
        )
