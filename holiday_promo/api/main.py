"""FastAPI entrypoint and HTTP routes."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from functools import lru_cache
from mimetypes import guess_type
from typing import Annotated

from fastapi import Depends, FastAPI, Request, UploadFile, status
from fastapi.responses import FileResponse, JSONResponse
from prometheus_client import make_asgi_app
from sqlalchemy.ext.asyncio import AsyncSession

from holiday_promo.api.auth import OptionalUserDependency, UserDependency
from holiday_promo.api.schemas import (
    GenerationCreate,
    GenerationCreated,
    GenerationOut,
    ProductCreate,
    ProductOut,
    SeedResult,
    StoredBlobOut,
    StyleOut,
    ThemeOut,
    UploadUrlOut,
)
from holiday_promo.config.settings import get_settings
from holiday_promo.db.session import get_session, init_db
from holiday_promo.errors import BlobNotFound, DomainError
from holiday_promo.imggen.prompt_builder import STYLES
from holiday_promo.monitoring.logging import configure_logging
from holiday_promo.services.generations import GenerationService, Scheduler
from holiday_promo.services.products import ProductService
from holiday_promo.services.themes import ThemeCatalog
from holiday_promo.storage.backend import LocalStorage
from holiday_promo.workers.generation_worker import schedule_generation

logger = logging.getLogger(__name__)

theme_catalog = ThemeCatalog()
product_service = ProductService()
generation_service = GenerationService(product_service, theme_catalog)


@lru_cache
def get_storage() -> LocalStorage:
    """Return the process-wide storage; its directories are created once."""

    return LocalStorage.from_settings(get_settings())


def get_scheduler() -> Scheduler:
    return schedule_generation


SessionDependency = Annotated[AsyncSession, Depends(get_session)]
StorageDependency = Annotated[LocalStorage, Depends(get_storage)]
SchedulerDependency = Annotated[Scheduler, Depends(get_scheduler)]


@asynccontextmanager
async def lifespan(app: FastAPI):
    await init_db()
    yield


async def domain_error_handler(request: Request, exc: DomainError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=exc.status_code, content={"detail": str(exc)})


def create_app() -> FastAPI:
    """Initialise the FastAPI application."""

    settings = get_settings()
    configure_logging()
    app = FastAPI(
        title="Holiday Promo Studio API",
        version="0.1.0",
        docs_url="/docs" if settings.environment != "prod" else None,
        redoc_url="/redoc" if settings.environment != "prod" else None,
        lifespan=lifespan,
    )
    app.add_exception_handler(DomainError, domain_error_handler)
    app.mount("/metrics", make_asgi_app())

    @app.get("/health", tags=["system"])
    async def health_check() -> dict[str, str]:
        """Simple health endpoint used for readiness probes."""

        return {"status": "ok"}

    @app.get("/themes", tags=["themes"])
    async def list_active_themes(session: SessionDependency) -> list[ThemeOut]:
        themes = await theme_catalog.list_active(session)
        return [ThemeOut.model_validate(theme) for theme in themes]

    @app.post("/themes/seed", tags=["themes"])
    async def seed_themes(session: SessionDependency) -> SeedResult:
        """Insert the built-in themes when the catalog is empty."""

        return SeedResult(message=await theme_catalog.seed_if_empty(session))

    @app.get("/styles", tags=["themes"])
    async def list_styles() -> list[StyleOut]:
        return [StyleOut.from_option(option) for option in STYLES]

    @app.post("/storage/upload-url", tags=["storage"])
    async def issue_upload_url(_: UserDependency, storage: StorageDependency) -> UploadUrlOut:
        return UploadUrlOut(upload_url=await storage.issue_upload_url())

    @app.post("/storage/upload/{token}", tags=["storage"])
    async def accept_upload(token: str, request: Request, storage: StorageDependency) -> StoredBlobOut:
        """Receive raw bytes posted to an issued upload URL."""

        data = await request.body()
        storage_id = await storage.accept_upload(token, data, request.headers.get("content-type"))
        return StoredBlobOut(storage_id=storage_id)

    @app.get("/storage/files/{storage_id}", tags=["storage"])
    async def serve_file(storage_id: str, storage: StorageDependency) -> FileResponse:
        path = storage.path_for(storage_id)
        if path is None:
            raise BlobNotFound()
        media_type = guess_type(path.name)[0] or "application/octet-stream"
        return FileResponse(path, media_type=media_type)

    @app.post("/products", tags=["products"], status_code=status.HTTP_201_CREATED)
    async def create_product(
        payload: ProductCreate,
        user_id: UserDependency,
        session: SessionDependency,
        storage: StorageDependency,
    ) -> ProductOut:
        product = await product_service.create(
            session,
            user_id=user_id,
            image_id=payload.image_id,
            name=payload.name,
            description=payload.description,
        )
        return ProductOut.from_product(product, await storage.resolve_url(product.image_id))

    @app.post("/products/upload", tags=["products"], status_code=status.HTTP_201_CREATED)
    async def upload_product(
        uploaded_file: UploadFile,
        user_id: UserDependency,
        session: SessionDependency,
        storage: StorageDependency,
    ) -> ProductOut:
        """Store an image and create the product in one call."""

        image_id = await storage.save(await uploaded_file.read(), uploaded_file.content_type)
        name = (uploaded_file.filename or "").split(".")[0] or None
        product = await product_service.create(session, user_id=user_id, image_id=image_id, name=name)
        return ProductOut.from_product(product, await storage.resolve_url(image_id))

    @app.get("/products", tags=["products"])
    async def list_products(
        user_id: OptionalUserDependency,
        session: SessionDependency,
        storage: StorageDependency,
    ) -> list[ProductOut]:
        if user_id is None:
            return []
        views = await product_service.list_for_owner(session, storage, user_id=user_id)
        return [ProductOut.from_view(view) for view in views]

    @app.delete("/products/{product_id}", tags=["products"])
    async def delete_product(product_id: int, user_id: UserDependency, session: SessionDependency) -> dict[str, bool]:
        await product_service.delete(session, user_id=user_id, product_id=product_id)
        return {"ok": True}

    @app.post("/generations", tags=["generations"], status_code=status.HTTP_202_ACCEPTED)
    async def create_generation(
        payload: GenerationCreate,
        user_id: UserDependency,
        session: SessionDependency,
        scheduler: SchedulerDependency,
    ) -> GenerationCreated:
        generation = await generation_service.create(
            session,
            user_id=user_id,
            product_ids=payload.product_ids,
            theme=payload.theme,
            style=payload.style,
            scheduler=scheduler,
        )
        return GenerationCreated(id=generation.id, status=generation.status)

    @app.get("/generations", tags=["generations"])
    async def list_generations(
        user_id: OptionalUserDependency,
        session: SessionDependency,
        storage: StorageDependency,
    ) -> list[GenerationOut]:
        views = await generation_service.list_for_owner(session, storage, user_id=user_id)
        return [GenerationOut.from_view(view) for view in views]

    @app.get("/generations/{generation_id}", tags=["generations"])
    async def get_generation(
        generation_id: int,
        user_id: UserDependency,
        session: SessionDependency,
        storage: StorageDependency,
    ) -> GenerationOut:
        view = await generation_service.get_for_owner(
            session, storage, user_id=user_id, generation_id=generation_id
        )
        return GenerationOut.from_view(view)

    return app


app = create_app()
