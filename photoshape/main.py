from fastapi import FastAPI

from photoshape.api.routes.customizer import router as customizer_router
from photoshape.api.routes.health import router as health_router
from photoshape.config import settings
from photoshape.customizer.masks import MaskCache
from photoshape.logging_setup import configure_logging


def create_app() -> FastAPI:
    configure_logging()
    app = FastAPI(title=settings.app_name)
    app.state.mask_cache = MaskCache(max_entries=settings.mask_cache_max_entries)

    @app.on_event("shutdown")
    def on_shutdown() -> None:
        app.state.mask_cache.clear()

    app.include_router(health_router, prefix="/api/v1")
    app.include_router(customizer_router, prefix="/api/v1")
    return app


app = create_app()
