from fastapi import FastAPI
from dealcatalog.core.config import get_settings
from dealcatalog.core.lifespan import lifespan
from dealcatalog.api.v1.routers.catalog import router as catalog_router
from dealcatalog.api.v1.routers.health import router as health_router
from dealcatalog.core.logging import configure_logging

from fastapi.middleware.cors import CORSMiddleware
import logging

settings = get_settings()
configure_logging(level=logging.DEBUG if settings.DEBUG else logging.INFO)

app = FastAPI(title=settings.APP_NAME, lifespan=lifespan)

# ------- CORS -------
# ALLOWED_ORIGINS is a CSV; left empty the front-end can be served from anywhere
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins,
    allow_credentials=False,                        # "*" with credentials is refused by browsers
    allow_methods=["GET", "POST", "PUT", "OPTIONS"],
    allow_headers=["*"],
    max_age=86400,
)

# ------- Routes -------
app.include_router(health_router)
app.include_router(catalog_router)          # products + refresh
