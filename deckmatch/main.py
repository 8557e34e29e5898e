from importlib.metadata import version as pkg_version

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from deckmatch.api import health_router, match_router
from deckmatch.config import settings

app = FastAPI(
    title=settings.app_name,
    version=pkg_version("deckmatch"),
    debug=settings.debug,
)

app.include_router(health_router)
app.include_router(match_router)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Tighten in production
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)
