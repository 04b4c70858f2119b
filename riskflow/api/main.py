from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from riskflow import __version__
from riskflow.common.logger import configure_logging
from riskflow.core.config import get_settings
from riskflow.api.routers import approvals, health, risks

settings = get_settings()

configure_logging(settings)

app = FastAPI(
    title=settings.app_name,
    description="Risk register with a risk acceptance approval workflow",
    version=__version__,
    docs_url="/docs" if settings.debug else None,
    redoc_url="/redoc" if settings.debug else None,
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"] if settings.debug else settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(risks.router, prefix=settings.api_prefix)
app.include_router(approvals.router, prefix=settings.api_prefix)
app.include_router(health.router)


@app.get("/")
async def root():
    return {
        "name": settings.app_name,
        "version": __version__,
        "docs": "/docs" if settings.debug else None,
    }
