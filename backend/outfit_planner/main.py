import logging

from fastapi import Depends, FastAPI, HTTPException
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware

from . import __version__
from .config import settings
from .core.exceptions import (
    PlannerException,
    generic_exception_handler,
    http_exception_handler,
    planner_exception_handler,
    request_validation_handler,
)
from .database import engine
from .models import Base
from .routers import outfits, stylist, wardrobe
from .schemas import HealthResponse
from .store import OutfitStore, get_store

logging.basicConfig(
    level=logging.DEBUG if settings.is_development else logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="Outfit Planner API",
    description="Daily and weekly outfit planning over a tagged wardrobe",
    version=__version__,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins if settings.ENVIRONMENT == "production" else ["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.add_exception_handler(PlannerException, planner_exception_handler)
app.add_exception_handler(RequestValidationError, request_validation_handler)
app.add_exception_handler(HTTPException, http_exception_handler)
app.add_exception_handler(Exception, generic_exception_handler)


@app.on_event("startup")
async def create_tables() -> None:
    """Create missing tables; existing tables are left untouched"""
    Base.metadata.create_all(bind=engine)
    logger.info(f"Outfit planner {__version__} started ({settings.ENVIRONMENT})")


# Include routers
app.include_router(wardrobe.router)
app.include_router(outfits.router)
app.include_router(stylist.router)


@app.get("/")
async def root():
    return {"message": "Outfit Planner API", "version": __version__, "docs": "/docs"}


@app.get("/health", response_model=HealthResponse)
@app.get("/api/health", response_model=HealthResponse)
def health_check(store: OutfitStore = Depends(get_store)):
    """Database connectivity check through the store"""
    result = store.health_check()
    healthy = result.get("status") == "healthy"
    return HealthResponse(
        status="ok" if healthy else "degraded",
        database="connected" if healthy else "disconnected",
        error=result.get("error"),
    )
