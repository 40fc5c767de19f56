"""
TacoTrack Inventory Dashboard
Main FastAPI application
"""
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from tacotrack.config import get_settings
from tacotrack.exceptions import TacoTrackError
from tacotrack.utils.cache import DataCache
from tacotrack.utils.logger import log
from tacotrack import __version__

# Import routers
from tacotrack.api import chat, forecast, health, ingredients, insights, orders, recipes, waste

settings = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown events"""
    # Startup
    log.info(f"Starting {settings.app_name} v{__version__}")
    log.info(f"Environment: {settings.environment}")

    # Initialize database
    try:
        from tacotrack.models.base import init_db
        init_db()
        log.info("Database initialized")
    except Exception as e:
        log.error(f"Database initialization error: {str(e)}")

    yield

    # Shutdown
    log.info("Shutting down application")


# Create FastAPI app
app = FastAPI(
    title=settings.app_name,
    version=__version__,
    description="""
    Restaurant inventory and ordering backend

    - Days of stock, urgency and reorder quantities per ingredient
    - Food cost, margins, sales trends and waste hotspots per recipe
    - Dashboard, insights and two-week "Wrapped" summaries
    - Purchase orders with a validated status lifecycle
    - Demand forecasts (Claude when configured, weekday averages otherwise)
    """,
    lifespan=lifespan
)

# Snapshot cache shared by all requests
app.state.data_cache = DataCache(ttl=settings.cache_ttl_seconds)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=[o.strip() for o in settings.cors_origins.split(",") if o.strip()],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Every error body is {"error": "<message>"}
@app.exception_handler(TacoTrackError)
async def tacotrack_error_handler(request: Request, exc: TacoTrackError):
    if exc.status_code >= 500:
        log.error(f"{request.method} {request.url.path}: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(status_code=exc.status_code, content={"error": str(exc.detail)})


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    message = "Invalid request"
    if errors:
        first = errors[0]
        field = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
        message = f"Invalid request: {field} {first.get('msg', '')}".strip()
    return JSONResponse(status_code=422, content={"error": message})


# Include routers
app.include_router(health.router, tags=["health"])
app.include_router(ingredients.router)
app.include_router(waste.router)
app.include_router(recipes.router)
app.include_router(forecast.router)
app.include_router(insights.router)
app.include_router(orders.router)
app.include_router(chat.router)


@app.get("/")
async def root():
    """Service info"""
    return {
        "name": settings.app_name,
        "version": __version__,
        "status": "running",
        "docs": "/docs",
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "tacotrack.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.debug
    )
