from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from estatehub.api.errors import register_exception_handlers
from estatehub.api.middleware import RequestTimingMiddleware
from estatehub.api.v1.router import v1_router
from estatehub.common.logging import get_logger, setup_logging
from estatehub.config import settings

logger = get_logger("main")


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging()
    logger.info("EstateHub starting (env=%s)", settings.APP_ENV)
    yield


app = FastAPI(
    title="EstateHub API",
    description="Real-estate sales back office: units, contracts and installment plans",
    version="1.0.0",
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)

# CORS
origins = settings.ALLOWED_ORIGINS.split(",") if settings.ALLOWED_ORIGINS != "*" else ["*"]
app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(RequestTimingMiddleware)

register_exception_handlers(app)

# API routes
app.include_router(v1_router, prefix="/api")


@app.get("/health")
async def health_check():
    return {
        "status": "healthy",
        "service": "estatehub",
        "version": "1.0.0",
        "env": settings.APP_ENV,
    }
