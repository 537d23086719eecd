from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from loguru import logger

from app.core.config import settings
from app.core.db import engine
from app.core.exceptions import SummonError
from app.utils.exception_handlers import (
    general_exception_handler,
    http_exception_handler,
    summon_exception_handler,
    validation_exception_handler,
)
from app.utils.router_discovery import register_routers


@asynccontextmanager
async def app_lifespan(_: FastAPI) -> AsyncGenerator[None, FastAPI]:
    logger.info(
        f"Summon engine ready: legendary pity {settings.default_legendary_pity}, "
        f"{settings.fused_pulls_per_scroll} pulls per scroll, "
        f"mythic pity {settings.mythic_pity_threshold}"
    )
    yield

    await engine.dispose()


app = FastAPI(
    title="Hero Summon API",
    description="Banner rolls, pity counters and the mythic scroll economy",
    lifespan=app_lifespan,
    servers=[
        {"url": f"http://{settings.api_host}:{settings.api_port}", "description": "API server"}
    ],
)


app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


register_routers(app)

# SummonError subclasses HTTPException; handlers are matched on the most specific class
app.add_exception_handler(SummonError, summon_exception_handler)
app.add_exception_handler(HTTPException, http_exception_handler)
app.add_exception_handler(RequestValidationError, validation_exception_handler)
app.add_exception_handler(Exception, general_exception_handler)


@app.get("/")
async def healthz() -> str:
    return "OK"
