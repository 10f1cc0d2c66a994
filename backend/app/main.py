"""Module: main."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from app.api.v1.api import api_router
from app.core.config import settings
from app.core.errors import AppError
from app.core.logging_config import setup_logging
from app.db.init_db import init_db
from app.db.session import SessionLocal, engine
from app.scripts.seed_data import seed_defaults
from app.services import slot_registry

setup_logging()
logger = logging.getLogger("college_leave")


@asynccontextmanager
async def lifespan(_: FastAPI):
    init_db(engine)
    session = SessionLocal()
    try:
        if settings.seed_default_data:
            counts = seed_defaults(session)
            logger.info("Seeded defaults: %s", counts)
        else:
            slot_registry.ensure_schedule(session)
            session.commit()
    finally:
        session.close()
    yield


app = FastAPI(title="College Leave Desk API", version="0.1.0", lifespan=lifespan)

app.include_router(api_router, prefix="/api/v1")

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError):
    logger.info("%s %s rejected: %s (%s)", request.method, request.url.path, exc.message, exc.code)
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message, "code": exc.code})


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    first = errors[0] if errors else {}
    field = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    message = f"{field}: {first.get('msg', 'invalid value')}" if field else first.get("msg", "Invalid request")
    return JSONResponse(status_code=400, content={"detail": message, "code": "validation_error"})


@app.exception_handler(SQLAlchemyError)
async def storage_error_handler(request: Request, exc: SQLAlchemyError):
    logger.error("Storage failure on %s %s", request.method, request.url.path, exc_info=exc)
    return JSONResponse(status_code=500, content={"detail": "Internal server error", "code": "internal_error"})
