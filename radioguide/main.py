from contextlib import asynccontextmanager
import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from radioguide.config import settings, setup_logging
from radioguide.database import close_db, init_db
from radioguide.routers import main_router
from radioguide.services.program_store import ProgramStore


setup_logging()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Open the program database and its indexes for the app's lifetime"""
    logger.info(f"Radio Guide Service starting (timezone {settings.broadcast_timezone})")

    try:
        await init_db()
        await ProgramStore().ensure_default_indexes()
    except Exception as e:
        logger.error(f"Radio Guide Service failed to start: {e}", exc_info=True)
        raise

    logger.info("Radio Guide Service ready")
    yield

    await close_db()
    logger.info("Radio Guide Service stopped")


app = FastAPI(
    title="Radio Guide Service",
    version="0.1.0",
    lifespan=lifespan
)

app.include_router(main_router)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Return request validation errors with truncated inputs"""
    errors = [
        {
            "type": error.get("type"),
            "loc": error.get("loc"),
            "msg": error.get("msg"),
            "input": str(error.get("input", ""))[:100],
        }
        for error in exc.errors()
    ]
    logger.error(f"Validation error for {request.method} {request.url.path}: {errors}")

    return JSONResponse(status_code=422, content={"detail": errors})
