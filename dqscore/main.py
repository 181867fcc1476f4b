from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from . import __version__
from .config import settings
from .database import init_db
from .errors import DuplicateError, RuleSetNotFoundError, ValidationError
from .routes.rulesets import router as rulesets_router
from .routes.scores import router as scores_router
from .utils.logging import logger

@asynccontextmanager
async def lifespan(app: FastAPI):
    if settings.AUTO_CREATE_TABLES:
        logger.info("Creating tables (AUTO_CREATE_TABLES=true)")
        init_db()
    yield

app = FastAPI(title="Data Quality Scoring",
              description="Per-record-type field rules and weighted completeness scores",
    version=__version__,
    docs_url="/docs",          # Swagger UI
    redoc_url="/redoc",        # ReDoc
    openapi_url="/openapi.json",
    lifespan=lifespan)

app.include_router(rulesets_router)
app.include_router(scores_router)

def _error_body(exc: Exception, problems=None) -> dict:
    return {"ok": False, "error": str(exc), "problems": problems or []}

@app.exception_handler(ValidationError)
async def validation_error_handler(request: Request, exc: ValidationError):
    return JSONResponse(status_code=422, content=_error_body(exc, exc.problems))

@app.exception_handler(DuplicateError)
async def duplicate_error_handler(request: Request, exc: DuplicateError):
    return JSONResponse(status_code=409, content=_error_body(exc))

@app.exception_handler(RuleSetNotFoundError)
async def not_found_handler(request: Request, exc: RuleSetNotFoundError):
    return JSONResponse(status_code=404, content=_error_body(exc))

@app.get("/health")
def health():
    return {"ok": True}
