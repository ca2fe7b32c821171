import logging
from datetime import datetime, timezone
from pathlib import Path

from alembic.config import Config
from alembic.runtime.migration import MigrationContext
from alembic.script import ScriptDirectory
from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from labscore.config import settings
from labscore.database import engine
from labscore.errors import AnalysisError, NoDataAvailable
from labscore.models import biomarker, health_insight  # noqa: F401
from labscore.routers import biomarkers, health
from labscore.seed.biomarker_catalog import seed_biomarker_catalog
from labscore.services.ai_analyzer import AIHealthAnalyzer
from labscore.services.analyzer import LocalHealthAnalyzer
from labscore.services.cache import AnalysisCache
from labscore.services.catalog import build_reference_catalog

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)

app = FastAPI(title="Lab Score API", version="0.1.0")
logger = logging.getLogger(__name__)

allowed_origins = [origin.strip() for origin in settings.allowed_origins.split(",") if origin.strip()]
app.add_middleware(
    CORSMiddleware,
    allow_origins=allowed_origins or ["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.state.health_analyzer = AIHealthAnalyzer(
    local_analyzer=LocalHealthAnalyzer(build_reference_catalog()),
    cache=AnalysisCache(ttl_seconds=settings.analysis_cache_ttl_seconds),
)


def _assert_database_at_head() -> None:
    project_root = Path(__file__).resolve().parent.parent
    alembic_cfg = Config(str(project_root / "alembic.ini"))
    alembic_cfg.set_main_option("script_location", str(project_root / "alembic"))
    script = ScriptDirectory.from_config(alembic_cfg)
    expected_heads = set(script.get_heads())

    with engine.connect() as connection:
        context = MigrationContext.configure(connection)
        current_heads = set(context.get_current_heads())

    if current_heads != expected_heads:
        raise RuntimeError(
            "Database schema is not at Alembic head. "
            "Run `alembic upgrade head` before starting the API. "
            f"Current revisions: {sorted(current_heads) or ['<none>']}, "
            f"expected: {sorted(expected_heads)}."
        )


@app.on_event("startup")
def startup_event():
    _assert_database_at_head()
    seed_biomarker_catalog()


@app.get("/")
def root():
    return {"statusCode": 200, "message": "Success", "data": {"status": "ok", "service": "labscore"}}


@app.get("/health")
def health_check():
    return {
        "status": "ok",
        "service": "labscore",
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


def _error_name(status_code: int) -> str:
    if status_code == 400:
        return "BadRequest"
    if status_code == 404:
        return "NotFound"
    if status_code == 422:
        return "ValidationError"
    if status_code >= 500:
        return "InternalServerError"
    return "HTTPError"


@app.exception_handler(HTTPException)
async def http_exception_handler(_: Request, exc: HTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "statusCode": exc.status_code,
            "message": str(exc.detail) if exc.detail else "Request failed",
            "error": _error_name(exc.status_code),
        },
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(_: Request, exc: RequestValidationError):
    return JSONResponse(
        status_code=422,
        content={
            "statusCode": 422,
            "message": "Invalid request payload",
            "error": "ValidationError",
            "details": {"errors": exc.errors()},
        },
    )


@app.exception_handler(NoDataAvailable)
async def no_data_exception_handler(_: Request, exc: NoDataAvailable):
    return JSONResponse(
        status_code=404,
        content={
            "statusCode": 404,
            "message": str(exc),
            "error": "NoDataAvailable",
            "suggestion": "Please upload blood test results first",
        },
    )


@app.exception_handler(AnalysisError)
async def analysis_exception_handler(_: Request, exc: AnalysisError):
    return JSONResponse(
        status_code=400,
        content={
            "statusCode": 400,
            "message": str(exc),
            "error": type(exc).__name__,
        },
    )


@app.exception_handler(Exception)
async def unhandled_exception_handler(_: Request, exc: Exception):
    logger.exception("Unhandled server error: %s", exc)
    return JSONResponse(
        status_code=500,
        content={
            "statusCode": 500,
            "message": str(exc) or "An unexpected error occurred",
            "error": "InternalServerError",
        },
    )


app.include_router(health.router)
app.include_router(biomarkers.router)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("labscore.main:app", host=settings.app_host, port=settings.app_port, reload=settings.app_env == "dev")
