from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from sqlalchemy.orm import Session
from core.exceptions import RedemptionFailureReason
from core.health_check import database_is_up, health_check
from core.log import logger
from core.rate_limiter.memory import InMemoryRateLimiter
from core.rate_limiter.middleware import RateLimitMiddleware
from models import get_db_sync
from routes.analytics import router as analytics_router
from routes.auth import router as auth_router
from routes.participant import router as participant_router
from routes.public import router as public_router
from routes.reference import router as reference_router
from routes.reset import router as reset_router
from routes.ticket import router as ticket_router

from settings import (
    CORS_ORIGINS,
    RATE_LIMIT_ENABLED,
    RATE_LIMIT_EXCLUDED_PATHS,
    RATE_LIMIT_PER_MINUTE,
    RATE_LIMIT_WINDOW,
)

health_check()

app = FastAPI(title="Rifa BE")

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials="*" not in CORS_ORIGINS,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.add_middleware(
    RateLimitMiddleware,
    limiter=InMemoryRateLimiter(),
    enabled=RATE_LIMIT_ENABLED,
    limit=RATE_LIMIT_PER_MINUTE,
    window=RATE_LIMIT_WINDOW,
    exclude_paths=RATE_LIMIT_EXCLUDED_PATHS,
)

app.include_router(public_router)
app.include_router(auth_router)
app.include_router(reference_router)
app.include_router(participant_router)
app.include_router(ticket_router)
app.include_router(analytics_router)
app.include_router(reset_router)


def _validation_failed(errors: list) -> JSONResponse:
    error_details = []
    for error in errors:
        # drop the "body"/"query" prefix FastAPI adds to request errors
        loc = [str(part) for part in error["loc"] if part not in ("body", "query", "path")]
        error_details.append(
            {"field": ".".join(loc) or "general", "message": error["msg"]}
        )

    return JSONResponse(
        status_code=422,
        content={
            "success": False,
            "reason": RedemptionFailureReason.VALIDATION_FAILED.value,
            "message": error_details[0]["message"] if error_details else "Invalid request data",
            "errors": error_details,
        },
    )


@app.exception_handler(RequestValidationError)
async def request_validation_exception_handler(
    request: Request, exc: RequestValidationError
):
    logger.info(f"Rejected request to {request.url.path}: invalid payload")
    return _validation_failed(exc.errors())


@app.exception_handler(ValidationError)
async def pydantic_validation_exception_handler(request: Request, exc: ValidationError):
    return _validation_failed(exc.errors())


@app.get("/")
async def hello():
    return {"Hello": "from Rifa BE"}


@app.get("/health")
def health(db: Session = Depends(get_db_sync)):
    if not database_is_up(db):
        return JSONResponse(status_code=503, content={"status": "unavailable"})
    return {"status": "ok"}
