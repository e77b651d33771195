from contextlib import asynccontextmanager

from fastapi import FastAPI, Depends, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, RedirectResponse
from sqlalchemy.orm import Session

from tinylink.api.v1.endpoints import links
from tinylink.api.deps import get_db, get_cache
from tinylink.core.config import settings, logger
from tinylink.core.exceptions import DuplicateCodeError, NotFoundError, StoreError, ValidationError
from tinylink.db.session import init_db
from tinylink.services.url_service import resolve_short_code


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    yield


app = FastAPI(
    title="tinylink",
    description="""
    A FastAPI-based URL shortening service.

    ## Features
    * Random or custom short codes
    * Optional time-to-live per link
    * Visit counting on every redirect
    * Listing, stats and deletion of stored links

    ## Documentation
    * Swagger UI: [/docs](/docs)
    * ReDoc: [/redoc](/redoc)
    """,
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/api/openapi.json",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS.split(","),
    allow_credentials=True,
    allow_methods=["GET", "POST", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type"],
)

app.include_router(links.router, prefix="/api/v1/links", tags=["links"])


@app.exception_handler(ValidationError)
async def validation_error_handler(request: Request, exc: ValidationError):
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": f"Validation error: {exc.reason}"},
    )


@app.exception_handler(DuplicateCodeError)
async def duplicate_code_handler(request: Request, exc: DuplicateCodeError):
    return JSONResponse(
        status_code=status.HTTP_409_CONFLICT,
        content={"detail": "Short code already exists"},
    )


@app.exception_handler(NotFoundError)
async def not_found_handler(request: Request, exc: NotFoundError):
    return JSONResponse(
        status_code=status.HTTP_404_NOT_FOUND,
        content={"detail": "URL not found"},
    )


@app.exception_handler(StoreError)
async def store_error_handler(request: Request, exc: StoreError):
    logger.error(f"Database error on {request.method} {request.url.path}: {exc}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Database error"},
    )


@app.get("/", tags=["root"])
async def root():
    return {
        "message": "Welcome to tinylink",
        "docs_url": "/docs",
        "redoc_url": "/redoc",
    }


@app.get("/{short_code}", tags=["redirect"])
def redirect_to_url(
    short_code: str,
    db: Session = Depends(get_db),
    cache=Depends(get_cache),
):
    original_url = resolve_short_code(db, short_code, cache)
    return RedirectResponse(original_url)
