import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException

from handwerk.api.v1 import admin, categories, headcategories, items, upload
from handwerk.config import get_settings
from handwerk.db import Base, SessionLocal, check_db, engine
from handwerk.errors import HandwerkError
from handwerk.services.featured import FeaturedSlotWriter
from handwerk.services.storage import build_storage
from handwerk.services.uploads import UploadService
from handwerk.utils.paths import ensure_dirs

settings = get_settings()
logging.basicConfig(level=settings.LOG_LEVEL.upper(), format="%(asctime)s %(levelname)s %(name)s: %(message)s")
logger = logging.getLogger(__name__)

ensure_dirs()
app = FastAPI(title=settings.APP_NAME, version="1.0.0")

origins = [o.strip() for o in settings.CORS_ALLOW_ORIGINS.split(",")] if settings.CORS_ALLOW_ORIGINS else ["*"]
app.add_middleware(CORSMiddleware, allow_origins=origins, allow_credentials=True, allow_methods=["*"], allow_headers=["*"])
app.mount("/static", StaticFiles(directory=settings.STATIC_DIR), name="static")

for module in (admin, items, categories, headcategories, upload):
    app.include_router(module.router, prefix="/api")


@app.exception_handler(HandwerkError)
async def handwerk_error(request: Request, exc: HandwerkError):
    if exc.status_code >= 500:
        logger.error("[%s %s] %s", request.method, request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


@app.exception_handler(StarletteHTTPException)
async def http_error(request: Request, exc: StarletteHTTPException):
    message = "Not found" if exc.status_code == 404 else str(exc.detail)
    return JSONResponse(status_code=exc.status_code, content={"error": message})


@app.exception_handler(RequestValidationError)
async def request_validation_error(request: Request, exc: RequestValidationError):
    first = exc.errors()[0] if exc.errors() else {}
    field = ".".join(str(p) for p in first.get("loc", ()) if p not in ("body", "query", "path"))
    message = f"{field}: {first.get('msg', 'invalid')}" if field else first.get("msg", "Invalid request")
    return JSONResponse(status_code=400, content={"error": message})


@app.exception_handler(Exception)
async def unexpected_error(request: Request, exc: Exception):
    logger.exception("[%s %s] unexpected error", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"error": "Internal server error"})


@app.on_event("startup")
async def startup():
    if engine is not None:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)  # dev only; prefer Alembic in prod
    else:
        logger.warning("[startup] DATABASE_URL_ASYNC not set; catalog endpoints will fail")

    app.state.uploads = UploadService(build_storage(settings), settings)
    app.state.featured = (
        FeaturedSlotWriter(SessionLocal, settings.FEATURED_LIMIT, settings.FAVORITES_LIMIT)
        if SessionLocal is not None else None
    )
    logger.info("[startup] storage=%s bucket=%s", settings.STORAGE_BACKEND, settings.SUPABASE_BUCKET)


@app.on_event("shutdown")
async def shutdown():
    app.state.uploads.executor.shutdown(wait=False)


@app.get("/api/health")
async def health():
    db_ok = await check_db()
    return {"status": "ok", "db": db_ok}
