import logging

from fastapi import APIRouter, Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from . import settings
from .db import get_store
from .db.store import JsonStore, snapshot
from .routes import auth, courses, events, messages, notifications, posts, stories, users
from .routes import settings as user_settings
from .utils.dates import now_iso
from .utils.logger import configure_logging

logger = logging.getLogger(__name__)

health_router = APIRouter(tags=["health"])


@health_router.get("/health")
def health(store: JsonStore = Depends(get_store)):
    return {
        "success": True,
        "message": "RCT Connect API is running",
        "timestamp": now_iso(),
        "collections": snapshot(store),
    }


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse({"success": False, "error": message}, status_code=status_code)


def create_app() -> FastAPI:
    configure_logging(settings.LOG_LEVEL)

    app = FastAPI(title="RCT Connect API", version="1.0.0")

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Routers
    for module in (auth, users, events, posts, stories, courses, notifications, messages, user_settings):
        app.include_router(module.router, prefix=settings.API_PREFIX)
    app.include_router(health_router, prefix=settings.API_PREFIX)

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        return _error(exc.status_code, str(exc.detail))

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        errors = exc.errors()
        if not errors:
            return _error(400, "Requête invalide")
        err = errors[0]
        loc = [str(p) for p in err.get("loc", ()) if p not in ("body", "query", "path")]
        msg = err.get("msg", "Valeur invalide")
        return _error(400, f"{'.'.join(loc)}: {msg}" if loc else msg)

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return _error(500, "Erreur serveur")

    return app


app = create_app()


def run():
    import uvicorn
    uvicorn.run("rct_connect.main:app", host=settings.HOST, port=settings.PORT)


if __name__ == "__main__":
    run()
