import logging
from contextlib import asynccontextmanager
from typing import Callable, Optional

from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware

from app import config
from app.config import ALLOWED_ORIGINS, HOST, PORT
from app.core.logging import setup_logging
from app.deps.identity import build_identity_gateway
from app.routers import auth as auth_router
from app.routers import blog as blog_router
from app.services.identity_service import IdentityGateway

setup_logging()
logger = logging.getLogger(__name__)

# Cabeceras de seguridad para todas las respuestas
SECURITY_HEADERS = {
    "Content-Security-Policy": "default-src 'self'",
    "Cross-Origin-Opener-Policy": "same-origin",
    "Cross-Origin-Resource-Policy": "same-origin",
    "Referrer-Policy": "no-referrer",
    "Strict-Transport-Security": "max-age=15552000; includeSubDomains",
    "X-Content-Type-Options": "nosniff",
    "X-DNS-Prefetch-Control": "off",
    "X-Download-Options": "noopen",
    "X-Frame-Options": "SAMEORIGIN",
    "X-Permitted-Cross-Domain-Policies": "none",
    "X-XSS-Protection": "0",
}


@asynccontextmanager
async def lifespan(app: FastAPI):
    if getattr(app.state, "identity_gateway", None) is None:
        if config.firebase_credentials_configured():
            app.state.identity_gateway = build_identity_gateway()
        else:
            logger.warning("Credenciales de Firebase Admin incompletas; el gateway se creará al primer uso.")
    yield
    gateway = getattr(app.state, "identity_gateway", None)
    if gateway is not None:
        await gateway.drain()


def create_app(
    identity_gateway: Optional[IdentityGateway] = None,
    firestore_db=None,
) -> FastAPI:
    """
    Arma la aplicación (middlewares + routers) sin abrir ningún puerto.
    `identity_gateway` y `firestore_db` permiten inyectar dobles en tests.
    """
    app = FastAPI(title="Identity Gateway + FastAPI + Firebase", version="1.0.0", lifespan=lifespan)
    app.state.identity_gateway = identity_gateway
    app.state.firestore_db = firestore_db

    # CORS: solo los orígenes configurados
    app.add_middleware(
        CORSMiddleware,
        allow_origins=ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization"],
    )

    # Registrado después => es el más externo y también cubre las respuestas de CORS
    @app.middleware("http")
    async def apply_security_headers(request: Request, call_next: Callable) -> Response:
        response: Response = await call_next(request)
        for name, value in SECURITY_HEADERS.items():
            response.headers.setdefault(name, value)
        return response

    app.include_router(blog_router.router)
    app.include_router(auth_router.router)

    @app.get("/")
    def home():
        logger.info("Homepage recibió un request.")
        return {"message": f"Hello {config.app_environment()} world!"}

    @app.get("/health")
    def health():
        return {"ok": True}

    return app


app = create_app()

__all__ = ["app", "create_app", "HOST", "PORT"]
