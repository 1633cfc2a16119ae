# codemarket/main.py
import logging
from pathlib import Path

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from codemarket.config import Settings, settings as default_settings
from codemarket.core import db
from codemarket.core.storage import Storage
from codemarket.services.payment_stub import StubPaymentGateway
from codemarket.services.uploads import URL_PREFIX
from codemarket.services.verification import FlagVerificationService, VerificationQueue

from codemarket.api.v1.errors import install_error_handlers
from codemarket.api.v1.routers import auth, projects, purchases, reviews, messages, reports, dashboard

logger = logging.getLogger("uvicorn.error")

def create_app(settings: Settings | None = None) -> FastAPI:
    """
    Build the API with its collaborators.

    The storage, payment gateway and verification queue are constructed here
    and kept on app.state; handlers receive them through the dependencies in
    codemarket.api.v1.deps.
    """
    settings = settings or default_settings
    app = FastAPI(title=settings.APP_NAME)

    storage = Storage()
    app.state.settings = settings
    app.state.storage = storage
    app.state.payment_gateway = StubPaymentGateway()
    app.state.verification_queue = VerificationQueue(
        FlagVerificationService(storage),
        delay_sec=settings.verification_delay_sec,
        max_attempts=settings.verification_max_attempts,
        retry_backoff_sec=settings.verification_retry_backoff_sec,
    )

    # CORS (with Cookie)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    install_error_handlers(app)

    @app.on_event("startup")
    async def on_startup():
        Path(settings.upload_dir).mkdir(parents=True, exist_ok=True)
        await db.init_db(settings.database_url, generate_schemas=settings.generate_schemas)
        await app.state.verification_queue.start()
        logger.info("[startup] env=%s uploads=%s payments=%s",
                    settings.env, settings.upload_dir, app.state.payment_gateway.name)

    @app.on_event("shutdown")
    async def on_shutdown():
        stats = app.state.verification_queue.stats()
        if stats["pending"]:
            logger.warning("[shutdown] dropping %s pending verification job(s)", stats["pending"])
        await app.state.verification_queue.stop()
        await db.close_db()

    # REST
    for module in (auth, projects, purchases, reviews, messages, reports, dashboard):
        app.include_router(module.router, prefix="/api")

    # Uploaded archives and previews
    app.mount(URL_PREFIX, StaticFiles(directory=settings.upload_dir, check_dir=False), name="uploads")

    @app.get("/healthz")
    def healthz():
        return {"ok": True, "verification": app.state.verification_queue.stats()}

    return app

app = create_app()

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host=default_settings.host, port=default_settings.port)
