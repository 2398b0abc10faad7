# app.py
import os
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

import controllers
from auth import TokenService
from auth_middleware import bearer_auth_middleware
from auth_service import AuthService
from blob_store import LocalBlobStore, make_blob_store
from config import Settings
from dashboard_service import DashboardService
from db import make_engine, make_session_factory, init_db
from detector import DetectionClient
from errors import install_error_handlers
from report_service import ReportService
from social_share import SocialPublisher

logger = logging.getLogger(__name__)


def create_app(settings: Settings = None, blob_store=None, publisher=None, detector=None) -> FastAPI:
    settings = settings or Settings.from_env()
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s.%(msecs)03d %(levelname)s %(name)s %(message)s",
        datefmt="%H:%M:%S",
    )
    if not settings.jwt_secret:
        logger.warning("JWT_SECRET is not set; every protected endpoint will refuse requests.")

    engine = make_engine(settings.database_url)
    init_db(engine)

    tokens = TokenService(settings.jwt_secret)
    blob_store = blob_store or make_blob_store(settings)

    app = FastAPI(title="Pothole Reporter API")
    app.state.settings = settings
    app.state.engine = engine
    app.state.session_factory = make_session_factory(engine)
    app.state.auth_service = AuthService(settings, tokens)
    app.state.report_service = ReportService(settings, blob_store, publisher or SocialPublisher(settings))
    app.state.dashboard_service = DashboardService()
    app.state.detector = detector or DetectionClient(settings)

    install_error_handlers(app)
    app.middleware("http")(bearer_auth_middleware(tokens, settings.api_prefix))
    # added last so preflights are answered before the token check
    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(settings.cors_origins),
        allow_methods=["GET", "POST", "PUT"],
        allow_headers=["Content-Type", "Authorization"],
    )

    app.include_router(controllers.router)
    app.include_router(controllers.auth_router, prefix=settings.api_prefix)
    app.include_router(controllers.pothole_router, prefix=settings.api_prefix)

    if isinstance(blob_store, LocalBlobStore):
        os.makedirs(blob_store.root, exist_ok=True)
        app.mount("/uploads", StaticFiles(directory=blob_store.root), name="uploads")
        if not settings.public_base_url:
            logger.warning("PUBLIC_BASE_URL is not set; image URLs are relative to the API host (/uploads/...).")

    return app


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(create_app(), host="0.0.0.0", port=int(os.getenv("PORT", "3000")))
