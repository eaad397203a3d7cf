"""
Reading Study API: FastAPI app factory.

Use: uvicorn study_server.app:app
Or:  from study_server import app
"""

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .config import get_config
from .errors import register_error_handlers
from .routes import register_routes
from .state import get_state

logger = logging.getLogger(__name__)


def create_app() -> FastAPI:
    """Build FastAPI app with CORS, routes, error handlers, and startup."""
    config = get_config()
    logging.basicConfig(
        level=getattr(logging, config.log_level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    app = FastAPI(
        title="Reading Study API",
        description="Multi-reader reading sessions: seeded case order, resumable progress, condition gating",
        version="1.0.0",
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(config.cors_origins),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    register_routes(app)
    register_error_handlers(app)

    @app.on_event("startup")
    def _startup():
        ok, errors = config.validate()
        for error in errors:
            logger.warning("[startup] config: %s", error)
        try:
            state = get_state()
        except Exception as e:
            logger.error("[startup] could not initialise the document store: %s", e)
            raise
        n_cases = len(state.case_pool.get_case_ids())
        logger.info(
            "[startup] Reading Study API ready: data_source=%s cases=%d washout_days=%d block_size=%d",
            config.data_source, n_cases, state.study_config.washout_days, state.study_config.block_size,
        )
        if n_cases == 0:
            logger.warning("[startup] case pool is empty; run python -m study_server.scripts.seed_cases")

    return app


app = create_app()
