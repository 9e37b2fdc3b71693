"""
Marketplace Ledger API application setup.

- Builds the ledger store from configuration and hands it to every router
- Maps domain errors to HTTP responses in one place
- Creates missing tables on startup
"""

import logging

from dotenv import load_dotenv  # type: ignore
from fastapi import FastAPI  # type: ignore
from fastapi import Request  # type: ignore
from fastapi.responses import JSONResponse  # type: ignore

from config import BaseConfig, get_config
from core.db import make_engine, make_session_factory
from logging_config import configure_logging
from repositories.ledger_repository import LedgerRepository
from shared.exceptions import (
    MarketplaceError,
    create_error_response,
    handle_exception,
)

from routes.admin import router as admin_router
from routes.balances import router as balances_router
from routes.contracts import router as contracts_router
from routes.jobs import router as jobs_router

# ───────────────────── env / init ─────────────────────
load_dotenv()
configure_logging()

_api_logger = logging.getLogger("marketplace.api")


def create_app(config: BaseConfig = None, ledger: LedgerRepository = None) -> FastAPI:
    """
    Build the API.

    Args:
        config: Settings; auto-detected from the environment when omitted
        ledger: Store to serve from; built from `config.database` when omitted
    """
    config = config or get_config()

    engine = None
    if ledger is None:
        engine = make_engine(
            config.database.url,
            timeout_seconds=config.ledger.store_timeout_seconds,
            pool_size=config.database.pool_size,
            max_overflow=config.database.max_overflow,
            echo=config.database.echo,
        )
        ledger = LedgerRepository(
            make_session_factory(engine),
            timeout_seconds=config.ledger.store_timeout_seconds,
        )

    app = FastAPI(
        title=config.app_name,
        version=config.app_version,
        description="Freelance marketplace contracts, jobs and balance settlement",
        debug=config.debug,
    )
    app.state.config = config
    app.state.engine = engine
    app.state.ledger = ledger

    app.include_router(contracts_router)
    app.include_router(jobs_router)
    app.include_router(balances_router)
    app.include_router(admin_router)

    @app.exception_handler(MarketplaceError)
    def _marketplace_error(request: Request, exc: MarketplaceError) -> JSONResponse:
        handle_exception(exc, _api_logger, context={"path": request.url.path})
        return JSONResponse(
            status_code=exc.http_status,
            content=create_error_response(exc),
        )

    @app.on_event("startup")
    def _run_startup() -> None:
        # Delegate startup tasks to dedicated module to keep app.py clean
        from startup import run_startup_tasks

        run_startup_tasks(config, engine)

    @app.get("/health")
    def health() -> dict:
        return {"status": "ok", "version": app.version}

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn  # type: ignore

    uvicorn.run(app, host="0.0.0.0", port=3001)
