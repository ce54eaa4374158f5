from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.api.v1.fee_payments.router import router as fee_payments_router
from app.api.v1.fee_settings.router import router as fee_settings_router
from app.api.v1.financial_reports.router import router as financial_reports_router
from app.core.config import settings
from app.core.logging_config import configure_logging


def create_app() -> FastAPI:
    configure_logging(settings.log_level)
    app = FastAPI(title="School Fee Ledger")

    # CORS: allow the admin and parent dashboards to call this API
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origin_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Routers
    app.include_router(fee_settings_router)
    app.include_router(fee_payments_router)
    app.include_router(financial_reports_router)

    return app


app = create_app()
