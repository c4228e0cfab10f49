"""
BizOps Backend: customers, employees, tasks and invoices for a small
service business, with two AI helpers.

ARCHITECTURE:
- FastAPI: HTTP surface for the dashboard
- Entity Store: schemaless JSON documents in SQLAlchemy (customers,
  employees, invoices, tasks), with live queries
- Groq: smart task assignment and invoice field extraction; the model
  only suggests, nothing is written without a user action

Every failure ends as a notification body; the process never goes down
because one request failed.
"""
import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker

from app.api.routes import assignment, customers, dashboard, employees, invoices, tasks
from app.core.config import settings
from app.core.exceptions import register_exception_handlers
from app.db.init_db import init_db
from app.db.session import engine as default_engine
from app.store.entity_store import EntityStore

logger = logging.getLogger(__name__)


def configure_logging() -> None:
    logging.basicConfig(
        level=settings.LOG_LEVEL,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def create_app(engine: Optional[Engine] = None) -> FastAPI:
    engine = engine or default_engine

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """
        Startup: create the documents table.
        Shutdown: release pooled connections.
        """
        logger.info("Initializing document store...")
        init_db(engine)
        yield
        engine.dispose()

    app = FastAPI(
        title="BizOps API",
        description="Customers, employees, tasks and invoices with AI-assisted assignment and extraction.",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.store = EntityStore(sessionmaker(autocommit=False, autoflush=False, bind=engine))

    # Restrict CORS to specific methods and headers (not wildcards)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=[
            "Content-Type",
            "Authorization",
            "Accept",
            "Origin",
        ],
        max_age=600,  # Cache preflight for 10 minutes
    )

    @app.middleware("http")
    async def add_security_headers(request, call_next):
        response = await call_next(request)
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        return response

    register_exception_handlers(app)

    app.include_router(customers.router, prefix="/customers", tags=["customers"])
    app.include_router(employees.router, prefix="/employees", tags=["employees"])
    app.include_router(tasks.router, prefix="/tasks", tags=["tasks"])
    app.include_router(invoices.router, prefix="/invoices", tags=["invoices"])
    app.include_router(assignment.router, prefix="/assignment", tags=["assignment"])
    app.include_router(dashboard.router, prefix="/dashboard", tags=["dashboard"])

    @app.get("/health")
    def health():
        return {"status": "ok"}

    return app


configure_logging()
app = create_app()
