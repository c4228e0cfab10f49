"""Create the documents table. Run on app startup."""
import logging

from sqlalchemy.engine import Engine

from app.db.base import Base
from app.db.session import engine as default_engine
from app.models import document  # noqa: F401 - register models

logger = logging.getLogger(__name__)


def init_db(engine: Engine = None):
    engine = engine or default_engine
    Base.metadata.create_all(bind=engine)
    logger.info(f"Document tables ready on {engine.url.render_as_string(hide_password=True)}")
