# perfcheck/store.py
import logging
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from .audit.normalizer import ReportData
from .database import init_db, make_engine, make_session_factory
from .errors import StoreError
from .models import Report

logger = logging.getLogger(__name__)


def utcnow() -> datetime:
    """Naive UTC; SQLite drops tzinfo anyway."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


class ReportStore:
    """
    Append-only report persistence.

    Call open() before use and close() on shutdown. Methods are blocking;
    async callers run them in a worker thread.
    """

    def __init__(self, database_url: str, echo: bool = False):
        self.database_url = database_url
        self.echo = echo
        self._engine: Optional[Engine] = None
        self._session_factory: Optional[sessionmaker] = None

    @property
    def is_open(self) -> bool:
        return self._engine is not None

    def open(self) -> None:
        if self.is_open:
            return
        try:
            engine = make_engine(self.database_url, echo=self.echo)
            init_db(engine)
        except SQLAlchemyError as e:
            logger.error("Database initialization failed: %s", e)
            raise StoreError(f"Could not open report store: {e}") from e
        self._engine = engine
        self._session_factory = make_session_factory(engine)
        logger.info("Report store opened (%s)", engine.url.render_as_string(hide_password=True))

    def close(self) -> None:
        if self._engine is not None:
            self._engine.dispose()
            logger.info("Report store closed.")
        self._engine = None
        self._session_factory = None

    def _session(self):
        if self._session_factory is None:
            raise StoreError("Report store is not open")
        return self._session_factory()

    def save(self, data: ReportData) -> Report:
        report = Report(**data.as_dict(), timestamp=utcnow())
        with self._session() as db:
            try:
                db.add(report)
                db.commit()
            except SQLAlchemyError as e:
                db.rollback()
                logger.error("Saving report for %s failed: %s", data.url, e)
                raise StoreError(f"Could not save report: {e}") from e
            db.expunge(report)
        return report

    def list_all(self) -> List[Report]:
        stmt = select(Report).order_by(Report.timestamp.desc(), Report.id.desc())
        with self._session() as db:
            try:
                reports = list(db.scalars(stmt))
            except SQLAlchemyError as e:
                logger.error("Listing reports failed: %s", e)
                raise StoreError(f"Could not list reports: {e}") from e
            db.expunge_all()
        return reports
