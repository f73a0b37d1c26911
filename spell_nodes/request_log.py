import logging
from typing import List, Optional, Protocol
from sqlalchemy import (
    Boolean,
    BigInteger,
    Column,
    DateTime,
    Integer,
    MetaData,
    String,
    Table,
    Text,
    create_engine,
    func,
    select,
)
from sqlalchemy.engine import Engine
from .config import Settings
from .schema import RequestRecord


log = logging.getLogger(__name__)

metadata = MetaData()

requests_table = Table(
    "requests",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("project_id", String(255), index=True),
    Column("request_data", Text, nullable=False),
    Column("response_data", Text, nullable=False),
    Column("start_time", BigInteger, nullable=False),
    Column("status_code", Integer, nullable=False),
    Column("status", String(255), nullable=False),
    Column("model", String(255)),
    Column("parameters", Text, nullable=False),
    Column("type", String(64), nullable=False),
    Column("provider", String(64), nullable=False),
    Column("total_tokens", Integer, nullable=False),
    Column("hidden", Boolean, nullable=False, default=False),
    Column("processed", Boolean, nullable=False, default=False),
    Column("spell", String(255)),
    Column("node_id", String(255)),
    Column("created_at", DateTime(timezone=True), server_default=func.now()),
)


class AuditRecorder(Protocol):
    def record(self, entry: RequestRecord) -> None:
        ...


class LoggingRecorder:
    """Recorder used when no database is configured."""

    def record(self, entry: RequestRecord) -> None:
        log.info(
            "request recorded project=%s model=%s status=%s tokens=%s",
            entry.project_id,
            entry.model,
            entry.status_code,
            entry.total_tokens,
        )

    def list_requests(self, project_id: Optional[str] = None, limit: int = 50) -> List[dict]:
        return []


class SqlRequestRecorder:
    def __init__(self, dsn: Optional[str] = None, engine: Optional[Engine] = None):
        if engine is None:
            if not dsn:
                raise ValueError("SqlRequestRecorder needs a DSN or an engine")
            engine = create_engine(dsn, pool_pre_ping=True)
        self.engine = engine

    def init_db(self) -> None:
        metadata.create_all(self.engine)

    def record(self, entry: RequestRecord) -> None:
        row = entry.model_dump()
        if row["node_id"] is not None:
            row["node_id"] = str(row["node_id"])
        try:
            with self.engine.begin() as c:
                c.execute(requests_table.insert().values(**row))
        except Exception:
            # Recording never fails the completion that produced it
            log.exception("failed to record %s request for project %s", entry.type, entry.project_id)

    def list_requests(self, project_id: Optional[str] = None, limit: int = 50) -> List[dict]:
        q = select(requests_table).order_by(requests_table.c.id.desc()).limit(limit)
        if project_id:
            q = q.where(requests_table.c.project_id == project_id)
        with self.engine.begin() as c:
            rows = c.execute(q).mappings().all()
        return [dict(r) for r in rows]


def recorder_from_settings(settings: Settings):
    if settings.database_url:
        rec = SqlRequestRecorder(settings.database_url)
        rec.init_db()
        return rec
    return LoggingRecorder()
