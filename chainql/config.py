"""Connection configuration handed to the execution layer.

chainql never opens connections itself; it only renders statements.  This
module gives callers one immutable place to describe *where* those statements
go, and fills in pool defaults without mutating the caller's object::

    from chainql.config import DatabaseConfig, with_defaults

    cfg = with_defaults(DatabaseConfig(user_name="app", host="db", database="shop"), "postgres")
    engine = sqlalchemy.create_engine(
        cfg.url("postgres"),
        pool_recycle=int(cfg.max_lifetime.total_seconds()),
        pool_size=cfg.max_idle_conns,
        max_overflow=cfg.max_open_conns - cfg.max_idle_conns,
    )
"""
from __future__ import annotations

from datetime import timedelta

from pydantic import BaseModel, ConfigDict, Field, SecretStr
from sqlalchemy.engine import URL

from chainql.compile.base import Dialect
from chainql.compile.registry import resolve_dialect

#: Maximum lifetime of a pooled connection.
DEFAULT_MAX_LIFETIME = timedelta(seconds=60)

#: Maximum number of idle pooled connections.
DEFAULT_MAX_IDLE_CONNS = 50

#: Maximum number of open connections.
DEFAULT_MAX_OPEN_CONNS = 100

#: SSL mode applied to PostgreSQL when none is configured.
DEFAULT_POSTGRES_SSL_MODE = "disable"


class DatabaseConfig(BaseModel):
    """Database connection settings.

    Unset pool fields stay ``None`` until :func:`with_defaults` fills them.

    Attributes:
        user_name: Database user.
        password: Database password; never rendered in ``repr``.
        host: Server host.
        port: Server port; ``None`` uses the driver default.
        database: Database name, or the file path for SQLite.
        ssl_mode: PostgreSQL ``sslmode``.
        max_lifetime: Maximum lifetime of a pooled connection.
        max_idle_conns: Maximum idle pooled connections.
        max_open_conns: Maximum open connections.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    user_name: str = ""
    password: SecretStr = Field(default_factory=lambda: SecretStr(""))
    host: str = ""
    port: int | None = Field(default=None, gt=0, le=65535)
    database: str = ""
    ssl_mode: str | None = None
    max_lifetime: timedelta | None = None
    max_idle_conns: int | None = Field(default=None, ge=0)
    max_open_conns: int | None = Field(default=None, ge=0)

    def url(self, dialect: str | Dialect) -> URL:
        """Render a SQLAlchemy :class:`~sqlalchemy.engine.URL` for ``dialect``.

        SQLite URLs carry only the database path.  PostgreSQL URLs carry
        ``sslmode`` when set.

        Raises:
            InvalidDialectError: If ``dialect`` is an unknown tag.
        """
        resolved = resolve_dialect(dialect)
        if resolved.dialect_name == "sqlite":
            return URL.create(resolved.sqlalchemy_driver, database=self.database or None)

        query: dict[str, str] = {}
        if resolved.dialect_name == "postgres" and self.ssl_mode:
            query["sslmode"] = self.ssl_mode
        return URL.create(
            resolved.sqlalchemy_driver,
            username=self.user_name or None,
            password=self.password.get_secret_value() or None,
            host=self.host or None,
            port=self.port,
            database=self.database or None,
            query=query,
        )


def with_defaults(config: DatabaseConfig, dialect: str | Dialect) -> DatabaseConfig:
    """Return a copy of ``config`` with every unset pool field populated.

    Defaults: 60 second lifetime, 50 idle and 100 open connections, and
    ``sslmode=disable`` for PostgreSQL.  ``config`` itself is left untouched.

    Raises:
        InvalidDialectError: If ``dialect`` is an unknown tag.
    """
    resolved = resolve_dialect(dialect)
    update: dict[str, object] = {}
    if config.max_lifetime is None:
        update["max_lifetime"] = DEFAULT_MAX_LIFETIME
    if config.max_idle_conns is None:
        update["max_idle_conns"] = DEFAULT_MAX_IDLE_CONNS
    if config.max_open_conns is None:
        update["max_open_conns"] = DEFAULT_MAX_OPEN_CONNS
    if resolved.dialect_name == "postgres" and config.ssl_mode is None:
        update["ssl_mode"] = DEFAULT_POSTGRES_SSL_MODE
    return config.model_copy(update=update)
