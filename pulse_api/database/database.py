"""Database connection and session management."""

import os
from dataclasses import dataclass
from typing import Any, Dict, Generator, Optional

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from pulse_api.models.base import Base


@dataclass
class DatabaseConfig:
    """Database configuration settings."""

    host: str = "localhost"
    port: int = 3306
    database: str = "pulse_new"
    username: str = "root"
    password: str = ""
    pool_size: int = 20
    max_overflow: int = 30
    echo: bool = False
    database_url: Optional[str] = None
    init_tables: bool = False
    ssl_enabled: bool = False
    ssl_ca_path: Optional[str] = None

    @classmethod
    def from_env(cls) -> "DatabaseConfig":
        """Create config from environment variables."""
        return cls(
            host=os.getenv("DB_HOST", "localhost"),
            port=int(os.getenv("DB_PORT", "3306")),
            database=os.getenv("DB_NAME", "pulse_new"),
            username=os.getenv("DB_USER", "root"),
            password=os.getenv("DB_PASSWORD", ""),
            pool_size=int(os.getenv("DB_POOL_SIZE", "20")),
            max_overflow=int(os.getenv("DB_MAX_OVERFLOW", "30")),
            echo=os.getenv("DB_ECHO", "false").lower() == "true",
            database_url=os.getenv("DATABASE_URL") or None,
            init_tables=os.getenv("DB_INIT_TABLES", "false").lower() == "true",
            ssl_enabled=os.getenv("DB_SSL", "false").lower() == "true",
            ssl_ca_path=os.getenv("DB_SSL_CA") or None,
        )

    @property
    def url(self) -> str:
        """Generate SQLAlchemy database URL."""
        if self.database_url:
            # Hosted providers hand out plain mysql:// URLs
            if self.database_url.startswith("mysql://"):
                return "mysql+pymysql://" + self.database_url[len("mysql://"):]
            return self.database_url
        return f"mysql+pymysql://{self.username}:{self.password}@{self.host}:{self.port}/{self.database}"

    @property
    def connect_args(self) -> Dict[str, Any]:
        """Driver connect arguments (TLS settings for hosted MySQL)."""
        if not self.ssl_enabled:
            return {}
        if self.ssl_ca_path and os.path.exists(self.ssl_ca_path):
            return {"ssl": {"ca": self.ssl_ca_path}}
        return {"ssl": {}}

    @property
    def display_target(self) -> str:
        """Connection target without credentials, for logging."""
        if self.database_url:
            return self.database_url.rsplit("@", 1)[-1]
        return f"{self.host}:{self.port}/{self.database}"


# Module-level engine and session factory (initialized lazily)
_engine: Optional[Engine] = None
_session_factory: Optional[sessionmaker[Session]] = None


def get_engine(config: Optional[DatabaseConfig] = None) -> Engine:
    """
    Get or create the SQLAlchemy engine.

    Uses singleton pattern to reuse engine across requests.
    """
    global _engine

    if _engine is None:
        if config is None:
            config = DatabaseConfig.from_env()

        _engine = create_engine(
            config.url,
            pool_size=config.pool_size,
            max_overflow=config.max_overflow,
            echo=config.echo,
            connect_args=config.connect_args,
            pool_pre_ping=True,  # Verify connections before use
        )

    return _engine


def get_session_factory(config: Optional[DatabaseConfig] = None) -> sessionmaker[Session]:
    """
    Get or create the session factory.

    Uses singleton pattern to reuse factory across requests.
    """
    global _session_factory

    if _session_factory is None:
        engine = get_engine(config)
        _session_factory = sessionmaker(
            bind=engine,
            autocommit=False,
            autoflush=False,
            expire_on_commit=False,
        )

    return _session_factory


def get_db() -> Generator[Session, None, None]:
    """
    Dependency that provides a database session.

    Use with FastAPI's Depends() for automatic session management.
    Commits on success, rolls back on exception.
    """
    session_factory = get_session_factory()
    session = session_factory()

    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


def init_db(config: Optional[DatabaseConfig] = None) -> None:
    """
    Initialize database by creating the write tables.

    Reporting views (hierarchy_metrics_agg_rm, dashboards, sales_data)
    are owned by the upstream ETL and are never created here.
    """
    engine = get_engine(config)
    Base.metadata.create_all(bind=engine)


def dispose_engine() -> None:
    """
    Dispose of the engine and reset module state.

    Useful for testing and graceful shutdown.
    """
    global _engine, _session_factory

    if _engine is not None:
        _engine.dispose()
        _engine = None
        _session_factory = None
