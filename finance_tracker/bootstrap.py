"""
Composition root.

AppContext owns the persistence client lifecycle explicitly:

    UNCONFIGURED --configure()--> CONFIGURED --activate()--> ACTIVE
         ^                                                     |
         +----------------------- reset() ---------------------+

Services are never handed a global client. They receive a store
built by open_store() for one user scope.
"""

import enum

import structlog
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.exc import ArgumentError, SQLAlchemyError

from finance_tracker.config import Settings, configure_logging, get_settings
from finance_tracker.errors import ConfigurationError, PersistenceError
from finance_tracker.importing.pipeline import ImportPipeline
from finance_tracker.models import Base
from finance_tracker.models.base import build_engine, build_session_factory
from finance_tracker.services.account_service import AccountService
from finance_tracker.services.transaction_service import TransactionService
from finance_tracker.store.sqlalchemy_store import SqlAlchemyStore

logger = structlog.get_logger(__name__)


class ClientState(str, enum.Enum):
    UNCONFIGURED = "unconfigured"
    CONFIGURED = "configured"
    ACTIVE = "active"


class AppContext:

    def __init__(self, settings: Settings | None = None):
        self.settings = settings or get_settings()
        self.state = ClientState.UNCONFIGURED
        self.database_url: str | None = None
        self.engine: Engine | None = None
        self._session_factory = None

    def configure(self, database_url: str | None = None) -> "AppContext":
        """
        Validate and remember the database URL.

        Falls back to DATABASE_URL from the settings when no URL
        is given.
        """
        url = (database_url or self.settings.DATABASE_URL or "").strip()
        if not url:
            raise ConfigurationError("A database URL is required")
        try:
            make_url(url)
        except ArgumentError as e:
            raise ConfigurationError(f"Invalid database URL: {url!r}") from e

        if self.state == ClientState.ACTIVE:
            self.reset()
        self.database_url = url
        self.state = ClientState.CONFIGURED
        return self

    def activate(self) -> "AppContext":
        """Create the engine, the schema and the session factory."""
        if self.state == ClientState.UNCONFIGURED:
            raise ConfigurationError("configure() must be called before activate()")
        if self.state == ClientState.ACTIVE:
            return self

        configure_logging(self.settings)
        try:
            engine = build_engine(self.database_url)
            Base.metadata.create_all(bind=engine)
        except SQLAlchemyError as e:
            raise PersistenceError(f"Failed to open database: {e}") from e

        self.engine = engine
        self._session_factory = build_session_factory(engine)
        self.state = ClientState.ACTIVE
        logger.info("client_activated", url=make_url(self.database_url).render_as_string())
        return self

    def reset(self) -> None:
        """Drop the client and forget the configuration."""
        if self.engine is not None:
            self.engine.dispose()
        self.engine = None
        self._session_factory = None
        self.database_url = None
        self.state = ClientState.UNCONFIGURED

    def _require_active(self) -> None:
        if self.state != ClientState.ACTIVE:
            raise ConfigurationError(
                f"Client is {self.state.value}; call configure() and activate() first"
            )

    def open_store(self, user_id: str) -> SqlAlchemyStore:
        """A store scoped to one user, on a new session."""
        self._require_active()
        return SqlAlchemyStore(self._session_factory(), user_id)

    # --- Service wiring ---

    def account_service(self, store: SqlAlchemyStore) -> AccountService:
        service = AccountService(store, default_color=self.settings.DEFAULT_ACCOUNT_COLOR)
        service.refresh()
        return service

    def transaction_service(self, store: SqlAlchemyStore) -> TransactionService:
        return TransactionService(store)

    def import_pipeline(self, store: SqlAlchemyStore) -> ImportPipeline:
        return ImportPipeline(store)
