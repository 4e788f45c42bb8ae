"""
Application Assembly for SpendWise

This module ties together all the components:
1. Storage (SQL or in-memory)
2. Audit logging
3. Credential service
4. Spending record manager (with its ledger and query executor)

DESIGN DECISION: Everything is built ONCE, at startup, and handed to
the request layer explicitly. There are no module-level singletons;
the HTTP app keeps the components on its state and passes them into
each request.
"""

from dataclasses import dataclass
from typing import Optional

import structlog

from spendwise.audit import AuditLogger
from spendwise.config import Settings, get_settings
from spendwise.ledger import BudgetLedger
from spendwise.queries import SpendingQueryExecutor
from spendwise.services.auth import CredentialService
from spendwise.services.storage import (
    InMemoryAuditStorage,
    InMemoryUserStorage,
    SQLAuditStorage,
    SQLDatabase,
    SQLUserStorage,
    UserStorageInterface,
)
from spendwise.spending import SpendingRecordManager


logger = structlog.get_logger(__name__)


@dataclass
class AppComponents:
    """Everything a request handler needs."""

    storage: UserStorageInterface
    audit_logger: AuditLogger
    credentials: CredentialService
    spending: SpendingRecordManager
    database: Optional[SQLDatabase] = None

    def close(self) -> None:
        """Release the database engine, if any."""
        if self.database is not None:
            self.database.dispose()
            logger.info("database_disposed")


def create_app_components(settings: Optional[Settings] = None) -> AppComponents:
    """
    Factory function to create all application components.

    Args:
        settings: Configuration to build from. Defaults to get_settings().

    Returns:
        AppComponents, ready to serve requests

    Raises:
        StorageUnavailableError: If the database can't be reached
            (after retrying)
    """
    settings = settings or get_settings()
    db_settings = settings.database
    database = None

    if db_settings.is_memory:
        storage = InMemoryUserStorage()
        audit_storage = InMemoryAuditStorage()
        logger.info("storage_selected", backend="memory")
    else:
        database = SQLDatabase(db_settings)
        database.connect()
        storage = SQLUserStorage(database)
        audit_storage = SQLAuditStorage(database)
        logger.info("storage_selected", backend="sql")

    audit_logger = AuditLogger(audit_storage)

    credentials = CredentialService(
        storage=storage,
        settings=settings.auth,
        audit_logger=audit_logger,
    )

    spending = SpendingRecordManager(
        storage=storage,
        ledger=BudgetLedger(),
        query_executor=SpendingQueryExecutor(),
        audit_logger=audit_logger,
    )

    return AppComponents(
        storage=storage,
        audit_logger=audit_logger,
        credentials=credentials,
        spending=spending,
        database=database,
    )
