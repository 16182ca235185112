"""Wire settings, database, stores, and the sync service together for an application."""

import logging
from typing import Optional

from src.core.config import Settings, configure_logging, get_settings
from src.db.database import make_engine, make_session
from src.db.local_storage import SQLLocalStorage
from src.db.sql_store import SQLDocumentStore
from src.services.lifecycle import LifecycleManager
from src.services.sync_service import GameSyncService, Identity

logger = logging.getLogger(__name__)


def build_sync_service(
    identity: Optional[Identity] = None,
    settings: Optional[Settings] = None,
    reconnect: bool = True,
) -> tuple[GameSyncService, LifecycleManager]:
    """
    Create the service and (unless disabled) reconnect to the last joined game.

    The caller owns the returned service and should call dispose() on it when done.
    """
    settings = settings or get_settings()
    configure_logging(settings)

    db = make_session(make_engine(settings))
    sync = GameSyncService(
        store=SQLDocumentStore(db),
        local_storage=SQLLocalStorage(db),
        identity=identity,
        settings=settings,
    )
    if reconnect:
        sync.init()
    logger.debug("Sync service ready (connection status: %s)", sync.connection_status)
    return sync, LifecycleManager(sync)
