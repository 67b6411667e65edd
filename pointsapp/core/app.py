# pointsapp/core/app.py
from __future__ import annotations
import logging

from .db.base import get_conn, use_database, current_db_path
from .db.migrations import migrate_if_needed
from .storage import SQLiteStorage
from .watcher import BalanceWatcher

log = logging.getLogger("pointsapp")

def setup_logging(level: int = logging.INFO) -> None:
    logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(message)s")

def migrate() -> int:
    con = get_conn()
    ver = migrate_if_needed(con)
    log.info("Schéma SQLite v%d (%s)", ver, current_db_path())
    return ver

def bootstrap(db_path: str | None = None, *, poll_interval_s: float | None = None) -> SQLiteStorage:
    """Logging + migrations au boot, puis la façade prête à l'emploi."""
    setup_logging()
    if db_path:
        use_database(db_path)
    migrate()
    return SQLiteStorage(BalanceWatcher(interval_s=poll_interval_s))
