# pointsapp/core/db/base.py
from __future__ import annotations
import os, sqlite3, threading
from contextlib import contextmanager

from pointsapp.core.config import settings
from pointsapp.domain.errors import TransientStorageFailure

DATA_DIR = os.path.abspath(settings.data_dir)
DB_PATH = os.path.join(DATA_DIR, settings.db_file)

_tls = threading.local()

# Erreurs SQLite qui méritent un retry côté appelant
_TRANSIENT_MARKERS = ("locked", "busy", "disk i/o", "unable to open")

def _connect(path: str):
    con = sqlite3.connect(path, check_same_thread=False, isolation_level=None,
                          timeout=settings.busy_timeout_ms / 1000.0)
    con.row_factory = sqlite3.Row
    con.execute("PRAGMA journal_mode=WAL;")
    con.execute("PRAGMA foreign_keys=ON;")
    con.execute("PRAGMA synchronous=NORMAL;")
    con.execute("PRAGMA temp_store=MEMORY;")
    con.execute(f"PRAGMA busy_timeout={int(settings.busy_timeout_ms)};")
    return con

def use_database(path: str) -> str:
    """Change la base cible (tests, CLI). Les connexions par thread se reconnectent au prochain accès."""
    global DB_PATH
    DB_PATH = os.path.abspath(path)
    os.makedirs(os.path.dirname(DB_PATH), exist_ok=True)
    close_conn()
    return DB_PATH

def get_conn():
    con = getattr(_tls, "con", None)
    if con is None or getattr(_tls, "path", None) != DB_PATH:
        if con is not None:
            con.close()
        os.makedirs(os.path.dirname(DB_PATH), exist_ok=True)
        con = _connect(DB_PATH)
        _tls.con, _tls.path = con, DB_PATH
    return con

def close_conn() -> None:
    con = getattr(_tls, "con", None)
    if con is not None:
        con.close()
    _tls.con = None
    _tls.path = None

def is_transient(exc: sqlite3.OperationalError) -> bool:
    msg = str(exc).lower()
    return any(m in msg for m in _TRANSIENT_MARKERS)

@contextmanager
def atomic(con=None, immediate=True):
    """
    Transaction SQLite. Réentrante: un bloc imbriqué rejoint la transaction en cours.
    BEGIN IMMEDIATE prend le verrou d'écriture tout de suite (pas d'upgrade en course).
    """
    con = con or get_conn()
    if con.in_transaction:
        yield con
        return
    try:
        con.execute("BEGIN IMMEDIATE;" if immediate else "BEGIN;")
        yield con
        con.execute("COMMIT;")
    except sqlite3.OperationalError as exc:
        if con.in_transaction:
            con.execute("ROLLBACK;")
        if is_transient(exc):
            raise TransientStorageFailure(str(exc)) from exc
        raise
    except BaseException:
        if con.in_transaction:
            con.execute("ROLLBACK;")
        raise

def current_db_path() -> str:
    return DB_PATH
