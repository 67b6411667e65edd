# pointsapp/core/health.py
from __future__ import annotations
import os, platform, time

import psutil

from pointsapp.core.db.base import get_conn
from pointsapp.domain import players as d_players

START_TIME = time.time()

def _sqlite_info() -> dict:
    """Infos légères sur la DB (chemin, taille, journal_mode, user_version)."""
    info: dict = {}
    con = get_conn()
    for _, name, file in con.execute("PRAGMA database_list;").fetchall():
        if name == "main" and file:
            info["db_path"] = file
            if os.path.exists(file):
                info["db_size_mb"] = os.path.getsize(file) / 1024**2
            break
    (journal_mode,) = con.execute("PRAGMA journal_mode;").fetchone()
    info["journal_mode"] = str(journal_mode).upper()
    (user_version,) = con.execute("PRAGMA user_version;").fetchone()
    info["user_version"] = int(user_version or 0)
    return info

def diagnostics() -> dict:
    rss_mb = psutil.Process().memory_info().rss / 1024**2
    return {
        "uptime_s": int(time.time() - START_TIME),
        "memory_rss_mb": round(rss_mb, 1),
        "python": platform.python_version(),
        "users": d_players.count(),
        **_sqlite_info(),
    }
