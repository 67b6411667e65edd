from ..core.db.base import get_conn, atomic

_COLS = "user_id, username, first_name, avatar_url, source, points, onboarding_completed, keyword_completed, created_ts, last_seen_ts"
FLAG_COLUMNS = ("onboarding_completed", "keyword_completed")

def _row_to_user(row) -> dict:
    return {
        "user_id": row[0], "username": row[1], "first_name": row[2],
        "avatar_url": row[3], "source": row[4], "points": int(row[5]),
        "onboarding_completed": bool(int(row[6])), "keyword_completed": bool(int(row[7])),
        "created_ts": int(row[8]), "last_seen_ts": int(row[9]),
    }

def get(user_id: str) -> dict | None:
    con = get_conn()
    row = con.execute(f"SELECT {_COLS} FROM users WHERE user_id=?", (user_id,)).fetchone()
    return _row_to_user(row) if row else None

def exists(user_id: str) -> bool:
    con = get_conn()
    return con.execute("SELECT 1 FROM users WHERE user_id=? LIMIT 1", (user_id,)).fetchone() is not None

def upsert_profile(user_id: str, username: str, first_name: str, avatar_url: str, source: str) -> bool:
    """Crée l'utilisateur au premier passage, sinon rafraîchit profil + last_seen. Renvoie True si créé."""
    with atomic():
        con = get_conn()
        before = con.total_changes
        con.execute(
            "INSERT INTO users(user_id, username, first_name, avatar_url, source) VALUES(?,?,?,?,?) "
            "ON CONFLICT(user_id) DO NOTHING",
            (user_id, username, first_name, avatar_url, source)
        )
        created = (con.total_changes - before) > 0
        if not created:
            # la source d'arrivée reste celle du premier passage
            con.execute(
                "UPDATE users SET username=?, first_name=?, avatar_url=?, last_seen_ts=strftime('%s','now') "
                "WHERE user_id=?",
                (username, first_name, avatar_url, user_id)
            )
    return created

def balance(user_id: str) -> int | None:
    con = get_conn()
    row = con.execute("SELECT points FROM users WHERE user_id=?", (user_id,)).fetchone()
    return int(row[0]) if row else None

def add_points(user_id: str, delta: int) -> int | None:
    # incrément SQL: pas de lecture-modification-écriture côté Python
    with atomic():
        con = get_conn()
        con.execute("UPDATE users SET points = points + ? WHERE user_id=?", (int(delta), user_id))
        row = con.execute("SELECT points FROM users WHERE user_id=?", (user_id,)).fetchone()
    return int(row[0]) if row else None

def debit_if_enough(user_id: str, amount: int) -> bool:
    with atomic():
        con = get_conn()
        before = con.total_changes
        con.execute("UPDATE users SET points = points - ? WHERE user_id=? AND points >= ?",
                    (int(amount), user_id, int(amount)))
        return (con.total_changes - before) > 0

def set_points(user_id: str, points: int) -> bool:
    with atomic():
        con = get_conn()
        before = con.total_changes
        con.execute("UPDATE users SET points=? WHERE user_id=?", (int(points), user_id))
        return (con.total_changes - before) > 0

def set_flag(user_id: str, column: str, value: bool) -> bool:
    if column not in FLAG_COLUMNS:
        raise KeyError(column)
    with atomic():
        con = get_conn()
        before = con.total_changes
        con.execute(f"UPDATE users SET {column}=? WHERE user_id=?", (int(bool(value)), user_id))
        return (con.total_changes - before) > 0

def delete(user_id: str) -> bool:
    with atomic():
        con = get_conn()
        before = con.total_changes
        con.execute("DELETE FROM users WHERE user_id=?", (user_id,))
        return (con.total_changes - before) > 0

def count_users() -> int:
    con = get_conn()
    (n,) = con.execute("SELECT COUNT(*) FROM users").fetchone()
    return int(n)
