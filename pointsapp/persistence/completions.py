from ..core.db.base import get_conn, atomic

def insert_once(user_id: str, reward_kind: str, points: int) -> bool:
    """La PK (user_id, reward_kind) décide seule si la récompense a déjà été donnée."""
    with atomic():
        con = get_conn()
        before = con.total_changes
        con.execute(
            "INSERT INTO completions(user_id, reward_kind, points_awarded) VALUES(?,?,?) "
            "ON CONFLICT(user_id, reward_kind) DO NOTHING",
            (user_id, reward_kind, int(points))
        )
        return (con.total_changes - before) > 0

def has(user_id: str, reward_kind: str) -> bool:
    con = get_conn()
    row = con.execute("SELECT 1 FROM completions WHERE user_id=? AND reward_kind=? LIMIT 1",
                      (user_id, reward_kind)).fetchone()
    return row is not None

def get(user_id: str, reward_kind: str) -> dict | None:
    con = get_conn()
    row = con.execute("SELECT reward_kind, points_awarded, completed_ts FROM completions "
                      "WHERE user_id=? AND reward_kind=?", (user_id, reward_kind)).fetchone()
    if row is None:
        return None
    return {"reward_kind": row[0], "points_awarded": int(row[1]), "completed_ts": int(row[2])}

def kinds_for(user_id: str) -> set[str]:
    con = get_conn()
    rows = con.execute("SELECT reward_kind FROM completions WHERE user_id=?", (user_id,)).fetchall()
    return {r[0] for r in rows}

