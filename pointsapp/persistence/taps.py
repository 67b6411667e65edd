from ..core.db.base import get_conn, atomic

def try_consume(user_id: str, day: str, cap: int) -> bool:
    """+1 sur le compteur du jour seulement si on est sous le plafond. Un seul UPDATE conditionnel."""
    with atomic():
        con = get_conn()
        con.execute(
            "INSERT INTO daily_taps(user_id, day, tap_count) VALUES(?,?,0) "
            "ON CONFLICT(user_id, day) DO NOTHING",
            (user_id, day)
        )
        before = con.total_changes
        con.execute(
            "UPDATE daily_taps SET tap_count = tap_count + 1 WHERE user_id=? AND day=? AND tap_count < ?",
            (user_id, day, int(cap))
        )
        return (con.total_changes - before) > 0

def get_count(user_id: str, day: str) -> int:
    con = get_conn()
    row = con.execute("SELECT tap_count FROM daily_taps WHERE user_id=? AND day=?", (user_id, day)).fetchone()
    return int(row[0]) if row else 0
