from __future__ import annotations
from typing import Optional, Dict, List
from pointsapp.core.db.base import get_conn, atomic

def find(user_id: str, idem_key: str) -> Optional[Dict]:
    con = get_conn()
    row = con.execute(
        "SELECT id,user_id,idem_key,prize_id,prize_name,points_spent,created_ts "
        "FROM prize_exchanges WHERE user_id=? AND idem_key=?",
        (user_id, idem_key),
    ).fetchone()
    return _row_to_exchange(row) if row else None

def record(user_id: str, idem_key: str, prize_id: int, prize_name: str, points_spent: int) -> bool:
    with atomic():
        con = get_conn()
        before = con.total_changes
        con.execute(
            "INSERT INTO prize_exchanges(user_id,idem_key,prize_id,prize_name,points_spent) "
            "VALUES(?,?,?,?,?) ON CONFLICT(user_id, idem_key) DO NOTHING",
            (user_id, idem_key, int(prize_id), prize_name, int(points_spent)),
        )
        return (con.total_changes - before) > 0

def list_for(user_id: str) -> List[Dict]:
    con = get_conn()
    rows = con.execute(
        "SELECT id,user_id,idem_key,prize_id,prize_name,points_spent,created_ts "
        "FROM prize_exchanges WHERE user_id=? ORDER BY created_ts DESC, id DESC",
        (user_id,),
    ).fetchall()
    return [_row_to_exchange(r) for r in rows]

def _row_to_exchange(row) -> Dict:
    return {
        "id": int(row[0]), "user_id": row[1], "idem_key": row[2],
        "prize_id": int(row[3]), "prize_name": row[4],
        "points_spent": int(row[5]), "created_ts": int(row[6]),
    }
