from ..core.db.base import get_conn, atomic

def insert_once(referrer_id: str, referred_id: str) -> bool:
    # PK sur referred_id: un filleul n'a jamais qu'un seul parrain
    with atomic():
        con = get_conn()
        before = con.total_changes
        con.execute(
            "INSERT INTO referrals(referred_id, referrer_id) VALUES(?,?) "
            "ON CONFLICT(referred_id) DO NOTHING",
            (referred_id, referrer_id)
        )
        return (con.total_changes - before) > 0

def referrer_of(referred_id: str) -> str | None:
    con = get_conn()
    row = con.execute("SELECT referrer_id FROM referrals WHERE referred_id=?", (referred_id,)).fetchone()
    return row[0] if row else None

def is_upline(candidate_id: str, user_id: str) -> bool:
    """True si candidate_id est dans la chaîne des parrains de user_id."""
    con = get_conn()
    row = con.execute(
        """
        WITH RECURSIVE upline(id) AS (
            SELECT referrer_id FROM referrals WHERE referred_id=?
            UNION
            SELECT r.referrer_id FROM referrals r JOIN upline u ON r.referred_id = u.id
        )
        SELECT 1 FROM upline WHERE id=? LIMIT 1;
        """,
        (user_id, candidate_id)
    ).fetchone()
    return row is not None

def count_for(referrer_id: str) -> int:
    con = get_conn()
    (n,) = con.execute("SELECT COUNT(*) FROM referrals WHERE referrer_id=?", (referrer_id,)).fetchone()
    return int(n)

def referred_by(referrer_id: str) -> list[str]:
    con = get_conn()
    rows = con.execute("SELECT referred_id FROM referrals WHERE referrer_id=? ORDER BY created_ts, referred_id",
                       (referrer_id,)).fetchall()
    return [r[0] for r in rows]
