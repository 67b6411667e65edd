from ..core.db.base import get_conn

def user_rows(limit: int = 100, offset: int = 0) -> list[dict]:
    con = get_conn()
    rows = con.execute(
        """
        SELECT u.user_id, u.username, u.first_name, u.points, u.created_ts,
               EXISTS(SELECT 1 FROM completions c WHERE c.user_id = u.user_id AND c.reward_kind = 'quiz') AS quiz,
               EXISTS(SELECT 1 FROM completions c WHERE c.user_id = u.user_id AND c.reward_kind = 'keyword') AS kw,
               EXISTS(SELECT 1 FROM completions c
                       WHERE c.user_id = u.user_id AND c.reward_kind = 'telegram_subscription') AS sub,
               (SELECT COUNT(*) FROM referrals r WHERE r.referrer_id = u.user_id) AS refs,
               (SELECT COUNT(*) FROM prize_exchanges p WHERE p.user_id = u.user_id) AS prizes
        FROM users u
        ORDER BY u.created_ts DESC, u.user_id ASC
        LIMIT ? OFFSET ?;
        """,
        (int(limit), int(offset))
    ).fetchall()
    out = []
    for r in rows:
        quiz, kw, sub = bool(r[5]), bool(r[6]), bool(r[7])
        out.append({
            "user_id": r[0], "username": r[1], "first_name": r[2], "points": int(r[3]),
            "quiz_completed": quiz, "keyword_completed": kw, "telegram_subscribed": sub,
            "tasks_completed": int(quiz) + int(kw) + int(sub),
            "referral_count": int(r[8]), "prize_count": int(r[9]), "created_ts": int(r[4]),
        })
    return out
