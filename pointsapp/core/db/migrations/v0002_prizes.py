DDL = """
CREATE TABLE IF NOT EXISTS prize_exchanges (
  id           INTEGER PRIMARY KEY AUTOINCREMENT,
  user_id      TEXT NOT NULL REFERENCES users(user_id) ON DELETE CASCADE,
  idem_key     TEXT NOT NULL,                       -- idempotence stricte côté client
  prize_id     INTEGER NOT NULL,
  prize_name   TEXT NOT NULL,
  points_spent INTEGER NOT NULL CHECK (points_spent > 0),
  created_ts   INTEGER NOT NULL DEFAULT (strftime('%s','now')),
  UNIQUE(user_id, idem_key)
);
CREATE INDEX IF NOT EXISTS idx_prize_exchanges_user ON prize_exchanges(user_id);
"""

def apply(con):
    con.executescript(DDL)
