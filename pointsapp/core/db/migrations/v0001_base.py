DDL = """
CREATE TABLE IF NOT EXISTS users (
  user_id              TEXT PRIMARY KEY,
  username             TEXT NOT NULL DEFAULT '',
  first_name           TEXT NOT NULL DEFAULT '',
  avatar_url           TEXT NOT NULL DEFAULT '',
  source               TEXT NOT NULL DEFAULT '',
  points               INTEGER NOT NULL DEFAULT 0 CHECK (points >= 0),
  onboarding_completed INTEGER NOT NULL DEFAULT 0 CHECK (onboarding_completed IN (0,1)),
  keyword_completed    INTEGER NOT NULL DEFAULT 0 CHECK (keyword_completed IN (0,1)),
  created_ts           INTEGER NOT NULL DEFAULT (strftime('%s','now')),
  last_seen_ts         INTEGER NOT NULL DEFAULT (strftime('%s','now'))
);
CREATE INDEX IF NOT EXISTS idx_users_points ON users(points DESC);

CREATE TABLE IF NOT EXISTS daily_taps (
  user_id   TEXT NOT NULL REFERENCES users(user_id) ON DELETE CASCADE,
  day       TEXT NOT NULL,                          -- "YYYY-MM-DD"
  tap_count INTEGER NOT NULL DEFAULT 0 CHECK (tap_count >= 0),
  PRIMARY KEY (user_id, day)
);

CREATE TABLE IF NOT EXISTS completions (
  user_id        TEXT NOT NULL REFERENCES users(user_id) ON DELETE CASCADE,
  reward_kind    TEXT NOT NULL,                     -- "quiz" | "keyword" | "telegram_subscription" | "referral:<id>"
  points_awarded INTEGER NOT NULL,
  completed_ts   INTEGER NOT NULL DEFAULT (strftime('%s','now')),
  PRIMARY KEY (user_id, reward_kind)
);

CREATE TABLE IF NOT EXISTS referrals (
  referred_id TEXT PRIMARY KEY REFERENCES users(user_id) ON DELETE CASCADE,
  referrer_id TEXT NOT NULL REFERENCES users(user_id) ON DELETE CASCADE,
  created_ts  INTEGER NOT NULL DEFAULT (strftime('%s','now')),
  CHECK (referrer_id <> referred_id)
);
CREATE INDEX IF NOT EXISTS idx_referrals_referrer ON referrals(referrer_id);
"""
def apply(con): con.executescript(DDL)
