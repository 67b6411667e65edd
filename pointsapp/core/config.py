import os
from dotenv import load_dotenv
from pydantic import BaseModel, Field

load_dotenv()

class Settings(BaseModel):
    data_dir: str = os.getenv("DATA_DIR", "./data")
    db_file: str = os.getenv("DB_FILE", "points.db")
    timezone: str = os.getenv("APP_TZ", "UTC")
    day_reset_hour: int = int(os.getenv("DAY_RESET_HOUR", "0"))
    busy_timeout_ms: int = int(os.getenv("BUSY_TIMEOUT_MS", "5000"))
    poll_interval_s: float = float(os.getenv("POLL_INTERVAL_S", "2.0"))
    secret_keyword: str = os.getenv("SECRET_KEYWORD", "talentsy")
    channel_username: str = os.getenv("CHANNEL_USERNAME", "")
    telegram_bot_token: str = Field(default_factory=lambda: os.getenv("TELEGRAM_BOT_TOKEN", ""))

settings = Settings()
