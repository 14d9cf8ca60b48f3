# goldwatch/config/settings.py

"""Central configuration for the goldwatch poller."""

import os
from pathlib import Path

from curl_cffi.requests import BrowserTypeLiteral
from dotenv import load_dotenv

load_dotenv()


def _env_int(name: str, default: int) -> int:
    """Read an integer from the environment, falling back to *default*."""
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _env_path(name: str, default_subdir: str) -> Path:
    """Directory from the environment, else *default_subdir* of the cwd."""
    raw = os.getenv(name, "").strip()
    if raw:
        return Path(raw).expanduser()
    return Path.cwd() / default_subdir


class Settings:
    """Central configuration for the goldwatch poller."""

    # --- Source ---
    SOURCE_NAME: str = "kimkhanh"
    GOLD_PRICE_URL: str = os.getenv(
        "GOLD_PRICE_URL",
        "https://kimkhanhviethung.vn/tra-cuu-gia-vang.html",
    )
    PRODUCT_LABEL: str = os.getenv("GOLD_PRODUCT_LABEL", "Nhẫn Khâu 98")

    # --- Scraping ---
    REQUEST_TIMEOUT: int = 20           # Seconds before the fetch is abandoned
    CAPTCHA_KEYWORDS: list[str] = [
        "captcha",
        "verify you are human",
        "unusual traffic",
        "automated requests",
    ]

    # --- Browser Impersonation ---
    IMPERSONATE_BROWSER: BrowserTypeLiteral = "chrome131"
    DEFAULT_HEADERS: dict[str, str] = {
        "User-Agent": (
            "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
            "AppleWebKit/537.36"
        ),
        "Accept": (
            "text/html,application/xhtml+xml,"
            "application/xml;q=0.9,image/avif,"
            "image/webp,image/apng,*/*;q=0.8"
        ),
        "Accept-Language": "vi-VN,vi;q=0.9,en;q=0.8",
    }

    # --- Telegram ---
    TELEGRAM_BOT_TOKEN: str = os.getenv("TELEGRAM_BOT_TOKEN", "")
    TELEGRAM_CHAT_ID: str = os.getenv("TELEGRAM_CHAT_ID", "")
    TELEGRAM_API_BASE: str = "https://api.telegram.org"
    TELEGRAM_TIMEOUT: int = 20

    # --- Notification policy ---
    HEARTBEAT_WINDOW_MINUTES: int = _env_int("HEARTBEAT_WINDOW_MINUTES", 5)
    TIMEZONE: str = os.getenv("GOLDWATCH_TIMEZONE", "Asia/Ho_Chi_Minh")

    # --- Chart ---
    CHART_WINDOW: int = _env_int("CHART_WINDOW", 24)
    CHART_WIDTH: int = 900
    CHART_HEIGHT: int = 500
    CHART_MARGIN: int = 50
    CHART_CAPTION: str = "📊 Biểu đồ giá vàng 98 (gần nhất)"

    # --- History retention (0 = unbounded) ---
    HISTORY_MAX_RECORDS: int = _env_int("HISTORY_MAX_RECORDS", 0)

    # --- Paths (relative defaults resolve against the cron working dir) ---
    SELECTORS_PATH: Path = Path(__file__).resolve().parent / "selectors.json"
    DATA_DIR: Path = _env_path("GOLDWATCH_DATA_DIR", "data")
    STATE_PATH: Path = DATA_DIR / "state.json"
    HISTORY_PATH: Path = DATA_DIR / "history.json"
    LOGS_DIR: Path = _env_path("GOLDWATCH_LOGS_DIR", "logs")

    # --- Logging ---
    LOG_RETENTION: int = _env_int("GOLDWATCH_LOG_RETENTION", 288)  # run logs kept
