from pathlib import Path
from typing import List, Optional

from pydantic_settings import BaseSettings

BASE_DIR = Path(__file__).resolve().parent.parent.parent


class Settings(BaseSettings):
    class Config:
        env_file = BASE_DIR / ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"

    """
    Configuration settings for the LinkedIn scraper.
    """

    # Logging
    LOG_LEVEL: str = "INFO"

    # Browser settings
    HEADLESS: bool = True
    SLOW_MO: int = 0  # ms between Playwright actions
    # Persistent Chrome profile directory. Keeps cookies (and the LinkedIn
    # login) across runs. None launches a throwaway context.
    USER_DATA_DIR: Optional[str] = "/tmp/chrome-data"
    IGNORE_HTTPS_ERRORS: bool = True
    BLOCK_RESOURCES: bool = True
    BLOCKED_RESOURCE_TYPES: List[str] = ["image", "font", "media"]
    DEBUG_SCREENSHOT_DIR: Optional[str] = None

    # Scraping strategy
    SCRAPER_VARIANT: str = "anonymous"  # anonymous, authenticated, minimal
    PAGINATION_STRATEGY: Optional[str] = None  # infinite_scroll, url_offset; None = variant default
    TARGET_LIMIT: int = 100
    PAGE_SIZE: int = 25  # LinkedIn default
    MAX_PAGINATION_ITERATIONS: int = 20
    SCROLL_SETTLE_MS: int = 3000

    # Delays (seconds)
    PAGE_DELAY_MIN: float = 2.0
    PAGE_DELAY_MAX: float = 4.0
    BATCH_DELAY_MIN: float = 3.0
    BATCH_DELAY_MAX: float = 5.0
    DESCRIPTION_DELAY_MIN: float = 1.0
    DESCRIPTION_DELAY_MAX: float = 2.0

    # Retries
    MAX_RETRIES: int = 3
    RETRY_BASE_DELAY_MS: int = 1000
    RETRY_MAX_DELAY_MS: int = 30000
    RETRY_JITTER_MS: int = 1000
    RATE_LIMIT_COOLDOWN_MIN: float = 5.0  # seconds
    RATE_LIMIT_COOLDOWN_MAX: float = 10.0  # seconds
    REINIT_COOLDOWN: float = 2.0  # seconds

    # Concurrency (description fetches only; listing scrapes are sequential)
    MAX_CONCURRENT_DESCRIPTIONS: int = 2

    # Timeouts
    NAVIGATION_TIMEOUT: int = 30000  # ms
    SELECTOR_TIMEOUT: int = 20000  # ms

    # Authenticated variant
    LINKEDIN_EMAIL: Optional[str] = None
    LINKEDIN_PASSWORD: Optional[str] = None

    # Proxies
    PROXY_PROVIDER: str = "none"  # none, generic
    PROXY_SERVER: Optional[str] = None
    PROXY_USERNAME: Optional[str] = None
    PROXY_PASSWORD: Optional[str] = None


settings = Settings()
