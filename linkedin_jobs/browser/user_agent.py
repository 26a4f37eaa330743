import logging
import random
from typing import Optional

from fake_useragent import UserAgent

logger = logging.getLogger(__name__)

# Desktop user agents rotated when fake_useragent cannot provide one
FALLBACK_USER_AGENTS = [
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36",
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36",
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/119.0.0.0 Safari/537.36",
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/605.1.15 (KHTML, like Gecko) Version/17.1 Safari/605.1.15",
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64; rv:109.0) Gecko/20100101 Firefox/121.0",
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10.15; rv:109.0) Gecko/20100101 Firefox/121.0",
]

# Fixed agent used by the minimal variant (no rotation)
MINIMAL_USER_AGENT = FALLBACK_USER_AGENTS[1]


class UserAgentProvider:
    """
    Manages fake user-agent generation and rotation.
    """

    _ua: Optional[UserAgent] = None

    @classmethod
    def initialize(cls):
        """
        Initialize the UserAgent provider if not already done.
        """
        if cls._ua is None:
            try:
                cls._ua = UserAgent(
                    browsers=["Chrome", "Firefox", "Safari"],
                    os=["Windows", "Mac OS X"],
                    platforms=["desktop"],
                    fallback=FALLBACK_USER_AGENTS[0],
                )
            except Exception as e:
                # fake_useragent loads bundled data and can fail on odd installs;
                # the static list below keeps rotation working.
                logger.warning(
                    f"Failed to initialize fake_useragent, using fallback list: {e}"
                )

    @classmethod
    def get_random(cls) -> str:
        """
        Return a random desktop user-agent string.
        """
        if cls._ua:
            return cls._ua.random
        return random.choice(FALLBACK_USER_AGENTS)
