from typing import Optional


class ScraperError(Exception):
    """Base class for errors raised by the scraper."""


class SessionNotReadyError(ScraperError):
    """A page was requested before the browser session was initialized."""


class SessionCrashedError(ScraperError):
    """The browser transport closed underneath an operation."""


class MissingCredentialsError(ScraperError):
    """The selected variant needs configuration that is not set."""


class LoginFailedError(ScraperError):
    pass


class RetryExhaustedError(ScraperError):
    """
    Raised after every attempt allowed by the retry budget has failed.
    """

    def __init__(self, attempts: int, last_error: Optional[BaseException] = None):
        self.attempts = attempts
        self.last_error = last_error
        super().__init__(
            f"Failed to scrape jobs after {attempts} attempts. Last error: {last_error}"
        )


class HttpStatusError(ScraperError):
    """
    A navigation came back with a blocking status (429 or 5xx) instead of a
    results page.
    """

    def __init__(self, status: int, url: str):
        self.status = status
        self.url = url
        super().__init__(f"HTTP {status} for {url}")
