import logging
from typing import Iterable

from playwright.async_api import BrowserContext, Page, Route

logger = logging.getLogger(__name__)


def platform_for(user_agent: str) -> str:
    """navigator.platform value consistent with the user agent."""
    if "Windows" in user_agent:
        return "Win32"
    if "Mac" in user_agent:
        return "MacIntel"
    return "Linux x86_64"


def build_stealth_script(user_agent: str) -> str:
    return f"""
        // Keep platform consistent with the rotated user agent
        Object.defineProperty(navigator, 'platform', {{
            get: () => '{platform_for(user_agent)}'
        }});

        // Hide webdriver property
        Object.defineProperty(navigator, 'webdriver', {{
            get: () => undefined
        }});

        // Non-empty plugin list
        Object.defineProperty(navigator, 'plugins', {{
            get: () => [1, 2, 3, 4, 5]
        }});

        // Languages
        Object.defineProperty(navigator, 'languages', {{
            get: () => ['en-US', 'en']
        }});

        // Override permissions
        try {{
            const originalQuery = window.navigator.permissions.query;
            window.navigator.permissions.query = (parameters) => (
                parameters && parameters.name === 'notifications' ?
                    Promise.resolve({{ state: Notification.permission }}) :
                    originalQuery(parameters)
            );
        }} catch (e) {{}}

        // Remove headless-browser globals
        delete window.__nightmare;
        delete window.__phantomas;
        delete window.callPhantom;
        delete window._phantom;
        delete window.phantom;

        // Screen properties of an ordinary 1080p display
        Object.defineProperty(screen, 'availHeight', {{ get: () => 1040 }});
        Object.defineProperty(screen, 'availWidth', {{ get: () => 1920 }});
        Object.defineProperty(screen, 'colorDepth', {{ get: () => 24 }});
        Object.defineProperty(screen, 'height', {{ get: () => 1080 }});
        Object.defineProperty(screen, 'width', {{ get: () => 1920 }});
    """


async def apply_stealth_scripts(context: BrowserContext, user_agent: str):
    """
    Apply stealth init scripts to the browser context to avoid bot detection.
    Overrides navigator properties, hides webdriver, spoofs plugins and screen.
    """
    await context.add_init_script(build_stealth_script(user_agent))
    logger.info("Stealth init script registered on browser context.")


async def block_resources(page: Page, resource_types: Iterable[str]):
    """
    Abort requests for the given resource types (images, fonts, media).
    Job cards only need the document and its scripts.
    """
    blocked = frozenset(resource_types)
    if not blocked:
        return

    async def _handle(route: Route):
        if route.request.resource_type in blocked:
            await route.abort()
        else:
            await route.continue_()

    await page.route("**/*", _handle)
