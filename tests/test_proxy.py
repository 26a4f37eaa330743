"""Proxy provider selection and how it lands in the context options."""

from linkedin_jobs.browser.launch import EXTRA_HTTP_HEADERS, build_context_options
from linkedin_jobs.browser.proxy import PROXY_PROVIDERS, get_proxy_config


def test_available_providers():
    assert set(PROXY_PROVIDERS) == {"none", "generic"}


def test_no_proxy_by_default(config):
    assert get_proxy_config(config) is None
    assert "proxy" not in build_context_options(config, "UA")


def test_generic_proxy_with_credentials(config):
    config.PROXY_PROVIDER = "Generic"
    config.PROXY_SERVER = "http://proxy.example.com:8080"
    config.PROXY_USERNAME = "scraper"
    config.PROXY_PASSWORD = "secret"

    assert get_proxy_config(config) == {
        "server": "http://proxy.example.com:8080",
        "username": "scraper",
        "password": "secret",
    }
    assert build_context_options(config, "UA")["proxy"]["server"] == "http://proxy.example.com:8080"


def test_generic_proxy_without_server_is_disabled(config):
    config.PROXY_PROVIDER = "generic"
    config.PROXY_SERVER = None

    assert get_proxy_config(config) is None


def test_unknown_provider_falls_back_to_no_proxy(config):
    config.PROXY_PROVIDER = "zenrows"

    assert get_proxy_config(config) is None


def test_stealth_adds_browser_headers(config):
    stealthy = build_context_options(config, "UA", stealth=True)
    plain = build_context_options(config, "UA", stealth=False)

    assert stealthy["extra_http_headers"] == EXTRA_HTTP_HEADERS
    assert "extra_http_headers" not in plain
    assert stealthy["user_agent"] == "UA"
