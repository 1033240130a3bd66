"""Steady server entry point: ``python -m steady.core.server.main``."""

from __future__ import annotations

import logging
from ipaddress import ip_address

from steady.core.config.settings import Settings, get_settings
from steady.core.server.app import create_app

logger = logging.getLogger(__name__)

_LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def _is_loopback_host(host: str) -> bool:
    if host == "localhost":
        return True
    try:
        return ip_address(host).is_loopback
    except ValueError:
        return False


def _check_bind_address(settings: Settings) -> None:
    """Vitals are personal health data; there is no auth layer in front of the server."""
    if settings.steady_allow_insecure_bind or _is_loopback_host(settings.steady_host):
        return
    raise RuntimeError(
        f"Refusing to serve health data on non-loopback host {settings.steady_host!r}. "
        "Put an authenticating proxy in front and set STEADY_ALLOW_INSECURE_BIND=true."
    )


def run() -> None:
    """Start the Steady Health MCP server over Streamable HTTP."""
    settings = get_settings()
    logging.basicConfig(
        level=getattr(logging, settings.steady_log_level.upper(), logging.INFO),
        format=_LOG_FORMAT,
    )
    _check_bind_address(settings)

    server = create_app()
    logger.info(
        "Serving Steady Health on %s:%d (provider=%s)",
        settings.steady_host,
        settings.steady_port,
        settings.llm_provider,
    )
    server.run(transport="streamable-http", host=settings.steady_host, port=settings.steady_port)


if __name__ == "__main__":
    run()
