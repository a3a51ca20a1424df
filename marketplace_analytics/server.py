"""
API Server Launcher

Runs the app under uvicorn with options taken from ``ServerSettings`` and
``LoggingSettings``. Command line flags override single values.

Usage:
    Development:  marketplace-api --dev
    Production:   marketplace-api
"""

import argparse
from typing import Any, Dict, List, Optional

import uvicorn

from marketplace_analytics.config import Settings, get_settings

APP_PATH = "marketplace_analytics.main:app"


def uvicorn_options(
    settings: Settings,
    dev: bool = False,
    host: Optional[str] = None,
    port: Optional[int] = None,
) -> Dict[str, Any]:
    """
    Keyword arguments for ``uvicorn.run``.

    Development mode reloads on source changes, which uvicorn only allows
    with a single process. ``log_config`` is disabled so the app's
    structlog setup owns every handler.
    """
    server = settings.server
    options: Dict[str, Any] = {
        "host": host or server.host,
        "port": port or server.port,
        "log_level": settings.logging.level.lower(),
        "log_config": None,
        "access_log": True,
        "proxy_headers": server.proxy_headers,
        "forwarded_allow_ips": "*" if server.proxy_headers else None,
        "server_header": False,
    }

    if dev:
        options.update(reload=True, reload_dirs=["marketplace_analytics"], log_level="debug")
    else:
        options["workers"] = server.workers

    return options


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Marketplace Analytics API Server")
    parser.add_argument("--dev", action="store_true", help="Run with auto-reload and debug logging")
    parser.add_argument("--host", help="Bind address (default: API_HOST)")
    parser.add_argument("--port", type=int, help="Bind port (default: API_PORT)")
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> None:
    args = parse_args(argv)
    options = uvicorn_options(get_settings(), dev=args.dev, host=args.host, port=args.port)
    uvicorn.run(APP_PATH, **options)


if __name__ == "__main__":
    main()
