"""Command line entry point: ``eatsift [--config FILE] [--backend NAME] ...``."""

from __future__ import annotations

import argparse
import os
import socket
import sys
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from eatsift.config.settings import Settings

APP_FACTORY = "eatsift.api.app:create_app"

# CLI option -> environment variable read by worker processes.
_WORKER_ENV = {
    "backend": "EATSIFT_SEARCH__BACKEND",
    "log_level": "EATSIFT_OBSERVABILITY__LOG_LEVEL",
}


def build_parser() -> argparse.ArgumentParser:
    from eatsift import __version__

    parser = argparse.ArgumentParser(prog="eatsift", description="EatSift restaurant search service")
    parser.add_argument("-c", "--config", help="YAML configuration file")
    parser.add_argument("-b", "--backend", choices=["relational", "typesense"], help="Search backend")
    parser.add_argument("--host", help="Bind address")
    parser.add_argument("-p", "--port", type=int, help="Bind port")
    parser.add_argument("-w", "--workers", type=int, help="Worker processes")
    parser.add_argument("--reload", action="store_true", help="Reload on code changes (development only)")
    parser.add_argument("--log-level", choices=["debug", "info", "warning", "error"])
    parser.add_argument("--version", action="version", version=f"EatSift {__version__}")
    return parser


def load_cli_settings(args: argparse.Namespace) -> Settings:
    """Settings from ``--config`` (or the environment) with the CLI flags applied on top."""
    from eatsift.config.settings import Settings

    if args.config:
        path = Path(args.config)
        if not path.is_file():
            raise SystemExit(f"eatsift: config file not found: {path}")
        settings = Settings.from_yaml(path)
    else:
        settings = Settings()

    if args.backend:
        settings.search.backend = args.backend
    if args.log_level:
        settings.observability.log_level = args.log_level
    if args.host:
        settings.server.host = args.host
    if args.port:
        settings.server.port = args.port
    if args.workers:
        settings.server.workers = args.workers
    if args.reload:
        settings.server.workers = 1
    return settings


def worker_environment(args: argparse.Namespace) -> dict[str, str]:
    """Variables a freshly spawned worker needs to rebuild the same settings."""
    env = {var: getattr(args, opt) for opt, var in _WORKER_ENV.items() if getattr(args, opt)}
    if args.config:
        env["EATSIFT_CONFIG_FILE"] = str(Path(args.config).resolve())
    return env


def port_in_use(host: str, port: int) -> bool:
    probe_host = "127.0.0.1" if host == "0.0.0.0" else host
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        try:
            sock.bind((probe_host, port))
        except OSError:
            return True
    return False


def main(argv: list[str] | None = None) -> None:
    args = build_parser().parse_args(argv)
    settings = load_cli_settings(args)
    server = settings.server

    if port_in_use(server.host, server.port):
        print(f"eatsift: port {server.port} is already in use (try 'lsof -i :{server.port}')", file=sys.stderr)
        raise SystemExit(1)

    import uvicorn

    log_level = settings.observability.log_level.lower()
    if args.reload or server.workers > 1:
        # Workers import the app factory themselves, so overrides travel through the environment.
        os.environ.update(worker_environment(args))
        uvicorn.run(
            APP_FACTORY,
            factory=True,
            host=server.host,
            port=server.port,
            workers=server.workers,
            reload=args.reload,
            log_level=log_level,
        )
        return

    from eatsift.api.app import create_app

    uvicorn.run(create_app(settings), host=server.host, port=server.port, log_level=log_level)


if __name__ == "__main__":
    main()
