"""CLI entry point for the config manager server."""

import argparse
import os


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(
        prog="macconfigurator-server",
        description="Versioned application configuration manager",
    )
    parser.add_argument("--host", default=None, help="Bind host (default: settings, 0.0.0.0)")
    parser.add_argument("--port", type=int, default=None, help="Bind port (default: settings, 8080)")
    parser.add_argument(
        "--memory",
        action="store_true",
        help="Use the volatile in-memory storage backend (nothing persists across restarts)",
    )
    parser.add_argument("--database-url", default=None, help="SQLAlchemy async database URL")
    parser.add_argument("--log-level", default=None, help="debug/info/warning/error")
    args = parser.parse_args(argv)

    # Settings are read from the environment at import time
    if args.memory:
        os.environ["CONFIGURATOR_STORAGE_BACKEND"] = "memory"
    elif args.database_url:
        os.environ["CONFIGURATOR_STORAGE_BACKEND"] = "database"
        os.environ["CONFIGURATOR_DATABASE_URL"] = args.database_url
    if args.log_level:
        os.environ["CONFIGURATOR_LOG_LEVEL"] = args.log_level

    import uvicorn

    from macconfigurator.config import Settings

    config = Settings()
    uvicorn.run(
        "macconfigurator.main:create_default_app",
        factory=True,
        host=args.host or config.host,
        port=args.port or config.port,
    )


if __name__ == "__main__":
    main()
