"""
PrivFinOS - Command Line Interface

Subcommands:
    privfinos serve                       Start the API server
    privfinos init-db [--reset]           Create (or drop and recreate) the schema
    privfinos migrate [--list]            Apply pending migrations, or list them
    privfinos seed [--transactions N]     Insert default categories/accounts

Settings come from the environment and the .env file chain (see
privfinos.config).
"""

import argparse
import sys

from pydantic import ValidationError

from privfinos import API_NAME, __version__
from privfinos.config import get_settings
from privfinos.db import Database
from privfinos.logger import configure_logging, get_logger
from privfinos.migration_runner import list_migrations, run_all_pending
from privfinos.schema import create_database, reset_database, verify_schema
from privfinos.seed import seed_database

log = get_logger(__name__)


def load_settings():
    """Load settings, exiting with a readable message when they are invalid."""
    try:
        return get_settings()
    except ValidationError as e:
        print("[ERROR] Invalid environment configuration:")
        for error in e.errors():
            field = ".".join(str(part) for part in error["loc"]).upper()
            print(f"  - {field}: {error['msg']}")
        sys.exit(1)


def prepare_database(db):
    """Create missing tables and apply pending migrations. Returns migrations applied."""
    if not create_database(db):
        print("[ERROR] Failed to create database schema. Check error messages above.")
        sys.exit(1)
    return run_all_pending(db)


# =============================================================================
# COMMANDS
# =============================================================================

def cmd_serve(settings, args):
    from privfinos.api import create_app

    host = args.host or settings.host
    port = args.port or settings.port

    with Database(settings.database_url) as db:
        applied = prepare_database(db)
        if applied:
            print(f"[OK] Applied {applied} migration(s)")

        app = create_app(settings, db)
        print("=" * 60)
        print(f"{API_NAME} v{__version__} is running ({settings.app_env})")
        print("=" * 60)
        print(f"  Server: http://{host}:{port}/api")
        print("  Press Ctrl+C to stop the server")
        print()
        log.info("server_starting", host=host, port=port, environment=settings.app_env)
        app.run(host=host, port=port, debug=False, use_reloader=False)


def cmd_init_db(settings, args):
    with Database(settings.database_url) as db:
        if args.reset:
            print("[WARNING] Dropping all tables...")
            ok = reset_database(db)
        else:
            ok = create_database(db)

        if not ok or not verify_schema(db):
            print("[ERROR] Database initialization failed")
            sys.exit(1)

        applied = run_all_pending(db)
        print(f"[OK] Database ready at {db.url} ({applied} migration(s) applied)")


def cmd_migrate(settings, args):
    with Database(settings.database_url) as db:
        create_database(db)
        if args.list:
            for migration in list_migrations(db):
                print(f"  {migration['version']:03d}  {migration['status']:<8} {migration['description']}")
            return

        applied = run_all_pending(db)
        if applied:
            print(f"[OK] Applied {applied} migration(s)")
        else:
            print("[OK] No pending migrations")


def cmd_seed(settings, args):
    if args.transactions < 0:
        print("[ERROR] --transactions must be zero or more")
        sys.exit(1)

    with Database(settings.database_url) as db:
        prepare_database(db)
        summary = seed_database(db, transactions=args.transactions, seed=args.random_seed)

    print("Summary:")
    for key, value in summary.items():
        print(f"  - {key.replace('_', ' ').capitalize()}: {value}")


def build_parser():
    parser = argparse.ArgumentParser(
        prog="privfinos",
        description=f"{API_NAME} - personal finance REST API",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument(
        "--json-logs",
        action="store_true",
        help="Render logs as JSON lines (default in production)",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    serve = subparsers.add_parser("serve", help="Start the API server")
    serve.add_argument("--host", help="Bind address (default: HOST setting)")
    serve.add_argument("--port", type=int, help="Port (default: PORT setting)")
    serve.set_defaults(handler=cmd_serve)

    init_db = subparsers.add_parser("init-db", help="Create the database schema")
    init_db.add_argument("--reset", action="store_true", help="Drop all tables first (destroys data)")
    init_db.set_defaults(handler=cmd_init_db)

    migrate = subparsers.add_parser("migrate", help="Apply pending migrations")
    migrate.add_argument("--list", action="store_true", help="List migrations and their status")
    migrate.set_defaults(handler=cmd_migrate)

    seed = subparsers.add_parser("seed", help="Insert default categories and accounts")
    seed.add_argument("--transactions", type=int, default=0, help="Also generate N demo transactions")
    seed.add_argument("--random-seed", type=int, help="Seed for reproducible demo transactions")
    seed.set_defaults(handler=cmd_seed)

    return parser


def main(argv=None):
    """Main entry point for the CLI."""
    args = build_parser().parse_args(argv)
    settings = load_settings()
    configure_logging(settings.logging_level, json_logs=args.json_logs or settings.is_production)

    try:
        args.handler(settings, args)
    except KeyboardInterrupt:
        print()
        print("Server stopped.")
    except Exception as e:
        log.exception("command_failed", command=args.command, error=str(e))
        sys.exit(1)


if __name__ == "__main__":
    main()
