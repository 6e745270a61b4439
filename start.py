#!/usr/bin/env python3
"""
PrivFinOS - Simple Launcher

This script handles:
1. Python version check (requires 3.9+)
2. Dependency verification
3. Database setup (creates the schema if missing)
4. Migration runner (applies pending migrations)
5. Flask server startup

Usage:
    python start.py

Equivalent to `privfinos serve` once the package is installed.
"""

import sys
from pathlib import Path

MIN_PYTHON = (3, 9)

REQUIRED = {
    "flask": "Flask",
    "flask_cors": "Flask-Cors",
    "dotenv": "python-dotenv",
    "pydantic": "pydantic",
    "pydantic_settings": "pydantic-settings",
    "structlog": "structlog",
    "faker": "Faker",
}

# Allow running from a source checkout without installing
sys.path.insert(0, str(Path(__file__).parent / "src"))


# =============================================================================
# STARTUP CHECKS
# =============================================================================

def check_python_version():
    """Verify a supported Python is installed"""
    print("[1/4] Checking Python version...", end=" ")
    version = ".".join(str(part) for part in sys.version_info[:3])

    if sys.version_info < MIN_PYTHON:
        print("[ERROR]")
        print()
        print("=" * 60)
        print(f"ERROR: Python {MIN_PYTHON[0]}.{MIN_PYTHON[1]} or higher is required")
        print("=" * 60)
        print(f"You are using Python {version}")
        sys.exit(1)

    print(f"[OK] Python {version}")


def check_dependencies():
    """Verify required packages are installed"""
    print("[2/4] Checking dependencies...", end=" ")

    missing = []
    for module, package in REQUIRED.items():
        try:
            __import__(module)
        except ImportError:
            missing.append(package)

    if missing:
        print("[ERROR]")
        print()
        print("=" * 60)
        print("ERROR: Missing required packages")
        print("=" * 60)
        print()
        print("Missing packages:")
        for pkg in missing:
            print(f"  - {pkg}")
        print()
        print("To install all dependencies, run:")
        print("  pip install -e .")
        sys.exit(1)

    print("[OK]")


def setup_database(db):
    """Create the schema if needed and apply pending migrations"""
    from privfinos.migration_runner import run_all_pending
    from privfinos.schema import create_database

    print("[3/4] Preparing database...", end=" ")
    if not create_database(db):
        print("[ERROR]")
        print()
        print("Failed to create database. Check error messages above.")
        sys.exit(1)
    print(f"[OK] {db.url}")

    print("[4/4] Checking for migrations...", end=" ")
    applied = run_all_pending(db)
    if applied > 0:
        print(f"[OK] Applied {applied} migration(s)")
    else:
        print("[OK] No pending migrations")


def start_flask_server(settings, db):
    """Launch the Flask API server"""
    from privfinos.api import create_app

    app = create_app(settings, db)

    print()
    print("=" * 60)
    print("PrivFinOS is running!")
    print("=" * 60)
    print()
    print(f"  Server: http://{settings.host}:{settings.port}/api")
    print("  Press Ctrl+C to stop the server")
    print()

    app.run(host=settings.host, port=settings.port, debug=False, use_reloader=False)


def main():
    """Main entry point"""
    print()
    print("=" * 60)
    print("PrivFinOS - Personal Finance API")
    print("=" * 60)
    print()

    check_python_version()
    check_dependencies()

    from privfinos.cli import load_settings
    from privfinos.db import Database
    from privfinos.logger import configure_logging

    settings = load_settings()
    configure_logging(settings.logging_level, json_logs=settings.is_production)

    try:
        with Database(settings.database_url) as db:
            setup_database(db)
            start_flask_server(settings, db)
    except KeyboardInterrupt:
        print()
        print()
        print("=" * 60)
        print("Server stopped. Thank you for using PrivFinOS!")
        print("=" * 60)
        print()


if __name__ == "__main__":
    main()
