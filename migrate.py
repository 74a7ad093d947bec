# migrate.py
# Creates the repositories, users, pull_requests and reviews tables.
# Idempotent: existing tables and indexes are left alone.
from gh_importer.config import LOG_LEVEL, SQL_ECHO
from gh_importer.logging_setup import setup_logging
from gh_importer.db import engine, create_schema


def main():
    setup_logging(LOG_LEVEL, sql_echo=SQL_ECHO)
    print(f"Creating schema on {engine.url.render_as_string(hide_password=True)}...")
    create_schema()
    print("Schema ready.")


if __name__ == "__main__":
    main()
