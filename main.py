# main.py
import logging
from gh_importer.config import (
    GITHUB_TOKEN, ORG, ONLY_REPO, PAGE_SIZE, REVIEW_PAGE_SIZE, MAX_RETRIES,
    LOG_LEVEL, SQL_ECHO,
)
from gh_importer.logging_setup import setup_logging
from gh_importer.db import SessionLocal, create_schema
from gh_importer.github_api import GitHubClient
from gh_importer.retry import RateLimitedFetcher
from gh_importer.crawler import Crawler

logger = logging.getLogger(__name__)


def run_import():
    """Build the client, fetcher and crawler and run one import. Returns ImportStats."""
    client = GitHubClient(GITHUB_TOKEN)
    fetcher = RateLimitedFetcher(client, max_retries=MAX_RETRIES)

    session = SessionLocal()
    try:
        crawler = Crawler(
            client, fetcher, session,
            org=ORG,
            only_repo=ONLY_REPO,
            page_size=PAGE_SIZE,
            review_page_size=REVIEW_PAGE_SIZE,
        )
        return crawler.run()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


def main():
    setup_logging(LOG_LEVEL, sql_echo=SQL_ECHO)

    print("Initializing DB schema (if needed)...")
    create_schema()

    print(f"Starting import for {ONLY_REPO or 'org ' + ORG}...")
    try:
        stats = run_import()
    except Exception:
        logger.exception("Import aborted")
        raise
    print(
        f"Done. Repositories: {stats.repositories}, "
        f"pull requests: {stats.pull_requests}, reviews: {stats.reviews}"
    )


if __name__ == "__main__":
    main()
