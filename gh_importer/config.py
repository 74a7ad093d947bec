# gh_importer/config.py
import os

PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
DB_FILE = os.path.join(PROJECT_ROOT, "db", "github.sqlite3")   # default SQLite file

GITHUB_TOKEN = os.environ.get("GITHUB_TOKEN")
ORG = os.environ.get("ORG", "vercel")                 # GitHub organization to import
ONLY_REPO = os.environ.get("ONLY_REPO") or None       # e.g. "vercel/next.js"

DATABASE_URL = os.environ.get("DATABASE_URL", f"sqlite:///{DB_FILE}")
SQL_ECHO = os.environ.get("SQL_ECHO", "").lower() in ("1", "true", "yes")

PAGE_SIZE = int(os.environ.get("PAGE_SIZE", "100"))
REVIEW_PAGE_SIZE = int(os.environ.get("REVIEW_PAGE_SIZE", "100"))
MAX_RETRIES = int(os.environ.get("MAX_RETRIES", "5"))

LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")
