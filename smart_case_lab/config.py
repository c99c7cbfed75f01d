"""Runtime settings, read from the environment (and a local .env file)."""

import os
from pathlib import Path

from dotenv import load_dotenv

ROOT = Path(__file__).parent.parent.resolve()
load_dotenv(ROOT / ".env")

DRAFT_DIR = Path(os.environ.get("SMART_CASE_LAB_DRAFT_DIR", Path.home() / ".smart_case_lab")).expanduser()
DRAFT_KEY = "smartCaseLabDraft"

MESSAGE_TTL = float(os.environ.get("SMART_CASE_LAB_MESSAGE_TTL", "3"))
LOG_LEVEL = os.environ.get("SMART_CASE_LAB_LOG_LEVEL", "INFO").upper()

JSON_EXPORT_NAME = "test_cases.json"
CSV_EXPORT_NAME = "test_cases_structured.csv"
API_TEMPLATE_EXPORT_NAME = "postman_collection.json"

JSON_MIME = "application/json"
CSV_MIME = "text/csv;charset=utf-8;"

JSON_FILE_TYPES = ("application/json", "text/json")
