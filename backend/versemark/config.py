"""
Application Configuration

Module-level settings for the annotation API and the reader client. Every
value can be overridden through an environment variable; services also accept
the same settings as constructor arguments.
"""

import os

# SQLite file holding the annotations table
DB_PATH = os.environ.get("VERSEMARK_DB_PATH", "data/annotations.db")

# Remote scripture text provider (books and chapters)
TEXT_PROVIDER_URL = os.environ.get("VERSEMARK_TEXT_PROVIDER_URL", "https://bolls.life")

# Lexicon site scraped for Strong's definitions
LEXICON_URL = os.environ.get(
    "VERSEMARK_LEXICON_URL", "https://www.blueletterbible.org"
)

# Base URL the reader client uses to reach this API
API_URL = os.environ.get("VERSEMARK_API_URL", "http://localhost:8000")

# Outbound HTTP calls fail instead of hanging after this many seconds
HTTP_TIMEOUT_SECONDS = float(os.environ.get("VERSEMARK_HTTP_TIMEOUT", "10"))

# Initial reader scope. The provider numbers John as book 43.
DEFAULT_TRANSLATION = "NASB95"
DEFAULT_BOOK_ID = 43
DEFAULT_CHAPTER = 1
