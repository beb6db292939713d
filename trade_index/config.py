import os

DATABASE_URL = os.getenv("DATABASE_URL")
REDIS_URL = os.getenv("REDIS_URL")
LEDGER_CACHE_TTL = int(os.getenv("LEDGER_CACHE_TTL", "3600"))

DEFAULT_PAGE_LIMIT = int(os.getenv("DEFAULT_PAGE_LIMIT", "10"))
MAX_PAGE_LIMIT = int(os.getenv("MAX_PAGE_LIMIT", "200"))

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

# Overrides the request's own base URL when building page links
BASE_URL = os.getenv("BASE_URL")
