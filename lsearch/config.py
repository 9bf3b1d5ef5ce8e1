"""Centralized configuration for the lsearch backend.

Typed constants for database, notebook sync, parser limits and API settings.
Environment variable overrides use safe defaults so the app starts without
extra env configuration.
"""

from __future__ import annotations

import os

from dotenv import load_dotenv

# Values below read the environment once; a .env file is loaded first
load_dotenv()

# --- App ---
APP_VERSION: str = "1.0.0"

# --- Database ---
DB_POOL_SIZE: int = int(os.getenv("LSEARCH_DB_POOL_SIZE", "5"))
DB_POOL_TIMEOUT: float = float(os.getenv("LSEARCH_DB_POOL_TIMEOUT", "5.0"))
DB_CONNECT_TIMEOUT: float = float(os.getenv("LSEARCH_DB_CONNECT_TIMEOUT", "30.0"))
DB_TEMP_CONN_MAX: int = int(os.getenv("LSEARCH_DB_TEMP_CONN_MAX", "10"))
DB_RETRY_MAX: int = int(os.getenv("LSEARCH_DB_RETRY_MAX", "5"))
DB_RETRY_BASE_DELAY: float = float(os.getenv("LSEARCH_DB_RETRY_BASE_DELAY", "0.1"))
DB_RETRY_MAX_DELAY: float = float(os.getenv("LSEARCH_DB_RETRY_MAX_DELAY", "2.0"))
DB_RETRY_JITTER: float = float(os.getenv("LSEARCH_DB_RETRY_JITTER", "0.1"))

# --- Notebook tool (child-process JSON-RPC) ---
NOTEBOOK_ID: str = os.getenv("NOTEBOOKLM_NOTEBOOK_ID", "03df5b37-f1ea-40d5-b9c2-79a20a047a43")
NOTEBOOK_SERVER_COMMAND: str = os.getenv("MCP_SERVER_PATH", "notebooklm-mcp")
NOTEBOOK_TIMEOUT_SECONDS: float = float(os.getenv("LSEARCH_NOTEBOOK_TIMEOUT", "90"))
NOTEBOOK_HANDSHAKE_DELAY: float = float(os.getenv("LSEARCH_NOTEBOOK_HANDSHAKE_DELAY", "0.2"))
NOTEBOOK_QUERY_TOOL: str = "notebook_query"
NOTEBOOK_PROTOCOL_VERSION: str = "2024-11-05"
NOTEBOOK_CLIENT_NAME: str = "lsearch"

SYNC_QUERY: str = (
    "List all commands and tools mentioned in the sources. "
    "For each one, provide the name and a brief description. Return as a list."
)
TEST_QUERY: str = "List 5 Linux commands"
DEFAULT_FREE_QUERY: str = "List commands"
SYNC_MIN_ANSWER_CHARS: int = 50

# --- Extraction ---
COMMAND_MIN_LEN: int = 2
COMMAND_MAX_LEN: int = 25
DESCRIPTION_MIN_LEN: int = 5
DESCRIPTION_MAX_LEN: int = 400
MAX_EXAMPLES: int = 5
PARSER_TAG_LIMIT: int = 8
UPLOAD_TAG_LIMIT: int = 5
DEFAULT_EXAMPLE_DESCRIPTION: str = "Ejemplo de uso"
DEFAULT_FALLBACK_DESCRIPTION: str = "Herramienta de sistema"

# --- Maintenance ---
REPOPULATE_MAX_WORKERS: int = int(os.getenv("LSEARCH_REPOPULATE_WORKERS", "8"))

# --- API ---
API_ERROR_SAMPLE: int = 5
API_RAW_TEXT_PREVIEW: int = 2000
API_HOST: str = os.getenv("LSEARCH_HOST", "127.0.0.1")
API_PORT: int = int(os.getenv("LSEARCH_PORT", "8000"))
API_CORS_ORIGINS: list[str] = [
    origin.strip()
    for origin in os.getenv(
        "LSEARCH_CORS_ORIGINS", "http://localhost:3000,http://127.0.0.1:3000"
    ).split(",")
    if origin.strip()
]
