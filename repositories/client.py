"""
Supabase client initialization.

This module contains *only* the database connection setup. Repository
modules call `get_supabase()` to obtain the shared client and `execute()` to
run a query with uniform error handling.

Environment variables required (when no client was installed explicitly):
- SUPABASE_URL: Your Supabase project URL
- SUPABASE_KEY: Your Supabase API key (use a server-side key only on the backend)
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Optional

from dotenv import load_dotenv
from postgrest.exceptions import APIError
from supabase import Client, create_client

from domain.errors import DuplicateRecordError, PersistenceError

# Load environment variables from the project's .env file
env_path = Path(__file__).parent.parent / ".env"
load_dotenv(dotenv_path=env_path)

# PostgreSQL unique_violation
UNIQUE_VIOLATION = "23505"

_client: Optional[Client] = None


def use_client(client: Any) -> None:
    """Install the client every repository will use (app startup, tests)."""

    global _client
    _client = client


def connect(url: Optional[str], key: Optional[str]) -> Client:
    """Create a Supabase client from explicit credentials and install it."""

    if not url:
        raise RuntimeError(
            "Missing environment variable: SUPABASE_URL. "
            "Set SUPABASE_URL to your Supabase project URL."
        )
    if not key:
        raise RuntimeError(
            "Missing environment variable: SUPABASE_KEY. "
            "Set SUPABASE_KEY to your Supabase API key."
        )
    client = create_client(url, key)
    use_client(client)
    return client


def get_supabase() -> Client:
    """Return the installed client, connecting from the environment on first use."""

    if _client is None:
        return connect(os.getenv("SUPABASE_URL"), os.getenv("SUPABASE_KEY"))
    return _client


def execute(query: Any, action: str) -> Any:
    """
    Execute a PostgREST query builder and normalize failures.

    Raises:
        DuplicateRecordError: on a unique-constraint violation
        PersistenceError: on any other store error
    """

    try:
        response = query.execute()
    except APIError as e:
        if str(getattr(e, "code", "")) == UNIQUE_VIOLATION:
            raise DuplicateRecordError(f"Failed to {action}: record already exists") from e
        raise PersistenceError(f"Failed to {action}: {e}") from e

    error = getattr(response, "error", None)
    if error:
        if str(getattr(error, "code", "")) == UNIQUE_VIOLATION:
            raise DuplicateRecordError(f"Failed to {action}: record already exists")
        raise PersistenceError(f"Failed to {action}: {error}")
    return response


def rows(response: Any) -> list:
    return getattr(response, "data", None) or []


__all__ = ["get_supabase", "use_client", "connect", "execute", "rows"]
