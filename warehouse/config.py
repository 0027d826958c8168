"""
Environment-driven warehouse connection configuration.
"""

from __future__ import annotations

import os
from pathlib import Path

from sqlalchemy.engine import URL

SNOWFLAKE_ENV_KEYS = (
    "SNOWFLAKE_ACCOUNT",
    "SNOWFLAKE_USER",
    "SNOWFLAKE_PASSWORD",
    "SNOWFLAKE_WAREHOUSE",
    "SNOWFLAKE_DATABASE",
    "SNOWFLAKE_SCHEMA",
    "SNOWFLAKE_ROLE",
)


def load_env_files() -> None:
    """
    Load simple KEY=VALUE pairs from `.env` and `.env.local` (if present).
    Existing process environment variables are not overwritten.
    """

    project_root = Path(__file__).resolve().parents[1]
    for filename in (".env", ".env.local"):
        env_path = project_root / filename
        if not env_path.exists():
            continue

        for raw_line in env_path.read_text(encoding="utf-8").splitlines():
            line = raw_line.strip()
            if not line or line.startswith("#") or "=" not in line:
                continue

            key, value = line.split("=", 1)
            key = key.strip()
            value = value.strip().strip('"').strip("'")
            if key and key not in os.environ:
                os.environ[key] = value


def build_snowflake_url() -> URL | None:
    """
    Assemble a ``snowflake://`` URL from the SNOWFLAKE_* variables.

    Returns None unless account, user and password are all set.
    """

    account = os.getenv("SNOWFLAKE_ACCOUNT")
    user = os.getenv("SNOWFLAKE_USER")
    password = os.getenv("SNOWFLAKE_PASSWORD")
    if not (account and user and password):
        return None

    database = os.getenv("SNOWFLAKE_DATABASE")
    schema = os.getenv("SNOWFLAKE_SCHEMA")
    path = "/".join(part for part in (database, schema) if part) or None

    query: dict[str, str] = {}
    for key, env_name in (("warehouse", "SNOWFLAKE_WAREHOUSE"), ("role", "SNOWFLAKE_ROLE")):
        value = os.getenv(env_name)
        if value:
            query[key] = value

    return URL.create(
        "snowflake",
        username=user,
        password=password,
        host=account,
        database=path,
        query=query,
    )


def resolve_warehouse_url() -> str | URL:
    """
    Resolve the warehouse URL using environment variables and optional .env files.

    Priority:
    1) WAREHOUSE_URL
    2) SNOWFLAKE_* connection parts
    """

    load_env_files()

    direct_url = os.getenv("WAREHOUSE_URL")
    if direct_url:
        return direct_url

    snowflake_url = build_snowflake_url()
    if snowflake_url is not None:
        return snowflake_url

    raise RuntimeError(
        "No warehouse configured. Set WAREHOUSE_URL, or configure "
        "SNOWFLAKE_ACCOUNT / SNOWFLAKE_USER / SNOWFLAKE_PASSWORD."
    )
