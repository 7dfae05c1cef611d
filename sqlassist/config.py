"""
Runtime settings for the assistant.

Values come from the process environment. A ``.env`` file in the working
directory is loaded first when present; variables already set in the
environment win.
"""
from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv

DEFAULT_UPLOADS_DIR = os.path.abspath(os.path.join(os.getcwd(), "uploads"))
DEFAULT_WAREHOUSES = ["COMPUTE_WH", "WH_XS"]


def _env(name: str, default: Optional[str] = None) -> Optional[str]:
    val = os.environ.get(name)
    if val is None or val == "":
        return default
    return val


def _env_list(name: str, default: List[str]) -> List[str]:
    raw = os.environ.get(name)
    if not raw:
        return list(default)
    return [v.strip() for v in raw.split(",") if v.strip()]


@dataclass
class SnowflakeConfig:
    account: Optional[str] = None
    user: Optional[str] = None
    role: str = "PUBLIC"
    database: Optional[str] = None
    schema: Optional[str] = None
    authenticator: str = "externalbrowser"
    # tried in order when SHOW WAREHOUSES does not yield a usable warehouse
    warehouses: List[str] = field(default_factory=lambda: list(DEFAULT_WAREHOUSES))
    login_timeout_sec: int = 120

    def connect_params(self) -> dict:
        params = {
            "account": self.account,
            "user": self.user,
            "role": self.role,
            "database": self.database,
            "schema": self.schema,
            "authenticator": self.authenticator,
            "login_timeout": self.login_timeout_sec,
        }
        return {k: v for k, v in params.items() if v is not None}


@dataclass
class Settings:
    uploads_dir: str = DEFAULT_UPLOADS_DIR
    openai_api_key: Optional[str] = None
    openai_model: str = "gpt-4o-mini"
    snowflake: SnowflakeConfig = field(default_factory=SnowflakeConfig)

    @classmethod
    def from_env(cls, env_file: Optional[str] = None) -> "Settings":
        dotenv_path = Path(env_file) if env_file else Path(os.getcwd()) / ".env"
        if dotenv_path.exists():
            load_dotenv(dotenv_path=dotenv_path, override=False)
        snowflake = SnowflakeConfig(
            account=_env("SNOWFLAKE_ACCOUNT"),
            user=_env("SNOWFLAKE_USER"),
            role=_env("SNOWFLAKE_ROLE", "PUBLIC"),
            database=_env("SNOWFLAKE_DATABASE"),
            schema=_env("SNOWFLAKE_SCHEMA"),
            authenticator=_env("SNOWFLAKE_AUTHENTICATOR", "externalbrowser"),
            warehouses=_env_list("SNOWFLAKE_WAREHOUSES", DEFAULT_WAREHOUSES),
            login_timeout_sec=int(_env("SNOWFLAKE_LOGIN_TIMEOUT", "120")),
        )
        return cls(
            uploads_dir=os.path.abspath(_env("SQLASSIST_UPLOADS_DIR", DEFAULT_UPLOADS_DIR)),
            openai_api_key=_env("OPENAI_API_KEY"),
            openai_model=_env("OPENAI_MODEL", "gpt-4o-mini"),
            snowflake=snowflake,
        )
