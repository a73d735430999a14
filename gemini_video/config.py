import logging
import os
import re
from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic_settings import BaseSettings

from gemini_video.best_effort import best_effort
from gemini_video.exceptions import ConfigError

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "gemini-2.5-flash"
MAX_INLINE_FILE_BYTES = 20 * 1024 * 1024
API_KEY_ENV = "GOOGLE_API_KEY"

# export GOOGLE_API_KEY=value, "value" or 'value'; a trailing comment or ; ends an unquoted value
_EXPORT_LINE = re.compile(
    r"""^\s*export\s+GOOGLE_API_KEY\s*=\s*(?P<value>"[^"]*"|'[^']*'|[^\s#;]+)""",
    re.MULTILINE,
)


class Settings(BaseSettings):
    google_api_key: str = ""
    gemini_api_key: str = ""
    gemini_api: str = ""
    gemini_model: str = ""
    shell_profile_path: Path = Path("~/.zshrc")
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    mcp_transport: str = "stdio"
    mcp_host: str = "127.0.0.1"
    mcp_port: int = 9000

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "extra": "ignore"}

    @field_validator("log_level", mode="before")
    @classmethod
    def _normalize_log_level(cls, value):
        if isinstance(value, str):
            return value.strip().upper()
        return value


@lru_cache
def get_settings() -> Settings:
    return Settings()


class AppConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    api_key: str = Field(min_length=1)
    model: str = Field(min_length=1)
    max_inline_file_bytes: int = Field(default=MAX_INLINE_FILE_BYTES, gt=0)


def parse_exported_api_key(text: str) -> str | None:
    """Return the last ``export GOOGLE_API_KEY=...`` value in a shell profile."""
    value = None
    for match in _EXPORT_LINE.finditer(text):
        candidate = match.group("value").strip("\"'").strip()
        if candidate:
            value = candidate
    return value


def scrape_shell_profile(path: Path) -> str | None:
    """Best-effort read of an exported API key from a shell profile. Never raises."""
    profile = path.expanduser()
    found = None
    with best_effort(f"read of shell profile {profile}"):
        if not profile.is_file():
            logger.debug("Shell profile %s not present", profile)
            return None
        found = parse_exported_api_key(profile.read_text(encoding="utf-8", errors="replace"))
    return found


def resolve_api_key(settings: Settings) -> str | None:
    for candidate in (settings.google_api_key, settings.gemini_api_key, settings.gemini_api):
        if candidate and candidate.strip():
            return candidate.strip()

    scraped = scrape_shell_profile(settings.shell_profile_path)
    if scraped:
        logger.info("Loaded %s from %s", API_KEY_ENV, settings.shell_profile_path)
        os.environ[API_KEY_ENV] = scraped
    return scraped


def resolve_model(settings: Settings) -> str:
    model = settings.gemini_model.strip()
    return model or DEFAULT_MODEL


def load_config() -> AppConfig:
    """Build the process-wide configuration, failing fast without an API key."""
    settings = get_settings()
    api_key = resolve_api_key(settings)
    if not api_key:
        raise ConfigError(
            f"Environment variable {API_KEY_ENV} must be set for the Gemini video MCP server."
        )
    return AppConfig(api_key=api_key, model=resolve_model(settings))
