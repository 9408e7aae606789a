"""Centralised settings for the docbot snapshot service.

All runtime configuration is resolved here in one place.  Values can be
overridden via environment variables or a `.env` file in the project root
(loaded automatically when this module is imported).
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import load_dotenv

# Load .env from the project root (two levels up from this file)
_env_path = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(_env_path, override=False)

_DEFAULT_SOURCES = (
    ("handbook", "https://handbook.gitlab.com"),
    ("direction", "https://about.gitlab.com/direction/"),
)

_BROWSER_UA = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
    "AppleWebKit/537.36 (KHTML, like Gecko) "
    "Chrome/91.0.4472.124 Safari/537.36"
)


def _env_bool(name: str, default: bool) -> bool:
    raw = os.environ.get(name)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


@dataclass(frozen=True)
class Source:
    """A named crawl target.  Immutable once defined at startup."""

    id: str
    root_url: str
    max_pages: int = 100
    max_links_per_page: int = 5
    batch_size: int = 10


@dataclass
class Settings:
    # ------------------------------------------------------------------
    # Workspace / storage
    # ------------------------------------------------------------------
    workspace_dir: Path = field(
        default_factory=lambda: Path(
            os.environ.get("DOCBOT_WORKSPACE", Path.home() / ".docbot_data")
        )
    )

    @property
    def db_path(self) -> Path:
        """Absolute path to the SQLite database file."""
        return self.workspace_dir / "snapshots.db"

    @property
    def schema_path(self) -> Path:
        """Absolute path to the schema SQL file bundled with the package."""
        return Path(__file__).resolve().parent / "db" / "schema.sql"

    # ------------------------------------------------------------------
    # Fetcher
    # ------------------------------------------------------------------
    request_timeout: float = field(
        default_factory=lambda: float(os.environ.get("REQUEST_TIMEOUT", "15.0"))
    )
    user_agent: str = field(
        default_factory=lambda: os.environ.get("USER_AGENT", _BROWSER_UA)
    )
    politeness_min_delay: float = field(
        default_factory=lambda: float(os.environ.get("POLITENESS_MIN_DELAY", "1.0"))
    )
    politeness_max_delay: float = field(
        default_factory=lambda: float(os.environ.get("POLITENESS_MAX_DELAY", "2.0"))
    )
    retry_max_attempts: int = field(
        default_factory=lambda: int(os.environ.get("RETRY_MAX_ATTEMPTS", "3"))
    )
    retry_base_delay: float = field(
        default_factory=lambda: float(os.environ.get("RETRY_BASE_DELAY", "1.5"))
    )

    # ------------------------------------------------------------------
    # Crawler
    # ------------------------------------------------------------------
    max_pages: int = field(
        default_factory=lambda: int(os.environ.get("CRAWL_MAX_PAGES", "100"))
    )
    max_links_per_page: int = field(
        default_factory=lambda: int(os.environ.get("CRAWL_MAX_LINKS_PER_PAGE", "5"))
    )
    batch_size: int = field(
        default_factory=lambda: int(os.environ.get("CRAWL_BATCH_SIZE", "10"))
    )
    min_content_length: int = field(
        default_factory=lambda: int(os.environ.get("MIN_CONTENT_LENGTH", "100"))
    )
    max_text_length: int = field(
        default_factory=lambda: int(os.environ.get("MAX_TEXT_LENGTH", "5000"))
    )
    source_spec: str = field(
        default_factory=lambda: os.environ.get("DOCBOT_SOURCES", "")
    )

    # ------------------------------------------------------------------
    # Refresh
    # ------------------------------------------------------------------
    stale_action: str = field(
        default_factory=lambda: os.environ.get("STALE_ACTION", "refresh")
    )
    refresh_stale_after: float = field(
        default_factory=lambda: float(os.environ.get("REFRESH_STALE_AFTER", "3600"))
    )
    warn_stale_after: float = field(
        default_factory=lambda: float(os.environ.get("WARN_STALE_AFTER", "43200"))
    )
    refresh_on_startup: bool = field(
        default_factory=lambda: _env_bool("REFRESH_ON_STARTUP", True)
    )
    refresh_interval: float = field(
        default_factory=lambda: float(os.environ.get("REFRESH_INTERVAL", "0"))
    )

    # ------------------------------------------------------------------
    # Logging
    # ------------------------------------------------------------------
    log_level: str = field(
        default_factory=lambda: os.environ.get("LOG_LEVEL", "INFO")
    )

    def sources(self) -> tuple[Source, ...]:
        """Return the configured crawl targets.

        ``DOCBOT_SOURCES`` overrides the built-in list using the form
        ``id=url,id=url``.
        """
        pairs: list[tuple[str, str]] = []
        if self.source_spec.strip():
            for item in self.source_spec.split(","):
                if not item.strip():
                    continue
                source_id, sep, url = item.partition("=")
                if not sep or not source_id.strip() or not url.strip():
                    raise ValueError(f"Invalid DOCBOT_SOURCES entry: {item!r}")
                pairs.append((source_id.strip(), url.strip()))
        else:
            pairs = list(_DEFAULT_SOURCES)

        return tuple(
            Source(
                id=source_id,
                root_url=url,
                max_pages=self.max_pages,
                max_links_per_page=self.max_links_per_page,
                batch_size=self.batch_size,
            )
            for source_id, url in pairs
        )

    def ensure_workspace(self) -> None:
        """Create the workspace directory if it does not exist."""
        self.workspace_dir.mkdir(parents=True, exist_ok=True)


def configure_logging(level: str | None = None) -> None:
    """Install the process-wide log format used by the API and the CLI."""
    logging.basicConfig(
        level=(level or settings.log_level).upper(),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


# Module-level singleton - import this everywhere:
#   from docbot.config import settings
settings = Settings()
