"""Data models for the scraper pipeline."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, List, Optional


@dataclass
class RawPage:
    """The raw HTTP response for a single URL fetch."""

    url: str
    html: str
    status_code: int


@dataclass(frozen=True)
class PageRecord:
    """One crawled page as stored inside a snapshot."""

    url: str
    title: str
    text: str

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "PageRecord":
        return cls(
            url=data["url"],
            title=data.get("title") or "Untitled",
            text=data.get("text", ""),
        )


@dataclass
class ExtractResult:
    """Outcome of extracting a :class:`RawPage`.

    ``page`` is ``None`` when the page had too little content to keep; such
    pages contribute no links either.
    """

    page: Optional[PageRecord]
    links: List[str] = field(default_factory=list)

    @property
    def skipped(self) -> bool:
        return self.page is None
