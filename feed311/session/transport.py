"""Feed transports: where the raw CSV text comes from."""

from __future__ import annotations

from pathlib import Path
from typing import Protocol

from feed311.common.errors import ConfigError, TransportError
from feed311.common.http import HttpClient


class FeedTransport(Protocol):
    source: str

    def fetch_text(self) -> str: ...


class HttpFeedTransport:
    def __init__(self, url: str, client: HttpClient, *, encoding: str | None = "utf-8") -> None:
        self.source = url
        self.url = url
        self.client = client
        self.encoding = encoding

    def fetch_text(self) -> str:
        return self.client.get_text(self.url, encoding=self.encoding)


class FileFeedTransport:
    def __init__(self, path: Path, *, encoding: str = "utf-8") -> None:
        self.source = str(path)
        self.path = path
        self.encoding = encoding

    def fetch_text(self) -> str:
        try:
            return self.path.read_text(encoding=self.encoding)
        except (OSError, UnicodeDecodeError) as exc:
            raise TransportError(f"Failed to read feed file {self.path}: {exc}") from exc


def build_transport(feed_config: dict, client: HttpClient | None = None) -> FeedTransport:
    """Prefer a local path over a URL when both are configured."""
    encoding = feed_config.get("encoding") or "utf-8"
    path = feed_config.get("path")
    if path:
        return FileFeedTransport(Path(path), encoding=encoding)
    url = feed_config.get("url")
    if url:
        return HttpFeedTransport(url, client or HttpClient(), encoding=encoding)
    raise ConfigError("feed requires one of: url, path")
