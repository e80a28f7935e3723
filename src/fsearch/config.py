"""Configuration for fsearch."""

from dataclasses import dataclass, field
from pathlib import Path


@dataclass(frozen=True)
class Config:
    """Application configuration."""

    cache_dir: Path = field(default_factory=lambda: Path.home() / ".cache" / "fsearch")
    backend_url: str = ""
    request_timeout: float = 10.0
    items_per_page: int = 20
    history_capacity: int = 20
    suggestion_limit: int = 5
    enable_synthetic_fallback: bool = True

    @property
    def db_path(self) -> Path:
        return self.cache_dir / "index.db"

    @property
    def remote_enabled(self) -> bool:
        return bool(self.backend_url.strip())
