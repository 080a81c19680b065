"""File-backed caches for contribution detail and analyses.

Entries are JSON documents laid out one file per contribution::

    <root>/conversations/<owner>/<repo>/<type>/<number>.json
    <root>/analysis/<actor>/<owner>/<repo>/<type>/<number>.json

Each document holds ``{data, remote_updated_at, cached_at}``. An entry is a
hit only while the caller's known update time is no newer than the stored
one.
"""

import json
import logging
import os
import shutil
import tempfile
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Generic, TypeVar

from pydantic import BaseModel, Field, ValidationError

from ..ai.models import AnalysisRecord
from ..errors import ConfigurationError
from ..github_client.models import (
    ContributionDetail,
    ContributionLocator,
    ContributionType,
)
from ..utils.date_parser import parse_github_timestamp

logger = logging.getLogger(__name__)

T = TypeVar("T")

DETAIL_NAMESPACE = "conversations"
ANALYSIS_NAMESPACE = "analysis"


class CachedDetail(BaseModel):
    """A cached contribution detail document."""

    data: ContributionDetail
    remote_updated_at: datetime = Field(
        ..., description="Update time the detail declared when it was fetched"
    )
    cached_at: datetime = Field(..., description="When the entry was written")


class CachedAnalysis(BaseModel):
    """A cached analysis document."""

    data: AnalysisRecord
    remote_updated_at: datetime = Field(
        ..., description="Update time of the detail the analysis was made from"
    )
    cached_at: datetime = Field(..., description="When the entry was written")


def _is_fresh(stored: datetime, known_updated_at: datetime | None) -> bool:
    if known_updated_at is None:
        return True
    return parse_github_timestamp(known_updated_at) <= parse_github_timestamp(stored)


def _path_segment(value: str, label: str) -> str:
    """Return ``value`` if it names exactly one directory below its parent."""
    if value in ("", ".", "..") or "/" in value or "\\" in value:
        raise ValueError(f"Invalid {label} for a cache path: {value!r}")
    return value


def _subtree(
    base: Path,
    owner: str | None,
    repo: str | None,
    type: ContributionType | str | None,
    number: int | None,
) -> Path:
    """Resolve the directory (or file) selected by a partial identity."""
    parts = [
        _path_segment(owner, "owner") if owner is not None else None,
        _path_segment(repo, "repository") if repo is not None else None,
        ContributionType(type).value if type else None,
        number,
    ]
    path = base
    for index, part in enumerate(parts):
        if part is None:
            if any(later is not None for later in parts[index + 1 :]):
                raise ValueError(
                    "Cache clear filters must be given outermost first "
                    "(owner, repo, type, number)"
                )
            return path
        if index == len(parts) - 1:
            return path / f"{part}.json"
        path = path / str(part)
    return path


class _JsonCache(Generic[T]):
    """Shared storage mechanics for both caches."""

    entry_model: type[BaseModel]

    def __init__(self, base_path: Path):
        self.base_path = base_path

    def _entry_path(self, key: ContributionLocator) -> Path:
        return (
            self.base_path
            / _path_segment(key.owner, "owner")
            / _path_segment(key.repo, "repository")
            / key.type.value
            / f"{key.number}.json"
        )

    def _read(self, path: Path) -> Any | None:
        if not path.exists():
            return None
        try:
            with open(path, encoding="utf-8") as f:
                return self.entry_model.model_validate(json.load(f))
        except (OSError, json.JSONDecodeError, ValidationError) as e:
            logger.warning("Ignoring unreadable cache entry %s: %s", path, e)
            return None

    def _write(self, path: Path, entry: BaseModel) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(
            dir=path.parent, prefix=f".{path.stem}.", suffix=".tmp"
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(
                    entry.model_dump(mode="json"), f, indent=2, ensure_ascii=False
                )
            os.replace(tmp_name, path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

    def _clear(self, target: Path) -> int:
        if target.suffix == ".json":
            if target.exists():
                target.unlink()
                return 1
            return 0
        if not target.exists():
            return 0
        removed = sum(1 for _ in target.rglob("*.json"))
        shutil.rmtree(target)
        return removed

    def _stats(self, root: Path) -> dict[str, Any]:
        all_files = list(root.rglob("*.json")) if root.exists() else []
        total_size = sum(f.stat().st_size for f in all_files)

        # Count entries by repository
        repo_counts: dict[str, int] = {}
        for f in all_files:
            owner, repo = f.parts[-4], f.parts[-3]
            repo_key = f"{owner}/{repo}"
            repo_counts[repo_key] = repo_counts.get(repo_key, 0) + 1

        return {
            "total_entries": len(all_files),
            "total_size_bytes": total_size,
            "total_size_mb": round(total_size / (1024 * 1024), 2),
            "repositories": repo_counts,
            "storage_path": str(root.absolute()),
        }


class DetailCache(_JsonCache[CachedDetail]):
    """Persists fetched contribution detail, keyed by contribution identity."""

    entry_model = CachedDetail

    def __init__(self, cache_dir: str | Path = ".cache"):
        """Initialize the detail cache.

        Args:
            cache_dir: Root cache directory; entries live under ``conversations/``
        """
        super().__init__(Path(cache_dir) / DETAIL_NAMESPACE)

    def get(
        self, key: ContributionLocator, known_updated_at: datetime | None = None
    ) -> CachedDetail | None:
        """Look up detail for a contribution.

        Args:
            key: Contribution identity
            known_updated_at: Latest update time the caller knows about

        Returns:
            The cached entry, or None on a miss or a stale entry
        """
        entry = self._read(self._entry_path(key))
        if entry is None:
            logger.debug("Detail cache miss for %s", key)
            return None
        if not _is_fresh(entry.remote_updated_at, known_updated_at):
            logger.debug(
                "Detail cache stale for %s (stored %s, remote %s)",
                key,
                entry.remote_updated_at.isoformat(),
                known_updated_at,
            )
            return None
        logger.debug("Detail cache hit for %s", key)
        return entry

    def set(self, key: ContributionLocator, detail: ContributionDetail) -> CachedDetail:
        """Store detail under its identity, stamped with its own update time."""
        entry = CachedDetail(
            data=detail,
            remote_updated_at=detail.updated_at,
            cached_at=datetime.now(timezone.utc),
        )
        self._write(self._entry_path(key), entry)
        logger.debug("Cached detail for %s", key)
        return entry

    def clear(
        self,
        owner: str | None = None,
        repo: str | None = None,
        type: ContributionType | str | None = None,
        number: int | None = None,
    ) -> int:
        """Remove cached detail; with no arguments the whole cache is cleared.

        Returns:
            Number of entries removed
        """
        removed = self._clear(_subtree(self.base_path, owner, repo, type, number))
        logger.info("Removed %d cached detail entries", removed)
        return removed

    def stats(self) -> dict[str, Any]:
        """Get statistics about cached detail."""
        return self._stats(self.base_path)


class AnalysisCache(_JsonCache[CachedAnalysis]):
    """Persists accepted analyses for one actor at a time.

    The actor must be bound, at construction or with :meth:`bind_actor`,
    before any lookup, write or invalidation.
    """

    entry_model = CachedAnalysis

    def __init__(self, cache_dir: str | Path = ".cache", actor: str | None = None):
        """Initialize the analysis cache.

        Args:
            cache_dir: Root cache directory; entries live under ``analysis/``
            actor: GitHub login whose analyses are read and written
        """
        super().__init__(Path(cache_dir) / ANALYSIS_NAMESPACE)
        self.root = self.base_path
        self.actor = actor

    def bind_actor(self, actor: str) -> None:
        """Bind the cache to an actor."""
        if not actor:
            raise ConfigurationError("Analysis cache actor must be non-empty")
        try:
            _path_segment(actor, "actor")
        except ValueError as e:
            raise ConfigurationError(str(e)) from e
        self.actor = actor

    def _actor_root(self) -> Path:
        if not self.actor:
            raise ConfigurationError(
                "Analysis cache used before an actor was bound; call bind_actor()"
            )
        return self.root / _path_segment(self.actor, "actor")

    def _entry_path(self, key: ContributionLocator) -> Path:
        return (
            self._actor_root()
            / _path_segment(key.owner, "owner")
            / _path_segment(key.repo, "repository")
            / key.type.value
            / f"{key.number}.json"
        )

    def get(
        self, key: ContributionLocator, known_updated_at: datetime | None = None
    ) -> CachedAnalysis | None:
        """Look up the bound actor's analysis of a contribution.

        Args:
            key: Contribution identity
            known_updated_at: Update time of the detail about to be analysed

        Returns:
            The cached entry, or None on a miss or a stale entry
        """
        entry = self._read(self._entry_path(key))
        if entry is None or not _is_fresh(entry.remote_updated_at, known_updated_at):
            logger.debug("Analysis cache miss for %s (actor %s)", key, self.actor)
            return None
        logger.debug("Analysis cache hit for %s (actor %s)", key, self.actor)
        return entry

    def set(
        self,
        key: ContributionLocator,
        record: AnalysisRecord,
        remote_updated_at: datetime,
    ) -> CachedAnalysis:
        """Store an analysis stamped with the detail update time it came from."""
        path = self._entry_path(key)
        entry = CachedAnalysis(
            data=record,
            remote_updated_at=remote_updated_at,
            cached_at=datetime.now(timezone.utc),
        )
        self._write(path, entry)
        logger.debug("Cached analysis for %s (actor %s)", key, self.actor)
        return entry

    def clear(
        self,
        owner: str | None = None,
        repo: str | None = None,
        type: ContributionType | str | None = None,
        number: int | None = None,
    ) -> int:
        """Remove the bound actor's analyses under a partial identity.

        Returns:
            Number of entries removed
        """
        target = _subtree(self._actor_root(), owner, repo, type, number)
        removed = self._clear(target)
        logger.debug(
            "Removed %d cached analyses for actor %s", removed, self.actor
        )
        return removed

    def stats(self) -> dict[str, Any]:
        """Get statistics about cached analyses across all actors."""
        stats = self._stats(self.root)
        stats["actors"] = (
            sorted(p.name for p in self.root.iterdir() if p.is_dir())
            if self.root.exists()
            else []
        )
        return stats
