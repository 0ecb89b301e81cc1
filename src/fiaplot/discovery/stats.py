"""Statistics collected while a discovery run progresses."""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple


@dataclass(frozen=True)
class DiscoveryStatistics:
    """
    Counters describing one discovery run.

    A run that skips paths still succeeds; these counters are the only place
    the skipped paths show up.
    """

    paths_enumerated: int = 0
    paths_failed: int = 0
    non_datasets: int = 0
    non_numeric: int = 0
    datasets_retained: int = 0
    data_candidates: int = 0
    error_candidates: int = 0
    pairs_linked: int = 0
    batches: int = 0
    duration_seconds: float = 0.0
    failed_paths: Tuple[str, ...] = ()

    @property
    def paths_fetched(self) -> int:
        return self.paths_enumerated - self.paths_failed

    def summary(self) -> Dict[str, Any]:
        return {
            "paths_enumerated": self.paths_enumerated,
            "paths_failed": self.paths_failed,
            "non_datasets": self.non_datasets,
            "non_numeric": self.non_numeric,
            "datasets_retained": self.datasets_retained,
            "data_candidates": self.data_candidates,
            "error_candidates": self.error_candidates,
            "pairs_linked": self.pairs_linked,
            "batches": self.batches,
            "duration_seconds": round(self.duration_seconds, 3),
        }


@dataclass
class StatisticsCollector:
    """Mutable accumulator owned by a single run; frozen into DiscoveryStatistics at the end."""

    paths_enumerated: int = 0
    non_datasets: int = 0
    non_numeric: int = 0
    batches: int = 0
    failed_paths: List[str] = field(default_factory=list)
    started_at: float = field(default_factory=time.perf_counter)

    def record_failure(self, path: str) -> None:
        self.failed_paths.append(path)

    def record_skip(self, reason: Optional[str]) -> None:
        if reason == "not_dataset":
            self.non_datasets += 1
        elif reason == "not_numeric":
            self.non_numeric += 1

    def freeze(
        self,
        *,
        datasets_retained: int,
        data_candidates: int,
        error_candidates: int,
        pairs_linked: int,
    ) -> DiscoveryStatistics:
        return DiscoveryStatistics(
            paths_enumerated=self.paths_enumerated,
            paths_failed=len(self.failed_paths),
            non_datasets=self.non_datasets,
            non_numeric=self.non_numeric,
            datasets_retained=datasets_retained,
            data_candidates=data_candidates,
            error_candidates=error_candidates,
            pairs_linked=pairs_linked,
            batches=self.batches,
            duration_seconds=time.perf_counter() - self.started_at,
            failed_paths=tuple(self.failed_paths),
        )


__all__ = ["DiscoveryStatistics", "StatisticsCollector"]
