"""Work scheduling strategies for splitting a render into row chunks."""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from .config import RenderConfig


def chunk_rows(config: RenderConfig, chunk_id: int) -> Tuple[int, int]:
    """Row range ``[start, end)`` covered by ``chunk_id``."""
    start_row = chunk_id * config.chunk_size
    end_row = min(start_row + config.chunk_size, config.height)
    return start_row, max(start_row, end_row)


@dataclass
class StaticScheduler:
    """Static work scheduling - pre-assigns chunks to workers round-robin."""
    config: RenderConfig
    n_workers: int
    assignments: Dict[int, List[int]] = field(init=False)

    def __post_init__(self) -> None:
        self.assignments = {worker: [] for worker in range(self.n_workers)}
        for chunk_id in range(self.config.total_chunks):
            worker = chunk_id % self.n_workers
            self.assignments[worker].append(chunk_id)

    def chunks_for_worker(self, worker: int) -> List[int]:
        """Get the list of chunk IDs assigned to a specific worker."""
        return self.assignments.get(worker, [])


@dataclass
class DynamicScheduler:
    """Dynamic work scheduling - hands out chunks on request."""
    config: RenderConfig
    next_chunk: int = 0
    _lock: threading.Lock = field(default_factory=threading.Lock, init=False, repr=False)

    def request_chunk(self) -> Optional[int]:
        """Request the next available chunk, or None if all chunks are assigned."""
        with self._lock:
            if self.next_chunk >= self.config.total_chunks:
                return None
            chunk_id = self.next_chunk
            self.next_chunk += 1
            return chunk_id
