"""Structured results returned from a render."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional

import numpy as np
import pandas as pd

CHUNK_COLUMNS = ["worker", "chunk_id", "start_row", "end_row", "comp_time"]


@dataclass(frozen=True)
class RenderReport:
    """Container for outputs produced by ``run_render``."""

    pixels: np.ndarray
    timing: Dict[str, Any]
    chunks: Optional[List[Dict[str, Any]]]

    def copy_chunks(self) -> Optional[List[Dict[str, Any]]]:
        if self.chunks is None:
            return None
        return [record.copy() for record in self.chunks]

    def chunk_frame(self) -> pd.DataFrame:
        """Chunk records as a DataFrame ordered by chunk id."""
        records = self.copy_chunks() or []
        frame = pd.DataFrame.from_records(records, columns=CHUNK_COLUMNS)
        return frame.sort_values("chunk_id", ignore_index=True)


def write_report(report: RenderReport, path: str | Path) -> Path:
    """Write the chunk table of ``report`` as CSV and return the path."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    report.chunk_frame().to_csv(path, index=False)
    return path
