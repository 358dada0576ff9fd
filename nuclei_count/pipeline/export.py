"""
Result export and cross-method comparison.

- JSON export document {timestamp, image_analyzed, results}
- Count statistics over the methods that succeeded
"""

from __future__ import annotations
from datetime import datetime, timezone
import json
from typing import Dict, Mapping, Optional

import numpy as np

from .orchestrator import MethodResult


def build_export(
    results: Mapping[str, MethodResult],
    image_name: str,
    timestamp: Optional[datetime] = None,
) -> dict:
    """Build the export document, keyed by method label."""
    ts = timestamp or datetime.now(timezone.utc)
    out: Dict[str, dict] = {}
    for r in results.values():
        entry = {
            "nuclei_count": int(r.count),
            "processing_time_ms": round(float(r.elapsed_ms), 3),
            "status": "success" if r.ok else "error",
        }
        if not r.ok:
            entry["error"] = r.error or "unknown error"
        out[r.label] = entry
    return {
        "timestamp": ts.isoformat(),
        "image_analyzed": image_name,
        "results": out,
    }


def write_export(path: str, results: Mapping[str, MethodResult], image_name: str) -> None:
    """Write the export document as UTF-8 JSON."""
    doc = build_export(results, image_name)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(doc, f, indent=2, ensure_ascii=False)


def summarize_counts(results: Mapping[str, MethodResult]) -> Dict[str, float | int]:
    """Return agreement statistics over succeeded methods' counts."""
    counts = np.array([r.count for r in results.values() if r.ok], dtype=np.float64)
    return {
        "methods": int(counts.size),
        "mean": float(np.mean(counts)) if counts.size else 0.0,
        "std": float(np.std(counts)) if counts.size else 0.0,
        "min": int(np.min(counts)) if counts.size else 0,
        "max": int(np.max(counts)) if counts.size else 0,
        "spread": int(np.ptp(counts)) if counts.size else 0,
    }
