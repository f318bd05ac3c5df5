from __future__ import annotations
import json
from pathlib import Path
from typing import List, Dict, Any
from ..config import SimConfig
from ..core.geometry import Geometry
from ..core.stats import Stats
from ..runtime.simulator import AccessResult
from . import viz


def _per_set_counts(history: List[AccessResult], num_sets: int) -> List[Dict[str, int]]:
    """Counts hits and misses for every set."""
    counts = [{"set": i, "hits": 0, "misses": 0} for i in range(num_sets)]
    for r in history:
        key = "hits" if r.hit else "misses"
        counts[r.set_index][key] += 1
    return counts


def generate_report_json(history: List[AccessResult], geometry: Geometry, stats: Stats,
                         snapshot=None, config: SimConfig | None = None) -> Dict[str, Any]:
    """Generates a JSON-compatible dictionary describing a run."""
    report_data = {
        "geometry": geometry.to_dict(),
        "stats": stats.as_dict(),
        "evictions": sum(1 for r in history if r.evicted_tag is not None),
        "per_set": _per_set_counts(history, geometry.num_sets),
        "history": [r.to_dict() for r in history],
    }
    if snapshot is not None:
        report_data["occupancy"] = [
            [{"valid": line.valid, "tag": line.tag, "last_used": line.last_used} for line in cache_set]
            for cache_set in snapshot
        ]
    if config is not None:
        report_data["config"] = config.__dict__
    return report_data


def generate_report(history: List[AccessResult], geometry: Geometry, stats: Stats,
                    snapshot, config: SimConfig):
    """Generates all report artifacts."""
    report_data = generate_report_json(history, geometry, stats, snapshot, config)
    output_dir = Path(config.report_dir)
    output_dir.mkdir(parents=True, exist_ok=True)

    with open(output_dir / "report.json", "w") as f:
        json.dump(report_data, f, indent=4)

    viz.export_access_timeline(history, str(output_dir / "report.html"))

    print(viz.export_occupancy_ascii(snapshot, history[-1] if history else None))
    print(f"\nReports generated in {output_dir.absolute()}")
    print_summary(geometry, stats)


def print_summary(geometry: Geometry, stats: Stats):
    s = stats.as_dict()
    print(f"\nCache: {geometry.describe()}")
    print(f"  Bits : offset={geometry.offset_bits} index={geometry.index_bits} tag={geometry.tag_bits}")
    print(f"  Hits : {s['hits']}")
    print(f"  Miss : {s['misses']}")
    print(f"  Total: {s['accesses']}")
    print(f"  Hit rate: {s['hit_rate']:.2%}")
