from typing import Dict, Iterable, List

import numpy as np


def _by_day(samples: Iterable, field: str) -> Dict[str, List[float]]:
    grouped = {}
    for s in samples:
        grouped.setdefault(s.recorded_at.date().isoformat(), []).append(float(getattr(s, field)))
    return grouped


def daily_meterage_series(entries: Iterable) -> List[Dict]:
    """
    Meters produced per calendar day, oldest day first.

    entries: objects with recorded_at (datetime) and meters
    """
    grouped = _by_day(entries, "meters")

    return [
        {
            "day": day,
            "total_meters": round(float(np.sum(values)), 3)
        }
        for day, values in sorted(grouped.items())
    ]


def meterage_total(entries: Iterable) -> float:
    values = [float(e.meters) for e in entries]
    if not values:
        return 0.0
    return round(float(np.sum(values)), 3)


def daily_speed_series(samples: Iterable) -> List[Dict]:
    """Average / maximum line speed and sample count per calendar day."""
    grouped = _by_day(samples, "speed")

    results = []
    for day, values in sorted(grouped.items()):
        values = np.array(values)
        results.append({
            "day": day,
            "avg_speed": round(float(np.mean(values)), 3),
            "max_speed": round(float(np.max(values)), 3),
            "samples": len(values)
        })
    return results


def speed_summary(samples: Iterable) -> Dict:
    values = np.array([float(s.speed) for s in samples])

    if not len(values):
        return {"avg_speed": 0.0, "max_speed": 0.0, "samples": 0}

    return {
        "avg_speed": round(float(np.mean(values)), 3),
        "max_speed": round(float(np.max(values)), 3),
        "samples": len(values)
    }
