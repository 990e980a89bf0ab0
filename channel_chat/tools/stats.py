from __future__ import annotations

import statistics

from .fields import numeric_value


def numeric_values(records: list[dict], field: str) -> list[float]:
    """Collect the extractable numeric values of a field, in record order."""
    values = []
    for record in records:
        value = numeric_value(record, field)
        if value is not None:
            values.append(value)
    return values


def median(values: list[float]) -> float:
    # Even counts average the two middle values.
    return statistics.median(values)


def describe(values: list[float]) -> dict:
    """Count, mean, median, population std, min and max of a non-empty list.

    Mean, median and std are rounded to 4 decimals; min and max are exact.
    """
    if not values:
        raise ValueError("describe() requires at least one value")
    return {
        "count": len(values),
        "mean": round(statistics.fmean(values), 4),
        "median": round(median(values), 4),
        "std": round(statistics.pstdev(values), 4),
        "min": min(values),
        "max": max(values),
    }
