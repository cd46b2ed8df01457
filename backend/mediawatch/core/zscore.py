"""
Standard scores over a whole materialised series.
"""
from __future__ import annotations

from typing import List, Sequence

import numpy as np


def calculate_zscores(values: Sequence[float]) -> List[float]:
    """
    Convert a series into per-point z-scores.

    Uses the population standard deviation of the entire series.

    Args:
        values: Ordered numeric series

    Returns:
        Same-length list of z-scores; all zeros for a constant series,
        empty for an empty series
    """
    if len(values) == 0:
        return []

    arr = np.asarray(values, dtype=float)

    # A constant series has no spread even when float rounding says otherwise.
    if arr.min() == arr.max():
        return [0.0] * len(arr)

    std = arr.std()
    if std == 0:
        return [0.0] * len(arr)

    return ((arr - arr.mean()) / std).tolist()
