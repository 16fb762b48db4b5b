"""Argument handling shared by the 2D and 3D `interpolate` methods."""
from __future__ import annotations

from typing import Any, Optional
from numpy.typing import ArrayLike, NDArray

import numpy as np


def target_mask(markers: Optional[ArrayLike], n: int) -> NDArray[Any]:
    """Return a boolean mask of length `n`; all True if `markers` is None.

    Raises:
        ValueError: If the mask length differs from `n`.
    """
    if markers is None:
        return np.ones(n, dtype=bool)
    mask = np.asarray(markers, dtype=bool).reshape(-1)
    if mask.shape[0] != n:
        raise ValueError(
            f"markers length {mask.shape[0]} != number of target points {n}"
        )
    return mask


def target_output(target_values: Optional[NDArray[Any]], n: int) -> NDArray[Any]:
    """Return a zeroed output vector, reusing `target_values` when given.

    Raises:
        ValueError: If `target_values` does not have shape (n,).
    """
    if target_values is None:
        return np.zeros(n, dtype=float)
    if target_values.shape != (n,):
        raise ValueError(
            f"target_values shape {target_values.shape} != ({n},)"
        )
    target_values[:] = 0.0
    return target_values
