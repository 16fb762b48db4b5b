"""Exception types raised by surface-interp.

Every error derives from `SurfaceInterpError` and from the closest built-in
exception, so callers may catch either.
"""
from __future__ import annotations

from typing import Any, Sequence

from utils.mesh_data import MeshFormatError


class SurfaceInterpError(Exception):
    """Base class for all surface-interp errors."""


class FormatError(SurfaceInterpError, MeshFormatError):
    """Malformed mesh file, non-triangle cell or array-length mismatch."""


class UnknownFieldError(SurfaceInterpError, KeyError):
    """Lookup of a field name that does not exist."""

    def __init__(self, field_name: str, domain: str = "") -> None:
        self.field_name = field_name
        self.domain = domain
        where = f" in {domain} fields" if domain else ""
        super().__init__(f"Field '{field_name}' does not exist{where}.")

    def __str__(self) -> str:
        # KeyError quotes its argument; keep the message readable.
        return str(self.args[0])


class UnsupportedConversionError(SurfaceInterpError, NotImplementedError):
    """Field conversion other than cell->point or point->cell."""


class InterpolationFailedError(SurfaceInterpError, RuntimeError):
    """No primitive could be found for a query point."""

    def __init__(self, point: Sequence[float] | Any) -> None:
        self.point = tuple(float(x) for x in point)
        coords = " ".join(f"{x:g}" for x in self.point)
        super().__init__(f"Interpolation at point ({coords}) failed.")
