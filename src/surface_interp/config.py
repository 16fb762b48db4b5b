"""Global configuration for surface-interp.

This module provides a package-wide configuration surface for the tunables of
the interpolation engine (search pruning radius, output precision, degeneracy
threshold) without changing public APIs. Defaults come from the environment
and can be changed programmatically with `configure` or temporarily with the
`use` context manager.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
import contextlib
import logging
import os
from typing import Any, ContextManager, Iterator, Optional


# -----------------------------------------------------------------------------
# Logging
# -----------------------------------------------------------------------------
_LOGGER = logging.getLogger("surface_interp.config")
_PACKAGE_LOGGER = logging.getLogger("surface_interp")


def _parse_log_level(val: str | int | None, default: int = logging.WARNING) -> int:
    """Parse a logging level string or int into a `logging` level constant.

    Args:
        val: The desired level (e.g., "DEBUG", 10). May be None.
        default: Fallback level if `val` cannot be parsed.

    Returns:
        An integer logging level (e.g., logging.DEBUG).
    """
    if val is None:
        return default
    if isinstance(val, int):
        return val
    lvl = getattr(logging, str(val).strip().upper(), None)
    if isinstance(lvl, int):
        return lvl
    return default


def set_log_level(level: str | int = "WARNING") -> None:
    """Set the package logger level programmatically.

    Args:
        level: A standard logging level name or integer.
    """
    _PACKAGE_LOGGER.setLevel(_parse_log_level(level))


# Default level can be overridden by env.
set_log_level(os.getenv("SURFACE_INTERP_LOGLEVEL", "WARNING"))


# -----------------------------------------------------------------------------
# Env helpers
# -----------------------------------------------------------------------------

def int_env(varname: str, default: int) -> int:
    """Read an environment variable and interpret it as an integer.

    Args:
        varname: The name of the environment variable.
        default: The default value if the variable is unset.

    Returns:
        The integer value parsed from the environment.
    """
    return int(os.getenv(varname, str(default)))


def float_env(varname: str, default: float) -> float:
    """Read an environment variable and interpret it as a float.

    Args:
        varname: The name of the environment variable.
        default: The default value if the variable is unset.

    Returns:
        The float value parsed from the environment.
    """
    return float(os.getenv(varname, str(default)))


# -----------------------------------------------------------------------------
# Settings
# -----------------------------------------------------------------------------
@dataclass(frozen=True)
class Settings:
    """Snapshot of the engine tunables.

    Attributes:
        prune_factor: A triangle is a search candidate only if the query point
            lies within `prune_factor * longest_side` of its center.
        precision: Digits after the decimal point in scientific output.
        degenerate_tolerance: A triangle is degenerate if its area is at or
            below `degenerate_tolerance * longest_side**2`. Dimensionless, so
            the test does not depend on mesh units.
    """

    prune_factor: float = 3.0
    precision: int = 14
    degenerate_tolerance: float = 1e-12

    def validate(self) -> None:
        """Raise `ValueError` if any setting is out of range."""
        if not self.prune_factor > 0.0:
            raise ValueError(f"prune_factor must be > 0, got {self.prune_factor!r}")
        if self.precision < 1:
            raise ValueError(f"precision must be >= 1, got {self.precision!r}")
        if self.degenerate_tolerance < 0.0:
            raise ValueError(
                f"degenerate_tolerance must be >= 0, got {self.degenerate_tolerance!r}"
            )


def _settings_from_env() -> Settings:
    """Build a `Settings` snapshot from SURFACE_INTERP_* variables."""
    settings = Settings(
        prune_factor=float_env("SURFACE_INTERP_PRUNE_FACTOR", 3.0),
        precision=int_env("SURFACE_INTERP_PRECISION", 14),
        degenerate_tolerance=float_env("SURFACE_INTERP_DEGENERATE_TOL", 1e-12),
    )
    settings.validate()
    return settings


# -----------------------------------------------------------------------------
# Config singleton
# -----------------------------------------------------------------------------
class Config:
    """Global configuration for surface-interp.

    Holds the active `Settings`; modules read values through the properties
    so that reconfiguration takes effect immediately.
    """

    def __init__(self) -> None:
        """Initialize config using environment defaults."""
        self._settings: Settings = _settings_from_env()
        _LOGGER.debug("Config initialized: %s", self._settings)

    def configure(
        self,
        *,
        prune_factor: Optional[float] = None,
        precision: Optional[int] = None,
        degenerate_tolerance: Optional[float] = None,
    ) -> Config:
        """Update one or more settings.

        Args:
            prune_factor: Bounding-sphere multiplier for search pruning.
            precision: Digits after the decimal point in written files.
            degenerate_tolerance: Relative area threshold for degenerate
                triangles.

        Returns:
            The `Config` instance (for chaining).

        Raises:
            ValueError: If a value is out of range. The previous settings
                are kept in that case.
        """
        changes: dict[str, Any] = {}
        if prune_factor is not None:
            changes["prune_factor"] = float(prune_factor)
        if precision is not None:
            changes["precision"] = int(precision)
        if degenerate_tolerance is not None:
            changes["degenerate_tolerance"] = float(degenerate_tolerance)

        settings = replace(self._settings, **changes)
        settings.validate()
        self._settings = settings
        _LOGGER.info("Reconfigured: %s", settings)
        return self

    @contextlib.contextmanager
    def use(self, **kwargs: Any) -> Iterator[None]:
        """Temporarily change settings within a context manager.

        Args:
            **kwargs: Same keywords as `configure`.

        Yields:
            None. Restores the previous settings on exit.
        """
        prev = self._settings
        try:
            self.configure(**kwargs)
            yield
        finally:
            self._settings = prev
            _LOGGER.debug("Restored previous settings: %s", prev)

    def reset(self) -> None:
        """Reload settings from the environment."""
        self._settings = _settings_from_env()

    @property
    def settings(self) -> Settings:
        return self._settings

    @property
    def prune_factor(self) -> float:
        return self._settings.prune_factor

    @property
    def precision(self) -> int:
        return self._settings.precision

    @property
    def degenerate_tolerance(self) -> float:
        return self._settings.degenerate_tolerance


# Singleton & forwards
config = Config()


def configure(
    *,
    prune_factor: Optional[float] = None,
    precision: Optional[int] = None,
    degenerate_tolerance: Optional[float] = None,
) -> Config:
    """Update global settings (module-level)."""
    return config.configure(
        prune_factor=prune_factor,
        precision=precision,
        degenerate_tolerance=degenerate_tolerance,
    )


def use(**kwargs: Any) -> ContextManager[None]:
    """Temporarily change global settings (module-level)."""
    return config.use(**kwargs)
