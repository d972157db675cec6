"""tensorCore.backend

Exposes `xp` – the array module – together with the active element dtype and
random generator.  All other tensorCore code must import and use `xp`; never
import NumPy directly.

Selecting the element dtype
---------------------------
1. Environment variable (before import)
       TENSORCORE_DTYPE=float32 python your_script.py
2. Runtime call
       from tensorCore import backend
       backend.use_float32()   # or backend.use_float64()

Seeding
-------
       TENSORCORE_SEED=42 python your_script.py
or at runtime ``backend.seed(42)``.  Initializers draw from ``backend.rng()``.

An unrecognised dtype falls back to float64 with a RuntimeWarning; an invalid
seed is ignored with a RuntimeWarning.
"""

from __future__ import annotations

import logging
import os
import warnings
from typing import Optional

import numpy as _np

logger = logging.getLogger(__name__)


# -----------------------------------------------------------------------------
# Internal helpers
# -----------------------------------------------------------------------------

_DTYPES = {
    "float64": _np.float64,
    "float32": _np.float32,
}


def _resolve_dtype(name: str):
    """Map a dtype name to a NumPy dtype, falling back to float64."""
    try:
        return _DTYPES[name.strip().lower()]
    except KeyError:
        warnings.warn(
            f"Unknown tensorCore dtype {name!r}; expected one of "
            f"{sorted(_DTYPES)}. Falling back to float64.",
            RuntimeWarning,
            stacklevel=3,
        )
        return _np.float64


def _resolve_seed(raw: Optional[str]) -> Optional[int]:
    if raw is None or raw == "":
        return None
    try:
        return int(raw)
    except ValueError:
        warnings.warn(
            f"Ignoring TENSORCORE_SEED={raw!r}: not an integer.",
            RuntimeWarning,
            stacklevel=3,
        )
        return None


# -----------------------------------------------------------------------------
# Backend selection logic
# -----------------------------------------------------------------------------

# public symbol used by the rest of tensorCore
xp = _np

_dtype = _resolve_dtype(os.environ.get("TENSORCORE_DTYPE", "float64"))
_rng = _np.random.default_rng(_resolve_seed(os.environ.get("TENSORCORE_SEED")))


# -----------------------------------------------------------------------------
# Public helper functions
# -----------------------------------------------------------------------------

def use_float64() -> None:
    """Store newly created tensors as 64-bit floats (the default)."""
    global _dtype
    _dtype = _np.float64
    logger.debug("tensorCore element dtype set to float64")


def use_float32() -> None:
    """Store newly created tensors as 32-bit floats."""
    global _dtype
    _dtype = _np.float32
    logger.debug("tensorCore element dtype set to float32")


def get_dtype():
    """Return the NumPy dtype used for newly created tensors."""
    return _dtype


def is_float32() -> bool:
    """Return True if new tensors are stored as float32."""
    return _dtype is _np.float32


def seed(value: Optional[int] = None) -> None:
    """Reseed the generator used by the initializers."""
    global _rng
    _rng = _np.random.default_rng(value)
    logger.debug("tensorCore random generator reseeded with %r", value)


def rng() -> "_np.random.Generator":
    """Return the active random generator."""
    return _rng
