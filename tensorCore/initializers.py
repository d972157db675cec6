"""Weight initializers.

Each function returns a raw ``f_in x f_out`` array (not a Tensor); wrap it
with ``Tensor(...)`` to use it.  Random draws come from ``backend.rng()`` so a
run can be reproduced with ``backend.seed(n)`` or ``TENSORCORE_SEED``.

The variance-scaled schemes (glorot, he, lecun) multiply a single uniform
[0, 1) draw by the scheme's standard deviation.  They do not sample a
zero-mean distribution, so every weight they produce is non-negative.
"""

import logging
import math
import numbers

from . import backend
from .backend import xp

logger = logging.getLogger(__name__)


def _check_fan(*fans):
    for f in fans:
        if isinstance(f, bool) or not isinstance(f, numbers.Integral) or f <= 0:
            raise ValueError(f"fan sizes must be positive integers, got {f!r}")


def _scaled(f_in, f_out, std):
    out = backend.rng().random((f_in, f_out)) * std
    logger.debug("initialised %dx%d weights with std %.6g", f_in, f_out, std)
    return out.astype(backend.get_dtype(), copy=False)


def zero(f_in, f_out):
    _check_fan(f_in, f_out)
    return xp.zeros((f_in, f_out), dtype=backend.get_dtype())


def glorot(f_in, f_out):
    """Glorot (Xavier): std = sqrt(2 / (f_in + f_out))."""
    _check_fan(f_in, f_out)
    return _scaled(f_in, f_out, math.sqrt(2.0 / (f_in + f_out)))


def he(f_in, f_out):
    """He: std = sqrt(2 / f_in)."""
    _check_fan(f_in, f_out)
    return _scaled(f_in, f_out, math.sqrt(2.0 / f_in))


def lecun(f_in, f_out):
    """LeCun: std = sqrt(1 / f_in)."""
    _check_fan(f_in, f_out)
    return _scaled(f_in, f_out, math.sqrt(1.0 / f_in))


def sparse(f_in, f_out, sparsity):
    """Each entry is 0 with probability *sparsity*, otherwise a fresh U[0, 1) draw."""
    _check_fan(f_in, f_out)
    if not 0.0 <= sparsity <= 1.0:
        raise ValueError(f"sparsity must lie in [0, 1], got {sparsity!r}")
    gen = backend.rng()
    keep = gen.random((f_in, f_out)) >= sparsity
    out = xp.where(keep, gen.random((f_in, f_out)), 0.0)
    logger.debug("initialised %dx%d sparse weights, %d non-zero", f_in, f_out, int(keep.sum()))
    return out.astype(backend.get_dtype(), copy=False)


def uniform(f_in, f_out, range):
    """U[0, range) per entry."""
    _check_fan(f_in, f_out)
    if range < 0:
        raise ValueError(f"range must be non-negative, got {range!r}")
    return _scaled(f_in, f_out, range)


def identity(f_in):
    _check_fan(f_in)
    return xp.eye(f_in, dtype=backend.get_dtype())


__all__ = ["zero", "glorot", "he", "lecun", "sparse", "uniform", "identity"]
