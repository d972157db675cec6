"""Exceptions raised by tensor construction and shape validation."""


class TensorError(ValueError):
    """Base class for every tensorCore validation failure."""


class ConstructionError(TensorError):
    """Raised when a tensor cannot be built from the given dims / data."""


class DimensionMismatch(TensorError):
    """Raised when an elementwise operation receives tensors of unequal dims."""


class RankError(TensorError):
    """Raised when an operation that needs a rank-2 tensor gets another rank."""


class IncompatibleShapeError(TensorError):
    """Raised when matmul operands disagree on the inner dimension."""


__all__ = [
    "TensorError",
    "ConstructionError",
    "DimensionMismatch",
    "RankError",
    "IncompatibleShapeError",
]
