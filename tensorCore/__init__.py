import logging

from tensorCore.engine import Tensor, zeros, ones, tensor, eye, same_dims, is_2d, valid_for_matmul  # re-export
from tensorCore.errors import (
    TensorError,
    ConstructionError,
    DimensionMismatch,
    RankError,
    IncompatibleShapeError,
)
__all__ = [
    "Tensor", "zeros", "ones", "tensor", "eye", "same_dims", "is_2d", "valid_for_matmul",
    "TensorError", "ConstructionError", "DimensionMismatch", "RankError", "IncompatibleShapeError",
]

# Stateless helpers built on Tensor
from . import activations, initializers, losses  # noqa: E402
from .losses import mse, bce  # noqa: E402

__all__.extend(["activations", "initializers", "losses", "mse", "bce"])

logging.getLogger(__name__).addHandler(logging.NullHandler())
