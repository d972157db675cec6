"""Activation functions and their derivatives.

Each function has two explicit entry points: the plain name takes a single
number and returns a float (``relu(-1.0)``), the ``_tensor`` variant takes a
Tensor and applies the scalar formula to every element through `Tensor.map`
(``relu_tensor(t)``).
"""

import math

# slope used on the negative side of leaky_relu
LEAKY_SLOPE = 0.01


def relu(x: float) -> float:
    """max(0, x)"""
    return float(x) if x > 0.0 else 0.0


def d_relu(x: float) -> float:
    return 1.0 if x > 0.0 else 0.0


# leaky relu addresses the "dying ReLU" issue by keeping a small, non-zero
# slope for negative inputs
def leaky_relu(x: float) -> float:
    return float(x) if x > 0.0 else LEAKY_SLOPE * x


def d_leaky_relu(x: float) -> float:
    return 1.0 if x > 0.0 else LEAKY_SLOPE


def sigmoid(x: float) -> float:
    """1 / (1 + e^-x), split on the sign of x so exp never overflows."""
    if x >= 0:
        return 1.0 / (1.0 + math.exp(-x))
    z = math.exp(x)
    return z / (1.0 + z)


def d_sigmoid(x: float) -> float:
    s = sigmoid(x)
    return s * (1.0 - s)


def tanh(x: float) -> float:
    return math.tanh(x)


def d_tanh(x: float) -> float:
    return 1.0 - math.tanh(x) ** 2


# Tensor entry points

def relu_tensor(t):
    return t.map(relu)


def d_relu_tensor(t):
    return t.map(d_relu)


def leaky_relu_tensor(t):
    return t.map(leaky_relu)


def d_leaky_relu_tensor(t):
    return t.map(d_leaky_relu)


def sigmoid_tensor(t):
    return t.map(sigmoid)


def d_sigmoid_tensor(t):
    return t.map(d_sigmoid)


def tanh_tensor(t):
    return t.map(tanh)


def d_tanh_tensor(t):
    return t.map(d_tanh)


__all__ = [
    "LEAKY_SLOPE",
    "relu",
    "d_relu",
    "leaky_relu",
    "d_leaky_relu",
    "sigmoid",
    "d_sigmoid",
    "tanh",
    "d_tanh",
    "relu_tensor",
    "d_relu_tensor",
    "leaky_relu_tensor",
    "d_leaky_relu_tensor",
    "sigmoid_tensor",
    "d_sigmoid_tensor",
    "tanh_tensor",
    "d_tanh_tensor",
]
