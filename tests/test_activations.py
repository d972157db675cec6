import math

import numpy as np
import pytest
import torch

from tensorCore import activations
from tensorCore.engine import Tensor


def assert_close(a, b, atol=1e-12, rtol=1e-9):
    assert np.allclose(a, b, atol=atol, rtol=rtol), f"Mismatch: {a} vs {b}"


###############################
# Scalar entry points
###############################
def test_scalar_examples():
    assert activations.relu(0.5) == 0.5
    assert activations.relu(-2.0) == 0.0
    assert activations.leaky_relu(0.5) == 0.5
    assert activations.leaky_relu(-1.0) == -0.01
    assert activations.sigmoid(0.0) == 0.5
    assert activations.tanh(0.5) == pytest.approx(0.4621171572600098)


def test_scalar_derivatives():
    assert activations.d_relu(3.0) == 1.0
    assert activations.d_relu(-3.0) == 0.0
    assert activations.d_leaky_relu(3.0) == 1.0
    assert activations.d_leaky_relu(-3.0) == 0.01
    assert activations.d_sigmoid(0.0) == 0.25
    assert activations.d_tanh(0.0) == 1.0


def test_sigmoid_does_not_overflow():
    assert activations.sigmoid(-1000.0) == 0.0
    assert activations.sigmoid(1000.0) == 1.0


@pytest.mark.parametrize("fn,deriv", [
    (activations.sigmoid, activations.d_sigmoid),
    (activations.tanh, activations.d_tanh),
])
@pytest.mark.parametrize("x", [-2.5, -0.3, 0.7, 3.0])
def test_derivative_matches_finite_difference(fn, deriv, x):
    h = 1e-6
    numeric = (fn(x + h) - fn(x - h)) / (2 * h)
    assert deriv(x) == pytest.approx(numeric, rel=1e-6, abs=1e-9)


###############################
# Tensor entry points
###############################
def test_relu_tensor_example():
    t = Tensor([[0.0, 1.0], [-1.0, 2.0]])
    assert activations.relu_tensor(t) == Tensor([[0.0, 1.0], [0.0, 2.0]])
    assert activations.leaky_relu_tensor(t) == Tensor([[0.0, 1.0], [-0.01, 2.0]])


def test_sigmoid_tensor_example():
    t = Tensor([[0.0, 1.0], [2.0, 3.0]])
    expected = [[0.5, 0.7310585786300049], [0.8807970779778823, 0.9525741268224334]]
    assert_close(activations.sigmoid_tensor(t).data, expected)


@pytest.mark.parametrize("shape", [(1, 5), (2, 3)])
@pytest.mark.parametrize("act", ["relu", "tanh", "sigmoid", "leaky_relu"])
def test_activations_match_pytorch(shape, act):
    data_np = np.random.default_rng(0).standard_normal(shape)

    x = Tensor(data_np)
    y = getattr(activations, act + "_tensor")(x)

    x_t = torch.tensor(data_np, dtype=torch.float64)
    if act == "relu":
        y_t = torch.nn.functional.relu(x_t)
    elif act == "tanh":
        y_t = torch.tanh(x_t)
    elif act == "sigmoid":
        y_t = torch.sigmoid(x_t)
    elif act == "leaky_relu":
        y_t = torch.nn.functional.leaky_relu(x_t, negative_slope=0.01)

    assert y.dims == x.dims
    assert_close(y.data, y_t.numpy())


@pytest.mark.parametrize("shape", [(1, 5), (3, 2)])
@pytest.mark.parametrize("act", ["relu", "tanh", "sigmoid", "leaky_relu"])
def test_derivatives_match_pytorch_autograd(shape, act):
    # keep inputs away from the relu kink at 0
    data_np = np.random.default_rng(1).uniform(0.1, 2.0, size=shape)
    data_np *= np.where(np.random.default_rng(2).random(shape) < 0.5, -1.0, 1.0)

    x = Tensor(data_np)
    d = getattr(activations, "d_" + act + "_tensor")(x)

    x_t = torch.tensor(data_np, dtype=torch.float64, requires_grad=True)
    if act == "relu":
        y_t = torch.nn.functional.relu(x_t)
    elif act == "tanh":
        y_t = torch.tanh(x_t)
    elif act == "sigmoid":
        y_t = torch.sigmoid(x_t)
    elif act == "leaky_relu":
        y_t = torch.nn.functional.leaky_relu(x_t, negative_slope=0.01)
    y_t.sum().backward()

    assert d.dims == x.dims
    assert_close(d.data, x_t.grad.numpy())


def test_tensor_activation_leaves_input_untouched():
    t = Tensor([[-1.0, 2.0]])
    activations.relu_tensor(t)
    assert t.tolist() == [[-1.0, 2.0]]
    assert math.isclose(activations.tanh_tensor(t).at(0, 1), math.tanh(2.0))
