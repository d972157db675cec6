from tensorCore.backend import xp
from tensorCore.engine import Tensor

# smallest clip bound keeping ln() away from 0 in bce; widened to the
# dtype's machine epsilon when 1 - EPSILON would round to 1
EPSILON = 1e-15


def _reduce(losses: Tensor, reduction: str):
    if reduction == 'none':
        return losses
    elif reduction == 'mean':
        return losses.mean()
    elif reduction == 'sum':
        return losses.sum()
    else:
        raise ValueError("reduction must be 'mean', 'sum', or 'none'")


def _clip_bound(t: Tensor) -> float:
    return max(EPSILON, float(xp.finfo(t.data.dtype).eps))


def mse(y_hat: Tensor, y: Tensor, reduction: str = 'none'):
    """Squared error ``(y_hat - y)**2`` per element.

    With the default ``reduction='none'`` the per-element Tensor is returned;
    ``'mean'`` and ``'sum'`` reduce it to a float.
    """
    losses = (y_hat - y).square()
    return _reduce(losses, reduction)


def bce(y_hat: Tensor, y: Tensor, reduction: str = 'none'):
    """Binary cross-entropy per element.

    Parameters
    ----------
    y_hat : Tensor
        Predicted probabilities; clipped into [eps, 1 - eps] to avoid ln(0),
        where eps is EPSILON, or the machine epsilon of float32 data.
    y : Tensor
        Targets in {0, 1}, same dims as *y_hat*.
    reduction : {'none', 'mean', 'sum'}
        Reduction mode.
    """
    eps = _clip_bound(y_hat)
    p = y_hat.clip(eps, 1.0 - eps)
    losses = -(y * p.ln() + (1.0 - y) * (1.0 - p).ln())
    return _reduce(losses, reduction)


__all__ = ["EPSILON", "mse", "bce"]
