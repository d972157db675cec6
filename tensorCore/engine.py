import logging
import math
import numbers
from collections import defaultdict

from . import backend
from .backend import xp
from .errors import ConstructionError, DimensionMismatch, IncompatibleShapeError, RankError

logger = logging.getLogger(__name__)


# -------------------------------------------------------------
# Validation predicates
# -------------------------------------------------------------
# Each predicate only answers the question; the operations below check the
# answer and raise the matching error themselves.

def same_dims(a, b) -> bool:
  """True when both tensors declare identical dims."""
  return a.dims == b.dims

def is_2d(t) -> bool:
  """True when the tensor declares exactly two dims."""
  return len(t.dims) == 2

def valid_for_matmul(a, b) -> bool:
  """True when ``a @ b`` is defined: both rank 2 and cols(a) == rows(b)."""
  return is_2d(a) and is_2d(b) and a.dims[1] == b.dims[0]


def _require_2d(*tensors):
  for t in tensors:
    if not is_2d(t):
      raise RankError(f"expected a rank-2 tensor, got dims {t.dims}")

def _require_same_dims(a, b, op):
  if not same_dims(a, b):
    raise DimensionMismatch(f"cannot apply '{op}' to tensors with dims {a.dims} and {b.dims}")

def _require_matmul(a, b):
  _require_2d(a, b)
  if not valid_for_matmul(a, b):
    raise IncompatibleShapeError(
      f"cannot multiply {a.dims} by {b.dims}: inner dimensions {a.dims[1]} and {b.dims[0]} differ"
    )

def _is_number(x) -> bool:
  return isinstance(x, numbers.Real)

def _as_dims(dims):
  """Normalise *dims* to a tuple of positive ints or raise ConstructionError."""
  try:
    dims = tuple(dims)
  except TypeError:
    raise ConstructionError(f"dims must be a sequence of positive integers, got {dims!r}") from None
  if not dims:
    raise ConstructionError("dims cannot be empty")
  for d in dims:
    if isinstance(d, bool) or not isinstance(d, numbers.Integral) or d <= 0:
      raise ConstructionError(f"dims must be positive integers, got {dims}")
  return tuple(int(d) for d in dims)


class Tensor:
  """Immutable rank-2 matrix of floats.

  ``Tensor(data)`` infers ``dims`` from a rectangular nested sequence (or a
  2-D array).  ``Tensor(data, dims=...)`` stores the given dims as-is without
  comparing them to ``data``; pass ``check=True`` to have the element count
  verified.  Every operation returns a new Tensor.
  """

  # make NumPy scalars defer to our reflected operators (np.float64(2) * t)
  __array_ufunc__ = None

  def __init__(self, data, dims=None, label='', check=False):
    if isinstance(data, Tensor):
      data = data.data
    try:
      arr = xp.array(data, dtype=backend.get_dtype())
    except (ValueError, TypeError) as e:
      raise ConstructionError(f"cannot build a tensor from ragged or non-numeric data: {e}") from e

    if dims is None:
      if arr.ndim != 2:
        raise ConstructionError(f"expected nested rows of numbers, got {arr.ndim}-d data")
      if arr.size == 0:
        raise ConstructionError(f"cannot build a tensor from empty data (shape {arr.shape})")
      dims = arr.shape
    else:
      dims = _as_dims(dims)
      if check and arr.size != math.prod(dims):
        raise ConstructionError(f"dims {dims} need {math.prod(dims)} elements, data has {arr.size}")

    arr.flags.writeable = False
    self._data = arr
    self._dims = tuple(int(d) for d in dims)
    self.label = label

  @classmethod
  def _wrap(cls, arr, dims):
    # arr must be freshly allocated by the caller; it is frozen in place
    out = cls.__new__(cls)
    arr.flags.writeable = False
    out._data = arr
    out._dims = tuple(dims)
    out.label = ''
    return out

  # -------------------------------------------------------------
  # Shape and utility methods
  # -------------------------------------------------------------

  @property
  def dims(self):
    return self._dims

  @property
  def data(self):
    """The underlying read-only array."""
    return self._data

  @property
  def shape(self):
    """(rows, cols) as declared by ``dims``."""
    _require_2d(self)
    return self._dims[0], self._dims[1]

  @property
  def ndim(self):
    return len(self._dims)

  def size(self):
    return math.prod(self._dims)

  def at(self, i, j):
    # no bounds checking beyond what array indexing does
    _require_2d(self)
    return float(self._data[i, j])

  def first(self):
    return self.at(0, 0)

  def sparse(self):
    """Map every non-zero ``(row, col)`` to its value."""
    _require_2d(self)
    rows, cols = xp.nonzero(self._data)
    return {(int(i), int(j)): float(self._data[i, j]) for i, j in zip(rows, cols)}

  def sum(self):
    return float(self._data.sum())

  def mean(self):
    return self.sum() / self.size()

  def tolist(self):
    return self._data.tolist()

  def to_numpy(self):
    """Return a writable copy of the data."""
    return self._data.copy()

  def allclose(self, other, rtol=1e-5, atol=1e-8):
    return same_dims(self, other) and bool(xp.allclose(self._data, other._data, rtol=rtol, atol=atol))

  def __eq__(self, other):
    if not isinstance(other, Tensor):
      return NotImplemented
    return same_dims(self, other) and bool(xp.array_equal(self._data, other._data))

  __hash__ = None

  def __repr__(self):
    return f"Tensor(dims={self._dims}, data={self._data.tolist()})"

  # -------------------------------------------------------------
  # Elementwise arithmetic
  # -------------------------------------------------------------

  def _elementwise(self, other, op, symbol):
    _require_2d(self)
    if isinstance(other, Tensor):
      _require_2d(other)
      _require_same_dims(self, other, symbol)
      # declared dims can hide differently shaped data; never broadcast it
      if self._data.shape != other._data.shape:
        raise DimensionMismatch(
          f"cannot apply '{symbol}': data shapes {self._data.shape} and {other._data.shape} differ"
        )
      rhs = other._data
    elif _is_number(other):
      rhs = other
    else:
      raise TypeError(f"unsupported operand type for {symbol}: 'Tensor' and '{type(other).__name__}'")
    # x/0 gives inf or nan, never an exception
    with xp.errstate(divide='ignore', invalid='ignore', over='ignore'):
      out = op(self._data, rhs)
    return Tensor._wrap(xp.asarray(out), self._dims)

  def add(self, other):
    return self._elementwise(other, xp.add, '+')

  def sub(self, other):
    return self._elementwise(other, xp.subtract, '-')

  def mul(self, other):
    return self._elementwise(other, xp.multiply, '*')

  def div(self, other):
    return self._elementwise(other, xp.true_divide, '/')

  def __add__(self, other):
    return self.add(other)

  def __radd__(self, other): # other + self
    return self.add(other)

  def __sub__(self, other):
    return self.sub(other)

  def __rsub__(self, other): # other - self
    return self._elementwise(other, lambda a, b: xp.subtract(b, a), '-')

  def __mul__(self, other):
    return self.mul(other)

  def __rmul__(self, other): # other * self
    return self.mul(other)

  def __truediv__(self, other):
    return self.div(other)

  def __rtruediv__(self, other): # other / self
    return self._elementwise(other, lambda a, b: xp.true_divide(b, a), '/')

  def __neg__(self):
    return self.mul(-1.0)

  # -------------------------------------------------------------
  # Matrix multiplication
  # -------------------------------------------------------------

  def matmul(self, other):
    """Dense product: out[i][j] = sum over k of self[i][k] * other[k][j]."""
    _require_matmul(self, other)
    rows, inner = self._dims
    cols = other._dims[1]
    a = self._data.tolist()
    b = other._data.tolist()

    out = [[0.0] * cols for _ in range(rows)]
    for i in range(rows):
      a_row = a[i]
      out_row = out[i]
      for j in range(cols):
        acc = 0.0
        for k in range(inner):
          acc += a_row[k] * b[k][j]
        out_row[j] = acc

    return Tensor(out, dims=(rows, cols))

  def __matmul__(self, other):
    return self.matmul(other)

  def sparse_matmul(self, other):
    """Same result as `matmul`, accumulated over non-zero entries only.

    Both operands are reduced to their `sparse` coordinate maps; every
    non-zero ``self[i, k]`` is paired with the non-zero ``other[k, j]`` of the
    same ``k``.  Missing coordinates count as zero.

    Skipping zeros would drop ``inf * 0`` (= nan) terms, so operands holding
    inf or nan are multiplied with the dense `matmul` instead.
    """
    _require_matmul(self, other)
    if not (xp.isfinite(self._data).all() and xp.isfinite(other._data).all()):
      return self.matmul(other)
    rows, cols = self._dims[0], other._dims[1]
    lhs = self.sparse()
    rhs = other.sparse()

    rhs_by_row = defaultdict(list)
    for (k, j), value in rhs.items():
      rhs_by_row[k].append((j, value))

    out = xp.zeros((rows, cols), dtype=backend.get_dtype())
    for (i, k), a in lhs.items():
      for j, b in rhs_by_row.get(k, ()):
        out[i, j] += a * b

    logger.debug(
      "sparse_matmul %s @ %s: %d and %d non-zero entries",
      self._dims, other._dims, len(lhs), len(rhs),
    )
    return Tensor._wrap(out, (rows, cols))

  # -------------------------------------------------------------
  # Structural transforms
  # -------------------------------------------------------------

  def transpose(self):
    _require_2d(self)
    rows, cols = self._dims
    return Tensor._wrap(self._data.T.copy(), (cols, rows))

  @property
  def T(self):
    return self.transpose()

  def flatten(self):
    """Concatenate the rows into a single (1, rows*cols) row."""
    _require_2d(self)
    rows, cols = self._dims
    return Tensor._wrap(self._data.reshape(1, -1).copy(), (1, rows * cols))

  # -------------------------------------------------------------
  # Elementwise mapping
  # -------------------------------------------------------------

  def map(self, f):
    """Apply the unary callable *f* to every element."""
    _require_2d(self)
    rows, cols = self._dims
    values = self._data.tolist()
    out = [[f(values[i][j]) for j in range(cols)] for i in range(rows)]
    return Tensor(out, dims=self._dims)

  def _unary(self, fn):
    # vectorised equivalent of map(); domain errors become nan / -inf
    _require_2d(self)
    with xp.errstate(divide='ignore', invalid='ignore', over='ignore'):
      out = fn(self._data)
    return Tensor._wrap(xp.asarray(out), self._dims)

  def pow(self, p):
    if not _is_number(p):
      raise TypeError("Power with non-scalar exponent not supported")
    return self._unary(lambda a: xp.power(a, p))

  def __pow__(self, p):
    return self.pow(p)

  def square(self):
    return self.pow(2)

  def sqrt(self):
    return self._unary(xp.sqrt)

  def ln(self):
    return self._unary(xp.log)

  def clip(self, lo, hi):
    """Clamp every element into [lo, hi]."""
    if not (_is_number(lo) and _is_number(hi)):
      raise TypeError("clip bounds must be numbers")
    if lo > hi:
      raise ValueError(f"clip lower bound {lo} exceeds upper bound {hi}")
    return self._unary(lambda a: xp.clip(a, lo, hi))


# Tensor creation utilities

def _filled(dims, value):
  dims = _as_dims(dims)
  if len(dims) != 2:
    raise RankError(f"expected rank-2 dims, got {dims}")
  return Tensor._wrap(xp.full(dims, value, dtype=backend.get_dtype()), dims)

def zeros(dims):
  return _filled(dims, 0.0)

def ones(dims):
  return _filled(dims, 1.0)

def tensor(data):
  return Tensor(data)

def eye(n):
  dims = _as_dims((n, n))
  return Tensor._wrap(xp.eye(dims[0], dtype=backend.get_dtype()), dims)


__all__ = [
  "Tensor",
  "same_dims",
  "is_2d",
  "valid_for_matmul",
  "zeros",
  "ones",
  "tensor",
  "eye",
]
