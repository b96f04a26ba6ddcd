"""
Complement coding and input validation.

Complement coding doubles a vector ``x`` of length ``n`` into
``[x, 1 - x]`` of length ``2n``. With coded inputs the L1 norm of every
input is the constant ``n``, which is what keeps fuzzy category boxes from
proliferating and makes learning stable.
"""

import logging
from typing import Optional, Sequence, Tuple, Union

import numpy as np

from .errors import DimensionMismatchError, InputValidationError

logger = logging.getLogger(__name__)

VectorLike = Union[Sequence[float], np.ndarray]


def as_vector(
    values: Optional[VectorLike],
    expected_dim: Optional[int] = None,
    space: str = "input",
) -> np.ndarray:
    """
    Validate ``values`` and return it as an immutable float vector.

    Args:
        values: 1-D sequence of numbers in [0, 1]
        expected_dim: Required length, if the space dimension is known
        space: Name of the space, used in error messages

    Returns:
        Read-only 1-D float64 array

    Raises:
        InputValidationError: If the input is missing, not 1-D, empty,
            non-finite or outside [0, 1]
        DimensionMismatchError: If the length differs from ``expected_dim``
    """
    if values is None:
        raise InputValidationError(f"{space} vector cannot be None")

    try:
        vector = np.array(values, dtype=np.float64)
    except (TypeError, ValueError) as e:
        raise InputValidationError(f"{space} vector is not numeric: {e}") from e

    if vector.ndim != 1:
        raise InputValidationError(
            f"{space} vector must be 1-D, got shape {vector.shape}"
        )
    if vector.size == 0:
        raise InputValidationError(f"{space} vector cannot be empty")
    if expected_dim is not None and vector.size != expected_dim:
        raise DimensionMismatchError(expected_dim, vector.size, space=space)
    if not np.all(np.isfinite(vector)):
        raise InputValidationError(f"{space} vector contains NaN or infinite values")
    if vector.min() < 0.0 or vector.max() > 1.0:
        raise InputValidationError(
            f"{space} vector values must lie in [0, 1], "
            f"got range [{vector.min():.4f}, {vector.max():.4f}]"
        )

    vector.flags.writeable = False
    return vector


def complement_code(values: VectorLike) -> np.ndarray:
    """
    Complement-code a vector: ``[x, 1 - x]``.

    The result is read-only and satisfies ``coded[i] + coded[i + n] == 1``.
    """
    vector = as_vector(values)
    coded = np.concatenate([vector, 1.0 - vector])
    coded.flags.writeable = False
    return coded


def complement_code_batch(data: np.ndarray) -> np.ndarray:
    """Complement-code each row of a 2-D array of samples."""
    data = np.asarray(data, dtype=np.float64)
    if data.ndim != 2:
        raise InputValidationError(f"Batch must be 2-D, got shape {data.shape}")
    if not np.all(np.isfinite(data)):
        raise InputValidationError("Batch contains NaN or infinite values")
    if data.size and (data.min() < 0.0 or data.max() > 1.0):
        raise InputValidationError("Batch values must lie in [0, 1]")
    return np.hstack([data, 1.0 - data])


def decode(coded: VectorLike) -> np.ndarray:
    """Recover the original vector from its complement-coded form."""
    coded = np.asarray(coded, dtype=np.float64)
    if coded.ndim != 1 or coded.size % 2 != 0:
        raise InputValidationError(
            f"Complement-coded vector must be 1-D with even length, got shape {coded.shape}"
        )
    original = coded[: coded.size // 2].copy()
    original.flags.writeable = False
    return original


def is_complement_coded(coded: VectorLike, atol: float = 1e-9) -> bool:
    """Check the ``coded[i] + coded[i + n] == 1`` invariant."""
    coded = np.asarray(coded, dtype=np.float64)
    if coded.ndim != 1 or coded.size == 0 or coded.size % 2 != 0:
        return False
    n = coded.size // 2
    return bool(np.allclose(coded[:n] + coded[n:], 1.0, atol=atol))


def box_bounds(prototype: VectorLike) -> Tuple[np.ndarray, np.ndarray]:
    """
    Interpret a complement-coded prototype as a hyper-rectangle.

    Returns:
        Tuple of (lower corner, upper corner) in the original space
    """
    prototype = np.asarray(prototype, dtype=np.float64)
    n = prototype.size // 2
    return prototype[:n].copy(), 1.0 - prototype[n:]


def box_size(prototype: VectorLike) -> float:
    """L1 size of a category box; grows as the category generalises."""
    lower, upper = box_bounds(prototype)
    return float(np.sum(np.maximum(upper - lower, 0.0)))
