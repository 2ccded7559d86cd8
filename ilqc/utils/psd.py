# Copyright 2024 Google LLC
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     https://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""Symmetric matrix utilities used by the Riccati recursion."""

import jax.numpy as jnp
from jax import Array


def symmetrize(Q: Array) -> Array:
    """Symmetrize a matrix (or a batch of matrices).

    Args:
        Q: Matrix of shape (..., n, n).

    Returns:
        Symmetric matrix (Q + Q') / 2.
    """
    return 0.5 * (Q + jnp.swapaxes(Q, -1, -2))


def is_symmetric(Q: Array, tol: float = 1e-10) -> bool:
    """Check whether a matrix (or every matrix of a batch) is symmetric.

    Args:
        Q: Matrix of shape (..., n, n).
        tol: Absolute tolerance on |Q - Q'|.
    """
    return bool(jnp.all(jnp.abs(Q - jnp.swapaxes(Q, -1, -2)) <= tol))


def is_psd(Q: Array, tol: float = 1e-8) -> bool:
    """Check if a symmetric matrix is positive semi-definite.

    Args:
        Q: Matrix to check, shape (n, n).
        tol: Tolerance for eigenvalue comparison.

    Returns:
        True if all eigenvalues are >= -tol.
    """
    eigvals = jnp.linalg.eigvalsh(Q)
    return bool(jnp.all(eigvals >= -tol))


def condition_number(H: Array) -> Array:
    """2-norm condition number of a matrix (or a batch of matrices).

    Singular matrices yield inf or nan.
    """
    return jnp.linalg.cond(H)
