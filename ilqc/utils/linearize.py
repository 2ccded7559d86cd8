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

"""Linearization utilities for the design loop.

This module provides the vectorization helper used to evaluate per-timestep
quantities along a trajectory, and the Euler discretization of the model's
continuous-time Jacobians.
"""

from typing import Callable, Tuple

import jax.numpy as jnp
from jax import Array, vmap

from ilqc.core.problem import Model
from ilqc.core.trajectory import Trajectory


def vectorize(fun: Callable, argnums: int = 3) -> Callable:
    """Returns a vectorized version of the input function.

    Vectorizes the first `argnums` arguments of the function using vmap,
    allowing efficient batch evaluation along a trajectory.

    Args:
        fun: A function f(*args) to be mapped over.
        argnums: Number of leading arguments of fun to vectorize.

    Returns:
        Vectorized/Batched function with arguments corresponding to fun, but
        extra batch dimension in axis 0 for first argnums arguments
        (t, x, u typically). Remaining arguments are not batched.

    Example:
        >>> def cost(t, x, u):
        ...     return x @ x + u @ u
        ...
        >>> vcost = vectorize(cost, argnums=3)
        >>> costs = vcost(T, X[:-1], U)  # Shape: (N,)
    """
    def vfun(*args):
        _fun = lambda tup, *margs: fun(*(margs + tup))
        return vmap(
            _fun, in_axes=(None,) + (0,) * argnums
        )(args[argnums:], *args[:argnums])

    return vfun


def discretize(Jx: Array, Ju: Array, dt: float) -> Tuple[Array, Array]:
    """First-order (Euler) discretization of continuous-time Jacobians.

        A = I + Jx dt
        B = Ju dt

    Args:
        Jx: State Jacobian df/dx of shape (n, n).
        Ju: Input Jacobian df/du of shape (n, m).
        dt: Discretization step.

    Returns:
        A: Discrete-time state matrix (n, n).
        B: Discrete-time input matrix (n, m).
    """
    n = Jx.shape[-1]
    return jnp.eye(n) + Jx * dt, Ju * dt


def linearize_model(model: Model, dt: float) -> Callable:
    """Discrete-time linearization of a model at a single (x, u).

    Args:
        model: Plant model providing continuous-time Jacobians.
        dt: Discretization step.

    Returns:
        Function (x, u) -> (A, B).
    """
    def linearizer(x, u):
        Jx, Ju = model.linearize(x, u)
        return discretize(jnp.asarray(Jx), jnp.asarray(Ju), dt)

    return linearizer


def linearize_trajectory(
    model: Model,
    trajectory: Trajectory,
    dt: float,
) -> Tuple[Array, Array]:
    """Linearize the dynamics along a trajectory.

    Computes the discrete-time matrices A[n], B[n] about every nominal
    (X[n], U[n]) pair, n = 0..N-1.

    Args:
        model: Plant model.
        trajectory: Nominal trajectory with N control steps.
        dt: Discretization step.

    Returns:
        A: Dynamics matrices of shape (N, n, n).
        B: Input matrices of shape (N, n, m).
    """
    linearizer = vectorize(linearize_model(model, dt), argnums=2)
    return linearizer(trajectory.X[:-1], trajectory.U)
