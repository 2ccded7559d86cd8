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

"""Time-varying affine feedback controllers.

A controller is a sequence of gain matrices theta[n] of shape (n+1, m)
acting on the augmented state [1; x]:

    u[n] = theta[n]' [1; x[n]]
         = theta_ff[n] + theta_fb[n]' x[n]

The first row of theta[n] is the feedforward term, the remaining n rows
are the transposed feedback gain.
"""

from dataclasses import dataclass
from typing import Optional

import jax.numpy as jnp
from jax import Array, jit, vmap

from ilqc.core.errors import DimensionMismatchError
from ilqc.lqr.riccati import PolicyCorrection


@jit
def policy_control(theta_n: Array, x: Array) -> Array:
    """Evaluate u = theta_n' [1; x]."""
    return theta_n[0] + theta_n[1:].T @ x


@dataclass
class AffineController:
    """Time-varying affine feedback controller.

    Attributes:
        theta: Gains of shape (N, n+1, m).

    Example:
        >>> controller = AffineController.zeros(horizon=20, state_dim=2,
        ...                                     control_dim=1)
        >>> u = controller(0, x)
    """

    theta: Array

    def __post_init__(self):
        self.theta = jnp.asarray(self.theta)
        if self.theta.ndim != 3 or self.theta.shape[1] < 2:
            raise DimensionMismatchError(
                f"theta must have shape (N, n+1, m), got {self.theta.shape}"
            )

    @property
    def horizon(self) -> int:
        return self.theta.shape[0]

    @property
    def state_dim(self) -> int:
        return self.theta.shape[1] - 1

    @property
    def control_dim(self) -> int:
        return self.theta.shape[2]

    @property
    def feedforward(self) -> Array:
        """theta_ff of shape (N, m)."""
        return self.theta[:, 0, :]

    @property
    def feedback(self) -> Array:
        """Feedback gains K = theta_fb' of shape (N, m, n)."""
        return jnp.swapaxes(self.theta[:, 1:, :], 1, 2)

    def __call__(self, n: int, x: Array) -> Array:
        return policy_control(self.theta[n], x)

    @classmethod
    def zeros(
        cls,
        horizon: int,
        state_dim: int,
        control_dim: int,
    ) -> 'AffineController':
        """Controller that always returns u = 0."""
        return cls(jnp.zeros((horizon, state_dim + 1, control_dim)))

    @classmethod
    def from_gain(
        cls,
        K: Array,
        horizon: int,
        x_ref: Optional[Array] = None,
        u_ref: Optional[Array] = None,
    ) -> 'AffineController':
        """Constant controller u = u_ref + K (x - x_ref).

        Args:
            K: Feedback gain of shape (m, n).
            horizon: Number of control steps N.
            x_ref: Reference state (n,), zeros if None.
            u_ref: Reference input (m,), zeros if None.
        """
        K = jnp.asarray(K)
        m, n = K.shape
        x_ref = jnp.zeros(n) if x_ref is None else jnp.asarray(x_ref)
        u_ref = jnp.zeros(m) if u_ref is None else jnp.asarray(u_ref)

        theta_n = jnp.vstack([(u_ref - K @ x_ref)[None, :], K.T])
        return cls(jnp.tile(theta_n[None], (horizon, 1, 1)))


def assemble_theta(
    X0: Array,
    U0: Array,
    duff: Array,
    K: Array,
) -> Array:
    """Rewrite a policy correction about a nominal trajectory in affine form.

    The corrected policy

        u[n] = U0[n] + duff[n] + K[n] (x[n] - X0[n])
             = (U0[n] + duff[n] - K[n] X0[n]) + K[n] x[n]

    does not depend on the nominal trajectory once the feedforward term
    theta_ff[n] = U0[n] + duff[n] - K[n] X0[n] is formed.

    Args:
        X0: Nominal states for n = 0..N-1, shape (N, n).
        U0: Nominal inputs, shape (N, m).
        duff: Feedforward corrections, shape (N, m).
        K: Feedback gains, shape (N, m, n).

    Returns:
        theta of shape (N, n+1, m).
    """
    theta_ff = U0 + duff - vmap(jnp.matmul)(K, X0)     # (N, m)
    theta_fb = jnp.swapaxes(K, 1, 2)                   # (N, n, m)
    return jnp.concatenate([theta_ff[:, None, :], theta_fb], axis=1)


def update_controller(
    X0: Array,
    U0: Array,
    policy: PolicyCorrection,
) -> AffineController:
    """Build the updated controller from a backward pass.

    Args:
        X0: Nominal state trajectory, shape (N+1, n) or (N, n).
        U0: Nominal input trajectory, shape (N, m).
        policy: Policy correction (duff, K) of length N.

    Returns:
        New AffineController; the previous controller is not modified.

    Raises:
        DimensionMismatchError: If the shapes are inconsistent.
    """
    duff, K = policy
    N, m = U0.shape
    n = X0.shape[1]
    if X0.shape[0] not in (N, N + 1):
        raise DimensionMismatchError(
            f"X0 has {X0.shape[0]} samples, expected {N} or {N + 1}")
    if duff.shape != (N, m) or K.shape != (N, m, n):
        raise DimensionMismatchError(
            f"Policy correction shapes duff={duff.shape}, K={K.shape} do not "
            f"match N={N}, n={n}, m={m}"
        )
    return AffineController(assemble_theta(X0[:N], U0, duff, K))
