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

"""Trajectory and design result data structures."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Dict, Optional, Tuple

import numpy as np
from jax import Array

from ilqc.core.errors import DimensionMismatchError
from ilqc.core.types import DesignStatus

if TYPE_CHECKING:
    from ilqc.policy.affine import AffineController


@dataclass
class Trajectory:
    """Sampled rollout of a controller.

    A trajectory has N+1 samples. The last sample has no control, so U has
    one row fewer than t and X.

    Attributes:
        t: Sample times of shape (N+1,).
        X: State trajectory of shape (N+1, n). X[n] is the state at t[n].
        U: Control trajectory of shape (N, m). U[n] is applied on
            [t[n], t[n+1]).
    """

    t: Array
    X: Array
    U: Array

    @property
    def horizon(self) -> int:
        """Return the number of control steps N."""
        return self.U.shape[0]

    @property
    def state_dim(self) -> int:
        """Return the state dimension n."""
        return self.X.shape[1]

    @property
    def control_dim(self) -> int:
        """Return the control dimension m."""
        return self.U.shape[1]

    @property
    def final_state(self) -> Array:
        return self.X[-1]

    def at(self, n: int) -> Tuple[Array, Array, Array]:
        """Return the nominal (t, x, u) at control step n."""
        return self.t[n], self.X[n], self.U[n]


def check_trajectory(
    trajectory: Trajectory,
    state_dim: int,
    control_dim: int,
    horizon: int,
) -> None:
    """Validate a rollout against the configured problem dimensions.

    Args:
        trajectory: Rollout to check.
        state_dim: Expected state dimension n.
        control_dim: Expected control dimension m.
        horizon: Expected number of control steps N.

    Raises:
        DimensionMismatchError: If any shape disagrees.
    """
    t_shape = np.shape(trajectory.t)
    X_shape = np.shape(trajectory.X)
    U_shape = np.shape(trajectory.U)

    expected = {
        't': (horizon + 1,),
        'X': (horizon + 1, state_dim),
        'U': (horizon, control_dim),
    }
    actual = {'t': t_shape, 'X': X_shape, 'U': U_shape}

    mismatched = [
        f"{name}: expected {expected[name]}, got {actual[name]}"
        for name in ('t', 'X', 'U')
        if tuple(actual[name]) != expected[name]
    ]
    if mismatched:
        raise DimensionMismatchError(
            "Trajectory does not match the configured dimensions "
            f"(n_x={state_dim}, n_u={control_dim}, N={horizon}): "
            + "; ".join(mismatched)
        )


@dataclass
class DesignResult:
    """Container for controller design results.

    Attributes:
        controller: Designed affine feedback controller.
        cost: Cost of the rollout of the returned controller.
        costs: Cost of every rollout performed, in order. The first entry
            is the cost of the initial controller.
        status: Why the design loop stopped.
        iterations: Number of backward passes performed.
        info: Dictionary with design diagnostics:
            - 'duff_norm': Norm of the last feedforward correction
            - 'divergences': Iterations that triggered a DivergenceWarning
            - 'trajectory': Last rollout

    Example:
        >>> result = ILQCDesigner().solve(model, task, controller)
        >>> if result.converged:
        ...     theta = result.controller.theta
    """

    controller: 'AffineController'
    cost: float
    costs: np.ndarray
    status: DesignStatus = DesignStatus.UNKNOWN
    iterations: int = 0
    info: Dict[str, Any] = field(default_factory=dict)

    @property
    def converged(self) -> bool:
        """Return True if the feedforward tolerance was met."""
        return self.status == DesignStatus.CONVERGED

    @property
    def trajectory(self) -> Optional[Trajectory]:
        return self.info.get('trajectory', None)
