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

"""Plant model and task specification."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple

import jax.numpy as jnp
from jax import Array, jacobian

from ilqc.core.types import (
    PyTree,
    DynamicsFn,
    JacobianFn,
    IntermediateCostFn,
    TerminalCostFn,
)


@dataclass
class Model:
    """Continuous-time plant model.

    The model is an external collaborator of the design loop: the solver
    only ever asks it for Jacobians at a nominal (x, u) pair, and the
    simulator integrates its dynamics.

        dx/dt = dynamics(x, u, params)

    Attributes:
        dynamics: Continuous-time dynamics (x, u, params) -> dx/dt.
        state_dim: Dimension of the state vector (n).
        control_dim: Dimension of the control vector (m).
        params: Model parameters passed to dynamics and jacobians.
        jacobians: Optional analytic linearization
            (x, u, params) -> (df/dx, df/du). If None, the Jacobians are
            obtained from `dynamics` by automatic differentiation.

    Example:
        >>> def pendulum(x, u, params):
        ...     g, l = params
        ...     return jnp.array([x[1], -g / l * jnp.sin(x[0]) + u[0]])
        ...
        >>> model = Model(pendulum, state_dim=2, control_dim=1,
        ...               params=(9.81, 1.0))
        >>> Jx, Ju = model.linearize(jnp.zeros(2), jnp.zeros(1))
    """

    dynamics: DynamicsFn
    state_dim: int
    control_dim: int
    params: PyTree = ()
    jacobians: Optional[JacobianFn] = None

    def __post_init__(self):
        if self.state_dim < 1:
            raise ValueError(f"state_dim must be >= 1, got {self.state_dim}")
        if self.control_dim < 1:
            raise ValueError(
                f"control_dim must be >= 1, got {self.control_dim}")

    def linearize(self, x: Array, u: Array) -> Tuple[Array, Array]:
        """Continuous-time Jacobians (df/dx, df/du) at (x, u)."""
        if self.jacobians is not None:
            return self.jacobians(x, u, self.params)
        jacobian_x = jacobian(self.dynamics)
        jacobian_u = jacobian(self.dynamics, argnums=1)
        return jacobian_x(x, u, self.params), jacobian_u(x, u, self.params)


@dataclass
class Task:
    """Optimal control task over a fixed, uniformly sampled horizon.

        min  sum_{n=0}^{N-1} l(t_n, x_n, u_n) dt + h(x_N)

    Time samples run from start_time to goal_time inclusive, spaced by dt,
    so the horizon has N = n_t - 1 control steps.

    Attributes:
        x0: Initial state (n,).
        start_time: Time of the first sample.
        goal_time: Time of the last sample.
        dt: Discretization step.
        intermediate_cost: Running cost density l(t, x, u) -> scalar.
        terminal_cost: Terminal cost h(x) -> scalar.
        max_iteration: Default iteration budget of the design loop.
    """

    x0: Array
    start_time: float
    goal_time: float
    dt: float
    intermediate_cost: IntermediateCostFn
    terminal_cost: TerminalCostFn
    max_iteration: int = 10

    def __post_init__(self):
        self.x0 = jnp.asarray(self.x0)
        if self.dt <= 0:
            raise ValueError(f"dt must be > 0, got {self.dt}")
        if self.goal_time <= self.start_time:
            raise ValueError(
                f"goal_time ({self.goal_time}) must be > start_time "
                f"({self.start_time})"
            )

    @property
    def n_t(self) -> int:
        """Number of time samples, both ends included."""
        return int(round((self.goal_time - self.start_time) / self.dt)) + 1

    @property
    def horizon(self) -> int:
        """Number of control steps N."""
        return self.n_t - 1

    def time_grid(self) -> Array:
        """Sample times, shape (N+1,)."""
        return self.start_time + self.dt * jnp.arange(self.n_t)
