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

"""Rollout utilities.

This module provides the reference simulator used by the design loop: a
closed-loop forward simulation of an affine controller on a model.
"""

from typing import Callable, Tuple, Union

import jax.numpy as jnp
from jax import Array, lax

from ilqc.core.errors import DimensionMismatchError
from ilqc.core.problem import Model, Task
from ilqc.core.trajectory import Trajectory
from ilqc.policy.affine import AffineController, policy_control
from ilqc.utils.integrators import euler, get_integrator


def closed_loop_rollout(
    step: Callable,
    theta: Array,
    x0: Array,
    *args,
) -> Tuple[Array, Array]:
    """Closed-loop rollout of an affine controller.

    Simulates:
        u[n] = theta[n]' [1; x[n]]
        x[n+1] = step(x[n], u[n], *args)

    Args:
        step: Discrete-time step function (x, u, *args) -> x_next.
        theta: Controller gains of shape (N, n+1, m).
        x0: Initial state of shape (n,).
        *args: Additional arguments passed to step.

    Returns:
        X: State trajectory of shape (N+1, n).
        U: Control sequence of shape (N, m).
    """
    def body(x, theta_n):
        u = policy_control(theta_n, x)
        x_next = step(x, u, *args)
        return x_next, (x, u)

    x_final, (X, U) = lax.scan(body, x0, theta)
    return jnp.vstack((X, x_final[None])), U


def simulate(
    model: Model,
    task: Task,
    controller: AffineController,
    integrator: Union[str, Callable] = euler,
) -> Trajectory:
    """Reference simulator: roll out a controller on a model.

    Integrates the model from task.x0 over task.time_grid() with a
    fixed-step integrator, applying the controller at every sample.

    Args:
        model: Plant model.
        task: Task providing x0, dt and the time grid.
        controller: Affine controller with task.horizon steps.
        integrator: Integrator factory or its name ('euler', 'rk4').

    Returns:
        Trajectory with N+1 samples.

    Raises:
        DimensionMismatchError: If the controller does not match the task
            horizon or the model dimensions.

    Example:
        >>> trajectory = simulate(model, task, controller)
        >>> trajectory.X.shape  # (N+1, n)
    """
    if controller.horizon != task.horizon:
        raise DimensionMismatchError(
            f"Controller has {controller.horizon} steps, task horizon is "
            f"{task.horizon}"
        )
    if (controller.state_dim != model.state_dim
            or controller.control_dim != model.control_dim):
        raise DimensionMismatchError(
            f"Controller dimensions (n={controller.state_dim}, "
            f"m={controller.control_dim}) do not match the model "
            f"(n={model.state_dim}, m={model.control_dim})"
        )

    if isinstance(integrator, str):
        integrator = get_integrator(integrator)
    step = integrator(model.dynamics, task.dt)

    X, U = closed_loop_rollout(step, controller.theta, task.x0, model.params)
    return Trajectory(t=task.time_grid(), X=X, U=U)


def make_simulator(integrator: Union[str, Callable] = euler) -> Callable:
    """Simulator (model, task, controller) -> Trajectory for an integrator."""
    def simulator(model, task, controller):
        return simulate(model, task, controller, integrator=integrator)

    return simulator
