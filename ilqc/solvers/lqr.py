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

"""Infinite-horizon LQR design about an operating point.

The resulting constant-gain controller is the usual initial controller for
ILQC.
"""

from typing import Any, Dict, Optional

import jax.numpy as jnp
import numpy as np
from absl import logging
from jax import Array

from ilqc.core.problem import Model, Task
from ilqc.core.trajectory import DesignResult, check_trajectory
from ilqc.core.types import DesignStatus, SimulatorFn
from ilqc.cost.derivatives import compile_cost
from ilqc.cost.quadratize import quadratize_cost, trajectory_cost
from ilqc.lqr.riccati import dare_scipy
from ilqc.policy.affine import AffineController
from ilqc.solvers.base import ControllerDesignerBase
from ilqc.utils.linearize import linearize_model


class LQRDesigner(ControllerDesignerBase):
    """Constant-gain LQR designer.

    Linearizes the model at (x_op, u_op), takes the cost Hessians at the
    same point and solves the discrete algebraic Riccati equation. The
    controller u = u_op + K (x - x_op) is applied over the whole horizon.

    Attributes:
        name: "lqr"
        is_iterative: False

    Example:
        >>> result = LQRDesigner().solve(model, task)
        >>> initial = result.controller
    """

    name = "lqr"
    is_iterative = False

    def __init__(
        self,
        x_op: Optional[Array] = None,
        u_op: Optional[Array] = None,
    ):
        """Initialize LQR designer.

        Args:
            x_op: Operating point state (n,), zeros if None.
            u_op: Operating point input (m,), zeros if None.
        """
        super().__init__(x_op=x_op, u_op=u_op)

    def _solve_impl(
        self,
        model: Model,
        task: Task,
        controller: AffineController,
        simulator: SimulatorFn,
        options: Dict[str, Any],
    ) -> DesignResult:
        """Internal LQR design; the initial controller is not used."""
        del controller

        x_op = options.get('x_op')
        u_op = options.get('u_op')
        x_op = jnp.zeros(model.state_dim) if x_op is None else jnp.asarray(x_op)
        u_op = jnp.zeros(model.control_dim) if u_op is None else jnp.asarray(u_op)

        derivatives = compile_cost(
            task.intermediate_cost, task.terminal_cost, task.dt)
        A, B = linearize_model(model, task.dt)(x_op, u_op)
        _, _, Qm, _, Rm, Pm = quadratize_cost(
            derivatives, task.start_time, x_op, u_op)

        P, K = dare_scipy(Qm, Rm, A, B, Pm)
        controller = AffineController.from_gain(K, task.horizon, x_op, u_op)

        trajectory = simulator(model, task, controller)
        check_trajectory(
            trajectory, model.state_dim, model.control_dim, task.horizon)
        cost = trajectory_cost(derivatives, trajectory)
        logging.info('LQR controller cost: %.4f', cost)

        return DesignResult(
            controller=controller,
            cost=cost,
            costs=np.asarray([cost]),
            status=DesignStatus.CONVERGED,
            iterations=0,
            info={
                'P': P,
                'K': K,
                'trajectory': trajectory,
            },
        )
