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

"""Iterative Linear Quadratic Controller (ILQC) design.

ILQC improves an affine feedback controller by repeating:
1. Rolling out the current controller to get a nominal trajectory
2. Linearizing dynamics and quadratizing cost around that trajectory
3. Solving the resulting time-varying LQ problem backward in time
4. Rewriting the locally optimal correction as a new affine controller

until the feedforward correction becomes small.
"""

import warnings
from typing import Any, Dict, Optional, Tuple

import numpy as np
from absl import logging

from ilqc.core.errors import DivergenceWarning, SingularGainMatrixError
from ilqc.core.problem import Model, Task
from ilqc.core.trajectory import DesignResult, Trajectory, check_trajectory
from ilqc.core.types import DesignStatus, DivergencePolicy, SimulatorFn
from ilqc.cost.derivatives import CostDerivatives, compile_cost
from ilqc.cost.quadratize import (
    quadratize_terminal,
    quadratize_trajectory,
    trajectory_cost,
)
from ilqc.lqr.riccati import BackwardPassResult, backward_pass
from ilqc.policy.affine import AffineController, update_controller
from ilqc.solvers.base import ControllerDesignerBase
from ilqc.solvers.config import as_divergence_policy
from ilqc.utils.linearize import linearize_trajectory


class ILQCDesigner(ControllerDesignerBase):
    """Iterative Linear Quadratic Controller designer.

    Each iteration rolls out the current controller with the simulator,
    evaluates its cost, runs the Riccati backward pass about the rollout and
    replaces the controller by the corrected affine policy. The loop stops
    once the norm of the feedforward correction sequence drops to
    `tolerance` (after at least one update) or after `max_iterations`
    updates. A final rollout reports the cost of the returned controller.

    When the cost of a rollout exceeds `divergence_ratio` times the cost of
    the previous one, a DivergenceWarning is issued and `divergence_policy`
    decides whether to continue, abort, or roll back to the previous
    controller.

    Attributes:
        name: "ilqc"
        is_iterative: True

    Example:
        >>> designer = ILQCDesigner(tolerance=0.01, divergence_policy='abort')
        >>> result = designer.solve(model, task, initial_controller)
        >>> print(f"Cost {result.cost:.4f} after {result.iterations} iterations")
    """

    name = "ilqc"
    is_iterative = True

    def __init__(
        self,
        max_iterations: Optional[int] = None,
        tolerance: float = 0.01,
        divergence_ratio: float = 2.0,
        divergence_policy: Any = DivergencePolicy.CONTINUE,
        max_condition: float = 1e12,
    ):
        """Initialize ILQC designer.

        Args:
            max_iterations: Maximum number of updates. If None, the task's
                max_iteration is used.
            tolerance: Stop once the feedforward correction norm is at most
                this value.
            divergence_ratio: Cost growth factor that flags a divergence.
            divergence_policy: DivergencePolicy, its name, or a callable
                (iteration, cost, previous_cost) -> DivergencePolicy.
            max_condition: Largest acceptable condition number of the
                control Hessian H.
        """
        super().__init__(
            max_iterations=max_iterations,
            tolerance=tolerance,
            divergence_ratio=divergence_ratio,
            divergence_policy=as_divergence_policy(divergence_policy),
            max_condition=max_condition,
        )

    def _solve_impl(
        self,
        model: Model,
        task: Task,
        controller: AffineController,
        simulator: SimulatorFn,
        options: Dict[str, Any],
    ) -> DesignResult:
        """Internal ILQC design loop."""
        # Extract options
        max_iterations = options.get('max_iterations')
        if max_iterations is None:
            max_iterations = task.max_iteration
        tolerance = options.get('tolerance', 0.01)
        divergence_ratio = options.get('divergence_ratio', 2.0)
        divergence_policy = as_divergence_policy(
            options.get('divergence_policy', DivergencePolicy.CONTINUE))
        max_condition = options.get('max_condition', 1e12)

        # Cost evaluators are built once for the whole design
        derivatives = compile_cost(
            task.intermediate_cost, task.terminal_cost, task.dt)

        def rollout(controller):
            trajectory = simulator(model, task, controller)
            check_trajectory(
                trajectory, model.state_dim, model.control_dim, task.horizon)
            return trajectory, trajectory_cost(derivatives, trajectory)

        costs = []
        divergences = []
        status = None
        duff_norm = float('inf')
        previous = None

        i = 1
        while i <= max_iterations and (duff_norm > tolerance or i == 1):
            trajectory, cost = rollout(controller)
            costs.append(cost)
            logging.info('Cost of iteration %2d: %.4f', i, cost)

            if i > 1 and cost > divergence_ratio * costs[-2]:
                divergences.append(i)
                action = self._on_divergence(
                    divergence_policy, i, cost, costs[-2])
                if action is DivergencePolicy.ABORT:
                    status = DesignStatus.DIVERGED
                    break
                if action is DivergencePolicy.ROLLBACK:
                    controller, trajectory = previous
                    cost = costs[-2]
                    status = DesignStatus.DIVERGED
                    break

            result = self._backward(model, task, derivatives, trajectory)
            singular = result.singular_steps(max_condition)
            if singular.size:
                n = int(singular[-1])
                raise SingularGainMatrixError(
                    timestep=n,
                    condition=float(result.condition[n]),
                    iteration=i,
                )

            previous = (controller, trajectory)
            controller = update_controller(
                trajectory.X, trajectory.U, result.policy)
            duff_norm = result.policy.feedforward_norm()
            logging.vlog(
                1, 'Iteration %2d: |duff| = %.3e, max cond(H) = %.3e',
                i, duff_norm, float(np.max(result.condition)))
            i += 1

        if status is None:
            # Simulate the last update to report its cost
            trajectory, cost = rollout(controller)
            costs.append(cost)
            logging.info('Cost of iteration %2d: %.4f', i, cost)
            if duff_norm <= tolerance:
                status = DesignStatus.CONVERGED
            else:
                status = DesignStatus.MAX_ITERATIONS

        logging.info('ILQC finished with status %s after %d iterations '
                     '(cost %.4f)', status.name, i - 1, cost)

        return DesignResult(
            controller=controller,
            cost=float(cost),
            costs=np.asarray(costs),
            status=status,
            iterations=i - 1,
            info={
                'duff_norm': duff_norm,
                'divergences': divergences,
                'trajectory': trajectory,
            },
        )

    @staticmethod
    def _backward(
        model: Model,
        task: Task,
        derivatives: CostDerivatives,
        trajectory: Trajectory,
    ) -> BackwardPassResult:
        """Linearize, quadratize and run the Riccati recursion."""
        A, B = linearize_trajectory(model, trajectory, task.dt)
        quadratization = quadratize_trajectory(derivatives, trajectory)
        terminal = quadratize_terminal(derivatives, trajectory.final_state)
        return backward_pass(quadratization, terminal, A, B)

    @staticmethod
    def _on_divergence(
        policy: Any,
        iteration: int,
        cost: float,
        previous_cost: float,
    ) -> DivergencePolicy:
        """Issue a DivergenceWarning and resolve the policy for this event."""
        warning = DivergenceWarning(iteration, cost, previous_cost)
        logging.warning('%s', warning)
        warnings.warn(warning, stacklevel=4)

        if not isinstance(policy, DivergencePolicy):
            policy = as_divergence_policy(policy(iteration, cost, previous_cost))
            if not isinstance(policy, DivergencePolicy):
                raise TypeError(
                    f"Divergence handler must return a DivergencePolicy, "
                    f"got {policy!r}")
        return policy


def ilqc_design(
    model: Model,
    task: Task,
    controller: Optional[AffineController] = None,
    simulator: Optional[SimulatorFn] = None,
    **options,
) -> Tuple[AffineController, np.ndarray]:
    """Functional interface: returns the designed controller and cost history.

    Args:
        model: Plant model.
        task: Task specification.
        controller: Initial controller (zero controller if None).
        simulator: Rollout executor; the reference simulator if None.
        **options: ILQCDesigner options.

    Returns:
        Tuple of (controller, costs).
    """
    designer = ILQCDesigner(**options)
    if simulator is None:
        result = designer.solve(model, task, controller)
    else:
        result = designer.solve(model, task, controller, simulator)
    return result.controller, result.costs
