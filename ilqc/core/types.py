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

"""Type definitions for iterative LQ controller design."""

from __future__ import annotations

from enum import Enum, auto
from typing import TYPE_CHECKING, Any, Callable, Protocol, Tuple, Union

from jax import Array

if TYPE_CHECKING:
    from ilqc.core.problem import Model, Task
    from ilqc.core.trajectory import Trajectory
    from ilqc.policy.affine import AffineController


# Shapes used throughout the package
# State: (n,) array
# Control: (m,) array
# StateTrajectory: (N+1, n) array
# ControlTrajectory: (N, m) array
# Controller gains: (N, n+1, m) array

PyTree = Any


class DesignStatus(Enum):
    """Status codes for controller design runs."""
    CONVERGED = auto()        # Feedforward correction below tolerance
    MAX_ITERATIONS = auto()   # Iteration budget exhausted
    DIVERGED = auto()         # Stopped by the divergence policy
    UNKNOWN = auto()


class DivergencePolicy(Enum):
    """What the iteration driver does when the cost blows up."""
    CONTINUE = 'continue'
    ABORT = 'abort'
    ROLLBACK = 'rollback'


# Function type protocols

class DynamicsFn(Protocol):
    """Protocol for continuous-time dynamics.

    Signature: dynamics(x, u, params) -> dx/dt
    """
    def __call__(self, x: Array, u: Array, params: PyTree = ()) -> Array:
        ...


class JacobianFn(Protocol):
    """Protocol for the dynamics linearizer.

    Signature: jacobians(x, u, params) -> (df/dx, df/du)

    Returns:
        Jx: Continuous-time state Jacobian (n, n)
        Ju: Continuous-time input Jacobian (n, m)
    """
    def __call__(
        self,
        x: Array,
        u: Array,
        params: PyTree = ()
    ) -> Tuple[Array, Array]:
        ...


class IntermediateCostFn(Protocol):
    """Protocol for the running cost density l(t, x, u) -> scalar."""
    def __call__(self, t: float, x: Array, u: Array) -> float:
        ...


class TerminalCostFn(Protocol):
    """Protocol for the terminal cost h(x) -> scalar."""
    def __call__(self, x: Array) -> float:
        ...


class SimulatorFn(Protocol):
    """Protocol for the forward rollout of a controller.

    Signature: simulator(model, task, controller) -> trajectory
    """
    def __call__(
        self,
        model: 'Model',
        task: 'Task',
        controller: 'AffineController',
    ) -> 'Trajectory':
        ...


# Decides what to do on a divergence event:
# (iteration, cost, previous_cost) -> DivergencePolicy
DivergenceHandler = Callable[[int, float, float], DivergencePolicy]

DivergencePolicyLike = Union[DivergencePolicy, str, DivergenceHandler]
