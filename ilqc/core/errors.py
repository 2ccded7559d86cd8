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

"""Exceptions and warnings raised during controller design."""

from typing import Optional


class ILQCError(Exception):
    """Base class for controller design errors."""


class DimensionMismatchError(ILQCError, ValueError):
    """A trajectory or controller disagrees with the configured dimensions."""


class SingularGainMatrixError(ILQCError, ArithmeticError):
    """The control Hessian H could not be inverted reliably.

    Attributes:
        iteration: Design iteration in which the failure happened.
        timestep: Latest timestep whose H was singular or ill-conditioned.
        condition: Condition number of H at that timestep.
    """

    def __init__(
        self,
        timestep: int,
        condition: float,
        iteration: Optional[int] = None,
    ):
        self.timestep = timestep
        self.condition = condition
        self.iteration = iteration
        where = f"timestep {timestep}"
        if iteration is not None:
            where = f"iteration {iteration}, {where}"
        super().__init__(
            f"Control Hessian H is singular or ill-conditioned at {where} "
            f"(condition number {condition:.3e})"
        )


class DivergenceWarning(UserWarning):
    """The cost of an iteration exceeded the divergence threshold.

    Attributes:
        iteration: Iteration whose rollout produced the cost.
        cost: Cost of that rollout.
        previous_cost: Cost of the rollout of the previous iteration.
    """

    def __init__(self, iteration: int, cost: float, previous_cost: float):
        self.iteration = iteration
        self.cost = cost
        self.previous_cost = previous_cost
        super().__init__(
            f"Cost of iteration {iteration} ({cost:.4f}) exceeds the "
            f"previous cost ({previous_cost:.4f}); the solution may be "
            f"unstable."
        )
