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

"""Cost derivatives and quadratic cost approximations.

Example:
    >>> from ilqc.cost import compile_cost, quadratize_cost
    >>>
    >>> derivatives = compile_cost(l, h, dt=0.1)
    >>> q, Qv, Qm, Rv, Rm, Pm = quadratize_cost(derivatives, t, x, u)
"""

from ilqc.cost.derivatives import (
    CostDerivatives,
    compile_cost,
    discrete_cost,
)

from ilqc.cost.quadratize import (
    CostQuadratization,
    TerminalQuadratization,
    quadratize_cost,
    quadratize_terminal,
    quadratize_trajectory,
    evaluate,
    trajectory_cost,
)

__all__ = [
    # Derivatives
    'CostDerivatives',
    'compile_cost',
    'discrete_cost',
    # Quadratization
    'CostQuadratization',
    'TerminalQuadratization',
    'quadratize_cost',
    'quadratize_terminal',
    'quadratize_trajectory',
    'evaluate',
    'trajectory_cost',
]
