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

"""Controller designers with class-based interface.

Available designers:
- ILQCDesigner: Iterative Linear Quadratic Controller
- LQRDesigner: Constant-gain LQR about an operating point

Example:
    >>> from ilqc.solvers import ILQCDesigner, LQRDesigner
    >>> initial = LQRDesigner().solve(model, task).controller
    >>> result = ILQCDesigner().solve(model, task, initial)
"""

from ilqc.solvers.base import (
    ControllerDesigner,
    ControllerDesignerBase,
    get_designer,
)

from ilqc.solvers.config import (
    DesignerConfig,
    as_divergence_policy,
)

from ilqc.solvers.ilqc import ILQCDesigner, ilqc_design
from ilqc.solvers.lqr import LQRDesigner

__all__ = [
    # Base classes
    'ControllerDesigner',
    'ControllerDesignerBase',
    'get_designer',
    # Configuration
    'DesignerConfig',
    'as_divergence_policy',
    # Designers
    'ILQCDesigner',
    'ilqc_design',
    'LQRDesigner',
]
