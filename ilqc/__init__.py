"""ILQC: Iterative linear-quadratic feedback controller design in JAX.

Computes a locally optimal time-varying affine feedback controller for a
nonlinear system by alternating rollouts of the current controller with a
Riccati backward pass about the resulting trajectory.

Main modules:
- ilqc.core: Core abstractions (Model, Task, Trajectory, DesignResult)
- ilqc.cost: Cost derivative evaluators and quadratization
- ilqc.lqr: Riccati recursions
- ilqc.policy: Affine feedback controllers
- ilqc.solvers: Controller designers (ILQC, LQR)
- ilqc.utils: Utility functions (linearize, integrators, rollout)
"""

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

# Order matters: utils pulls in cost, lqr and policy.
from . import core
from . import utils
from . import cost
from . import lqr
from . import policy
from . import solvers

from ilqc.core import (
    Model,
    Task,
    Trajectory,
    DesignResult,
    DesignStatus,
    DivergencePolicy,
    DimensionMismatchError,
    SingularGainMatrixError,
    DivergenceWarning,
)
from ilqc.policy import AffineController
from ilqc.solvers import ILQCDesigner, LQRDesigner, ilqc_design
from ilqc.utils import simulate

__version__ = '0.1.0'
