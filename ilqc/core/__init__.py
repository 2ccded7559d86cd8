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

"""Core abstractions for controller design.

This module provides the fundamental data structures and type definitions:

- Model, Task: Plant model and task specification
- Trajectory: Sampled rollout of a controller
- DesignResult: Designed controller plus design metadata
- Exceptions and warnings for the failure modes of the design loop
"""

from ilqc.core.types import (
    DesignStatus,
    DivergencePolicy,
    PyTree,
    DynamicsFn,
    JacobianFn,
    IntermediateCostFn,
    TerminalCostFn,
    SimulatorFn,
    DivergenceHandler,
    DivergencePolicyLike,
)

from ilqc.core.errors import (
    ILQCError,
    DimensionMismatchError,
    SingularGainMatrixError,
    DivergenceWarning,
)

from ilqc.core.trajectory import (
    Trajectory,
    DesignResult,
    check_trajectory,
)

from ilqc.core.problem import (
    Model,
    Task,
)

__all__ = [
    # Types
    'DesignStatus',
    'DivergencePolicy',
    'PyTree',
    'DynamicsFn',
    'JacobianFn',
    'IntermediateCostFn',
    'TerminalCostFn',
    'SimulatorFn',
    'DivergenceHandler',
    'DivergencePolicyLike',
    # Errors
    'ILQCError',
    'DimensionMismatchError',
    'SingularGainMatrixError',
    'DivergenceWarning',
    # Data structures
    'Trajectory',
    'DesignResult',
    'check_trajectory',
    # Problem
    'Model',
    'Task',
]
