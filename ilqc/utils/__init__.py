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

"""Utility functions for controller design.

This module provides the computational building blocks used by the design
loop:

- Vectorization along trajectories and Euler discretization of Jacobians
- Symmetric matrix utilities
- Numerical integrators for continuous-time dynamics
- The reference simulator
"""

# Linearization utilities
from ilqc.utils.linearize import (
    vectorize,
    discretize,
    linearize_model,
    linearize_trajectory,
)

# Symmetric matrix utilities
from ilqc.utils.psd import (
    symmetrize,
    is_symmetric,
    is_psd,
    condition_number,
)

# Integrators
from ilqc.utils.integrators import (
    euler,
    rk4,
    get_integrator,
)

# Rollout utilities
from ilqc.utils.rollout import (
    closed_loop_rollout,
    simulate,
    make_simulator,
)

__all__ = [
    # Linearization
    'vectorize',
    'discretize',
    'linearize_model',
    'linearize_trajectory',
    # Symmetric matrices
    'symmetrize',
    'is_symmetric',
    'is_psd',
    'condition_number',
    # Integrators
    'euler',
    'rk4',
    'get_integrator',
    # Rollout
    'closed_loop_rollout',
    'simulate',
    'make_simulator',
]
