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

"""Riccati recursions.

This module provides:
- The backward pass of iterative LQ design (time-varying, affine)
- The infinite-horizon discrete algebraic Riccati equation (DARE)

Example:
    >>> from ilqc.lqr import backward_pass
    >>>
    >>> result = backward_pass(quadratization, terminal, A, B)
    >>> duff, K = result.policy
"""

from ilqc.lqr.riccati import (
    ValueFunction,
    PolicyCorrection,
    BackwardPassResult,
    riccati_step,
    backward_pass,
    dare_scipy,
)

__all__ = [
    'ValueFunction',
    'PolicyCorrection',
    'BackwardPassResult',
    'riccati_step',
    'backward_pass',
    'dare_scipy',
]
