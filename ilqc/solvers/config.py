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

"""Configuration classes for controller designers."""

from dataclasses import dataclass, field
from typing import Any, Dict, Literal, Optional

from ilqc.core.types import DivergencePolicy, DivergencePolicyLike


def as_divergence_policy(policy: DivergencePolicyLike) -> DivergencePolicyLike:
    """Coerce a policy name to DivergencePolicy; callables pass through."""
    if isinstance(policy, DivergencePolicy) or callable(policy):
        return policy
    try:
        return DivergencePolicy(str(policy).lower())
    except ValueError:
        available = [p.value for p in DivergencePolicy]
        raise ValueError(
            f"Unknown divergence policy: {policy}. Available: {available}"
        ) from None


@dataclass
class DesignerConfig:
    """Configuration for a controller designer.

    Attributes:
        designer_type: Type of designer ('ilqc' or 'lqr').
        max_iterations: Iteration budget; None uses task.max_iteration.
        tolerance: Convergence threshold on the norm of the feedforward
            correction sequence.
        divergence_ratio: An iteration diverges when its cost exceeds this
            multiple of the previous cost.
        divergence_policy: 'continue', 'abort' or 'rollback'.
        max_condition: Largest acceptable condition number of H.
    """
    designer_type: Literal['ilqc', 'lqr'] = 'ilqc'
    max_iterations: Optional[int] = None
    tolerance: float = 0.01
    divergence_ratio: float = 2.0
    divergence_policy: Any = DivergencePolicy.CONTINUE
    max_condition: float = 1e12

    # Additional designer kwargs
    extra_options: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        self.divergence_policy = as_divergence_policy(self.divergence_policy)
        if self.tolerance < 0:
            raise ValueError(f"tolerance must be >= 0, got {self.tolerance}")
        if self.divergence_ratio <= 0:
            raise ValueError(
                f"divergence_ratio must be > 0, got {self.divergence_ratio}")

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for designer initialization."""
        if self.designer_type == 'ilqc':
            base = {
                'max_iterations': self.max_iterations,
                'tolerance': self.tolerance,
                'divergence_ratio': self.divergence_ratio,
                'divergence_policy': self.divergence_policy,
                'max_condition': self.max_condition,
            }
        else:
            base = {}
        base.update(self.extra_options)
        return base

    def build(self):
        """Create the configured designer."""
        from ilqc.solvers.base import get_designer
        return get_designer(self.designer_type, **self.to_dict())
