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

"""Base classes and protocols for controller designers.

This module defines the standard interface for controller design
algorithms. All designers implement the ControllerDesigner protocol.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, Optional, Protocol, runtime_checkable

from ilqc.core.problem import Model, Task
from ilqc.core.trajectory import DesignResult
from ilqc.core.types import SimulatorFn
from ilqc.policy.affine import AffineController
from ilqc.utils.rollout import simulate


@runtime_checkable
class ControllerDesigner(Protocol):
    """Protocol for controller design algorithms.

    Attributes:
        name: Human-readable name of the designer.
        is_iterative: Whether the designer alternates rollouts and updates.
    """

    name: str
    is_iterative: bool

    def solve(
        self,
        model: Model,
        task: Task,
        controller: Optional[AffineController] = None,
        simulator: SimulatorFn = simulate,
        options: Optional[Dict[str, Any]] = None,
    ) -> DesignResult:
        """Design a controller for a task.

        Args:
            model: Plant model.
            task: Task specification (cost, horizon, initial state).
            controller: Initial controller; designers that need one create
                a default if None.
            simulator: Rollout executor (model, task, controller) -> Trajectory.
            options: Designer-specific options (overrides defaults).

        Returns:
            DesignResult containing the designed controller.
        """
        ...


class ControllerDesignerBase(ABC):
    """Abstract base class for controller designers.

    Provides common functionality and enforces the interface.
    Subclasses should implement _solve_impl().
    """

    name: str = "base"
    is_iterative: bool = False

    def __init__(self, **options):
        """Initialize designer with default options.

        Args:
            **options: Designer-specific default options.
        """
        self.default_options = options

    def solve(
        self,
        model: Model,
        task: Task,
        controller: Optional[AffineController] = None,
        simulator: SimulatorFn = simulate,
        options: Optional[Dict[str, Any]] = None,
    ) -> DesignResult:
        """Design a controller for a task.

        Merges options with defaults and calls _solve_impl().
        """
        merged_options = {**self.default_options}
        if options:
            merged_options.update(options)

        if controller is None:
            controller = AffineController.zeros(
                task.horizon, model.state_dim, model.control_dim)

        return self._solve_impl(model, task, controller, simulator,
                                merged_options)

    @abstractmethod
    def _solve_impl(
        self,
        model: Model,
        task: Task,
        controller: AffineController,
        simulator: SimulatorFn,
        options: Dict[str, Any],
    ) -> DesignResult:
        """Internal solve implementation.

        Subclasses must implement this method.
        """
        ...


def get_designer(name: str, **kwargs) -> ControllerDesignerBase:
    """Factory function to create a designer by name.

    Args:
        name: Designer name ('ilqc' or 'lqr').
        **kwargs: Designer-specific options.

    Returns:
        ControllerDesigner instance.

    Raises:
        ValueError: If designer name is not recognized.
    """
    from ilqc.solvers.ilqc import ILQCDesigner
    from ilqc.solvers.lqr import LQRDesigner

    _DESIGNERS = {
        'ilqc': ILQCDesigner,
        'lqr': LQRDesigner,
    }

    name_lower = name.lower()
    if name_lower not in _DESIGNERS:
        available = list(_DESIGNERS.keys())
        raise ValueError(
            f"Unknown designer: {name}. Available: {available}"
        )

    return _DESIGNERS[name_lower](**kwargs)
