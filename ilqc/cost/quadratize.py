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

"""Quadratic approximations of the cost along a trajectory."""

from typing import NamedTuple

import jax.numpy as jnp
from jax import Array

from ilqc.core.trajectory import Trajectory
from ilqc.cost.derivatives import CostDerivatives
from ilqc.utils.linearize import vectorize


class CostQuadratization(NamedTuple):
    """Second-order expansion of the per-step cost at (t, x, u).

    When produced by `quadratize_trajectory` every field carries a leading
    time axis of length N.
    """
    q: Array   # ()
    Qv: Array  # (n,)
    Qm: Array  # (n, n)
    Rv: Array  # (m,)
    Rm: Array  # (m, m)
    Pm: Array  # (m, n)


class TerminalQuadratization(NamedTuple):
    """Second-order expansion of the terminal cost at x."""
    q: Array   # ()
    Qv: Array  # (n,)
    Qm: Array  # (n, n)


def quadratize_cost(
    derivatives: CostDerivatives,
    t: float,
    x: Array,
    u: Array,
) -> CostQuadratization:
    """Evaluate the intermediate cost expansion at a single (t, x, u)."""
    return CostQuadratization(
        q=derivatives.q(t, x, u),
        Qv=derivatives.Qv(t, x, u),
        Qm=derivatives.Qm(t, x, u),
        Rv=derivatives.Rv(t, x, u),
        Rm=derivatives.Rm(t, x, u),
        Pm=derivatives.Pm(t, x, u),
    )


def quadratize_terminal(
    derivatives: CostDerivatives,
    x: Array,
) -> TerminalQuadratization:
    """Evaluate the terminal cost expansion at x."""
    return TerminalQuadratization(
        q=derivatives.qf(x),
        Qv=derivatives.Qvf(x),
        Qm=derivatives.Qmf(x),
    )


def quadratize_trajectory(
    derivatives: CostDerivatives,
    trajectory: Trajectory,
) -> CostQuadratization:
    """Evaluate the cost expansion at every control step of a trajectory.

    Each step is evaluated independently, so the result is identical to
    calling `quadratize_cost` N times.

    Args:
        derivatives: Compiled cost evaluators.
        trajectory: Nominal trajectory with N control steps.

    Returns:
        CostQuadratization with stacked fields of leading dimension N.
    """
    quadratizer = vectorize(
        lambda t, x, u: quadratize_cost(derivatives, t, x, u), argnums=3)
    return quadratizer(trajectory.t[:-1], trajectory.X[:-1], trajectory.U)


def evaluate(derivatives: CostDerivatives, trajectory: Trajectory) -> Array:
    """Per-step cost at each control step, shape (N,)."""
    return vectorize(derivatives.q)(
        trajectory.t[:-1], trajectory.X[:-1], trajectory.U)


def trajectory_cost(
    derivatives: CostDerivatives,
    trajectory: Trajectory,
) -> float:
    """Total cost of a rollout: sum of the per-step costs plus terminal cost.

    Args:
        derivatives: Compiled cost evaluators.
        trajectory: Rollout to evaluate.

    Returns:
        Scalar cost.
    """
    running = jnp.sum(evaluate(derivatives, trajectory))
    return float(running + derivatives.qf(trajectory.final_state))
