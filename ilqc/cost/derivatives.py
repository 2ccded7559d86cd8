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

"""Compilation of cost functions into derivative evaluators.

The design loop needs, at every timestep of every iteration, the value,
gradients and Hessians of the per-step cost. `compile_cost` builds these
evaluators once with JAX automatic differentiation and JIT compilation.
Hand-written analytic evaluators can be used instead by constructing
`CostDerivatives` directly.
"""

from typing import Callable, NamedTuple

from jax import grad, hessian, jacobian, jit

from ilqc.core.types import IntermediateCostFn, TerminalCostFn


class CostDerivatives(NamedTuple):
    """Numeric evaluators of a cost specification.

    The intermediate evaluators take (t, x, u) and are already scaled by the
    timestep, i.e. they describe the discrete per-step cost l(t, x, u) dt.
    The terminal evaluators take (x).

    Attributes:
        q: Per-step cost value, scalar.
        Qv: Gradient w.r.t. state, shape (n,).
        Qm: Hessian w.r.t. state, shape (n, n).
        Rv: Gradient w.r.t. input, shape (m,).
        Rm: Hessian w.r.t. input, shape (m, m).
        Pm: Cross Hessian d2/du dx, shape (m, n).
        qf: Terminal cost value, scalar.
        Qvf: Terminal cost gradient, shape (n,).
        Qmf: Terminal cost Hessian, shape (n, n).
    """
    q: Callable
    Qv: Callable
    Qm: Callable
    Rv: Callable
    Rm: Callable
    Pm: Callable
    qf: Callable
    Qvf: Callable
    Qmf: Callable


def discrete_cost(intermediate_cost: IntermediateCostFn, dt: float) -> Callable:
    """Convert a continuous-time cost density into a per-step cost."""
    def step_cost(t, x, u):
        return intermediate_cost(t, x, u) * dt

    return step_cost


def compile_cost(
    intermediate_cost: IntermediateCostFn,
    terminal_cost: TerminalCostFn,
    dt: float,
) -> CostDerivatives:
    """Build the nine cost evaluators by automatic differentiation.

    Args:
        intermediate_cost: Cost density l(t, x, u) -> scalar. Must be
            twice differentiable in x and u and traceable by JAX.
        terminal_cost: Terminal cost h(x) -> scalar.
        dt: Discretization step used to scale the cost density.

    Returns:
        CostDerivatives holding JIT-compiled evaluators.

    Example:
        >>> l = lambda t, x, u: x @ x + 0.1 * u @ u
        >>> h = lambda x: 10.0 * x @ x
        >>> derivatives = compile_cost(l, h, dt=0.1)
        >>> Qm = derivatives.Qm(0.0, x, u)  # 0.2 * I
    """
    l = discrete_cost(intermediate_cost, dt)

    l_x = grad(l, argnums=1)
    l_u = grad(l, argnums=2)

    return CostDerivatives(
        q=jit(l),
        Qv=jit(l_x),
        Qm=jit(hessian(l, argnums=1)),
        Rv=jit(l_u),
        Rm=jit(hessian(l, argnums=2)),
        Pm=jit(jacobian(l_u, argnums=1)),
        qf=jit(terminal_cost),
        Qvf=jit(grad(terminal_cost)),
        Qmf=jit(hessian(terminal_cost)),
    )
