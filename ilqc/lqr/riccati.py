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

"""Riccati recursions for iterative LQ controller design.

Provides the backward pass of the iterative LQ scheme, which propagates a
quadratic value function about a nominal trajectory,

    V(dx, n) = s[n] + dx' Sv[n] + 1/2 dx' Sm[n] dx,

and the infinite-horizon discrete algebraic Riccati equation (DARE) used to
design LQR controllers.
"""

from typing import NamedTuple, Optional, Tuple

import jax.numpy as jnp
import jax.scipy as jsp
import numpy as np
from jax import Array, jit, lax

from ilqc.cost.quadratize import CostQuadratization, TerminalQuadratization
from ilqc.utils.psd import condition_number, symmetrize


class ValueFunction(NamedTuple):
    """Quadratic cost-to-go coefficients for n = 0..N."""
    s: Array   # (N+1,)
    Sv: Array  # (N+1, n)
    Sm: Array  # (N+1, n, n)

    def at(self, n: int) -> Tuple[Array, Array, Array]:
        return self.s[n], self.Sv[n], self.Sm[n]


class PolicyCorrection(NamedTuple):
    """Locally optimal input perturbation du[n] = duff[n] + K[n] dx[n]."""
    duff: Array  # (N, m)
    K: Array     # (N, m, n)

    @property
    def horizon(self) -> int:
        return self.duff.shape[0]

    def at(self, n: int) -> Tuple[Array, Array]:
        return self.duff[n], self.K[n]

    def feedforward_norm(self) -> float:
        """Euclidean norm of the whole feedforward correction sequence."""
        return float(jnp.linalg.norm(self.duff))


class BackwardPassResult(NamedTuple):
    """Output of `backward_pass`.

    Attributes:
        value: Value function coefficients, length N+1.
        policy: Policy correction, length N.
        H: Symmetrized control Hessians used at each step, (N, m, m).
        condition: Condition number of each H, (N,).
    """
    value: ValueFunction
    policy: PolicyCorrection
    H: Array
    condition: Array

    def singular_steps(self, max_condition: float) -> np.ndarray:
        """Timesteps whose H is singular, ill-conditioned or non-finite."""
        cond = np.asarray(self.condition)
        duff = np.asarray(self.policy.duff)
        K = np.asarray(self.policy.K)
        finite = (
            np.isfinite(cond)
            & np.all(np.isfinite(duff), axis=-1)
            & np.all(np.isfinite(K), axis=(-2, -1))
        )
        bad = ~finite | (np.where(finite, cond, 0.0) > max_condition)
        return np.flatnonzero(bad)


@jit
def riccati_step(
    s: Array,
    Sv: Array,
    Sm: Array,
    quadratization: CostQuadratization,
    A: Array,
    B: Array,
) -> Tuple[Tuple[Array, Array, Array], Tuple[Array, Array, Array, Array]]:
    """Single backward step of the iterative LQ recursion.

    Given the value function at n+1 and the local LQ model at n, computes
    the optimal input perturbation and the value function at n:

        g = Rv + B' Sv
        G = Pm + B' Sm A
        H = Rm + B' Sm B          (symmetrized)
        duff = -H^{-1} g
        K = -H^{-1} G

        Sm_n = Qm + A' Sm A + K' H K + K' G + G' K
        Sv_n = Qv + A' Sv + K' H duff + K' g + G' duff
        s_n  = q + s + 1/2 duff' H duff + duff' g

    Args:
        s: Value function constant at n+1 (scalar).
        Sv: Value function gradient at n+1 (n,).
        Sm: Value function Hessian at n+1 (n, n).
        quadratization: Cost expansion (q, Qv, Qm, Rv, Rm, Pm) at step n.
        A: Discrete-time dynamics matrix at n (n, n).
        B: Discrete-time input matrix at n (n, m).

    Returns:
        Tuple of:
            - (s_n, Sv_n, Sm_n): Value function at n
            - (duff, K, H, cond): Feedforward (m,), gain (m, n), the
              symmetrized H (m, m) and its condition number
    """
    q, Qv, Qm, Rv, Rm, Pm = quadratization

    # Control dependent terms
    BtSm = B.T @ Sm
    g = Rv + B.T @ Sv   # (m,)
    G = Pm + BtSm @ A   # (m, n)
    H = Rm + BtSm @ B   # (m, m)

    # Round-off makes H slightly asymmetric
    H = symmetrize(H)

    # Solve for [duff, K] in one factorization
    duff_K = jsp.linalg.solve(
        H, -jnp.column_stack([g[:, None], G]), assume_a='sym')
    duff = duff_K[:, 0]
    K = duff_K[:, 1:]

    Sm_n = symmetrize(
        Qm + A.T @ Sm @ A + K.T @ H @ K + K.T @ G + G.T @ K
    )
    Sv_n = Qv + A.T @ Sv + K.T @ H @ duff + K.T @ g + G.T @ duff
    s_n = q + s + 0.5 * duff @ H @ duff + duff @ g

    return (s_n, Sv_n, Sm_n), (duff, K, H, condition_number(H))


@jit
def backward_pass(
    quadratization: CostQuadratization,
    terminal: TerminalQuadratization,
    A: Array,
    B: Array,
) -> BackwardPassResult:
    """Time-varying Riccati backward pass about a nominal trajectory.

    Starts from the terminal cost expansion at the final nominal state and
    runs `riccati_step` from n = N-1 down to n = 0. The recursion is
    strictly sequential in time.

    Args:
        quadratization: Stacked cost expansions, fields with leading
            dimension N.
        terminal: Terminal cost expansion at the final nominal state.
        A: Dynamics matrices (N, n, n).
        B: Input matrices (N, n, m).

    Returns:
        BackwardPassResult with value function (length N+1), policy
        correction (length N), control Hessians and their condition numbers.
    """
    def body(carry, inputs):
        s, Sv, Sm = carry
        quad_n, A_n, B_n = inputs
        value_n, (duff, K, H, cond) = riccati_step(s, Sv, Sm, quad_n, A_n, B_n)
        return value_n, (value_n, duff, K, H, cond)

    init = (terminal.q, terminal.Qv, terminal.Qm)
    _, (values, duff, K, H, cond) = lax.scan(
        body, init, (quadratization, A, B), reverse=True)

    s, Sv, Sm = values
    value = ValueFunction(
        s=jnp.append(s, terminal.q),
        Sv=jnp.vstack([Sv, terminal.Qv[None]]),
        Sm=jnp.concatenate([Sm, terminal.Qm[None]], axis=0),
    )
    return BackwardPassResult(
        value=value,
        policy=PolicyCorrection(duff=duff, K=K),
        H=H,
        condition=cond,
    )


def dare_scipy(
    Q: Array,
    R: Array,
    A: Array,
    B: Array,
    M: Optional[Array] = None,
) -> Tuple[Array, Array]:
    """Solve the discrete-time algebraic Riccati equation (DARE).

    Uses SciPy's implementation wrapped for JAX. Note: This is NOT
    JIT-compatible and should only be used for controller initialization.

    Solves, for the cost sum 1/2 (x'Qx + u'Ru + 2 u'M x):
        P = Q + A'PA - (A'PB + M')(R + B'PB)^{-1}(B'PA + M)

    Args:
        Q: State cost matrix (n, n).
        R: Control cost matrix (m, m).
        A: Dynamics matrix (n, n).
        B: Control matrix (n, m).
        M: Cross term matrix (m, n), u' M x convention.

    Returns:
        Tuple of:
            - P: Solution to DARE (n, n)
            - K: Optimal infinite-horizon gain (m, n), u = K x
    """
    import scipy.linalg

    # Convert to numpy for scipy
    Q_np = np.asarray(Q)
    R_np = np.asarray(R)
    A_np = np.asarray(A)
    B_np = np.asarray(B)

    if M is not None:
        M_np = np.asarray(M)
        P_np = scipy.linalg.solve_discrete_are(
            A_np, B_np, Q_np, R_np, s=M_np.T)
    else:
        M_np = np.zeros((B_np.shape[1], A_np.shape[0]))
        P_np = scipy.linalg.solve_discrete_are(A_np, B_np, Q_np, R_np)

    # Compute gain
    P = jnp.array(P_np)
    BtP = jnp.asarray(B_np.T) @ P
    K = -jsp.linalg.solve(
        jnp.asarray(R_np) + BtP @ jnp.asarray(B_np),
        BtP @ jnp.asarray(A_np) + jnp.asarray(M_np),
        assume_a='pos',
    )

    return P, K


__all__ = [
    'ValueFunction',
    'PolicyCorrection',
    'BackwardPassResult',
    'riccati_step',
    'backward_pass',
    'dare_scipy',
]
