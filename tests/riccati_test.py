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

"""Tests for the Riccati backward pass and DARE solver."""

from absl.testing import absltest
from absl.testing import parameterized

import jax.numpy as jnp
from jax import config
import numpy as np

from ilqc.cost import CostQuadratization, TerminalQuadratization
from ilqc.lqr import backward_pass, dare_scipy, riccati_step
from ilqc.utils import discretize, is_symmetric

config.update('jax_enable_x64', True)

DT = 0.1
N = 20
# Double integrator
JX = np.array([[0.0, 1.0], [0.0, 0.0]])
JU = np.array([[0.0], [1.0]])
QM = 2 * DT * np.diag([1.0, 0.1])
RM = 2 * DT * np.array([[0.1]])
QMF = 2 * 10.0 * np.eye(2)


def reference_lqr(A, B, Qm, Rm, Pf, horizon):
    """Finite-horizon discrete LQR by the textbook recursion."""
    P = Pf
    gains = [None] * horizon
    values = [None] * (horizon + 1)
    values[horizon] = P
    for n in reversed(range(horizon)):
        K = -np.linalg.solve(Rm + B.T @ P @ B, B.T @ P @ A)
        P = Qm + A.T @ P @ A + (B.T @ P @ A).T @ K
        P = 0.5 * (P + P.T)
        gains[n] = K
        values[n] = P
    return np.stack(gains), np.stack(values)


def stacked_quadratization(horizon, Qv=None, Rv=None, Rm=RM):
    n, m = QM.shape[0], RM.shape[0]
    return CostQuadratization(
        q=jnp.zeros(horizon),
        Qv=jnp.zeros((horizon, n)) if Qv is None else jnp.asarray(Qv),
        Qm=jnp.tile(QM, (horizon, 1, 1)),
        Rv=jnp.zeros((horizon, m)) if Rv is None else jnp.asarray(Rv),
        Rm=jnp.tile(Rm, (horizon, 1, 1)),
        Pm=jnp.zeros((horizon, m, n)),
    )


class RiccatiStepTest(parameterized.TestCase):
    """Tests for a single backward step."""

    def setUp(self):
        super().setUp()
        rng = np.random.default_rng(42)
        n, m = 3, 2
        self.A = rng.normal(size=(n, n))
        self.B = rng.normal(size=(n, m))
        Sm = rng.normal(size=(n, n))
        self.Sm = Sm @ Sm.T + np.eye(n)
        self.Sv = rng.normal(size=n)
        self.s = 1.5
        Qm = rng.normal(size=(n, n))
        Rm = rng.normal(size=(m, m))
        self.quad = CostQuadratization(
            q=0.3,
            Qv=rng.normal(size=n),
            Qm=Qm @ Qm.T,
            Rv=rng.normal(size=m),
            Rm=Rm @ Rm.T + np.eye(m),
            Pm=0.1 * rng.normal(size=(m, n)),
        )

    def test_matches_explicit_formulas(self):
        (s, Sv, Sm), (duff, K, H, _) = riccati_step(
            self.s, self.Sv, self.Sm, self.quad, self.A, self.B)

        q, Qv, Qm, Rv, Rm, Pm = self.quad
        A, B = self.A, self.B
        g = Rv + B.T @ self.Sv
        G = Pm + B.T @ self.Sm @ A
        H_ref = Rm + B.T @ self.Sm @ B
        H_ref = 0.5 * (H_ref + H_ref.T)
        duff_ref = -np.linalg.inv(H_ref) @ g
        K_ref = -np.linalg.inv(H_ref) @ G

        np.testing.assert_allclose(H, H_ref, rtol=1e-10)
        np.testing.assert_allclose(duff, duff_ref, rtol=1e-9)
        np.testing.assert_allclose(K, K_ref, rtol=1e-9)
        np.testing.assert_allclose(
            Sm,
            Qm + A.T @ self.Sm @ A + K_ref.T @ H_ref @ K_ref
            + K_ref.T @ G + G.T @ K_ref,
            rtol=1e-9, atol=1e-10)
        np.testing.assert_allclose(
            Sv,
            Qv + A.T @ self.Sv + K_ref.T @ H_ref @ duff_ref + K_ref.T @ g
            + G.T @ duff_ref,
            rtol=1e-9, atol=1e-10)
        np.testing.assert_allclose(
            s,
            q + self.s + 0.5 * duff_ref @ H_ref @ duff_ref + duff_ref @ g,
            rtol=1e-9)

    def test_asymmetric_input_hessian_is_symmetrized(self):
        quad = self.quad._replace(Rm=self.quad.Rm + np.array([[0.0, 0.3],
                                                              [0.0, 0.0]]))
        _, (_, _, H, _) = riccati_step(
            self.s, self.Sv, self.Sm, quad, self.A, self.B)
        np.testing.assert_array_equal(H, H.T)

    def test_value_hessian_stays_symmetric(self):
        _, Sv, Sm = riccati_step(
            self.s, self.Sv, self.Sm, self.quad, self.A, self.B)[0]
        self.assertTrue(is_symmetric(Sm, tol=0.0))


class BackwardPassTest(parameterized.TestCase):
    """Tests for the time-varying backward pass."""

    def setUp(self):
        super().setUp()
        A, B = discretize(jnp.asarray(JX), jnp.asarray(JU), DT)
        self.A = np.asarray(A)
        self.B = np.asarray(B)
        self.As = jnp.tile(A, (N, 1, 1))
        self.Bs = jnp.tile(B, (N, 1, 1))
        self.terminal = TerminalQuadratization(
            q=jnp.array(0.0), Qv=jnp.zeros(2), Qm=jnp.asarray(QMF))

    def test_shapes(self):
        result = backward_pass(
            stacked_quadratization(N), self.terminal, self.As, self.Bs)
        self.assertEqual(result.value.s.shape, (N + 1,))
        self.assertEqual(result.value.Sv.shape, (N + 1, 2))
        self.assertEqual(result.value.Sm.shape, (N + 1, 2, 2))
        self.assertEqual(result.policy.duff.shape, (N, 1))
        self.assertEqual(result.policy.K.shape, (N, 1, 2))
        self.assertEqual(result.H.shape, (N, 1, 1))
        self.assertEqual(result.condition.shape, (N,))

    def test_terminal_condition(self):
        result = backward_pass(
            stacked_quadratization(N), self.terminal, self.As, self.Bs)
        s, Sv, Sm = result.value.at(N)
        np.testing.assert_allclose(Sm, QMF)
        np.testing.assert_allclose(Sv, np.zeros(2))
        self.assertEqual(float(s), 0.0)

    def test_matches_reference_lqr(self):
        """About the origin, the backward pass is the LQR recursion."""
        result = backward_pass(
            stacked_quadratization(N), self.terminal, self.As, self.Bs)
        K_ref, P_ref = reference_lqr(self.A, self.B, QM, RM, QMF, N)

        np.testing.assert_allclose(result.policy.K, K_ref, rtol=1e-9)
        np.testing.assert_allclose(result.value.Sm, P_ref, rtol=1e-9)
        np.testing.assert_allclose(result.policy.duff, 0.0, atol=1e-14)
        self.assertEqual(result.policy.feedforward_norm(), 0.0)

    def test_gains_do_not_depend_on_linear_terms(self):
        """Linear cost terms change duff and Sv, never K or Sm."""
        rng = np.random.default_rng(3)
        quad = stacked_quadratization(
            N, Qv=rng.normal(size=(N, 2)), Rv=rng.normal(size=(N, 1)))
        result = backward_pass(quad, self.terminal, self.As, self.Bs)
        K_ref, P_ref = reference_lqr(self.A, self.B, QM, RM, QMF, N)

        np.testing.assert_allclose(result.policy.K, K_ref, rtol=1e-9)
        np.testing.assert_allclose(result.value.Sm, P_ref, rtol=1e-9)
        self.assertGreater(result.policy.feedforward_norm(), 0.0)

    def test_all_input_hessians_symmetric(self):
        rng = np.random.default_rng(5)
        A = jnp.asarray(rng.normal(size=(N, 2, 2)))
        B = jnp.asarray(rng.normal(size=(N, 2, 2)))
        quad = CostQuadratization(
            q=jnp.zeros(N),
            Qv=jnp.zeros((N, 2)),
            Qm=jnp.tile(QM, (N, 1, 1)),
            Rv=jnp.zeros((N, 2)),
            Rm=jnp.tile(jnp.array([[1.0, 0.2], [0.1, 1.0]]), (N, 1, 1)),
            Pm=jnp.zeros((N, 2, 2)),
        )
        result = backward_pass(quad, self.terminal, A, B)
        np.testing.assert_array_equal(
            result.H, np.swapaxes(np.asarray(result.H), 1, 2))
        self.assertTrue(is_symmetric(result.value.Sm, tol=0.0))

    def test_singular_input_hessian_is_flagged(self):
        """No input penalty and no terminal cost make H singular."""
        quad = stacked_quadratization(N, Rm=np.zeros((1, 1)))
        terminal = TerminalQuadratization(
            q=jnp.array(0.0), Qv=jnp.zeros(2), Qm=jnp.zeros((2, 2)))
        result = backward_pass(quad, terminal, self.As, self.Bs)
        singular = result.singular_steps(max_condition=1e12)
        self.assertIn(N - 1, singular)

    def test_well_posed_problem_is_not_flagged(self):
        result = backward_pass(
            stacked_quadratization(N), self.terminal, self.As, self.Bs)
        self.assertEmpty(result.singular_steps(max_condition=1e12))
        self.assertTrue(np.all(np.isfinite(result.condition)))


class DareTest(parameterized.TestCase):
    """Tests for dare_scipy."""

    def setUp(self):
        super().setUp()
        A, B = discretize(jnp.asarray(JX), jnp.asarray(JU), DT)
        self.A = np.asarray(A)
        self.B = np.asarray(B)

    def test_fixed_point_of_backward_recursion(self):
        P, K = dare_scipy(QM, RM, self.A, self.B)
        K_ref, P_ref = reference_lqr(
            self.A, self.B, QM, RM, np.asarray(P), horizon=1)
        np.testing.assert_allclose(P_ref[0], P, rtol=1e-8)
        np.testing.assert_allclose(K_ref[0], K, rtol=1e-8)

    def test_closed_loop_is_stable(self):
        _, K = dare_scipy(QM, RM, self.A, self.B)
        eigvals = np.linalg.eigvals(self.A + self.B @ np.asarray(K))
        self.assertTrue(np.all(np.abs(eigvals) < 1.0))

    def test_long_horizon_converges_to_dare(self):
        """Early gains of a long finite horizon approach the DARE gain."""
        _, K = dare_scipy(QM, RM, self.A, self.B)
        K_ref, _ = reference_lqr(self.A, self.B, QM, RM, QMF, horizon=500)
        np.testing.assert_allclose(K_ref[0], K, rtol=1e-6)


if __name__ == '__main__':
    absltest.main()
