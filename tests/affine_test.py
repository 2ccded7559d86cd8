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

"""Tests for affine controllers and the controller update."""

from absl.testing import absltest
from absl.testing import parameterized

import jax.numpy as jnp
from jax import config
import numpy as np

from ilqc.core import DimensionMismatchError
from ilqc.lqr import PolicyCorrection
from ilqc.policy import AffineController, policy_control, update_controller

config.update('jax_enable_x64', True)


class UpdateControllerTest(parameterized.TestCase):
    """Tests for update_controller."""

    def setUp(self):
        super().setUp()
        rng = np.random.default_rng(7)
        self.N, self.n, self.m = 6, 3, 2
        self.X0 = jnp.asarray(rng.normal(size=(self.N + 1, self.n)))
        self.U0 = jnp.asarray(rng.normal(size=(self.N, self.m)))
        self.policy = PolicyCorrection(
            duff=jnp.asarray(rng.normal(size=(self.N, self.m))),
            K=jnp.asarray(rng.normal(size=(self.N, self.m, self.n))),
        )
        self.controller = update_controller(self.X0, self.U0, self.policy)

    def test_theta_shape(self):
        self.assertEqual(self.controller.theta.shape,
                         (self.N, self.n + 1, self.m))
        self.assertEqual(self.controller.horizon, self.N)
        self.assertEqual(self.controller.state_dim, self.n)
        self.assertEqual(self.controller.control_dim, self.m)

    def test_nominal_state_recovers_corrected_input(self):
        """At x = X0[n] the controller returns U0[n] + duff[n]."""
        for n in range(self.N):
            u = self.controller(n, self.X0[n])
            np.testing.assert_allclose(
                u, self.U0[n] + self.policy.duff[n], rtol=1e-10, atol=1e-12)

    def test_perturbed_state(self):
        """u = U0 + duff + K (x - X0) away from the nominal."""
        rng = np.random.default_rng(8)
        for n in range(self.N):
            x = self.X0[n] + jnp.asarray(rng.normal(size=self.n))
            duff, K = self.policy.at(n)
            expected = self.U0[n] + duff + K @ (x - self.X0[n])
            np.testing.assert_allclose(
                self.controller(n, x), expected, rtol=1e-10, atol=1e-12)

    def test_feedback_is_gain(self):
        np.testing.assert_allclose(self.controller.feedback, self.policy.K)
        np.testing.assert_allclose(
            self.controller.theta[:, 1:, :],
            np.swapaxes(np.asarray(self.policy.K), 1, 2))

    def test_feedforward_row(self):
        expected = np.stack([
            self.U0[n] + self.policy.duff[n] - self.policy.K[n] @ self.X0[n]
            for n in range(self.N)
        ])
        np.testing.assert_allclose(
            self.controller.feedforward, expected, rtol=1e-10, atol=1e-12)

    def test_accepts_states_without_final_sample(self):
        controller = update_controller(self.X0[:-1], self.U0, self.policy)
        np.testing.assert_allclose(controller.theta, self.controller.theta)

    def test_shape_mismatch_raises(self):
        short = PolicyCorrection(self.policy.duff[:-1], self.policy.K[:-1])
        with self.assertRaises(DimensionMismatchError):
            update_controller(self.X0, self.U0, short)
        with self.assertRaises(DimensionMismatchError):
            update_controller(self.X0[:-2], self.U0, self.policy)


class AffineControllerTest(parameterized.TestCase):
    """Tests for AffineController constructors."""

    def test_zeros(self):
        controller = AffineController.zeros(horizon=4, state_dim=2,
                                            control_dim=1)
        self.assertEqual(controller.theta.shape, (4, 3, 1))
        np.testing.assert_array_equal(controller(2, jnp.ones(2)), [0.0])

    def test_from_gain(self):
        K = jnp.array([[-1.0, -2.0]])
        x_ref = jnp.array([0.5, 0.0])
        u_ref = jnp.array([0.3])
        controller = AffineController.from_gain(K, 5, x_ref, u_ref)
        x = jnp.array([1.0, -1.0])
        for n in range(5):
            np.testing.assert_allclose(
                controller(n, x), u_ref + K @ (x - x_ref), rtol=1e-12)

    def test_policy_control(self):
        theta_n = jnp.array([[1.0, 0.0], [2.0, 1.0], [0.0, -1.0]])
        x = jnp.array([3.0, 4.0])
        np.testing.assert_allclose(
            policy_control(theta_n, x), [1.0 + 6.0, 3.0 - 4.0])

    @parameterized.parameters(((3, 1),), ((2, 1, 1),), ((4, 3),))
    def test_invalid_theta_shape(self, shape):
        with self.assertRaises(DimensionMismatchError):
            AffineController(jnp.zeros(shape))


if __name__ == '__main__':
    absltest.main()
