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

"""Fixed-step integrators used by the reference simulator.

The design loop itself never integrates anything: it consumes rollouts
produced by a simulator. These integrators turn the model's continuous-time
dynamics dx/dt = f(x, u, params) into a step map x[n+1] = F(x[n], u[n]).
"""

from typing import Callable


def euler(dynamics_continuous: Callable, dt: float) -> Callable:
    """Create a discrete-time step function using Euler integration.

    The Euler method is the simplest integration scheme:
        x[n+1] = x[n] + dt * f(x[n], u[n])

    It matches the discretization A = I + Jx dt, B = Ju dt used by the
    backward pass, so a linear model rolled out with it is reproduced
    exactly by the LQ approximation.

    Args:
        dynamics_continuous: Continuous-time dynamics function
            (x, u, *args) -> dx/dt.
        dt: Time step for integration.

    Returns:
        Discrete-time step function (x, u, *args) -> x_next.

    Example:
        >>> def pendulum_cont(x, u, params):
        ...     theta, omega = x
        ...     return jnp.array([omega, -jnp.sin(theta) + u[0]])
        ...
        >>> pendulum_discrete = euler(pendulum_cont, dt=0.01)
        >>> x_next = pendulum_discrete(x, u, ())
    """
    def dynamics_discrete(x, u, *args):
        return x + dt * dynamics_continuous(x, u, *args)

    return dynamics_discrete


def rk4(dynamics_continuous: Callable, dt: float) -> Callable:
    """Create a discrete-time step function using RK4 integration.

    The 4th-order Runge-Kutta method with zero-order hold on u:
        k1 = f(x, u)
        k2 = f(x + dt/2 * k1, u)
        k3 = f(x + dt/2 * k2, u)
        k4 = f(x + dt * k3, u)
        x[n+1] = x[n] + dt/6 * (k1 + 2*k2 + 2*k3 + k4)

    Args:
        dynamics_continuous: Continuous-time dynamics function
            (x, u, *args) -> dx/dt.
        dt: Time step for integration.

    Returns:
        Discrete-time step function (x, u, *args) -> x_next.
    """
    def dynamics_discrete(x, u, *args):
        k1 = dynamics_continuous(x, u, *args)
        k2 = dynamics_continuous(x + 0.5 * dt * k1, u, *args)
        k3 = dynamics_continuous(x + 0.5 * dt * k2, u, *args)
        k4 = dynamics_continuous(x + dt * k3, u, *args)
        return x + dt / 6.0 * (k1 + 2.0 * k2 + 2.0 * k3 + k4)

    return dynamics_discrete


INTEGRATORS = {
    'euler': euler,
    'rk4': rk4,
}


def get_integrator(name: str) -> Callable:
    """Look up an integrator by name ('euler' or 'rk4')."""
    name_lower = name.lower()
    if name_lower not in INTEGRATORS:
        raise ValueError(
            f"Unknown integrator: {name}. Available: {list(INTEGRATORS)}"
        )
    return INTEGRATORS[name_lower]
