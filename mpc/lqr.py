"""
LQR terminal value function for the MPC horizon.

The robot is linearized about its nominal state with the reference contact
points (the feet) pinned: the contact-constrained acceleration

    [ M  -J^T ] [ vdot   ]   [ u - c ]
    [ J   0   ] [ lambda ] = [   0   ]

is differentiated by central finite differences (MuJoCo supplies M, c and the
in-plane point Jacobians J), discretized with explicit Euler and restricted to
the state subspace compatible with the pinned contacts (J dq = 0, J dv = 0).
The discrete Riccati equation is solved on that subspace and the value matrix
and gain are lifted back to full coordinates.

Inputs are generalized forces (one per velocity coordinate), matching the
size of the control weight R.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING

import numpy as np
from scipy.linalg import block_diag, null_space, solve_discrete_are

from models.geometry import BodyPoint, plane_axes
from models.mechanism import MechanismState
from utils.logging_config import logger

from .mpc_config import MPCParams

if TYPE_CHECKING:
    from models.robot import BoxAtlas

FD_EPS = 1e-6


@dataclass(frozen=True, eq=False)
class LQRSolution:
    S: np.ndarray  # (2nv, 2nv) value matrix
    K: np.ndarray  # (nv, 2nv) feedback gain, u = u0 - K (x - x0)
    A: np.ndarray
    B: np.ndarray
    x0: np.ndarray
    u0: np.ndarray
    Q: np.ndarray
    R: np.ndarray
    dt: float
    contacts: tuple[BodyPoint, ...]

    def __post_init__(self):
        for name in ("S", "K", "A", "B", "x0", "u0", "Q", "R"):
            array = np.array(getattr(self, name), dtype=float)
            array.flags.writeable = False
            object.__setattr__(self, name, array)

    def value(self, x: np.ndarray) -> float:
        """Terminal cost (x - x0)^T S (x - x0)."""
        dx = np.asarray(x, dtype=float) - self.x0
        return float(dx @ self.S @ dx)

    def control(self, x: np.ndarray) -> np.ndarray:
        return self.u0 - self.K @ (np.asarray(x, dtype=float) - self.x0)


def contact_jacobian(
    state: MechanismState, contacts: Sequence[BodyPoint], plane: str
) -> np.ndarray:
    """Stacked in-plane translational Jacobians of the contact points, (2 * len(contacts), nv)."""
    axes = list(plane_axes(plane))
    if not contacts:
        return np.zeros((0, state.mechanism.num_velocities))
    return np.vstack(
        [state.point_jacobian(contact.location, contact.body)[axes, :] for contact in contacts]
    )


def constrained_acceleration(
    state: MechanismState, u: np.ndarray, contacts: Sequence[BodyPoint], plane: str
) -> np.ndarray:
    M = state.mass_matrix()
    c = state.bias_forces()
    J = contact_jacobian(state, contacts, plane)
    nv, m = M.shape[0], J.shape[0]
    if m == 0:
        return np.linalg.solve(M, u - c)
    kkt = np.block([[M, -J.T], [J, np.zeros((m, m))]])
    rhs = np.concatenate([u - c, np.zeros(m)])
    return np.linalg.solve(kkt, rhs)[:nv]


def nominal_input(
    state: MechanismState, contacts: Sequence[BodyPoint], plane: str
) -> np.ndarray:
    """Minimum-norm generalized forces holding `state` at rest on the pinned contacts.

    Unactuated coordinates (effort bound [0, 0]) receive no input; the contact
    forces carry the remaining load.
    """
    actuated = state.mechanism.actuated_velocities()
    c = state.bias_forces()
    J = contact_jacobian(state, contacts, plane)
    selection = np.eye(state.mechanism.num_velocities)[:, actuated]
    solution, *_ = np.linalg.lstsq(np.hstack([selection, J.T]), c, rcond=None)
    num_actuated = int(actuated.sum())
    u0 = np.zeros(state.mechanism.num_velocities)
    u0[actuated] = solution[:num_actuated]
    residual = np.linalg.norm(selection @ u0[actuated] + J.T @ solution[num_actuated:] - c)
    if residual > 1e-6:
        logger.warning(f"Nominal state is not a static equilibrium (residual {residual:.3e})")
    return u0


def linearize_contact_dynamics(
    state: MechanismState,
    u0: np.ndarray,
    contacts: Sequence[BodyPoint],
    dt: float,
    plane: str,
    eps: float = FD_EPS,
) -> tuple[np.ndarray, np.ndarray]:
    """Discrete (A, B) of x_{k+1} = x_k + dt * f(x_k, u_k) about (state, u0)."""
    mechanism = state.mechanism
    nq, nv = mechanism.num_positions, mechanism.num_velocities
    if nq != nv:
        raise ValueError(
            f"Linearization needs minimal coordinates, got nq={nq} and nv={nv}"
        )
    q0, v0 = state.configuration, state.velocity
    scratch = state.copy()

    def acceleration(q, v, u):
        scratch.set_state(q, v)
        return constrained_acceleration(scratch, u, contacts, plane)

    Fq, Fv, Fu = np.zeros((nv, nv)), np.zeros((nv, nv)), np.zeros((nv, nv))
    for i in range(nv):
        step = np.zeros(nv)
        step[i] = eps
        Fq[:, i] = (acceleration(q0 + step, v0, u0) - acceleration(q0 - step, v0, u0)) / (2 * eps)
        Fv[:, i] = (acceleration(q0, v0 + step, u0) - acceleration(q0, v0 - step, u0)) / (2 * eps)
        Fu[:, i] = (acceleration(q0, v0, u0 + step) - acceleration(q0, v0, u0 - step)) / (2 * eps)

    A_c = np.block([[np.zeros((nv, nv)), np.eye(nv)], [Fq, Fv]])
    B_c = np.vstack([np.zeros((nv, nv)), Fu])
    return np.eye(2 * nv) + dt * A_c, dt * B_c


def contact_dlqr(
    state: MechanismState,
    Q: np.ndarray,
    R: np.ndarray,
    dt: float,
    contacts: Sequence[BodyPoint],
    plane: str,
) -> tuple[np.ndarray, np.ndarray, np.ndarray, np.ndarray, np.ndarray]:
    """Linearize about `state` with `contacts` pinned and solve the discrete LQR.

    Returns:
        (A, B, K, S, u0)
    """
    nv = state.mechanism.num_velocities
    if Q.shape != (2 * nv, 2 * nv) or R.shape != (nv, nv):
        raise ValueError(
            f"Expected Q {(2 * nv, 2 * nv)} and R {(nv, nv)}, got {Q.shape} and {R.shape}"
        )
    u0 = nominal_input(state, contacts, plane)
    A, B = linearize_contact_dynamics(state, u0, contacts, dt, plane)

    J = contact_jacobian(state, contacts, plane)
    N = null_space(block_diag(J, J)) if J.shape[0] else np.eye(2 * nv)
    A_r, B_r, Q_r = N.T @ A @ N, N.T @ B, N.T @ Q @ N
    S_r = solve_discrete_are(A_r, B_r, Q_r, R)
    K_r = np.linalg.solve(R + B_r.T @ S_r @ B_r, B_r.T @ S_r @ A_r)
    logger.info(f"Solved contact LQR on a {N.shape[1]}-dimensional subspace of {2 * nv} states")
    return A, B, K_r @ N.T, N @ S_r @ N.T, u0


def zero_horizontal_position(S: np.ndarray, K: np.ndarray, index: int) -> None:
    """Remove the sensitivity of S and K to the absolute horizontal base position."""
    S[index, :] = 0.0
    S[:, index] = 0.0
    K[:, index] = 0.0


def lqr_solution(
    robot: BoxAtlas, params: MPCParams | None = None, zero_base_x: bool = False
) -> LQRSolution:
    """
    LQR terminal value of the robot about its nominal state, feet pinned.

    Args:
        robot: Robot bundle
        params: MPC parameters providing the timestep
        zero_base_x: Make S and K invariant to the base horizontal coordinate

    Returns:
        Immutable LQRSolution
    """
    params = params or MPCParams()
    state = robot.nominal_state()
    Q, R = robot.cost()
    contacts = tuple(BodyPoint(foot, np.zeros(3)) for foot in robot.feet)
    A, B, K, S, u0 = contact_dlqr(
        state, Q, R, params.dt, contacts, robot.environment().plane
    )
    if zero_base_x:
        index = robot.mechanism().configuration_range(robot.floating_base).start
        zero_horizontal_position(S, K, index)
    return LQRSolution(
        S=S,
        K=K,
        A=A,
        B=B,
        x0=np.concatenate([state.configuration, state.velocity]),
        u0=u0,
        Q=Q,
        R=R,
        dt=params.dt,
        contacts=contacts,
    )
