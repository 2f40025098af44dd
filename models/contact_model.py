"""
Compliant contact force laws.

Normal direction: Hunt-Crossley nonlinear spring-damper
    f_n = max(k z^n + lambda z^n zdot, 0),  z = penetration depth >= 0
with the Hertzian exponent n = 3/2 and lambda = 3/2 alpha k.

Tangential direction: viscoelastic regularized Coulomb friction. A tangential
deflection x is attached to the contact point; the force needed to stick,
-k x - b v, is projected onto the friction cone of radius mu f_n and the
deflection evolves as xdot = -(k x + f_t) / b.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

import casadi as cs
import numpy as np

from utils.logging_config import logger

from .mechanism import Mechanism, MechanismState, RigidBody


@dataclass(frozen=True)
class HuntCrossleyModel:
    k: float
    damping: float  # lambda
    n: float = 1.5

    def normal_force(self, penetration: float, penetration_rate: float) -> float:
        if penetration <= 0.0:
            return 0.0
        zn = penetration**self.n
        return max(self.damping * zn * penetration_rate + self.k * zn, 0.0)

    def casadi_function(self) -> cs.Function:
        """Symbolic normal law for use inside CasADi transcriptions."""
        z = cs.SX.sym("z")
        zdot = cs.SX.sym("zdot")
        zn = cs.fmax(z, 0) ** self.n
        f = cs.fmax(self.damping * zn * zdot + self.k * zn, 0)
        return cs.Function("normal_force", [z, zdot], [f], ["z", "zdot"], ["f_n"])


def hunt_crossley_hertz(k: float = 50e3, alpha: float = 0.2) -> HuntCrossleyModel:
    return HuntCrossleyModel(k=k, damping=1.5 * alpha * k, n=1.5)


@dataclass(frozen=True)
class ViscoelasticCoulombModel:
    mu: float
    k: float
    b: float

    def tangential_force(
        self,
        displacement: np.ndarray,
        tangential_velocity: np.ndarray,
        normal_force: float,
    ) -> tuple[np.ndarray, np.ndarray]:
        """Return (tangential force, deflection rate)."""
        x = np.asarray(displacement, dtype=float)
        v = np.asarray(tangential_velocity, dtype=float)
        fstick = -self.k * x - self.b * v
        fstick_norm2 = float(fstick @ fstick)
        fmax_norm2 = (self.mu * normal_force) ** 2
        if fstick_norm2 > fmax_norm2:
            ftangential = fstick * np.sqrt(fmax_norm2 / fstick_norm2)
        else:
            ftangential = fstick
        xdot = -(self.k * x + ftangential) / self.b
        return ftangential, xdot


@dataclass(frozen=True)
class SoftContactModel:
    normal: HuntCrossleyModel
    tangential: ViscoelasticCoulombModel

    def contact_force(
        self,
        penetration: float,
        penetration_rate: float,
        displacement: np.ndarray,
        tangential_velocity: np.ndarray,
    ) -> tuple[float, np.ndarray, np.ndarray]:
        fnormal = self.normal.normal_force(penetration, penetration_rate)
        ftangential, xdot = self.tangential.tangential_force(
            displacement, tangential_velocity, fnormal
        )
        return fnormal, ftangential, xdot


@dataclass(eq=False)
class ContactPoint:
    body: RigidBody
    location: np.ndarray  # (3,) body frame
    model: SoftContactModel


@dataclass(eq=False)
class ContactForce:
    point: ContactPoint
    primitive_index: int
    force: np.ndarray  # (3,) world frame, acting on the body
    displacement_rate: np.ndarray  # (3,)


def add_contact_points(
    mechanism: Mechanism,
    body_names: Sequence[str],
    contact_model: SoftContactModel,
    location: Sequence[float] = (0.0, 0.0, 0.0),
) -> list[ContactPoint]:
    """Attach one contact point with `contact_model` to each named body.

    Bodies that already carry a contact point are left untouched, so a second
    call never doubles the contact force at a point.

    Returns:
        The contact points created by this call
    """
    added = []
    for name in body_names:
        body = mechanism.find_body(name)
        if body.contact_points:
            logger.warning(f"Body {name} already has a contact point; skipping")
            continue
        point = ContactPoint(
            body=body, location=np.array(location, dtype=float), model=contact_model
        )
        body.contact_points.append(point)
        added.append(point)
    return added


def contact_points(mechanism: Mechanism) -> list[ContactPoint]:
    return [point for body in mechanism.bodies.values() for point in body.contact_points]


def evaluate_contact_forces(
    state: MechanismState,
    tangential_displacements: dict[tuple[int, int], np.ndarray] | None = None,
) -> list[ContactForce]:
    """Evaluate every contact point against every environment half-space at `state`.

    Args:
        state: Mechanism state providing positions and velocities
        tangential_displacements: Friction deflection keyed by
            (id(contact point), primitive index); zero when missing

    Returns:
        One ContactForce per (contact point, half-space) pair
    """
    tangential_displacements = tangential_displacements or {}
    forces = []
    for point in contact_points(state.mechanism):
        position = state.transform_point(point.location, point.body)
        velocity = state.point_velocity(point.location, point.body)
        for index, primitive in enumerate(state.mechanism.environment_primitives):
            normal = primitive.outward_normal
            penetration = -primitive.separation(position)
            penetration_rate = -float(velocity @ normal)
            tangential_velocity = velocity + penetration_rate * normal
            displacement = tangential_displacements.get((id(point), index), np.zeros(3))
            fnormal, ftangential, xdot = point.model.contact_force(
                penetration, penetration_rate, displacement, tangential_velocity
            )
            forces.append(
                ContactForce(
                    point=point,
                    primitive_index=index,
                    force=fnormal * normal + ftangential,
                    displacement_rate=xdot,
                )
            )
    return forces
