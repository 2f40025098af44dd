"""
Contact environment construction.

Obstacles are the box and plane geoms attached to static bodies of the
description; the contact face of an obstacle is the +z face of its geom.
Candidate contact points are the sites attached to moving bodies. Every
(candidate point, obstacle) pair forms a raw contact which is then pruned by an
explicit per-body allow-list, so that the downstream mixed-integer solver only
reasons about physically plausible contact modes.

The robot moves in a single operating plane, so each obstacle carries a
two-column friction basis: the in-plane tangent of its face and its opposite.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field

import mujoco
import numpy as np

from utils.logging_config import logger

from .geometry import HalfSpace, plane_axes, plane_normal
from .mechanism import Mechanism, MechanismState, RigidBody

_FACE_GEOM_TYPES = (int(mujoco.mjtGeom.mjGEOM_BOX), int(mujoco.mjtGeom.mjGEOM_PLANE))


@dataclass(eq=False)
class Obstacle:
    body: RigidBody
    contact_face: HalfSpace  # obstacle body frame
    friction_coefficient: float
    basis: np.ndarray  # (2, 3) in-plane tangent directions, obstacle body frame

    def __repr__(self) -> str:
        return f"Obstacle({self.body.name!r})"


@dataclass(eq=False)
class ContactCandidate:
    body: RigidBody
    point: np.ndarray  # (3,) body frame
    obstacle: Obstacle


@dataclass
class Environment:
    plane: str
    contacts: list[ContactCandidate] = field(default_factory=list)
    # All obstacles of the description, kept even when filtering removes every pair
    obstacles: list[Obstacle] = field(default_factory=list)

    def pairs(self) -> set[tuple[str, str]]:
        """(body name, obstacle body name) for every surviving contact."""
        return {(c.body.name, c.obstacle.body.name) for c in self.contacts}

    def contacts_for(self, body: RigidBody) -> list[ContactCandidate]:
        return [c for c in self.contacts if c.body is body]


def unique_obstacles(contacts: Iterable[ContactCandidate]) -> list[Obstacle]:
    """Obstacles referenced by `contacts`, deduplicated by identity, in first-seen order."""
    seen: set[int] = set()
    obstacles = []
    for contact in contacts:
        if id(contact.obstacle) not in seen:
            seen.add(id(contact.obstacle))
            obstacles.append(contact.obstacle)
    return obstacles


def _face_of_geom(model: mujoco.MjModel, geom_id: int) -> HalfSpace:
    rotation = np.zeros(9)
    mujoco.mju_quat2Mat(rotation, model.geom_quat[geom_id])
    normal = rotation.reshape(3, 3)[:, 2]
    point = np.array(model.geom_pos[geom_id], dtype=float)
    if int(model.geom_type[geom_id]) == int(mujoco.mjtGeom.mjGEOM_BOX):
        point = point + model.geom_size[geom_id, 2] * normal
    return HalfSpace(point, normal)


def _friction_basis(
    face: HalfSpace, body_rotation: np.ndarray, plane: str
) -> np.ndarray:
    plane_axis = body_rotation.T @ plane_normal(plane)
    tangent = np.cross(plane_axis, face.outward_normal)
    norm = np.linalg.norm(tangent)
    if norm < 1e-9:
        raise ValueError(f"Obstacle face is parallel to the operating plane {plane}")
    tangent = tangent / norm
    return np.stack([tangent, -tangent])


def parse_contacts(
    mechanism: Mechanism, friction_coefficient: float = 1.0, plane: str = "xz"
) -> Environment:
    """Build the unfiltered contact environment of a mechanism.

    Args:
        mechanism: Mechanism whose description holds the obstacles and contact sites
        friction_coefficient: Coulomb friction coefficient assigned to every obstacle
        plane: Operating plane of the planar dynamics ("xz", "yz" or "xy")

    Returns:
        Environment with one candidate per (contact site, obstacle) pair
    """
    plane_axes(plane)
    model = mechanism.model
    bodies_by_id = {body.id: body for body in mechanism.bodies.values()}
    reference = MechanismState(mechanism)  # static bodies do not depend on the configuration

    obstacles = []
    for geom_id in range(model.ngeom):
        body = bodies_by_id[int(model.geom_bodyid[geom_id])]
        if not body.static or int(model.geom_type[geom_id]) not in _FACE_GEOM_TYPES:
            continue
        face = _face_of_geom(model, geom_id)
        obstacles.append(
            Obstacle(
                body=body,
                contact_face=face,
                friction_coefficient=friction_coefficient,
                basis=_friction_basis(face, reference.rotation(body), plane),
            )
        )

    contacts = []
    for site_id in range(model.nsite):
        body = bodies_by_id[int(model.site_bodyid[site_id])]
        if body.static:
            continue
        for obstacle in obstacles:
            contacts.append(
                ContactCandidate(
                    body=body,
                    point=np.array(model.site_pos[site_id], dtype=float),
                    obstacle=obstacle,
                )
            )

    logger.info(
        f"Parsed {len(contacts)} candidate contacts against {len(obstacles)} obstacles"
    )
    return Environment(plane=plane, contacts=contacts, obstacles=unique_obstacles(contacts))


def filter_contacts(
    environment: Environment,
    allowed: Mapping[RigidBody, Sequence[RigidBody]],
) -> None:
    """Keep only the contacts whose obstacle body is allowed for the contacting body.

    A body missing from `allowed` keeps no contacts.
    """
    before = len(environment.contacts)
    environment.contacts[:] = [
        contact
        for contact in environment.contacts
        if any(contact.obstacle.body is other for other in allowed.get(contact.body, ()))
    ]
    logger.info(f"Contact filtering kept {len(environment.contacts)}/{before} pairs")


def add_environment_primitives(
    mechanism: Mechanism, obstacles: Iterable[Obstacle], state: MechanismState
) -> list[HalfSpace]:
    """Register each obstacle's contact face as a world-frame half-space evaluated at `state`."""
    primitives = []
    for obstacle in obstacles:
        face = obstacle.contact_face
        point_in_world = state.transform_point(face.point, obstacle.body)
        normal_in_world = state.transform_normal(face.outward_normal, obstacle.body)
        primitive = HalfSpace(point_in_world, normal_in_world)
        mechanism.add_environment_primitive(primitive)
        primitives.append(primitive)
    return primitives
