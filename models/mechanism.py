"""
MuJoCo-backed mechanism model.

A `Mechanism` wraps a compiled `mujoco.MjModel` and exposes the pieces the
model/contact/cost construction needs: named joints with bound triples, named
rigid bodies, the coordinate layout (`configuration_range`/`velocity_range`)
and the list of environment half-spaces. A `MechanismState` is a
configuration/velocity pair backed by its own `mujoco.MjData` buffer and
provides frame transforms and the dynamics quantities used for linearization.

Joints:
    Every body that carries MuJoCo joints yields one logical joint. A body with
    a single MuJoCo joint gives a joint of the same name; a body with several
    (e.g. the planar floating base `floating_base_x`, `floating_base_z`,
    `floating_base_pitch`) gives one joint named by their common prefix
    (`floating_base`) whose coordinates are the concatenation of its parts.
"""

from __future__ import annotations

import dataclasses
import os
from pathlib import Path
from typing import TYPE_CHECKING

import mujoco
import numpy as np

from utils.logging_config import logger

from .geometry import HalfSpace

if TYPE_CHECKING:
    from .contact_model import ContactPoint

_SCALAR_JOINT_TYPES = (int(mujoco.mjtJoint.mjJNT_SLIDE), int(mujoco.mjtJoint.mjJNT_HINGE))


class ModelConstructionError(ValueError):
    """A joint, body or obstacle the robot depends on is missing from its description."""


@dataclasses.dataclass(eq=False)
class RigidBody:
    name: str
    id: int
    static: bool  # welded to the world
    contact_points: list[ContactPoint] = dataclasses.field(default_factory=list)

    def __repr__(self) -> str:
        return f"RigidBody({self.name!r})"


@dataclasses.dataclass(eq=False)
class Joint:
    name: str
    joint_ids: tuple[int, ...]  # MuJoCo joint ids, in coordinate order
    configuration_range: slice
    velocity_range: slice
    position_bounds: np.ndarray  # (num_positions, 2)
    velocity_bounds: np.ndarray  # (num_velocities, 2)
    effort_bounds: np.ndarray  # (num_velocities, 2)

    @property
    def num_positions(self) -> int:
        return self.configuration_range.stop - self.configuration_range.start

    @property
    def num_velocities(self) -> int:
        return self.velocity_range.stop - self.velocity_range.start

    @property
    def actuated(self) -> np.ndarray:
        """Per-velocity-coordinate flag: False where the effort bound is exactly [0, 0]."""
        return ~np.all(self.effort_bounds == 0.0, axis=1)

    def __repr__(self) -> str:
        return f"Joint({self.name!r})"


class Mechanism:
    def __init__(self, model: mujoco.MjModel, description_path: str | os.PathLike):
        self.model = model
        self.description_path = Path(description_path)
        self.bodies: dict[str, RigidBody] = {}
        for body_id in range(model.nbody):
            name = mujoco.mj_id2name(model, mujoco.mjtObj.mjOBJ_BODY, body_id)
            self.bodies[name] = RigidBody(
                name=name, id=body_id, static=int(model.body_weldid[body_id]) == 0
            )
        self.joints: dict[str, Joint] = {}
        for joint in self._group_joints():
            self.joints[joint.name] = joint
        self.environment_primitives: list[HalfSpace] = []

    @classmethod
    def from_file(cls, description_path: str | os.PathLike) -> Mechanism:
        path = Path(description_path)
        model = mujoco.MjModel.from_xml_path(str(path))
        logger.info(
            f"Loaded {path.name}: {model.nbody} bodies, nq={model.nq}, nv={model.nv}, nu={model.nu}"
        )
        return cls(model, path)

    # ------------------------------------------------------------------
    # Layout
    # ------------------------------------------------------------------
    @property
    def num_positions(self) -> int:
        return self.model.nq

    @property
    def num_velocities(self) -> int:
        return self.model.nv

    def configuration_range(self, joint: Joint) -> slice:
        return joint.configuration_range

    def velocity_range(self, joint: Joint) -> slice:
        return joint.velocity_range

    def actuated_velocities(self) -> np.ndarray:
        """Boolean mask over the velocity coordinates that can carry effort."""
        mask = np.zeros(self.num_velocities, dtype=bool)
        for joint in self.joints.values():
            mask[joint.velocity_range] = joint.actuated
        return mask

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------
    def find_joint(self, name: str) -> Joint:
        if name not in self.joints:
            raise ModelConstructionError(
                f"Joint '{name}' not found in {self.description_path.name} "
                f"(available: {sorted(self.joints)})"
            )
        return self.joints[name]

    def find_body(self, name: str) -> RigidBody:
        if name not in self.bodies:
            raise ModelConstructionError(
                f"Body '{name}' not found in {self.description_path.name}"
            )
        return self.bodies[name]

    @property
    def root_body(self) -> RigidBody:
        return self.bodies[mujoco.mj_id2name(self.model, mujoco.mjtObj.mjOBJ_BODY, 0)]

    # ------------------------------------------------------------------
    # Mutation (construction phase only)
    # ------------------------------------------------------------------
    def set_joint_bounds(
        self,
        joint: Joint,
        position: tuple[float, float] | None = None,
        velocity: tuple[float, float] | None = None,
        effort: tuple[float, float] | None = None,
    ) -> None:
        """Overwrite the bounds of every coordinate of `joint` and mirror them into MuJoCo."""
        if position is not None:
            joint.position_bounds[:] = position
        if velocity is not None:
            joint.velocity_bounds[:] = velocity
        if effort is not None:
            joint.effort_bounds[:] = effort

        for jnt_id in joint.joint_ids:
            if int(self.model.jnt_type[jnt_id]) not in _SCALAR_JOINT_TYPES:
                continue
            q_row = int(self.model.jnt_qposadr[jnt_id]) - joint.configuration_range.start
            v_row = int(self.model.jnt_dofadr[jnt_id]) - joint.velocity_range.start
            if position is not None:
                self.model.jnt_range[jnt_id] = joint.position_bounds[q_row]
                self.model.jnt_limited[jnt_id] = 1
            if effort is not None:
                self.model.jnt_actfrcrange[jnt_id] = joint.effort_bounds[v_row]
                self.model.jnt_actfrclimited[jnt_id] = 1

    def add_environment_primitive(self, primitive: HalfSpace) -> None:
        self.environment_primitives.append(primitive)

    # ------------------------------------------------------------------
    # Construction helpers
    # ------------------------------------------------------------------
    def _group_joints(self) -> list[Joint]:
        model = self.model
        joints = []
        for body_id in range(model.nbody):
            count = int(model.body_jntnum[body_id])
            if count == 0:
                continue
            first = int(model.body_jntadr[body_id])
            ids = tuple(range(first, first + count))
            names = [mujoco.mj_id2name(model, mujoco.mjtObj.mjOBJ_JOINT, j) for j in ids]
            if count == 1:
                name = names[0]
            else:
                name = os.path.commonprefix(names).rstrip("_") or mujoco.mj_id2name(
                    model, mujoco.mjtObj.mjOBJ_BODY, body_id
                )

            last = ids[-1]
            q_start, v_start = int(model.jnt_qposadr[first]), int(model.jnt_dofadr[first])
            q_stop = int(model.jnt_qposadr[last + 1]) if last + 1 < model.njnt else model.nq
            v_stop = int(model.jnt_dofadr[last + 1]) if last + 1 < model.njnt else model.nv

            position_bounds = np.tile([-np.inf, np.inf], (q_stop - q_start, 1))
            effort_bounds = np.zeros((v_stop - v_start, 2))
            for j in ids:
                j_q = int(model.jnt_qposadr[j]) - q_start
                j_v = int(model.jnt_dofadr[j]) - v_start
                if model.jnt_limited[j] and int(model.jnt_type[j]) in _SCALAR_JOINT_TYPES:
                    position_bounds[j_q] = model.jnt_range[j]
                j_nv = (int(model.jnt_dofadr[j + 1]) if j + 1 < model.njnt else model.nv) - (
                    j_v + v_start
                )
                effort_bounds[j_v : j_v + j_nv] = self._actuator_effort(j)

            joints.append(
                Joint(
                    name=name,
                    joint_ids=ids,
                    configuration_range=slice(q_start, q_stop),
                    velocity_range=slice(v_start, v_stop),
                    position_bounds=position_bounds,
                    velocity_bounds=np.tile([-np.inf, np.inf], (v_stop - v_start, 1)),
                    effort_bounds=effort_bounds,
                )
            )
        return joints

    def _actuator_effort(self, jnt_id: int) -> np.ndarray:
        """Effort range a MuJoCo joint can receive; (0, 0) when nothing drives it."""
        model = self.model
        if model.jnt_actfrclimited[jnt_id]:
            return np.array(model.jnt_actfrcrange[jnt_id], dtype=float)
        lower, upper = 0.0, 0.0
        for act_id in range(model.nu):
            if int(model.actuator_trntype[act_id]) != int(mujoco.mjtTrn.mjTRN_JOINT):
                continue
            if int(model.actuator_trnid[act_id, 0]) != jnt_id:
                continue
            if model.actuator_ctrllimited[act_id]:
                ends = model.actuator_ctrlrange[act_id] * model.actuator_gear[act_id, 0]
                lower += float(np.min(ends))
                upper += float(np.max(ends))
            else:
                lower, upper = -np.inf, np.inf
        return np.array([lower, upper])


class MechanismState:
    """Configuration and velocity of a mechanism, with its own MuJoCo data buffer."""

    def __init__(self, mechanism: Mechanism):
        self.mechanism = mechanism
        self.data = mujoco.MjData(mechanism.model)
        self.data.qvel[:] = 0.0
        self._stale = True

    def copy(self) -> MechanismState:
        other = MechanismState(self.mechanism)
        other.set_state(self.configuration, self.velocity)
        return other

    @property
    def configuration(self) -> np.ndarray:
        return self.data.qpos.copy()

    @property
    def velocity(self) -> np.ndarray:
        return self.data.qvel.copy()

    def configuration_range(self, joint: Joint) -> slice:
        return self.mechanism.configuration_range(joint)

    def velocity_range(self, joint: Joint) -> slice:
        return self.mechanism.velocity_range(joint)

    def set_configuration(self, joint: Joint, values) -> None:
        values = np.atleast_1d(np.asarray(values, dtype=float))
        if values.shape != (joint.num_positions,):
            raise ValueError(
                f"Joint {joint.name} has {joint.num_positions} coordinates, got {values.shape}"
            )
        self.data.qpos[joint.configuration_range] = values
        self._stale = True

    def set_velocity(self, joint: Joint, values) -> None:
        values = np.atleast_1d(np.asarray(values, dtype=float))
        if values.shape != (joint.num_velocities,):
            raise ValueError(
                f"Joint {joint.name} has {joint.num_velocities} velocities, got {values.shape}"
            )
        self.data.qvel[joint.velocity_range] = values
        self._stale = True

    def set_state(self, configuration: np.ndarray, velocity: np.ndarray) -> None:
        self.data.qpos[:] = configuration
        self.data.qvel[:] = velocity
        self._stale = True

    def _forward(self) -> None:
        if self._stale:
            mujoco.mj_forward(self.mechanism.model, self.data)
            self._stale = False

    # ------------------------------------------------------------------
    # Frame transforms
    # ------------------------------------------------------------------
    def rotation(self, body: RigidBody) -> np.ndarray:
        self._forward()
        return self.data.xmat[body.id].reshape(3, 3).copy()

    def transform_point(self, point: np.ndarray, body: RigidBody) -> np.ndarray:
        """Body-frame point expressed in the world frame."""
        self._forward()
        return self.data.xpos[body.id] + self.rotation(body) @ np.asarray(point, dtype=float)

    def transform_normal(self, normal: np.ndarray, body: RigidBody) -> np.ndarray:
        """Body-frame free vector expressed in the world frame."""
        return self.rotation(body) @ np.asarray(normal, dtype=float)

    # ------------------------------------------------------------------
    # Dynamics quantities
    # ------------------------------------------------------------------
    def point_jacobian(self, point: np.ndarray, body: RigidBody) -> np.ndarray:
        """Translational Jacobian (3, nv) of a body-frame point."""
        world_point = self.transform_point(point, body)
        jacp = np.zeros((3, self.mechanism.num_velocities))
        mujoco.mj_jac(self.mechanism.model, self.data, jacp, None, world_point, body.id)
        return jacp

    def point_velocity(self, point: np.ndarray, body: RigidBody) -> np.ndarray:
        return self.point_jacobian(point, body) @ self.data.qvel

    def mass_matrix(self) -> np.ndarray:
        self._forward()
        nv = self.mechanism.num_velocities
        mass_matrix = np.zeros((nv, nv))
        unit, column = np.zeros(nv), np.zeros(nv)
        for i in range(nv):
            unit[:] = 0.0
            unit[i] = 1.0
            mujoco.mj_mulM(self.mechanism.model, self.data, column, unit)
            mass_matrix[:, i] = column
        return mass_matrix

    def bias_forces(self) -> np.ndarray:
        """Coriolis, centrifugal and gravity generalized forces."""
        self._forward()
        return self.data.qfrc_bias.copy()
