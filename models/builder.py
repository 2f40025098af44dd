"""
Box Atlas construction: mechanism, filtered contact environment and soft
contact model, built once from the kinematic description.
"""

from __future__ import annotations

import os
from typing import TYPE_CHECKING

from utils.logging_config import logger

from .contact_model import (
    SoftContactModel,
    ViscoelasticCoulombModel,
    add_contact_points,
    hunt_crossley_hertz,
)
from .environment import add_environment_primitives, filter_contacts, parse_contacts
from .mechanism import Mechanism, ModelConstructionError
from .robot import BoxAtlas

if TYPE_CHECKING:
    from configs.robots.robot_data import RobotData


def soft_contact_model(robot_data: RobotData) -> SoftContactModel:
    params = robot_data.contact_model
    return SoftContactModel(
        normal=hunt_crossley_hertz(k=params.normal_stiffness, alpha=params.normal_alpha),
        tangential=ViscoelasticCoulombModel(
            mu=params.friction_coefficient,
            k=params.tangential_stiffness,
            b=params.tangential_damping,
        ),
    )


def add_rigid_body_contact_model(robot: BoxAtlas) -> BoxAtlas:
    """
    Register the obstacle half-spaces (evaluated at the nominal state) and attach
    one soft contact point to each contact body.

    Must run once per robot instance; bodies already carrying a contact point
    are skipped.
    """
    mechanism = robot.mechanism()
    state = robot.nominal_state()
    add_environment_primitives(mechanism, robot.environment().obstacles, state)
    add_contact_points(
        mechanism, robot.robot_data.contact_bodies, soft_contact_model(robot.robot_data)
    )
    return robot


def build_box_atlas(
    robot_data: RobotData,
    add_contacts: bool = True,
    description_path: str | os.PathLike | None = None,
) -> BoxAtlas:
    """
    Load the description and build the Box Atlas model.

    Args:
        robot_data: Robot record (names, bounds, contact and cost parameters)
        add_contacts: Whether to attach the soft contact model
        description_path: Overrides robot_data.description_path

    Returns:
        The robot bundle

    Raises:
        ModelConstructionError: A joint or body named in robot_data is missing
    """
    path = description_path if description_path is not None else robot_data.description_path
    mechanism = Mechanism.from_file(path)

    # The base is never driven directly: all of its motion comes from contact forces
    floating_base = mechanism.find_joint(robot_data.floating_base)
    mechanism.set_joint_bounds(
        floating_base,
        position=robot_data.base_position_bounds,
        velocity=robot_data.base_velocity_bounds,
        effort=(0.0, 0.0),
    )

    feet = robot_data.feet.map(mechanism.find_body)
    hands = robot_data.hands.map(mechanism.find_body)
    obstacles = {name: mechanism.find_body(name) for name in robot_data.obstacles}
    allowed_obstacles = {}
    for body, allowed in robot_data.contact_allow_list.items():
        unknown = [name for name in allowed if name not in obstacles]
        if unknown:
            raise ModelConstructionError(
                f"Allow-list of {body} names unknown obstacles {unknown} "
                f"(obstacles: {list(obstacles)})"
            )
        allowed_obstacles[mechanism.find_body(body)] = [obstacles[name] for name in allowed]

    env = parse_contacts(mechanism, robot_data.friction_coefficient, robot_data.motion_plane)
    filter_contacts(env, allowed_obstacles)

    robot = BoxAtlas(
        mech=mechanism,
        env=env,
        floating_base=floating_base,
        feet=feet,
        hands=hands,
        robot_data=robot_data,
    )
    if add_contacts:
        add_rigid_body_contact_model(robot)
    logger.info(
        f"Built {robot_data.name}: {len(env.contacts)} contact pairs, "
        f"{len(mechanism.environment_primitives)} environment primitives"
    )
    return robot
