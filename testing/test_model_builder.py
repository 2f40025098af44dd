import dataclasses

import mujoco
import numpy as np
import pytest

from configs.robots import box_atlas, get_robot_data
from models import ModelConstructionError, Sides, build_box_atlas


def test_floating_base_is_unactuated(robot):
    floating_base = robot.floating_base
    assert floating_base.name == "floating_base"
    np.testing.assert_array_equal(floating_base.effort_bounds, np.zeros((3, 2)))
    assert not floating_base.actuated.any()

    model = robot.mechanism().model
    for jnt_id in floating_base.joint_ids:
        assert model.jnt_actfrclimited[jnt_id]
        np.testing.assert_array_equal(model.jnt_actfrcrange[jnt_id], [0.0, 0.0])


def test_floating_base_bounds(robot):
    floating_base = robot.floating_base
    np.testing.assert_array_equal(floating_base.position_bounds, np.tile([-10.0, 10.0], (3, 1)))
    np.testing.assert_array_equal(
        floating_base.velocity_bounds, np.tile([-1000.0, 1000.0], (3, 1))
    )
    model = robot.mechanism().model
    for jnt_id in floating_base.joint_ids:
        assert model.jnt_limited[jnt_id]
        np.testing.assert_array_equal(model.jnt_range[jnt_id], [-10.0, 10.0])


def test_floating_base_unactuated_without_contacts(bare_robot):
    np.testing.assert_array_equal(bare_robot.floating_base.effort_bounds, np.zeros((3, 2)))
    assert bare_robot.mechanism().environment_primitives == []


def test_coordinate_layout(robot):
    mechanism = robot.mechanism()
    assert mechanism.num_positions == mechanism.num_velocities == 11
    assert mechanism.configuration_range(robot.floating_base) == slice(0, 3)
    assert mechanism.velocity_range(robot.floating_base) == slice(0, 3)
    extension = mechanism.find_joint("pelvis_to_l_foot_sole_extension")
    assert extension.num_positions == 1
    assert extension.joint_ids == (
        mujoco.mj_name2id(
            mechanism.model, mujoco.mjtObj.mjOBJ_JOINT, "pelvis_to_l_foot_sole_extension"
        ),
    )


def test_limb_joints_keep_actuator_effort(robot):
    mechanism = robot.mechanism()
    extension = mechanism.find_joint("pelvis_to_r_foot_sole_extension")
    np.testing.assert_array_equal(extension.effort_bounds, [[-1000.0, 1000.0]])
    rotation = mechanism.find_joint("pelvis_to_r_hand_mount_rotation")
    np.testing.assert_array_equal(rotation.effort_bounds, [[-200.0, 200.0]])
    np.testing.assert_array_equal(rotation.position_bounds, [[-1.57, 1.57]])

    actuated = mechanism.actuated_velocities()
    assert not actuated[:3].any()
    assert actuated[3:].all()


def test_named_handles(robot):
    assert robot.feet["left"].name == "l_foot_sole"
    assert robot.feet["right"].name == "r_foot_sole"
    assert robot.hands.left.name == "l_hand_mount"
    assert robot.hands.right.name == "r_hand_mount"
    assert [side for side, _ in robot.feet.items()] == ["left", "right"]
    with pytest.raises(KeyError):
        robot.hands["middle"]


def test_sides_map():
    sides = Sides(left=1, right=2).map(lambda value: value * 10)
    assert sides == Sides(left=10, right=20)
    assert list(sides) == [10, 20]


def test_description_path_is_threaded(robot):
    assert robot.description_path() == box_atlas.description_path
    assert robot.description_path().exists()


def test_missing_joint_is_fatal():
    with pytest.raises(ModelConstructionError, match="floating_joint"):
        build_box_atlas(dataclasses.replace(box_atlas, floating_base="floating_joint"))


def test_missing_body_is_fatal():
    feet = Sides(left="l_foot_sole", right="r_foot")
    with pytest.raises(ModelConstructionError, match="r_foot"):
        build_box_atlas(dataclasses.replace(box_atlas, feet=feet))


def test_missing_obstacle_is_fatal():
    with pytest.raises(ModelConstructionError, match="ceiling"):
        build_box_atlas(dataclasses.replace(box_atlas, obstacles=("floor", "ceiling")))


def test_unknown_robot():
    assert get_robot_data("box_atlas") is box_atlas
    with pytest.raises(ValueError):
        get_robot_data("go2")


def test_allow_list_with_unknown_obstacle_is_fatal():
    allow_list = dict(box_atlas.contact_allow_list, r_hand_mount=("ceiling",))
    with pytest.raises(ModelConstructionError, match="ceiling"):
        build_box_atlas(dataclasses.replace(box_atlas, contact_allow_list=allow_list))


def test_mass_matrix(robot):
    mechanism = robot.mechanism()
    M = robot.nominal_state().mass_matrix()
    nv = mechanism.num_velocities
    assert M.shape == (nv, nv)
    np.testing.assert_allclose(M, M.T, atol=1e-12)
    assert np.linalg.eigvalsh(M).min() > 0.0

    total_mass = float(mechanism.model.body_subtreemass[mechanism.find_body("pelvis").id])
    assert total_mass == pytest.approx(12.8)
    base = mechanism.velocity_range(robot.floating_base)
    assert M[base.start, base.start] == pytest.approx(total_mass)
    assert M[base.start + 1, base.start + 1] == pytest.approx(total_mass)
