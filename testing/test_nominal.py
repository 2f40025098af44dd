import dataclasses

import numpy as np
import pytest

from configs.robots import box_atlas
from models import nominal_state


def test_nominal_state_is_deterministic(robot):
    first, second = robot.nominal_state(), robot.nominal_state()
    assert first is not second
    np.testing.assert_array_equal(first.configuration, second.configuration)
    np.testing.assert_array_equal(first.velocity, second.velocity)


def test_nominal_state_values(robot):
    state = robot.nominal_state()
    mechanism = robot.mechanism()
    configuration = state.configuration
    for joint_name, values in box_atlas.nominal_configuration.items():
        joint = mechanism.find_joint(joint_name)
        np.testing.assert_array_equal(configuration[mechanism.configuration_range(joint)], values)
    for joint_name in ("pelvis_to_l_foot_sole_rotation", "pelvis_to_r_foot_sole_rotation"):
        joint = mechanism.find_joint(joint_name)
        assert configuration[mechanism.configuration_range(joint)] == pytest.approx([0.0])
    np.testing.assert_array_equal(state.velocity, np.zeros(mechanism.num_velocities))


def test_states_do_not_share_buffers(robot):
    first, second = robot.nominal_state(), robot.nominal_state()
    first.set_configuration(robot.floating_base, [0.3, 0.5, 0.1])
    np.testing.assert_array_equal(
        second.configuration[robot.mechanism().configuration_range(robot.floating_base)],
        [0.0, 0.82, 0.0],
    )


def test_state_copy(robot):
    state = robot.nominal_state()
    state.set_velocity(robot.floating_base, [1.0, 0.0, 0.0])
    other = state.copy()
    np.testing.assert_array_equal(other.velocity, state.velocity)
    assert other.data is not state.data


def test_wrong_coordinate_count(robot):
    with pytest.raises(ValueError):
        nominal_state(robot.mechanism(), {"floating_base": (0.0, 0.82)})


def test_robot_record_is_read_only(robot):
    with pytest.raises(TypeError):
        box_atlas.nominal_configuration["floating_base"] = (0.0, 0.5, 0.0)
    with pytest.raises(TypeError):
        box_atlas.contact_allow_list["r_hand_mount"] = ("floor",)
    with pytest.raises(TypeError):
        box_atlas.cost_weights.position["floating_base"] = (1.0, 1.0, 1.0)

    base = robot.mechanism().configuration_range(robot.floating_base)
    np.testing.assert_array_equal(robot.nominal_state().configuration[base], [0.0, 0.82, 0.0])


def test_record_copies_caller_mappings():
    configuration = dict(box_atlas.nominal_configuration)
    record = dataclasses.replace(box_atlas, nominal_configuration=configuration)
    configuration["floating_base"] = (0.0, 0.5, 0.0)
    assert record.nominal_configuration["floating_base"] == (0.0, 0.82, 0.0)
