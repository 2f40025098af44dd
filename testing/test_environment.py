import numpy as np
import pytest

from configs.robots import box_atlas
from models import Mechanism, filter_contacts, parse_contacts
from models.environment import unique_obstacles

ALLOWED_PAIRS = {
    ("l_hand_mount", "wall"),
    ("r_foot_sole", "floor"),
    ("l_foot_sole", "floor"),
    ("l_foot_sole", "wall"),
}


@pytest.fixture
def mechanism():
    return Mechanism.from_file(box_atlas.description_path)


def test_raw_contacts_cover_every_site_obstacle_pair(mechanism):
    env = parse_contacts(mechanism)
    assert env.plane == "xz"
    assert len(env.contacts) == 8
    assert {obstacle.body.name for obstacle in env.obstacles} == {"floor", "wall"}
    assert len(unique_obstacles(env.contacts)) == 2


def test_allow_list_scenario(robot):
    env = robot.environment()
    assert env.pairs() == ALLOWED_PAIRS
    assert len(env.contacts) == 4
    assert env.contacts_for(robot.hands.right) == []
    assert len(env.contacts_for(robot.feet.left)) == 2


def test_surviving_pairs_are_allowed(robot):
    for contact in robot.environment().contacts:
        assert contact.obstacle.body.name in box_atlas.contact_allow_list[contact.body.name]


def test_obstacles_are_deduplicated(robot):
    obstacles = robot.environment().obstacles
    assert [obstacle.body.name for obstacle in obstacles] == ["floor", "wall"]
    assert len({id(obstacle) for obstacle in obstacles}) == 2


def test_body_missing_from_allow_list_keeps_nothing(mechanism):
    env = parse_contacts(mechanism)
    floor = mechanism.find_body("floor")
    filter_contacts(env, {mechanism.find_body("l_foot_sole"): [floor]})
    assert env.pairs() == {("l_foot_sole", "floor")}
    # Obstacles survive filtering even when no pair references them
    assert len(env.obstacles) == 2


def test_friction_basis_is_in_plane(robot):
    for obstacle in robot.environment().obstacles:
        tangent, opposite = obstacle.basis
        np.testing.assert_allclose(opposite, -tangent)
        assert abs(tangent @ obstacle.contact_face.outward_normal) < 1e-12
        np.testing.assert_allclose(np.linalg.norm(tangent), 1.0)

    floor = robot.environment().obstacles[0]
    np.testing.assert_allclose(np.abs(floor.basis[0]), [1.0, 0.0, 0.0], atol=1e-12)


def test_half_spaces_in_world_frame(robot):
    floor, wall = robot.mechanism().environment_primitives
    np.testing.assert_allclose(floor.outward_normal, [0.0, 0.0, 1.0], atol=1e-9)
    assert floor.point[2] == pytest.approx(0.0, abs=1e-9)
    np.testing.assert_allclose(wall.outward_normal, [1.0, 0.0, 0.0], atol=1e-9)
    assert wall.point[0] == pytest.approx(-0.8, abs=1e-9)


def test_feet_rest_on_floor_at_nominal_state(robot):
    state = robot.nominal_state()
    floor, wall = robot.mechanism().environment_primitives
    for foot in robot.feet:
        position = state.transform_point(np.zeros(3), foot)
        assert floor.separation(position) == pytest.approx(0.0, abs=1e-9)
        assert wall.separation(position) > 0.0
    left_hand = state.transform_point(np.zeros(3), robot.hands.left)
    assert 0.0 < wall.separation(left_hand) < 0.2


def test_invalid_plane(mechanism):
    with pytest.raises(ValueError):
        parse_contacts(mechanism, plane="xw")
