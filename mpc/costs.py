"""
Quadratic running-cost weights.

Weights are placed through the mechanism's own coordinate layout, never through
hard-coded offsets, so a description with a different joint order still gets
each weight on the right coordinate.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping, Sequence
from typing import TYPE_CHECKING

import numpy as np

from models.mechanism import Joint, Mechanism

if TYPE_CHECKING:
    from models.robot import BoxAtlas


def _place_weights(
    mechanism: Mechanism,
    size: int,
    weights: Mapping[str, Sequence[float]],
    default: float,
    coordinate_range: Callable[[Joint], slice],
) -> np.ndarray:
    diagonal = np.full(size, float(default))
    for joint_name, joint_weights in weights.items():
        indices = coordinate_range(mechanism.find_joint(joint_name))
        diagonal[indices] = joint_weights
    if np.any(diagonal <= 0):
        raise ValueError(f"Cost weights must be strictly positive, got {diagonal}")
    return diagonal


def state_weights(
    mechanism: Mechanism,
    position_weights: Mapping[str, Sequence[float]],
    velocity_weights: Mapping[str, Sequence[float]],
    default_position: float,
    default_velocity: float,
) -> np.ndarray:
    """Diagonal state-cost matrix over (positions, velocities)."""
    qq = _place_weights(
        mechanism,
        mechanism.num_positions,
        position_weights,
        default_position,
        mechanism.configuration_range,
    )
    qv = _place_weights(
        mechanism,
        mechanism.num_velocities,
        velocity_weights,
        default_velocity,
        mechanism.velocity_range,
    )
    return np.diag(np.concatenate([qq, qv]))


def input_weights(mechanism: Mechanism, r: float) -> np.ndarray:
    """Uniform regularizer keeping the LQR well posed; not an effort penalty."""
    if r <= 0:
        raise ValueError(f"Control weight r must be positive, got {r}")
    return np.diag(np.full(mechanism.num_velocities, float(r)))


def default_costs(robot: BoxAtlas, r: float | None = None) -> tuple[np.ndarray, np.ndarray]:
    """Return (Q, R) for the robot, with R = r * I (r from the robot record by default)."""
    weights = robot.robot_data.cost_weights
    mechanism = robot.mechanism()
    Q = state_weights(
        mechanism,
        weights.position,
        weights.velocity,
        weights.default_position,
        weights.default_velocity,
    )
    R = input_weights(mechanism, weights.r if r is None else r)
    return Q, R
