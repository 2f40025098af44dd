from __future__ import annotations

from collections.abc import Mapping, Sequence

from .mechanism import Mechanism, MechanismState


def nominal_state(
    mechanism: Mechanism, configuration: Mapping[str, Sequence[float]]
) -> MechanismState:
    """
    Build the equilibrium state used both as LQR linearization point and as the
    pose at which contact geometry is evaluated.

    Every call returns a fresh state at zero velocity; joints absent from
    `configuration` keep their reference configuration.

    Args:
        mechanism: Mechanism to build the state for
        configuration: Joint name -> joint coordinates

    Returns:
        A new MechanismState
    """
    state = MechanismState(mechanism)
    for joint_name, values in configuration.items():
        state.set_configuration(mechanism.find_joint(joint_name), values)
    return state
