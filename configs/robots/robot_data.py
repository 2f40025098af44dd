import dataclasses
from collections.abc import Mapping
from pathlib import Path
from types import MappingProxyType

from models.robot import Sides


def _freeze(record, *names: str) -> None:
    # Read-only copies: records are shared module-level instances
    for name in names:
        object.__setattr__(record, name, MappingProxyType(dict(getattr(record, name))))


@dataclasses.dataclass(frozen=True)
class ContactModelParams:
    normal_stiffness: float  # Hunt-Crossley k
    normal_alpha: float  # Hunt-Crossley damping ratio
    friction_coefficient: float
    tangential_stiffness: float
    tangential_damping: float


@dataclasses.dataclass(frozen=True)
class CostWeights:
    # joint name -> per-coordinate weights (scalar broadcast over the joint)
    position: Mapping[str, tuple[float, ...]]
    velocity: Mapping[str, tuple[float, ...]]
    default_position: float
    default_velocity: float
    r: float  # uniform control regularization

    def __post_init__(self):
        _freeze(self, "position", "velocity")


@dataclasses.dataclass(frozen=True)
class RobotData:
    name: str
    description_path: Path
    floating_base: str
    feet: Sides[str]  # body names
    hands: Sides[str]  # body names
    obstacles: tuple[str, ...]  # obstacle body names
    contact_allow_list: Mapping[str, tuple[str, ...]]  # body -> obstacle bodies
    contact_bodies: tuple[str, ...]  # bodies receiving a soft contact point
    motion_plane: str
    friction_coefficient: float  # obstacle Coulomb friction
    base_position_bounds: tuple[float, float]
    base_velocity_bounds: tuple[float, float]
    contact_model: ContactModelParams
    nominal_configuration: Mapping[str, tuple[float, ...]]  # joint -> coordinates
    cost_weights: CostWeights

    def __post_init__(self):
        _freeze(self, "contact_allow_list", "nominal_configuration")
