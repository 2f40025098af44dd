"""Mechanism, contact environment and contact model construction."""

from .builder import add_rigid_body_contact_model, build_box_atlas
from .environment import Environment, filter_contacts, parse_contacts
from .mechanism import Mechanism, MechanismState, ModelConstructionError
from .nominal import nominal_state
from .robot import BoxAtlas, RobotModel, Sides

__all__ = [
    "BoxAtlas",
    "Environment",
    "Mechanism",
    "MechanismState",
    "ModelConstructionError",
    "RobotModel",
    "Sides",
    "add_rigid_body_contact_model",
    "build_box_atlas",
    "filter_contacts",
    "nominal_state",
    "parse_contacts",
]
