"""Robot model bundle handed to the MPC engine at initialization."""

from __future__ import annotations

import dataclasses
from collections.abc import Callable, Iterator
from pathlib import Path
from typing import TYPE_CHECKING, Generic, Protocol, TypeVar

import numpy as np

from .environment import Environment
from .mechanism import Joint, Mechanism, MechanismState, RigidBody
from .nominal import nominal_state

if TYPE_CHECKING:
    from configs.robots.robot_data import RobotData
    from mpc.lqr import LQRSolution
    from mpc.mpc_config import MPCParams

T = TypeVar("T")
U = TypeVar("U")

SIDES = ("left", "right")


@dataclasses.dataclass(frozen=True)
class Sides(Generic[T]):
    """Fixed {left, right} mapping."""

    left: T
    right: T

    def __getitem__(self, side: str) -> T:
        if side not in SIDES:
            raise KeyError(f"Invalid side: {side}")
        return getattr(self, side)

    def __iter__(self) -> Iterator[T]:
        yield self.left
        yield self.right

    def items(self) -> tuple[tuple[str, T], tuple[str, T]]:
        return (("left", self.left), ("right", self.right))

    def map(self, fn: Callable[[T], U]) -> Sides[U]:
        return Sides(left=fn(self.left), right=fn(self.right))


class RobotModel(Protocol):
    def mechanism(self) -> Mechanism: ...

    def environment(self) -> Environment: ...

    def nominal_state(self) -> MechanismState: ...

    def cost(self, r: float | None = None) -> tuple[np.ndarray, np.ndarray]: ...

    def description_path(self) -> Path: ...


@dataclasses.dataclass(eq=False)
class BoxAtlas:
    mech: Mechanism
    env: Environment
    floating_base: Joint
    feet: Sides[RigidBody]
    hands: Sides[RigidBody]
    robot_data: RobotData

    def mechanism(self) -> Mechanism:
        return self.mech

    def environment(self) -> Environment:
        return self.env

    def nominal_state(self) -> MechanismState:
        return nominal_state(self.mech, self.robot_data.nominal_configuration)

    def cost(self, r: float | None = None) -> tuple[np.ndarray, np.ndarray]:
        from mpc.costs import default_costs

        return default_costs(self, r)

    def description_path(self) -> Path:
        return self.mech.description_path

    def lqr_solution(self, params: MPCParams | None = None, zero_base_x: bool = False) -> LQRSolution:
        from mpc.lqr import lqr_solution

        return lqr_solution(self, params, zero_base_x)
