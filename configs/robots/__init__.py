from .box_atlas import box_atlas
from .robot_data import RobotData

__all__ = ["box_atlas", "get_robot_data"]

ROBOTS: dict[str, RobotData] = {box_atlas.name: box_atlas}


def get_robot_data(robot_name: str) -> RobotData:
    if robot_name not in ROBOTS:
        raise ValueError(f"Robot {robot_name} not found (available: {sorted(ROBOTS)})")
    return ROBOTS[robot_name]
