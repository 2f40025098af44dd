from configs.robots import get_robot_data
from configs.robots.robot_data import RobotData
from mpc.mpc_config import MPCParams

robot: str = "box_atlas"
robot_data: RobotData = get_robot_data(robot)

# Attach the soft contact model (half-spaces + contact points) at construction
add_contacts: bool = True

# The system has no preferred absolute x-position
zero_base_x: bool = True

mpc_params: MPCParams = MPCParams(
    dt=0.05,
    horizon=10,
    mip_solver_options={
        "OutputFlag": 0,
        "TimeLimit": 3,
        "MIPGap": 1e-2,
        "FeasibilityTol": 1e-3,
    },
    lcp_solver_options={
        "OutputFlag": 0,
    },
)
