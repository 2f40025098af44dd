import numpy as np

import config
from models import build_box_atlas
from models.contact_model import contact_points
from utils.logging import print_stage, print_status


def main() -> None:
    # ========================================================
    # Stage 0: Model
    # ========================================================
    print_stage(0, "Model")
    robot = build_box_atlas(config.robot_data, add_contacts=config.add_contacts)
    mechanism = robot.mechanism()
    print(f"Description: {robot.description_path()}")
    print(f"nq = {mechanism.num_positions}, nv = {mechanism.num_velocities}")
    print(f"Floating base effort bounds: {robot.floating_base.effort_bounds.tolist()}")

    # ========================================================
    # Stage 1: Contact environment
    # ========================================================
    print_stage(1, "Contact environment")
    for body_name, obstacle_name in sorted(robot.environment().pairs()):
        print(f"  {body_name:14s} -> {obstacle_name}")
    for primitive in mechanism.environment_primitives:
        print(f"  half-space at {primitive.point} normal {primitive.outward_normal}")
    print(f"  {len(contact_points(mechanism))} soft contact points")

    # ========================================================
    # Stage 2: Costs and terminal value
    # ========================================================
    print_stage(2, "Costs and LQR terminal value")
    Q, R = robot.cost()
    print(f"Q diagonal: {np.round(np.diag(Q), 3)}")
    print(f"R diagonal: {np.diag(R)}")
    lqr = robot.lqr_solution(config.mpc_params, zero_base_x=config.zero_base_x)
    print(f"S: {lqr.S.shape}, K: {lqr.K.shape}, dt = {lqr.dt}")
    print(f"Nominal input: {np.round(lqr.u0, 3)}")

    print_status(
        bool(np.all(np.isfinite(lqr.S)) and np.all(np.isfinite(lqr.K))),
        "Model, costs and terminal value ready for the MPC engine.",
        "LQR terminal value contains non-finite entries.",
    )


if __name__ == "__main__":
    main()
