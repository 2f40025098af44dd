from pathlib import Path

import models

from .robot_data import ContactModelParams, CostWeights, RobotData, Sides

box_atlas = RobotData(
    name="box_atlas",
    description_path=Path(models.__file__).parent / "assets" / "box_atlas.xml",
    floating_base="floating_base",
    feet=Sides(left="l_foot_sole", right="r_foot_sole"),
    hands=Sides(left="l_hand_mount", right="r_hand_mount"),
    obstacles=("floor", "wall"),
    contact_allow_list={
        "r_hand_mount": (),
        "l_hand_mount": ("wall",),
        "r_foot_sole": ("floor",),
        "l_foot_sole": ("floor", "wall"),
    },
    contact_bodies=("r_foot_sole", "l_foot_sole", "r_hand_mount", "l_hand_mount"),
    motion_plane="xz",
    friction_coefficient=1.0,
    base_position_bounds=(-10.0, 10.0),
    base_velocity_bounds=(-1000.0, 1000.0),
    contact_model=ContactModelParams(
        normal_stiffness=500e3,
        normal_alpha=0.2,
        friction_coefficient=1.0,
        tangential_stiffness=20e3,
        tangential_damping=100.0,
    ),
    nominal_configuration={
        "floating_base": (0.0, 0.82, 0.0),  # x, z, pitch
        "pelvis_to_l_foot_sole_extension": (0.82,),
        "pelvis_to_r_foot_sole_extension": (0.82,),
        "pelvis_to_l_hand_mount_rotation": (0.2,),
        "pelvis_to_l_hand_mount_extension": (0.7,),
        "pelvis_to_r_hand_mount_rotation": (0.2,),
        "pelvis_to_r_hand_mount_extension": (0.7,),
    },
    cost_weights=CostWeights(
        # Height and pitch dominate: falling and tipping are the costly failures
        position={
            "floating_base": (1.0, 100.0, 800.0),
            "pelvis_to_r_hand_mount_extension": (0.5,),
            "pelvis_to_l_hand_mount_extension": (0.5,),
            "pelvis_to_r_hand_mount_rotation": (0.5,),
            "pelvis_to_l_hand_mount_rotation": (0.5,),
            "pelvis_to_r_foot_sole_extension": (0.5,),
            "pelvis_to_l_foot_sole_extension": (0.5,),
            "pelvis_to_r_foot_sole_rotation": (0.1,),
            "pelvis_to_l_foot_sole_rotation": (0.1,),
        },
        velocity={
            "floating_base": (20.0, 20.0, 50.0),
        },
        default_position=0.01,
        default_velocity=0.5,
        r=1e-5,
    ),
)
