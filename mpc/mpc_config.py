from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class MPCParams:
    """One-shot parameterization handed to the external MIP/LCP trajectory optimizer."""

    # Horizon
    dt: float = 0.05
    horizon: int = 10

    # Solver options (Gurobi parameter names)
    mip_solver_options: dict[str, Any] = field(
        default_factory=lambda: {
            "OutputFlag": 0,
            "TimeLimit": 3,
            "MIPGap": 1e-2,
            "FeasibilityTol": 1e-3,
        }
    )
    lcp_solver_options: dict[str, Any] = field(
        default_factory=lambda: {
            "OutputFlag": 0,
        }
    )

    def __post_init__(self):
        if self.dt <= 0:
            raise ValueError(f"MPC timestep must be positive, got {self.dt}")
        if self.horizon < 1:
            raise ValueError(f"MPC horizon must be at least 1, got {self.horizon}")

    @property
    def duration(self) -> float:
        return self.dt * self.horizon
