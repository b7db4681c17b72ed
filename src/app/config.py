from __future__ import annotations

import os
from dataclasses import dataclass

from src.domain.algorithms.motion import MotionParameters, OutOfOrderPolicy, SpeedPolicy

DEFAULT_SEED_VEHICLES: tuple[str, ...] = (
    "MH08AA1234",
    "MH08BB5678",
    "MH08CC9012",
    "MH08DD3456",
    "MH08EE7890",
    "MH08FF1122",
    "MH08GG3344",
    "MH08HH5566",
    "MH08II7788",
    "MH08JJ9900",
)


def env_bool(name: str, default: bool = False) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y", "on"}


def _env_str(name: str, default: str) -> str:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip()


@dataclass(frozen=True, slots=True)
class TrackingConfig:
    """Runtime settings for the tracking core.

    Env vars:
      - BUSTRACK_POOL_SIZE (default 100)
      - BUSTRACK_SPEED_THRESHOLD_MPS (default 1.0)
      - BUSTRACK_SMOOTHING_ALPHA (default 0.3)
      - BUSTRACK_HISTORY_SIZE (default 3)
      - BUSTRACK_SPEED_POLICY: low_pass | windowed (default low_pass)
      - BUSTRACK_OUT_OF_ORDER: store | reject (default store)
      - BUSTRACK_SEED_VEHICLES: comma-separated vehicle ids
    """

    pool_size: int = 100
    speed_threshold_mps: float = 1.0
    smoothing_alpha: float = 0.3
    history_size: int = 3
    speed_policy: SpeedPolicy = SpeedPolicy.LOW_PASS
    out_of_order: OutOfOrderPolicy = OutOfOrderPolicy.STORE
    seed_vehicles: tuple[str, ...] = DEFAULT_SEED_VEHICLES

    def __post_init__(self) -> None:
        if self.pool_size < 1:
            raise ValueError(f"Device handle pool must not be empty: {self.pool_size}")

    @staticmethod
    def from_env() -> "TrackingConfig":
        seeds_raw = os.getenv("BUSTRACK_SEED_VEHICLES")
        seeds = DEFAULT_SEED_VEHICLES
        if seeds_raw is not None:
            seeds = tuple(s.strip() for s in seeds_raw.split(",") if s.strip())

        return TrackingConfig(
            pool_size=int(_env_str("BUSTRACK_POOL_SIZE", "100")),
            speed_threshold_mps=float(_env_str("BUSTRACK_SPEED_THRESHOLD_MPS", "1.0")),
            smoothing_alpha=float(_env_str("BUSTRACK_SMOOTHING_ALPHA", "0.3")),
            history_size=int(_env_str("BUSTRACK_HISTORY_SIZE", "3")),
            speed_policy=SpeedPolicy(
                _env_str("BUSTRACK_SPEED_POLICY", "low_pass").lower()
            ),
            out_of_order=OutOfOrderPolicy(
                _env_str("BUSTRACK_OUT_OF_ORDER", "store").lower()
            ),
            seed_vehicles=seeds,
        )

    def motion_parameters(self) -> MotionParameters:
        return MotionParameters(
            alpha=self.smoothing_alpha,
            speed_threshold_mps=self.speed_threshold_mps,
            history_size=self.history_size,
            speed_policy=self.speed_policy,
            out_of_order=self.out_of_order,
        )
