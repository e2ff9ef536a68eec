"""Detection configuration for the repo finder."""

import os
from dataclasses import dataclass

# Exhaustive enumeration visits 2^n selections; beyond this it is not tractable
MAX_EXHAUSTIVE_LEGS = 20


class ConfigError(ValueError):
    """Raised when detection parameters are inconsistent."""


@dataclass(frozen=True)
class DetectionConfig:
    """Centralized configuration for multi-leg repo detection.

    Attributes:
        maturity_cap: Maximum days a repo may remain open (default: 30)
        transaction_cap: Maximum number of legs a repo may select besides its
            focus. Rounds widen from 2 up to this value (default: 6)
        interest_lower: Lower bound of the daily interest rate band
        interest_upper: Upper bound of the daily interest rate band
        matrix_max: Largest pool searched by exhaustive enumeration (default: 12)
        iter_max: Largest pool searched by the incremental method (default: 20)
        use_iterative: Enable the incremental method for long pools
    """

    maturity_cap: int = 30
    transaction_cap: int = 6

    # Daily rates
    interest_lower: float = -0.0001
    interest_upper: float = 0.001

    # Search bounds
    matrix_max: int = 12
    iter_max: int = 20
    use_iterative: bool = True

    def __post_init__(self) -> None:
        if self.maturity_cap <= 0:
            raise ConfigError(f"maturity_cap must be positive: {self.maturity_cap}")
        if self.transaction_cap <= 0:
            raise ConfigError(f"transaction_cap must be positive: {self.transaction_cap}")
        if self.matrix_max <= 0:
            raise ConfigError(f"matrix_max must be positive: {self.matrix_max}")
        if self.matrix_max >= self.iter_max:
            raise ConfigError(
                f"matrix_max ({self.matrix_max}) must be smaller than iter_max ({self.iter_max})"
            )
        if self.matrix_max > MAX_EXHAUSTIVE_LEGS:
            raise ConfigError(
                f"matrix_max {self.matrix_max} exceeds {MAX_EXHAUSTIVE_LEGS}, "
                "exhaustive enumeration would not finish"
            )
        if self.interest_lower > self.interest_upper:
            raise ConfigError(
                f"interest_lower ({self.interest_lower}) exceeds "
                f"interest_upper ({self.interest_upper})"
            )
        if self.interest_lower <= -1:
            raise ConfigError(f"interest_lower must be above -1: {self.interest_lower}")

    @classmethod
    def from_env(cls) -> "DetectionConfig":
        """Build a config from REPOFINDER_* environment variables.

        Unset variables fall back to the dataclass defaults.
        """
        defaults = cls()
        return cls(
            maturity_cap=int(os.environ.get("REPOFINDER_MATURITY_CAP", defaults.maturity_cap)),
            transaction_cap=int(
                os.environ.get("REPOFINDER_TRANSACTION_CAP", defaults.transaction_cap)
            ),
            interest_lower=float(
                os.environ.get("REPOFINDER_INTEREST_LOWER", defaults.interest_lower)
            ),
            interest_upper=float(
                os.environ.get("REPOFINDER_INTEREST_UPPER", defaults.interest_upper)
            ),
            matrix_max=int(os.environ.get("REPOFINDER_MATRIX_MAX", defaults.matrix_max)),
            iter_max=int(os.environ.get("REPOFINDER_ITER_MAX", defaults.iter_max)),
            use_iterative=os.environ.get(
                "REPOFINDER_USE_ITERATIVE", str(defaults.use_iterative)
            ).lower()
            in ("true", "1", "yes"),
        )


# Default configuration instance
DEFAULT_DETECTION_CONFIG = DetectionConfig()
