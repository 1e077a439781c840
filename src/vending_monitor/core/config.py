"""Configuration management.

Loads from TOML config files + environment variables.
Uses pydantic-settings for validation and env var overriding.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings

from .enums import LogFormat


# ---------------------------------------------------------------------------
# Sub-configs
# ---------------------------------------------------------------------------

class MachineConfig(BaseModel):
    id: str
    initial_stock: int = 10


def _default_machines() -> list[MachineConfig]:
    return [MachineConfig(id=mid) for mid in ("001", "002", "003")]


class ThresholdConfig(BaseModel):
    low_stock: int = 3  # Strictly below this is low stock
    sold_out: int = 0  # At or below this is sold out


class BusConfig(BaseModel):
    enforce_ownership: bool = False
    history_limit: int | None = 10_000  # None keeps everything


class SimulationConfig(BaseModel):
    events: int = 20
    seed: int | None = 42
    sale_quantities: list[int] = Field(default_factory=lambda: [1, 2])
    refill_quantities: list[int] = Field(default_factory=lambda: [3, 5])
    sale_probability: float = 0.5


class ObservabilityConfig(BaseModel):
    log_level: str = "INFO"
    log_format: LogFormat = LogFormat.CONSOLE


# ---------------------------------------------------------------------------
# Top-level settings
# ---------------------------------------------------------------------------

class Settings(BaseSettings):
    """Top-level application settings.

    Loaded from TOML config files, overridden by environment variables.
    """

    machines: list[MachineConfig] = Field(default_factory=_default_machines)
    thresholds: ThresholdConfig = Field(default_factory=ThresholdConfig)
    bus: BusConfig = Field(default_factory=BusConfig)
    simulation: SimulationConfig = Field(default_factory=SimulationConfig)
    observability: ObservabilityConfig = Field(default_factory=ObservabilityConfig)

    model_config = {"env_prefix": "VENDING_", "env_nested_delimiter": "__"}

    def validate_thresholds(self) -> None:
        """Reject configurations the stock tracker cannot run with."""
        from .errors import ConfigError

        if self.thresholds.sold_out < 0:
            raise ConfigError(
                "Sold-out threshold must not be negative; stock never drops "
                f"below zero (sold_out={self.thresholds.sold_out})."
            )
        if self.thresholds.low_stock <= self.thresholds.sold_out:
            raise ConfigError(
                "Low-stock threshold must be above the sold-out threshold "
                f"(low_stock={self.thresholds.low_stock}, "
                f"sold_out={self.thresholds.sold_out})."
            )

        seen: set[str] = set()
        for machine in self.machines:
            if machine.id in seen:
                raise ConfigError(f"Duplicate machine id {machine.id!r}.")
            seen.add(machine.id)
            if machine.initial_stock < 0:
                raise ConfigError(
                    f"Machine {machine.id!r} has negative initial stock."
                )

        sim = self.simulation
        for name, quantities in (
            ("sale_quantities", sim.sale_quantities),
            ("refill_quantities", sim.refill_quantities),
        ):
            if not quantities or any(q <= 0 for q in quantities):
                raise ConfigError(
                    f"simulation.{name} must be a non-empty list of positive integers."
                )
        if not 0.0 <= sim.sale_probability <= 1.0:
            raise ConfigError("simulation.sale_probability must be within [0, 1].")


def load_settings(
    config_path: str | Path | None = None,
    overrides: dict[str, Any] | None = None,
) -> Settings:
    """Load settings from TOML file + env vars.

    Args:
        config_path: Path to TOML config file (optional).
        overrides: Dict of overrides to apply on top.
    """
    data: dict[str, Any] = {}

    if config_path:
        path = Path(config_path)
        if path.exists():
            import tomli

            with open(path, "rb") as f:
                data = tomli.load(f)

    if overrides:
        for key, value in overrides.items():
            if isinstance(value, dict) and isinstance(data.get(key), dict):
                data[key] = {**data[key], **value}
            else:
                data[key] = value

    return Settings(**data)
