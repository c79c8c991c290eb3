import tomllib
from pathlib import Path

import tomlkit
from pydantic import BaseModel, PositiveInt, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from driftswap.logging import logger

CONFIG_DIR = Path.home() / ".config" / "driftswap"
CONFIG_FILE = CONFIG_DIR / "config.toml"

ONE_DAY = 86_400


class AmplificationSettings(BaseModel):
    # Stored in whole A units, compared against values scaled by A_PRECISION by the scheduler
    max_a: PositiveInt = 10**6
    max_a_change: PositiveInt = 2
    min_ramp_time: PositiveInt = 14 * ONE_DAY
    ramp_cooldown: PositiveInt = ONE_DAY


class FeeSettings(BaseModel):
    max_swap_fee: PositiveInt = 10**8
    max_admin_fee: PositiveInt = 10**10

    @model_validator(mode="after")
    def validate_ceilings(self) -> "FeeSettings":
        """
        Both fees share the 10**10 denominator, so neither ceiling may exceed 100%.
        """

        if self.max_swap_fee > 10**10 or self.max_admin_fee > 10**10:
            raise ValueError("Fee ceilings cannot exceed the fee denominator.")
        return self


class MetapoolSettings(BaseModel):
    # Seconds before a cached base pool virtual price is considered stale
    base_cache_expire_time: PositiveInt = 10 * 60


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="DRIFTSWAP_",
        env_nested_delimiter="__",
    )

    amplification: AmplificationSettings = AmplificationSettings()
    fees: FeeSettings = FeeSettings()
    metapool: MetapoolSettings = MetapoolSettings()


def load_config_from_file(config_path: Path) -> Settings:
    return Settings.model_validate(
        tomllib.loads(
            config_path.read_text(),
        ),
    )


def save_config_to_file(config: Settings, config_path: Path = CONFIG_FILE) -> None:
    if not config_path.parent.exists():
        config_path.parent.mkdir(parents=True, exist_ok=True)
        logger.info(f"Created a configuration directory at {config_path.parent}.")

    config_path.write_text(
        tomlkit.dumps(
            config.model_dump(),
        ),
    )


if CONFIG_FILE.exists():
    settings = load_config_from_file(CONFIG_FILE)
    logger.info(f"Loaded configuration from {CONFIG_FILE}.")
else:
    settings = Settings()
