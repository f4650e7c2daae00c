import math
from pathlib import Path
from typing import Any

from pydantic import Field, field_validator
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)

from wordflow.application.scheduler import FsrsParameters
from wordflow.domain.constants import (
    DEFAULT_MAX_REVIEWS,
    DEFAULT_MAXIMUM_INTERVAL,
    DEFAULT_NEW_CARDS_PER_DAY,
    DEFAULT_NOTEBOOK,
    DEFAULT_REQUEST_RETENTION,
    DEFAULT_WEIGHTS,
    WEIGHT_COUNT,
)


def config_dir() -> Path:
    return Path.home() / ".config/wordflow"


def config_files() -> list[Path]:
    return [config_dir() / "config.toml", Path.home() / ".wordflow.toml"]


class AppConfig(BaseSettings):
    """
    Configuration model for wordflow.
    Supports loading from:
    1. Manual overrides (CLI)
    2. Environment variables (WORDFLOW_*)
    3. Config file (~/.config/wordflow/config.toml or ~/.wordflow.toml)
    """

    model_config = SettingsConfigDict(
        env_prefix="WORDFLOW_",
        extra="ignore",
    )

    # Notebook
    notebook_dir: Path = Field(default_factory=lambda: config_dir() / "notebooks")
    notebook: str = DEFAULT_NOTEBOOK
    log_dir: Path = Field(default_factory=lambda: config_dir() / "logs")

    # Sessions
    max_reviews_per_session: int = Field(default=DEFAULT_MAX_REVIEWS, gt=0)
    new_cards_per_day: int = Field(default=DEFAULT_NEW_CARDS_PER_DAY, ge=0)

    # FSRS
    request_retention: float = Field(default=DEFAULT_REQUEST_RETENTION, gt=0, lt=1)
    maximum_interval: int = Field(default=DEFAULT_MAXIMUM_INTERVAL, ge=1)
    weights: list[float] | None = None

    verbose: int = 1

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        from pydantic_settings import TomlConfigSettingsSource

        # Find the first existing file
        toml_file = None
        for f in config_files():
            if f.exists():
                toml_file = f
                break

        # Earlier sources win.
        if toml_file:
            return (
                init_settings,
                env_settings,
                TomlConfigSettingsSource(settings_cls, toml_file=toml_file),
            )
        else:
            return (
                init_settings,
                env_settings,
            )

    @field_validator("notebook_dir", "log_dir", mode="before")
    @classmethod
    def resolve_dir(cls, v: Any) -> Path:
        return Path(v).expanduser().resolve()

    @field_validator("notebook")
    @classmethod
    def check_notebook_name(cls, v: str) -> str:
        v = v.strip()
        if not v or "/" in v or "\\" in v:
            raise ValueError(f"invalid notebook name: {v!r}")
        return v

    @field_validator("weights")
    @classmethod
    def check_weights(cls, v: list[float] | None) -> list[float] | None:
        if v is None:
            return v
        if len(v) != WEIGHT_COUNT:
            raise ValueError(f"weights must contain exactly {WEIGHT_COUNT} values, got {len(v)}")
        if not all(math.isfinite(w) for w in v):
            raise ValueError("weights must be finite numbers")
        return v

    def fsrs_parameters(self) -> FsrsParameters:
        """Strongly typed scheduler parameters built from this configuration."""
        return FsrsParameters(
            weights=tuple(self.weights) if self.weights else DEFAULT_WEIGHTS,
            request_retention=self.request_retention,
            maximum_interval=self.maximum_interval,
        )


def resolve_config(cli_overrides: dict[str, Any] | None = None) -> AppConfig:
    """
    Multi-layered configuration resolution.
    1. Defaults in AppConfig
    2. ~/.config/wordflow/config.toml (if exists)
    3. Environment variables (WORDFLOW_*)
    4. cli_overrides (passed from Typer)
    """
    # Typer passes every option; only explicit values override lower layers.
    overrides = {k: v for k, v in (cli_overrides or {}).items() if v is not None}
    return AppConfig(**overrides)
