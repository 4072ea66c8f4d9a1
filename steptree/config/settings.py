"""Configuration management for steptree."""

from functools import lru_cache
from pathlib import Path
from typing import Annotated, Any, Dict, List, Mapping, Optional

from dotenv import load_dotenv
from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

from steptree.error_handling.exceptions import ConfigurationError


# Verbosity levels understood by the printer and reporter.
LEVEL_MINIMAL = 0
LEVEL_STEPS = 1
LEVEL_DEBUG = 2
LEVEL_VERBOSE = 3


class ReporterOptions(BaseModel):
    """Options accepted by the CLI reporter."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    steps: bool = Field(default=False, description="Print every step")
    debug: bool = Field(default=False, description="Print steps with full call trees")
    verbose: bool = Field(default=False, description="Print everything, including stack traces")
    noreverse: bool = Field(
        default=False, description="Do not rewind the cursor before printing results"
    )
    notruncate: bool = Field(default=False, description="Do not truncate output lines")
    output_style: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("outputStyle", "output_style"),
        description="Rendering mode; 'actor' suppresses ancestor labels",
    )

    @classmethod
    def from_mapping(cls, options: Optional[Dict[str, Any]]) -> "ReporterOptions":
        """
        Build options from a raw mapping, unwrapping ``reporterOptions``.

        Raises:
            ConfigurationError: The options are not a mapping or hold a bad value
        """
        options = options or {}
        if not isinstance(options, Mapping):
            raise ConfigurationError(
                f"Reporter options must be a mapping, got {type(options).__name__}"
            )
        nested = options.get("reporterOptions") or options.get("reporter_options")
        try:
            return cls.model_validate(nested or options)
        except ValidationError as e:
            error = e.errors()[0]
            option = ".".join(str(part) for part in error["loc"]) or None
            raise ConfigurationError(
                f"Invalid reporter option {option}: {error['msg']}",
                option=option,
                cause=e,
            ) from e

    @property
    def level(self) -> int:
        """Verbosity level derived from the flags; the highest flag wins."""
        level = LEVEL_MINIMAL
        if self.steps:
            level = LEVEL_STEPS
        if self.debug:
            level = LEVEL_DEBUG
        if self.verbose:
            level = LEVEL_VERBOSE
        return level

    @property
    def reverse(self) -> bool:
        return not self.noreverse

    @property
    def truncate(self) -> bool:
        return not self.notruncate


class Settings(BaseSettings):
    """Application settings with environment variable support."""

    model_config = SettingsConfigDict(
        env_prefix="STEPTREE_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Output Configuration
    output_level: int = Field(
        default=LEVEL_MINIMAL, ge=LEVEL_MINIMAL, le=LEVEL_VERBOSE,
        description="Default verbosity level (0 minimal .. 3 verbose)",
    )
    output_style: Optional[str] = Field(
        default=None, description="Rendering mode passed to the printer"
    )
    output_reverse: bool = Field(
        default=True, description="Rewind the cursor before printing results"
    )
    output_truncate: bool = Field(
        default=True, description="Truncate lines to the terminal width"
    )
    test_root: Path = Field(
        default=Path("."), description="Root directory of the test project"
    )

    # Execution Configuration
    dry_run: bool = Field(
        default=False, description="Skip helpers and return stub values"
    )
    boundary_names: Annotated[List[str], NoDecode] = Field(
        default_factory=list,
        description="Extra function name fragments treated as boundary frames",
    )

    # Logging Configuration
    log_level: str = Field(
        default="WARNING",
        description="Logging level",
    )
    log_format: str = Field(
        default="text",
        description="Log format (json or text)",
    )
    log_file: Optional[str] = Field(
        default=None, description="Log file path"
    )

    @field_validator("log_level")
    def validate_log_level(cls, v: str) -> str:
        """Validate log level."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"Invalid log level: {v}")
        return v.upper()

    @field_validator("log_format")
    def validate_log_format(cls, v: str) -> str:
        """Validate log format."""
        if v not in ["json", "text"]:
            raise ValueError(f"Invalid log format: {v}")
        return v

    @field_validator("boundary_names", mode="before")
    @classmethod
    def coerce_boundary_names(cls, raw: Any) -> List[str]:
        """Accept a comma-separated string as well as a list."""
        if raw is None:
            return []
        if isinstance(raw, str):
            return [item.strip() for item in raw.split(",") if item.strip()]
        return [str(item).strip() for item in raw if str(item).strip()]

    def reporter_options(self) -> ReporterOptions:
        """Reporter options equivalent to the configured defaults."""
        return ReporterOptions(
            steps=self.output_level >= LEVEL_STEPS,
            debug=self.output_level >= LEVEL_DEBUG,
            verbose=self.output_level >= LEVEL_VERBOSE,
            noreverse=not self.output_reverse,
            notruncate=not self.output_truncate,
            output_style=self.output_style,
        )


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    # Load .env file if it exists
    env_file = Path(".env")
    if env_file.exists():
        load_dotenv(env_file)

    return Settings()
