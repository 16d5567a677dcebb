"""Settings for the closure tooling.

Configuration is loaded from:
- environment variables
- and a local `.env` file (if present)

Only the enclosing CLI reads settings; the core operations take explicit
arguments.
"""

from __future__ import annotations

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from .resolution import IdentifierDefaults


class ClosureSettings(BaseSettings):
    """Settings for closure computation and artifact output.

    Environment variables:
    - LOG_LEVEL                   (optional)
    - CLOSURE_STRICT_REFERENCES   (optional)
    - CLOSURE_DEFAULT_PROJECT     (optional)
    - CLOSURE_DEFAULT_DOMAIN      (optional)
    - CLOSURE_DEFAULT_VERSION     (optional)
    - CLOSURE_MAX_PAYLOAD_BYTES   (optional)
    - CLOSURE_OUTPUT_DIR          (optional)

    Every field is optional. Values in the environment take precedence over
    the `.env` file in the working directory.
    """

    log_level: str = Field(
        default="INFO",
        validation_alias="LOG_LEVEL",
        description="Root logging level",
    )

    strict_references: bool = Field(
        default=True,
        validation_alias="CLOSURE_STRICT_REFERENCES",
        description=(
            "Fail on references that match nothing in the universe. When disabled, such "
            "references are logged and left out of the closure."
        ),
    )

    default_project: str | None = Field(
        default=None,
        validation_alias="CLOSURE_DEFAULT_PROJECT",
        description="Project used for root identifiers that omit one",
    )
    default_domain: str | None = Field(
        default=None,
        validation_alias="CLOSURE_DEFAULT_DOMAIN",
        description="Domain used for root identifiers that omit one",
    )
    default_version: str | None = Field(
        default=None,
        validation_alias="CLOSURE_DEFAULT_VERSION",
        description="Version used for root identifiers that omit one",
    )

    max_payload_bytes: int | None = Field(
        default=None,
        gt=0,
        validation_alias="CLOSURE_MAX_PAYLOAD_BYTES",
        description="Reject artifacts whose encoded payload is larger than this",
    )

    output_dir: Path = Field(
        default=Path("artifacts"),
        validation_alias="CLOSURE_OUTPUT_DIR",
        description="Directory where serialized artifacts are written",
    )

    model_config = SettingsConfigDict(
        env_prefix="",
        env_file=".env",
        extra="ignore",
    )

    @property
    def identifier_defaults(self) -> IdentifierDefaults:
        return IdentifierDefaults(
            project=self.default_project,
            domain=self.default_domain,
            version=self.default_version,
        )
