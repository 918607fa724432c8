"""
Generator configuration for fieldgen.

The override table is authored in a `generator.yaml` document and validated
with Pydantic. Every directive is optional; an absent directive means "keep
the heuristic behavior".

    resources:
      Function:
        fields:
          CodeLocation:
            is_read_only: true
            from:
              operation: GetFunction
              path: Code.Location
        print:
          order_by: index
"""

import logging
from pathlib import Path
from typing import Literal, Optional

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .errors import ConfigError

logger = logging.getLogger(__name__)


CONFIG_FILENAME = "generator.yaml"


class _Directive(BaseModel):
    model_config = ConfigDict(extra="forbid", populate_by_name=True, frozen=True)


class SourceFieldConfig(_Directive):
    """Take the field's type from a member of a different operation."""
    operation: str
    path: str

    @field_validator('path')
    @classmethod
    def path_segments_not_empty(cls, v):
        if not v or any(not segment for segment in v.split(".")):
            raise ValueError(f"path must be dot-separated member names, got {v!r}")
        return v

    @property
    def segments(self) -> list[str]:
        return self.path.split(".")


class CompareFieldConfig(_Directive):
    """How two values of the field are compared."""
    is_ignored: bool = False
    nil_equals_zero_value: bool = False


class PrintFieldConfig(_Directive):
    """Listing column for the field. Presence alone adds the column."""
    name: Optional[str] = None
    priority: int = 0  # 0 = standard view, >0 = wide view only
    index: Optional[int] = None

    @field_validator('priority')
    @classmethod
    def priority_not_negative(cls, v):
        if v < 0:
            raise ValueError('priority must be >= 0')
        return v


class LateInitializeConfig(_Directive):
    """Backoff bounds, in seconds, for late-initialization retries."""
    min_backoff_seconds: int = 0
    max_backoff_seconds: int


class FieldConfig(_Directive):
    """
    Override directives for one resource field.

    Boolean directives are tri-state: None leaves the heuristic in charge,
    True/False is an explicit decision.
    """
    is_attribute: Optional[bool] = None
    is_read_only: Optional[bool] = None
    is_required: Optional[bool] = None
    is_primary_key: Optional[bool] = None
    is_owner_account_id: Optional[bool] = None
    is_arn: Optional[bool] = None
    is_secret: Optional[bool] = None
    is_immutable: Optional[bool] = None
    is_ignored: Optional[bool] = None
    source: Optional[SourceFieldConfig] = Field(default=None, alias="from")
    compare: Optional[CompareFieldConfig] = None
    print: Optional[PrintFieldConfig] = None
    late_initialize: Optional[LateInitializeConfig] = None


class ResourcePrintConfig(_Directive):
    """Resource-level listing options."""
    order_by: Optional[Literal["index"]] = None
    add_age_column: bool = True


class ResourceConfig(_Directive):
    """All directives for one resource."""
    fields: dict[str, FieldConfig] = Field(default_factory=dict)
    print: ResourcePrintConfig = Field(default_factory=ResourcePrintConfig)

    def field(self, name: str) -> Optional[FieldConfig]:
        return self.fields.get(name)


class GeneratorConfig(_Directive):
    """Complete generator configuration."""
    resources: dict[str, ResourceConfig] = Field(default_factory=dict)

    def resource(self, name: str) -> ResourceConfig:
        """Get a resource's config, or an empty one if none is authored."""
        return self.resources.get(name) or ResourceConfig()


def find_config_path(working_dir: Optional[Path] = None) -> Optional[Path]:
    """
    Find generator.yaml in the working directory.

    Args:
        working_dir: Directory to check. Defaults to cwd.

    Returns:
        Path to generator.yaml, or None if there isn't one.
    """
    if working_dir is None:
        working_dir = Path.cwd()
    else:
        working_dir = Path(working_dir)

    config_path = working_dir / CONFIG_FILENAME
    if config_path.exists():
        return config_path
    return None


def parse_generator_config(data: Optional[dict]) -> GeneratorConfig:
    """
    Validate a parsed generator document.

    Raises:
        ConfigError: If the document does not match the schema
    """
    if data is None:
        return GeneratorConfig()
    if not isinstance(data, dict):
        raise ConfigError("Generator config must be a mapping at top level")

    try:
        return GeneratorConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"Invalid generator config: {e}")


def load_generator_config(path: Path) -> GeneratorConfig:
    """
    Load and validate generator.yaml.

    Raises:
        ConfigError: If the file is missing, is not valid YAML, or fails
            schema validation
    """
    path = Path(path)
    if not path.exists():
        raise ConfigError(f"Generator config not found: {path}")

    try:
        data = yaml.safe_load(path.read_text())
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}")

    config = parse_generator_config(data)
    logger.debug(f"Loaded generator config from {path}: {len(config.resources)} resource(s)")
    return config
