"""Evaluation snapshots: recorded legacy and baseline evaluations in YAML."""

from pathlib import Path
from typing import Annotated, Any

from pydantic import (
    BaseModel,
    BeforeValidator,
    ConfigDict,
    Field,
    ValidationError,
    field_validator,
)
from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError

from sdk_convert.core.evaluation import (
    BaselineProject,
    ConfiguredProject,
    EvaluatedItem,
    ProjectStyle,
    UnconfiguredProject,
    detect_project_style,
)
from sdk_convert.core.project import ConversionError, ProjectRoot


class SnapshotError(ConversionError):
    """Raised when an evaluation snapshot is missing or malformed."""


def _as_text(value: Any) -> str:
    """Render a YAML scalar the way MSBuild would spell it."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return str(value).lower()
    return str(value)


def _text_mapping(value: Any) -> Any:
    # YAML turns `true`, `4.0` and empty values into non-strings.
    if isinstance(value, dict):
        return {str(k): _as_text(v) for k, v in value.items()}
    return value


TextMapping = Annotated[dict[str, str], BeforeValidator(_text_mapping)]


class ItemSnapshot(BaseModel):
    """Data model for one evaluated item."""

    type: str
    include: str
    metadata: TextMapping = Field(default_factory=dict)

    model_config = ConfigDict(extra="forbid")


class EvaluationSnapshot(BaseModel):
    """Data model for the evaluated tables of one configuration."""

    properties: TextMapping = Field(default_factory=dict)
    items: list[ItemSnapshot] = Field(default_factory=list)

    model_config = ConfigDict(extra="forbid")

    def to_configured_project(self) -> ConfiguredProject:
        return ConfiguredProject(
            self.properties,
            [EvaluatedItem(i.type, i.include, dict(i.metadata)) for i in self.items],
        )


class ConfigurationSnapshot(BaseModel):
    """Data model pairing the legacy and baseline evaluation of a configuration."""

    legacy: EvaluationSnapshot = Field(default_factory=EvaluationSnapshot)
    baseline: EvaluationSnapshot = Field(default_factory=EvaluationSnapshot)

    model_config = ConfigDict(extra="forbid")


class ProjectSnapshot(BaseModel):
    """Data model for a whole evaluation snapshot file."""

    style: ProjectStyle | None = None
    global_properties: TextMapping = Field(default_factory=dict)
    configurations: dict[str, ConfigurationSnapshot]

    model_config = ConfigDict(extra="forbid")

    @field_validator("configurations", mode="before")
    @classmethod
    def stringify_keys(cls, value: Any) -> Any:
        if isinstance(value, dict):
            return {"" if k is None else str(k): v for k, v in value.items()}
        return value

    def legacy_project(self) -> UnconfiguredProject:
        return UnconfiguredProject(
            {
                name: config.legacy.to_configured_project()
                for name, config in self.configurations.items()
            }
        )

    def baseline_project(self, root: ProjectRoot | None = None) -> BaselineProject:
        """Build the baseline, detecting the style from `root` when unset.

        Args:
            root (ProjectRoot | None): Legacy tree used for style detection.

        Returns:
            BaselineProject: Baseline evaluations with overrides and style.
        """
        style = self.style
        if style is None:
            style = detect_project_style(root) if root is not None else ProjectStyle.DEFAULT
        return BaselineProject(
            UnconfiguredProject(
                {
                    name: config.baseline.to_configured_project()
                    for name, config in self.configurations.items()
                }
            ),
            global_properties=self.global_properties,
            project_style=style,
        )


def load_snapshot(path: Path | str) -> ProjectSnapshot:
    """Load an evaluation snapshot from a YAML file.

    Args:
        path (Path | str): Path to the snapshot file.

    Returns:
        ProjectSnapshot: The validated snapshot.

    Raises:
        SnapshotError: If the file is missing, not YAML, or fails validation.
    """
    path = Path(path)
    if not path.exists():
        raise SnapshotError(f"Snapshot file not found: {path}")
    try:
        yaml = YAML(typ="safe")
        with path.open(encoding="utf-8") as f:
            payload = yaml.load(f) or {}
        return ProjectSnapshot.model_validate(payload)
    except (YAMLError, ValidationError) as exc:
        raise SnapshotError(f"Failed to load snapshot '{path}': {exc}") from exc


class SnapshotEvaluator:
    """`Evaluator` answering from the legacy side of a snapshot."""

    def __init__(self, snapshot: ProjectSnapshot) -> None:
        self._project = snapshot.legacy_project()

    def evaluate(self, root: ProjectRoot, configuration: str) -> ConfiguredProject:
        """Return the recorded evaluation for `configuration`.

        Args:
            root (ProjectRoot): Project tree (unused; the snapshot is authoritative).
            configuration (str): Configuration identifier.

        Returns:
            ConfiguredProject: Recorded evaluation.

        Raises:
            SnapshotError: If the snapshot does not record the configuration.
        """
        del root
        configured = self._project.get(configuration)
        if configured is None:
            raise SnapshotError(f"Snapshot has no configuration {configuration!r}")
        return configured
