from .deploy import (
    CommandResult,
    DeployRequest,
    DeployResult,
    MergeAction,
    MergeOutcome,
    StepOutcome,
    utc_now,
)
from .project import (
    COMMIT_TEMPLATE_PRESETS,
    DEFAULT_CONFIG_DOCUMENT,
    DeployConfig,
    ProjectConfig,
)

__all__ = [
    "COMMIT_TEMPLATE_PRESETS",
    "CommandResult",
    "DEFAULT_CONFIG_DOCUMENT",
    "DeployConfig",
    "DeployRequest",
    "DeployResult",
    "MergeAction",
    "MergeOutcome",
    "ProjectConfig",
    "StepOutcome",
    "utc_now",
]
