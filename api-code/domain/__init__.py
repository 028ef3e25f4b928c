from .deploy_states import (
    DEFAULT_STEP_SEQUENCE,
    STEP_FAILURE_MESSAGES,
    DeployStep,
    is_valid_transition,
)

__all__ = [
    "DEFAULT_STEP_SEQUENCE",
    "STEP_FAILURE_MESSAGES",
    "DeployStep",
    "is_valid_transition",
]
