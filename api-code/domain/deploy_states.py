from __future__ import annotations

from enum import Enum


class DeployStep(str, Enum):
    INIT = "init"
    VALIDATE_REPO = "validate_repo"
    STASH = "stash"
    FETCH = "fetch"
    CHECKOUT = "checkout"
    PULL = "pull"
    UPDATE_MARKER_FILE = "update_marker_file"
    STAGE = "stage"
    COMMIT = "commit"
    PUSH = "push"
    DONE = "done"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in {DeployStep.DONE, DeployStep.FAILED}


DEFAULT_STEP_SEQUENCE: tuple[DeployStep, ...] = (
    DeployStep.INIT,
    DeployStep.VALIDATE_REPO,
    DeployStep.STASH,
    DeployStep.FETCH,
    DeployStep.CHECKOUT,
    DeployStep.PULL,
    DeployStep.UPDATE_MARKER_FILE,
    DeployStep.STAGE,
    DeployStep.COMMIT,
    DeployStep.PUSH,
    DeployStep.DONE,
)

STEP_FAILURE_MESSAGES: dict[DeployStep, str] = {
    DeployStep.STASH: "Git stash failed",
    DeployStep.FETCH: "Git fetch failed",
    DeployStep.CHECKOUT: "Git checkout failed",
    DeployStep.PULL: "Git pull failed",
    DeployStep.STAGE: "Git add failed",
    DeployStep.COMMIT: "Git commit failed",
    DeployStep.PUSH: "Git push failed",
}


def is_valid_transition(current: DeployStep, new: DeployStep) -> bool:
    if current.is_terminal:
        return False
    if new == DeployStep.FAILED:
        return True
    sequence = list(DEFAULT_STEP_SEQUENCE)
    try:
        current_index = sequence.index(current)
        new_index = sequence.index(new)
    except ValueError:
        return False
    return new_index > current_index
