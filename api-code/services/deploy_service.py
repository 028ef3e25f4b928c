from __future__ import annotations

import logging
from datetime import date
from pathlib import Path
from typing import Callable, List, Optional, Sequence, Tuple

from domain import STEP_FAILURE_MESSAGES, DeployStep, is_valid_transition
from models import DeployRequest, DeployResult, MergeAction, StepOutcome
from services.command_runner import CommandRunner
from services.deploy_log import DeployLog, DeployLogStore
from services.deployment_gate import DeploymentGate
from services.errors import DeployError, MarkerFileMissingError, RepositoryNotFoundError
from services.marker_file import DEFAULT_MARKER_FILE, update_marker_file
from services.templates import TemplateContext, expand_commit_message, expand_file_content
from settings import Settings


logger = logging.getLogger("commit-deploy.deploy")

DEFAULT_CALLER_ID = "local"

StepHandler = Callable[[DeployRequest, TemplateContext, DeployLog], StepOutcome]


class DeployService:
    """Runs the stash → pull → marker update → commit → push pipeline for one project."""

    def __init__(
        self,
        settings: Settings,
        *,
        runner: Optional[CommandRunner] = None,
        log_store: Optional[DeployLogStore] = None,
        gate: Optional[DeploymentGate] = None,
        today: Callable[[], date] = date.today,
    ):
        self.settings = settings
        self.git = settings.git_binary
        self.marker_file_name = settings.marker_file_name or DEFAULT_MARKER_FILE
        self.runner = runner or CommandRunner(timeout=settings.command_timeout)
        self.log_store = log_store if log_store is not None else DeployLogStore(settings.resolved_log_dir)
        self.gate = gate or DeploymentGate()
        self._today = today
        logger.info(
            "DeployService initialized (git=%s, marker_file=%s, log_dir=%s)",
            self.git,
            self.marker_file_name,
            self.log_store.log_dir,
        )

    def deploy(self, request: DeployRequest, *, caller_id: str = DEFAULT_CALLER_ID) -> DeployResult:
        """Run one deploy while holding the project's slot in the gate.

        Never raises; every failure is reported through ``DeployResult.error``.
        """
        if not self.gate.try_begin(request.project_name, caller_id):
            error = (
                f"Project {request.project_name} is already being deployed in another session"
            )
            logger.warning("Deploy rejected project=%s caller=%s", request.project_name, caller_id)
            return DeployResult(success=False, error=error, final_step=DeployStep.INIT)
        try:
            return self.run_pipeline(request)
        finally:
            self.gate.end(request.project_name)

    def run_pipeline(self, request: DeployRequest) -> DeployResult:
        logs: List[str] = []
        log = self.log_store.open_transcript(logs)
        outcomes: List[StepOutcome] = []
        context = TemplateContext(
            environment=request.environment,
            deploy_type=request.deploy_type,
            today=self._today(),
        )
        logger.info(
            "Starting deploy project=%s branch=%s env=%s type=%s dry_run=%s",
            request.project_name,
            request.branch,
            request.environment,
            request.deploy_type,
            request.dry_run,
        )

        error: Optional[str] = None
        final_step = DeployStep.INIT
        try:
            log(f"🚀 Starting deploy for {request.project_name} ({request.environment}) [{request.deploy_type}]")
            log(f"Repo path: {request.repo_path}")
            log(f"Branch: {request.branch}")
            if request.dry_run:
                log("⚠️  Running in DRY-RUN mode (will not push to remote)")

            final_step, error = self._fold(self._steps(), request, context, log, outcomes)
            if error is None:
                if request.dry_run:
                    log("✅ SUCCESS: Dry-run completed (no push)")
                else:
                    log("✅ SUCCESS: Deploy completed!")
                logger.info("Deploy succeeded project=%s", request.project_name)
            else:
                log(f"❌ Deploy failed: {error}")
                logger.warning("Deploy failed project=%s error=%s", request.project_name, error)
        except Exception as exc:  # pylint: disable=broad-except
            logger.exception("Deploy crashed project=%s error=%s", request.project_name, exc)
            error = str(exc) or exc.__class__.__name__
            final_step = DeployStep.FAILED
            log(f"❌ Deploy failed: {error}")
        finally:
            log("")

        return DeployResult(
            success=error is None,
            logs=logs,
            error=error,
            steps=outcomes,
            final_step=final_step,
        )

    def _steps(self) -> Sequence[Tuple[DeployStep, StepHandler]]:
        return (
            (DeployStep.VALIDATE_REPO, self._validate_repo),
            (DeployStep.STASH, self._simple_git_step(DeployStep.STASH, ["stash"])),
            (DeployStep.FETCH, self._simple_git_step(DeployStep.FETCH, ["fetch"])),
            (DeployStep.CHECKOUT, self._checkout),
            (DeployStep.PULL, self._simple_git_step(DeployStep.PULL, ["pull"])),
            (DeployStep.UPDATE_MARKER_FILE, self._update_marker_file),
            (DeployStep.STAGE, self._simple_git_step(DeployStep.STAGE, ["add", self.marker_file_name])),
            (DeployStep.COMMIT, self._commit),
            (DeployStep.PUSH, self._push),
        )

    @staticmethod
    def _fold(
        steps: Sequence[Tuple[DeployStep, StepHandler]],
        request: DeployRequest,
        context: TemplateContext,
        log: DeployLog,
        outcomes: List[StepOutcome],
    ) -> Tuple[DeployStep, Optional[str]]:
        current = DeployStep.INIT
        for step, handler in steps:
            if not is_valid_transition(current, step):
                raise RuntimeError(f"invalid step transition from {current.value} to {step.value}")
            outcome = handler(request, context, log)
            outcomes.append(outcome)
            current = step
            if not outcome.ok:
                return DeployStep.FAILED, outcome.message or STEP_FAILURE_MESSAGES.get(step, step.value)
        return DeployStep.DONE, None

    def _git(self, *args: str) -> List[str]:
        return [self.git, *args]

    def _run_git(self, step: DeployStep, args: Sequence[str], repo_path: str, log: DeployLog) -> StepOutcome:
        result = self.runner.run(self._git(*args), repo_path, log)
        if result.ok:
            return StepOutcome(step=step, ok=True)
        return StepOutcome(step=step, ok=False, message=STEP_FAILURE_MESSAGES[step])

    def _simple_git_step(self, step: DeployStep, args: Sequence[str]) -> StepHandler:
        def handler(request: DeployRequest, _context: TemplateContext, log: DeployLog) -> StepOutcome:
            return self._run_git(step, args, request.repo_path, log)

        return handler

    def _validate_repo(self, request: DeployRequest, _context: TemplateContext, _log: DeployLog) -> StepOutcome:
        if not Path(request.repo_path).is_dir():
            return StepOutcome(
                step=DeployStep.VALIDATE_REPO,
                ok=False,
                message=str(RepositoryNotFoundError(request.repo_path)),
            )
        return StepOutcome(step=DeployStep.VALIDATE_REPO, ok=True)

    def _checkout(self, request: DeployRequest, _context: TemplateContext, log: DeployLog) -> StepOutcome:
        query = self.runner.run(self._git("rev-parse", "--abbrev-ref", "HEAD"), request.repo_path, log)
        if not query.ok:
            return StepOutcome(
                step=DeployStep.CHECKOUT,
                ok=False,
                message=STEP_FAILURE_MESSAGES[DeployStep.CHECKOUT],
            )
        current = query.output
        if current == request.branch:
            log(f"Current branch: {current}")
            return StepOutcome(step=DeployStep.CHECKOUT, ok=True, skipped=True)
        return self._run_git(DeployStep.CHECKOUT, ["checkout", request.branch], request.repo_path, log)

    def _update_marker_file(self, request: DeployRequest, context: TemplateContext, log: DeployLog) -> StepOutcome:
        record = expand_file_content(request.file_content_template, context)
        try:
            outcome = update_marker_file(
                request.repo_path,
                record,
                request.smart_append,
                file_name=self.marker_file_name,
            )
        except MarkerFileMissingError as exc:
            return StepOutcome(step=DeployStep.UPDATE_MARKER_FILE, ok=False, message=str(exc))
        except OSError as exc:
            return StepOutcome(
                step=DeployStep.UPDATE_MARKER_FILE,
                ok=False,
                message=f"Unable to update {self.marker_file_name}: {exc}",
            )

        if outcome.action == MergeAction.INCREMENTED:
            log(f"✓ Smart append in {self.marker_file_name}: '{outcome.before}' -> '{outcome.after}'")
        elif outcome.action == MergeAction.INITIALIZED:
            log(f"✓ Initialized {self.marker_file_name} with: {record}")
        else:
            log(f"✓ Added to {self.marker_file_name}: {record}")
        return StepOutcome(step=DeployStep.UPDATE_MARKER_FILE, ok=True, message=outcome.action.value)

    def _commit(self, request: DeployRequest, context: TemplateContext, log: DeployLog) -> StepOutcome:
        message = expand_commit_message(request.commit_message_template, context)
        return self._run_git(DeployStep.COMMIT, ["commit", "-m", message], request.repo_path, log)

    def _push(self, request: DeployRequest, _context: TemplateContext, log: DeployLog) -> StepOutcome:
        if request.dry_run:
            log("DRY-RUN: Skipping push step")
            return StepOutcome(step=DeployStep.PUSH, ok=True, skipped=True)
        return self._run_git(DeployStep.PUSH, ["push"], request.repo_path, log)

    def list_branches(self, repo_path: str, branch_filter: str = "") -> List[str]:
        """Remote branch names without the ``origin/`` prefix, sorted and filtered."""
        try:
            self.runner.execute(self._git("fetch", "--prune"), repo_path)
            output = self.runner.execute(self._git("branch", "-r"), repo_path)
        except DeployError as exc:
            logger.warning("Unable to list branches for %s: %s", repo_path, exc)
            return []

        branches = sorted(
            {
                line.strip().replace("origin/", "", 1)
                for line in output.splitlines()
                if line.strip() and "->" not in line
            }
        )
        needle = (branch_filter or "").strip().lower()
        if needle:
            branches = [branch for branch in branches if needle in branch.lower()]
        return branches
