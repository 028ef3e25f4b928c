from __future__ import annotations

import sys
import tempfile
import unittest
from datetime import date
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent))

from support import GIT_AVAILABLE, ScriptedRunner, git, make_remote_and_clone  # noqa: E402
from domain import DeployStep  # noqa: E402
from models import DeployRequest  # noqa: E402
from services import DeployLogStore, DeploymentGate, DeployService  # noqa: E402
from settings import Settings  # noqa: E402


def build_request(repo_path: Path, **overrides) -> DeployRequest:
    values = {
        "project_name": "api-project",
        "repo_path": str(repo_path),
        "branch": "main",
        "environment": "prod",
        "deploy_type": "api",
        "dry_run": False,
        "commit_message_template": "deploy: {env}, {type}",
        "file_content_template": "deploy: {env}, {type}",
        "smart_append": False,
    }
    values.update(overrides)
    return DeployRequest(**values)


class DeployServiceTest(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.addCleanup(self._tmp.cleanup)
        root = Path(self._tmp.name)
        self.repo = root / "repo"
        self.repo.mkdir()
        self.marker = self.repo / "CICD.txt"
        self.marker.write_text("deploy: dev, web\n", encoding="utf-8")
        self.settings = Settings.model_validate({"COMMIT_DEPLOY_DATA_DIR": str(root / "data")})
        self.log_store = DeployLogStore(root / "logs")
        self.gate = DeploymentGate()
        self.runner = ScriptedRunner()
        self.service = DeployService(
            self.settings,
            runner=self.runner,
            log_store=self.log_store,
            gate=self.gate,
            today=lambda: date(2024, 3, 7),
        )

    def test_successful_deploy_runs_every_step_in_order(self) -> None:
        result = self.service.deploy(build_request(self.repo))

        self.assertTrue(result.success, result.error)
        self.assertIsNone(result.error)
        self.assertEqual(result.final_step, DeployStep.DONE)
        self.assertEqual(
            self.runner.calls,
            [
                ["stash"],
                ["fetch"],
                ["rev-parse", "--abbrev-ref", "HEAD"],
                ["pull"],
                ["add", "CICD.txt"],
                ["commit", "-m", "deploy: prod, api"],
                ["push"],
            ],
        )
        self.assertEqual(self.marker.read_text(encoding="utf-8"), "deploy: dev, web\ndeploy: prod, api\n")
        self.assertTrue(any("Current branch: main" in line for line in result.logs))
        self.assertTrue(any("SUCCESS: Deploy completed!" in line for line in result.logs))

    def test_checkout_runs_when_branch_differs(self) -> None:
        self.runner.current_branch = "develop"
        result = self.service.deploy(build_request(self.repo))
        self.assertTrue(result.success)
        self.assertIn(["checkout", "main"], self.runner.calls)

    def test_branch_query_failure_fails_checkout_without_checking_out(self) -> None:
        self.runner.fail_on = "rev-parse"
        result = self.service.deploy(build_request(self.repo))

        self.assertFalse(result.success)
        self.assertEqual(result.error, "Git checkout failed")
        self.assertNotIn("checkout", self.runner.subcommands())
        self.assertNotIn("pull", self.runner.subcommands())
        self.assertTrue(any(line.endswith("$ git rev-parse --abbrev-ref HEAD") for line in result.logs))
        self.assertTrue(any("fatal: rev-parse exploded" in line for line in result.logs))

    def test_branch_query_is_logged(self) -> None:
        result = self.service.deploy(build_request(self.repo))
        commands = [line.split("] ", 1)[1] for line in result.logs if "] $ " in line]
        self.assertEqual(commands[2], "$ git rev-parse --abbrev-ref HEAD")

    def test_dry_run_never_pushes(self) -> None:
        result = self.service.deploy(build_request(self.repo, dry_run=True))
        self.assertTrue(result.success)
        self.assertNotIn("push", self.runner.subcommands())
        self.assertTrue(any("DRY-RUN: Skipping push step" in line for line in result.logs))
        push = [outcome for outcome in result.steps if outcome.step == DeployStep.PUSH]
        self.assertTrue(push[0].skipped)

    def test_failure_before_commit_aborts_remaining_steps(self) -> None:
        self.runner.fail_on = "pull"
        result = self.service.deploy(build_request(self.repo))

        self.assertFalse(result.success)
        self.assertEqual(result.error, "Git pull failed")
        self.assertEqual(result.final_step, DeployStep.FAILED)
        self.assertNotIn("commit", self.runner.subcommands())
        self.assertNotIn("push", self.runner.subcommands())
        self.assertTrue(any(line.endswith("$ git pull") for line in result.logs))
        self.assertTrue(any("fatal: pull exploded" in line for line in result.logs))
        self.assertTrue(any("Deploy failed: Git pull failed" in line for line in result.logs))
        self.assertEqual(self.marker.read_text(encoding="utf-8"), "deploy: dev, web\n")

    def test_each_git_step_reports_its_own_message(self) -> None:
        expected = {
            "stash": "Git stash failed",
            "fetch": "Git fetch failed",
            "add": "Git add failed",
            "commit": "Git commit failed",
            "push": "Git push failed",
        }
        for subcommand, message in expected.items():
            with self.subTest(subcommand=subcommand):
                self.marker.write_text("", encoding="utf-8")
                self.runner.calls.clear()
                self.runner.fail_on = subcommand
                result = self.service.deploy(build_request(self.repo))
                self.assertFalse(result.success)
                self.assertEqual(result.error, message)
                self.assertEqual(self.runner.subcommands()[-1], subcommand)

    def test_missing_repo_path_runs_no_commands(self) -> None:
        missing = self.repo / "nope"
        result = self.service.deploy(build_request(missing))
        self.assertFalse(result.success)
        self.assertEqual(result.error, f"Repository path does not exist: {missing}")
        self.assertEqual(self.runner.calls, [])

    def test_missing_marker_file_stops_before_staging(self) -> None:
        self.marker.unlink()
        result = self.service.deploy(build_request(self.repo))
        self.assertFalse(result.success)
        self.assertEqual(result.error, "CICD.txt does not exist in repo")
        self.assertNotIn("add", self.runner.subcommands())
        self.assertFalse(self.marker.exists())

    def test_unexpected_exception_becomes_result(self) -> None:
        self.runner.raise_on = "fetch"
        result = self.service.deploy(build_request(self.repo))
        self.assertFalse(result.success)
        self.assertEqual(result.error, "unexpected fetch crash")
        self.assertEqual(result.logs[-1][-2:], "] ")
        self.assertEqual(self.gate.list_active(), set())

    def test_blank_separator_is_always_last(self) -> None:
        ok = self.service.deploy(build_request(self.repo))
        self.runner.fail_on = "stash"
        failed = self.service.deploy(build_request(self.repo))
        for result in (ok, failed):
            self.assertRegex(result.logs[-1], r"^\[[^\]]+Z\] $")

    def test_smart_append_and_all_type(self) -> None:
        self.marker.write_text("deploy: prod\n", encoding="utf-8")
        request = build_request(self.repo, deploy_type="all", smart_append=True)

        first = self.service.deploy(request)
        second = self.service.deploy(request)

        self.assertTrue(first.success and second.success)
        self.assertEqual(self.marker.read_text(encoding="utf-8"), "deploy: prod++\n")
        self.assertIn(["commit", "-m", "deploy: prod"], self.runner.calls)
        self.assertTrue(any("Smart append" in line and "'deploy: prod+'" in line for line in first.logs))

    def test_file_content_template_dates(self) -> None:
        request = build_request(self.repo, file_content_template="{date:d/m/y} {env} {type}")
        self.service.deploy(request)
        self.assertEqual(
            self.marker.read_text(encoding="utf-8"),
            "deploy: dev, web\n7/3/2024 prod api\n",
        )

    def test_gate_rejects_concurrent_caller_and_releases_after_run(self) -> None:
        seen: list[set[str]] = []
        self.gate.subscribe(seen.append)
        self.gate.begin("api-project", "other-window")

        rejected = self.service.deploy(build_request(self.repo), caller_id="this-window")
        self.assertFalse(rejected.success)
        self.assertIn("already being deployed", rejected.error or "")
        self.assertEqual(self.runner.calls, [])

        self.gate.end("api-project")
        accepted = self.service.deploy(build_request(self.repo), caller_id="this-window")
        self.assertTrue(accepted.success)
        self.assertEqual(self.gate.list_active(), set())
        self.assertEqual(seen, [{"api-project"}, set(), {"api-project"}, set()])

    def test_transcript_is_mirrored_to_daily_log_file(self) -> None:
        result = self.service.deploy(build_request(self.repo))
        files = self.log_store.list_log_files()
        self.assertEqual(len(files), 1)
        self.assertRegex(files[0], r"^deploy-\d{4}-\d{2}-\d{2}\.log$")
        content = self.log_store.read_log_file(files[0])
        self.assertEqual(content, "\n".join(result.logs) + "\n")

    def test_list_branches_parses_remote_listing(self) -> None:
        self.runner.branch_output = "\n".join(
            [
                "  origin/HEAD -> origin/main",
                "  origin/main",
                "  origin/release/1.2",
                "  origin/feature/Login",
                "",
            ]
        )
        self.assertEqual(
            self.service.list_branches(str(self.repo)),
            ["feature/Login", "main", "release/1.2"],
        )
        self.assertEqual(self.service.list_branches(str(self.repo), "LOG"), ["feature/Login"])
        self.assertEqual(self.runner.calls[0], ["fetch", "--prune"])

    def test_list_branches_returns_empty_on_failure(self) -> None:
        self.runner.fail_on = "fetch"
        self.assertEqual(self.service.list_branches(str(self.repo)), [])


@unittest.skipUnless(GIT_AVAILABLE, "git executable not available")
class DeployServiceGitTest(unittest.TestCase):
    """Runs the pipeline against a real clone and bare remote."""

    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.addCleanup(self._tmp.cleanup)
        root = Path(self._tmp.name)
        self.remote, self.work = make_remote_and_clone(root, "deploy: prod, api\n")
        settings = Settings.model_validate({"COMMIT_DEPLOY_DATA_DIR": str(root / "data")})
        self.service = DeployService(settings, log_store=DeployLogStore(root / "logs"))

    def test_deploy_commits_and_pushes(self) -> None:
        result = self.service.deploy(build_request(self.work, smart_append=True))

        self.assertTrue(result.success, "\n".join(result.logs))
        self.assertEqual(
            (self.work / "CICD.txt").read_text(encoding="utf-8"), "deploy: prod, api+\n"
        )
        self.assertEqual(
            git("log", "-1", "--format=%s", "main", cwd=self.remote), "deploy: prod, api"
        )

    def test_dry_run_commits_locally_only(self) -> None:
        remote_head = git("rev-parse", "main", cwd=self.remote)
        result = self.service.deploy(build_request(self.work, dry_run=True, environment="stage"))

        self.assertTrue(result.success, "\n".join(result.logs))
        self.assertEqual(git("rev-parse", "main", cwd=self.remote), remote_head)
        self.assertEqual(git("log", "-1", "--format=%s", cwd=self.work), "deploy: stage, api")
        self.assertFalse(any(line.endswith("$ git push") for line in result.logs))

    def test_checkout_failure_for_unknown_branch(self) -> None:
        result = self.service.deploy(build_request(self.work, branch="does-not-exist"))
        self.assertFalse(result.success)
        self.assertEqual(result.error, "Git checkout failed")
        self.assertTrue(any("$ git checkout does-not-exist" in line for line in result.logs))
        self.assertEqual(git("log", "-1", "--format=%s", cwd=self.work), "init")


if __name__ == "__main__":
    unittest.main()
