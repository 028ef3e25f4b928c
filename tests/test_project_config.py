from __future__ import annotations

import json
import sys
import tempfile
import unittest
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent))

import support  # noqa: E402,F401
from models import DEFAULT_CONFIG_DOCUMENT, DeployConfig, ProjectConfig  # noqa: E402
from repositories import (  # noqa: E402
    InMemoryProjectConfigRepository,
    JsonProjectConfigRepository,
    ProjectNotFoundError,
)


class ProjectConfigModelTest(unittest.TestCase):
    def test_defaults_are_filled_for_legacy_entries(self) -> None:
        project = ProjectConfig.model_validate(
            {"name": "api", "repoPath": "/srv/api", "envs": ["dev"], "deployTypes": ["api"]}
        )
        self.assertEqual(project.branch_filter, "")
        self.assertEqual(project.commit_format, "v1")
        self.assertEqual(project.commit_template, "deploy: {env}, {type}")
        self.assertEqual(project.file_content_format, "default")
        self.assertEqual(project.file_content_template, "deploy: {env}, {type}")
        self.assertFalse(project.smart_append)

    def test_v2_preset_overrides_stored_template(self) -> None:
        project = ProjectConfig.model_validate(
            {
                "name": "api",
                "repoPath": "/srv/api",
                "commitFormat": "v2",
                "commitTemplate": "stale",
            }
        )
        self.assertEqual(project.commit_template, "deploy-v2: {env}, {type}")
        self.assertEqual(project.file_content_template, "deploy-v2: {env}, {type}")

    def test_custom_templates_are_kept(self) -> None:
        project = ProjectConfig.model_validate(
            {
                "name": "api",
                "repoPath": "/srv/api",
                "commitFormat": "custom",
                "commitTemplate": "release {env}",
                "fileContentFormat": "custom",
                "fileContentTemplate": "{date:y-m-d} {env}",
                "smartAppend": True,
            }
        )
        self.assertEqual(project.commit_template, "release {env}")
        self.assertEqual(project.file_content_template, "{date:y-m-d} {env}")
        self.assertTrue(project.smart_append)

    def test_document_uses_camel_case_keys(self) -> None:
        document = ProjectConfig(name="api", repo_path="/srv/api").to_document()
        self.assertIn("repoPath", document)
        self.assertIn("fileContentTemplate", document)
        self.assertNotIn("repo_path", document)


class JsonProjectConfigRepositoryTest(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.addCleanup(self._tmp.cleanup)
        self.root = Path(self._tmp.name)
        self.changes = 0

    def _on_change(self) -> None:
        self.changes += 1

    def test_missing_file_is_created_from_default(self) -> None:
        path = self.root / "nested" / "scripts.json"
        repository = JsonProjectConfigRepository(path)
        config = repository.load()
        self.assertTrue(path.exists())
        self.assertEqual(json.loads(path.read_text(encoding="utf-8")), DEFAULT_CONFIG_DOCUMENT)
        self.assertEqual(config.projects[0].name, "Project Name")

    def test_missing_file_is_copied_from_sample(self) -> None:
        sample = self.root / "sample.json"
        sample.write_text(
            json.dumps({"projects": [{"name": "sample", "repoPath": "/srv/sample"}]}),
            encoding="utf-8",
        )
        repository = JsonProjectConfigRepository(self.root / "scripts.json", sample_path=sample)
        self.assertEqual(repository.get_project("sample").repo_path, "/srv/sample")

    def test_save_round_trips_and_notifies(self) -> None:
        repository = JsonProjectConfigRepository(self.root / "scripts.json", on_change=self._on_change)
        config = DeployConfig(
            projects=[ProjectConfig(name="api", repo_path="/srv/api", smart_append=True)]
        )
        repository.save(config)
        self.assertEqual(self.changes, 1)
        loaded = repository.get_project("api")
        self.assertTrue(loaded.smart_append)
        with self.assertRaises(ProjectNotFoundError):
            repository.get_project("web")

    def test_invalid_root_is_rejected(self) -> None:
        path = self.root / "scripts.json"
        path.write_text("[]", encoding="utf-8")
        with self.assertRaises(ValueError):
            JsonProjectConfigRepository(path).load()


class InMemoryProjectConfigRepositoryTest(unittest.TestCase):
    def test_load_returns_copies(self) -> None:
        repository = InMemoryProjectConfigRepository(
            DeployConfig(projects=[ProjectConfig(name="api", repo_path="/srv/api")])
        )
        loaded = repository.load()
        loaded.projects.clear()
        self.assertEqual(repository.get_project("api").name, "api")


if __name__ == "__main__":
    unittest.main()
