from __future__ import annotations

from typing import Any, Dict, List

from pydantic import BaseModel, Field, model_validator


COMMIT_TEMPLATE_PRESETS: Dict[str, str] = {
    "v1": "deploy: {env}, {type}",
    "v2": "deploy-v2: {env}, {type}",
}
DEFAULT_COMMIT_FORMAT = "v1"
DEFAULT_FILE_CONTENT_FORMAT = "default"


class ProjectConfig(BaseModel):
    """One entry of scripts.json.

    Missing optional keys are filled the same way on every load, so older
    config files keep working.
    """

    model_config = {"populate_by_name": True}

    name: str = Field(..., min_length=1)
    repo_path: str = Field(..., alias="repoPath", min_length=1)
    envs: List[str] = Field(default_factory=list)
    deploy_types: List[str] = Field(default_factory=list, alias="deployTypes")
    branch_filter: str = Field(default="", alias="branchFilter")
    commit_format: str = Field(default=DEFAULT_COMMIT_FORMAT, alias="commitFormat")
    commit_template: str = Field(default="", alias="commitTemplate")
    file_content_format: str = Field(
        default=DEFAULT_FILE_CONTENT_FORMAT, alias="fileContentFormat"
    )
    file_content_template: str = Field(default="", alias="fileContentTemplate")
    smart_append: bool = Field(default=False, alias="smartAppend")

    @model_validator(mode="before")
    @classmethod
    def _fill_blank_values(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        data = dict(data)
        for key in ("branchFilter", "branch_filter"):
            if key in data and data[key] is None:
                data[key] = ""
        for key in ("commitFormat", "commit_format"):
            if key in data and not data[key]:
                data[key] = DEFAULT_COMMIT_FORMAT
        for key in ("fileContentFormat", "file_content_format"):
            if key in data and not data[key]:
                data[key] = DEFAULT_FILE_CONTENT_FORMAT
        return data

    @model_validator(mode="after")
    def _resolve_templates(self) -> "ProjectConfig":
        preset = COMMIT_TEMPLATE_PRESETS.get(self.commit_format)
        if preset is not None:
            self.commit_template = preset
        elif not self.commit_template:
            self.commit_template = COMMIT_TEMPLATE_PRESETS[DEFAULT_COMMIT_FORMAT]
        if self.file_content_format == DEFAULT_FILE_CONTENT_FORMAT or not self.file_content_template:
            self.file_content_template = self.commit_template
        return self

    def to_document(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True)


class DeployConfig(BaseModel):
    projects: List[ProjectConfig] = Field(default_factory=list)

    def get_project(self, name: str) -> ProjectConfig | None:
        for project in self.projects:
            if project.name == name:
                return project
        return None

    def to_document(self) -> Dict[str, Any]:
        return {"projects": [project.to_document() for project in self.projects]}


DEFAULT_CONFIG_DOCUMENT: Dict[str, Any] = {
    "projects": [
        {
            "name": "Project Name",
            "repoPath": "Repository Path",
            "envs": ["dev"],
            "deployTypes": ["api", "webapp", "all"],
        }
    ]
}
