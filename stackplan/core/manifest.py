from __future__ import annotations

from typing import Any

from pydantic import field_validator

from ._yaml_loader import YamlLoader
from .constants import ENV_FILE, MANIFEST_FILE
from .data_model import DataModel

__all__ = [
    "DependencyConfig",
    "DependencyRef",
    "Manifest",
    "MANIFEST_FILE",
    "ManifestMetadata",
    "ResourceConfig",
]


class ManifestMetadata(DataModel):
    name: str | None = None
    description: str | None = None
    version: str | None = None


class DependencyRef(DataModel):
    target: str
    strength: str = "hard"


class DependencyConfig(DataModel):
    source: str
    target: str
    strength: str = "hard"


class ResourceConfig(DataModel):
    kind: str
    attributes: dict[str, Any] = dict()
    depends: list[DependencyRef] = list()

    @field_validator("depends", mode="before")
    @classmethod
    def _expand_depends(cls, value: Any) -> Any:
        if isinstance(value, list):
            return [
                {"target": item} if isinstance(item, str) else item
                for item in value
            ]
        return value


class Manifest(DataModel):
    metadata: ManifestMetadata = ManifestMetadata()
    variables: dict[str, Any] = dict()
    env_file: str | None = ENV_FILE
    resources: dict[str, ResourceConfig] = dict()
    dependencies: list[DependencyConfig] = list()

    @staticmethod
    def parse(path: str) -> Manifest:
        obj = YamlLoader.load(path=path)
        manifest = Manifest.from_dict(obj)
        return manifest

    def declared_dependencies(self) -> list[DependencyConfig]:
        """Dependencies declared on resources followed by the list."""
        dependencies = [
            DependencyConfig(
                source=id, target=ref.target, strength=ref.strength
            )
            for id, resource in self.resources.items()
            for ref in resource.depends
        ]
        dependencies.extend(self.dependencies)
        return dependencies
