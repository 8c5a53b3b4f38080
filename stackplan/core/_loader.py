from __future__ import annotations

import os
import re
from enum import Enum
from typing import Any

from dotenv import dotenv_values
from pydantic import ValidationError

from stackplan.stack import Stack

from ._log_helper import warn
from .exceptions import LoadError
from .manifest import MANIFEST_FILE, Manifest, ManifestMetadata

REF_PATTERN = r"^\$\{([^}]+)\}$"
EMBEDDED_REF_PATTERN = r"\$\{([^}]+)\}"


class Loader:
    """Builds a finalized stack from a manifest file.

    `${env.NAME}`, `${variables.NAME}` and `${metadata.NAME}` references
    in attribute values are substituted here. Any other `${...}`
    reference is a resource reference and is left for resolution.
    """

    path: str
    manifest_path: str

    manifest: Manifest
    env: dict[str, str | None]

    def __init__(
        self,
        path: str = ".",
        manifest: str = MANIFEST_FILE,
    ):
        self.path = path
        self.manifest_path = os.path.join(
            path,
            manifest,
        )
        try:
            self.manifest = Manifest.parse(path=self.manifest_path)
        except (OSError, ValidationError) as e:
            raise LoadError(
                f"Cannot load manifest {self.manifest_path}: {e}"
            ) from e
        self.env = self._load_env()

    def load(self, finalize: bool = True) -> Stack:
        stack = Stack(name=self.manifest.metadata.name)
        try:
            for id, rconfig in self.manifest.resources.items():
                attributes = self._resolve_param(
                    value=rconfig.attributes,
                )
                stack.declare(id, rconfig.kind, attributes)
        except ValidationError as e:
            raise LoadError(f"Invalid resource {id}: {e}") from e
        for dconfig in self.manifest.declared_dependencies():
            stack.depends(dconfig.source, dconfig.target, dconfig.strength)
        if finalize:
            stack.finalize()
        return stack

    def _load_env(self) -> dict[str, str | None]:
        env: dict[str, str | None] = dict()
        if self.manifest.env_file:
            env_path = os.path.join(self.path, self.manifest.env_file)
            if os.path.exists(env_path):
                env.update(dotenv_values(env_path))
        env.update(os.environ)
        return env

    def _resolve_param(self, value: Any) -> Any:
        if isinstance(value, dict):
            return {k: self._resolve_param(value=v) for k, v in value.items()}
        elif isinstance(value, list):
            return [self._resolve_param(value=item) for item in value]
        elif isinstance(value, str) and self._is_ref(value):
            ref_info = self._get_ref_info(value)
            if ref_info.type == RefType.RESOURCE:
                return value
            return self._resolve_ref(ref_info=ref_info)
        elif isinstance(value, str):
            return re.sub(EMBEDDED_REF_PATTERN, self._replace_ref, value)
        return value

    def _replace_ref(self, match: re.Match) -> str:
        ref_info = self._get_ref_info(match.group(0))
        if ref_info.type == RefType.RESOURCE:
            return match.group(0)
        value = self._resolve_ref(ref_info=ref_info)
        return "" if value is None else str(value)

    def _resolve_ref(self, ref_info: RefInfo) -> Any:
        if ref_info.type == RefType.ENV:
            return self._resolve_param(value=self._resolve_env(ref_info.param))
        if ref_info.type == RefType.VARIABLE:
            return self._resolve_param(
                value=self._resolve_variable(ref_info.param)
            )
        if ref_info.type == RefType.METADATA:
            return self._resolve_metadata(param=ref_info.param)
        raise LoadError(f"Cannot substitute {ref_info.value}")

    def _resolve_env(self, param: str) -> Any:
        value = self.env.get(param)
        if value is None:
            warn(f"Environment variable {param} is not set")
        return value

    def _resolve_variable(self, param: str) -> Any:
        if param in self.manifest.variables:
            return self.manifest.variables[param]
        raise LoadError(f"Variable {param} not found in manifest")

    def _resolve_metadata(self, param: str) -> Any:
        if param in ManifestMetadata.model_fields:
            return getattr(self.manifest.metadata, param)
        raise LoadError(f"Metadata {param} not found in manifest")

    def _get_ref_info(self, string: str) -> RefInfo:
        match = re.match(REF_PATTERN, string)
        if not match:
            raise LoadError(f"{string} not a ref")

        value = match.group(1)
        ref_info = RefInfo()
        ref_info.value = value
        prefix_map = {
            "env.": RefType.ENV,
            "metadata.": RefType.METADATA,
            "variables.": RefType.VARIABLE,
        }
        for prefix, ref_type in prefix_map.items():
            if value.startswith(prefix):
                ref_info.type = ref_type
                ref_info.param = value[len(prefix) :]
                return ref_info

        if "." not in value:
            raise LoadError(f"Invalid reference {string}")
        ref_info.type = RefType.RESOURCE
        ref_info.param = value
        return ref_info

    def _is_ref(self, str: str) -> bool:
        return bool(re.match(REF_PATTERN, str))


class RefInfo:
    type: RefType
    param: str
    value: str


class RefType(str, Enum):
    ENV = "env"
    METADATA = "metadata"
    VARIABLE = "variable"
    RESOURCE = "resource"
