# release_tool/core/kind_registry.py
"""Registry mapping manifest document kinds to readers"""

import logging
from abc import ABC
from typing import Dict, Any, Iterable, List, Optional

import jsonschema

from ..api.exceptions import TemplateRenderError
from ..constants import APPLICATION_NAME_PATTERN
from ..models.manifest import AppSpec, AppSpecKind
from ..utils.template_utils import format_value

logger = logging.getLogger(__name__)

_PROPERTIES_SCHEMA = {
    "type": ["object", "null"],
    "additionalProperties": {"type": ["string", "number", "boolean", "null"]}
}

APP_DOCUMENT_SCHEMA = {
    "type": "object",
    "required": ["apiVersion", "kind", "metadata", "spec"],
    "properties": {
        "apiVersion": {"type": "string", "minLength": 1},
        "kind": {"type": "string"},
        "metadata": {
            "type": "object",
            "required": ["name"],
            "properties": {
                "name": {"type": "string", "pattern": APPLICATION_NAME_PATTERN.pattern}
            }
        },
        "spec": {
            "type": "object",
            "required": ["resource"],
            "properties": {
                "resource": {"type": "string", "minLength": 1},
                "version": {"type": ["string", "number", "null"]},
                "applicationProperties": _PROPERTIES_SCHEMA,
                "deploymentProperties": _PROPERTIES_SCHEMA
            }
        }
    }
}


class KindReader(ABC):
    """Validates one kind of manifest document and builds an AppSpec from it"""

    kind: AppSpecKind = None
    schema: Dict[str, Any] = APP_DOCUMENT_SCHEMA

    def validate(self, document: Any, source: str) -> None:
        try:
            jsonschema.validate(document, self.schema)
        except jsonschema.ValidationError as e:
            location = '.'.join(str(p) for p in e.absolute_path) or '<document>'
            raise TemplateRenderError(
                f"Invalid {self.kind.value} document in [{source}] at {location}: {e.message}"
            )

    def read(self, document: Dict[str, Any], source: str) -> AppSpec:
        """Validate document and convert it to an AppSpec"""
        self.validate(document, source)
        spec = document['spec']
        version = spec.get('version')
        return AppSpec(
            application_name=document['metadata']['name'],
            kind=self.kind.value,
            api_version=document['apiVersion'],
            resource=spec['resource'],
            version='' if version is None else str(version),
            application_properties=_string_map(spec.get('applicationProperties')),
            deployment_properties=_string_map(spec.get('deploymentProperties'))
        )


class GenericAppReader(KindReader):
    """Any resource locator"""

    kind = AppSpecKind.GENERIC_APP


class ContainerAppReader(KindReader):
    """Container image; the resource must be a docker: locator"""

    kind = AppSpecKind.CONTAINER_APP
    schema = {
        **APP_DOCUMENT_SCHEMA,
        "properties": {
            **APP_DOCUMENT_SCHEMA["properties"],
            "spec": {
                **APP_DOCUMENT_SCHEMA["properties"]["spec"],
                "properties": {
                    **APP_DOCUMENT_SCHEMA["properties"]["spec"]["properties"],
                    "resource": {"type": "string", "pattern": "^docker:.+"}
                }
            }
        }
    }


def _string_map(values: Optional[Dict[str, Any]]) -> Dict[str, str]:
    return {str(k): format_value(v) for k, v in (values or {}).items()}


class KindRegistry:
    """Closed set of readers keyed by kind, built once and then only read"""

    def __init__(self, readers: Optional[Iterable[KindReader]] = None):
        self._readers: Dict[str, KindReader] = {}
        for reader in readers if readers is not None else (GenericAppReader(), ContainerAppReader()):
            self._readers[reader.kind.value] = reader

    @classmethod
    def default(cls) -> 'KindRegistry':
        """Registry with the built-in readers"""
        return cls()

    @property
    def kinds(self) -> List[str]:
        return sorted(self._readers)

    def get(self, kind: str) -> KindReader:
        reader = self._readers.get(kind)
        if reader is None:
            raise TemplateRenderError(
                f"Unknown manifest kind: {kind} (supported: {', '.join(self.kinds)})"
            )
        return reader

    def read(self, document: Any, source: str) -> AppSpec:
        """Dispatch a parsed manifest document to the reader for its kind"""
        if not isinstance(document, dict):
            raise TemplateRenderError(f"Manifest document in [{source}] is not a mapping")

        kind = document.get('kind')
        if not isinstance(kind, str):
            raise TemplateRenderError(f"Manifest document in [{source}] has no kind")

        app_spec = self.get(kind).read(document, source)
        logger.debug(f"Read {kind} [{app_spec.application_name}] from {source}")
        return app_spec
