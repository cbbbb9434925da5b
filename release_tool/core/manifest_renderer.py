# release_tool/core/manifest_renderer.py
"""Render a package and its configuration values into a manifest"""

import logging
from typing import Dict, Any, List, Optional, Set, Tuple

import yaml

from .kind_registry import KindRegistry
from ..api.exceptions import TemplateRenderError, CyclicPackageDependencyError
from ..constants import MANIFEST_SOURCE_PREFIX, MANIFEST_DOCUMENT_SEPARATOR
from ..models.manifest import Manifest, AppSpec
from ..models.package import Package, ConfigValues, Template
from ..utils.template_utils import (
    render_template,
    extract_placeholders,
    load_all_text_yaml,
    load_text_yaml,
    flatten_values,
    key_paths,
    merge_values,
    without_keys,
)


class ManifestRenderer:
    """Merges values, walks package dependencies and renders templates

    Rendering is pure: the same package and values always produce a
    byte-identical manifest.
    """

    def __init__(self, kind_registry: Optional[KindRegistry] = None):
        self.kind_registry = kind_registry or KindRegistry.default()
        self.logger = logging.getLogger(self.__class__.__name__)

    def render(self,
               package: Package,
               config_values: Optional[ConfigValues] = None,
               strict: bool = False) -> Manifest:
        """
        Render a package into a manifest

        Args:
            package: Resolved package (with dependencies)
            config_values: Override values
            strict: Reject unknown override keys and unresolved placeholders

        Returns:
            Rendered manifest

        Raises:
            TemplateRenderError: On invalid values, templates or documents
            CyclicPackageDependencyError: If the dependency graph has a cycle
        """
        overrides = self._load_values(config_values.raw if config_values else "",
                                      "config values")

        chunks: List[Tuple[str, str]] = []
        self._render_package(package, {}, overrides, strict, [], chunks)

        data = MANIFEST_DOCUMENT_SEPARATOR + "\n" + \
            (MANIFEST_DOCUMENT_SEPARATOR + "\n").join(
                f"{MANIFEST_SOURCE_PREFIX}{source}\n{text}" for source, text in chunks
            )
        app_specs = self._parse(chunks)

        self.logger.debug(
            f"Rendered {package.reference} into {len(app_specs)} application(s): "
            f"{', '.join(spec.application_name for spec in app_specs)}"
        )
        return Manifest(data=data, app_specs=tuple(app_specs))

    def _render_package(self,
                        package: Package,
                        inherited: Dict[str, Any],
                        overrides: Dict[str, Any],
                        strict: bool,
                        path: List[str],
                        chunks: List[Tuple[str, str]]) -> None:
        if package.name in path:
            cycle = path[path.index(package.name):] + [package.name]
            raise CyclicPackageDependencyError(cycle)
        path = path + [package.name]

        dependency_names = package.dependency_names
        defaults = merge_values(
            self._load_values(package.config_values.raw, f"default values of {package.name}"),
            inherited
        )

        if strict:
            self._check_unknown_keys(package, defaults, without_keys(overrides, dependency_names))

        values = merge_values(without_keys(defaults, dependency_names),
                              without_keys(overrides, dependency_names))
        variables = flatten_values(values)

        for template in package.templates:
            source = f"{package.name}/{template.name}"
            chunks.append((source, self._render_template(template, variables, strict, source)))

        for dependency in package.dependencies:
            self._render_package(
                dependency,
                self._sub_values(defaults, dependency.name, package.name),
                self._sub_values(overrides, dependency.name, package.name),
                strict,
                path,
                chunks
            )

    def _render_template(self,
                         template: Template,
                         variables: Dict[str, str],
                         strict: bool,
                         source: str) -> str:
        try:
            text = render_template(template.data, variables, safe=not strict)
        except KeyError as e:
            raise TemplateRenderError(f"Template [{source}] references undefined value: {e.args[0]}")
        except ValueError as e:
            raise TemplateRenderError(f"Template [{source}] has an invalid placeholder: {e}")

        if not text.endswith("\n"):
            text += "\n"
        return text

    def _parse(self, chunks: List[Tuple[str, str]]) -> List[AppSpec]:
        app_specs = []
        seen: Set[str] = set()

        for source, text in chunks:
            try:
                documents = load_all_text_yaml(text)
            except yaml.YAMLError as e:
                raise TemplateRenderError(f"Rendered template [{source}] is not valid YAML: {e}")

            for document in documents:
                if document is None:
                    continue
                app_spec = self.kind_registry.read(document, source)
                if app_spec.application_name in seen:
                    raise TemplateRenderError(
                        f"Duplicate application name [{app_spec.application_name}] in [{source}]"
                    )
                seen.add(app_spec.application_name)
                app_specs.append(app_spec)

        return app_specs

    def _check_unknown_keys(self,
                            package: Package,
                            defaults: Dict[str, Any],
                            overrides: Dict[str, Any]) -> None:
        known = set(key_paths(defaults))
        for template in package.templates:
            known.update(extract_placeholders(template.data))

        unknown = [p for p in key_paths(overrides) if not _is_known(p, known)]
        if unknown:
            raise TemplateRenderError(
                f"Unknown configuration value(s) for package [{package.name}]: {', '.join(unknown)}"
            )

    @staticmethod
    def _sub_values(values: Dict[str, Any], dependency_name: str, parent_name: str) -> Dict[str, Any]:
        sub = values.get(dependency_name)
        if sub is None:
            return {}
        if not isinstance(sub, dict):
            raise TemplateRenderError(
                f"Values for dependency [{dependency_name}] of [{parent_name}] must be a map"
            )
        return sub

    @staticmethod
    def _load_values(raw: str, what: str) -> Dict[str, Any]:
        if not raw or not raw.strip():
            return {}
        try:
            values = load_text_yaml(raw)
        except yaml.YAMLError as e:
            raise TemplateRenderError(f"Invalid YAML in {what}: {e}")
        if values is None:
            return {}
        if not isinstance(values, dict):
            raise TemplateRenderError(f"{what.capitalize()} must be a YAML map")
        return values


def _is_known(path: str, known: Set[str]) -> bool:
    """A path is known if it, or one of its ancestors, is a known path"""
    parts = path.split('.')
    return any('.'.join(parts[:i]) in known for i in range(1, len(parts) + 1))
