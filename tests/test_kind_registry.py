"""Tests for manifest kind dispatch"""

import pytest

from release_tool.api.exceptions import TemplateRenderError
from release_tool.core.kind_registry import ContainerAppReader, GenericAppReader, KindRegistry


def _document(kind="generic-app", name="app", resource="maven://org.example:app", **spec):
    return {
        "apiVersion": "release-tool/v1",
        "kind": kind,
        "metadata": {"name": name},
        "spec": {"resource": resource, **spec},
    }


class TestKindRegistry:

    def test_default_kinds(self):
        registry = KindRegistry.default()
        assert registry.kinds == ["container-app", "generic-app"]
        assert isinstance(registry.get("generic-app"), GenericAppReader)
        assert isinstance(registry.get("container-app"), ContainerAppReader)

    def test_unknown_kind(self):
        with pytest.raises(TemplateRenderError, match="Unknown manifest kind: job"):
            KindRegistry.default().read(_document(kind="job"), "pkg/job.yml")

    def test_registry_limited_to_given_readers(self):
        registry = KindRegistry([GenericAppReader()])
        with pytest.raises(TemplateRenderError):
            registry.get("container-app")

    def test_read_converts_values_to_strings(self):
        spec = KindRegistry.default().read(
            _document(version=2, applicationProperties={"port": 8080, "debug": True, "empty": None}),
            "pkg/app.yml"
        )

        assert spec.application_name == "app"
        assert spec.version == "2"
        assert spec.application_properties == {"port": "8080", "debug": "true", "empty": ""}
        assert spec.deployment_properties == {}
        assert spec.resource_location == "maven://org.example:app:2"

    def test_missing_resource(self):
        document = _document()
        del document["spec"]["resource"]

        with pytest.raises(TemplateRenderError, match="pkg/app.yml"):
            KindRegistry.default().read(document, "pkg/app.yml")

    def test_invalid_application_name(self):
        with pytest.raises(TemplateRenderError, match="metadata.name"):
            KindRegistry.default().read(_document(name="9 bad"), "pkg/app.yml")

    def test_container_app_requires_docker_resource(self):
        registry = KindRegistry.default()

        spec = registry.read(_document(kind="container-app", resource="docker:acme/logger"), "pkg/app.yml")
        assert spec.kind == "container-app"

        with pytest.raises(TemplateRenderError, match="container-app"):
            registry.read(_document(kind="container-app"), "pkg/app.yml")

    def test_not_a_mapping(self):
        with pytest.raises(TemplateRenderError, match="not a mapping"):
            KindRegistry.default().read(["a", "b"], "pkg/app.yml")
