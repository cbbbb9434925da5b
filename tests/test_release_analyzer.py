"""Tests for manifest difference analysis"""

import pytest

from release_tool.api.exceptions import ValidationError
from release_tool.core.release_analyzer import ReleaseAnalyzer
from release_tool.models import AppSpec, Manifest, PackageReference, PropertiesDiff, Release


def _spec(name, version="1.0.0", app=None, deploy=None, kind="generic-app"):
    return AppSpec(
        application_name=name,
        kind=kind,
        resource=f"maven://org.example:{name}",
        version=version,
        application_properties=app or {},
        deployment_properties=deploy or {}
    )


def _release(version, *specs):
    return Release(
        name="logger",
        version=version,
        package=PackageReference("logger", "1.0.0"),
        manifest=Manifest(data="", app_specs=specs),
        platform_name="default"
    )


class TestPropertiesDiff:

    def test_key_wise_comparison(self):
        diff = PropertiesDiff.of({"a": "1", "b": "2", "c": "3"}, {"b": "2", "c": "4", "d": "5"})

        assert diff.removed == {"a": "1"}
        assert diff.added == {"d": "5"}
        assert set(diff.changed) == {"c"}
        assert diff.changed["c"].original == "3"
        assert diff.changed["c"].replaced == "4"
        assert diff.common == {"b": "2"}
        assert not diff.are_equal

    def test_absent_and_empty_are_not_equal(self):
        diff = PropertiesDiff.of({}, {"a": ""})
        assert diff.added == {"a": ""}
        assert not diff.are_equal

    def test_symmetry(self):
        left = {"a": "1", "b": "2", "c": "3"}
        right = {"b": "2", "c": "4", "d": "5"}

        forward = PropertiesDiff.of(left, right)
        backward = PropertiesDiff.of(right, left)

        assert forward.added == backward.removed
        assert forward.removed == backward.added
        assert set(forward.changed) == set(backward.changed)


class TestReleaseAnalyzer:

    def setup_method(self):
        self.analyzer = ReleaseAnalyzer()

    def test_identical_manifests(self):
        manifest = Manifest(data="", app_specs=(_spec("logger-app"), _spec("time-app")))
        difference = self.analyzer.diff(manifest, manifest)

        assert difference.are_equal
        assert difference.redeploy_set == []

    def test_resource_version_forces_redeploy(self):
        left = Manifest(data="", app_specs=(_spec("logger-app"), _spec("time-app")))
        right = Manifest(data="", app_specs=(_spec("logger-app", version="1.1.0"), _spec("time-app")))

        difference = self.analyzer.diff(left, right)
        assert difference.redeploy_set == ["logger-app"]
        assert difference.changed_application_names == ["logger-app"]

    def test_application_properties_force_redeploy(self):
        left = Manifest(data="", app_specs=(_spec("logger-app", app={"log.level": "INFO"}),))
        right = Manifest(data="", app_specs=(_spec("logger-app", app={"log.level": "DEBUG"}),))

        assert self.analyzer.diff(left, right).redeploy_set == ["logger-app"]

    def test_kind_forces_redeploy(self):
        left = Manifest(data="", app_specs=(_spec("logger-app"),))
        right = Manifest(data="", app_specs=(_spec("logger-app", kind="container-app"),))

        difference = self.analyzer.diff(left, right)
        assert difference.redeploy_set == ["logger-app"]
        assert not difference.find("logger-app").identity.are_equal

    def test_deployment_properties_do_not_force_redeploy(self):
        left = Manifest(data="", app_specs=(_spec("logger-app", deploy={"count": "1"}),))
        right = Manifest(data="", app_specs=(_spec("logger-app", deploy={"count": "3"}),))

        difference = self.analyzer.diff(left, right)
        assert not difference.are_equal
        assert difference.redeploy_set == []
        assert difference.in_place_update_names == ["logger-app"]

    def test_new_and_removed_applications(self):
        left = Manifest(data="", app_specs=(_spec("logger-app"), _spec("old-app")))
        right = Manifest(data="", app_specs=(_spec("new-app"), _spec("logger-app")))

        difference = self.analyzer.diff(left, right)
        assert difference.new_application_names == ["new-app"]
        assert difference.removed_application_names == ["old-app"]
        assert difference.redeploy_set == ["new-app"]
        # Candidate order first, removed applications last
        assert [d.application_name for d in difference.differences] == ["new-app", "logger-app", "old-app"]

    def test_order_does_not_matter(self):
        left = Manifest(data="", app_specs=(_spec("a"), _spec("b")))
        right = Manifest(data="", app_specs=(_spec("b"), _spec("a")))

        assert self.analyzer.diff(left, right).are_equal

    def test_diff_against_nothing(self):
        right = Manifest(data="", app_specs=(_spec("logger-app"),))
        assert self.analyzer.diff(None, right).redeploy_set == ["logger-app"]

    def test_diff_symmetry(self):
        left = Manifest(data="", app_specs=(
            _spec("logger-app", app={"a": "1", "b": "2"}), _spec("old-app")))
        right = Manifest(data="", app_specs=(
            _spec("logger-app", app={"b": "3", "c": "4"}), _spec("new-app")))

        forward = self.analyzer.diff(left, right)
        backward = self.analyzer.diff(right, left)

        assert forward.new_application_names == backward.removed_application_names
        assert forward.removed_application_names == backward.new_application_names

        ahead = forward.find("logger-app").application_properties
        behind = backward.find("logger-app").application_properties
        assert ahead.added == behind.removed
        assert ahead.removed == behind.added
        assert set(ahead.changed) == set(behind.changed)

    def test_analyze_install(self):
        candidate = _release(1, _spec("logger-app"), _spec("time-app"))
        report = self.analyzer.analyze(None, candidate)

        assert report.application_names_to_upgrade == ["logger-app", "time-app"]
        assert report.existing_release is None
        assert report.replacing_release is candidate

    def test_analyze_force(self):
        existing = _release(1, _spec("logger-app"), _spec("time-app"))
        candidate = _release(2, _spec("logger-app"), _spec("time-app"))

        assert self.analyzer.analyze(existing, candidate).application_names_to_upgrade == []
        assert self.analyzer.analyze(existing, candidate, force=True).application_names_to_upgrade == [
            "logger-app", "time-app"]
        assert self.analyzer.analyze(
            existing, candidate, force=True, app_names=["time-app"]
        ).application_names_to_upgrade == ["time-app"]

    def test_analyze_force_unknown_application(self):
        existing = _release(1, _spec("logger-app"))
        candidate = _release(2, _spec("logger-app"))

        with pytest.raises(ValidationError, match="missing-app"):
            self.analyzer.analyze(existing, candidate, force=True, app_names=["missing-app"])
