# release_tool/models/difference.py
"""Manifest difference models"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Any, Mapping

from .release import Release


@dataclass(frozen=True)
class PropertyChange:
    """A key present on both sides with different values"""
    original: str
    replaced: str


@dataclass
class PropertiesDiff:
    """Key-wise comparison of two string maps

    No normalization is applied: a missing key and an empty string differ.
    """
    added: Dict[str, str] = field(default_factory=dict)
    removed: Dict[str, str] = field(default_factory=dict)
    changed: Dict[str, PropertyChange] = field(default_factory=dict)
    common: Dict[str, str] = field(default_factory=dict)

    @classmethod
    def of(cls,
           left: Optional[Mapping[str, Any]],
           right: Optional[Mapping[str, Any]]) -> 'PropertiesDiff':
        """Compare left (existing) with right (replacing)"""
        left = dict(left or {})
        right = dict(right or {})
        diff = cls()

        for key, value in left.items():
            if key not in right:
                diff.removed[key] = value
            elif right[key] != value:
                diff.changed[key] = PropertyChange(original=value, replaced=right[key])
            else:
                diff.common[key] = value

        for key, value in right.items():
            if key not in left:
                diff.added[key] = value

        return diff

    @property
    def are_equal(self) -> bool:
        return not (self.added or self.removed or self.changed)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary"""
        return {
            'added': dict(self.added),
            'removed': dict(self.removed),
            'changed': {k: {'original': c.original, 'replaced': c.replaced}
                        for k, c in self.changed.items()},
            'common': dict(self.common)
        }


@dataclass
class ApplicationManifestDifference:
    """Combined difference of one application across two manifests"""
    application_name: str
    identity: PropertiesDiff
    resource: PropertiesDiff
    application_properties: PropertiesDiff
    deployment_properties: PropertiesDiff
    is_new: bool = False
    is_removed: bool = False

    @property
    def are_equal(self) -> bool:
        return (not self.is_new and not self.is_removed
                and self.identity.are_equal
                and self.resource.are_equal
                and self.application_properties.are_equal
                and self.deployment_properties.are_equal)

    @property
    def requires_redeploy(self) -> bool:
        """Identity, resource or application property changes force a new instance

        Deployment-property-only changes do not; removed applications are
        undeployed, never redeployed.
        """
        if self.is_removed:
            return False
        if self.is_new:
            return True
        return not (self.identity.are_equal
                    and self.resource.are_equal
                    and self.application_properties.are_equal)

    @property
    def deployment_properties_only(self) -> bool:
        return (not self.requires_redeploy and not self.is_removed
                and not self.deployment_properties.are_equal)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary"""
        return {
            'application_name': self.application_name,
            'is_new': self.is_new,
            'is_removed': self.is_removed,
            'identity': self.identity.to_dict(),
            'resource': self.resource.to_dict(),
            'application_properties': self.application_properties.to_dict(),
            'deployment_properties': self.deployment_properties.to_dict()
        }


@dataclass
class ReleaseDifference:
    """Differences between every application of two manifests"""
    differences: List[ApplicationManifestDifference] = field(default_factory=list)

    @property
    def are_equal(self) -> bool:
        return all(d.are_equal for d in self.differences)

    @property
    def changed_application_names(self) -> List[str]:
        return [d.application_name for d in self.differences if not d.are_equal]

    @property
    def redeploy_set(self) -> List[str]:
        return [d.application_name for d in self.differences if d.requires_redeploy]

    @property
    def new_application_names(self) -> List[str]:
        return [d.application_name for d in self.differences if d.is_new]

    @property
    def removed_application_names(self) -> List[str]:
        return [d.application_name for d in self.differences if d.is_removed]

    @property
    def in_place_update_names(self) -> List[str]:
        return [d.application_name for d in self.differences if d.deployment_properties_only]

    def find(self, application_name: str) -> Optional[ApplicationManifestDifference]:
        for difference in self.differences:
            if difference.application_name == application_name:
                return difference
        return None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary"""
        return {
            'are_equal': self.are_equal,
            'redeploy_set': self.redeploy_set,
            'differences': [d.to_dict() for d in self.differences]
        }


@dataclass
class ReleaseAnalysisReport:
    """Outcome of analyzing an existing release against its replacement"""
    application_names_to_upgrade: List[str]
    release_difference: ReleaseDifference
    existing_release: Optional[Release]
    replacing_release: Release

    @property
    def removed_application_names(self) -> List[str]:
        return self.release_difference.removed_application_names

    @property
    def in_place_update_names(self) -> List[str]:
        return [name for name in self.release_difference.in_place_update_names
                if name not in self.application_names_to_upgrade]
