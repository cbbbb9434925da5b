# release_tool/core/release_analyzer.py
"""Compare manifests and decide which applications to upgrade"""

import logging
from typing import Dict, Iterable, Optional

from ..api.exceptions import ValidationError
from ..models.difference import (
    ApplicationManifestDifference,
    PropertiesDiff,
    ReleaseAnalysisReport,
    ReleaseDifference,
)
from ..models.manifest import AppSpec, Manifest
from ..models.release import Release

logger = logging.getLogger(__name__)

EMPTY_MANIFEST = Manifest(data="")


def _identity(spec: Optional[AppSpec]) -> Dict[str, str]:
    if spec is None:
        return {}
    return {'kind': spec.kind.strip(), 'api_version': spec.api_version.strip()}


def _resource(spec: Optional[AppSpec]) -> Dict[str, str]:
    if spec is None:
        return {}
    return {'resource': spec.resource.strip(), 'version': spec.version.strip()}


class ReleaseAnalyzer:
    """Manifest difference analyzer"""

    def diff_application(self,
                         application_name: str,
                         existing: Optional[AppSpec],
                         replacing: Optional[AppSpec]) -> ApplicationManifestDifference:
        """Difference of one application; either side may be absent"""
        return ApplicationManifestDifference(
            application_name=application_name,
            identity=PropertiesDiff.of(_identity(existing), _identity(replacing)),
            resource=PropertiesDiff.of(_resource(existing), _resource(replacing)),
            application_properties=PropertiesDiff.of(
                existing.application_properties if existing else None,
                replacing.application_properties if replacing else None
            ),
            deployment_properties=PropertiesDiff.of(
                existing.deployment_properties if existing else None,
                replacing.deployment_properties if replacing else None
            ),
            is_new=existing is None,
            is_removed=replacing is None
        )

    def diff(self, existing: Optional[Manifest], replacing: Manifest) -> ReleaseDifference:
        """
        Compare the deployed manifest with a candidate

        Applications are matched by name. Results list candidate
        applications in candidate order, then removed ones in existing order.

        Args:
            existing: Deployed manifest (None for a fresh install)
            replacing: Candidate manifest

        Returns:
            ReleaseDifference
        """
        existing = existing or EMPTY_MANIFEST
        left = existing.as_map()
        right = replacing.as_map()

        differences = [
            self.diff_application(name, left.get(name), spec)
            for name, spec in right.items()
        ]
        differences.extend(
            self.diff_application(name, spec, None)
            for name, spec in left.items() if name not in right
        )
        return ReleaseDifference(differences=differences)

    def analyze(self,
                existing: Optional[Release],
                replacing: Release,
                force: bool = False,
                app_names: Optional[Iterable[str]] = None) -> ReleaseAnalysisReport:
        """
        Build the analysis report for replacing one release with another

        Args:
            existing: Release being replaced, if any
            replacing: Candidate release
            force: Redeploy even when nothing changed
            app_names: With force, only these applications are forced

        Returns:
            ReleaseAnalysisReport

        Raises:
            ValidationError: If a forced application is not in the candidate
        """
        difference = self.diff(existing.manifest if existing else None, replacing.manifest)
        candidate_names = replacing.manifest.application_names
        to_upgrade = set(difference.redeploy_set)

        if force:
            forced = list(app_names or [])
            if not forced:
                to_upgrade.update(candidate_names)
            for name in forced:
                if name not in candidate_names:
                    raise ValidationError(
                        f"Application [{name}] is not part of release {replacing}; "
                        f"known: {', '.join(candidate_names)}"
                    )
                to_upgrade.add(name)

        application_names = [name for name in candidate_names if name in to_upgrade]
        logger.info(
            f"Analyzed {replacing} against {existing or 'no existing release'}: "
            f"upgrade [{', '.join(application_names)}]"
            + (f", remove [{', '.join(difference.removed_application_names)}]"
               if difference.removed_application_names else "")
        )

        return ReleaseAnalysisReport(
            application_names_to_upgrade=application_names,
            release_difference=difference,
            existing_release=existing,
            replacing_release=replacing
        )
