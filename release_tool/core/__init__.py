# release_tool/core/__init__.py
"""Core rendering and analysis engines"""

from .kind_registry import KindRegistry, KindReader, GenericAppReader, ContainerAppReader
from .manifest_renderer import ManifestRenderer
from .release_analyzer import ReleaseAnalyzer

__all__ = [
    'KindRegistry',
    'KindReader',
    'GenericAppReader',
    'ContainerAppReader',
    'ManifestRenderer',
    'ReleaseAnalyzer',
]
