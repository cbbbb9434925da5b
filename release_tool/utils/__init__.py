# release_tool/utils/__init__.py
"""Utility functions for release-tool"""

from .template_utils import (
    ValuesTemplate,
    TextLoader,
    load_text_yaml,
    load_all_text_yaml,
    render_template,
    extract_placeholders,
    flatten_values,
    key_paths,
    merge_values,
    without_keys,
)

from .version_utils import (
    parse_version,
    sort_versions,
    get_latest_version,
)

from .async_utils import (
    run_async,
    wait_for_event,
)

__all__ = [
    # Template utilities
    'ValuesTemplate',
    'TextLoader',
    'load_text_yaml',
    'load_all_text_yaml',
    'render_template',
    'extract_placeholders',
    'flatten_values',
    'key_paths',
    'merge_values',
    'without_keys',

    # Version utilities
    'parse_version',
    'sort_versions',
    'get_latest_version',

    # Async utilities
    'run_async',
    'wait_for_event',
]
