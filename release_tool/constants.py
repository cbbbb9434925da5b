"""Global constants for release-tool"""

import re

APP_NAME = "release-tool"
LOG_FORMAT = "%(message)s"

# Manifest related
MANIFEST_API_VERSION = "release-tool/v1"
MANIFEST_SOURCE_PREFIX = "# Source: "
MANIFEST_DOCUMENT_SEPARATOR = "---"

# Project identification
CONFIG_FILE = "release-tool.yaml"

# Package layout (filesystem package source)
PACKAGE_METADATA_FILE = "package.yml"
PACKAGE_VALUES_FILE = "values.yml"
PACKAGE_TEMPLATES_DIR = "templates"
PACKAGE_DEPENDENCIES_DIR = "packages"
TEMPLATE_FILE_PATTERNS = ["*.yml", "*.yaml"]

# Repository layout (filesystem repository)
DEFAULT_STATE_DIR = ".release-tool"
RELEASES_DIR = "releases"
APP_DEPLOYER_DATA_DIR = "app-deployer-data"
RELEASE_FILE_PATTERN = "{name}/v{version}.json"

# Defaults
DEFAULT_PLATFORM_NAME = "default"
DEFAULT_DEPLOYER = "release_tool.deployer.memory:InMemoryAppDeployer"
DEFAULT_REPOSITORY_TYPE = "memory"
DEFAULT_PACKAGE_SOURCE_TYPE = "memory"
DEFAULT_HEALTH_CHECK_INTERVAL = 1.0  # seconds
DEFAULT_HEALTH_CHECK_TIMEOUT = 120.0  # seconds
DEFAULT_HISTORY_SIZE = 10

SUPPORTED_REPOSITORY_TYPES = ["memory", "filesystem"]
SUPPORTED_PACKAGE_SOURCE_TYPES = ["memory", "filesystem"]

# Status descriptions
DESC_INSTALL_UNDERWAY = "Initial install underway"
DESC_UPGRADE_UNDERWAY = "Upgrade install underway"
DESC_ROLLBACK_UNDERWAY = "Rollback install underway"
DESC_INSTALL_COMPLETE = "Install complete"
DESC_UPGRADE_COMPLETE = "Upgrade complete"
DESC_ROLLBACK_COMPLETE = "Rollback complete"
DESC_DELETING = "Delete underway"
DESC_DELETE_COMPLETE = "Delete complete"
DESC_SUPERSEDED = "Superseded by version {version}"
DESC_CANCELLED = "Cancelled by operator during {state}"

# Platform status summaries
PLATFORM_STATUS_ALL_DEPLOYED = "All the applications are deployed successfully."
PLATFORM_STATUS_NOT_ALL_DEPLOYED = "Not all the applications are deployed successfully. {details}"
PLATFORM_STATUS_NO_APPLICATIONS = "No applications are deployed."

# Attributes added to live application status
ATTR_APPLICATION_NAME = "release-tool.application.name"
ATTR_RELEASE_NAME = "release-tool.release.name"
ATTR_RELEASE_VERSION = "release-tool.release.version"


# Error codes
class ErrorCode:
    CONFIG_FORMAT_ERROR = "RT001"
    VALIDATION_FAILED = "RT002"
    PACKAGE_NOT_FOUND = "RT003"
    RELEASE_NOT_FOUND = "RT004"
    RELEASE_ALREADY_EXISTS = "RT005"
    INVALID_VERSION = "RT006"
    UPGRADE_IN_PROGRESS = "RT007"
    DEPLOYMENT_FAILED = "RT008"
    HEALTH_CHECK_TIMEOUT = "RT009"
    TEMPLATE_RENDER_ERROR = "RT010"
    CYCLIC_PACKAGE_DEPENDENCY = "RT011"
    PLATFORM_NOT_FOUND = "RT012"
    RELEASE_UPGRADE_ERROR = "RT013"
    REPOSITORY_ERROR = "RT014"
    INVALID_STATE_TRANSITION = "RT015"


# Environment variables
ENV_CONFIG_PATH = "RELEASE_TOOL_CONFIG"
ENV_LOG_LEVEL = "RELEASE_TOOL_LOG_LEVEL"
ENV_STATE_DIR = "RELEASE_TOOL_STATE_DIR"

# Validation patterns
RELEASE_NAME_PATTERN = re.compile(r"^[a-zA-Z][a-zA-Z0-9_-]*$")
APPLICATION_NAME_PATTERN = re.compile(r"^[a-zA-Z][a-zA-Z0-9_.-]*$")
PLATFORM_NAME_PATTERN = re.compile(r"^[a-zA-Z][a-zA-Z0-9_-]*$")

# Display constants
EMOJI_SUCCESS = "✓"
EMOJI_ERROR = "✗"
EMOJI_WARNING = "⚠"
EMOJI_ARROW = "→"
EMOJI_ROCKET = "🚀"

# Messages templates
MSG_INSTALL_STARTED = f"{EMOJI_ROCKET} Installing {{name}} v{{version}} on {{platform}}"
MSG_UPGRADE_STARTED = f"{EMOJI_ROCKET} Upgrading {{name}} to v{{version}}"
MSG_ROLLBACK_STARTED = f"{EMOJI_ROCKET} Rolling back {{name}} to the manifest of v{{target}} as v{{version}}"
MSG_DELETE_STARTED = f"{EMOJI_WARNING} Deleting {{name}} v{{version}}"
MSG_RELEASE_FINISHED = f"{{emoji}} {{name}} v{{version}}: {{status}} ({{description}})"
