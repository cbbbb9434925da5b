"""Building override values from command line options"""

from pathlib import Path
from typing import Any, Dict, Iterable, Optional

import click
import yaml

from ...utils.template_utils import load_text_yaml, merge_values


def parse_set_option(assignment: str) -> Dict[str, Any]:
    """
    Turn 'a.b.c=value' into {'a': {'b': {'c': value}}}

    The value is parsed as YAML with scalars kept as text, so 1.10 stays 1.10.
    """
    key, sep, raw = assignment.partition('=')
    if not sep or not key.strip():
        raise click.BadParameter(f"Expected KEY=VALUE, got: {assignment}", param_hint="'--set'")

    try:
        value = load_text_yaml(raw) if raw.strip() else ""
    except yaml.YAMLError as e:
        raise click.BadParameter(f"Invalid YAML value in {assignment}: {e}", param_hint="'--set'")

    for part in reversed(key.strip().split('.')):
        value = {part: value}
    return value


def build_config_values(values_file: Optional[str], assignments: Iterable[str]) -> Optional[str]:
    """
    Combine a values file and --set assignments into override YAML

    Returns:
        YAML text, or None if neither was given
    """
    assignments = list(assignments)
    if not values_file and not assignments:
        return None

    values: Dict[str, Any] = {}
    if values_file:
        try:
            loaded = load_text_yaml(Path(values_file).read_text(encoding='utf-8'))
        except yaml.YAMLError as e:
            raise click.BadParameter(f"{values_file} is not valid YAML: {e}", param_hint="'--values'")
        if loaded is not None and not isinstance(loaded, dict):
            raise click.BadParameter(f"{values_file} must contain a YAML map", param_hint="'--values'")
        values = loaded or {}

    for assignment in assignments:
        values = merge_values(values, parse_set_option(assignment))

    return yaml.safe_dump(values, default_flow_style=False, sort_keys=False)
