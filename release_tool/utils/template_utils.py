"""Template processing utilities"""

import copy
import string
from typing import Dict, Any, Iterable, List, Set

import yaml


class ValuesTemplate(string.Template):
    """string.Template accepting dotted paths inside braces, e.g. ${spring.port}"""

    braceidpattern = r'(?a:[_a-z][_a-z0-9-]*(?:\.[_a-z][_a-z0-9-]*)*)'


class TextLoader(yaml.SafeLoader):
    """SafeLoader that keeps every scalar except null as its source text

    Versions such as 1.10 must not collapse to the float 1.1.
    """


TextLoader.yaml_implicit_resolvers = {
    first: [(tag, regexp) for tag, regexp in resolvers if tag == 'tag:yaml.org,2002:null']
    for first, resolvers in yaml.SafeLoader.yaml_implicit_resolvers.items()
}


def load_text_yaml(text: str) -> Any:
    """Load a single YAML document with scalars kept as text"""
    return yaml.load(text, Loader=TextLoader)


def load_all_text_yaml(text: str) -> List[Any]:
    """Load every document of a YAML stream with scalars kept as text"""
    return list(yaml.load_all(text, Loader=TextLoader))


def render_template(template: str,
                    variables: Dict[str, Any],
                    safe: bool = True) -> str:
    """
    Render template with variables

    Unlike a general purpose renderer no clock or environment values are
    added to the context: the same template and variables always render
    the same text.

    Args:
        template: Template string
        variables: Flattened variables (see flatten_values)
        safe: Use safe substitution (leave missing vars verbatim)

    Returns:
        Rendered string

    Raises:
        KeyError: If safe is False and a placeholder has no value
        ValueError: If safe is False and a placeholder is malformed
    """
    tmpl = ValuesTemplate(template)

    if safe:
        return tmpl.safe_substitute(variables)
    else:
        return tmpl.substitute(variables)


def extract_placeholders(template: str) -> Set[str]:
    """
    Names of all placeholders referenced by a template

    Args:
        template: Template string

    Returns:
        Set of placeholder names, dotted paths included
    """
    names = set()
    for match in ValuesTemplate.pattern.finditer(template):
        name = match.group('named') or match.group('braced')
        if name:
            names.add(name)
    return names


def format_value(value: Any) -> str:
    """Render a single value the way it should appear in YAML text"""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (dict, list)):
        return yaml.safe_dump(value, default_flow_style=True, sort_keys=False).strip()
    return str(value)


def flatten_values(values: Dict[str, Any], prefix: str = "") -> Dict[str, str]:
    """
    Flatten nested values into dotted keys

    Both leaves and intermediate maps get an entry, so ${server} and
    ${server.port} can both be addressed.

    Args:
        values: Nested values
        prefix: Key prefix

    Returns:
        Flat dictionary of formatted values
    """
    result = {}
    for key, value in values.items():
        path = f"{prefix}{key}"
        result[path] = format_value(value)
        if isinstance(value, dict):
            result.update(flatten_values(value, prefix=f"{path}."))
    return result


def key_paths(values: Dict[str, Any], prefix: str = "") -> List[str]:
    """Dotted paths of every leaf in nested values"""
    paths = []
    for key, value in values.items():
        path = f"{prefix}{key}"
        if isinstance(value, dict) and value:
            paths.extend(key_paths(value, prefix=f"{path}."))
        else:
            paths.append(path)
    return paths


def merge_values(base: Dict[str, Any],
                 override: Dict[str, Any]) -> Dict[str, Any]:
    """
    Deep merge two value dictionaries

    Nested maps merge recursively and the override wins on scalar
    collisions. Lists are merged by appending override items not already
    present.

    Args:
        base: Base values
        override: Override values

    Returns:
        Merged values (inputs are not modified)
    """
    result = copy.deepcopy(base)

    def deep_merge(target: dict, source: dict):
        for key, value in source.items():
            if key in target and isinstance(target[key], dict) and isinstance(value, dict):
                deep_merge(target[key], value)
            elif key in target and isinstance(target[key], list) and isinstance(value, list):
                target[key].extend(copy.deepcopy(item) for item in value if item not in target[key])
            else:
                target[key] = copy.deepcopy(value)

    deep_merge(result, override)

    return result


def without_keys(values: Dict[str, Any], keys: Iterable[str]) -> Dict[str, Any]:
    """Shallow copy of values without the given top-level keys"""
    excluded = set(keys)
    return {k: v for k, v in values.items() if k not in excluded}
