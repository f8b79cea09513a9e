"""
Variable substitution service for replacing {{variable}} placeholders.

Placeholders may appear in a test's URL, header values and anywhere
inside its JSON body.
"""

import re
from typing import Any, List, Tuple


# Pattern to match {{variable_name}} placeholders
VARIABLE_PATTERN = re.compile(r'\{\{(\w+)\}\}')


def extract_variables(template: str) -> List[str]:
    """
    Extract all variable names from a template string.

    Example:
        >>> extract_variables("Hello {{name}}, your id is {{id}}")
        ['name', 'id']
    """
    if not template:
        return []

    return VARIABLE_PATTERN.findall(template)


def substitute(template: str, variables: dict[str, str]) -> Tuple[str, List[str]]:
    """
    Replace variable placeholders in a template with their values.

    Every occurrence of a known placeholder is replaced. Unknown
    placeholders are left in place and reported.

    Args:
        template: String containing {{variable}} placeholders
        variables: Dictionary mapping variable names to their values

    Returns:
        Tuple of (substituted string, list of unmatched variable names)

    Example:
        >>> substitute("Hello {{name}}", {"name": "World"})
        ('Hello World', [])
        >>> substitute("Hello {{name}}", {})
        ('Hello {{name}}', ['name'])
    """
    if not template:
        return template, []

    unmatched: List[str] = []

    def replace_match(match: re.Match) -> str:
        var_name = match.group(1)
        if var_name in variables:
            return str(variables[var_name])
        unmatched.append(var_name)
        return match.group(0)

    result = VARIABLE_PATTERN.sub(replace_match, template)
    return result, unmatched


def substitute_dict(data: dict[str, str], variables: dict[str, str]) -> Tuple[dict[str, str], List[str]]:
    """Replace variable placeholders in all values of a dictionary."""
    if not data:
        return data, []

    result = {}
    all_unmatched: List[str] = []

    for key, value in data.items():
        substituted_value, unmatched = substitute(value, variables)
        result[key] = substituted_value
        all_unmatched.extend(unmatched)

    return result, all_unmatched


def substitute_value(value: Any, variables: dict[str, str]) -> Tuple[Any, List[str]]:
    """
    Replace placeholders inside every string of a JSON value.

    Dict keys are left untouched; numbers, booleans and None pass through.
    """
    if isinstance(value, str):
        return substitute(value, variables)

    unmatched: List[str] = []
    if isinstance(value, dict):
        result = {}
        for key, item in value.items():
            result[key], item_unmatched = substitute_value(item, variables)
            unmatched.extend(item_unmatched)
        return result, unmatched
    if isinstance(value, list):
        items = []
        for item in value:
            substituted, item_unmatched = substitute_value(item, variables)
            items.append(substituted)
            unmatched.extend(item_unmatched)
        return items, unmatched

    return value, unmatched
