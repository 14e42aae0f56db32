"""PyYAML loader and dumper restricted to JSON-compatible values."""

from typing import Any

import yaml


TIMESTAMP_TAG = "tag:yaml.org,2002:timestamp"


class JsonCompatibleLoader(yaml.SafeLoader):
    """Safe loader that keeps timestamps as plain strings."""


JsonCompatibleLoader.yaml_implicit_resolvers = {
    first_char: [(tag, regexp) for tag, regexp in resolvers if tag != TIMESTAMP_TAG]
    for first_char, resolvers in yaml.SafeLoader.yaml_implicit_resolvers.items()
}


def load_yaml(text: str) -> Any:
    """Load YAML text into JSON-compatible values."""
    return yaml.load(text, Loader=JsonCompatibleLoader)


def dump_yaml(value: Any) -> str:
    """Dump a value as block-style YAML, keeping key order."""
    return yaml.safe_dump(value, sort_keys=False, allow_unicode=True, default_flow_style=False)
