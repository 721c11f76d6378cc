"""Route parameter names and placeholder grammar.

``{name}`` matches ``DEFAULT_PLACEHOLDER_PATTERN``; ``{name:regex}`` uses
the given expression. Every route ends with ``EXTENSION_PLACEHOLDER``.
"""

import re

# Parameters every route knows about, whether or not its pattern uses them.
CONFIGURABLE_PARAMS: tuple[str, ...] = ("plugin", "controller", "prefix", "action", "extension")

DEFAULT_PLACEHOLDER_PATTERN = r"[a-z_-]+"

EXTENSION_PLACEHOLDER = r"{extension:(\.\w+)?}"

# Regex group names cannot contain dots; nested names use this instead.
PARAMETER_PATH_SEPARATOR = "___"

PLACEHOLDER = re.compile(r"\{(?P<name>[\w.]+)(?::(?P<pattern>[^}]+))?\}")


def to_group_name(name: str) -> str:
    """``post.id`` -> ``post___id``."""
    return name.replace(".", PARAMETER_PATH_SEPARATOR)


def from_group_name(name: str) -> str:
    """``post___id`` -> ``post.id``."""
    return name.replace(PARAMETER_PATH_SEPARATOR, ".")


def is_configurable(name: str) -> bool:
    return name.lower() in CONFIGURABLE_PARAMS
