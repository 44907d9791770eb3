"""Path template helpers."""

import re

PLACEHOLDER_PATTERN = re.compile(r"\{([^{}/]+)\}")


def normalize_path(template: str) -> str:
    """Collapse duplicate slashes and ensure a single leading slash.

    A trailing slash is dropped (except for the root path). Placeholder
    tokens such as ``{id}`` or ``{proxy+}`` are kept verbatim.
    """
    collapsed = re.sub(r"/+", "/", template.strip())
    return "/" + collapsed.strip("/")


def path_placeholders(template: str) -> list[str]:
    """Parameter names used by a path template, in order of appearance.

    Greedy placeholders (``{proxy+}``) map to the parameter ``proxy``.
    """
    return [name.rstrip("+") for name in PLACEHOLDER_PATTERN.findall(template)]
