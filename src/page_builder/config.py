"""Configuration constants for page-builder."""

import os
from pathlib import Path
from typing import Any

# Containers that accept form-field components anywhere below them.
FORM_CONTAINER_TYPES: frozenset[str] = frozenset({"Form", "SearchForm"})

# Form-field components. Only legal below one of FORM_CONTAINER_TYPES.
FORM_ITEM_TYPES: frozenset[str] = frozenset(
    {
        "FormItem",
        "Input",
        "InputNumber",
        "InputPassword",
        "TextArea",
        "Select",
        "TreeSelect",
        "Cascader",
        "Radio",
        "Checkbox",
        "Switch",
        "Slider",
        "Rate",
        "DatePicker",
        "DatePickerRange",
        "TimePicker",
        "TimePickerRange",
        "ColorPicker",
        "Upload",
    }
)

# Levels of declarative default children materialized for one drop.
# Guards against component schemas that (directly or not) declare themselves.
MAX_MATERIALIZE_DEPTH: int = 8

# Remote page API.
PAGE_API_URL: str = os.environ.get("PAGE_BUILDER_API_URL", "http://localhost:5000/api")

# API token location. First file found is used.
API_TOKEN_FILES: list[Path] = [
    Path("~/.config/page-builder-token.txt").expanduser(),
    Path("~/.config/secret/page-builder-token.txt").expanduser(),
    Path(f"/run/user/{os.getuid()}/page-builder-token"),
]

# Cache prefix for API responses, used only when the client is created with from_cache.
API_CACHE_PREFIX: str = "/tmp/page-builder-cache/cache-"

# Directory with page records. First directory which is found is used.
DATA_DIRECTORIES: list[Path] = [
    Path("~/.local/share/page-builder").expanduser(),
    Path("~/.page-builder").expanduser(),
    Path("/tmp/page-builder"),
]

# Record keys holding serialized element data, in lookup order.
PAGE_DATA_FIELDS: tuple[str, ...] = ("pageData", "elementsJSON")

DEFAULT_THEME: str = "#1677ff"

# Page-level defaults, overlaid by whatever the stored page data carries.
DEFAULT_PAGE_CONFIG: dict[str, Any] = {
    "props": {"theme": DEFAULT_THEME},
    "style": {},
    "scopeCss": "",
    "scopeStyle": {},
}
DEFAULT_PAGE_EVENTS: list[dict[str, Any]] = []


def resolve_data_directory() -> Path:
    """Return the first existing data directory, or the first candidate."""
    for candidate in DATA_DIRECTORIES:
        if candidate.is_dir():
            return candidate
    return DATA_DIRECTORIES[0]
