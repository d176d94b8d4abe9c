"""Common literal values used across docsite.

These constants keep file patterns, container keywords, and output names
centralized so the pipeline, the renderer, and tests can import the same
values without drifting. Intended for internal use within the docsite package.

Examples
--------
>>> from docsite import _constants
>>> _constants.DEFAULT_INDEX_NAME
'index'
>>> sorted(_constants.DEFAULT_CONTAINER_TITLES)
['danger', 'info', 'tip', 'warning']
"""

MARKDOWN_SUFFIX = ".md"
MARKDOWN_GLOB = f"*{MARKDOWN_SUFFIX}"
DEFAULT_INDEX_NAME = "index"
DEFAULT_CONFIG_NAME = "docsite.yaml"
DEFAULT_CONTAINER_TITLES: dict[str, str] = {
    "info": "INFO",
    "tip": "TIP",
    "warning": "WARNING",
    "danger": "DANGER",
}
SINGLE_VIEW = "single"
INDEX_VIEW = "index"
INDEX_OUTPUT_NAME = "index.html"
