"""Document markers: scanning, rewriting, and frontmatter updates.

Marker grammar::

    <!-- expand: key -->value<!---->
    <!-- expand-manual: key -->value<!---->
    <!-- expand-once: key -->value<!---->
    <!-- expand-once-and-eject: key -->

Module Structure
----------------
- keys.py: Key validation and ``prop.*`` helpers
- scanner.py: Complete and incomplete marker detection
- frontmatter.py: Frontmatter read/write
- engine.py: Replacement passes over a document
"""

from __future__ import annotations

from expander.markers.engine import (
    KeyResolver,
    PropertyUpdate,
    ReplacementResult,
    apply_property_updates,
    replace_expansions,
    replace_single_expansion,
)
from expander.markers.frontmatter import (
    StructuredHeader,
    format_yaml_value,
    get_structured_header_property,
    read_structured_header,
    write_structured_header_property,
)
from expander.markers.keys import (
    get_property_name,
    is_property_key,
    is_valid_key,
    normalize_key,
    validate_key,
)
from expander.markers.scanner import (
    ExpanderMatch,
    IncompleteExpansion,
    build_open_marker,
    scan_complete,
    scan_incomplete,
)

__all__: list[str] = [
    # Keys
    "is_valid_key",
    "is_property_key",
    "get_property_name",
    "normalize_key",
    "validate_key",
    # Scanner
    "ExpanderMatch",
    "IncompleteExpansion",
    "build_open_marker",
    "scan_complete",
    "scan_incomplete",
    # Frontmatter
    "StructuredHeader",
    "read_structured_header",
    "write_structured_header_property",
    "get_structured_header_property",
    "format_yaml_value",
    # Engine
    "KeyResolver",
    "PropertyUpdate",
    "ReplacementResult",
    "replace_expansions",
    "replace_single_expansion",
    "apply_property_updates",
]
