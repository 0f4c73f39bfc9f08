"""Expander constants including the document marker wire format.

The marker literals below are a contract with every document that has ever
been processed. Changing any of them invalidates previously written markers.
"""

from __future__ import annotations

import re
from enum import Enum

# =============================================================================
# Update Modes
# =============================================================================


class UpdateMode(str, Enum):
    """When a marker's content is recomputed."""

    AUTO = "auto"
    MANUAL = "manual"
    ONCE = "once"
    ONCE_AND_EJECT = "once-and-eject"


class ProcessingScope(str, Enum):
    """Which update modes a replacement pass touches.

    Values:
        AUTO: Incidental runs (file changed on disk); only ``auto`` markers.
        ALL: Explicit runs requested by the user; every mode.
    """

    AUTO = "auto"
    ALL = "all"


# =============================================================================
# Marker Literals
# =============================================================================

#: Opening marker prefixes by mode
EXPANDER_OPEN = "<!-- expand: "
EXPANDER_MANUAL_OPEN = "<!-- expand-manual: "
EXPANDER_ONCE_OPEN = "<!-- expand-once: "
EXPANDER_ONCE_AND_EJECT_OPEN = "<!-- expand-once-and-eject: "

#: Suffix closing the opening marker after the key
EXPANDER_CLOSE = " -->"

#: Universal closing marker (same for all modes)
EXPANDER_END = "<!---->"

#: Marker type (as written in documents) to update mode
MARKER_TO_MODE: dict[str, UpdateMode] = {
    "expand": UpdateMode.AUTO,
    "expand-manual": UpdateMode.MANUAL,
    "expand-once": UpdateMode.ONCE,
    "expand-once-and-eject": UpdateMode.ONCE_AND_EJECT,
}

#: Update mode to opening marker prefix
MODE_TO_OPEN_MARKER: dict[UpdateMode, str] = {
    UpdateMode.AUTO: EXPANDER_OPEN,
    UpdateMode.MANUAL: EXPANDER_MANUAL_OPEN,
    UpdateMode.ONCE: EXPANDER_ONCE_OPEN,
    UpdateMode.ONCE_AND_EJECT: EXPANDER_ONCE_AND_EJECT_OPEN,
}

# =============================================================================
# Keys
# =============================================================================

#: Prefix for keys whose value updates a frontmatter property
PROPERTY_PREFIX = "prop."

#: Regular keys: kebab-case (lowercase letters, numbers, inner hyphens)
KEY_PATTERN = re.compile(r"^[a-z0-9]+(-[a-z0-9]+)*$")

#: Property keys: "prop." followed by any non-empty property name
PROP_KEY_PATTERN = re.compile(r"^prop\..*\S.*$")

# =============================================================================
# Processing
# =============================================================================

#: Number of files processed concurrently in batch operations
BATCH_SIZE: int = 5

#: Default file extensions visited when processing a directory tree
DEFAULT_FILE_EXTENSIONS: tuple[str, ...] = ("md",)

#: Default date pattern used by ``.format()`` without arguments
DEFAULT_DATE_FORMAT = "YYYY-MM-DD"
