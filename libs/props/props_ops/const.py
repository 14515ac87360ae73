from __future__ import annotations

MD_GLOB = "**/*.md"
MD_SUFFIX = ".md"

YAML_FM_DELIM = "---"
INDENT = "  "  # nested blocks and block scalars

# Aggregation
MAX_EXAMPLES = 3

# Template lookup
DEFAULT_FUZZY_THRESHOLD = 55.0

# Value previews
PREVIEW_MAX_LEN = 30
PREVIEW_CUT = 27
