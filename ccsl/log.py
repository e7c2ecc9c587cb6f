"""stderr diagnostics, silent unless CCSL_DEBUG is set.

The host UI renders stdout verbatim and ignores stderr, so failures in
optional collectors are reported here rather than breaking the status line.
"""

import os
import sys


def debug_enabled():
    return os.environ.get("CCSL_DEBUG", "") not in ("", "0", "false")


def warn(msg):
    if debug_enabled():
        print(f"[ccsl] {msg}", file=sys.stderr)
