"""Plain-text formatters shared by the badge builders."""

import os
import re
from datetime import datetime, timezone

_TICKET_RE = re.compile(r"^([A-Z]{2,6}-\d{1,5})")


def fmt_tok(n):
    """Token count: 950, 9.5k, 95k."""
    n = max(0, int(n))
    if n >= 1000:
        k = n / 1000
        return f"{int(k)}k" if k >= 10 else f"{k:.1f}k"
    return str(n)


def fmt_dur(ms):
    """Duration: 2h 14m, 2h, 14m, 3m 5s, 42s."""
    s = max(0, int(ms)) // 1000
    h, m, sec = s // 3600, s % 3600 // 60, s % 60
    if h:
        return f"{h}h {m}m" if m else f"{h}h"
    if m >= 10:
        return f"{m}m"
    if m:
        return f"{m}m {sec}s" if sec else f"{m}m"
    return f"{sec}s"


def fmt_until(when, now=None):
    """Time left until `when`: 4h 12m, 4h, 12m, or "now" once passed."""
    if when is None:
        return ""
    now = now or datetime.now(timezone.utc)
    diff = (when - now).total_seconds()
    if diff <= 0:
        return "now"
    h = int(diff // 3600)
    m = int(diff % 3600 // 60)
    if h:
        return f"{h}h {m}m" if m else f"{h}h"
    return f"{m}m"


def fmt_cost(cost):
    return f"${int(cost)}" if cost >= 10 else f"${cost:.2f}"


def fmt_file_stats(stats):
    """!modified +added ✘deleted ?untracked, zero counts left out."""
    if stats is None:
        return ""
    parts = []
    if stats.modified > 0:
        parts.append(f"!{stats.modified}")
    if stats.added > 0:
        parts.append(f"+{stats.added}")
    if stats.deleted > 0:
        parts.append(f"✘{stats.deleted}")
    if stats.untracked > 0:
        parts.append(f"?{stats.untracked}")
    return "".join(parts)


def ellipsize(text, keep, limit=None):
    """First `keep` characters plus … once `text` is longer than `limit`
    (defaults to `keep`)."""
    limit = keep if limit is None else limit
    return text[:keep] + "…" if len(text) > limit else text


def relative_path(path, cwd):
    """Path relative to cwd, or ~-prefixed under $HOME, else unchanged."""
    if cwd:
        base = cwd if cwd.endswith("/") else cwd + "/"
        if path.startswith(base):
            return path[len(base):]
    home = os.path.expanduser("~")
    if home and home != "~" and path.startswith(home + "/"):
        return "~" + path[len(home):]
    return path


def short_mcp_name(full_name):
    """mcp__plugin_playwright_playwright__click -> playwright."""
    parts = full_name.split("__")
    if len(parts) < 3:
        return full_name
    server = parts[1]
    words = [w for w in re.split(r"[-_]", server) if w]
    unique = list(dict.fromkeys(words))
    return unique[-1] if unique else server


def tool_display_name(full_name):
    """Builtin names as-is, MCP tools as server:action."""
    if not full_name.startswith("mcp__"):
        return full_name
    parts = full_name.split("__")
    if len(parts) < 3:
        return full_name
    action = re.sub(r"^browser_", "", "_".join(parts[2:]))
    return f"{short_mcp_name(full_name)}:{action}"


def ticket_marker(title):
    """Leading ticket id such as PROJ-123, or None."""
    m = _TICKET_RE.match(title or "")
    return m.group(1) if m else None


def pr_status_suffix(pr):
    if pr.is_draft:
        return " (D)"
    if pr.state == "MERGED":
        return " (M)"
    if pr.state == "CLOSED":
        return " (C)"
    if pr.state == "OPEN":
        return " (✅)" if pr.merge_state_status == "CLEAN" else " (O)"
    return ""


def parse_iso(s):
    """Parse ISO 8601 to an aware datetime (UTC if no offset). None on junk."""
    if not s or s in ("null", ""):
        return None
    try:
        dt = datetime.fromisoformat(str(s).replace("Z", "+00:00"))
    except (ValueError, TypeError):
        return None
    return dt if dt.tzinfo else dt.replace(tzinfo=timezone.utc)
