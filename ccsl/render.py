"""Row layout and final output assembly.

build_rows() walks the configured rows, concatenates each row's group badges
and wraps them against the width budget; build_output() hardens the lines for
redraw inside the host UI.
"""

from .ansi import (
    CLEAR_LINE,
    ERASE_EOL,
    R,
    RESET_BG,
    RESET_FG,
    fg_rgb,
    harden_spaces,
    strip_emojis,
    visible_width,
)
from .config import SEPARATOR, FlexMode
from .groups import build_group

RULE_COLOR = fg_rgb(60, 60, 60)
RULE_MAX = 60
LINE_BREAK = R + ERASE_EOL + "\n"

HOST_PADDING = 4        # Columns the host UI reserves around the status line
COMPACT_RESERVE = 40    # Columns left free for host notifications
MAX_WIDTH = 140
MIN_WIDTH = 20
ASCII_COLS = 80         # Below this terminal width, emoji become ASCII


def join_with_wrap(badges, max_width):
    """Join badges left to right, breaking before a badge that would push a
    non-empty line past `max_width`. max_width <= 0 disables wrapping."""
    if max_width <= 0:
        return "".join(badges)
    out = []
    line_width = 0
    for b in badges:
        w = visible_width(b)
        if line_width > 0 and line_width + w > max_width:
            out.append(LINE_BREAK)
            line_width = 0
        out.append(b + R + " ")
        line_width += w + 1
    return "".join(out)


def rule(max_width):
    n = min(max_width or RULE_MAX, RULE_MAX)
    return f"{RULE_COLOR}{'─' * n}{R}"


def build_rows(snap, config, max_width=0):
    """Rendered lines, one per non-empty row (wrapped rows embed newlines).

    Each group is built at most once per call and shared by every row that
    lists it.
    """
    cache = {}

    def badges_for(group):
        if group not in cache:
            cache[group] = build_group(group, snap, config)
        return cache[group]

    lines = []
    for row in config.rows:
        if row == SEPARATOR:
            lines.append(rule(max_width))
            continue
        badges = [b for g in row for b in badges_for(g)]
        if badges:
            lines.append(join_with_wrap(badges, max_width))
    return lines


def build_output(snap, config, max_width=0, term_width=0):
    """Full status line text, ready to write to stdout."""
    lines = build_rows(snap, config, max_width)
    if 0 < term_width < ASCII_COLS:
        lines = [strip_emojis(line) for line in lines]

    out = "\n".join(R + harden_spaces(line + R + ERASE_EOL) for line in lines)
    out = CLEAR_LINE + out + R + RESET_BG + RESET_FG
    if "\n" not in out:
        out += "\n"
    return out


def effective_width(term_width, config, percent_used=0):
    """Column budget for wrapping under the configured flex mode."""
    if term_width <= 0:
        return 0
    mode = config.flex_mode
    if mode == FlexMode.FULL_MINUS_40:
        width = term_width - COMPACT_RESERVE
    elif mode == FlexMode.FULL_UNTIL_COMPACT and percent_used >= config.compact_threshold:
        width = term_width - int(config.flex_padding)
    else:
        width = term_width - HOST_PADDING
    return max(min(width, MAX_WIDTH), min(term_width, MIN_WIDTH))
