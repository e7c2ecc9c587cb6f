"""Badge primitives: solid, rich, gradient and split-fill bar badges."""

import math

from .ansi import R, FG_WHITE, bg_rgb, fg_rgb

# ═══════════════════════ PALETTE ═══════════════════════

BADGE = {
    "blue":     (38, 60, 100),
    "green":    (38, 75, 48),
    "orange":   (95, 58, 28),
    "purple":   (65, 45, 88),
    "cyan":     (28, 75, 82),
    "rose":     (90, 38, 50),
    "gold":     (85, 70, 28),
    "steel":    (52, 56, 66),
    "olive":    (58, 68, 32),
    "charcoal": (46, 48, 54),
}

# Split-fill bar backgrounds
BAR_RED = (140, 60, 60)
BAR_YELLOW = (140, 120, 40)
BAR_GREEN = (50, 110, 50)
BAR_EMPTY = (45, 48, 55)

# Block bar foregrounds
BLOCK_RED = fg_rgb(200, 100, 100)
BLOCK_YELLOW = fg_rgb(200, 180, 80)
BLOCK_GREEN = fg_rgb(100, 180, 100)
BLOCK_EMPTY = fg_rgb(80, 80, 80)


def round_half_up(x):
    return int(math.floor(x + 0.5))


# ═══════════════════════ GRADIENTS ═══════════════════════

class GradientStops:
    """Ordered (threshold, rgb) stops with strictly ascending thresholds.

    Validated once here so interpolation never has to re-check ordering.
    """

    __slots__ = ("stops",)

    def __init__(self, stops):
        stops = tuple((t, tuple(c)) for t, c in stops)
        if not stops:
            raise ValueError("gradient needs at least one stop")
        for (a, _), (b, _) in zip(stops, stops[1:]):
            if not a < b:
                raise ValueError(f"gradient thresholds must ascend: {a} then {b}")
        for _, c in stops:
            if len(c) != 3:
                raise ValueError(f"gradient color must be an RGB triple: {c!r}")
        self.stops = stops

    def __iter__(self):
        return iter(self.stops)

    def __len__(self):
        return len(self.stops)

    def __repr__(self):
        return f"GradientStops({list(self.stops)!r})"


def _channel(v):
    return max(0, min(255, round_half_up(v)))


def lerp_color(a, b, t):
    return tuple(_channel(x + (y - x) * t) for x, y in zip(a, b))


def gradient_color(stops, value):
    """Piecewise-linear RGB at `value`, clamped to the end colors."""
    if not isinstance(stops, GradientStops):
        stops = GradientStops(stops)
    pts = stops.stops
    if value <= pts[0][0]:
        return pts[0][1]
    if value >= pts[-1][0]:
        return pts[-1][1]
    for (t0, c0), (t1, c1) in zip(pts, pts[1:]):
        if value <= t1:
            return lerp_color(c0, c1, (value - t0) / (t1 - t0))
    return pts[-1][1]


# ═══════════════════════ BADGES ═══════════════════════

def color_segment(rgb, text):
    r, g, b = rgb
    return f"{bg_rgb(r, g, b)}{FG_WHITE} {text} {R}"


def badge(color, text):
    """Palette background, white text, one space of padding each side."""
    return color_segment(BADGE[color], text)


def gradient_badge(rgb, text):
    return color_segment(rgb, text)


def rich_badge(color, text):
    """Like badge() but the caller owns the padding, so `text` may carry its
    own color changes (inline bars, colored counts)."""
    r, g, b = BADGE[color]
    return f"{bg_rgb(r, g, b)}{FG_WHITE}{text}{R}"


def fill_color(percent, red_at, yellow_at):
    if percent >= red_at:
        return BAR_RED
    if percent >= yellow_at:
        return BAR_YELLOW
    return BAR_GREEN


def bar_badge(percent, label, red_at=85, yellow_at=70):
    """Render `label` as a bar: the first round(percent% of len) characters
    sit on the fill color, the rest on the empty background.

    No trailing reset, it is meant to be embedded in a rich_badge().
    """
    split = round_half_up(percent / 100 * len(label))
    split = max(0, min(len(label), split))
    filled, empty = label[:split], label[split:]
    out = ""
    if filled:
        out += f"{bg_rgb(*fill_color(percent, red_at, yellow_at))}{FG_WHITE}{filled}"
    if empty:
        out += f"{bg_rgb(*BAR_EMPTY)}{FG_WHITE}{empty}"
    return out


def block_bar(percent, width=10, red_at=85, yellow_at=70):
    """Literal █/░ bar colored by threshold."""
    pct = max(0, min(100, percent))
    filled = round_half_up(pct / 100 * width)
    if percent >= red_at:
        color = BLOCK_RED
    elif percent >= yellow_at:
        color = BLOCK_YELLOW
    else:
        color = BLOCK_GREEN
    return f"{color}{'█' * filled}{BLOCK_EMPTY}{'░' * (width - filled)}{R}"
