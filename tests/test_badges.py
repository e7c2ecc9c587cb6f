"""Badge primitives and gradient interpolation."""

import pytest

from ccsl.badges import (
    BADGE,
    GradientStops,
    badge,
    bar_badge,
    block_bar,
    gradient_badge,
    gradient_color,
    rich_badge,
)

BG_GREEN_FILL = "\033[48;2;50;110;50m"
BG_YELLOW_FILL = "\033[48;2;140;120;40m"
BG_RED_FILL = "\033[48;2;140;60;60m"
BG_EMPTY = "\033[48;2;45;48;55m"
W = "\033[97m"


# ═══════════════════════ gradient_color ═══════════════════════

class TestGradient:
    STOPS = GradientStops([
        (0, BADGE["green"]), (10, BADGE["gold"]), (50, BADGE["orange"]), (100, BADGE["rose"]),
    ])

    def test_exact_at_stops(self):
        for t, c in self.STOPS:
            assert gradient_color(self.STOPS, t) == c

    def test_clamps(self):
        assert gradient_color(self.STOPS, -5) == BADGE["green"]
        assert gradient_color(self.STOPS, 1000) == BADGE["rose"]

    def test_midpoint_rounds_half_up(self):
        stops = GradientStops([(0, (0, 0, 0)), (10, (100, 200, 255))])
        assert gradient_color(stops, 5) == (50, 100, 128)

    def test_between_stops(self):
        stops = GradientStops([(0, (0, 0, 0)), (60, (60, 120, 240)), (180, (60, 120, 0))])
        assert gradient_color(stops, 30) == (30, 60, 120)
        assert gradient_color(stops, 120) == (60, 120, 120)

    def test_plain_list_accepted(self):
        assert gradient_color([(0, (1, 2, 3)), (1, (3, 4, 5))], 0.5) == (2, 3, 4)

    def test_rejects_unordered(self):
        with pytest.raises(ValueError):
            GradientStops([(10, (0, 0, 0)), (5, (1, 1, 1))])

    def test_rejects_duplicate_threshold(self):
        with pytest.raises(ValueError):
            GradientStops([(0, (0, 0, 0)), (0, (1, 1, 1))])

    def test_rejects_empty(self):
        with pytest.raises(ValueError):
            GradientStops([])


# ═══════════════════════ badges ═══════════════════════

class TestBadges:
    def test_solid(self):
        assert badge("blue", "Opus") == "\033[48;2;38;60;100m\033[97m Opus \033[0m"

    def test_gradient(self):
        assert gradient_badge((1, 2, 3), "x") == "\033[48;2;1;2;3m\033[97m x \033[0m"

    def test_rich_has_no_padding(self):
        assert rich_badge("cyan", "x") == "\033[48;2;28;75;82m\033[97mx\033[0m"

    def test_unknown_color(self):
        with pytest.raises(KeyError):
            badge("magenta", "x")


# ═══════════════════════ bar_badge / block_bar ═══════════════════════

class TestBarBadge:
    def test_half(self):
        assert bar_badge(50, "abcd") == f"{BG_GREEN_FILL}{W}ab{BG_EMPTY}{W}cd"

    def test_empty(self):
        assert bar_badge(0, "ab") == f"{BG_EMPTY}{W}ab"

    def test_full_is_red(self):
        assert bar_badge(100, "ab") == f"{BG_RED_FILL}{W}ab"

    def test_split_rounds(self):
        # 47% of 10 chars = 4.7 -> 5
        assert bar_badge(47, "0123456789") == f"{BG_GREEN_FILL}{W}01234{BG_EMPTY}{W}56789"

    def test_context_thresholds(self):
        assert bar_badge(70, "abcdefghij").startswith(BG_YELLOW_FILL)
        assert bar_badge(85, "abcdefghij").startswith(BG_RED_FILL)

    def test_usage_thresholds(self):
        assert bar_badge(88, "abcdefghij", red_at=90).startswith(BG_YELLOW_FILL)
        assert bar_badge(90, "abcdefghij", red_at=90).startswith(BG_RED_FILL)


class TestBlockBar:
    def test_half(self):
        out = block_bar(50, 10)
        assert "█" * 5 + "\033[38;2;80;80;80m" + "░" * 5 in out
        assert out.startswith("\033[38;2;100;180;100m")

    def test_red(self):
        assert block_bar(90, 4).startswith("\033[38;2;200;100;100m")

    def test_clamped(self):
        assert block_bar(150, 4).count("█") == 4
        assert block_bar(-10, 4).count("░") == 4
