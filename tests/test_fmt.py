"""Unit tests for the text formatters."""

import os
from datetime import timedelta, timezone
from unittest.mock import patch

from ccsl import fmt
from ccsl.models import GitFileStats, PrInfo
from tests.helpers import NOW


# ═══════════════════════ fmt_tok ═══════════════════════

class TestFmtTok:
    def test_small(self):
        assert fmt.fmt_tok(0) == "0"
        assert fmt.fmt_tok(999) == "999"

    def test_one_decimal_below_10k(self):
        assert fmt.fmt_tok(1000) == "1.0k"
        assert fmt.fmt_tok(9500) == "9.5k"

    def test_whole_thousands(self):
        assert fmt.fmt_tok(12_000) == "12k"
        assert fmt.fmt_tok(95_999) == "95k"

    def test_negative(self):
        assert fmt.fmt_tok(-5) == "0"


# ═══════════════════════ fmt_dur ═══════════════════════

class TestFmtDur:
    def test_seconds(self):
        assert fmt.fmt_dur(42_000) == "42s"
        assert fmt.fmt_dur(0) == "0s"

    def test_minutes_with_seconds(self):
        assert fmt.fmt_dur(65_000) == "1m 5s"
        assert fmt.fmt_dur(60_000) == "1m"

    def test_ten_minutes_drops_seconds(self):
        assert fmt.fmt_dur(600_000) == "10m"
        assert fmt.fmt_dur(1_854_000) == "30m"

    def test_hours(self):
        assert fmt.fmt_dur(3_600_000) == "1h"
        assert fmt.fmt_dur(8_040_000) == "2h 14m"

    def test_negative(self):
        assert fmt.fmt_dur(-1000) == "0s"


# ═══════════════════════ fmt_until ═══════════════════════

class TestFmtUntil:
    def test_hours_minutes(self):
        assert fmt.fmt_until(NOW + timedelta(hours=4, minutes=12), NOW) == "4h 12m"

    def test_whole_hours(self):
        assert fmt.fmt_until(NOW + timedelta(hours=4), NOW) == "4h"

    def test_minutes(self):
        assert fmt.fmt_until(NOW + timedelta(minutes=30, seconds=20), NOW) == "30m"

    def test_passed(self):
        assert fmt.fmt_until(NOW - timedelta(minutes=1), NOW) == "now"
        assert fmt.fmt_until(NOW, NOW) == "now"

    def test_unknown(self):
        assert fmt.fmt_until(None, NOW) == ""


# ═══════════════════════ cost / stats / truncation ═══════════════════════

class TestSmallFormatters:
    def test_cost(self):
        assert fmt.fmt_cost(4.82) == "$4.82"
        assert fmt.fmt_cost(0) == "$0.00"
        assert fmt.fmt_cost(10) == "$10"
        assert fmt.fmt_cost(57.9) == "$57"

    def test_file_stats(self):
        assert fmt.fmt_file_stats(GitFileStats(modified=3, added=1, deleted=0, untracked=2)) == "!3+1?2"
        assert fmt.fmt_file_stats(GitFileStats(deleted=2)) == "✘2"
        assert fmt.fmt_file_stats(GitFileStats()) == ""
        assert fmt.fmt_file_stats(None) == ""

    def test_ellipsize(self):
        assert fmt.ellipsize("a" * 25, 24, 25) == "a" * 25
        assert fmt.ellipsize("a" * 26, 24, 25) == "a" * 24 + "…"
        assert fmt.ellipsize("Review auth implementation", 25) == "Review auth implementatio…"


class TestRelativePath:
    def test_under_cwd(self):
        assert fmt.relative_path("/work/proj/src/a.py", "/work/proj") == "src/a.py"
        assert fmt.relative_path("/work/proj/src/a.py", "/work/proj/") == "src/a.py"

    def test_under_home(self):
        with patch.dict(os.environ, {"HOME": "/home/u"}):
            assert fmt.relative_path("/home/u/notes.md", "/work/proj") == "~/notes.md"

    def test_elsewhere(self):
        with patch.dict(os.environ, {"HOME": "/home/u"}):
            assert fmt.relative_path("/etc/hosts", "/work/proj") == "/etc/hosts"
            assert fmt.relative_path("*.py", "/work/proj") == "*.py"


# ═══════════════════════ tool names ═══════════════════════

class TestToolNames:
    def test_short_mcp_name(self):
        assert fmt.short_mcp_name("mcp__plugin_playwright_playwright__browser_click") == "playwright"
        assert fmt.short_mcp_name("mcp__github__create_issue") == "github"
        assert fmt.short_mcp_name("mcp__broken") == "mcp__broken"

    def test_display_name(self):
        assert fmt.tool_display_name("mcp__plugin_playwright_playwright__browser_click") == "playwright:click"
        assert fmt.tool_display_name("Read") == "Read"


# ═══════════════════════ PR ═══════════════════════

class TestPr:
    def pr(self, **kw):
        return PrInfo(url="https://x/pull/1", number="1", **kw)

    def test_ticket_marker(self):
        assert fmt.ticket_marker("PROJ-123 Add user authentication") == "PROJ-123"
        assert fmt.ticket_marker("Add PROJ-123") is None
        assert fmt.ticket_marker("A-1 too short") is None
        assert fmt.ticket_marker("ABCDEFG-1 too long") is None
        assert fmt.ticket_marker(None) is None

    def test_open_clean(self):
        assert fmt.pr_status_suffix(self.pr(state="OPEN", merge_state_status="CLEAN")) == " (✅)"

    def test_draft_wins(self):
        assert fmt.pr_status_suffix(self.pr(is_draft=True)) == " (D)"
        assert fmt.pr_status_suffix(self.pr(is_draft=True, state="MERGED")) == " (D)"

    def test_other_states(self):
        assert fmt.pr_status_suffix(self.pr(state="MERGED")) == " (M)"
        assert fmt.pr_status_suffix(self.pr(state="CLOSED")) == " (C)"
        assert fmt.pr_status_suffix(self.pr(state="OPEN", merge_state_status="BLOCKED")) == " (O)"
        assert fmt.pr_status_suffix(self.pr()) == ""


# ═══════════════════════ parse_iso ═══════════════════════

class TestParseIso:
    def test_z_suffix(self):
        dt = fmt.parse_iso("2026-02-14T20:30:00Z")
        assert dt.tzinfo == timezone.utc
        assert dt.hour == 20

    def test_fractional(self):
        assert fmt.parse_iso("2026-02-14T20:30:00.123Z").minute == 30

    def test_naive_is_utc(self):
        assert fmt.parse_iso("2026-02-14T20:30:00").tzinfo == timezone.utc

    def test_junk(self):
        assert fmt.parse_iso(None) is None
        assert fmt.parse_iso("") is None
        assert fmt.parse_iso("null") is None
        assert fmt.parse_iso("not a date") is None
