"""Mock session for previewing layouts without a live host session."""

from datetime import datetime, timedelta, timezone

from .ansi import R, fg_rgb
from .badges import block_bar
from .models import (
    AgentEntry,
    ConfigCounts,
    CurrentUsage,
    GitFileStats,
    GitInfo,
    InstinctStatus,
    LearningStatus,
    PrInfo,
    RunningTool,
    SessionInput,
    Snapshot,
    TodoItem,
    ToolAggregate,
    TranscriptData,
    UsageData,
)
from .render import build_output

DIM = fg_rgb(140, 140, 140)
FRAME = fg_rgb(90, 90, 90)


def mock_snapshot(now=None):
    now = now or datetime.now(timezone.utc)

    def ago(s):
        return now - timedelta(seconds=s)

    session = SessionInput(
        model_name="Opus",
        current_dir="/Users/dev/my-project",
        project_dir="/Users/dev/my-project",
        transcript_path="/tmp/transcript-abc123.jsonl",
        version="1.0.80",
        cost_usd=4.82,
        duration_ms=1_854_000,
        lines_added=284,
        lines_removed=67,
        context_window_size=200_000,
        current_usage=CurrentUsage(
            input_tokens=28_000,
            cache_creation_input_tokens=45_000,
            cache_read_input_tokens=22_000,
        ),
    )
    transcript = TranscriptData(
        tools=ToolAggregate(
            running=(RunningTool("Bash", "npm test --coverage"),),
            completed=(("Read", 7), ("Edit", 5), ("Grep", 4), ("Glob", 3),
                       ("Write", 2), ("Bash", 6), ("Task", 2)),
        ),
        agents=(
            AgentEntry(id="a1", type="code-reviewer", status="completed",
                       start_time=ago(45), end_time=ago(12),
                       description="Review auth implementation"),
            AgentEntry(id="a2", type="general-purpose", status="running",
                       start_time=ago(8), description="Generate test fixtures"),
        ),
        todos=(
            TodoItem("Extract types into separate module", "completed"),
            TodoItem("Refactor render pipeline", "completed"),
            TodoItem("Add rate limiting", "in_progress"),
            TodoItem("Write unit tests", "pending"),
            TodoItem("Update documentation", "pending"),
        ),
        session_start=ago(1854),
    )
    return Snapshot(
        session=session,
        git=GitInfo(
            repo="my-project",
            branch="feature/user-auth",
            ahead=2,
            file_stats=GitFileStats(modified=3, added=1, deleted=0, untracked=2),
        ),
        pr=PrInfo(
            url="https://github.com/user/my-project/pull/42",
            number="42",
            title="PROJ-123 Add user authentication",
            state="OPEN",
            merge_state_status="CLEAN",
        ),
        transcript=transcript,
        config_counts=ConfigCounts(claude_md=3, mcp=5, hooks=4),
        usage=UsageData(
            plan_name="Max",
            five_hour=34,
            seven_day=12,
            five_hour_reset_at=now + timedelta(hours=4),
            seven_day_reset_at=now + timedelta(days=5),
        ),
        learning=LearningStatus(
            recalled_this_session=True,
            auto_learn=True,
            last_learned="Feb 24",
            instincts=InstinctStatus(active=12, promotable=2, unprocessed_observations=3),
        ),
        now=now,
    )


def render_preview(config, term_width, snap=None):
    """Status line for the mock session, framed for display in a terminal."""
    snap = snap or mock_snapshot()
    max_width = min(term_width - 4, 120)
    output = build_output(snap, config, max_width, term_width)

    box = min(term_width, 130)
    pct = snap.session.percent_used
    lines = [
        f"{FRAME}╭{'─' * (box - 2)}╮{R}",
        f"{DIM}  Preview: {config.layout} layout, {len(config.rows)} rows{R}",
        "",
    ]
    lines += [f"  {line}" for line in output.split("\n") if line]
    lines += [
        "",
        f"{DIM}  context {R}{block_bar(pct)}{DIM} {pct}%{R}",
        f"{FRAME}╰{'─' * (box - 2)}╯{R}",
    ]
    return "\n".join(lines)
