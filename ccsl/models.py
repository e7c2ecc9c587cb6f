"""Immutable session snapshot.

The stdin payload becomes a `SessionInput`; collectors add the optional
enrichment records; a `Snapshot` bundles them for one render. Any enrichment
may be None, in which case its badges are simply absent.
"""

import math
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional, Tuple


@dataclass(frozen=True)
class CurrentUsage:
    input_tokens: int = 0
    cache_creation_input_tokens: int = 0
    cache_read_input_tokens: int = 0

    @property
    def total(self):
        return self.input_tokens + self.cache_creation_input_tokens + self.cache_read_input_tokens


@dataclass(frozen=True)
class SessionInput:
    model_name: str = ""
    current_dir: str = ""
    project_dir: str = ""
    transcript_path: str = ""
    output_style: Optional[str] = None
    version: str = ""
    cost_usd: float = 0.0
    duration_ms: int = 0
    lines_added: int = 0
    lines_removed: int = 0
    context_window_size: int = 0
    current_usage: Optional[CurrentUsage] = None

    @property
    def workdir(self):
        return self.current_dir or self.project_dir

    @property
    def current_tokens(self):
        return self.current_usage.total if self.current_usage else 0

    @property
    def percent_used(self):
        if not self.context_window_size:
            return 0
        return self.current_tokens * 100 // self.context_window_size


@dataclass(frozen=True)
class GitFileStats:
    modified: int = 0
    added: int = 0
    deleted: int = 0
    untracked: int = 0

    @property
    def dirty(self):
        return self.modified + self.added + self.deleted + self.untracked


@dataclass(frozen=True)
class GitInfo:
    repo: str
    branch: Optional[str] = None
    worktree: Optional[str] = None
    ahead: int = 0
    behind: int = 0
    file_stats: Optional[GitFileStats] = None


@dataclass(frozen=True)
class PrInfo:
    url: str
    number: str
    title: Optional[str] = None
    is_draft: bool = False
    state: Optional[str] = None
    merge_state_status: Optional[str] = None


@dataclass(frozen=True)
class RunningTool:
    name: str
    target: Optional[str] = None


@dataclass(frozen=True)
class ToolAggregate:
    running: Tuple[RunningTool, ...] = ()
    completed: Tuple[Tuple[str, int], ...] = ()   # (name, count), first-completion order


@dataclass(frozen=True)
class AgentEntry:
    id: str
    type: str
    status: str                       # "running" | "completed"
    start_time: datetime
    description: Optional[str] = None
    model: Optional[str] = None
    end_time: Optional[datetime] = None


@dataclass(frozen=True)
class TodoItem:
    subject: str
    status: str                       # "pending" | "in_progress" | "completed"


@dataclass(frozen=True)
class TranscriptData:
    tools: ToolAggregate = field(default_factory=ToolAggregate)
    agents: Tuple[AgentEntry, ...] = ()
    todos: Tuple[TodoItem, ...] = ()
    session_start: Optional[datetime] = None


@dataclass(frozen=True)
class ConfigCounts:
    claude_md: int = 0
    mcp: int = 0
    hooks: int = 0


@dataclass(frozen=True)
class UsageData:
    plan_name: Optional[str] = None
    five_hour: Optional[int] = None
    seven_day: Optional[int] = None
    five_hour_reset_at: Optional[datetime] = None
    seven_day_reset_at: Optional[datetime] = None
    api_unavailable: bool = False


@dataclass(frozen=True)
class InstinctStatus:
    active: int = 0
    promotable: int = 0
    corrections: int = 0
    unprocessed_observations: int = 0


@dataclass(frozen=True)
class LearningStatus:
    recalled_this_session: bool = False
    learning_pending: bool = False
    auto_learn: bool = False
    last_learned: Optional[str] = None
    instincts: Optional[InstinctStatus] = None


@dataclass(frozen=True)
class Snapshot:
    session: SessionInput
    git: Optional[GitInfo] = None
    pr: Optional[PrInfo] = None
    transcript: Optional[TranscriptData] = None
    config_counts: Optional[ConfigCounts] = None
    usage: Optional[UsageData] = None
    learning: Optional[LearningStatus] = None
    remote_control: bool = False
    now: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


# ═══════════════════════ STDIN PAYLOAD ═══════════════════════

def _obj(d, key):
    v = d.get(key) if isinstance(d, dict) else None
    return v if isinstance(v, dict) else {}


def _int(v):
    try:
        return int(v or 0)
    except (TypeError, ValueError, OverflowError):
        return 0


def _float(v):
    try:
        f = float(v or 0)
    except (TypeError, ValueError):
        return 0.0
    return f if math.isfinite(f) else 0.0


def _str(v):
    return v if isinstance(v, str) else ""


def parse_session(data):
    """Build a SessionInput from the host's statusline JSON.

    Missing or mistyped fields fall back to zero/empty values; only a payload
    that is not a JSON object at all is rejected.
    """
    if not isinstance(data, dict):
        raise ValueError("statusline payload must be a JSON object")

    model = _obj(data, "model")
    ws = _obj(data, "workspace")
    cost = _obj(data, "cost")
    ctx = _obj(data, "context_window")
    style = _obj(data, "output_style")

    cu = ctx.get("current_usage")
    usage = None
    if isinstance(cu, dict):
        usage = CurrentUsage(
            input_tokens=_int(cu.get("input_tokens")),
            cache_creation_input_tokens=_int(cu.get("cache_creation_input_tokens")),
            cache_read_input_tokens=_int(cu.get("cache_read_input_tokens")),
        )

    return SessionInput(
        model_name=_str(model.get("display_name")) or _str(model.get("id")),
        current_dir=_str(ws.get("current_dir")) or _str(data.get("cwd")),
        project_dir=_str(ws.get("project_dir")),
        transcript_path=_str(data.get("transcript_path")),
        output_style=_str(style.get("name")) or None,
        version=_str(data.get("version")),
        cost_usd=_float(cost.get("total_cost_usd")),
        duration_ms=_int(cost.get("total_duration_ms")),
        lines_added=_int(cost.get("total_lines_added")),
        lines_removed=_int(cost.get("total_lines_removed")),
        context_window_size=_int(ctx.get("context_window_size")),
        current_usage=usage,
    )
