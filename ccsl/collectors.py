"""Enrichment collectors: git, PR, transcript, config counts, usage, learning.

Every collector degrades to None (or an empty record) on failure; the
renderer treats missing data as "no badges". gather() runs the independent
ones concurrently, the way the cache prewarm used to.
"""

import json
import os
import re
import subprocess
import time
from concurrent.futures import ThreadPoolExecutor
from datetime import date, datetime, timedelta, timezone
from pathlib import Path

from .fmt import parse_iso
from .log import warn
from .models import (
    AgentEntry,
    ConfigCounts,
    GitFileStats,
    GitInfo,
    PrInfo,
    RunningTool,
    Snapshot,
    TodoItem,
    ToolAggregate,
    TranscriptData,
    UsageData,
    LearningStatus,
)

CLAUDE_DIR = Path("~/.claude").expanduser()
USAGE_CACHE = CLAUDE_DIR / "plugins" / "ccsl" / ".usage-cache.json"
USAGE_TTL = 60               # sec
USAGE_FAILURE_TTL = 15       # sec, after the usage API was unreachable
GIT_TIMEOUT = 5
GH_TIMEOUT = 10
MAX_AGENTS = 10
RECALL_WINDOW = 300          # sec, when the session start is unknown


# ═══════════════════════ HELPERS ═══════════════════════

def rjson(path):
    """Safely read JSON from file."""
    try:
        if path.exists() and path.stat().st_size > 0:
            return json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError, RecursionError):
        pass
    return None


def run(args, cwd=None, timeout=GIT_TIMEOUT):
    """stdout of a command, or None if it failed or is missing."""
    try:
        r = subprocess.run(args, cwd=cwd or None, capture_output=True, text=True, timeout=timeout)
    except (OSError, subprocess.SubprocessError):
        return None
    if r.returncode != 0:
        return None
    return r.stdout


def detect_cols():
    """Detect terminal width with safe fallbacks."""
    for env in ("STATUSLINE_COLS", "COLUMNS"):
        v = os.environ.get(env, "")
        if v.isdigit() and int(v) > 0:
            return int(v)
    # /dev/tty gives the real width even when stdout is a pipe
    try:
        fd = os.open("/dev/tty", os.O_RDONLY)
        try:
            return os.get_terminal_size(fd).columns
        finally:
            os.close(fd)
    except OSError:
        pass
    return 80


# ═══════════════════════ GIT ═══════════════════════

def git(cwd, *args):
    out = run(["git", "-C", cwd, *args])
    return out.strip() if out is not None else None


def parse_porcelain(text):
    modified = added = deleted = untracked = 0
    for line in text.splitlines():
        if not line:
            continue
        code = line[:2]
        if "?" in code:
            untracked += 1
        elif "A" in code:
            added += 1
        elif "D" in code:
            deleted += 1
        elif any(c in code for c in "MRC"):
            modified += 1
    return GitFileStats(modified, added, deleted, untracked)


def git_file_stats(cwd):
    out = run(["git", "-C", cwd, "status", "--porcelain"])
    return parse_porcelain(out or "")


def git_ahead_behind(cwd):
    ahead = git(cwd, "rev-list", "--count", "@{u}..HEAD")
    behind = git(cwd, "rev-list", "--count", "HEAD..@{u}")
    try:
        return int(ahead or 0), int(behind or 0)
    except ValueError:
        return 0, 0


def repo_from_common_dir(common_dir):
    """Repo name from a linked worktree's common dir (/x/repo/.git -> repo)."""
    d = common_dir.strip().rstrip("/")
    if not d.endswith("/.git") and d != ".git":
        return None
    name = d[: -len(".git")].rstrip("/").rsplit("/", 1)[-1]
    return name or None


def linked_common_dir(cwd):
    git_dir = git(cwd, "rev-parse", "--git-dir")
    common = git(cwd, "rev-parse", "--git-common-dir")
    if git_dir is None or common is None or git_dir == common:
        return None
    return common


def fetch_git(cwd):
    if not cwd:
        return None
    top = git(cwd, "rev-parse", "--show-toplevel")
    if not top:
        return None

    with ThreadPoolExecutor(max_workers=4) as pool:
        f_stats = pool.submit(git_file_stats, cwd)
        f_sync = pool.submit(git_ahead_behind, cwd)
        f_common = pool.submit(linked_common_dir, cwd)
        f_branch = pool.submit(git, cwd, "rev-parse", "--abbrev-ref", "HEAD")
        stats, (ahead, behind) = f_stats.result(), f_sync.result()
        common, branch = f_common.result(), f_branch.result()

    base = top.rstrip("/").rsplit("/", 1)[-1]
    if common:
        repo = repo_from_common_dir(common)
        if repo:
            return GitInfo(repo=repo, worktree=base, ahead=ahead, behind=behind, file_stats=stats)
    if not base:
        return None
    return GitInfo(repo=base, branch=branch or None, ahead=ahead, behind=behind, file_stats=stats)


def fetch_pr(cwd):
    out = run(
        ["gh", "pr", "view", "--json", "number,url,title,isDraft,state,mergeStateStatus"],
        cwd=cwd, timeout=GH_TIMEOUT,
    )
    if not out:
        return None
    try:
        d = json.loads(out)
        return PrInfo(
            url=d["url"],
            number=str(d["number"]),
            title=d.get("title"),
            is_draft=d.get("isDraft") is True,
            state=d.get("state"),
            merge_state_status=d.get("mergeStateStatus"),
        )
    except (ValueError, KeyError, TypeError) as e:
        warn(f"unexpected gh output: {e!r}")
        return None


# ═══════════════════════ TRANSCRIPT ═══════════════════════

def _text(v):
    return v if isinstance(v, str) and v else None


def tool_target(name, inp):
    if not isinstance(inp, dict):
        return None
    if name in ("Read", "Write", "Edit"):
        return _text(inp.get("file_path")) or _text(inp.get("path"))
    if name in ("Glob", "Grep"):
        return _text(inp.get("pattern"))
    if name == "Bash":
        cmd = _text(inp.get("command"))
        if cmd:
            return cmd[:30] + ("..." if len(cmd) > 30 else "")
    return None


def fold_transcript(lines):
    """Fold transcript JSONL lines into an immutable TranscriptData.

    Lines that are not JSON objects, and blocks whose ids or names are not
    strings, are skipped.
    """
    running = {}        # tool_use id -> RunningTool
    completed = {}      # name -> count, insertion ordered
    agents = {}         # tool_use id -> AgentEntry
    todos = ()
    session_start = None

    for line in lines:
        line = line.strip()
        if not line:
            continue
        try:
            entry = json.loads(line)
        except (ValueError, RecursionError):
            continue
        if not isinstance(entry, dict):
            continue

        ts = parse_iso(entry.get("timestamp"))
        if session_start is None and ts:
            session_start = ts
        ts = ts or datetime.now(timezone.utc)

        msg = entry.get("message")
        content = msg.get("content") if isinstance(msg, dict) else None
        if not isinstance(content, list):
            continue

        for block in content:
            if not isinstance(block, dict):
                continue
            kind = block.get("type")
            bid, name = _text(block.get("id")), _text(block.get("name"))
            if kind == "tool_use" and bid and name:
                inp = block.get("input")
                if not isinstance(inp, dict):
                    inp = {}
                if name == "Task":
                    agents[bid] = AgentEntry(
                        id=bid,
                        type=_text(inp.get("subagent_type")) or "unknown",
                        status="running",
                        start_time=ts,
                        description=_text(inp.get("description")),
                        model=_text(inp.get("model")),
                    )
                elif name == "TodoWrite":
                    items = inp.get("todos")
                    if isinstance(items, list):
                        todos = tuple(
                            TodoItem(
                                subject=_text(t.get("subject")) or _text(t.get("content")) or "",
                                status=_text(t.get("status")) or "pending",
                            )
                            for t in items if isinstance(t, dict)
                        )
                else:
                    running[bid] = RunningTool(name=name, target=tool_target(name, inp))
            elif kind == "tool_result" and _text(block.get("tool_use_id")):
                bid = block["tool_use_id"]
                tool = running.pop(bid, None)
                if tool:
                    completed[tool.name] = completed.get(tool.name, 0) + 1
                agent = agents.get(bid)
                if agent:
                    agents[bid] = AgentEntry(
                        id=agent.id, type=agent.type, status="completed",
                        start_time=agent.start_time, description=agent.description,
                        model=agent.model, end_time=ts,
                    )

    return TranscriptData(
        tools=ToolAggregate(running=tuple(running.values()), completed=tuple(completed.items())),
        agents=tuple(agents.values())[-MAX_AGENTS:],
        todos=todos,
        session_start=session_start,
    )


def parse_transcript(path):
    if not path:
        return None
    try:
        with open(path, encoding="utf-8", errors="replace") as f:
            return fold_transcript(f)
    except OSError as e:
        warn(f"transcript unreadable: {e}")
        return None


# ═══════════════════════ CONFIG COUNTS ═══════════════════════

def _settings(path):
    d = rjson(path)
    return d if isinstance(d, dict) else {}


def mcp_names(path):
    servers = _settings(path).get("mcpServers")
    return set(servers) if isinstance(servers, dict) else set()


def disabled_names(path, key):
    v = _settings(path).get(key)
    return {s for s in v if isinstance(s, str)} if isinstance(v, list) else set()


def hook_count(path):
    hooks = _settings(path).get("hooks")
    return len(hooks) if isinstance(hooks, dict) else 0


def count_configs(cwd, home=None):
    claude = Path(home).expanduser() / ".claude" if home else CLAUDE_DIR
    home_dir = claude.parent

    claude_md = int((claude / "CLAUDE.md").exists())
    user_settings = claude / "settings.json"
    hooks = hook_count(user_settings)

    user_json = home_dir / ".claude.json"
    user_mcp = (mcp_names(user_settings) | mcp_names(user_json)) - disabled_names(user_json, "disabledMcpServers")

    project_mcp = set()
    if cwd:
        p = Path(cwd)
        for rel in ("CLAUDE.md", "CLAUDE.local.md", ".claude/CLAUDE.md", ".claude/CLAUDE.local.md"):
            claude_md += int((p / rel).exists())
        proj_settings = p / ".claude" / "settings.json"
        local_settings = p / ".claude" / "settings.local.json"
        project_mcp = mcp_names(proj_settings) | mcp_names(local_settings)
        project_mcp |= mcp_names(p / ".mcp.json") - disabled_names(local_settings, "disabledMcpjsonServers")
        hooks += hook_count(proj_settings) + hook_count(local_settings)

    return ConfigCounts(claude_md=claude_md, mcp=len(user_mcp) + len(project_mcp), hooks=hooks)


# ═══════════════════════ USAGE CACHE ═══════════════════════

def _pct(v):
    if isinstance(v, bool) or not isinstance(v, (int, float)) or v != v:
        return None
    return int(max(0, min(100, round(v))))


def read_usage(path=USAGE_CACHE, now=None):
    """Rate-limit usage from the usage client's cache, if still fresh.

    ccsl never writes this file or calls the usage API itself; with no client
    keeping the cache warm this returns None and the usage badge is hidden.

    Cache shape: {"data": {planName, fiveHour, sevenDay, fiveHourResetAt,
    sevenDayResetAt, apiUnavailable}, "timestamp": epoch ms}.
    """
    cache = rjson(path)
    if not isinstance(cache, dict) or not isinstance(cache.get("data"), dict):
        return None
    d = cache["data"]
    now = time.time() if now is None else now
    ttl = USAGE_FAILURE_TTL if d.get("apiUnavailable") else USAGE_TTL
    try:
        age = now - float(cache.get("timestamp", 0)) / 1000
    except (TypeError, ValueError):
        return None
    if age >= ttl:
        return None
    return UsageData(
        plan_name=d.get("planName") or None,
        five_hour=_pct(d.get("fiveHour")),
        seven_day=_pct(d.get("sevenDay")),
        five_hour_reset_at=parse_iso(d.get("fiveHourResetAt")),
        seven_day_reset_at=parse_iso(d.get("sevenDayResetAt")),
        api_unavailable=d.get("apiUnavailable") is True,
    )


# ═══════════════════════ LEARNING ═══════════════════════

_LOG_DATE_RE = re.compile(r"^## (\d{4})-(\d{2})-(\d{2})", re.M)


def last_learned(log_text, today=None):
    m = _LOG_DATE_RE.search(log_text)
    if not m:
        return None
    try:
        logged = date(int(m.group(1)), int(m.group(2)), int(m.group(3)))
    except ValueError:
        return None
    today = today or date.today()
    if logged >= today:
        return "today"
    if logged >= today - timedelta(days=1):
        return "yesterday"
    return f"{(today - logged).days}d ago"


def learning_status(session_start=None, claude_dir=CLAUDE_DIR, now=None):
    now = time.time() if now is None else now

    recalled = False
    try:
        ts = int((claude_dir / ".last-recall").read_text().strip())
        if session_start:
            recalled = ts >= session_start.timestamp()
        else:
            recalled = now - ts < RECALL_WINDOW
    except (OSError, ValueError):
        pass

    mode = rjson(claude_dir / "learning-mode.json")
    try:
        log_text = (claude_dir / "learning-log.md").read_text(encoding="utf-8")
    except OSError:
        log_text = ""

    return LearningStatus(
        recalled_this_session=recalled,
        learning_pending=(claude_dir / ".learning-pending").exists(),
        auto_learn=isinstance(mode, dict) and mode.get("auto") is True,
        last_learned=last_learned(log_text),
    )


def remote_control_active():
    return os.environ.get("CLAUDE_CODE_REMOTE", "").lower() in ("1", "true", "yes")


# ═══════════════════════ GATHER ═══════════════════════

def _safe(fn, *args):
    try:
        return fn(*args)
    except Exception as e:
        warn(f"{fn.__name__} failed: {e!r}")
        return None


def gather(session, config):
    """Run the collectors for one render and bundle a Snapshot."""
    cwd = session.workdir
    jobs = {
        "git": (fetch_git, cwd),
        "transcript": (parse_transcript, session.transcript_path),
        "config_counts": (count_configs, cwd),
        "usage": (read_usage,),
    }
    with ThreadPoolExecutor(max_workers=len(jobs)) as pool:
        futs = {k: pool.submit(_safe, fn, *args) for k, (fn, *args) in jobs.items()}
        res = {k: f.result() for k, f in futs.items()}

    pr = _safe(fetch_pr, cwd) if res["git"] else None
    learning = None
    if config.features.learning:
        t = res["transcript"]
        learning = _safe(learning_status, t.session_start if t else None)

    return Snapshot(
        session=session,
        git=res["git"],
        pr=pr,
        transcript=res["transcript"],
        config_counts=res["config_counts"],
        usage=res["usage"],
        learning=learning,
        remote_control=remote_control_active(),
    )
