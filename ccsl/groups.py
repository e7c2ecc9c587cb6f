"""Badge group builders.

One pure function per BadgeGroup, each mapping a Snapshot (and the resolved
Config, for feature gates) to a list of rendered badges. Absent data means
no badges; build_group() also turns any unexpected failure into [].
"""

from .ansi import hyperlink, fg_rgb
from .badges import BADGE, GradientStops, badge, bar_badge, gradient_badge, gradient_color, rich_badge
from .config import BadgeGroup
from .fmt import (
    ellipsize,
    fmt_cost,
    fmt_dur,
    fmt_file_stats,
    fmt_tok,
    fmt_until,
    pr_status_suffix,
    relative_path,
    short_mcp_name,
    ticket_marker,
    tool_display_name,
)
from .log import warn

DURATION_STOPS = GradientStops([
    (0, BADGE["green"]), (60, BADGE["gold"]), (180, BADGE["purple"]),
])
COST_STOPS = GradientStops([
    (0, BADGE["green"]), (10, BADGE["gold"]), (50, BADGE["orange"]), (100, BADGE["rose"]),
])

LINES_ADDED_FG = fg_rgb(140, 220, 140)
LINES_REMOVED_FG = fg_rgb(220, 130, 130)

TOOL_COLORS = {
    "Read": "green", "Write": "green", "Edit": "green", "NotebookEdit": "green",
    "Grep": "purple", "Glob": "purple",
    "Bash": "orange",
    "Task": "blue", "Skill": "blue", "AskUserQuestion": "blue",
    "TaskCreate": "gold", "TaskUpdate": "gold", "TaskList": "gold", "TaskGet": "gold",
    "TodoWrite": "gold",
    "WebFetch": "cyan", "WebSearch": "cyan", "ToolSearch": "cyan",
}
TOOL_FALLBACK_COLOR = "charcoal"

DEFAULT_BRANCHES = ("main", "master")


# ═══════════════════════ IDENTITY / CONTEXT / USAGE ═══════════════════════

def identity_badges(snap, config):
    s = snap.session
    plan = snap.usage.plan_name if snap.usage else None
    name = f"{s.model_name} | {plan}" if plan else s.model_name
    minutes = s.duration_ms / 60_000
    return [
        badge("blue", name),
        gradient_badge(gradient_color(DURATION_STOPS, minutes), f"⏲ {fmt_dur(s.duration_ms)}"),
        gradient_badge(gradient_color(COST_STOPS, s.cost_usd), f"💸 {fmt_cost(s.cost_usd)}"),
    ]


def context_badges(snap, config):
    s = snap.session
    pct = s.percent_used
    bar = bar_badge(pct, f" {s.current_tokens // 1000}k={pct}% ", red_at=85, yellow_at=70)
    badges = [rich_badge("cyan", f" 🧠 {bar} ")]
    u = s.current_usage
    if u:
        r = fmt_tok(u.cache_read_input_tokens)
        w = fmt_tok(u.cache_creation_input_tokens)
        i = fmt_tok(u.input_tokens)
        badges.append(badge("cyan", f"🔥 {r}r·{w}w·{i}u"))
    return badges


def usage_badges(snap, config):
    u = snap.usage
    if not config.features.usage or u is None or u.five_hour is None:
        return []
    left = fmt_until(u.five_hour_reset_at, snap.now)
    reset = f" ({left} / 5h)" if left else ""
    bar = bar_badge(u.five_hour, f" {u.five_hour}%{reset} ", red_at=90, yellow_at=70)
    return [rich_badge("orange", f" ⚡{bar} ")]


# ═══════════════════════ GIT / CONFIG / PR ═══════════════════════

def git_badges(snap, config):
    g = snap.git
    if g is None or not g.repo:
        return []
    badges = [badge("green", g.repo)]
    if g.worktree:
        badges.append(badge("cyan", f"🌳 {ellipsize(g.worktree, 24, 25)}"))
    elif g.branch:
        color = "purple" if g.branch in DEFAULT_BRANCHES else "green"
        badges.append(badge(color, f"🌿 {ellipsize(g.branch, 24, 25)}"))

    stats = fmt_file_stats(g.file_stats)
    if stats:
        badges.append(badge("green", stats))

    sync = ""
    if g.ahead > 0:
        sync += f"↑{g.ahead}"
    if g.behind > 0:
        sync += f"↓{g.behind}"
    if sync:
        badges.append(badge("green", sync))

    s = snap.session
    if s.lines_added > 0 or s.lines_removed > 0:
        badges.append(rich_badge(
            "olive",
            f" 📊 {LINES_ADDED_FG}+{s.lines_added}{LINES_REMOVED_FG}-{s.lines_removed} ",
        ))
    return badges


def config_badges(snap, config):
    c = snap.config_counts
    if c is None:
        return []
    parts = []
    if c.claude_md > 0:
        parts.append(f"{c.claude_md} CLAUDE.md")
    if c.mcp > 0:
        parts.append(f"{c.mcp} MCPs")
    if c.hooks > 0:
        parts.append(f"{c.hooks} hooks")
    if not parts:
        return []
    return [badge("purple", f"📋 {' | '.join(parts)}")]


def pr_badges(snap, config):
    pr = snap.pr
    if pr is None:
        return []
    badges = []
    ticket = ticket_marker(pr.title)
    if ticket:
        badges.append(badge("purple", f"🎫 {ticket}"))
    badges.append(hyperlink(pr.url, badge("blue", f"🔗 PR#{pr.number}{pr_status_suffix(pr)}")))
    return badges


# ═══════════════════════ LEARNING / REMOTE / TRANSCRIPT ═══════════════════════

def learning_badges(snap, config):
    ls = snap.learning
    if not config.features.learning or ls is None:
        return []
    badges = [badge("green", "🧩 ✓") if ls.recalled_this_session else badge("steel", "🧩 ✗")]

    inst = ls.instincts
    obs = inst.unprocessed_observations if inst else 0
    suffix = f" {obs}" if obs > 0 else " ✓"
    if ls.learning_pending:
        badges.append(badge("rose", f"📚 ⚠{suffix}"))
    elif ls.last_learned:
        badges.append(badge("gold" if obs > 0 else "green", f"📚 {ls.last_learned}{suffix}"))
    else:
        badges.append(badge("steel", f"📚{suffix}"))

    if inst:
        text, color = f"🧬 {inst.active}", "steel"
        if inst.promotable > 0:
            text += f" ▲{inst.promotable}"
            color = "gold"
        if inst.corrections > 0:
            text += " !"
            color = "rose"
        badges.append(badge(color, text))
    return badges


def remote_control_badges(snap, config):
    if not config.features.remote_control:
        return []
    if snap.remote_control:
        return [badge("cyan", "📱 RC")]
    return [badge("steel", "📱 local")]


def transcript_badges(snap, config):
    path = snap.session.transcript_path
    if not path:
        return []
    name = path.rsplit("/", 1)[-1] or path
    short = name[:8] + "…jsonl" if len(name) > 20 else name
    return [hyperlink(f"file://{path}", badge("steel", f"📝 {short}"))]


# ═══════════════════════ ACTIVITY ═══════════════════════

def tool_badges(snap, config):
    t = snap.transcript
    if t is None:
        return []
    cwd = snap.session.current_dir
    badges = []
    for tool in t.tools.running:
        target = f": {relative_path(tool.target, cwd)}" if tool.target else ""
        badges.append(badge("cyan", f"◐ {tool_display_name(tool.name)}{target}"))

    mcp = {}
    for name, count in t.tools.completed:
        if name.startswith("mcp__"):
            server = short_mcp_name(name)
            mcp[server] = mcp.get(server, 0) + count
        else:
            badges.append(badge(TOOL_COLORS.get(name, TOOL_FALLBACK_COLOR), f"{name}×{count}"))
    for server, count in mcp.items():
        badges.append(badge("steel", f"🔌{server}×{count}"))
    return badges


def _agent_label(agent):
    kind = agent.type.split("-")[0]
    desc = f" {ellipsize(agent.description, 25)}" if agent.description else ""
    return f"{kind}{desc}"


def agent_badges(snap, config):
    t = snap.transcript
    if t is None or not t.agents:
        return []
    running = [a for a in t.agents if a.status == "running"]
    done = [a for a in t.agents if a.status == "completed"][-2:]
    badges = []
    for a in running:
        elapsed = (snap.now - a.start_time).total_seconds() * 1000
        badges.append(badge("cyan", f"◐ {_agent_label(a)} ({fmt_dur(elapsed)})"))
    for a in done:
        dur = ""
        if a.end_time:
            dur = f" {fmt_dur((a.end_time - a.start_time).total_seconds() * 1000)}"
        badges.append(badge("steel", f"✓ {_agent_label(a)}{dur}"))
    return badges


def todo_badges(snap, config):
    t = snap.transcript
    if t is None or not t.todos:
        return []
    todos = t.todos
    done = sum(1 for x in todos if x.status == "completed")
    progress = f"({done}/{len(todos)})"
    current = next((x for x in todos if x.status == "in_progress"), None)
    if current:
        return [badge("cyan", f"▸ {current.subject} {progress}")]
    pending = next((x for x in todos if x.status == "pending"), None)
    if pending:
        return [badge("charcoal", f"▹ {pending.subject} {progress}")]
    return [badge("green", f"✓ All done {progress}")]


# ═══════════════════════ DISPATCH ═══════════════════════

BUILDERS = {
    BadgeGroup.IDENTITY: identity_badges,
    BadgeGroup.CONTEXT: context_badges,
    BadgeGroup.USAGE: usage_badges,
    BadgeGroup.GIT: git_badges,
    BadgeGroup.CONFIG: config_badges,
    BadgeGroup.PR: pr_badges,
    BadgeGroup.LEARNING: learning_badges,
    BadgeGroup.REMOTE_CONTROL: remote_control_badges,
    BadgeGroup.TRANSCRIPT: transcript_badges,
    BadgeGroup.TOOLS: tool_badges,
    BadgeGroup.AGENTS: agent_badges,
    BadgeGroup.TODOS: todo_badges,
}


def build_group(group, snap, config):
    """Badges for one group. A builder that trips over malformed data yields
    nothing rather than taking the whole status line down."""
    try:
        return list(BUILDERS[group](snap, config))
    except Exception as e:
        warn(f"{group.value} badges skipped: {e!r}")
        return []
