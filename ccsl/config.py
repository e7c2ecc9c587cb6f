"""Layout presets and user configuration.

~/.claude/statusline-config.json (optional, JSON):

    {
      "layout": "dense",                 # legacy: dense | semantic | adaptive
      "rows": [["identity", "git"], "---", ["tools", "agents"]],
      "features": {"usage": true, "learning": false, "remoteControl": false},
      "flexMode": "full-until-compact",  # full | full-minus-40 | full-until-compact
      "compactThreshold": 85,
      "flexPadding": 50
    }

Unknown keys are ignored, missing ones defaulted, and anything unreadable
yields the built-in default. Unknown badge groups are dropped here so the
renderer only ever sees the closed BadgeGroup set.
"""

import json
import os
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from .log import warn

CONFIG_PATH = Path("~/.claude/statusline-config.json").expanduser()

SEPARATOR = "---"


class BadgeGroup(str, Enum):
    IDENTITY = "identity"
    CONTEXT = "context"
    USAGE = "usage"
    GIT = "git"
    CONFIG = "config"
    PR = "pr"
    LEARNING = "learning"
    REMOTE_CONTROL = "remoteControl"
    TRANSCRIPT = "transcript"
    TOOLS = "tools"
    AGENTS = "agents"
    TODOS = "todos"


class FlexMode(str, Enum):
    FULL = "full"
    FULL_MINUS_40 = "full-minus-40"
    FULL_UNTIL_COMPACT = "full-until-compact"


G = BadgeGroup

# ═══════════════════════ PRESETS ═══════════════════════

PRESET_DENSE = (
    (G.IDENTITY, G.GIT, G.PR),
    (G.CONTEXT, G.USAGE, G.CONFIG, G.LEARNING, G.REMOTE_CONTROL),
    (G.TOOLS, G.AGENTS, G.TODOS, G.TRANSCRIPT),
)

PRESET_SEMANTIC = (
    (G.IDENTITY,),
    (G.CONTEXT, G.USAGE),
    (G.GIT,),
    (G.PR,),
    (G.CONFIG,),
    (G.LEARNING, G.REMOTE_CONTROL),
    SEPARATOR,
    (G.TOOLS,),
    (G.AGENTS,),
    (G.TODOS,),
    (G.TRANSCRIPT,),
)

PRESET_ADAPTIVE = (tuple(G),)

PRESETS = {
    "dense": PRESET_DENSE,
    "semantic": PRESET_SEMANTIC,
    "adaptive": PRESET_ADAPTIVE,
}

DEFAULT_LAYOUT = "dense"
DEFAULT_ROWS = PRESET_DENSE
DEFAULT_FLEX_MODE = FlexMode.FULL_UNTIL_COMPACT
DEFAULT_COMPACT_THRESHOLD = 85
DEFAULT_FLEX_PADDING = 50


@dataclass(frozen=True)
class Features:
    usage: bool = False
    learning: bool = False
    remote_control: bool = False


@dataclass(frozen=True)
class Config:
    rows: tuple = DEFAULT_ROWS
    features: Features = field(default_factory=Features)
    layout: str = DEFAULT_LAYOUT
    flex_mode: FlexMode = DEFAULT_FLEX_MODE
    compact_threshold: float = DEFAULT_COMPACT_THRESHOLD
    flex_padding: float = DEFAULT_FLEX_PADDING


DEFAULT_CONFIG = Config()

_GROUPS = {g.value: g for g in BadgeGroup}


# ═══════════════════════ RESOLUTION ═══════════════════════

def parse_rows(raw):
    """Validated row tuple, or None when nothing usable remains.

    Unknown group names are filtered out and rows left empty are dropped.
    """
    if not isinstance(raw, list):
        return None
    rows = []
    for item in raw:
        if item == SEPARATOR:
            rows.append(SEPARATOR)
        elif isinstance(item, list):
            groups = tuple(_GROUPS[g] for g in item if isinstance(g, str) and g in _GROUPS)
            if groups:
                rows.append(groups)
    return tuple(rows) or None


def _number(v, default):
    if isinstance(v, bool) or not isinstance(v, (int, float)):
        return default
    return v


def resolve_config(raw):
    """Total mapping from any JSON value to a Config."""
    if not isinstance(raw, dict):
        return DEFAULT_CONFIG

    layout = raw.get("layout")
    if not isinstance(layout, str) or layout not in PRESETS:
        layout = DEFAULT_LAYOUT

    feats = raw.get("features")
    feats = feats if isinstance(feats, dict) else {}
    rc = feats.get("remoteControl")
    if rc is None:
        rc = feats.get("cctg")     # pre-rename key

    try:
        flex_mode = FlexMode(raw.get("flexMode"))
    except ValueError:
        flex_mode = DEFAULT_FLEX_MODE

    return Config(
        rows=parse_rows(raw.get("rows")) or PRESETS[layout],
        features=Features(
            usage=feats.get("usage") is True,
            learning=feats.get("learning") is True,
            remote_control=rc is True,
        ),
        layout=layout,
        flex_mode=flex_mode,
        compact_threshold=_number(raw.get("compactThreshold"), DEFAULT_COMPACT_THRESHOLD),
        flex_padding=_number(raw.get("flexPadding"), DEFAULT_FLEX_PADDING),
    )


def config_path():
    env = os.environ.get("CCSL_CONFIG")
    return Path(env).expanduser() if env else CONFIG_PATH


def load_config(path=None):
    """Read and resolve the config file. Never raises."""
    path = path or config_path()
    try:
        raw = json.loads(Path(path).read_text(encoding="utf-8"))
    except FileNotFoundError:
        return DEFAULT_CONFIG
    except (OSError, ValueError, RecursionError) as e:
        warn(f"ignoring config {path}: {e}")
        return DEFAULT_CONFIG
    return resolve_config(raw)


def config_to_dict(cfg):
    """On-disk shape of a resolved config."""
    return {
        "layout": cfg.layout,
        "rows": [r if r == SEPARATOR else [g.value for g in r] for r in cfg.rows],
        "features": {
            "usage": cfg.features.usage,
            "learning": cfg.features.learning,
            "remoteControl": cfg.features.remote_control,
        },
        "flexMode": cfg.flex_mode.value,
        "compactThreshold": cfg.compact_threshold,
        "flexPadding": cfg.flex_padding,
    }
