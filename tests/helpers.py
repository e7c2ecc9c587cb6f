"""Snapshot builders shared by the test modules."""

from datetime import datetime, timezone

from ccsl.ansi import strip_ansi
from ccsl.config import Config, Features
from ccsl.models import CurrentUsage, SessionInput, Snapshot

NOW = datetime(2026, 2, 14, 20, 0, 0, tzinfo=timezone.utc)


def session(**kw):
    base = dict(
        model_name="Opus",
        current_dir="/work/proj",
        project_dir="/work/proj",
        cost_usd=4.82,
        duration_ms=1_854_000,
        context_window_size=200_000,
        current_usage=CurrentUsage(28_000, 45_000, 22_000),
    )
    base.update(kw)
    return SessionInput(**base)


def snap(**kw):
    kw.setdefault("session", session())
    kw.setdefault("now", NOW)
    return Snapshot(**kw)


def config(usage=False, learning=False, remote_control=False, **kw):
    return Config(features=Features(usage, learning, remote_control), **kw)


def plain(text):
    """Visible text with NBSP folded back to spaces."""
    return strip_ansi(text).replace("\u00a0", " ")
