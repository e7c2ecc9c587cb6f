"""ccsl: Claude Code statusline.

Reads the host's session JSON on stdin and prints badge rows sized to the
terminal. Configured in ~/.claude/settings.json:

    {"statusLine": {"type": "command", "command": "ccsl"}}

Commands:
  preview [dense|semantic|adaptive] [--width N]   Render a mock session
  config                                          Print the resolved config
"""

import json
import sys
from dataclasses import replace

from . import __version__
from .collectors import detect_cols, gather
from .config import PRESETS, config_to_dict, load_config
from .log import warn
from .models import parse_session
from .preview import render_preview
from .render import build_output, effective_width

USAGE = """ccsl: Claude Code Statusline

Usage: pipe Claude Code status JSON to stdin.
  Configured in ~/.claude/settings.json as a statusLine command.

Commands:
  preview [LAYOUT] [--width N]   Render a mock session (dense, semantic, adaptive)
  config                         Print the resolved configuration as JSON

Options:
  --help, -h       Show this help message
  --version, -v    Show version number

Files:
  ~/.claude/statusline-config.json            Layout and feature settings (CCSL_CONFIG overrides)
  ~/.claude/plugins/ccsl/.usage-cache.json   Rate-limit usage, written by a separate usage
                                             client; ccsl only reads it. Without that
                                             client the usage badge stays hidden.
"""

HINT = """ccsl: Claude Code Statusline

Hint: pipe Claude Code status JSON to stdin, or run `ccsl preview`.
      Run `ccsl --help` for all options."""


def render_stdin(stdin, stdout):
    """Session JSON in, status line out. Returns the exit status."""
    try:
        session = parse_session(json.loads(stdin.read()))
    except (ValueError, RecursionError) as e:
        warn(f"bad statusline input: {e}")
        return 1

    config = load_config()
    snap = gather(session, config)

    cols = detect_cols()
    max_width = effective_width(cols, config, session.percent_used)
    stdout.write(build_output(snap, config, max_width, cols))
    stdout.flush()
    return 0


def cmd_preview(args):
    config = load_config()
    width = detect_cols()
    rest = list(args)
    while rest:
        a = rest.pop(0)
        if a == "--width" and rest and rest[0].isdigit():
            width = int(rest.pop(0))
        elif a in PRESETS:
            config = replace(config, layout=a, rows=PRESETS[a])
        else:
            print(f"ccsl preview: unknown argument {a!r}", file=sys.stderr)
            return 2
    print(render_preview(config, width))
    return 0


def cmd_config():
    print(json.dumps(config_to_dict(load_config()), indent=2))
    return 0


def main(argv=None, stdin=None, stdout=None):
    args = sys.argv[1:] if argv is None else list(argv)
    stdin = stdin or sys.stdin
    stdout = stdout or sys.stdout

    if args:
        cmd = args[0]
        if cmd in ("--help", "-h"):
            print(USAGE, end="")
            return 0
        if cmd in ("--version", "-v"):
            print(__version__)
            return 0
        if cmd == "preview":
            return cmd_preview(args[1:])
        if cmd == "config":
            return cmd_config()
        print(f"ccsl: unknown command {cmd!r} (see --help)", file=sys.stderr)
        return 2

    if stdin.isatty():
        print(HINT)
        return 0
    return render_stdin(stdin, stdout)


def run():
    sys.exit(main())
