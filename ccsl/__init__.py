"""Claude Code statusline: session badges laid out in configurable rows."""

__version__ = "0.2.0"
