"""ANSI escapes and visible-width accounting.

Everything here treats CSI sequences (ESC [ ... final) and OSC sequences
(ESC ] ... BEL or ESC \\, hyperlinks included) as zero-width, and counts
each remaining code point as one column, or two for the wide ranges below.
"""

# ═══════════════════════ ESCAPES ═══════════════════════

ESC = "\033"
R = "\033[0m"                  # Reset
FG_WHITE = "\033[97m"
ERASE_EOL = "\033[K"
RESET_BG = "\033[49m"
RESET_FG = "\033[39m"
CLEAR_LINE = "\033[0m\033[49m\033[2K\r"   # Reset, default bg, erase line, CR

NBSP = "\u00a0"


def fg_rgb(r, g, b):
    return f"\033[38;2;{r};{g};{b}m"


def bg_rgb(r, g, b):
    return f"\033[48;2;{r};{g};{b}m"


def hyperlink(url, text):
    """OSC 8 clickable hyperlink (iTerm2, Kitty, WezTerm)."""
    return f"\033]8;;{url}\007{text}\033]8;;\007"


# ═══════════════════════ WIDTH ═══════════════════════

# Inclusive ranges rendered two columns wide: CJK, fullwidth forms, and the
# emoji with default emoji presentation that show up in badges.
WIDE_RANGES = (
    (0x1100, 0x115F),
    (0x2329, 0x232A),
    (0x23E9, 0x23F3),    # ⏩-⏳ (includes ⏲)
    (0x25AA, 0x25AB),
    (0x25FB, 0x25FE),
    (0x2614, 0x2615),
    (0x2648, 0x2653),
    (0x26A1, 0x26A1),    # ⚡
    (0x26AA, 0x26AB),
    (0x2705, 0x2705),    # ✅
    (0x2728, 0x2728),    # ✨
    (0x2E80, 0xA4CF),
    (0xAC00, 0xD7A3),
    (0xF900, 0xFAFF),
    (0xFE10, 0xFE19),
    (0xFE30, 0xFE6F),
    (0xFF00, 0xFF60),
    (0xFFE0, 0xFFE6),
    (0x1F300, 0x1F64F),
    (0x1F680, 0x1F6FF),  # Transport/map symbols
    (0x1F900, 0x1F9FF),
    (0x1FA00, 0x1FAFF),
)


def is_wide(cp):
    """True if code point `cp` occupies two terminal columns."""
    if cp < 0x1100:
        return False
    for lo, hi in WIDE_RANGES:
        if cp < lo:
            return False
        if cp <= hi:
            return True
    return False


def char_width(ch):
    return 2 if is_wide(ord(ch)) else 1


def _escape_end(text, i):
    """Index just past the escape sequence starting at text[i], or None if
    text[i] does not start a CSI/OSC sequence. Unterminated sequences run to
    the end of the string."""
    n = len(text)
    if i + 1 >= n or text[i] != ESC:
        return None
    kind = text[i + 1]
    if kind == "[":
        j = i + 2
        while j < n and not ("@" <= text[j] <= "~"):
            j += 1
        return min(j + 1, n)
    if kind == "]":
        j = i + 2
        while j < n:
            if text[j] == "\007":
                return j + 1
            if text[j] == ESC and j + 1 < n and text[j + 1] == "\\":
                return j + 2
            j += 1
        return n
    return None


def _segments(text):
    """Split `text` into (is_escape, chunk) pairs, escapes as _escape_end()
    delimits them."""
    start = i = 0
    n = len(text)
    while i < n:
        end = _escape_end(text, i) if text[i] == ESC else None
        if end is None:
            i += 1
            continue
        if start < i:
            yield False, text[start:i]
        yield True, text[i:end]
        start = i = end
    if start < n:
        yield False, text[start:]


def strip_ansi(text):
    """Remove CSI and OSC sequences, keeping the visible text."""
    return "".join(chunk for esc, chunk in _segments(text) if not esc)


def visible_width(text):
    """Number of terminal columns `text` occupies once escapes are skipped."""
    return sum(char_width(ch) for ch in strip_ansi(text))


def truncate_to_width(text, max_width):
    """Longest prefix of `text` that fits in `max_width` columns.

    Escape sequences met before the budget runs out are copied whole, a wide
    character that would overflow is dropped and scanning stops. A hyperlink
    left open is closed, and the result always ends with a reset.
    """
    if max_width <= 0:
        return R

    out = []
    width = 0
    link_open = False
    i = 0
    n = len(text)
    while i < n and width < max_width:
        end = _escape_end(text, i)
        if end is not None:
            seq = text[i:end]
            if seq.startswith("\033]8;;"):
                # An OSC 8 with an empty URI closes the link
                body = seq[5:].rstrip("\007").rstrip("\\").rstrip(ESC)
                link_open = bool(body)
            out.append(seq)
            i = end
            continue
        w = char_width(text[i])
        if width + w > max_width:
            break
        out.append(text[i])
        width += w
        i += 1

    if link_open:
        out.append("\033]8;;\007")
    out.append(R)
    return "".join(out)


# ═══════════════════════ LOW-WIDTH FALLBACK ═══════════════════════

EMOJI_REPLACEMENTS = (
    ("\U0001f9e0", "ctx"),    # 🧠
    ("\U0001f4ca", "+/-"),    # 📊
    ("\U0001f525", "tok"),    # 🔥
    ("\U0001f4b8", "$"),      # 💸
    ("\u23f2", "T"),          # ⏲
    ("\U0001f333", "wt:"),    # 🌳
    ("\U0001f33f", "br:"),    # 🌿
    ("\U0001f4cb", "cfg"),    # 📋
    ("\U0001f3ab", "tkt"),    # 🎫
    ("\U0001f517", "PR"),     # 🔗
    ("\U0001f9e9", "R"),      # 🧩
    ("\U0001f4da", "L"),      # 📚
    ("\U0001f4e6", "C"),      # 📦
    ("\U0001f9ec", "I"),      # 🧬
    ("\U0001f4dd", "log"),    # 📝
    ("\U0001f50c", "mcp:"),   # 🔌
    ("\U0001f4f1", "TG"),     # 📱
)


def strip_emojis(text):
    """Swap badge emoji for short ASCII labels (narrow terminals)."""
    for emoji, label in EMOJI_REPLACEMENTS:
        text = text.replace(emoji, label)
    return text


def harden_spaces(text):
    """Replace visible spaces with NBSP so the host UI does not trim or
    collapse them. Escape sequences (and URLs inside them) are left alone."""
    return "".join(chunk if esc else chunk.replace(" ", NBSP) for esc, chunk in _segments(text))
