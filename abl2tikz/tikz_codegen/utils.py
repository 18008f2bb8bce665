import math
import re
import unicodedata
from typing import List

_MATH_DELIM_RE = re.compile(r'(?<!\\)(\$\$|\$)')  # matches unescaped $ or $$
_INDEXED_NAME_RE = re.compile(r'^([a-zA-Z]+)[_-]?([0-9]+)$')


def _strip_combining(text: str) -> str:
    text = unicodedata.normalize('NFC', text)
    return ''.join(ch for ch in text if unicodedata.category(ch) != 'Mn')


def _escape_text_segment(text: str) -> str:
    text = _strip_combining(text)
    repl = {
        '\\': r'\textbackslash{}',
        '&':  r'\&',
        '%':  r'\%',
        '#':  r'\#',
        '_':  r'\_',
        '{':  r'\{',
        '}':  r'\}',
        '~':  r'\textasciitilde{}',
        '^':  r'\textasciicircum{}',
    }
    return ''.join(repl.get(c, c) for c in text)


def latex_escape_keep_math(s: str) -> str:
    """
    Escape text for LaTeX while leaving ``$...$`` and ``$$...$$`` untouched.
    """
    parts: List[str] = []
    pos = 0
    in_math = False
    current_delim = None  # '$' or '$$'

    for m in _MATH_DELIM_RE.finditer(s):
        delim = m.group(1)
        start, end = m.span()

        chunk = s[pos:start]
        parts.append(chunk if in_math else _escape_text_segment(chunk))

        parts.append(delim)
        if not in_math:
            in_math = True
            current_delim = delim
        elif delim == current_delim:
            in_math = False
            current_delim = None
        pos = end

    tail = s[pos:]
    parts.append(tail if in_math else _escape_text_segment(tail))
    return ''.join(parts)


def format_label(name: str) -> str:
    """``R1``, ``R_1`` and ``R-1`` become ``${R}_{1}$``; other names are escaped."""
    if not name:
        return ''
    m = _INDEXED_NAME_RE.match(name)
    if m:
        return f'${{{m.group(1)}}}_{{{int(m.group(2))}}}$'
    return latex_escape_keep_math(name)


def format_float(value: float) -> str:
    if math.isnan(value) or math.isinf(value):
        raise ValueError("Cannot format non-finite float for TikZ output")
    formatted = f"{value:.4f}"
    formatted = formatted.rstrip("0").rstrip(".")
    if formatted in ("", "-0"):
        return "0"
    return formatted


def option_value(text: str) -> str:
    """Brace a key value that would otherwise break the option list."""
    if any(ch in text for ch in ',=[]'):
        return '{' + text + '}'
    return text
