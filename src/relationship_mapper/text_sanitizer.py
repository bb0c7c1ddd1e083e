"""
Text cleanup for PDF export and display.

The PDF report uses matplotlib's core fonts, which cannot draw emoji or most
symbol blocks, so those are converted to ASCII or removed before rendering.
"""

import re

ARROWS = {
    '→': '->',
    '←': '<-',
    '⇄': '<->',
    '↔': '<->',
    '⟶': '->',
    '⟵': '<-',
    '⇒': '=>',
    '⇐': '<=',
    '⇨': '->',
    '⇦': '<-',
    '↑': '^',
    '↓': 'v',
}

BULLETS = {
    '•': '*',
    '●': '*',
    '○': '*',
    '◦': '-',
}

_BRACKET_INDICATORS = re.compile(r'\[(?:!|\*|!!|\?|i|x)\]\s*', re.I)
_ICON_ARTIFACTS = re.compile(r"[!%][\u00C0-\u00FF\uFFFD]")

_EMOJI = re.compile(r"[\U0001F300-\U0001F9FF\u2600-\u26FF\u2700-\u27BF]")
_SYMBOLS = re.compile(r"[\u2190-\u21FF\u2300-\u23FF\u25A0-\u25FF\u2B00-\u2BFF]")
_CONTROL = re.compile(r"[\u0000-\u001F\uFFFD]")
_WHITESPACE = re.compile(r'\s+')


def normalize_whitespace(text: str) -> str:
    if not text:
        return ''
    return _WHITESPACE.sub(' ', text).strip()


def convert_arrows_to_ascii(text: str) -> str:
    if not text:
        return ''
    for arrow, ascii_arrow in ARROWS.items():
        text = text.replace(arrow, ascii_arrow)
    return text


def remove_emojis(text: str) -> str:
    if not text:
        return ''
    return normalize_whitespace(_EMOJI.sub('', text))


def sanitize_for_display(text: str) -> str:
    """Light cleanup: drop icon-font artifacts and control characters, keep other Unicode."""
    if not text:
        return ''
    text = _ICON_ARTIFACTS.sub('', text)
    text = _CONTROL.sub(' ', text)
    return normalize_whitespace(text)


def sanitize_for_pdf(text: str) -> str:
    """Make text safe for the PDF report: ASCII arrows and bullets, no emoji or symbol glyphs."""
    if not text:
        return ''

    # convert before the symbol ranges below strip them
    text = convert_arrows_to_ascii(text)
    for bullet, replacement in BULLETS.items():
        text = text.replace(bullet, replacement)

    text = _BRACKET_INDICATORS.sub('', text)
    text = _ICON_ARTIFACTS.sub('', text)
    text = re.sub(r'^%[A-Z]\s+', '', text, flags=re.M)
    text = re.sub(r'^!\s+', '', text, flags=re.M)

    text = _EMOJI.sub('', text)
    text = _SYMBOLS.sub('', text)
    text = _CONTROL.sub(' ', text)
    return normalize_whitespace(text)
