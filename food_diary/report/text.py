from __future__ import annotations

from typing import Callable, List


Measure = Callable[[str], float]


def _split_long_word(word: str, measure: Measure, max_width: float) -> List[str]:
    """
    Break a word that is wider than the column on character boundaries.
    """
    pieces: List[str] = []
    cur = ""
    for ch in word:
        if cur and measure(cur + ch) > max_width:
            pieces.append(cur)
            cur = ch
        else:
            cur += ch
    if cur:
        pieces.append(cur)
    return pieces


def _wrap_paragraph(paragraph: str, measure: Measure, max_width: float) -> List[str]:
    words = paragraph.split()
    if not words:
        return [""]

    lines: List[str] = []
    cur: List[str] = []

    for w in words:
        test = " ".join(cur + [w])
        if measure(test) <= max_width:
            cur.append(w)
            continue

        if cur:
            lines.append(" ".join(cur))
            cur = []

        if measure(w) <= max_width:
            cur = [w]
        else:
            # Fill whole lines with the oversize word, carry the tail on.
            pieces = _split_long_word(w, measure, max_width)
            lines.extend(pieces[:-1])
            cur = [pieces[-1]]

    if cur:
        lines.append(" ".join(cur))

    return lines


def wrap_text(text: str, max_width: float, measure: Measure) -> List[str]:
    """
    Word-wrap ``text`` so that no line measures wider than ``max_width``.

    Embedded newlines start a new line. Empty input wraps to a single empty line.
    """
    safe = str(text or "").replace("\r\n", "\n").replace("\r", "\n")
    lines: List[str] = []
    for paragraph in safe.split("\n"):
        lines.extend(_wrap_paragraph(paragraph, measure, max_width))
    return lines or [""]
