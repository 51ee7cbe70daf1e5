"""Text helpers for the minutes (risalah) document."""
from __future__ import annotations

import re
from datetime import date
from typing import Optional

_UNITS = [
    "", "satu", "dua", "tiga", "empat", "lima", "enam",
    "tujuh", "delapan", "sembilan", "sepuluh", "sebelas",
]

_ROMAN = [
    (1000, "m"), (900, "cm"), (500, "d"), (400, "cd"), (100, "c"), (90, "xc"),
    (50, "l"), (40, "xl"), (10, "x"), (9, "ix"), (5, "v"), (4, "iv"), (1, "i"),
]

_DAYS = ["Senin", "Selasa", "Rabu", "Kamis", "Jumat", "Sabtu", "Minggu"]
_MONTHS = [
    "Januari", "Februari", "Maret", "April", "Mei", "Juni",
    "Juli", "Agustus", "September", "Oktober", "November", "Desember",
]


def terbilang(n: int) -> str:
    """Indonesian number words for 0..99; larger values fall back to digits."""
    if n == 0:
        return "nol"
    if n < 12:
        return _UNITS[n]
    if n < 20:
        return f"{terbilang(n - 10)} belas"
    if n < 100:
        tens = terbilang(n // 10)
        rest = f" {terbilang(n % 10)}" if n % 10 else ""
        return f"{tens} puluh{rest}"
    return str(n)


def to_roman(n: int) -> str:
    """Lower-case roman numerals; 0, negatives and 4000+ stay as digits."""
    if not 0 < n < 4000:
        return str(n)
    out = []
    for value, symbol in _ROMAN:
        while n >= value:
            out.append(symbol)
            n -= value
    return "".join(out)


def letter_index(i: int) -> str:
    """0 -> a, 25 -> z, 26 -> aa, like spreadsheet columns."""
    if i < 0:
        return str(i + 1)
    letters = ""
    i += 1
    while i:
        i, rem = divmod(i - 1, 26)
        letters = chr(ord("a") + rem) + letters
    return letters


def format_long_date(d: date) -> str:
    # e.g. "Senin, 05 Januari 2026"
    return f"{_DAYS[d.weekday()]}, {d.day:02d} {_MONTHS[d.month - 1]} {d.year}"


def clean_html(html: Optional[str], empty: str = "-") -> str:
    if not html:
        return empty
    text = re.sub(r"</p>", "\n", html, flags=re.I)
    text = re.sub(r"<li>", "• ", text, flags=re.I)
    text = re.sub(r"</li>", "\n", text, flags=re.I)
    text = re.sub(r"<br\s*/?>", "\n", text, flags=re.I)
    text = re.sub(r"<[^>]*>", "", text)
    text = (
        text.replace("&nbsp;", " ")
        .replace("&amp;", "&")
        .replace("&lt;", "<")
        .replace("&gt;", ">")
    )
    text = re.sub(r"\n\s*\n", "\n", text)
    return text.strip() or empty
