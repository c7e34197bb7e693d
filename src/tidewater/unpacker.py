"""
Dean Edwards p,a,c,k,e,d unpacker.

Embed hosts wrap their player setup in
  eval(function(p,a,c,k,e,d){...}('payload',radix,count,'sym|tab'.split('|')))
Unpacking gives back the plain JS so stream URLs can be regexed out.
"""
from __future__ import annotations
import re

PACKED_RE = re.compile(
    r"eval\(function\(p,a,c,k,e,[dr]\)\{.*?\}\('(.*?)',(\d+),(\d+),'(.*?)'\.split\('\|'\)",
    re.DOTALL,
)
_WORD_RE = re.compile(r"\b\w+\b")
_ALPHABET = "0123456789abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ"


def detect(text: str) -> bool:
    return PACKED_RE.search(text) is not None


def _to_int(word: str, radix: int) -> int:
    if radix <= 36:
        return int(word, radix)
    value = 0
    for ch in word:
        digit = _ALPHABET.index(ch)
        if digit >= radix:
            raise ValueError(word)
        value = value * radix + digit
    return value


def unpack(text: str) -> str:
    """Unpacked JS. Raises ValueError if `text` holds no packed script."""
    match = PACKED_RE.search(text)
    if not match:
        raise ValueError("no packed JavaScript found")

    payload, radix, count, symtab = match.groups()
    radix, count = int(radix), int(count)
    symbols = symtab.split("|")
    symbols += [""] * (count - len(symbols))

    def replace(m: re.Match) -> str:
        word = m.group(0)
        try:
            idx = _to_int(word, radix)
        except ValueError:
            return word
        if idx < len(symbols) and symbols[idx]:
            return symbols[idx]
        return word

    # payload is a JS string literal, so escaped quotes come through doubled
    return _WORD_RE.sub(replace, payload.replace("\\'", "'"))
