"""Text helpers for matching and highlighting search queries."""
import unicodedata
from typing import List, Tuple


def _fold_with_offsets(text: str) -> Tuple[str, List[int]]:
    """Case-fold text, keeping the source index of every folded character."""
    folded: List[str] = []
    offsets: List[int] = []
    for index, char in enumerate(text):
        for folded_char in char.casefold():
            folded.append(folded_char)
            offsets.append(index)
    return "".join(folded), offsets


def split_match(text: str, query: str) -> Tuple[str, str, str]:
    """Split text into (before, match, after) around the first case-insensitive match.

    Folding can change length ("İ", "ß"), so the match is located in the
    folded text and mapped back onto the original characters.
    With no match the whole text is returned as ``before``.
    """
    needle = query.casefold() if query else ""
    if not needle:
        return text, "", ""
    folded, offsets = _fold_with_offsets(text)
    position = folded.find(needle)
    if position == -1:
        return text, "", ""
    start = offsets[position]
    end = offsets[position + len(needle) - 1] + 1
    return text[:start], text[start:end], text[end:]


def collation_key(text: str) -> Tuple[str, str]:
    """Locale-style sort key: accents and case ignored first, raw text breaks ties."""
    decomposed = unicodedata.normalize("NFKD", text)
    base = "".join(char for char in decomposed if not unicodedata.combining(char))
    return base.casefold(), text
