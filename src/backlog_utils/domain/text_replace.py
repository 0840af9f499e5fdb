"""String replacement helpers for wiki page names and content"""

import re
from typing import List, Sequence, Tuple


def to_pairs(values: Sequence[str]) -> List[Tuple[str, str]]:
    """Group a flat old/new sequence into (old, new) tuples

    Raises:
        ValueError: If the sequence is empty, has odd length or contains an empty old string
    """
    if len(values) == 0 or len(values) % 2 != 0:
        raise ValueError(
            f"number of old/new strings to replace does not match: {len(values)}"
        )
    pairs = [(values[i], values[i + 1]) for i in range(0, len(values), 2)]
    for old, _ in pairs:
        if old == "":
            raise ValueError("old strings must not be empty")
    return pairs


def replace_pairs(text: str, pairs: Sequence[Tuple[str, str]]) -> str:
    """Replace every old string with its new string in a single pass.

    Matches are found left to right without overlapping, and when several
    old strings match at the same position the earliest pair wins. Replaced
    text is never scanned again, so ``a -> b, b -> c`` turns ``ab`` into ``bc``.
    """
    if not pairs:
        return text
    mapping = {}
    for old, new in pairs:
        mapping.setdefault(old, new)
    # Alternation is tried in order, which gives the earliest pair priority
    pattern = re.compile("|".join(re.escape(old) for old, _ in pairs))
    return pattern.sub(lambda m: mapping[m.group(0)], text)
