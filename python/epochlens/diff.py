import re
from typing import Dict, List, Tuple

import structlog
from diff_match_patch import diff_match_patch

from epochlens.models import EditOperation

logger = structlog.get_logger(__name__)

GRANULARITIES = ("char", "word")


def compute_text_edits(old_text: str, new_text: str, granularity: str = "char") -> List[EditOperation]:
    """
    Computes the edit operations that turn old_text into new_text.

    All operations are expressed in old_text coordinates and are meant to be
    applied as one batch. Identical inputs produce no operations at all.

    granularity:
        "char": character diff (diff-match-patch switches to a line-level
                pre-pass on long inputs).
        "word": diff over word / whitespace / punctuation tokens, so changes
                never split a word.
    """
    if granularity not in GRANULARITIES:
        raise ValueError(f"Unknown granularity '{granularity}', expected one of {GRANULARITIES}")

    if old_text == new_text:
        return []

    dmp = diff_match_patch()

    if granularity == "word":
        # 1. Word-Level Tokenization & Encoding
        chars1, chars2, token_array = _words_to_chars(old_text, new_text)

        # 2. Diff the encoded strings, then decode back to text
        diffs = dmp.diff_main(chars1, chars2, False)
        dmp.diff_charsToLines(diffs, token_array)
    else:
        diffs = dmp.diff_main(old_text, new_text)

    # Merge small isolated edits into their neighbours: fewer, larger edits
    dmp.diff_cleanupEfficiency(diffs)

    edits = []
    index = 0

    for op, text in diffs:
        if op == dmp.DIFF_EQUAL:
            index += len(text)
        elif op == dmp.DIFF_DELETE:
            edits.append(EditOperation(range_start=index, range_end=index + len(text), replacement=""))
            index += len(text)
        elif op == dmp.DIFF_INSERT:
            # Insertions consume nothing from the old text
            edits.append(EditOperation(range_start=index, range_end=index, replacement=text))

    logger.debug("Computed text edits", edits=len(edits), granularity=granularity, old_length=len(old_text))
    return edits


def _words_to_chars(text1: str, text2: str) -> Tuple[str, str, List[str]]:
    """
    Splits text into words/tokens and encodes them as unique Unicode characters.
    """
    token_array: List[str] = []
    token_hash: Dict[str, int] = {}
    split_pattern = r"(\s+|\w+|[^\w\s])"

    def encode_text(text: str) -> str:
        tokens = [t for t in re.split(split_pattern, text) if t]
        encoded_chars = []
        for token in tokens:
            if token in token_hash:
                encoded_chars.append(chr(token_hash[token]))
            else:
                code = len(token_array)
                token_hash[token] = code
                token_array.append(token)
                encoded_chars.append(chr(code))
        return "".join(encoded_chars)

    chars1 = encode_text(text1)
    chars2 = encode_text(text2)
    return chars1, chars2, token_array
