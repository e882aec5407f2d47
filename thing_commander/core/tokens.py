"""
Operator input tokenizing.
"""
import re
from typing import List

# Quoted substrings stay attached to the token they appear in, quotes included
TOKEN_PATTERN = re.compile(r'''(?:[^\s'"]+|'[^']*'|"[^"]*")+''')

QUOTE_CHARACTERS = ('"', "'")


def tokenize(line: str) -> List[str]:
    """Split a shell line on whitespace, keeping quoted substrings whole."""
    if not line:
        return []
    return TOKEN_PATTERN.findall(line)


def strip_quotes(text: str) -> str:
    """Remove one pair of matching outer quote characters, if present."""
    if len(text) >= 2 and text[0] == text[-1] and text[0] in QUOTE_CHARACTERS:
        return text[1:-1]
    return text
