"""Text analysis for the keyword searcher: tokenization and phrase matching."""

import re
from typing import List, Sequence

# Unicode letters and digits; underscores and punctuation separate tokens.
WORD_PATTERN = re.compile(r"[^\W_]+")

# Identifier parts: "HTTPServer" -> HTTP, Server; "getWeather" -> get, Weather
IDENTIFIER_PART_PATTERN = re.compile(r"[A-Z]+(?=[A-Z][a-z])|[A-Z]?[a-z]+|[A-Z]+|\d+")


def analyze(text: str) -> List[str]:
    """Lower-case word tokens of *text*, in order."""
    if not text:
        return []
    return WORD_PATTERN.findall(text.lower())


def analyze_name(name: str) -> List[str]:
    """
    Tokens for a tool name.

    The name is split on separators and case changes so that "currentTime"
    and "current_time" both match the query "current time". The whole
    lower-cased name is appended when it differs from its single part.
    """
    if not name:
        return []
    tokens: List[str] = []
    for word in WORD_PATTERN.findall(name):
        parts = [p.lower() for p in IDENTIFIER_PART_PATTERN.findall(word)] or [word.lower()]
        tokens.extend(parts)
    whole = name.lower()
    if tokens != [whole] and WORD_PATTERN.fullmatch(whole):
        tokens.append(whole)
    return tokens


def contains_phrase(tokens: Sequence[str], phrase: Sequence[str]) -> bool:
    """True if *phrase* occurs contiguously in *tokens*."""
    n = len(phrase)
    if n == 0 or n > len(tokens):
        return False
    first = phrase[0]
    for i in range(len(tokens) - n + 1):
        if tokens[i] == first and list(tokens[i:i + n]) == list(phrase):
            return True
    return False
