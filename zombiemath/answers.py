from __future__ import annotations

import re

_UNITS = {
    "zero": 0,
    "oh": 0,
    "one": 1,
    "two": 2,
    "three": 3,
    "four": 4,
    "five": 5,
    "six": 6,
    "seven": 7,
    "eight": 8,
    "nine": 9,
    "ten": 10,
    "eleven": 11,
    "twelve": 12,
    "thirteen": 13,
    "fourteen": 14,
    "fifteen": 15,
    "sixteen": 16,
    "seventeen": 17,
    "eighteen": 18,
    "nineteen": 19,
}

_TENS = {
    "twenty": 20,
    "thirty": 30,
    "forty": 40,
    "fifty": 50,
    "sixty": 60,
    "seventy": 70,
    "eighty": 80,
    "ninety": 90,
}

# Common speech-to-text mishearings of short numbers.
_HOMOPHONES = {
    "won": "one",
    "to": "two",
    "too": "two",
    "for": "four",
    "fore": "four",
    "ate": "eight",
    "tree": "three",
}

_DIGITS_RE = re.compile(r"^\s*(\d+)\s*$")


def _words_to_int(words: list[str]) -> int | None:
    total = 0
    current = 0
    seen = False
    for word in words:
        word = _HOMOPHONES.get(word, word)
        if word == "and":
            continue
        if word in _UNITS:
            current += _UNITS[word]
        elif word in _TENS:
            current += _TENS[word]
        elif word == "hundred":
            current = (current or 1) * 100
        elif word == "thousand":
            total += (current or 1) * 1000
            current = 0
        else:
            return None
        seen = True
    if not seen:
        return None
    return total + current


def parse_answer(text: str) -> int | None:
    """Turn typed or spoken input into a non-negative integer answer.

    Accepts plain digits ("42") and number words ("forty two",
    "one hundred and eight"). Returns None for anything else.
    """

    match = _DIGITS_RE.match(text)
    if match:
        return int(match.group(1))

    words = [w for w in re.split(r"[\s\-]+", text.strip().lower()) if w]
    if not words:
        return None
    return _words_to_int(words)
