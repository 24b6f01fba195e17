"""
chirps/content.py -- Body rules for chirps.

A chirp body is 1..140 characters. Words on the profanity list are replaced
with four asterisks, matched case-insensitively on whole space-separated
words only ("Fornax!" is left alone, "FORNAX" is masked).
"""

MAX_CHIRP_LENGTH = 140

PROFANE_WORDS = frozenset({"kerfuffle", "sharbert", "fornax"})

_MASK = "****"


def clean_body(body: str) -> str:
    """Return body with every profane word replaced by '****'."""
    words = body.split(" ")
    return " ".join(_MASK if word.lower() in PROFANE_WORDS else word for word in words)
