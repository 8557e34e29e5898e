"""
Card name normalization.

Produces the comparison key used by the catalog index and the matcher.
The key contains only lowercase ASCII letters, digits and single spaces.

normalize() is total, deterministic and idempotent:
    normalize(normalize(x)) == normalize(x)
"""

import re
import unicodedata

from deckmatch.models.catalog import FACE_SEPARATOR

# Typographic characters mapped to ASCII before anything else
_CHAR_REPLACEMENTS = str.maketrans(
    {
        "\u2018": "'",  # left single quote
        "\u2019": "'",  # right single quote
        "\u201a": "'",
        "\u2032": "'",
        "\u201c": '"',
        "\u201d": '"',
        "\u201e": '"',
        "\u2013": "-",  # en dash
        "\u2014": "-",  # em dash
        "\u2212": "-",
        "\u00a0": " ",
    }
)

# Letters that NFD does not decompose
_LIGATURES = str.maketrans(
    {"\u00e6": "ae", "\u0153": "oe", "\u00df": "ss", "\u00f8": "o", "\u0142": "l"}
)

# Removed without leaving a gap: "Urza's" -> "urzas", "Sheoldred, the" -> "sheoldred the"
_DROPPED = re.compile(r"[,'`\"]")
_DASHES = re.compile(r"-")
_NON_KEY = re.compile(r"[^a-z0-9 ]")
_WHITESPACE = re.compile(r"\s+")


def _strip_diacritics(text: str) -> str:
    decomposed = unicodedata.normalize("NFD", text)
    return "".join(ch for ch in decomposed if not unicodedata.combining(ch))


def normalize(name: str) -> str:
    """
    Return the canonical comparison key for a card name.

    Examples:
        "Juzám Djinn" -> "juzam djinn"
        "Æther Vial" -> "aether vial"
        "Fire // Ice" -> "fire ice"
        "Sheoldred, the Apocalypse" -> "sheoldred the apocalypse"
    """
    text = name.lower().translate(_CHAR_REPLACEMENTS).translate(_LIGATURES)
    text = _strip_diacritics(text)
    text = _DROPPED.sub("", text)
    text = _DASHES.sub(" ", text)
    text = _NON_KEY.sub(" ", text)
    return _WHITESPACE.sub(" ", text).strip()


def primary_face(name: str) -> str:
    """
    Return the normalized key of the first face of a multi-face name.

    For names without " // " this equals normalize(name).
    """
    return normalize(name.split(FACE_SEPARATOR, 1)[0])


def has_multiple_faces(name: str) -> bool:
    """True if the name uses the split/adventure/MDFC separator."""
    return FACE_SEPARATOR in name
