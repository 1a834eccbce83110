"""
Tag decomposition.

ISA-5.1 style instrument tags: first letter is the measured variable,
succeeding letters are functions, then the loop number and an optional
suffix for redundant instruments:

    TIC-101   → T | I C | 101
    TT-101A   → T | T   | 101 | A
    FIC_201   → F | I C | 201

Equipment tags (R-101, PMP-7, P-101-A) fall back to a looser grammar where
the whole letter block is an opaque class.
"""

import re
from typing import Optional

from .ontology import TagComponents


_SEPARATORS = re.compile(r"[-_\s]+")
_INSTRUMENT = re.compile(r"^([A-Z])([A-Z]*)(-?)(\d+)([A-Z]?)$")
_EQUIPMENT = re.compile(r"^([A-Z]+)(-?)(\d+)(-?)([A-Z]?)$")


def normalize_tag(tag: Optional[str]) -> str:
    """Uppercase, trim, and collapse separator runs to a single '-'."""
    if not tag:
        return ""
    return _SEPARATORS.sub("-", tag.strip().upper()).strip("-")


def parse_tag(tag: Optional[str]) -> Optional[TagComponents]:
    """Decompose a tag string. Returns None when neither grammar matches."""
    normalized = normalize_tag(tag)
    if not normalized:
        return None

    match = _INSTRUMENT.match(normalized)
    if match:
        return TagComponents(
            variable=match.group(1),
            functions=list(match.group(2)),
            separator=match.group(3),
            loop_number=match.group(4),
            suffix=match.group(5) or None,
            raw=tag,
        )

    match = _EQUIPMENT.match(normalized)
    if match:
        return TagComponents(
            variable=match.group(1),
            functions=[],
            separator=match.group(2),
            loop_number=match.group(3),
            suffix_separator=match.group(4) if match.group(5) else "",
            suffix=match.group(5) or None,
            is_equipment=True,
            raw=tag,
        )

    return None


def loop_key(tag: Optional[str]) -> Optional[str]:
    parsed = parse_tag(tag)
    return parsed.loop_key if parsed else None
