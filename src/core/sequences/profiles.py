"""
Display formats for reference numbers.

Every reference number renders as PREFIX-YYYY-NNN, e.g. AV-2025-003.
Well-known sequences have a fixed prefix; anything else (including the
"FORM:<X>" family used for form submissions) derives its prefix from the tag.
"""
import re
from dataclasses import dataclass
from enum import StrEnum

FORM_TAG_MARKER = "FORM:"
DEFAULT_FORM_TAG = "FORM:SKJ"
DEFAULT_FORM_SUFFIX = DEFAULT_FORM_TAG.removeprefix(FORM_TAG_MARKER)
GENERIC_PREFIX_LENGTH = 6

_NOT_ALNUM = re.compile(r"[^A-Z0-9]")


class SequenceType(StrEnum):
    """Sequences with a fixed display prefix."""

    INCIDENT = "AVVIK"


class ProfileKind(StrEnum):
    KNOWN = "known"
    GENERIC = "generic"


@dataclass(frozen=True)
class SequenceProfile:
    kind: ProfileKind
    prefix: str

    def render(self, year: int, number: int) -> str:
        # No upper bound on digits: 1000 renders as "1000"
        return f"{self.prefix}-{year:04d}-{number:03d}"


KNOWN_PROFILES: dict[SequenceType, SequenceProfile] = {
    SequenceType.INCIDENT: SequenceProfile(ProfileKind.KNOWN, "AV"),
}


def _sanitize(value: str) -> str:
    return _NOT_ALNUM.sub("", value.strip().upper())


def generic_prefix(sequence_type: str) -> str:
    """
    Derive a display prefix from a free-form tag.

    "FORM:custom-tag!!" -> "CUSTOM". Distinct tags may collapse onto the same
    prefix ("Alpha!!" and "Alpha??" both give "ALPHA"); existing numbering
    relies on this, so it is kept as is.
    """
    body = sequence_type.strip().removeprefix(FORM_TAG_MARKER)
    return _sanitize(body)[:GENERIC_PREFIX_LENGTH] or DEFAULT_FORM_SUFFIX


def resolve_profile(sequence_type: str) -> SequenceProfile:
    """Return the display profile for a sequence tag."""
    try:
        known = SequenceType(sequence_type)
    except ValueError:
        return SequenceProfile(ProfileKind.GENERIC, generic_prefix(sequence_type))
    return KNOWN_PROFILES[known]


def resolve_sequence_tag(form_prefix_config: str | None) -> str:
    """
    Normalize the reference prefix configured on a form template into a tag.

    Blank config gives DEFAULT_FORM_TAG. " risk-report " gives "FORM:RISKREPORT".
    """
    if form_prefix_config is None or not form_prefix_config.strip():
        return DEFAULT_FORM_TAG
    cleaned = _sanitize(form_prefix_config) or DEFAULT_FORM_SUFFIX
    return f"{FORM_TAG_MARKER}{cleaned}"
