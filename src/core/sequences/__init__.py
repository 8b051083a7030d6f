from src.core.sequences.models import SequenceCounter
from src.core.sequences.profiles import (
    DEFAULT_FORM_TAG,
    SequenceProfile,
    SequenceType,
    resolve_profile,
    resolve_sequence_tag,
)
from src.core.sequences.allocator import SequenceAllocator, get_next_number

__all__ = [
    "DEFAULT_FORM_TAG",
    "SequenceAllocator",
    "SequenceCounter",
    "SequenceProfile",
    "SequenceType",
    "get_next_number",
    "resolve_profile",
    "resolve_sequence_tag",
]
