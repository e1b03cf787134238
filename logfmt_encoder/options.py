"""
Encoder options.
"""
from dataclasses import dataclass

NESTED_KEY_POLICIES = ("flat", "dotted")


@dataclass(frozen=True)
class EncoderOptions:
    """
    Tunables for a RecordEncoder.

    Attributes:
        nested_keys: "flat" writes nested keys unprefixed and repeats a sequence's
            name for each element; "dotted" prefixes keys with their path and names
            sequence elements by index (`nums.0=1`)
        terminate_empty_records: write a newline even for a record with no fields
        escape_control: escape control characters inside quoted values
        escape_keys: percent-encode non-bare key characters instead of raising
    """

    nested_keys: str = "flat"
    terminate_empty_records: bool = True
    escape_control: bool = False
    escape_keys: bool = False

    def __post_init__(self):
        if self.nested_keys not in NESTED_KEY_POLICIES:
            raise ValueError(
                f"nested_keys must be one of {', '.join(NESTED_KEY_POLICIES)}, got {self.nested_keys!r}"
            )


DEFAULT_OPTIONS = EncoderOptions()
