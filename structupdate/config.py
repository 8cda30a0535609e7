"""
structupdate.config — Per-call update options.

UpdateOptions is frozen after creation and passed explicitly to the engine
and the builders.  There is no process-wide mutable configuration.
"""

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True, slots=True)
class UpdateOptions:
    """Options controlling how command trees are interpreted.

    Attributes:
        strict: Reject command nodes that hold more than one reserved key,
            or a reserved key next to property keys.  When False, the first
            reserved key in registry order wins, the rest are ignored and a
            warning is logged.
        pad_value: Filler placed in a list when a command addresses an index
            past its end.
    """

    strict: bool = True
    pad_value: Any = None


DEFAULT_OPTIONS = UpdateOptions()
