"""
Converter UI state as a pure reducer.

A Session holds the current input, output, error and mode. reduce() never
mutates its argument; output and error are never both set.
"""

from __future__ import annotations

import os
from typing import Optional

from . import rules
from .convert import convert
from .models import (
    ConversionError,
    ConvertRequested,
    FileLoaded,
    FileReadFailed,
    InputChanged,
    ModeToggled,
    Session,
)


def mode_for_filename(filename: str) -> Optional[str]:
    """Mode suggested by a file's extension, or None when it says nothing."""
    _, ext = os.path.splitext(filename)
    return rules.EXTENSION_MODES.get(ext.lower())


def toggle(mode: str) -> str:
    return rules.JSON2CSV if mode == rules.CSV2JSON else rules.CSV2JSON


def reduce(session: Session, event) -> Session:
    if isinstance(event, InputChanged):
        return session.model_copy(update={"input": event.text, "error": None})

    if isinstance(event, ModeToggled):
        return session.model_copy(
            update={"mode": toggle(session.mode), "output": "", "error": None}
        )

    if isinstance(event, FileLoaded):
        mode = mode_for_filename(event.filename) or session.mode
        return session.model_copy(
            update={"input": event.content, "error": None, "mode": mode}
        )

    if isinstance(event, FileReadFailed):
        return session.model_copy(
            update={"output": "", "error": ConversionError(message=rules.MSG_FILE_READ_FAILED)}
        )

    if isinstance(event, ConvertRequested):
        result = convert(session.mode, session.input, quoted=event.quoted)
        return session.model_copy(update={"output": result.output, "error": result.error})

    raise TypeError(f"Unsupported session event: {type(event).__name__}")
