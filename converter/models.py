from __future__ import annotations

from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

Mode = Literal["csv2json", "json2csv"]


class ConversionError(BaseModel):
    model_config = ConfigDict(frozen=True)

    message: str
    details: Optional[str] = None


class ConvertRequest(BaseModel):
    mode: Mode = "csv2json"
    input: str = ""
    quoted: bool = Field(default=False, description="Accept RFC 4180 quoted fields in CSV input")


class ConvertResult(BaseModel):
    """Exactly one of output / error is meaningful; output is empty on error."""

    model_config = ConfigDict(frozen=True)

    output: str = ""
    error: Optional[ConversionError] = None
    filename: str

    @property
    def ok(self) -> bool:
        return self.error is None


class UploadResponse(BaseModel):
    filename: str
    content: str
    mode: Optional[Mode] = Field(default=None, examples=[None])
    encoding: str


class HealthResponse(BaseModel):
    ok: bool = True


# --- session state + events ---


class Session(BaseModel):
    model_config = ConfigDict(frozen=True)

    input: str = ""
    output: str = ""
    error: Optional[ConversionError] = None
    mode: Mode = "csv2json"


class InputChanged(BaseModel):
    type: Literal["input_changed"] = "input_changed"
    text: str


class ModeToggled(BaseModel):
    type: Literal["mode_toggled"] = "mode_toggled"


class FileLoaded(BaseModel):
    type: Literal["file_loaded"] = "file_loaded"
    filename: str
    content: str


class FileReadFailed(BaseModel):
    type: Literal["file_read_failed"] = "file_read_failed"


class ConvertRequested(BaseModel):
    type: Literal["convert_requested"] = "convert_requested"
    quoted: bool = False


SessionEvent = Annotated[
    Union[InputChanged, ModeToggled, FileLoaded, FileReadFailed, ConvertRequested],
    Field(discriminator="type"),
]


class SessionRequest(BaseModel):
    session: Session = Field(default_factory=Session)
    event: SessionEvent
