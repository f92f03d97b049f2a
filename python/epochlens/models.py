from enum import Enum
from typing import List

from pydantic import BaseModel, ConfigDict, Field


class Timezone(str, Enum):
    UTC = "UTC"
    CHICAGO = "America/Chicago"
    AMSTERDAM = "Europe/Amsterdam"


SUPPORTED_TIMEZONES: List[Timezone] = [Timezone.UTC, Timezone.CHICAGO, Timezone.AMSTERDAM]
DEFAULT_TIMEZONE = Timezone.CHICAGO


class TimestampKind(str, Enum):
    SECONDS = "SECONDS"
    MILLISECONDS = "MILLISECONDS"


class Match(BaseModel):
    """
    A timestamp-shaped digit run found in the source text.
    Offsets refer to the source, not to the rewritten output.
    """

    model_config = ConfigDict(frozen=True)

    start: int = Field(..., ge=0, description="Offset of the first digit in the source text.")
    raw: str = Field(..., description="The matched digits, exactly as they appear in the source.")
    kind: TimestampKind

    @property
    def end(self) -> int:
        return self.start + len(self.raw)

    @property
    def epoch_millis(self) -> int:
        value = int(self.raw)
        if self.kind == TimestampKind.SECONDS:
            return value * 1000
        return value


class HighlightRange(BaseModel):
    """Half-open span [start, end) in the rewritten text."""

    model_config = ConfigDict(frozen=True)

    start: int = Field(..., ge=0)
    end: int = Field(..., ge=0)


class ConversionResult(BaseModel):
    text: str
    ranges: List[HighlightRange] = Field(default_factory=list)


class ConversionConfig(BaseModel):
    """
    Options for a single rewrite pass.
    Mirrors the toggles of the converter UI: timezone picker,
    'Replace timestamp' and 'Use Java datetime format'.
    """

    model_config = ConfigDict(frozen=True)

    timezone: Timezone = Field(DEFAULT_TIMEZONE, description="Timezone used to render converted dates.")
    replace_in_place: bool = Field(
        False,
        description="If True the digits are replaced by the date, otherwise the date is appended in brackets.",
    )
    use_alternate_format: bool = Field(
        False,
        description="If True render 'yyyy-MM-ddTHH:mm:ss+HH:MM[Zone/Id]' (java.time ZonedDateTime style).",
    )


class EditOperation(BaseModel):
    """
    Replace old_text[range_start:range_end] with replacement.
    Coordinates always refer to the text the batch was computed against.
    """

    model_config = ConfigDict(frozen=True)

    range_start: int = Field(..., ge=0)
    range_end: int = Field(..., ge=0)
    replacement: str = ""

    @property
    def is_insertion(self) -> bool:
        return self.range_start == self.range_end and bool(self.replacement)

    @property
    def is_deletion(self) -> bool:
        return self.range_end > self.range_start and not self.replacement


class Position(BaseModel):
    """1-based line/column address inside a text buffer."""

    model_config = ConfigDict(frozen=True)

    line: int = Field(..., ge=1)
    column: int = Field(..., ge=1)


class PositionRange(BaseModel):
    model_config = ConfigDict(frozen=True)

    start: Position
    end: Position


class AppState(BaseModel):
    """
    Whole-application state persisted between sessions.
    Serialized with the camelCase keys used by the stored payload.
    """

    model_config = ConfigDict(populate_by_name=True)

    input_text: str = Field("", alias="inputText")
    replace_timestamp: bool = Field(False, alias="replaceTimestamp")
    use_java_format: bool = Field(False, alias="useJavaFormat")
    selected_timezone: Timezone = Field(DEFAULT_TIMEZONE, alias="selectedTimezone")

    def to_config(self) -> ConversionConfig:
        return ConversionConfig(
            timezone=self.selected_timezone,
            replace_in_place=self.replace_timestamp,
            use_alternate_format=self.use_java_format,
        )
