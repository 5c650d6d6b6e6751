import json
import math
from enum import Enum
from typing import List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, StrictBool, computed_field, field_validator
from typing_extensions import Annotated


class Span(BaseModel):
    """
    Half-open [start, end) range of character offsets into one source string.
    """
    model_config = ConfigDict(frozen=True)

    start: int
    end: int


class ValueKind(str, Enum):
    INTEGER = "integer"
    FLOAT = "float"
    BOOLEAN = "boolean"
    STRING = "string"


# Encoding styles: how a literal was written, so an unchanged value comes back
# byte-for-byte and a changed one keeps the same look where it can.

class IntegerStyle(BaseModel):
    model_config = ConfigDict(frozen=True)

    source: Optional[str] = None  # Literal text as written, sign included
    base: Literal[2, 8, 10, 16] = 10
    suffix: str = ""  # "i32", "u8", ...
    uppercase: bool = False  # Hex digit case
    group: int = 0  # Digits per "_" group, 0 = no separators
    width: int = 0  # Zero-padded digit count


class FloatStyle(BaseModel):
    model_config = ConfigDict(frozen=True)

    source: Optional[str] = None
    exponent: bool = False
    suffix: str = ""  # "f32", "f64"
    point: bool = True  # False for integer-looking floats like `1f32`


class BooleanStyle(BaseModel):
    model_config = ConfigDict(frozen=True)

    source: Optional[str] = None


class StringStyle(BaseModel):
    model_config = ConfigDict(frozen=True)

    source: Optional[str] = None
    raw: bool = False
    hashes: int = 0  # Number of '#' around a raw string


class IntegerValue(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["integer"] = "integer"
    value: int
    style: IntegerStyle = Field(default_factory=IntegerStyle)


class FloatValue(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["float"] = "float"
    value: float
    style: FloatStyle = Field(default_factory=FloatStyle)

    @field_validator("value")
    @classmethod
    def _finite(cls, value: float) -> float:
        if not math.isfinite(value):
            raise ValueError("float literals must be finite")
        return value


class BooleanValue(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["boolean"] = "boolean"
    value: StrictBool
    style: BooleanStyle = Field(default_factory=BooleanStyle)


class StringValue(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["string"] = "string"
    value: str
    style: StringStyle = Field(default_factory=StringStyle)


Value = Annotated[
    Union[IntegerValue, FloatValue, BooleanValue, StringValue],
    Field(discriminator="kind"),
]


def display_value(value: Union[IntegerValue, FloatValue, BooleanValue, StringValue]) -> str:
    """Human-readable rendering of a value, independent of its literal style."""
    if isinstance(value, BooleanValue):
        return "true" if value.value else "false"
    if isinstance(value, StringValue):
        return json.dumps(value.value, ensure_ascii=False)
    if isinstance(value, FloatValue):
        return repr(value.value)
    return str(value.value)


class EntryId(BaseModel):
    """
    Stable identity of a catalog entry: the binding name plus its index among
    same-named declarations in document order.
    """
    model_config = ConfigDict(frozen=True)

    name: str
    occurrence: int = 0

    def __str__(self) -> str:
        if self.occurrence == 0:
            return self.name
        return f"{self.name}#{self.occurrence}"

    @classmethod
    def parse(cls, text: str) -> "EntryId":
        """Inverse of str(): "x" -> (x, 0), "x#2" -> (x, 2), "r#type#1" -> (r#type, 1)."""
        name, sep, occurrence = text.rpartition("#")
        if sep and occurrence.isdigit():
            return cls(name=name, occurrence=int(occurrence))
        return cls(name=text)


class CatalogEntry(BaseModel):
    """
    One editable variable: a declaration whose initializer is a literal.
    """
    model_config = ConfigDict(frozen=True)

    id: EntryId
    name: str
    binding: Literal["let", "const", "static"]
    mutable: bool = False
    type_hint: Optional[str] = None  # As written, e.g. "&str"
    kind: ValueKind
    value: Value
    origin: Literal["literal", "constant", "conversion"] = "literal"
    constant: Optional[str] = None  # Constant name when origin == "constant"
    line: int  # 1-indexed line of the initializer
    span: Span = Field(exclude=True)  # Initializer span, for the mutator only

    @computed_field
    @property
    def display(self) -> str:
        hint = f": {self.type_hint}" if self.type_hint else ""
        return f"{self.name}{hint} = {display_value(self.value)}"


class EditRequest(BaseModel):
    """Set the entry identified by entry_id to value."""
    entry_id: EntryId
    value: Value


class MutationResult(BaseModel):
    """
    Result of a single-entry edit.
    """
    text: str  # The complete new source
    entry_id: EntryId
    span: Span  # Replaced span in the old source
    old_literal: str
    new_literal: str
    diff: Optional[str] = None
    warnings: List[str] = Field(default_factory=list)

    @property
    def changed(self) -> bool:
        return self.old_literal != self.new_literal


class RunResult(BaseModel):
    """
    Outcome of compiling and running a source snapshot with rustc.
    """
    stage: Literal["compile", "run"]
    success: bool
    returncode: Optional[int] = None
    stdout: str = ""
    stderr: str = ""
    duration: float = 0.0  # Seconds, both stages together
    timed_out: bool = False
