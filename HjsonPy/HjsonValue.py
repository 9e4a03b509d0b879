import math
from enum import Enum
from typing import Any, Generic, TextIO, TypeVar


class HjsonConversionError(TypeError):
    pass

class HjsonRangeError(ValueError):
    pass

class HjsonType(Enum):
    OBJECT = 1
    ARRAY = 2
    STRING = 3
    NUMBER = 4
    BOOLEAN = 5
    NULL = 6
    DSF = 7

class CommentType(Enum):
    # Before the value on its own line(s). At the root, the file header.
    BOL = 1
    # After the value on the same line. At the root, the file footer.
    EOL = 2
    # Inside a container, after its last child or in place of children.
    INTERIOR = 3

class CommentStyle(Enum):
    HASH = 1
    LINE = 2
    BLOCK = 3

T = TypeVar("T")
E = TypeVar("E")
T2 = TypeVar("T2")
E2 = TypeVar("E2")

class HjsonResult(Generic[T, E]):
    is_error: bool
    value_or_none: T | None
    error_or_none: E | None

    def __init__(self, is_error: bool, value_or_none: T | None = None, error_or_none: E | None = None):
        self.is_error = is_error
        self.value_or_none = value_or_none
        self.error_or_none = error_or_none

    @staticmethod
    def from_value(value: T2) -> "HjsonResult[T2, E2]":
        return HjsonResult(False, value_or_none=value)

    @staticmethod
    def from_error(error: E2) -> "HjsonResult[T2, E2]":
        return HjsonResult(True, error_or_none=error)

    def value(self) -> T:
        if self.is_error:
            raise RuntimeError(f"Result was error: {self.error_or_none}")
        return self.value_or_none

    def error(self) -> E:
        if not self.is_error:
            raise RuntimeError(f"Result was value: {self.value_or_none!r}")
        return self.error_or_none

    def __repr__(self) -> str:
        if self.is_error:
            return f"error ({self.error_or_none!r})"
        return f"value ({self.value_or_none!r})"


def format_comment(style: CommentStyle, text: str) -> str:
    """
    Adds comment markers to marker-free comment text.
    """
    match style:
        case CommentStyle.HASH | CommentStyle.LINE:
            marker = "#" if style == CommentStyle.HASH else "//"
            return "\n".join(f"{marker} {line}" if line else marker for line in text.split("\n"))
        case CommentStyle.BLOCK:
            return "/*\n" + text + "\n*/"
    raise ValueError(f"Unknown comment style: {style!r}")

def strip_comment(text: str) -> str:
    """
    Removes comment markers from every line of a comment.

    Hash and line markers lose the marker and one following space. Lines of a
    block comment are trimmed, lose an optional leading '*', and lines holding
    nothing but '/*' or '*/' are dropped. A line opening with '/*' always starts
    a fresh block, even inside another one. Inside a block, lines starting with
    '#' or '//' are plain text.
    """
    lines: list[str] = []
    in_block = False
    for raw in text.replace("\r\n", "\n").split("\n"):
        line = raw.strip()
        had_marker = False
        is_block_line = in_block
        if line.startswith("/*"):
            line = line[2:]
            in_block = True
            is_block_line = True
            had_marker = True
        elif not in_block and line.startswith("#"):
            line = _strip_one_space(line[1:])
            is_block_line = False
        elif not in_block and line.startswith("//"):
            line = _strip_one_space(line[2:])
            is_block_line = False
        elif in_block and line.startswith("*") and not line.startswith("*/"):
            line = line[1:]
        if is_block_line and line.endswith("*/"):
            line = line[:-2]
            in_block = False
            had_marker = True
        if is_block_line:
            line = line.strip()
            if had_marker and not line:
                continue
        else:
            line = line.rstrip()
        lines.append(line)
    return "\n".join(lines)

def _strip_one_space(text: str) -> str:
    return text[1:] if text.startswith(" ") else text

def format_number(value: float) -> str:
    """
    Canonical text for a number: integral values print as integers, others as the
    shortest repr that reads back to the same double.
    """
    if value.is_integer() and abs(value) < 2 ** 63:
        return str(int(value))
    text = repr(value)
    if "e" in text:
        mantissa, exponent = text.split("e")
        power = int(exponent)
        text = f"{mantissa}e{'+' if power >= 0 else '-'}{abs(power)}"
    return text


class HjsonValue:
    """
    Base of every node in a parsed or constructed tree.

    Each value carries up to three comments (see CommentType) and an access flag
    that records whether a caller has read it, used to audit unused settings.
    """
    # Comment slots: type -> (style, text).
    _comments: dict[CommentType, tuple[CommentStyle, str]]
    # Whether the value has been read through a container accessor.
    accessed: bool

    def __init__(self) -> None:
        self._comments = {}
        self.accessed = False

    @property
    def type(self) -> HjsonType:
        raise NotImplementedError

    #
    # Predicates
    #

    def is_object(self) -> bool:
        return self.type == HjsonType.OBJECT

    def is_array(self) -> bool:
        return self.type == HjsonType.ARRAY

    def is_string(self) -> bool:
        return self.type == HjsonType.STRING

    def is_number(self) -> bool:
        return self.type == HjsonType.NUMBER

    def is_bool(self) -> bool:
        return self.type == HjsonType.BOOLEAN

    def is_true(self) -> bool:
        return False

    def is_false(self) -> bool:
        return False

    def is_null(self) -> bool:
        return self.type == HjsonType.NULL

    def is_dsf(self) -> bool:
        return self.type == HjsonType.DSF

    #
    # Typed accessors
    #

    def as_object(self) -> "HjsonObject":
        raise HjsonConversionError(f"Not an object: {self}")

    def as_array(self) -> "HjsonArray":
        raise HjsonConversionError(f"Not an array: {self}")

    def as_string(self) -> str:
        raise HjsonConversionError(f"Not a string: {self}")

    def as_float(self) -> float:
        raise HjsonConversionError(f"Not a number: {self}")

    def as_int(self) -> int:
        raise HjsonConversionError(f"Not a number: {self}")

    def as_long(self) -> int:
        raise HjsonConversionError(f"Not a number: {self}")

    def as_bool(self) -> bool:
        raise HjsonConversionError(f"Not a boolean: {self}")

    def as_dsf(self) -> object:
        raise HjsonConversionError(f"Not a DSF: {self}")

    def try_as_object(self) -> "HjsonResult[HjsonObject, str]":
        return _try(self.as_object)

    def try_as_array(self) -> "HjsonResult[HjsonArray, str]":
        return _try(self.as_array)

    def try_as_string(self) -> HjsonResult[str, str]:
        return _try(self.as_string)

    def try_as_float(self) -> HjsonResult[float, str]:
        return _try(self.as_float)

    def try_as_bool(self) -> HjsonResult[bool, str]:
        return _try(self.as_bool)

    def to_python(self) -> Any:
        raise NotImplementedError

    #
    # Comments
    #

    def set_comment(self, text: str | None, type: CommentType = CommentType.BOL, style: CommentStyle = CommentStyle.HASH) -> "HjsonValue":
        """
        Sets the marker-free text of one comment slot. None clears the slot.
        """
        if text is None:
            self._comments.pop(type, None)
        else:
            self._comments[type] = (style, text)
        return self

    def get_comment(self, type: CommentType = CommentType.BOL) -> str | None:
        entry = self._comments.get(type)
        return entry[1] if entry is not None else None

    def get_comment_style(self, type: CommentType = CommentType.BOL) -> CommentStyle:
        entry = self._comments.get(type)
        return entry[0] if entry is not None else CommentStyle.HASH

    def has_comment(self, type: CommentType = CommentType.BOL) -> bool:
        return type in self._comments

    def has_comments(self) -> bool:
        return len(self._comments) > 0

    def clear_comments(self) -> "HjsonValue":
        self._comments.clear()
        return self

    def copy_comments(self, other: "HjsonValue") -> "HjsonValue":
        self._comments = dict(other._comments)
        return self

    def _comments_match(self, other: "HjsonValue") -> bool:
        return all(self.get_comment(t) == other.get_comment(t) for t in CommentType)

    #
    # Access tracking and copies
    #

    def set_accessed(self, accessed: bool = True) -> "HjsonValue":
        self.accessed = accessed
        return self

    def shallow_copy(self) -> "HjsonValue":
        return self.deep_copy()

    def deep_copy(self, track_access: bool = False) -> "HjsonValue":
        raise NotImplementedError

    def _finish_copy(self, clone: "HjsonValue", track_access: bool) -> "HjsonValue":
        clone.copy_comments(self)
        if track_access:
            clone.accessed = self.accessed
        return clone

    #
    # Writing
    #

    def write(self, sink: TextIO, style: "Stringify | HjsonWriterOptions | None" = None) -> None:
        """
        Writes this value to a text sink in a style profile, or in the relaxed
        format when given writer options.
        """
        from .HjsonWriter import write_value
        write_value(self, sink, style)

    def format(self, style: "Stringify | HjsonWriterOptions | None" = None) -> str:
        from .HjsonWriter import format_value
        return format_value(self, style)

    def __str__(self) -> str:
        return self.format()

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.format()})"


def _try(accessor) -> HjsonResult:
    try:
        return HjsonResult.from_value(accessor())
    except HjsonConversionError as e:
        return HjsonResult.from_error(str(e))


class HjsonString(HjsonValue):
    string: str

    def __init__(self, string: str) -> None:
        super().__init__()
        if not isinstance(string, str):
            raise TypeError(f"Expected str, got {type(string).__name__}")
        self.string = string

    @property
    def type(self) -> HjsonType:
        return HjsonType.STRING

    def as_string(self) -> str:
        return self.string

    def to_python(self) -> str:
        return self.string

    def deep_copy(self, track_access: bool = False) -> "HjsonString":
        return self._finish_copy(HjsonString(self.string), track_access)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, HjsonString):
            return NotImplemented
        return self.string == other.string and self._comments_match(other)

    def __hash__(self) -> int:
        return hash((HjsonType.STRING, self.string))


class HjsonNumber(HjsonValue):
    number: float

    _INT_RANGE = (-2 ** 31, 2 ** 31 - 1)
    _LONG_RANGE = (-2 ** 63, 2 ** 63 - 1)

    def __init__(self, number: float | int) -> None:
        super().__init__()
        try:
            number = float(number)
        except OverflowError:
            raise ValueError(f"Number out of range for a double: {number}") from None
        if math.isnan(number) or math.isinf(number):
            raise ValueError("Infinite and NaN values are not permitted in JSON")
        self.number = number

    @property
    def type(self) -> HjsonType:
        return HjsonType.NUMBER

    def as_float(self) -> float:
        return self.number

    def as_int(self) -> int:
        return self._as_integer(self._INT_RANGE, "int")

    def as_long(self) -> int:
        return self._as_integer(self._LONG_RANGE, "long")

    def _as_integer(self, bounds: tuple[int, int], width: str) -> int:
        text = format_number(self.number)
        if any(c in text for c in ".eE"):
            raise HjsonRangeError(f"Not an integer: {text}")
        result = int(text)
        if not bounds[0] <= result <= bounds[1]:
            raise HjsonRangeError(f"Out of {width} range: {text}")
        return result

    def to_python(self) -> int | float:
        text = format_number(self.number)
        if any(c in text for c in ".eE"):
            return self.number
        return int(text)

    def deep_copy(self, track_access: bool = False) -> "HjsonNumber":
        return self._finish_copy(HjsonNumber(self.number), track_access)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, HjsonNumber):
            return NotImplemented
        return self.number == other.number and self._comments_match(other)

    def __hash__(self) -> int:
        return hash((HjsonType.NUMBER, self.number))


class HjsonBoolean(HjsonValue):
    boolean: bool

    def __init__(self, boolean: bool) -> None:
        super().__init__()
        self.boolean = bool(boolean)

    @property
    def type(self) -> HjsonType:
        return HjsonType.BOOLEAN

    def is_true(self) -> bool:
        return self.boolean

    def is_false(self) -> bool:
        return not self.boolean

    def as_bool(self) -> bool:
        return self.boolean

    def to_python(self) -> bool:
        return self.boolean

    def deep_copy(self, track_access: bool = False) -> "HjsonBoolean":
        return self._finish_copy(HjsonBoolean(self.boolean), track_access)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, HjsonBoolean):
            return NotImplemented
        return self.boolean == other.boolean and self._comments_match(other)

    def __hash__(self) -> int:
        return hash((HjsonType.BOOLEAN, self.boolean))


class HjsonNull(HjsonValue):
    @property
    def type(self) -> HjsonType:
        return HjsonType.NULL

    def to_python(self) -> None:
        return None

    def deep_copy(self, track_access: bool = False) -> "HjsonNull":
        return self._finish_copy(HjsonNull(), track_access)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, HjsonNull):
            return NotImplemented
        return self._comments_match(other)

    def __hash__(self) -> int:
        return hash(HjsonType.NULL)


class HjsonDsf(HjsonValue):
    """
    A scalar of a domain-specific format, produced and formatted by a provider.
    """
    # The host object.
    dsf: object
    # The provider that recognised the text and formats the object back.
    provider: "HjsonDsfProvider"

    def __init__(self, dsf: object, provider: "HjsonDsfProvider") -> None:
        super().__init__()
        self.dsf = dsf
        self.provider = provider

    @property
    def type(self) -> HjsonType:
        return HjsonType.DSF

    def as_dsf(self) -> object:
        return self.dsf

    def to_python(self) -> object:
        return self.dsf

    def text(self) -> str:
        text = self.provider.stringify(self.dsf)
        if text is None:
            raise ValueError(f"DSF provider {self.provider.name!r} cannot format {self.dsf!r}")
        return text

    def deep_copy(self, track_access: bool = False) -> "HjsonDsf":
        return self._finish_copy(HjsonDsf(self.dsf, self.provider), track_access)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, HjsonDsf):
            return NotImplemented
        return (type(self.provider) is type(other.provider)
                and self.provider.equals(self.dsf, other.dsf)
                and self._comments_match(other))

    def __hash__(self) -> int:
        return hash((HjsonType.DSF, type(self.provider)))


def value_of(value: object) -> HjsonValue:
    """
    Converts plain Python data into a value tree. Existing values pass through.
    """
    from .HjsonArray import HjsonArray
    from .HjsonObject import HjsonObject

    if isinstance(value, HjsonValue):
        return value
    if value is None:
        return HjsonNull()
    # bool before int, bool is a subclass of int
    if isinstance(value, bool):
        return HjsonBoolean(value)
    if isinstance(value, (int, float)):
        return HjsonNumber(value)
    if isinstance(value, str):
        return HjsonString(value)
    if isinstance(value, dict):
        obj = HjsonObject()
        for name, item in value.items():
            obj.add(str(name), value_of(item))
        return obj
    if isinstance(value, (list, tuple)):
        array = HjsonArray()
        for item in value:
            array.add(value_of(item))
        return array
    raise TypeError(f"Cannot convert {type(value).__name__} to an Hjson value")
