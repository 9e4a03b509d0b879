import math
from typing import Iterable, NamedTuple, TextIO

from .HjsonArray import HjsonArray
from .HjsonDsf import HjsonDsfProvider, dsf_parse
from .HjsonObject import HjsonObject
from .HjsonScanner import HjsonParseError, HjsonScanner
from .HjsonValue import (
    CommentStyle, CommentType, HjsonBoolean, HjsonNull, HjsonNumber, HjsonResult,
    HjsonString, HjsonValue, strip_comment,
)

# Characters that end a keyword or a number.
_STOP_CHARS = set([",", "}", "]", "#"])
# Characters that need quotes in key names.
_PUNCTUATORS = set(["{", "}", "[", "]", ",", ":"])
# Characters that are whitespace between tokens.
_WHITESPACE = set([" ", "\t", "\n", "\r"])
_DIGITS = set("0123456789")
_HEX_DIGITS = set("0123456789abcdefABCDEF")
_ESCAPES = {
    '"': '"',
    "'": "'",
    "/": "/",
    "\\": "\\",
    "b": "\b",
    "f": "\f",
    "n": "\n",
    "r": "\r",
    "t": "\t",
}


def is_whitespace(ch: str | None) -> bool:
    return ch in _WHITESPACE

def is_punctuator(ch: str | None) -> bool:
    return ch in _PUNCTUATORS

def read_escape(scanner: HjsonScanner, escapes: dict[str, str]) -> str:
    """
    Reads the escape sequence after a backslash and returns the text it stands for.
    The scanner is left on the last character of the sequence. A UTF-16 surrogate
    pair written as two \\u escapes becomes a single character.
    """
    scanner.read()
    ch = scanner.current
    if ch in escapes:
        return escapes[ch]
    if ch == "u":
        code = _read_hex4(scanner)
        if 0xD800 <= code <= 0xDBFF and scanner.peek() == "\\" and scanner.peek(2) == "u":
            low = "".join(scanner.peek(k) or "" for k in range(3, 7))
            if len(low) == 4 and all(c in _HEX_DIGITS for c in low) and 0xDC00 <= int(low, 16) <= 0xDFFF:
                for _ in range(6):
                    scanner.read()
                return chr(0x10000 + ((code - 0xD800) << 10) + (int(low, 16) - 0xDC00))
        return chr(code)
    if ch is None:
        raise scanner.error("Bad escape: unexpected end of input")
    raise scanner.error(f"Bad escape \\{ch}")

def _read_hex4(scanner: HjsonScanner) -> int:
    digits = []
    for _ in range(4):
        scanner.read()
        if scanner.current not in _HEX_DIGITS:
            raise scanner.error("Bad escape: expected a hexadecimal digit")
        digits.append(scanner.current)
    return int("".join(digits), 16)

def try_parse_number(text: str, stop_at_next: bool = False) -> float | None:
    """
    Reads text as a number, allowing trailing whitespace.

    Grammar: optional '-', then '0' or a non-zero digit followed by digits,
    an optional fraction of one or more digits, and an optional exponent with
    optional sign and one or more digits. With stop_at_next, a stop character
    (',', '}', ']' or a comment) may follow the number and its whitespace.
    Returns None when the text is not a number or overflows a double.
    """
    i = 0
    n = len(text)
    if i < n and text[i] == "-":
        i += 1
    if i >= n or text[i] not in _DIGITS:
        return None
    first = text[i]
    i += 1
    # Leading zero is not allowed
    if first == "0" and i < n and text[i] in _DIGITS:
        return None
    while i < n and text[i] in _DIGITS:
        i += 1
    # Fraction
    if i < n and text[i] == ".":
        i += 1
        if i >= n or text[i] not in _DIGITS:
            return None
        while i < n and text[i] in _DIGITS:
            i += 1
    # Exponent
    if i < n and text[i] in "eE":
        i += 1
        if i < n and text[i] in "+-":
            i += 1
        if i >= n or text[i] not in _DIGITS:
            return None
        while i < n and text[i] in _DIGITS:
            i += 1
    last = i
    while i < n and is_whitespace(text[i]):
        i += 1
    if i < n:
        if not stop_at_next:
            return None
        ch = text[i]
        is_comment = ch == "/" and i + 1 < n and text[i + 1] in "/*"
        if ch not in _STOP_CHARS and not is_comment:
            return None
    value = float(text[:last])
    if math.isinf(value):
        return None
    return value

def starts_with_keyword(text: str) -> bool:
    """
    Whether a quoteless string would read back as true, false or null.
    """
    if text.startswith("true") or text.startswith("null"):
        p = 4
    elif text.startswith("false"):
        p = 5
    else:
        return False
    while p < len(text) and is_whitespace(text[p]):
        p += 1
    if p == len(text):
        return True
    ch = text[p]
    return ch in _STOP_CHARS or ch == "/" and p + 1 < len(text) and text[p + 1] in "/*"


class HjsonOptions:
    # Recognisers for domain-specific quoteless values, tried in order.
    dsf_providers: tuple[HjsonDsfProvider, ...]
    # Whether a root object may omit its braces.
    legacy_root: bool
    # The deepest container nesting accepted before failing.
    max_depth: int

    def __init__(self, dsf_providers: Iterable[HjsonDsfProvider] = (), legacy_root: bool = True, max_depth: int = 200) -> None:
        self.dsf_providers = tuple(dsf_providers)
        self.legacy_root = legacy_root
        self.max_depth = max_depth


class _Comment(NamedTuple):
    text: str
    style: CommentStyle
    start_line: int
    end_line: int


class HjsonReader:
    """
    Parses relaxed JSON: optional quotes, commas and root braces, multiline
    strings and comments, which are attached to the values they annotate.
    """
    # The cursor over the input.
    scanner: HjsonScanner
    # The options to use when reading.
    options: HjsonOptions
    # The current container nesting.
    _depth: int

    def __init__(self, source: str | TextIO, options: HjsonOptions | None = None) -> None:
        """
        Constructs a reader over a string, or a stream which is read to its end.
        """
        text = source if isinstance(source, str) else source.read()
        self.scanner = HjsonScanner(text)
        self.options = options if options is not None else HjsonOptions()
        self._depth = 0

    @staticmethod
    def parse_from_string(text: str, options: HjsonOptions | None = None) -> HjsonValue:
        return HjsonReader(text, options).parse()

    def parse(self) -> HjsonValue:
        """
        Parses the whole input as one root value.
        """
        s = self.scanner
        start = s.checkpoint()
        header = self._read_comments(False)
        if s.current in ("{", "[") or not self.options.legacy_root:
            value = self._read_value()
            self._set_comments(value, CommentType.BOL, header)
            return self._finish_root(value)
        try:
            # Assume a root object without braces
            return self._read_braceless_root(header)
        except HjsonParseError as original:
            # Maybe a single value instead (string, number, true, false, null)
            s.restore(start)
            self._depth = 0
            try:
                header = self._read_comments(False)
                value = self._read_value()
                self._set_comments(value, CommentType.BOL, header)
                return self._finish_root(value)
            except HjsonParseError:
                raise original from None

    def _finish_root(self, value: HjsonValue) -> HjsonValue:
        footer = self._read_comments(False)
        if not self.scanner.at_end:
            raise self.scanner.error(f"Extra characters in input: {self.scanner.describe_current()}")
        self._set_comments(value, CommentType.EOL, footer)
        return value

    def _read_braceless_root(self, leading: list[_Comment]) -> HjsonValue:
        s = self.scanner
        # Comments up to the last blank line are the file header
        if s.at_end:
            split = len(leading)
        else:
            split = 0
            for i in range(len(leading)):
                next_line = leading[i + 1].start_line if i + 1 < len(leading) else s.line
                if next_line - leading[i].end_line > 1:
                    split = i + 1
        obj = HjsonObject()
        footer = self._read_object_body(obj, leading[split:], braceless=True)
        self._set_comments(obj, CommentType.BOL, leading[:split])
        self._set_comments(obj, CommentType.EOL, footer)
        return obj

    #
    # Values
    #

    def _read_value(self) -> HjsonValue:
        s = self.scanner
        match s.current:
            case "{":
                self._enter()
                s.read()
                obj = HjsonObject()
                interior = self._read_object_body(obj, [], braceless=False)
                self._set_comments(obj, CommentType.INTERIOR, interior)
                self._depth -= 1
                return obj
            case "[":
                self._enter()
                array = self._read_array()
                self._depth -= 1
                return array
            case '"' | "'":
                return self._read_string()
            case None:
                raise s.error("Unexpected end of input while expecting a value")
            case _:
                return self._read_tfnns()

    def _enter(self) -> None:
        self._depth += 1
        if self._depth > self.options.max_depth:
            raise self.scanner.error(f"Nesting too deep (more than {self.options.max_depth} levels)")

    def _read_tfnns(self) -> HjsonValue:
        """
        Reads a quoteless true, false, null, number or string.
        """
        s = self.scanner
        first = s.current
        if is_punctuator(first):
            raise s.error(f"Found a punctuator character {first!r} when expecting a quoteless string (check your syntax)")
        chars: list[str] = []
        while True:
            ch = s.current
            is_eol = ch is None or ch == "\n" or ch == "\r"
            if is_eol or ch in (",", "}", "]", "#") or ch == "/" and s.peek() in ("/", "*"):
                text = "".join(chars).rstrip(" \t\r")
                match first:
                    case "f" | "n" | "t":
                        match text:
                            case "false":
                                return HjsonBoolean(False)
                            case "null":
                                return HjsonNull()
                            case "true":
                                return HjsonBoolean(True)
                    case _:
                        if first == "-" or first in _DIGITS:
                            number = try_parse_number(text)
                            if number is not None:
                                return HjsonNumber(number)
                if is_eol:
                    dsf = dsf_parse(self.options.dsf_providers, text)
                    if dsf is not None:
                        return dsf
                    return HjsonString(text)
            chars.append(ch)
            s.read()

    def _read_string(self) -> HjsonValue:
        s = self.scanner
        quote = s.current
        if quote == "'" and s.peek() == "'" and s.peek(2) == "'":
            return self._read_multiline_string()
        return HjsonString(self._read_quoted())

    def _read_quoted(self) -> str:
        s = self.scanner
        quote = s.current
        s.read()
        s.start_capture()
        while s.current != quote:
            ch = s.current
            if ch is None:
                raise s.error("Bad string: unexpected end of input (did you forget a closing quote?)")
            if ch == "\\":
                s.pause_capture()
                s.capture_append(read_escape(s, _ESCAPES))
                s.read()
                s.start_capture()
            elif ord(ch) < 0x20:
                raise s.error("Bad string containing a control character (use an escape sequence)")
            else:
                s.read()
        string = s.end_capture()
        s.read()
        return string

    def _read_multiline_string(self) -> HjsonValue:
        s = self.scanner
        # The column of the opening quotes is the indent to strip from every line
        indent = s.column
        s.skip(3)
        while s.current in (" ", "\t", "\r"):
            s.read()
        if s.current == "\n":
            s.read()
            self._skip_indent(indent)
        chars: list[str] = []
        triple = 0
        while True:
            ch = s.current
            if ch is None:
                raise s.error("Bad multiline string: unexpected end of input (did you forget the closing '''?)")
            if ch == "'":
                triple += 1
                s.read()
                if triple == 3:
                    if chars and chars[-1] == "\n":
                        chars.pop()
                    return HjsonString("".join(chars))
                continue
            while triple > 0:
                chars.append("'")
                triple -= 1
            if ch == "\n":
                chars.append("\n")
                s.read()
                self._skip_indent(indent)
            else:
                if ch != "\r":
                    chars.append(ch)
                s.read()

    def _skip_indent(self, indent: int) -> None:
        s = self.scanner
        while indent > 0 and s.current in (" ", "\t", "\r"):
            s.read()
            indent -= 1

    #
    # Containers
    #

    def _read_array(self) -> HjsonArray:
        s = self.scanner
        open_line = s.line
        s.read()
        array = HjsonArray()
        layout = _Layout(open_line)
        pending: list[_Comment] = []
        can_skip_comma = False
        while True:
            pending += self._read_comments(False)
            if s.current == "," and can_skip_comma:
                s.read()
                can_skip_comma = False
                continue
            if s.current == "]":
                s.read()
                break
            if s.at_end:
                raise s.error("End of input while parsing an array (did you forget a closing ']'?)")
            layout.count(s.line)
            value = self._read_value()
            trailing, can_skip_comma = self._read_trailing()
            self._set_comments(value, CommentType.BOL, pending)
            self._set_comments(value, CommentType.EOL, trailing)
            pending = []
            array.add(value)
        self._set_comments(array, CommentType.INTERIOR, pending)
        layout.apply(array)
        return array

    def _read_object_body(self, obj: HjsonObject, pending: list[_Comment], braceless: bool) -> list[_Comment]:
        """
        Reads members until the closing brace, or the end of input for a root
        without braces. Returns the comments after the last member.
        """
        s = self.scanner
        layout = _Layout(None if braceless else s.line)
        can_skip_comma = False
        while True:
            pending += self._read_comments(False)
            if s.current == "," and can_skip_comma:
                s.read()
                can_skip_comma = False
                continue
            if braceless:
                if s.at_end:
                    break
            else:
                if s.current == "}":
                    s.read()
                    break
                if s.at_end:
                    raise s.error("End of input while parsing an object (did you forget a closing '}'?)")
            layout.count(s.line)
            name = self._read_name()
            pending += self._read_comments(False)
            if s.current != ":":
                raise s.error(f"Expected ':' instead of {s.describe_current()}")
            s.read()
            pending += self._read_comments(False)
            value = self._read_value()
            trailing, can_skip_comma = self._read_trailing()
            self._set_comments(value, CommentType.BOL, pending)
            self._set_comments(value, CommentType.EOL, trailing)
            pending = []
            obj.add(name, value)
        layout.apply(obj)
        return pending

    def _read_name(self) -> str:
        s = self.scanner
        if s.current in ('"', "'"):
            return self._read_quoted()
        chars: list[str] = []
        while True:
            ch = s.current
            if ch == ":":
                if not chars:
                    raise s.error("Found ':' but no key name (for an empty key name use quotes)")
                return "".join(chars)
            if ch is None:
                raise s.error("End of input while parsing a key name (did you forget a ':'?)")
            if is_whitespace(ch) or ord(ch) < 0x20 or is_punctuator(ch):
                raise s.error(f"Found {ch!r} where a key name was expected (key names that include {{}}[],: or whitespace require quotes)")
            chars.append(ch)
            s.read()

    def _read_trailing(self) -> tuple[list[_Comment], bool]:
        """
        Reads the comments on the rest of the line after a value, and one
        optional comma. Returns the comments and whether a comma is still allowed.
        """
        s = self.scanner
        trailing = self._read_comments(True)
        if s.current == ",":
            s.read()
            trailing += self._read_comments(True)
            return trailing, False
        return trailing, True

    #
    # Comments
    #

    def _read_comments(self, stop_at_eol: bool) -> list[_Comment]:
        """
        Skips whitespace and comments between tokens and returns the comments.
        With stop_at_eol the scan ends at the next newline.
        """
        s = self.scanner
        comments: list[_Comment] = []
        while True:
            ch = s.current
            if ch in (" ", "\t", "\r"):
                s.read()
            elif ch == "\n":
                if stop_at_eol:
                    break
                s.read()
            elif ch == "#" or ch == "/" and s.peek() == "/":
                style = CommentStyle.HASH if ch == "#" else CommentStyle.LINE
                line = s.line
                s.start_capture()
                while s.current is not None and s.current != "\n":
                    s.read()
                raw = s.end_capture()
                comments.append(_Comment(strip_comment(raw), style, line, line))
            elif ch == "/" and s.peek() == "*":
                line = s.line
                s.start_capture()
                s.read()
                s.read()
                while not (s.current == "*" and s.peek() == "/"):
                    if s.current is None:
                        raise s.error("End of input while parsing a block comment (did you forget '*/'?)")
                    s.read()
                s.read()
                s.read()
                raw = s.end_capture()
                comments.append(_Comment(strip_comment(raw), CommentStyle.BLOCK, line, s.line))
            else:
                break
        return comments

    @staticmethod
    def _set_comments(value: HjsonValue, type: CommentType, comments: list[_Comment]) -> None:
        if comments:
            text = "\n".join(c.text for c in comments)
            value.set_comment(text, type, comments[0].style)


class _Layout:
    """
    Learns the condensed and line_length hints of a container while it is read.
    """
    # The line of the opening bracket, None for a root without braces.
    open_line: int | None
    # Source line -> number of children starting on it.
    per_line: dict[int, int]
    # The line the first child starts on.
    first_line: int | None

    def __init__(self, open_line: int | None) -> None:
        self.open_line = open_line
        self.per_line = {}
        self.first_line = None

    def count(self, line: int) -> None:
        if self.first_line is None:
            self.first_line = line
        self.per_line[line] = self.per_line.get(line, 0) + 1

    def apply(self, container: HjsonObject | HjsonArray) -> None:
        container.condensed = self.first_line is not None and self.first_line == self.open_line
        container.line_length = max(self.per_line.values(), default=1)


def parse(source: str | TextIO, options: HjsonOptions | None = None) -> HjsonValue:
    """
    Parses relaxed JSON text, or a stream read to its end.
    """
    return HjsonReader(source, options).parse()

def try_parse(source: str | TextIO, options: HjsonOptions | None = None) -> HjsonResult[HjsonValue, HjsonParseError]:
    try:
        return HjsonResult.from_value(HjsonReader(source, options).parse())
    except HjsonParseError as e:
        return HjsonResult.from_error(e)
