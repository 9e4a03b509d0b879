from typing import TextIO

from .HjsonArray import HjsonArray
from .HjsonObject import HjsonObject
from .HjsonReader import _DIGITS, _ESCAPES, _WHITESPACE, read_escape, try_parse_number
from .HjsonScanner import HjsonParseError, HjsonScanner
from .HjsonValue import HjsonBoolean, HjsonNull, HjsonNumber, HjsonString, HjsonValue

_NUMBER_CHARS = set("0123456789+-.eE")
# JSON has no single-quoted strings, so no \' escape.
_JSON_ESCAPES = {k: v for k, v in _ESCAPES.items() if k != "'"}


class JsonReader:
    """
    Parses standard JSON: quoted keys and strings, mandatory commas, no comments.
    """
    # The cursor over the input.
    scanner: HjsonScanner
    # The deepest container nesting accepted before failing.
    max_depth: int
    # The current container nesting.
    _depth: int

    def __init__(self, source: str | TextIO, max_depth: int = 200) -> None:
        text = source if isinstance(source, str) else source.read()
        self.scanner = HjsonScanner(text)
        self.max_depth = max_depth
        self._depth = 0

    def parse(self) -> HjsonValue:
        self._skip_whitespace()
        value = self._read_value()
        self._skip_whitespace()
        if not self.scanner.at_end:
            raise self.scanner.error(f"Extra characters in input: {self.scanner.describe_current()}")
        return value

    def _skip_whitespace(self) -> None:
        while self.scanner.current in _WHITESPACE:
            self.scanner.read()

    def _expect(self, ch: str) -> None:
        if not self.scanner.read_if(ch):
            raise self._expected(repr(ch))

    def _expected(self, what: str) -> HjsonParseError:
        s = self.scanner
        if s.at_end:
            return s.error(f"Unexpected end of input while expecting {what}")
        return s.error(f"Expected {what} instead of {s.describe_current()}")

    def _read_value(self) -> HjsonValue:
        s = self.scanner
        match s.current:
            case "{":
                return self._read_object()
            case "[":
                return self._read_array()
            case '"':
                return HjsonString(self._read_string())
            case "t":
                self._read_word("true")
                return HjsonBoolean(True)
            case "f":
                self._read_word("false")
                return HjsonBoolean(False)
            case "n":
                self._read_word("null")
                return HjsonNull()
            case None:
                raise s.error("Unexpected end of input while expecting a value")
            case ch if ch == "-" or ch in _DIGITS:
                return self._read_number()
            case _:
                raise self._expected("a value")

    def _read_word(self, word: str) -> None:
        for ch in word:
            if self.scanner.current != ch:
                raise self._expected(repr(ch))
            self.scanner.read()

    def _read_number(self) -> HjsonNumber:
        s = self.scanner
        s.start_capture()
        while s.current in _NUMBER_CHARS:
            s.read()
        text = s.end_capture()
        number = try_parse_number(text)
        if number is None:
            raise s.error(f"Invalid number: {text}")
        return HjsonNumber(number)

    def _read_string(self) -> str:
        s = self.scanner
        s.read()
        s.start_capture()
        while s.current != '"':
            ch = s.current
            if ch is None:
                raise s.error("Bad string: unexpected end of input (did you forget a closing quote?)")
            if ch == "\\":
                s.pause_capture()
                s.capture_append(read_escape(s, _JSON_ESCAPES))
                s.read()
                s.start_capture()
            elif ord(ch) < 0x20:
                raise s.error("Bad string containing a control character (use an escape sequence)")
            else:
                s.read()
        string = s.end_capture()
        s.read()
        return string

    def _enter(self) -> None:
        self._depth += 1
        if self._depth > self.max_depth:
            raise self.scanner.error(f"Nesting too deep (more than {self.max_depth} levels)")

    def _read_array(self) -> HjsonArray:
        s = self.scanner
        self._enter()
        s.read()
        array = HjsonArray()
        self._skip_whitespace()
        if s.read_if("]"):
            self._depth -= 1
            return array
        while True:
            self._skip_whitespace()
            array.add(self._read_value())
            self._skip_whitespace()
            if s.read_if("]"):
                break
            if s.at_end:
                raise s.error("End of input while parsing an array (did you forget a closing ']'?)")
            self._expect(",")
        self._depth -= 1
        return array

    def _read_object(self) -> HjsonObject:
        s = self.scanner
        self._enter()
        s.read()
        obj = HjsonObject()
        self._skip_whitespace()
        if s.read_if("}"):
            self._depth -= 1
            return obj
        while True:
            self._skip_whitespace()
            if s.current != '"':
                raise self._expected("a quoted name")
            name = self._read_string()
            self._skip_whitespace()
            self._expect(":")
            self._skip_whitespace()
            obj.add(name, self._read_value())
            self._skip_whitespace()
            if s.read_if("}"):
                break
            if s.at_end:
                raise s.error("End of input while parsing an object (did you forget a closing '}'?)")
            self._expect(",")
        self._depth -= 1
        return obj


def parse_strict(source: str | TextIO, max_depth: int = 200) -> HjsonValue:
    """
    Parses standard JSON text, or a stream read to its end.
    """
    return JsonReader(source, max_depth).parse()
