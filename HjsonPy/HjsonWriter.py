import os
from enum import Enum
from typing import Iterable, TextIO

from .HjsonDsf import HjsonDsfProvider, dsf_is_recognized
from .HjsonReader import starts_with_keyword, try_parse_number
from .HjsonValue import CommentStyle, CommentType, HjsonType, HjsonValue, format_comment, format_number

_VALID_EOLS = ("\n", "\r\n")
_EOL = os.linesep if os.linesep in _VALID_EOLS else "\n"

_JSON_ESCAPES = {
    '"': '\\"',
    "\\": "\\\\",
    "\b": "\\b",
    "\f": "\\f",
    "\n": "\\n",
    "\r": "\\r",
    "\t": "\\t",
}
_WHITESPACE = set([" ", "\t", "\n", "\r"])
_PUNCTUATORS = set(["{", "}", "[", "]", ",", ":"])
# Characters a quoteless value may not start with.
_QUOTELESS_FIRST = set(["{", "}", "[", "]", ",", ":", "'", '"', "#"])


def get_eol() -> str:
    """
    Returns the line ending used by writers that are not given one.
    """
    return _EOL

def set_eol(value: str) -> None:
    global _EOL
    if value not in _VALID_EOLS:
        raise ValueError(f"Line ending must be \\n or \\r\\n, got {value!r}")
    _EOL = value

def escape_string(text: str) -> str:
    """
    Returns text as a double-quoted JSON string.
    """
    chars: list[str] = []
    for ch in text:
        if ch in _JSON_ESCAPES:
            chars.append(_JSON_ESCAPES[ch])
        elif ord(ch) < 0x20:
            chars.append(f"\\u{ord(ch):04x}")
        else:
            chars.append(ch)
    return '"' + "".join(chars) + '"'

def _has_control(text: str, allowed: str = "") -> bool:
    return any(ord(ch) < 0x20 and ch not in allowed for ch in text)

def _is_block_safe(text: str) -> bool:
    """
    Whether text survives being wrapped in a block comment and stripped again.
    """
    if "*/" in text:
        return False
    for line in text.split("\n"):
        if line != line.strip() or line.startswith(("*", "/*")):
            return False
    return True


class Stringify(Enum):
    # Minimal JSON without whitespace.
    PLAIN = 1
    # JSON indented with two spaces.
    FORMATTED = 2
    # The relaxed format with default options.
    HJSON = 3


class HjsonWriterOptions:
    # The string used to indent one level.
    indent: str
    # Extra indentation before comments that sit on their own lines.
    comment_indent: str
    # Whether an object member's brace or bracket opens on the line of its key.
    braces_same_line: bool
    # Whether containers read from one line may be written on one line.
    allow_condense: bool
    # Whether several values may share one line.
    allow_multi_value: bool
    # Whether comments are written.
    output_comments: bool
    # Whether a root object is wrapped in braces.
    emit_root_braces: bool
    # Providers whose text must not be written quoteless for plain strings.
    dsf_providers: tuple[HjsonDsfProvider, ...]
    # The line ending, or None to use get_eol().
    eol: str | None

    def __init__(self, indent: str = "  ", comment_indent: str = "", braces_same_line: bool = True,
                 allow_condense: bool = True, allow_multi_value: bool = True, output_comments: bool = True,
                 emit_root_braces: bool = True, dsf_providers: Iterable[HjsonDsfProvider] = (), eol: str | None = None) -> None:
        if eol is not None and eol not in _VALID_EOLS:
            raise ValueError(f"Line ending must be \\n or \\r\\n, got {eol!r}")
        self.indent = indent
        self.comment_indent = comment_indent
        self.braces_same_line = braces_same_line
        self.allow_condense = allow_condense
        self.allow_multi_value = allow_multi_value
        self.output_comments = output_comments
        self.emit_root_braces = emit_root_braces
        self.dsf_providers = tuple(dsf_providers)
        self.eol = eol


class JsonWriter:
    """
    Writes values as standard JSON, minimal or indented. Comments are dropped.
    """
    # Whether to indent the output.
    formatted: bool
    # The line ending for indented output.
    eol: str

    def __init__(self, formatted: bool = False, eol: str | None = None) -> None:
        self.formatted = formatted
        self.eol = eol if eol is not None else get_eol()

    def format(self, value: HjsonValue) -> str:
        out: list[str] = []
        self._write(value, 0, out)
        return "".join(out)

    def write(self, value: HjsonValue, sink: TextIO) -> None:
        sink.write(self.format(value))

    def _write(self, value: HjsonValue, level: int, out: list[str]) -> None:
        match value.type:
            case HjsonType.OBJECT:
                members = value.members()
                if not members:
                    out.append("{}")
                    return
                out.append("{")
                for i, (name, child) in enumerate(members):
                    if i > 0:
                        out.append(",")
                    self._newline(level + 1, out)
                    out.append(escape_string(name))
                    out.append(": " if self.formatted else ":")
                    self._write(child, level + 1, out)
                self._newline(level, out)
                out.append("}")
            case HjsonType.ARRAY:
                values = value.values()
                if not values:
                    out.append("[]")
                    return
                out.append("[")
                for i, child in enumerate(values):
                    if i > 0:
                        out.append(",")
                    self._newline(level + 1, out)
                    self._write(child, level + 1, out)
                self._newline(level, out)
                out.append("]")
            case HjsonType.STRING:
                out.append(escape_string(value.string))
            case HjsonType.NUMBER:
                out.append(format_number(value.number))
            case HjsonType.BOOLEAN:
                out.append("true" if value.boolean else "false")
            case HjsonType.NULL:
                out.append("null")
            case HjsonType.DSF:
                out.append(escape_string(value.text()))

    def _newline(self, level: int, out: list[str]) -> None:
        if self.formatted:
            out.append(self.eol)
            out.append("  " * level)


class HjsonWriter:
    """
    Writes values in the relaxed format.

    Quoting, multiline strings and line layout are re-derived from each value so
    that the text reads back into an equal tree, and the learned condensed and
    line_length hints of each container decide how many children share a line.
    """
    # The options to use when writing.
    options: HjsonWriterOptions
    # Pieces of output, joined with \n line endings.
    _out: list[str]
    # Whether nothing has been written on the current line yet.
    _fresh: bool

    def __init__(self, options: HjsonWriterOptions | None = None) -> None:
        self.options = options if options is not None else HjsonWriterOptions()
        self._out = []
        self._fresh = True

    def format(self, value: HjsonValue) -> str:
        self._out = []
        self._fresh = True
        self._write_root(value)
        text = "".join(self._out)
        eol = self.options.eol if self.options.eol is not None else get_eol()
        if eol != "\n":
            text = text.replace("\n", eol)
        return text

    def write(self, value: HjsonValue, sink: TextIO) -> None:
        sink.write(self.format(value))

    #
    # Output primitives
    #

    def _emit(self, text: str) -> None:
        self._out.append(text)
        self._fresh = False

    def _nl(self, level: int) -> None:
        """
        Starts a new line at the given depth.
        """
        if not self._fresh:
            self._out.append("\n")
        self._emit(self.options.indent * level)

    def _has(self, value: HjsonValue, type: CommentType) -> bool:
        return self.options.output_comments and value.has_comment(type)

    def _comment_lines(self, value: HjsonValue, type: CommentType, level: int) -> None:
        style = value.get_comment_style(type)
        text = value.get_comment(type)
        if style == CommentStyle.BLOCK and not _is_block_safe(text):
            style = CommentStyle.HASH
        for line in format_comment(style, text).split("\n"):
            self._nl(level)
            self._emit(self.options.comment_indent + line)

    def _eol_comment(self, value: HjsonValue, level: int) -> None:
        style = value.get_comment_style(CommentType.EOL)
        text = value.get_comment(CommentType.EOL)
        if "\n" not in text:
            if style == CommentStyle.BLOCK and text and _is_block_safe(text):
                self._emit(f" /* {text} */")
            else:
                if style == CommentStyle.BLOCK:
                    style = CommentStyle.HASH
                self._emit(" " + format_comment(style, text))
            return
        if _is_block_safe(text):
            self._emit(" /*")
            for line in text.split("\n"):
                self._nl(level)
                self._emit(line)
            self._nl(level)
            self._emit("*/")
            return
        # Only the first line stays on the value's line
        lines = format_comment(CommentStyle.HASH, text).split("\n")
        self._emit(" " + lines[0])
        for line in lines[1:]:
            self._nl(level)
            self._emit(line)

    #
    # Layout decisions
    #

    def _is_inline(self, value: HjsonValue) -> bool:
        """
        Whether a value's body fits on a shared line.
        """
        match value.type:
            case HjsonType.OBJECT | HjsonType.ARRAY:
                if len(value) == 0:
                    return not self._has(value, CommentType.INTERIOR)
                return self._is_condensed(value)
            case HjsonType.DSF:
                return False
            case _:
                return True

    def _is_condensed(self, container: HjsonValue) -> bool:
        if not self.options.allow_condense or not container.condensed or len(container) == 0:
            return False
        if self._has(container, CommentType.INTERIOR):
            return False
        for child in self._children(container):
            value = child[1]
            if self._has(value, CommentType.BOL) or self._has(value, CommentType.EOL):
                return False
            if not self._is_inline(value):
                return False
        return True

    @staticmethod
    def _children(container: HjsonValue) -> list[tuple[str | None, HjsonValue]]:
        if container.type == HjsonType.OBJECT:
            return [(m.name, m.value) for m in container.members()]
        return [(None, v) for v in container.values()]

    def _group(self, container: HjsonValue) -> list[list[tuple[str | None, HjsonValue]]]:
        """
        Splits children into lines of at most line_length values.
        """
        groups: list[list[tuple[str | None, HjsonValue]]] = []
        for child in self._children(container):
            if groups and self._can_join(groups[-1], child[1], container.line_length):
                groups[-1].append(child)
            else:
                groups.append([child])
        return groups

    def _can_join(self, group: list[tuple[str | None, HjsonValue]], value: HjsonValue, line_length: int) -> bool:
        if not self.options.allow_multi_value or len(group) >= line_length:
            return False
        previous = group[-1][1]
        if self._has(previous, CommentType.EOL) or not self._is_inline(previous):
            return False
        return not self._has(value, CommentType.BOL) and self._is_inline(value)

    def _key(self, name: str, forced: bool) -> str:
        if forced or _key_needs_quotes(name):
            return escape_string(name)
        return name

    def _can_be_quoteless(self, text: str) -> bool:
        if not text or text[0] in _WHITESPACE or text[-1] in _WHITESPACE:
            return False
        if text[0] in _QUOTELESS_FIRST or text.startswith(("//", "/*")):
            return False
        if _has_control(text):
            return False
        if try_parse_number(text, True) is not None or starts_with_keyword(text):
            return False
        return not dsf_is_recognized(self.options.dsf_providers, text)

    @staticmethod
    def _can_be_multiline(text: str) -> bool:
        return ("\n" in text
                and not _has_control(text, "\n")
                and text.strip() != ""
                and "'''" not in text)

    #
    # Values
    #

    def _write_root(self, value: HjsonValue) -> None:
        o = self.options
        if self._has(value, CommentType.BOL):
            self._comment_lines(value, CommentType.BOL, 0)
            # A blank line ends the header
            self._out.append("\n\n")
            self._fresh = True
        if value.type == HjsonType.OBJECT and not o.emit_root_braces and len(value) > 0:
            self._write_children(value, 0)
            if self._has(value, CommentType.INTERIOR):
                self._comment_lines(value, CommentType.INTERIOR, 0)
        else:
            self._write_value(value, 0, False, False, in_object=False, quoteless=False)
        if self._has(value, CommentType.EOL):
            self._comment_lines(value, CommentType.EOL, 0)

    def _write_value(self, value: HjsonValue, level: int, forced: bool, has_eol: bool, in_object: bool, quoteless: bool = True) -> None:
        """
        Writes a value after its key (with the separating space) or at the start
        of its line.
        """
        lead = " " if in_object else ""
        match value.type:
            case HjsonType.OBJECT | HjsonType.ARRAY:
                if in_object and not self.options.braces_same_line and self._is_expanded(value):
                    self._nl(level)
                else:
                    self._emit(lead)
                self._write_container(value, level)
            case HjsonType.STRING:
                text = value.string
                if quoteless and not forced and not has_eol and self._can_be_quoteless(text):
                    self._emit(lead + text)
                elif not forced and self._can_be_multiline(text):
                    if in_object:
                        self._nl(level + 1)
                        self._write_multiline(text, level + 1)
                    else:
                        self._write_multiline(text, level)
                else:
                    self._emit(lead + escape_string(text))
            case HjsonType.NUMBER:
                self._emit(lead + format_number(value.number))
            case HjsonType.BOOLEAN:
                self._emit(lead + ("true" if value.boolean else "false"))
            case HjsonType.NULL:
                self._emit(lead + "null")
            case HjsonType.DSF:
                self._emit(lead + value.text())

    def _is_expanded(self, container: HjsonValue) -> bool:
        if len(container) == 0:
            return self._has(container, CommentType.INTERIOR)
        return not self._is_condensed(container)

    def _write_multiline(self, text: str, level: int) -> None:
        self._emit("'''")
        for line in text.split("\n"):
            if line:
                self._nl(level)
                self._emit(line)
            else:
                self._out.append("\n")
        self._nl(level)
        self._emit("'''")

    def _write_container(self, container: HjsonValue, level: int) -> None:
        is_object = container.type == HjsonType.OBJECT
        open_bracket, close_bracket = ("{", "}") if is_object else ("[", "]")
        if not self._is_expanded(container):
            if len(container) == 0:
                self._emit(open_bracket + close_bracket)
                return
            self._emit(open_bracket)
            for i, (name, value) in enumerate(self._children(container)):
                if i > 0:
                    self._emit(", ")
                if name is not None:
                    self._emit(self._key(name, True) + ":")
                self._write_value(value, level + 1, True, False, in_object=name is not None)
            self._emit(close_bracket)
            return
        self._emit(open_bracket)
        self._write_children(container, level + 1)
        if self._has(container, CommentType.INTERIOR):
            self._comment_lines(container, CommentType.INTERIOR, level + 1)
        self._nl(level)
        self._emit(close_bracket)

    def _write_children(self, container: HjsonValue, level: int) -> None:
        for group in self._group(container):
            forced = len(group) > 1
            for i, (name, value) in enumerate(group):
                has_eol = self._has(value, CommentType.EOL)
                if i == 0:
                    if self._has(value, CommentType.BOL):
                        self._comment_lines(value, CommentType.BOL, level)
                    self._nl(level)
                else:
                    self._emit(", ")
                if name is not None:
                    self._emit(self._key(name, forced) + ":")
                self._write_value(value, level, forced, has_eol, in_object=name is not None)
                if has_eol:
                    if value.type == HjsonType.DSF:
                        # Quoteless text runs to the end of its line
                        self._comment_lines(value, CommentType.EOL, level)
                    else:
                        self._eol_comment(value, level)


def _key_needs_quotes(name: str) -> bool:
    if not name or name[0] in ("'", '"', "#") or name.startswith(("//", "/*")):
        return True
    return any(ch in _WHITESPACE or ch in _PUNCTUATORS or ord(ch) < 0x20 for ch in name)

def _writer_for(style: "Stringify | HjsonWriterOptions | None") -> JsonWriter | HjsonWriter:
    match style:
        case None | Stringify.PLAIN:
            return JsonWriter(False)
        case Stringify.FORMATTED:
            return JsonWriter(True)
        case Stringify.HJSON:
            return HjsonWriter()
        case HjsonWriterOptions():
            return HjsonWriter(style)
    raise TypeError(f"Unknown output style: {style!r}")

def write_value(value: HjsonValue, sink: TextIO, style: Stringify | HjsonWriterOptions | None = None) -> None:
    _writer_for(style).write(value, sink)

def format_value(value: HjsonValue, style: Stringify | HjsonWriterOptions | None = None) -> str:
    return _writer_for(style).format(value)
