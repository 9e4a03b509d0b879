class HjsonParseError(ValueError):
    # The message without position.
    message: str
    # Absolute character offset of the failing character.
    offset: int
    # 1-based line of the failing character.
    line: int
    # 0-based column of the failing character.
    column: int

    def __init__(self, message: str, offset: int, line: int, column: int) -> None:
        super().__init__(f"{message} at {line}:{column}")
        self.message = message
        self.offset = offset
        self.line = line
        self.column = column


class HjsonScanner:
    """
    A cursor over fully buffered text with one character of state and free lookahead.

    The end of the text is reported as None; reading past it never raises.
    """
    # The text to read characters from.
    text: str
    # The index of the current character in the text.
    index: int
    # The line of the current character, starting at 1.
    line: int
    # The index at which the current line starts.
    line_start: int
    # Pieces of captured text, flushed whenever the capture pauses.
    _capture: list[str]
    # The index at which the active capture started, or -1.
    _capture_start: int

    def __init__(self, text: str) -> None:
        self.text = text
        self.index = 0
        self.line = 1
        self.line_start = 0
        self._capture = []
        self._capture_start = -1

    @property
    def current(self) -> str | None:
        if self.index >= len(self.text):
            return None
        return self.text[self.index]

    @property
    def at_end(self) -> bool:
        return self.index >= len(self.text)

    @property
    def column(self) -> int:
        return self.index - self.line_start

    def read(self) -> bool:
        """
        Moves to the next character. Returns False once the end has been reached.
        """
        if self.index >= len(self.text):
            return False
        if self.text[self.index] == "\n":
            self.line += 1
            self.line_start = self.index + 1
        self.index += 1
        return self.index < len(self.text)

    def read_if(self, ch: str) -> bool:
        if self.current != ch:
            return False
        self.read()
        return True

    def peek(self, n: int = 1) -> str | None:
        """
        Returns the character n places after the current one without moving.
        """
        j = self.index + n
        if j >= len(self.text):
            return None
        return self.text[j]

    def skip(self, n: int) -> None:
        """
        Moves past n characters, leaving them out of an active capture.
        """
        capturing = self._capture_start != -1
        if capturing:
            self.pause_capture()
        for _ in range(n):
            self.read()
        if capturing:
            self.start_capture()

    def start_capture(self) -> None:
        self._capture_start = self.index

    def pause_capture(self) -> None:
        self._capture.append(self.text[self._capture_start:self.index])
        self._capture_start = -1

    def end_capture(self) -> str:
        if self._capture_start != -1:
            self.pause_capture()
        captured = "".join(self._capture)
        self._capture = []
        return captured

    def capture_append(self, text: str) -> None:
        """
        Adds decoded text (an escape sequence) to the capture while it is paused.
        """
        self._capture.append(text)

    def checkpoint(self) -> tuple[int, int, int]:
        return (self.index, self.line, self.line_start)

    def restore(self, checkpoint: tuple[int, int, int]) -> None:
        self.index, self.line, self.line_start = checkpoint
        self._capture = []
        self._capture_start = -1

    def error(self, message: str) -> HjsonParseError:
        return HjsonParseError(message, self.index, self.line, self.column)

    def describe_current(self) -> str:
        if self.at_end:
            return "end of input"
        return repr(self.current)
