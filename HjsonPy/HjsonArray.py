from typing import Iterator

from .HjsonValue import CommentStyle, CommentType, HjsonType, HjsonValue, value_of


class HjsonArray(HjsonValue):
    # The elements in order.
    _values: list[HjsonValue]
    # Whether the elements were read from (and should be written to) a single line.
    _condensed: bool
    # How many elements share one line.
    _line_length: int

    def __init__(self, values: "HjsonArray | None" = None) -> None:
        super().__init__()
        self._values = []
        self._condensed = False
        self._line_length = 1
        if values is not None:
            self._values = list(values._values)
            self._condensed = values._condensed
            self._line_length = values._line_length

    @property
    def type(self) -> HjsonType:
        return HjsonType.ARRAY

    def as_array(self) -> "HjsonArray":
        return self

    @property
    def condensed(self) -> bool:
        return self._condensed

    @condensed.setter
    def condensed(self, value: bool) -> None:
        self._condensed = bool(value)

    @property
    def line_length(self) -> int:
        return self._line_length

    @line_length.setter
    def line_length(self, value: int) -> None:
        if value < 1:
            raise ValueError(f"line_length must be at least 1, got {value}")
        self._line_length = value

    def add(self, value: object, comment: str | None = None) -> "HjsonArray":
        value = value_of(value)
        if comment is not None:
            value.set_comment(comment)
        self._values.append(value)
        return self

    def set(self, index: int, value: object, comment: str | None = None) -> "HjsonArray":
        value = value_of(value)
        if comment is not None:
            value.set_comment(comment)
        self._values[index] = value
        return self

    def remove(self, index: int) -> "HjsonArray":
        del self._values[index]
        return self

    def set_comment_for(self, index: int, text: str | None, type: CommentType = CommentType.BOL, style: CommentStyle = CommentStyle.HASH) -> "HjsonArray":
        self._values[index].set_comment(text, type, style)
        return self

    def get(self, index: int) -> HjsonValue:
        return self._values[index].set_accessed(True)

    def values(self) -> list[HjsonValue]:
        return list(self._values)

    def __getitem__(self, index: int) -> HjsonValue:
        return self.get(index)

    def __len__(self) -> int:
        return len(self._values)

    def __iter__(self) -> Iterator[HjsonValue]:
        return iter(list(self._values))

    def get_unused_paths(self) -> list[str]:
        return self._paths(False)

    def get_used_paths(self) -> list[str]:
        return self._paths(True)

    def _paths(self, used: bool) -> list[str]:
        paths: list[str] = []
        for i, value in enumerate(self._values):
            if value.accessed == used:
                paths.append(f"[{i}]")
            match value.type:
                case HjsonType.OBJECT:
                    paths.extend(f"[{i}].{p}" for p in value._paths(used))
                case HjsonType.ARRAY:
                    paths.extend(f"[{i}]{p}" for p in value._paths(used))
        return paths

    def to_python(self) -> list[object]:
        return [value.to_python() for value in self._values]

    def shallow_copy(self) -> "HjsonArray":
        return HjsonArray(self).copy_comments(self)

    def deep_copy(self, track_access: bool = False) -> "HjsonArray":
        clone = HjsonArray()
        clone._condensed = self._condensed
        clone._line_length = self._line_length
        for value in self._values:
            clone._values.append(value.deep_copy(track_access))
        return self._finish_copy(clone, track_access)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, HjsonArray):
            return NotImplemented
        return self._values == other._values and self._comments_match(other)

    __hash__ = None
