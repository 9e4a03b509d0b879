from typing import Iterator, NamedTuple

from .HjsonValue import CommentStyle, CommentType, HjsonType, HjsonValue, value_of


class HjsonMember(NamedTuple):
    name: str
    value: HjsonValue


class HjsonObject(HjsonValue):
    """
    An ordered sequence of named members.

    Names need not be unique: lookups see the last member with a name, while
    writers emit every member in order.
    """
    # Member names, parallel to _values.
    _names: list[str]
    # Member values, parallel to _names.
    _values: list[HjsonValue]
    # Name -> index of the last member with that name.
    _index: dict[str, int]
    # Whether the members were read from (and should be written to) a single line.
    _condensed: bool
    # How many members share one line.
    _line_length: int

    def __init__(self, members: "HjsonObject | None" = None) -> None:
        super().__init__()
        self._names = []
        self._values = []
        self._index = {}
        self._condensed = False
        self._line_length = 1
        if members is not None:
            self._names = list(members._names)
            self._values = list(members._values)
            self._condensed = members._condensed
            self._line_length = members._line_length
            self._rebuild_index()

    @property
    def type(self) -> HjsonType:
        return HjsonType.OBJECT

    def as_object(self) -> "HjsonObject":
        return self

    #
    # Layout hints
    #

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

    #
    # Mutation
    #

    def add(self, name: str, value: object, comment: str | None = None) -> "HjsonObject":
        """
        Appends a member, even if one with the same name exists.
        """
        if name is None:
            raise TypeError("name is None")
        value = value_of(value)
        if comment is not None:
            value.set_comment(comment)
        self._index[name] = len(self._names)
        self._names.append(name)
        self._values.append(value)
        return self

    def set(self, name: str, value: object, comment: str | None = None) -> "HjsonObject":
        """
        Replaces the value of the last member called name, or appends a new member.
        """
        if name is None:
            raise TypeError("name is None")
        value = value_of(value)
        if comment is not None:
            value.set_comment(comment)
        value.set_accessed(True)
        index = self._index_of(name)
        if index != -1:
            self._values[index] = value
        else:
            self._index[name] = len(self._names)
            self._names.append(name)
            self._values.append(value)
        return self

    def remove(self, name: str) -> "HjsonObject":
        index = self._index_of(name)
        if index != -1:
            del self._names[index]
            del self._values[index]
            self._rebuild_index()
        return self

    def set_comment_for(self, name: str, text: str | None, type: CommentType = CommentType.BOL, style: CommentStyle = CommentStyle.HASH) -> "HjsonObject":
        value = self.get(name)
        if value is None:
            raise KeyError(name)
        value.set_comment(text, type, style)
        return self

    def sort(self) -> "HjsonObject":
        """
        Orders members by name, ignoring case. Members with equal names keep their order.
        """
        members = sorted(zip(self._names, self._values), key=lambda m: m[0].lower())
        self._names = [m[0] for m in members]
        self._values = [m[1] for m in members]
        self._rebuild_index()
        return self

    def _rebuild_index(self) -> None:
        self._index = {}
        for i, name in enumerate(self._names):
            self._index[name] = i

    def _index_of(self, name: str) -> int:
        return self._index.get(name, -1)

    #
    # Lookup
    #

    def has(self, name: str) -> bool:
        return self._index_of(name) != -1

    def get(self, name: str) -> HjsonValue | None:
        index = self._index_of(name)
        if index == -1:
            return None
        return self._values[index].set_accessed(True)

    def get_int(self, name: str, default: int) -> int:
        value = self.get(name)
        return value.as_int() if value is not None else default

    def get_long(self, name: str, default: int) -> int:
        value = self.get(name)
        return value.as_long() if value is not None else default

    def get_float(self, name: str, default: float) -> float:
        value = self.get(name)
        return value.as_float() if value is not None else default

    def get_bool(self, name: str, default: bool) -> bool:
        value = self.get(name)
        return value.as_bool() if value is not None else default

    def get_string(self, name: str, default: str | None) -> str | None:
        value = self.get(name)
        return value.as_string() if value is not None else default

    def names(self) -> list[str]:
        return list(self._names)

    def members(self) -> list[HjsonMember]:
        return [HjsonMember(n, v) for n, v in zip(self._names, self._values)]

    def __getitem__(self, name: str) -> HjsonValue:
        value = self.get(name)
        if value is None:
            raise KeyError(name)
        return value

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and self.has(name)

    def __len__(self) -> int:
        return len(self._names)

    def __iter__(self) -> Iterator[HjsonMember]:
        for name, value in zip(self._names, self._values):
            yield HjsonMember(name, value)

    #
    # Access auditing
    #

    def get_unused_paths(self) -> list[str]:
        """
        Lists the paths of every member that no caller has read, depth first.
        """
        return self._paths(False)

    def get_used_paths(self) -> list[str]:
        return self._paths(True)

    def _paths(self, used: bool) -> list[str]:
        paths: list[str] = []
        for name, value in zip(self._names, self._values):
            if value.accessed == used:
                paths.append(name)
            match value.type:
                case HjsonType.OBJECT:
                    paths.extend(f"{name}.{p}" for p in value._paths(used))
                case HjsonType.ARRAY:
                    paths.extend(f"{name}{p}" for p in value._paths(used))
        return paths

    #
    # Conversion and copies
    #

    def to_python(self) -> dict[str, object]:
        return {name: value.to_python() for name, value in zip(self._names, self._values)}

    def shallow_copy(self) -> "HjsonObject":
        return HjsonObject(self).copy_comments(self)

    def deep_copy(self, track_access: bool = False) -> "HjsonObject":
        clone = HjsonObject()
        clone._condensed = self._condensed
        clone._line_length = self._line_length
        for name, value in zip(self._names, self._values):
            clone.add(name, value.deep_copy(track_access))
        return self._finish_copy(clone, track_access)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, HjsonObject):
            return NotImplemented
        return (self._names == other._names
                and self._values == other._values
                and self._comments_match(other))

    __hash__ = None
