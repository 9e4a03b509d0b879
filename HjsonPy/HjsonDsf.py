import datetime
import math
import re
from typing import Iterable

from .HjsonValue import HjsonDsf


class HjsonDsfProvider:
    """
    Recognises a domain-specific scalar in quoteless text and formats it back.

    parse returns None for text the provider does not recognise; stringify returns
    None for objects it does not own.
    """
    name: str = ""
    description: str = ""

    def parse(self, text: str) -> object | None:
        raise NotImplementedError

    def stringify(self, value: object) -> str | None:
        raise NotImplementedError

    def equals(self, a: object, b: object) -> bool:
        return a == b


class MathDsf(HjsonDsfProvider):
    name = "math"
    description = "support for Inf/inf, -Inf/-inf and NaN/nan"

    def parse(self, text: str) -> object | None:
        match text:
            case "+Inf" | "Inf" | "+inf" | "inf":
                return math.inf
            case "-Inf" | "-inf":
                return -math.inf
            case "NaN" | "nan":
                return math.nan
        return None

    def stringify(self, value: object) -> str | None:
        if not isinstance(value, float):
            return None
        if math.isnan(value):
            return "NaN"
        if math.isinf(value):
            return "+Inf" if value > 0 else "-Inf"
        return None

    def equals(self, a: object, b: object) -> bool:
        if isinstance(a, float) and isinstance(b, float) and math.isnan(a) and math.isnan(b):
            return True
        return a == b


class HexDsf(HjsonDsfProvider):
    name = "hex"
    description = "parse hexadecimal numbers prefixed with 0x"

    _HEX = re.compile(r"^0x[0-9A-Fa-f]+$")

    # Whether integers are written back in hexadecimal.
    stringify_hex: bool

    def __init__(self, stringify_hex: bool = True) -> None:
        self.stringify_hex = stringify_hex

    def parse(self, text: str) -> object | None:
        if self._HEX.match(text):
            return int(text[2:], 16)
        return None

    def stringify(self, value: object) -> str | None:
        if isinstance(value, bool) or not isinstance(value, int) or value < 0:
            return None
        if not self.stringify_hex:
            return None
        return f"0x{value:x}"


class DateDsf(HjsonDsfProvider):
    name = "date"
    description = "support ISO dates"

    _DATE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
    _DATETIME = re.compile(r"^\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}(\.\d+)?(Z|[+-]\d{2}:\d{2})?$")

    def parse(self, text: str) -> object | None:
        try:
            if self._DATE.match(text):
                return datetime.date.fromisoformat(text)
            if self._DATETIME.match(text):
                return datetime.datetime.fromisoformat(text)
        except ValueError:
            # well-formed but impossible dates (2023-02-30) stay strings
            return None
        return None

    def stringify(self, value: object) -> str | None:
        if isinstance(value, datetime.datetime):
            text = value.isoformat()
            if text.endswith("+00:00"):
                text = text[:-6] + "Z"
            return text
        if isinstance(value, datetime.date):
            return value.isoformat()
        return None


def dsf_parse(providers: Iterable[HjsonDsfProvider], text: str) -> HjsonDsf | None:
    """
    Offers quoteless text to each provider in order; the first match wins.
    """
    for provider in providers:
        result = provider.parse(text)
        if result is not None:
            return HjsonDsf(result, provider)
    return None

def dsf_is_recognized(providers: Iterable[HjsonDsfProvider], text: str) -> bool:
    return any(provider.parse(text) is not None for provider in providers)
