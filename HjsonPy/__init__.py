__version__ = "1.0.0"

from .HjsonArray import HjsonArray
from .HjsonDsf import DateDsf, HexDsf, HjsonDsfProvider, MathDsf, dsf_is_recognized, dsf_parse
from .HjsonObject import HjsonMember, HjsonObject
from .HjsonReader import HjsonOptions, HjsonReader, parse, try_parse
from .HjsonScanner import HjsonParseError, HjsonScanner
from .HjsonValue import (
    CommentStyle, CommentType, HjsonBoolean, HjsonConversionError, HjsonDsf, HjsonNull,
    HjsonNumber, HjsonRangeError, HjsonResult, HjsonString, HjsonType, HjsonValue,
    format_comment, strip_comment, value_of,
)
from .HjsonWriter import (
    HjsonWriter, HjsonWriterOptions, JsonWriter, Stringify, escape_string, format_value,
    get_eol, set_eol, write_value,
)
from .JsonReader import JsonReader, parse_strict
