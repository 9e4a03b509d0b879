import datetime
import io
import math
import unittest
from HjsonPy import (
    CommentStyle, CommentType, DateDsf, HexDsf, HjsonArray, HjsonConversionError, HjsonNumber, HjsonObject,
    HjsonOptions, HjsonParseError, HjsonRangeError, HjsonReader, HjsonScanner, HjsonString, HjsonWriterOptions, MathDsf,
    Stringify, escape_string, format_comment, get_eol, parse, parse_strict, set_eol, strip_comment, try_parse, value_of,
)

class HjsonPyTests(unittest.TestCase):
    def setUp(self):
        self.saved_eol = get_eol()
        set_eol("\n")

    def tearDown(self):
        set_eol(self.saved_eol)

    #
    # Scanner Tests
    #

    def test_ScannerTest(self):
        scanner: HjsonScanner = HjsonScanner("ab\ncd")

        self.assertEqual(scanner.current, "a")
        self.assertEqual(scanner.peek(), "b")
        self.assertEqual(scanner.peek(2), "\n")
        checkpoint = scanner.checkpoint()
        scanner.read()
        scanner.read()
        scanner.read()
        self.assertEqual(scanner.line, 2)
        self.assertEqual(scanner.column, 0)
        scanner.start_capture()
        scanner.read()
        scanner.read()
        self.assertEqual(scanner.end_capture(), "cd")
        self.assertTrue(scanner.at_end)
        self.assertIsNone(scanner.current)
        self.assertFalse(scanner.read())

        scanner.restore(checkpoint)
        self.assertEqual(scanner.current, "a")
        self.assertEqual(scanner.line, 1)

    #
    # Parse Tests
    #

    def test_BasicObjectTest(self):
        hjson: str = """
{
    "a": "b"
}
"""
        element: HjsonObject = parse(hjson).as_object()

        self.assertEqual(len(element), 1)
        self.assertEqual(element.get_string("a", None), "b")

    def test_StreamSourceTest(self):
        self.assertEqual(parse(io.StringIO("a: [1, 2]")).to_python(), {"a": [1, 2]})
        self.assertEqual(parse_strict(io.StringIO('{"a": null}')).to_python(), {"a": None})
        self.assertEqual(HjsonReader.parse_from_string("x").as_string(), "x")

    def test_BracelessObjectTest(self):
        hjson: str = """
a: b
c: d
"""
        element: HjsonObject = parse(hjson).as_object()

        self.assertEqual(element.names(), ["a", "c"])
        self.assertEqual(element["a"].as_string(), "b")
        self.assertEqual(element["c"].as_string(), "d")

    def test_QuotelessValuesTest(self):
        hjson: str = """
{
  text: hello world
  number: -5.5e3
  yes: true
  no: false
  nothing: null
  notNumber: 1.
  withComma: a, b
}
"""
        element: HjsonObject = parse(hjson).as_object()

        self.assertEqual(element.get_string("text", None), "hello world")
        self.assertEqual(element.get_float("number", 0), -5500.0)
        self.assertTrue(element.get_bool("yes", False))
        self.assertFalse(element.get_bool("no", True))
        self.assertTrue(element["nothing"].is_null())
        self.assertEqual(element.get_string("notNumber", None), "1.")
        self.assertEqual(element.get_string("withComma", None), "a, b")

    def test_NumberBoundaryTest(self):
        for text in ["0", "-0.5", "1e10"]:
            self.assertTrue(parse(f"a: {text}").as_object()["a"].is_number(), text)
        for text in ["01", "1.", ".5", "1e"]:
            value = parse(f"a: {text}").as_object()["a"]
            self.assertTrue(value.is_string(), text)
            self.assertEqual(value.as_string(), text)

    def test_ArrayTest(self):
        hjson: str = """
[
  1, 2
  3
  4 5, 6
]
"""
        element: HjsonArray = parse(hjson).as_array()

        self.assertEqual(element.to_python(), [1, 2, 3, "4 5, 6"])

    def test_StrayCommaTest(self):
        self.assertEqual(parse("[\n1\n,\n2\n]").to_python(), [1, 2])
        with self.assertRaises(HjsonParseError):
            parse("[,1]")
        with self.assertRaises(HjsonParseError):
            parse("[1,,2]")

    def test_QuotedStringTest(self):
        element: HjsonArray = parse("[\"tab\\there\", \"\\u0041\", 'it\\'s', \"it's\"]").as_array()

        self.assertEqual(element.to_python(), ["tab\there", "A", "it's", "it's"])

    def test_SurrogatePairTest(self):
        json: str = '"\\ud83d\\ude00"'

        self.assertEqual(parse(json).as_string(), "\U0001F600")
        self.assertEqual(parse_strict(json).as_string(), "\U0001F600")
        self.assertEqual(parse_strict(json).format(Stringify.PLAIN).encode("utf-8"), '"\U0001F600"'.encode("utf-8"))
        self.assertEqual(parse("{a: '\\ud83d\\ude00 x'}").as_object().get_string("a", None), "\U0001F600 x")

        # A high surrogate without a low one is kept as it is
        self.assertEqual(parse_strict('"\\ud83d\\u0041"').as_string(), "\ud83dA")

    def test_QuotedKeysTest(self):
        element: HjsonObject = parse("{\"a b\": 1, 'c': 2}").as_object()

        self.assertEqual(element.names(), ["a b", "c"])

    def test_MultilineStringTest(self):
        hjson: str = """
{
  text:
    '''
    first
      indented
    last
    '''
}
"""
        element: HjsonObject = parse(hjson).as_object()

        self.assertEqual(element.get_string("text", None), "first\n  indented\nlast")

    def test_EmptyMultilineStringTest(self):
        self.assertEqual(parse("a: ''''''").as_object().get_string("a", None), "")

    def test_SingleValueRootTest(self):
        self.assertEqual(parse("hello world").as_string(), "hello world")
        self.assertEqual(parse('"quoted"').as_string(), "quoted")
        self.assertTrue(parse("true").as_bool())

        five = parse("5 # five")
        self.assertEqual(five.as_int(), 5)
        self.assertEqual(five.get_comment(CommentType.EOL), "five")

    def test_EmptyDocumentTest(self):
        self.assertEqual(len(parse("").as_object()), 0)

        commented = parse("# only a comment\n")
        self.assertEqual(len(commented.as_object()), 0)
        self.assertEqual(commented.get_comment(), "only a comment")

    def test_LegacyRootOffTest(self):
        element = parse("a: 1", HjsonOptions(legacy_root=False))

        self.assertTrue(element.is_string())
        self.assertEqual(element.as_string(), "a: 1")

    def test_CommentAttachmentTest(self):
        hjson: str = """# header

{
  # about a
  a: 1 # after a
  b: [
    2
    // inside
  ]
  /* last */
}
# footer
"""
        root: HjsonObject = parse(hjson).as_object()

        self.assertEqual(root.get_comment(CommentType.BOL), "header")
        self.assertEqual(root.get_comment(CommentType.EOL), "footer")
        self.assertEqual(root.get_comment(CommentType.INTERIOR), "last")
        self.assertEqual(root.get_comment_style(CommentType.INTERIOR), CommentStyle.BLOCK)
        self.assertEqual(root["a"].get_comment(CommentType.BOL), "about a")
        self.assertEqual(root["a"].get_comment(CommentType.EOL), "after a")
        self.assertEqual(root["b"].get_comment(CommentType.INTERIOR), "inside")
        self.assertEqual(root["b"].get_comment_style(CommentType.INTERIOR), CommentStyle.LINE)

    def test_BracelessRootHeaderTest(self):
        hjson: str = "# file header\n\n# first member\na: 1\nb: 2\n"
        root: HjsonObject = parse(hjson).as_object()

        self.assertEqual(root.get_comment(), "file header")
        self.assertEqual(root["a"].get_comment(), "first member")
        self.assertEqual(root.format(HjsonWriterOptions(emit_root_braces=False)), hjson.rstrip("\n"))

    def test_LayoutHintsTest(self):
        condensed: HjsonArray = parse("[1, 2, 3]").as_array()
        self.assertTrue(condensed.condensed)
        self.assertEqual(condensed.line_length, 3)

        grouped: HjsonArray = parse("[\n  1, 2\n  3\n]").as_array()
        self.assertFalse(grouped.condensed)
        self.assertEqual(grouped.line_length, 2)
        self.assertEqual(grouped.format(Stringify.HJSON), "[\n  1, 2\n  3\n]")

        with self.assertRaises(ValueError):
            grouped.line_length = 0

    #
    # Error Tests
    #

    def test_UnterminatedInputTest(self):
        with self.assertRaises(HjsonParseError):
            parse("[\n[\n=\n[[''''''")
        with self.assertRaises(HjsonParseError):
            parse("[\n  '''never closed\n]")
        with self.assertRaises(HjsonParseError):
            parse("{a: 1 /* never closed")

    def test_DeepNestingTest(self):
        with self.assertRaises(HjsonParseError) as context:
            parse("[" * 9999 + "1" + "]" * 9999)
        self.assertIn("Nesting too deep", context.exception.message)

        with self.assertRaises(HjsonParseError):
            parse_strict("[" * 9999 + "1" + "]" * 9999)

        self.assertEqual(len(parse("[" * 100 + "]" * 100).as_array()), 1)

    def test_ErrorPositionTest(self):
        with self.assertRaises(HjsonParseError) as context:
            parse("{\n  a: 1\n  b 2\n}")

        self.assertEqual(context.exception.line, 3)
        self.assertEqual(context.exception.column, 3)
        self.assertTrue(str(context.exception).endswith("at 3:3"))

    def test_ExtraCharactersTest(self):
        with self.assertRaises(HjsonParseError) as context:
            parse("{a: 1} x")
        self.assertIn("Extra characters", context.exception.message)

    def test_TryParseTest(self):
        failed = try_parse("{")
        self.assertTrue(failed.is_error)
        self.assertEqual(failed.error().line, 1)

        succeeded = try_parse("a: 1")
        self.assertFalse(succeeded.is_error)
        self.assertEqual(succeeded.value().as_object().get_int("a", 0), 1)

    #
    # Strict Parse Tests
    #

    def test_StrictParserTest(self):
        element = parse_strict('{"a": [1, 2.5, "x", true, null]}')

        self.assertEqual(element.to_python(), {"a": [1, 2.5, "x", True, None]})

        for text in ["{a: 1}", "[1, 2,]", "[1 2]", "// c\n1", '"abc', "'x'", '"a\\\'b"', "01", "1e999", '{"a": 1} x', ""]:
            with self.assertRaises(HjsonParseError, msg=text):
                parse_strict(text)

    def test_JsonRoundTripTest(self):
        value = parse("{a: 1, b: [true, null, 'x'], c: {d: -0.5}}")
        plain: str = value.format(Stringify.PLAIN)

        self.assertEqual(plain, '{"a":1,"b":[true,null,"x"],"c":{"d":-0.5}}')
        self.assertEqual(str(value), plain)
        self.assertEqual(parse_strict(plain), value)
        self.assertEqual(value.format(Stringify.FORMATTED), '{\n  "a": 1,\n  "b": [\n    true,\n    null,\n    "x"\n  ],\n  "c": {\n    "d": -0.5\n  }\n}')

    #
    # Write Tests
    #

    def test_CommentRoundTripTest(self):
        hjson: str = """# header

{
  # about a
  a: 1 # after a
  b: [
    2
    // inside
  ]
  /*
  last
  */
}
# footer"""
        root = parse(hjson)
        written: str = root.format(Stringify.HJSON)

        self.assertEqual(written, hjson)
        self.assertEqual(parse(written), root)

        # Several comments after one value stay attached to it
        array: HjsonArray = parse("[\n  1 /* x */ # #y\n  2\n]").as_array()
        self.assertEqual(array[0].get_comment(CommentType.EOL), "x\n#y")
        again: HjsonArray = parse(array.format(Stringify.HJSON)).as_array()
        self.assertEqual(again, array)
        self.assertEqual(again[0].get_comment(CommentType.EOL), "x\n#y")
        self.assertFalse(again[1].has_comment(CommentType.BOL))

    def test_IdempotentFormatTest(self):
        hjson: str = """// config
{
  name: demo app
  ports: [80, 443]
  nested: {
    deep: true
    list: [
      a
      "b c"
    ]
  }
  text:
    '''
    one
    two
    '''
  empty: {}
  # trailing
}
"""
        original = parse(hjson)
        once: str = original.format(Stringify.HJSON)
        twice: str = parse(once).format(Stringify.HJSON)

        self.assertEqual(once, twice)
        self.assertEqual(parse(once), original)

    def test_LineEndingInvarianceTest(self):
        hjson: str = """# header

a: 1 # one
b:
  '''
  x
    y
  '''
c: [1, 2]
/* block
   comment */
d: hello
"""
        self.assertEqual(parse(hjson.replace("\n", "\r\n")), parse(hjson))

    def test_QuotelessWriterTest(self):
        data: dict[str, str] = {
            "plain": "hello",
            "num": "12",
            "kw": "true",
            "space": " x",
            "empty": "",
            "hash": "#x",
            "comma": "a, b",
        }
        value = value_of(data)
        written: str = value.format(Stringify.HJSON)

        self.assertEqual(written, '{\n  plain: hello\n  num: "12"\n  kw: "true"\n  space: " x"\n  empty: ""\n  hash: "#x"\n  comma: a, b\n}')
        self.assertEqual(parse(written).to_python(), data)

    def test_MultilineWriterTest(self):
        member = value_of({"text": "first\n  indented\nlast"})
        written: str = member.format(Stringify.HJSON)
        self.assertEqual(written, "{\n  text:\n    '''\n    first\n      indented\n    last\n    '''\n}")
        self.assertEqual(parse(written), member)

        element = value_of(["a\nb"])
        written = element.format(Stringify.HJSON)
        self.assertEqual(written, "[\n  '''\n  a\n  b\n  '''\n]")
        self.assertEqual(parse(written), element)

        root = value_of("a\nb")
        written = root.format(Stringify.HJSON)
        self.assertEqual(written, "'''\na\nb\n'''")
        self.assertEqual(parse(written), root)

        self.assertEqual(value_of(["a\r\nb"]).format(Stringify.HJSON), '[\n  "a\\r\\nb"\n]')

    def test_CondensedWriterTest(self):
        element: HjsonObject = HjsonObject().add("a", "x").add("b", "y")
        element.condensed = True
        written: str = element.format(Stringify.HJSON)

        self.assertEqual(written, '{"a": "x", "b": "y"}')
        self.assertEqual(parse(written), element)
        self.assertEqual(parse("[1, 2, 3]").format(Stringify.HJSON), "[1, 2, 3]")

    def test_EolCommentForcesQuotesTest(self):
        element: HjsonArray = HjsonArray().add("hello")
        element.set_comment_for(0, "note", CommentType.EOL)
        written: str = element.format(Stringify.HJSON)

        self.assertEqual(written, '[\n  "hello" # note\n]')
        self.assertEqual(parse(written), element)

    def test_WriterOptionsTest(self):
        commented = parse("# h\n\n{\n  a: 1 # c\n}")
        self.assertEqual(commented.format(HjsonWriterOptions(output_comments=False)), "{\n  a: 1\n}")

        nested = value_of({"a": {"b": 1}})
        self.assertEqual(nested.format(HjsonWriterOptions(braces_same_line=False)), "{\n  a:\n  {\n    b: 1\n  }\n}")
        self.assertEqual(parse(nested.format(HjsonWriterOptions(braces_same_line=False))), nested)

        self.assertEqual(value_of({"a": 1, "b": "x"}).format(HjsonWriterOptions(emit_root_braces=False)), "a: 1\nb: x")
        self.assertEqual(value_of({"a": [1]}).format(HjsonWriterOptions(indent="\t")), "{\n\ta: [\n\t\t1\n\t]\n}")

        pair = parse("[1, 2]")
        self.assertEqual(pair.format(HjsonWriterOptions(allow_condense=False)), "[\n  1, 2\n]")
        self.assertEqual(pair.format(HjsonWriterOptions(allow_condense=False, allow_multi_value=False)), "[\n  1\n  2\n]")

    def test_LineEndingTest(self):
        value = value_of({"a": 1})

        set_eol("\r\n")
        self.assertEqual(value.format(Stringify.HJSON), "{\r\n  a: 1\r\n}")
        set_eol("\n")
        self.assertEqual(value.format(HjsonWriterOptions(eol="\r\n")), "{\r\n  a: 1\r\n}")
        self.assertEqual(value.format(Stringify.HJSON), "{\n  a: 1\n}")

        with self.assertRaises(ValueError):
            set_eol("\r")
        with self.assertRaises(ValueError):
            HjsonWriterOptions(eol="\n\n")

    def test_WriteToSinkTest(self):
        sink = io.StringIO()
        value_of([1, "two"]).write(sink, Stringify.PLAIN)

        self.assertEqual(sink.getvalue(), '[1,"two"]')

    def test_EscapeStringTest(self):
        self.assertEqual(escape_string('a"b\\c\n\x01'), '"a\\"b\\\\c\\n\\u0001"')

    def test_NumberTextTest(self):
        self.assertEqual(value_of([1.0, 0.5, 1e100, -2.5e-7, 2.0 ** 70]).format(Stringify.PLAIN), "[1,0.5,1e+100,-2.5e-7,1.1805916207174113e+21]")

    #
    # Comment Tests
    #

    def test_StripCommentTest(self):
        for style in CommentStyle:
            self.assertEqual(strip_comment(format_comment(style, "line one\nline two")), "line one\nline two")

        self.assertEqual(strip_comment("# a\n#  b"), "a\n b")
        self.assertEqual(strip_comment("/* a\n * b\n */"), "a\nb")
        self.assertEqual(strip_comment("// a"), "a")
        self.assertEqual(strip_comment("/*\n# a\n// b\n*/"), "# a\n// b")
        self.assertEqual(strip_comment(format_comment(CommentStyle.BLOCK, "#x\n//y")), "#x\n//y")

    #
    # Value Tests
    #

    def test_UnusedPathsTest(self):
        root: HjsonObject = parse("{a:{b:[{c:{}}]}}").as_object()
        root.get("a")

        self.assertEqual(root.get_unused_paths(), ["a.b", "a.b[0]", "a.b[0].c"])
        self.assertEqual(root.get_used_paths(), ["a"])

    def test_ConversionTest(self):
        with self.assertRaises(HjsonConversionError):
            HjsonString("x").as_float()
        self.assertTrue(HjsonString("x").try_as_float().is_error)
        self.assertEqual(HjsonString("x").try_as_string().value(), "x")

        with self.assertRaises(HjsonRangeError):
            HjsonNumber(1.5).as_int()
        with self.assertRaises(HjsonRangeError):
            HjsonNumber(2 ** 40).as_int()
        self.assertEqual(HjsonNumber(2 ** 40).as_long(), 2 ** 40)

        with self.assertRaises(ValueError):
            HjsonNumber(float("nan"))
        with self.assertRaises(ValueError):
            HjsonNumber(math.inf)

    def test_ValueOfTest(self):
        data: dict[str, object] = {"a": [1, 2.5, None, True, "x"], "b": {}}

        self.assertEqual(value_of(data).to_python(), data)

        with self.assertRaises(ValueError):
            value_of(10 ** 400)
        with self.assertRaises(ValueError):
            HjsonNumber(-10 ** 400)

    def test_ObjectMutationTest(self):
        element: HjsonObject = HjsonObject().add("a", 1).add("a", 2)

        self.assertEqual(element.get_int("a", 0), 2)
        self.assertEqual(len(element), 2)
        self.assertEqual(element.format(Stringify.PLAIN), '{"a":1,"a":2}')

        element.remove("a")
        self.assertEqual(element.get_int("a", 0), 1)

        element.set("b", "x")
        self.assertEqual(element.names(), ["a", "b"])
        self.assertTrue(element["b"].accessed)

        ordered: HjsonObject = HjsonObject().add("b", 1).add("C", 2).add("a", 3).sort()
        self.assertEqual(ordered.names(), ["a", "b", "C"])

    def test_CopyTest(self):
        original: HjsonObject = parse("{\n  a: [1] # c\n}").as_object()

        self.assertEqual(original.deep_copy(), original)
        self.assertEqual(original.deep_copy()["a"].get_comment(CommentType.EOL), "c")

        deep: HjsonObject = original.deep_copy()
        deep["a"].as_array().add(2)
        self.assertEqual(len(original["a"].as_array()), 1)

        shallow: HjsonObject = original.shallow_copy()
        shallow["a"].as_array().add(3)
        self.assertEqual(len(original["a"].as_array()), 2)

    #
    # DSF Tests
    #

    def test_DsfTest(self):
        options: HjsonOptions = HjsonOptions(dsf_providers=[MathDsf(), HexDsf()])
        element: HjsonArray = parse("[\n  Inf\n  0x1F\n  NaN\n  plain\n]", options).as_array()

        self.assertTrue(element[0].is_dsf())
        self.assertEqual(element[0].as_dsf(), math.inf)
        self.assertEqual(element[1].as_dsf(), 31)
        self.assertTrue(math.isnan(element[2].as_dsf()))
        self.assertTrue(element[3].is_string())

        written: str = element.format(HjsonWriterOptions(dsf_providers=[MathDsf(), HexDsf()]))
        self.assertEqual(written, "[\n  +Inf\n  0x1f\n  NaN\n  plain\n]")
        self.assertEqual(parse(written, options), element)
        self.assertEqual(element.format(Stringify.PLAIN), '["+Inf","0x1f","NaN","plain"]')

    def test_DsfQuotingTest(self):
        strings = value_of(["Inf", "0x10"])

        self.assertEqual(strings.format(HjsonWriterOptions(dsf_providers=[MathDsf(), HexDsf()])), '[\n  "Inf"\n  "0x10"\n]')
        self.assertEqual(strings.format(Stringify.HJSON), "[\n  Inf\n  0x10\n]")

    def test_DateDsfTest(self):
        options: HjsonOptions = HjsonOptions(dsf_providers=[DateDsf()])
        element: HjsonObject = parse("d: 2024-01-02\nt: 2024-01-02T03:04:05Z\nbad: 2023-02-30", options).as_object()

        self.assertEqual(element["d"].as_dsf(), datetime.date(2024, 1, 2))
        self.assertEqual(element["t"].as_dsf(), datetime.datetime(2024, 1, 2, 3, 4, 5, tzinfo=datetime.timezone.utc))
        self.assertTrue(element["bad"].is_string())
        self.assertEqual(element["t"].text(), "2024-01-02T03:04:05Z")

if __name__ == '__main__':
    unittest.main()
