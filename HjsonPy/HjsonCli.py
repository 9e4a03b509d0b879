"""Command-line interface: convert relaxed JSON to relaxed JSON or JSON."""

import logging
import os
import sys
from pathlib import Path
from typing import Annotated

import cyclopts
from cyclopts import Parameter

from . import __version__
from .HjsonReader import parse
from .HjsonScanner import HjsonParseError
from .HjsonWriter import Stringify, format_value

logger = logging.getLogger(__name__)

app = cyclopts.App(
    name="hjson",
    help="Convert Hjson to Hjson or JSON. Reads INPUT, or stdin when no INPUT is given.",
    version=__version__,
    version_flags=["--version", "-v"],
    help_flags=["--help", "-h"],
    result_action="return_value",
)


@app.default
def convert(
    path: Path | None = None,
    *,
    json: Annotated[bool, Parameter(name=["--json", "-j"], negative="")] = False,
    compact: Annotated[bool, Parameter(name=["--compact", "-c"], negative="")] = False,
) -> int:
    """Convert one document.

    Parameters
    ----------
    path
        File to read; stdin when omitted.
    json
        Output formatted JSON.
    compact
        Output JSON without whitespace.
    """
    if compact:
        style = Stringify.PLAIN
    elif json:
        style = Stringify.FORMATTED
    else:
        style = Stringify.HJSON
    try:
        if path is None:
            logger.debug("reading stdin")
            text = sys.stdin.read()
        else:
            logger.debug("reading %s", path)
            text = path.read_text(encoding="utf-8")
        value = parse(text)
        logger.debug("writing %s", style.name)
        sys.stdout.write(format_value(value, style) + "\n")
    except (HjsonParseError, OSError, UnicodeError) as e:
        sys.stderr.write(f"hjson: {e}\n")
        return 1
    return 0


def setup_logging(debug: bool = False) -> None:
    """
    Sends debug records to stderr when debugging is switched on.
    """
    if not debug:
        return
    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(
        fmt="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    ))
    root_logger.addHandler(handler)


def main(argv: list[str] | None = None) -> int:
    """Run the converter.

    Returns
    -------
    int
        Exit code.
    """
    setup_logging(os.environ.get("HJSONPY_DEBUG") == "1")
    try:
        result = app(argv)
    except KeyboardInterrupt:
        sys.stderr.write("\n")
        return 130
    return result if isinstance(result, int) else 0


if __name__ == "__main__":
    raise SystemExit(main())
