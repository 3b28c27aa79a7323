"""
Function-like Macro Scanner
===========================

Extracts function-like #define directives from C header text.

Only the shape of each definition is recovered here: the macro name, the
raw parameter-list text and the body as a list of physical lines with
their continuation backslashes removed. Nothing is tokenized or expanded.

A definition is function-like when '(' immediately follows the name:

    #define MAX(a, b)   ((a) > (b) ? (a) : (b))     function-like
    #define LIMIT (10)                              object-like, ignored

Directives inside block comments (the kernel headers carry usage
examples in their documentation comments) are ignored.
"""

from dataclasses import dataclass, field
from typing import Optional
import logging
import re

from rtos_bindgen.errors import SourceLocation

logger = logging.getLogger(__name__)


@dataclass
class MacroDefinition:
    """
    A raw function-like macro definition.

    Attributes:
        name: Macro name
        parameters_text: Text between the parentheses of the signature
        body_lines: Body text, one entry per physical line
        location: Where the #define appeared
    """
    name: str
    parameters_text: str
    body_lines: list[str] = field(default_factory=list)
    location: Optional[SourceLocation] = None

    @property
    def signature(self) -> str:
        return f"{self.name}({self.parameters_text})"

    @property
    def body(self) -> str:
        return "\n".join(self.body_lines)


# '(' must follow the name directly for a function-like macro
DEFINE_PATTERN = re.compile(
    r'^\s*#\s*define\s+([A-Za-z_]\w*)\(([^)]*)\)(.*)$'
)

BLOCK_COMMENT_PATTERN = re.compile(r'/\*.*?\*/')

# A comment still open at the end of the text
OPEN_COMMENT_PATTERN = re.compile(r'/\*(?:(?!\*/).)*\Z', re.DOTALL)


def _logical_lines(text: str) -> list[tuple[int, list[str]]]:
    """
    Group physical lines joined by trailing backslashes.

    Returns:
        (first line number, physical lines without their backslashes)
    """
    groups: list[tuple[int, list[str]]] = []
    current: list[str] = []
    start = 1

    for number, line in enumerate(text.splitlines(), start=1):
        if not current:
            start = number

        stripped = line.rstrip()
        if stripped.endswith("\\"):
            current.append(stripped[:-1])
            continue

        current.append(line)
        groups.append((start, current))
        current = []

    if current:
        groups.append((start, current))

    return groups


def scan_function_macros(text: str, filename: str = "<input>") -> list[MacroDefinition]:
    """
    Find every function-like #define in header text.

    Args:
        text: Header contents
        filename: Used for definition locations

    Returns:
        Definitions in source order
    """
    definitions: list[MacroDefinition] = []
    in_comment = False

    for line_number, lines in _logical_lines(text):
        first = lines[0]

        if in_comment:
            if "*/" not in first:
                continue
            in_comment = False
            first = first[first.index("*/") + 2:]

        match = DEFINE_PATTERN.match(first)
        if match is None:
            # Track block comments opened outside directives; those opened
            # on a directive line are cut from its body below
            remainder = BLOCK_COMMENT_PATTERN.sub("", " ".join([first, *lines[1:]]))
            if "/*" in remainder:
                in_comment = True
            continue

        name, parameters_text, body_start = match.groups()
        body, opened = OPEN_COMMENT_PATTERN.subn("", "\n".join([body_start, *lines[1:]]))
        if opened:
            in_comment = True

        body_lines = [line.strip() for line in body.split("\n")]
        while body_lines and not body_lines[-1]:
            body_lines.pop()
        while body_lines and not body_lines[0]:
            body_lines.pop(0)

        definitions.append(MacroDefinition(
            name=name,
            parameters_text=parameters_text.strip(),
            body_lines=body_lines,
            location=SourceLocation(filename, line_number, 1),
        ))

    logger.debug(f"{filename}: found {len(definitions)} function-like macros")
    return definitions
