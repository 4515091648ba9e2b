"""Cut complete definitions out of a minified script.

A regex can find where a definition *starts* but cannot know where it
ends once blocks nest or string literals contain braces.  After an
anchored pattern locates the opening brace, :class:`BraceScanner` walks
the text one character at a time:

* ``NORMAL``    — braces change the depth, a quote opens a string;
* ``IN_STRING`` — everything is literal until the opening quote recurs;
* ``ESCAPED``   — the character after a backslash is literal.

The scan stops at the brace that brings the depth back to zero.
"""

from __future__ import annotations

import enum
import re

from yt_resolve.core.descrambler_locator import locate_descrambler
from yt_resolve.core.models import CipherRecipe
from yt_resolve.exceptions import FragmentExtractionFailed

_QUOTES = frozenset("\"'`")


class ScanState(enum.Enum):
    NORMAL = "normal"
    IN_STRING = "in_string"
    ESCAPED = "escaped"


class BraceScanner:
    """Finite-state brace counter with string and escape awareness.

    Usage::

        scanner = BraceScanner()
        for index, char in enumerate(text[start:], start):
            if scanner.feed(char):
                return index
    """

    def __init__(self) -> None:
        self.state: ScanState = ScanState.NORMAL
        self.depth: int = 0
        self._quote: str = ""

    def feed(self, char: str) -> bool:
        """Consume one character; return ``True`` when depth returns to zero."""
        if self.state is ScanState.ESCAPED:
            self.state = ScanState.IN_STRING if self._quote else ScanState.NORMAL
            return False

        if char == "\\":
            self.state = ScanState.ESCAPED
            return False

        if self.state is ScanState.IN_STRING:
            if char == self._quote:
                self._quote = ""
                self.state = ScanState.NORMAL
            return False

        if char in _QUOTES:
            self._quote = char
            self.state = ScanState.IN_STRING
        elif char == "{":
            self.depth += 1
        elif char == "}":
            self.depth -= 1
            return self.depth == 0
        return False


def scan_balanced(text: str, open_index: int) -> int:
    """Return the index of the brace closing the one at *open_index*.

    Raises
    ------
    FragmentExtractionFailed
        If ``text[open_index]`` is not ``{`` or the input ends unbalanced.
    """
    if not 0 <= open_index < len(text) or text[open_index] != "{":
        raise FragmentExtractionFailed(f"No opening brace at offset {open_index}.")

    scanner = BraceScanner()
    for index in range(open_index, len(text)):
        if scanner.feed(text[index]):
            return index

    raise FragmentExtractionFailed(
        f"Unbalanced braces after offset {open_index} "
        f"(depth {scanner.depth} at end of input).",
    )


def _extract(script: str, pattern: re.Pattern[str], what: str) -> str:
    m = pattern.search(script)
    if m is None:
        raise FragmentExtractionFailed(f"Could not find definition of {what}.")
    close = scan_balanced(script, m.end() - 1)
    return script[m.start():close + 1]


def extract_function_source(script: str, name: str) -> str:
    """Return ``var <name>=function(..){..};`` as found in *script*.

    A bare ``name=function`` definition is preferred; a member assignment
    such as ``g.name=function`` is used only when no bare one exists.
    """
    head = rf"{re.escape(name)}\s*=\s*function\(\s*[\w$]+\s*\)\s*\{{"
    bare = re.compile(rf"(?<![\w$.]){head}")
    if bare.search(script) is None:
        member = re.compile(rf"(?<![\w$]){head}")
        definition = _extract(script, member, f"function {name!r}")
    else:
        definition = _extract(script, bare, f"function {name!r}")
    return f"var {definition};"


def extract_object_source(script: str, name: str) -> str:
    """Return ``var <name>={..};`` for the object literal assigned to *name*."""
    pattern = re.compile(rf"(?<![\w$.])(?:var\s+)?{re.escape(name)}\s*=\s*\{{")
    definition = _extract(script, pattern, f"object {name!r}")
    if not definition.startswith("var"):
        definition = "var " + definition
    if not definition.endswith(";"):
        definition += ";"
    return definition


def build_recipe(script: str) -> CipherRecipe:
    """Locate the descrambler in *script* and extract everything it needs.

    Raises
    ------
    DescramblerNotFound
        If the function cannot be located.
    FragmentExtractionFailed
        If the function, or a helper it references, cannot be extracted.
    """
    function_name, helper_name = locate_descrambler(script)
    helper_source = extract_object_source(script, helper_name) if helper_name else ""
    return CipherRecipe(
        function_name=function_name,
        helper_name=helper_name,
        function_source=extract_function_source(script, function_name),
        helper_source=helper_source,
    )
