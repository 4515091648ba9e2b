"""Locate the signature descrambling function inside a player script.

The descrambler is a short-named, single-argument function whose first
statement splits its argument into a character array::

    Xy=function(a){a=a.split("");Hq.tR(a,3);Hq.Vd(a,51);return a.join("")}

The provider renames and reshapes it with every player release, so the
search is an ordered tuple of :class:`StructuralMatcher` entries, tried
from the most specific to the most permissive.  Supporting a new shape
means appending a matcher — the locator itself never changes.

Every function in this module is pure: no I/O, deterministic output for
a given script.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

import structlog

from yt_resolve.exceptions import DescramblerNotFound

log = structlog.get_logger(__name__)

_IDENT = r"[a-zA-Z0-9$]"
_EMPTY_STR = r"""(?:""|'')"""


@dataclass(frozen=True, slots=True)
class StructuralMatcher:
    """One known shape of the descrambler definition.

    The pattern must define a ``name`` group and may define a ``helper``
    group for the object referenced right after the split.
    """

    label: str
    pattern: re.Pattern[str]

    def match(self, script: str) -> tuple[str, str | None] | None:
        """Return ``(function_name, helper_name)`` or ``None``."""
        m = self.pattern.search(script)
        if m is None:
            return None
        groups = m.groupdict()
        return groups["name"], groups.get("helper") or None


DEFAULT_MATCHERS: tuple[StructuralMatcher, ...] = (
    StructuralMatcher(
        "compact_with_helper",
        re.compile(
            rf'(?<![\w$])(?P<name>{_IDENT}{{2,}})=function\(a\)\{{a=a\.split\(""\);'
            rf"(?!a\.)(?P<helper>{_IDENT}+)\."
        ),
    ),
    StructuralMatcher(
        "standard",
        re.compile(
            rf"(?<![\w$])(?P<name>{_IDENT}{{2,}})\s*=\s*function\(\s*a\s*\)\s*\{{"
            rf"\s*a\s*=\s*a\.split\(\s*{_EMPTY_STR}\s*\)"
        ),
    ),
    StructuralMatcher(
        "any_argument",
        re.compile(
            rf"(?<![\w$])(?P<name>{_IDENT}{{2,}})\s*=\s*function\(\s*(?P<arg>[a-zA-Z_$][\w$]*)\s*\)"
            rf"\s*\{{\s*(?P=arg)\s*=\s*(?P=arg)\.split\(\s*{_EMPTY_STR}\s*\)"
        ),
    ),
    StructuralMatcher(
        "loose",
        re.compile(
            rf"(?<![\w$])(?P<name>{_IDENT}{{2,}})\s*=\s*function\(\s*[a-zA-Z_$][\w$]*\s*\)"
            rf"\s*\{{\s*[a-zA-Z_$][\w$]*\s*=\s*[a-zA-Z_$][\w$]*\.split\(\s*{_EMPTY_STR}\s*\)"
        ),
    ),
)
"""Most specific first; the first match wins."""


def find_helper_name(script: str, function_name: str) -> str | None:
    """Recover the helper object used by an already located function.

    Narrower than any matcher: anchored on *function_name*, it looks for
    the member-access expression following the split statement.  Returns
    ``None`` when the function uses no helper.
    """
    pattern = re.compile(
        rf"(?<![\w$]){re.escape(function_name)}\s*=\s*function\(\s*(?P<arg>[a-zA-Z_$][\w$]*)\s*\)"
        rf"\s*\{{\s*(?P=arg)\s*=\s*(?P=arg)\.split\(\s*{_EMPTY_STR}\s*\)\s*;"
        rf"\s*(?!(?P=arg)\.)(?P<helper>{_IDENT}+)\."
    )
    m = pattern.search(script)
    return m.group("helper") if m else None


def locate_descrambler(
    script: str,
    matchers: tuple[StructuralMatcher, ...] = DEFAULT_MATCHERS,
) -> tuple[str, str | None]:
    """Find the descrambler's name and, if any, its helper object's name.

    Raises
    ------
    DescramblerNotFound
        If none of *matchers* recognises the script.
    """
    for matcher in matchers:
        found = matcher.match(script)
        if found is None:
            continue
        function_name, helper_name = found
        if helper_name is None:
            helper_name = find_helper_name(script, function_name)
        log.debug(
            "descrambler_located",
            matcher=matcher.label,
            function=function_name,
            helper=helper_name,
        )
        return function_name, helper_name

    raise DescramblerNotFound(
        "Could not find the signature descrambling function in the player script.",
        hint="The player layout has probably changed.",
    )
