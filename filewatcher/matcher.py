"""
Glob matching for changed paths.

Patterns use shell glob syntax and are matched against whole paths
relative to the project root:

    *        any run of characters inside one path segment
    ?        any single character inside one path segment
    [a-z]    character class, [!a-z] or [^a-z] to negate
    {a,b}    alternation
    **       as a whole segment, zero or more segments
    \\x       literal x (not on Windows, where \\ is a separator)

Separators and case sensitivity follow the host platform.
"""

import os
import re
from typing import List

from filewatcher.errors import InvalidPattern


def _separators() -> str:
    seps = "/" + os.sep
    if os.altsep:
        seps += os.altsep
    return "".join(sorted(set(seps)))


def _char_class(body: str) -> str:
    # '-' keeps its range meaning, everything else is literal.
    return "".join("-" if ch == "-" else re.escape(ch) for ch in body)


def translate(pattern: str) -> str:
    """
    Translate a glob pattern into a regular expression.

    Raises:
        InvalidPattern: On an unclosed class or alternation, a nested
            alternation or a trailing escape character.
    """
    seps = _separators()
    sep = "[%s]" % re.escape(seps)
    not_sep = "[^%s]" % re.escape(seps)
    escapes = os.sep != "\\"

    out: List[str] = []
    in_alt = False
    i, n = 0, len(pattern)
    while i < n:
        c = pattern[i]
        if c == "*":
            j = i
            while j < n and pattern[j] == "*":
                j += 1
            starts_segment = i == 0 or pattern[i - 1] in seps or (in_alt and pattern[i - 1] in "{,")
            ends_alternative = in_alt and j < n and pattern[j] in ",}"
            whole_segment = (
                j - i >= 2
                and starts_segment
                and (j == n or pattern[j] in seps or ends_alternative)
            )
            if not whole_segment:
                out.append(not_sep + "*")
            elif j == n or ends_alternative:
                out.append(".*")
            else:
                # "**/" swallows its separator and matches zero or more segments.
                out.append("(?:.*%s)?" % sep)
                j += 1
            i = j
        elif c == "?":
            out.append(not_sep)
            i += 1
        elif c == "[":
            j = i + 1
            negate = j < n and pattern[j] in "!^"
            if negate:
                j += 1
            start = j
            if j < n and pattern[j] == "]":
                j += 1
            while j < n and pattern[j] != "]":
                j += 1
            if j >= n:
                raise InvalidPattern(pattern, "unclosed character class")
            body = _char_class(pattern[start:j])
            if negate:
                out.append("(?!%s)[^%s]" % (sep, body))
            else:
                out.append("(?!%s)[%s]" % (sep, body))
            i = j + 1
        elif c == "{":
            if in_alt:
                raise InvalidPattern(pattern, "nested alternation")
            in_alt = True
            out.append("(?:")
            i += 1
        elif c == "}" and in_alt:
            in_alt = False
            out.append(")")
            i += 1
        elif c == "," and in_alt:
            out.append("|")
            i += 1
        elif c == "\\" and escapes:
            if i + 1 >= n:
                raise InvalidPattern(pattern, "dangling escape")
            out.append(re.escape(pattern[i + 1]))
            i += 2
        elif c in seps:
            out.append(sep)
            i += 1
        else:
            out.append(re.escape(c))
            i += 1

    if in_alt:
        raise InvalidPattern(pattern, "unclosed alternation")
    return r"(?s:%s)\Z" % "".join(out)


class Matcher:
    """A compiled glob pattern. Matching is pure and stateless."""

    def __init__(self, pattern: str):
        self.pattern = pattern
        flags = re.IGNORECASE if os.path.normcase("A") == "a" else 0
        try:
            self._regex = re.compile(translate(pattern), flags)
        except re.error as e:
            raise InvalidPattern(pattern, str(e)) from e

    def is_match(self, path) -> bool:
        return self._regex.match(os.fspath(path)) is not None

    def __repr__(self):
        return f"Matcher({self.pattern!r})"


def compile_pattern(pattern: str) -> Matcher:
    """Compile ``pattern`` into a Matcher, raising InvalidPattern on bad syntax."""
    return Matcher(pattern)
