"""Path pattern compiler.

Compiles redirect source patterns into anchored regular expressions the
platform router evaluates. The syntax is the path-to-regexp dialect the
platform understands:

    /blog/:slug            named parameter (one segment)
    /files/:path*          zero or more segments
    /files/:path+          one or more segments
    /docs/:page?           optional segment
    /user/(\\d+)           unnamed custom pattern
    /user/:id(\\d+)        named parameter with custom pattern
    /{intl/}?about         optional group
    /price\\:usd           escaped character

Patterns compile strict (no implicit trailing slash), case-sensitive, with
``/`` as the only delimiter. Malformed patterns raise :class:`PatternError`.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

# Characters escaped when literal text is embedded in a regex
_ESCAPE_RE = re.compile(r"([.+*?=^!:${}()\[\]|/\\])")

# Characters allowed in parameter names
_NAME_CHARS = frozenset("0123456789ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz_")

# Literal characters that become a parameter's prefix
_PREFIXES = "./"

_DELIMITER = "/"


class PatternError(ValueError):
    """Raised when a path pattern cannot be parsed or compiled."""

    def __init__(self, message: str, source: str) -> None:
        super().__init__(f"{message} in pattern {source!r}")
        self.source = source


@dataclass(frozen=True, slots=True)
class _Token:
    kind: str
    index: int
    value: str


@dataclass(frozen=True, slots=True)
class Key:
    """A parameter captured by a compiled pattern.

    Attributes:
        name: Parameter name, or its position for unnamed patterns.
        prefix: Literal text consumed before the parameter.
        suffix: Literal text consumed after the parameter.
        pattern: Regex matched by the parameter.
        modifier: One of "", "?", "*", "+".
    """

    name: str | int
    prefix: str
    suffix: str
    pattern: str
    modifier: str


def escape(text: str) -> str:
    """Escape regex metacharacters (and ``/``) in literal text."""
    return _ESCAPE_RE.sub(r"\\\1", text)


_DEFAULT_PATTERN = f"[^{escape(_DELIMITER)}]+?"


def _lex(source: str) -> list[_Token]:
    tokens: list[_Token] = []
    i = 0
    while i < len(source):
        char = source[i]

        if char in "*+?":
            tokens.append(_Token("MODIFIER", i, char))
            i += 1
            continue

        if char == "\\":
            if i + 1 >= len(source):
                raise PatternError(f"Dangling escape at {i}", source)
            tokens.append(_Token("ESCAPED_CHAR", i, source[i + 1]))
            i += 2
            continue

        if char == "{":
            tokens.append(_Token("OPEN", i, char))
            i += 1
            continue

        if char == "}":
            tokens.append(_Token("CLOSE", i, char))
            i += 1
            continue

        if char == ":":
            j = i + 1
            while j < len(source) and source[j] in _NAME_CHARS:
                j += 1
            name = source[i + 1 : j]
            if not name:
                raise PatternError(f"Missing parameter name at {i}", source)
            tokens.append(_Token("NAME", i, name))
            i = j
            continue

        if char == "(":
            count = 1
            pattern = ""
            j = i + 1
            if j < len(source) and source[j] == "?":
                raise PatternError(f'Pattern cannot start with "?" at {j}', source)
            while j < len(source):
                if source[j] == "\\":
                    pattern += source[j : j + 2]
                    j += 2
                    continue
                if source[j] == ")":
                    count -= 1
                    if count == 0:
                        j += 1
                        break
                elif source[j] == "(":
                    count += 1
                    if j + 1 >= len(source) or source[j + 1] != "?":
                        raise PatternError(f"Capturing groups are not allowed at {j}", source)
                pattern += source[j]
                j += 1
            if count:
                raise PatternError(f"Unbalanced pattern at {i}", source)
            if not pattern:
                raise PatternError(f"Missing pattern at {i}", source)
            tokens.append(_Token("PATTERN", i, pattern))
            i = j
            continue

        tokens.append(_Token("CHAR", i, char))
        i += 1

    tokens.append(_Token("END", i, ""))
    return tokens


def parse(source: str) -> list[str | Key]:
    """Parse a pattern into literal strings and parameter keys.

    Raises:
        PatternError: On any syntax error.
    """
    tokens = _lex(source)
    result: list[str | Key] = []
    key_index = 0
    i = 0
    path = ""

    def try_consume(kind: str) -> str | None:
        nonlocal i
        if i < len(tokens) and tokens[i].kind == kind:
            value = tokens[i].value
            i += 1
            return value
        return None

    def must_consume(kind: str) -> str:
        value = try_consume(kind)
        if value is not None:
            return value
        token = tokens[i]
        raise PatternError(f"Unexpected {token.kind} at {token.index}, expected {kind}", source)

    def consume_text() -> str:
        text = ""
        while True:
            value = try_consume("CHAR")
            if value is None:
                value = try_consume("ESCAPED_CHAR")
            if value is None:
                return text
            text += value

    while i < len(tokens):
        char = try_consume("CHAR")
        name = try_consume("NAME")
        pattern = try_consume("PATTERN")

        if name or pattern:
            prefix = char or ""
            if prefix not in _PREFIXES:
                path += prefix
                prefix = ""
            if path:
                result.append(path)
                path = ""
            if not name:
                name_or_index: str | int = key_index
                key_index += 1
            else:
                name_or_index = name
            result.append(
                Key(
                    name=name_or_index,
                    prefix=prefix,
                    suffix="",
                    pattern=pattern or _DEFAULT_PATTERN,
                    modifier=try_consume("MODIFIER") or "",
                )
            )
            continue

        value = char or try_consume("ESCAPED_CHAR")
        if value:
            path += value
            continue

        if path:
            result.append(path)
            path = ""

        if try_consume("OPEN") is not None:
            prefix = consume_text()
            name = try_consume("NAME") or ""
            pattern = try_consume("PATTERN") or ""
            suffix = consume_text()
            must_consume("CLOSE")
            if name:
                group_name: str | int = name
            elif pattern:
                group_name = key_index
                key_index += 1
            else:
                group_name = ""
            result.append(
                Key(
                    name=group_name,
                    prefix=prefix,
                    suffix=suffix,
                    pattern=_DEFAULT_PATTERN if name and not pattern else pattern,
                    modifier=try_consume("MODIFIER") or "",
                )
            )
            continue

        must_consume("END")

    return result


def tokens_to_regex(tokens: list[str | Key]) -> tuple[str, list[Key]]:
    """Build an anchored, strict regex source from parsed tokens.

    Returns:
        Tuple of (regex source, capturing keys in group order).
    """
    route = "^"
    keys: list[Key] = []
    for token in tokens:
        if isinstance(token, str):
            route += escape(token)
            continue

        prefix = escape(token.prefix)
        suffix = escape(token.suffix)
        if token.pattern:
            keys.append(token)
            if prefix or suffix:
                if token.modifier in ("+", "*"):
                    mod = "?" if token.modifier == "*" else ""
                    route += (
                        f"(?:{prefix}((?:{token.pattern})"
                        f"(?:{suffix}{prefix}(?:{token.pattern}))*){suffix}){mod}"
                    )
                else:
                    route += f"(?:{prefix}({token.pattern}){suffix}){token.modifier}"
            else:
                route += f"({token.pattern}){token.modifier}"
        else:
            route += f"(?:{prefix}{suffix}){token.modifier}"

    return route + "$", keys


def compile_source(source: str) -> tuple[str, list[str | int]]:
    """Compile a source pattern to a regex source and its segment names.

    Args:
        source: Path pattern (e.g. ``/blog/:slug``).

    Returns:
        Tuple of (regex source, segment names in capture order). Unnamed
        segments are reported by position.

    Raises:
        PatternError: If the pattern is malformed or yields an invalid regex.

    Example:
        >>> compile_source("/blog/:slug")
        ('^\\\\/blog(?:\\\\/([^\\\\/]+?))$', ['slug'])
    """
    tokens = parse(source)
    regex, keys = tokens_to_regex(tokens)
    try:
        re.compile(regex)
    except re.error as e:
        raise PatternError(f"Invalid regular expression ({e})", source) from e
    return regex, [key.name for key in keys]
