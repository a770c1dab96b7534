"""
Nix expression parser — extracts the tool list from a shell.nix.

This is a structural reader, not a Nix evaluator. It understands the
shape of a typical development-shell file::

    { pkgs ? import <nixpkgs> { } }:

    with pkgs;

    mkShell {
      buildInputs = [ pkgs.bash pkgs.pkg-config pkgs.openssl ];
      shellHook = ''
        echo hello
      '';
    }

and nothing more: an optional function header, optional ``with``,
``let`` and ``assert`` prefixes, then ``<invocation> { bindings }``.
The named list field becomes requirement entries; every other binding
is kept verbatim (as source text) and not interpreted.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass

from shellenv.core.config.errors import MalformedDescriptor
from shellenv.core.parsers.base import ParsedDescriptor, RequirementEntry, split_attribute_path

logger = logging.getLogger(__name__)

_TOKEN_RE = re.compile(
    r"""
      (?P<ws>\s+)
    | (?P<comment>\#[^\n]*|/\*.*?\*/)
    | (?P<string>"(?:\\.|[^"\\])*")
    | (?P<istring>''(?:'''|''\$|''\\.|[^']|'(?!'))*'')
    | (?P<spath><[A-Za-z0-9_./+-]+>)
    | (?P<path>(?:\.{1,2}|~)?/[A-Za-z0-9_./+-]+)
    | (?P<number>\d+(?:\.\d+)?)
    | (?P<ident>[A-Za-z_][A-Za-z0-9_'-]*(?:\.[A-Za-z_][A-Za-z0-9_'-]*)*)
    | (?P<op>==|!=|<=|>=|&&|\|\||->|//|\+\+|\.\.\.|\$\{)
    | (?P<punct>[{}\[\]();=:,?@.+\-*/<>!])
    """,
    re.VERBOSE | re.DOTALL,
)

_OPEN = {"{": "}", "[": "]", "(": ")", "${": "}"}


@dataclass
class _Token:
    kind: str
    text: str
    start: int
    end: int
    line: int


def tokenize(source: str) -> list[_Token]:
    """Split Nix source into tokens, dropping whitespace and comments."""
    tokens: list[_Token] = []
    pos = 0
    line = 1
    while pos < len(source):
        m = _TOKEN_RE.match(source, pos)
        if m is None:
            raise MalformedDescriptor(
                f"Unexpected character {source[pos]!r}",
                line=line,
            )
        kind = m.lastgroup or ""
        text = m.group()
        if kind not in ("ws", "comment"):
            tokens.append(_Token(kind, text, m.start(), m.end(), line))
        line += text.count("\n")
        pos = m.end()
    return tokens


class _NixParser:
    def __init__(self, source: str, list_field: str):
        self.source = source
        self.list_field = list_field
        self.tokens = tokenize(source)
        self.result = ParsedDescriptor(list_field=list_field)

    # ── Token helpers ───────────────────────────────────────────

    def _at(self, i: int) -> _Token | None:
        return self.tokens[i] if i < len(self.tokens) else None

    def _is(self, i: int, text: str) -> bool:
        tok = self._at(i)
        return tok is not None and tok.kind != "string" and tok.text == text

    def _last_line(self) -> int | None:
        return self.tokens[-1].line if self.tokens else None

    def _match(self, i: int) -> int:
        """Index of the token closing the group opened at ``i``."""
        opener = self.tokens[i]
        stack = [_OPEN[opener.text]]
        j = i + 1
        while j < len(self.tokens):
            text = self.tokens[j].text
            if self.tokens[j].kind in ("op", "punct"):
                if text in _OPEN:
                    stack.append(_OPEN[text])
                elif text in ("}", "]", ")"):
                    if text != stack[-1]:
                        raise MalformedDescriptor(
                            f"Unbalanced {text!r}", line=self.tokens[j].line
                        )
                    stack.pop()
                    if not stack:
                        return j
            j += 1
        raise MalformedDescriptor(
            f"Unclosed {opener.text!r}", line=opener.line
        )

    def _skip_to(self, i: int, terminator: str) -> int:
        """Index of the next ``terminator`` at group depth zero."""
        j = i
        while j < len(self.tokens):
            tok = self.tokens[j]
            if tok.kind in ("op", "punct") and tok.text in _OPEN:
                j = self._match(j) + 1
                continue
            if tok.text == terminator and tok.kind != "string":
                return j
            j += 1
        raise MalformedDescriptor(
            f"Expected {terminator!r} before end of file", line=self._last_line()
        )

    def _value_end(self, i: int) -> int:
        """Index of the ``;`` ending a binding value that starts at ``i``.

        ``with X;`` and ``let ... in`` prefixes carry their own
        separators and are stepped over first.
        """
        j = i
        while j < len(self.tokens):
            text = self.tokens[j].text
            if text == "with":
                j = self._skip_to(j + 1, ";") + 1
            elif text == "let":
                j = self._skip_to(j + 1, "in") + 1
            else:
                break
        return self._skip_to(j, ";")

    def _slice(self, first: int, last: int) -> str:
        return self.source[self.tokens[first].start:self.tokens[last].end]

    # ── Grammar ─────────────────────────────────────────────────

    def parse(self) -> ParsedDescriptor:
        if not self.tokens:
            raise MalformedDescriptor("Descriptor is empty", line=1)

        i = self._header(0)
        i = self._prefixes(i)
        self._invocation(i)
        return self.result

    def _header(self, i: int) -> int:
        """Consume a function header like ``{ pkgs ? ... }:`` or ``pkgs:``."""
        if self._is(i, "{"):
            close = self._match(i)
            end = close
            if self._is(close + 1, "@") and self._at(close + 2) is not None:
                end = close + 2
            if self._is(end + 1, ":"):
                self.result.arguments = self._slice(i, end)
                return end + 2
            raise MalformedDescriptor(
                "Expected an invocation like mkShell { ... }, found an attribute set",
                line=self.tokens[i].line,
            )
        tok = self._at(i)
        if tok is not None and tok.kind == "ident" and self._is(i + 1, ":"):
            self.result.arguments = tok.text
            return i + 2
        if tok is not None and tok.kind == "ident" and self._is(i + 1, "@") and self._is(i + 2, "{"):
            close = self._match(i + 2)
            if self._is(close + 1, ":"):
                self.result.arguments = self._slice(i, close)
                return close + 2
        return i

    def _prefixes(self, i: int) -> int:
        """Skip ``with``, ``let ... in`` and ``assert`` before the invocation."""
        while True:
            tok = self._at(i)
            if tok is None:
                raise MalformedDescriptor(
                    "Expected an invocation like mkShell { ... }",
                    line=self._last_line(),
                )
            if tok.text == "with":
                end = self._skip_to(i + 1, ";")
                self.result.scope = self._slice(i + 1, end - 1)
                i = end + 1
            elif tok.text == "let":
                end = self._skip_to(i + 1, "in")
                logger.debug("Ignoring let-bindings on line %d", tok.line)
                i = end + 1
            elif tok.text == "assert":
                i = self._skip_to(i + 1, ";") + 1
            else:
                return i

    def _invocation(self, i: int) -> None:
        tok = self.tokens[i]
        if tok.kind != "ident":
            raise MalformedDescriptor(
                f"Expected an invocation like mkShell {{ ... }}, got {tok.text!r}",
                line=tok.line,
            )
        body = i + 1
        if self._is(body, "rec"):
            body += 1
        if not self._is(body, "{"):
            raise MalformedDescriptor(
                f"Expected '{{' after {tok.text}",
                line=tok.line,
            )
        self.result.invocation = tok.text
        close = self._match(body)
        if close + 1 < len(self.tokens):
            logger.debug(
                "Ignoring %d tokens after the %s body",
                len(self.tokens) - close - 1, tok.text,
            )
        self._bindings(body + 1, close)

    def _bindings(self, i: int, close: int) -> None:
        while i < close:
            tok = self.tokens[i]
            if tok.text == "inherit":
                end = self._skip_to(i, ";")
                logger.debug("Ignoring inherit on line %d", tok.line)
                i = end + 1
                continue
            if tok.kind not in ("ident", "string"):
                raise MalformedDescriptor(
                    f"Expected a binding name, got {tok.text!r}",
                    line=tok.line,
                )
            if not self._is(i + 1, "="):
                raise MalformedDescriptor(
                    f"Expected '=' after {tok.text}",
                    line=tok.line,
                )
            end = self._value_end(i + 2)
            if end > close:
                raise MalformedDescriptor(
                    f"Binding '{tok.text}' is not terminated by ';'",
                    line=tok.line,
                )
            if end == i + 2:
                raise MalformedDescriptor(
                    f"Binding '{tok.text}' has no value",
                    line=tok.line,
                )
            key = tok.text.strip('"')
            if key == self.list_field:
                if self.result.list_line is not None:
                    raise MalformedDescriptor(
                        "Field defined more than once",
                        line=tok.line,
                        field=key,
                    )
                self.result.list_line = tok.line
                self._list(i + 2, end - 1)
            else:
                self.result.extra[key] = self._slice(i + 2, end - 1)
            i = end + 1

    def _list(self, first: int, last: int) -> None:
        field = self.list_field
        if self.tokens[first].text == "with":
            first = self._skip_to(first + 1, ";") + 1
        if not self._is(first, "[") or self._match(first) != last:
            raise MalformedDescriptor(
                "Expected a list",
                line=self.tokens[first].line,
                field=field,
            )
        j = first + 1
        while j < last:
            tok = self.tokens[j]
            if tok.kind != "ident":
                text = tok.text
                if tok.kind in ("op", "punct") and text in _OPEN:
                    text = self._slice(j, self._match(j))
                raise MalformedDescriptor(
                    f"Unsupported list element {text!r}",
                    line=tok.line,
                    field=field,
                )
            channel, identifier = split_attribute_path(tok.text, tok.line, field)
            self.result.entries.append(
                RequirementEntry(identifier=identifier, channel=channel, line=tok.line)
            )
            j += 1


def parse_nix(source: str, list_field: str = "buildInputs") -> ParsedDescriptor:
    """Parse Nix source into requirement entries.

    Raises:
        MalformedDescriptor: If the source does not have the expected
            shape, or the list field is missing or not a list.
    """
    result = _NixParser(source, list_field).parse()
    if result.list_line is None:
        raise MalformedDescriptor(
            f"No '{list_field}' list in {result.invocation}",
            field=list_field,
        )
    return result
