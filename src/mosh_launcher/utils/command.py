"""Command string tokenizing and quoting helpers.

Command strings arrive as one free-form value (``--ssh "ssh -p 2222"``) and
are split into an executable and a raw argument string. Argument lists are
reassembled into a single string with :func:`join_arguments` and turned back
into an argv list with :func:`split_arguments` right before spawning, so no
shell is ever involved.
"""

from __future__ import annotations

import re
from collections.abc import Iterable

from mosh_launcher.errors import MalformedCommand
from mosh_launcher.models import CommandSpec

QUOTES = ("'", '"')

WHITESPACE_RE = re.compile(r"\s")
SHOULD_QUOTE_RE = re.compile(r"[\s\"']")


def split_command(text: str | None) -> CommandSpec:
    """Split ``text`` into a program name and its argument string.

    A program path containing spaces may be wrapped in single or double
    quotes. The closing quote must be followed by whitespace or end the
    string, otherwise :class:`MalformedCommand` is raised.
    """
    text = (text or "").strip()
    if not text:
        return CommandSpec(program="")

    if text[0] in QUOTES:
        idx = text.find(text[0], 1)
        if idx < 2:
            raise MalformedCommand(f"Invalid command string: {text}")

        program = text[1:idx].strip()
        if idx == len(text) - 1:
            return CommandSpec(program=program)

        if not text[idx + 1].isspace():
            # Closing quote glued to the next token
            raise MalformedCommand(f"Invalid command string: {text}")

        return CommandSpec(program=program, arguments=text[idx + 1 :].strip())

    match = WHITESPACE_RE.search(text)
    if len(text) < 3 or match is None:
        return CommandSpec(program=text)

    return CommandSpec(program=text[: match.start()], arguments=text[match.end() :].strip())


def quote_if_needed(token: str) -> str:
    """Wrap ``token`` in double quotes if it holds whitespace or a quote character.

    Embedded double quotes are doubled. Tokens already wrapped in a matching
    quote pair are returned as-is, so quoting twice is a no-op.
    """
    if token == "":
        return '""'
    if len(token) >= 2 and token[0] in QUOTES and token[-1] == token[0]:
        return token
    if not SHOULD_QUOTE_RE.search(token):
        return token
    return '"' + token.replace('"', '""') + '"'


def join_arguments(tokens: Iterable[str]) -> str:
    """Join argv tokens into one argument string."""
    return " ".join(quote_if_needed(token) for token in tokens)


def split_arguments(text: str) -> list[str]:
    """Split an argument string into argv tokens.

    Inverse of :func:`join_arguments`: whitespace separates tokens,
    ``'...'`` is literal and inside ``"..."`` a doubled ``""`` stands for
    one ``"``.
    """
    tokens: list[str] = []
    current: list[str] = []
    in_token = False
    quote = ""
    i = 0

    while i < len(text):
        ch = text[i]
        if quote:
            if ch != quote:
                current.append(ch)
            elif quote == '"' and text[i + 1 : i + 2] == '"':
                current.append('"')
                i += 1
            else:
                quote = ""
        elif ch in QUOTES:
            quote = ch
            in_token = True
        elif ch.isspace():
            if in_token:
                tokens.append("".join(current))
                current = []
                in_token = False
        else:
            current.append(ch)
            in_token = True
        i += 1

    if quote:
        raise MalformedCommand(f"Unterminated quote in arguments: {text}")
    if in_token:
        tokens.append("".join(current))
    return tokens
