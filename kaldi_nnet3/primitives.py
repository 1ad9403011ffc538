# Copyright 2017-2018    Daniel Povey
#           2026         kaldi-nnet3 authors
# Apache 2.0.

"""Lexical building blocks for reading text-format nnet3 models.

Every function here takes a bytes buffer 's' and a position 'pos' and
returns the pair (value, new_pos).  On a mismatch it raises ParseError and
the caller's position is untouched, so callers can try an alternative from
the same place.
"""

import re

from kaldi_nnet3.exceptions import ParseError

_NAME_RE = re.compile(br'[A-Za-z][A-Za-z0-9._\-]*')
_INTEGER_RE = re.compile(br'-?[0-9]+')

SPACE = b" \t"
MULTISPACE = b" \t\r\n"

INT32_MIN = -2 ** 31
INT32_MAX = 2 ** 31 - 1


def skip(s, pos, chars):
    """Returns the first position at or after 'pos' whose byte is not in
    'chars'."""
    n = len(s)
    while pos < n and s[pos] in chars:
        pos += 1
    return pos


def spaced(parser):
    """Wraps 'parser' so that spaces and tabs are skipped on both sides."""
    def parse(s, pos):
        (value, pos) = parser(s, skip(s, pos, SPACE))
        return (value, skip(s, pos, SPACE))
    return parse


def multispaced(parser):
    """Like spaced(), but newlines are skipped too."""
    def parse(s, pos):
        (value, pos) = parser(s, skip(s, pos, MULTISPACE))
        return (value, skip(s, pos, MULTISPACE))
    return parse


def many0(parser):
    """Applies 'parser' as many times as it matches and returns the list of
    values.  The first ParseError ends the repetition silently, leaving the
    position where the last successful match ended."""
    def parse(s, pos):
        values = []
        while True:
            try:
                (value, new_pos) = parser(s, pos)
            except ParseError:
                break
            if new_pos == pos:
                # a match that consumes nothing would repeat forever.
                break
            values.append(value)
            pos = new_pos
        return (values, pos)
    return parse


def count(parser, n):
    """Applies 'parser' exactly 'n' times; any failure propagates."""
    def parse(s, pos):
        values = []
        for _ in range(n):
            (value, pos) = parser(s, pos)
            values.append(value)
        return (values, pos)
    return parse


def tag(s, pos, literal):
    if not s.startswith(literal, pos):
        raise ParseError("'{0}'".format(literal.decode()), s, pos)
    return (literal, pos + len(literal))


def read_name(s, pos):
    """Reads an identifier: an ASCII letter followed by letters, digits,
    '.', '_' or '-'."""
    m = _NAME_RE.match(s, pos)
    if m is None:
        raise ParseError("name", s, pos)
    return (m.group(0).decode("ascii"), m.end())


def read_integer(s, pos):
    """Reads an optionally negative decimal integer that fits in int32."""
    m = _INTEGER_RE.match(s, pos)
    if m is None:
        raise ParseError("integer", s, pos)
    value = int(m.group(0))
    if not INT32_MIN <= value <= INT32_MAX:
        raise ParseError("32-bit integer", s, pos)
    return (value, m.end())


def open_tag(s, pos, name):
    """Matches "<name>", skipping whitespace around it."""
    return multispaced(
        lambda s, pos: tag(s, pos, "<{0}>".format(name).encode()))(s, pos)


def close_tag(s, pos, name):
    """Matches "</name>", skipping whitespace around it."""
    return multispaced(
        lambda s, pos: tag(s, pos, "</{0}>".format(name).encode()))(s, pos)


def _open_any(s, pos):
    (_, pos) = tag(s, pos, b"<")
    (name, pos) = read_name(s, pos)
    (_, pos) = tag(s, pos, b">")
    return (name, pos)


# Matches "<anything>" and returns the text between the brackets; used where
# the tag itself is data, like component types and attribute names.
open_any = multispaced(_open_any)
