# -*- coding: utf-8 -*-
#
# This file is part of `lml`, a library for the LML music notation
#
# Copyright © 2026 by the lml developers
#
# This module is free software: you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.
#
# This module is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
# GNU General Public License for more details.
#
# You should have received a copy of the GNU General Public License
# along with this program.  If not, see <https://www.gnu.org/licenses/>.



"""
A flat token stream of LML text, used by the compressor.

The tokens are read from the tree the :class:`~lml.lang.lml.Lml` language
builds, but no AST is created: comments and invalid text are dropped, and
every token keeps just enough information to write it back in a normalized
form::

    >>> from lml.compression.tokenizer import tokenize, reconstruct
    >>> reconstruct(tokenize("# title: Test\\nC+5*2  { d | E } # comment"))
    '# title: Test\\nc+5*2 {d | e}'

"""

import collections
import re

import parce
import parce.action as a

from lml.lang.lml import (
    Lml, NOTE, REST, KEY_SIGNATURE, TIME_SIGNATURE, TEMPO, MEASURE, TRACK,
    STRING_ESCAPES,
)


Token = collections.namedtuple("Token", "type value note_name accidental octave duration dots start key")
Token.__new__.__defaults__ = (None,) * 7
Token.__doc__ = """A token of LML text.

``type`` is one of ``"frontmatter"``, ``"command"``, ``"note"``, ``"rest"``,
``"string"``, ``"macro"``, ``"block_start"``, ``"block_end"`` or ``"pipe"``.
The ``value`` is the normalized text of the token; for frontmatter it is the
value of the field named ``key``, for a string its unescaped contents.

Notes fill in ``note_name`` (a lowercase letter), ``accidental`` (``"+"``,
``"-"`` or ``"="``) and ``octave``; notes and rests fill in ``duration``
(e.g. ``"*2"`` or ``"/4"``), ``dots`` and ``start``, where they were given.

"""


_note_rx = re.compile(NOTE)
_rest_rx = re.compile(REST)

_command_rx = (
    (re.compile(KEY_SIGNATURE), lambda m: "ks{}".format(int(m.group(1)))),
    (re.compile(TIME_SIGNATURE), lambda m: "ts{}/{}".format(int(m.group(1)), int(m.group(2)))),
    (re.compile(TEMPO), lambda m: m.group(1) + (str(int(m.group(2))) if m.group(2) else "")),
    (re.compile(MEASURE), lambda m: "m" + (str(int(m.group(1))) if m.group(1) else "")),
    (re.compile(TRACK), lambda m: "t{}".format(int(m.group(1)))),
)

_string_escapes = {char: '\\' + escape for escape, char in STRING_ESCAPES.items() if escape != "'"}


def tokenize(text):
    """Return the list of :class:`Token` tuples for the LML text."""
    tokens = []
    tree = parce.root(Lml.root, text)
    for node in tree:
        if node.is_context:
            tokens.extend(_context_tokens(node))
        elif node.action is a.Name.Variable:
            tokens.append(Token("frontmatter", "", key=node.text))
        elif node.action is a.String:
            tokens[-1] = tokens[-1]._replace(value=node.text.strip())
    return tokens


def _timing(operator, number, dots, start):
    """Return a dict with the duration, dots and start of a note or rest."""
    fields = {}
    if operator:
        fields['duration'] = "{}{}".format(operator, int(number))
    if dots:
        fields['dots'] = len(dots)
    if start:
        fields['start'] = int(start)
    return fields


def _context_tokens(context):
    """Yield the Tokens of a song or block context."""
    for node in context:
        if node.is_context:
            if node.lexicon in (Lml.dqstring, Lml.sqstring):
                yield Token("string", ''.join(
                    STRING_ESCAPES[t.text[1]] if t.action is a.String.Escape else t.text
                    for t in node if t.action in (a.String, a.String.Escape)))
            else:
                yield from _context_tokens(node)
            continue
        action, text = node.action, node.text
        if action is a.Delimiter.Bracket:
            yield Token("block_start" if text == '{' else "block_end", text)
        elif action is a.Delimiter.Separator:
            yield Token("pipe", text)
        elif action is a.Name.Macro:
            yield Token("macro", text)
        elif action is a.Text.Music.Pitch:
            letter, accidental, octave, *timing = _note_rx.match(text).groups()
            yield Token("note", text, letter.lower(), accidental,
                        int(octave) if octave else None, **_timing(*timing))
        elif action is a.Text.Music.Rest:
            yield Token("rest", text, **_timing(*_rest_rx.match(text).groups()))
        elif action is a.Keyword.Clef:
            yield Token("command", text.lower())
        elif action in a.Keyword:
            for rx, normalize in _command_rx:
                m = rx.match(text)
                if m:
                    yield Token("command", normalize(m))
                    break


def note_text(token):
    """Return the normalized text of a note or rest token."""
    if token.type == "rest":
        parts = ["r"]
    else:
        parts = [token.note_name, token.accidental or ""]
        if token.octave is not None:
            parts.append(str(token.octave))
    if token.duration:
        parts.append(token.duration)
    if token.dots:
        parts.append("." * token.dots)
    if token.start is not None:
        parts.append("@{}".format(token.start))
    return "".join(parts)


def string_text(value):
    """Return the value as a double-quoted LML string."""
    return '"{}"'.format(''.join(_string_escapes.get(c, c) for c in value))


def reconstruct(tokens):
    """Return normalized LML text for the tokens.

    Tokens are separated by a space, except directly after a ``{`` and
    before a ``}``; frontmatter lines are followed by a newline.

    """
    parts = []
    previous = None
    for token in tokens:
        if previous is not None and previous != "block_start" and token.type != "block_end":
            parts.append("\n" if previous == "frontmatter" else " ")
        if token.type == "frontmatter":
            parts.append("# {}: {}".format(token.key, token.value))
        elif token.type in ("note", "rest"):
            parts.append(note_text(token))
        elif token.type == "string":
            parts.append(string_text(token.value))
        else:
            parts.append(token.value)
        previous = token.type
    return "".join(parts)
