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
LML language and transform definition.

The :class:`Lml` language definition tokenizes LML text. The toplevel ``root``
lexicon handles frontmatter lines at the start of the document; everything
after that is in the ``song`` lexicon. Blocks (``{`` ... ``}``) and strings
get their own lexicons.

Notes, rests and commands are single tokens; the :class:`LmlTransform`
interprets their text and builds the AST: a list of tuples, the first item of
each tuple being a string tag::

    >>> from lml import parse
    >>> parse("ks2 c5*2 { d | e } $Gm")
    [('keySignature', 2, (0, 3)), ('note', 'C5', {'duration': Fraction(2, 1),
    'location': (4, 8)}), ('block', [('note', 'D', {'location': (11, 12)}),
    ('restoreStartPosition',), ('note', 'E', {'location': (15, 16)})]),
    ('macro', 'Gm')]

Invalid input is collected while transforming, and the first error is raised
as an :class:`LmlSyntaxError`.

"""

import fractions
import re

from parce import Language, lexicon, skip, default_action, default_target
from parce.rule import bygroup
from parce.transform import Transform, transform_text
from parce.util import Dispatcher
import parce.action as a


# A token must be followed by whitespace, a delimiter or the end of the text.
BOUNDARY = r"""(?![^\s{}|#$"'])"""

TIMING = r"(?:([*/])([0-9]{1,3}))?(\.*)(?:@([0-9]+))?"
NOTE = r"([a-gA-G])([+\-=])?([0-9])?" + TIMING
REST = r"[rR_]" + TIMING

KEY_SIGNATURE = r"ks(-?[0-9]+)"
TIME_SIGNATURE = r"ts([0-9]+)/([0-9]+)"
TEMPO = r"(ht|dt|tt)([0-9]*)"
MEASURE = r"m([0-9]*)"
TRACK = r"t([0-9]+)"
CLEF = r"/([gcfGCF])"
MACRO = r"\$([A-Za-z0-9_]+)"

FRONTMATTER = r"(#)[ \t]*([A-Za-z_][A-Za-z0-9_]*)[ \t]*(:)[ \t]*([^\n]*)"

TEMPO_NAMES = {
    'ht': 'halfTime',
    'dt': 'doubleTime',
    'tt': 'tripleTime',
}

STRING_ESCAPES = {
    'n': '\n',
    '\\': '\\',
    '"': '"',
    "'": "'",
}

#: Descriptions of what may appear in a song, used in error messages.
EXPECTED = (
    "note", "rest", "key signature", "time signature", "tempo change",
    "measure", "track", "clef", "macro", "string", "block", "'|'", "comment",
    "whitespace",
)


_note_rx = re.compile(NOTE)
_rest_rx = re.compile(REST)
_key_signature_rx = re.compile(KEY_SIGNATURE)
_time_signature_rx = re.compile(TIME_SIGNATURE)
_tempo_rx = re.compile(TEMPO)
_measure_rx = re.compile(MEASURE)
_track_rx = re.compile(TRACK)


class LmlSyntaxError(SyntaxError):
    """Raised when LML text can't be parsed.

    The ``position`` attribute is the offset in the text where the error was
    found; ``expected`` is a tuple of descriptions of what was expected
    there, and ``text`` the invalid text (empty at the end of the input).

    """
    def __init__(self, position, expected, text=""):
        found = repr(text) if text else "end of input"
        message = "expected {} but {} found at position {}".format(
            ", ".join(expected), found, position)
        super().__init__(message)
        self.position = position
        self.expected = tuple(expected)
        self.text = text


class Lml(Language):
    """LML language definition."""
    @lexicon
    def root(cls):
        yield FRONTMATTER, bygroup(a.Delimiter.Frontmatter, a.Name.Variable, a.Delimiter, a.String)
        yield r"\s+", skip
        yield default_target, cls.song

    @lexicon
    def song(cls):
        yield from cls.commands()
        yield default_action, a.Invalid

    @lexicon(consume=True)
    def block(cls):
        yield r"\}", a.Delimiter.Bracket, -1
        yield from cls.commands()
        yield default_action, a.Invalid

    @classmethod
    def commands(cls):
        yield r"\s+", skip
        yield r"#[^\n]*", a.Comment
        yield r"\{", a.Delimiter.Bracket, cls.block
        yield r"\|", a.Delimiter.Separator
        yield r'"', a.String.Start, cls.dqstring
        yield r"'", a.String.Start, cls.sqstring
        yield MACRO + BOUNDARY, a.Name.Macro
        yield KEY_SIGNATURE + BOUNDARY, a.Keyword.KeySignature
        yield TIME_SIGNATURE + BOUNDARY, a.Keyword.TimeSignature
        yield TEMPO + BOUNDARY, a.Keyword.Tempo
        yield MEASURE + BOUNDARY, a.Keyword.Measure
        yield TRACK + BOUNDARY, a.Keyword.Track
        yield CLEF + BOUNDARY, a.Keyword.Clef
        yield REST + BOUNDARY, a.Text.Music.Rest
        yield NOTE + BOUNDARY, a.Text.Music.Pitch

    @lexicon(consume=True)
    def dqstring(cls):
        yield r'"', a.String.End, -1
        yield r'\\[\\"n]', a.String.Escape
        yield default_action, a.String

    @lexicon(consume=True)
    def sqstring(cls):
        yield r"'", a.String.End, -1
        yield r"\\[\\'n]", a.String.Escape
        yield default_action, a.String


def timing_options(operator, number, dots, start):
    """Return a dict with the timing options of a note or rest.

    The arguments are the matched groups of the timing suffix. The dict
    contains the keys ``duration`` (a Fraction multiplier), ``dots`` and
    ``start`` (an integer beat) when they were specified. Raises
    ZeroDivisionError for a division by zero.

    """
    opts = {}
    if operator:
        n = int(number)
        opts['duration'] = fractions.Fraction(n) if operator == '*' else fractions.Fraction(1, n)
    if dots:
        opts['dots'] = len(dots)
    if start:
        opts['start'] = int(start)
    return opts


class LmlTransform(Transform):
    """Transform LML text to the AST.

    If ``length`` is given, it is the length of the text, used to report
    errors about unterminated blocks and strings. Otherwise the end of the
    last token is used.

    """
    def __init__(self, length=None):
        self.length = length
        self.errors = []
        self._end = 0

    ## helper methods
    def error(self, position, expected, text=""):
        """Record an error, the first one will be raised at the end."""
        self.errors.append((position, tuple(expected), text))

    def end_position(self):
        """The end of the input."""
        return self._end if self.length is None else self.length

    def commands(self, items):
        """Yield AST nodes for the tokens and sub-contexts in items."""
        for i in items:
            if i.is_token:
                self._end = max(self._end, i.end)
                node = self._action(i.action, i)
                if node:
                    yield node
            elif i.obj:
                yield i.obj

    def strings(self, items, quote):
        """Return a ``("string", text)`` node from a string context."""
        if items.peek(-1, a.String.End):
            self._end = max(self._end, items[-1].end)
            tokens = items[1:-1]
        else:
            self.error(self.end_position(), ("closing quote {}".format(quote),))
            tokens = items[1:]
        text = ''.join(STRING_ESCAPES[t.text[1]] if t.action is a.String.Escape else t.text
                       for t in tokens)
        return "string", text

    ### transforming methods
    def root(self, items):
        """Return the full AST, a list of tuples.

        Frontmatter nodes come first. Raises :class:`LmlSyntaxError` when
        there were errors.

        """
        nodes = []
        for i in items:
            if i.is_token:
                if i.action is a.Name.Variable:
                    nodes.append(["frontmatter", i.text, ""])
                elif i.action is a.String:
                    nodes[-1][2] = i.text.strip()
            else:
                nodes.extend(i.obj)
        if self.errors:
            position, expected, text = min(self.errors, key=lambda e: e[0])
            raise LmlSyntaxError(position, expected, text)
        return [tuple(n) if isinstance(n, list) else n for n in nodes]

    def song(self, items):
        """Return the list of AST nodes."""
        return list(self.commands(items))

    def block(self, items):
        """Return a ``("block", [...])`` node."""
        if items.peek(-1, a.Delimiter.Bracket) and items[-1] == '}':
            self._end = max(self._end, items[-1].end)
            items = items[1:-1]
        else:
            self.error(self.end_position(), ("'}'",) + EXPECTED)
            items = items[1:]
        return "block", list(self.commands(items))

    def dqstring(self, items):
        """Return a ``("string", text)`` node for a double-quoted string."""
        return self.strings(items, '"')

    def sqstring(self, items):
        """Return a ``("string", text)`` node for a single-quoted string."""
        return self.strings(items, "'")

    ## token handlers
    _action = Dispatcher()

    @_action(a.Text.Music.Pitch)
    def note_action(self, token):
        """Called for a note, returns a ``("note", name, opts)`` node."""
        letter, accidental, octave, *timing = _note_rx.match(token.text).groups()
        try:
            opts = timing_options(*timing)
        except ZeroDivisionError:
            self.error(token.pos, ("non-zero divisor",), token.text)
            return
        if accidental == '+':
            opts['sharp'] = True
        elif accidental == '-':
            opts['flat'] = True
        elif accidental == '=':
            opts['natural'] = True
        opts['location'] = (token.pos, token.end)
        return "note", letter.upper() + (octave or ''), opts

    @_action(a.Text.Music.Rest)
    def rest_action(self, token):
        """Called for a rest, returns a ``("rest",)`` or ``("rest", opts)`` node."""
        try:
            opts = timing_options(*_rest_rx.match(token.text).groups())
        except ZeroDivisionError:
            self.error(token.pos, ("non-zero divisor",), token.text)
            return
        return ("rest", opts) if opts else ("rest",)

    @_action(a.Keyword.KeySignature)
    def key_signature_action(self, token):
        count = int(_key_signature_rx.match(token.text).group(1))
        return "keySignature", count, (token.pos, token.end)

    @_action(a.Keyword.TimeSignature)
    def time_signature_action(self, token):
        num, denom = map(int, _time_signature_rx.match(token.text).groups())
        if denom == 0:
            self.error(token.pos, ("non-zero time signature denominator",), token.text)
            return
        return "timeSignature", num, denom

    @_action(a.Keyword.Tempo)
    def tempo_action(self, token):
        name, count = _tempo_rx.match(token.text).groups()
        if count:
            return TEMPO_NAMES[name], int(count)
        return (TEMPO_NAMES[name],)

    @_action(a.Keyword.Measure)
    def measure_action(self, token):
        number = _measure_rx.match(token.text).group(1)
        if number:
            return "measure", int(number)
        return ("measure",)

    @_action(a.Keyword.Track)
    def track_action(self, token):
        return "setTrack", int(_track_rx.match(token.text).group(1))

    @_action(a.Keyword.Clef)
    def clef_action(self, token):
        return "clef", token.text[1].lower()

    @_action(a.Name.Macro)
    def macro_action(self, token):
        return "macro", token.text[1:]

    @_action(a.Delimiter.Separator)
    def separator_action(self, token):
        return ("restoreStartPosition",)

    @_action(a.Invalid)
    def invalid_action(self, token):
        self.error(token.pos, EXPECTED, token.text)


def parse(text):
    """Parse LML text and return the AST.

    Raises :class:`LmlSyntaxError` if the text contains invalid input.

    """
    return transform_text(Lml.root, text, LmlTransform(len(text))) or []
