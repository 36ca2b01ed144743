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
Byte codes of the compressed LML format.

Every token category has its own range of byte values, so that a decoder can
tell from the first byte what kind of token follows:

=========== ========================================================
0x01..0x0F  commands (:data:`COMMANDS`)
0x10..0x16  notes without octave (:data:`NOTES`)
0x20..0x65  notes with octave: ``0x20 + octave * 7 + letter index``
0x80..0x8E  accidentals, durations, dots and start (:data:`MODIFIERS`)
0x90..0x95  numbers, strings and markers (:class:`Special`)
0xA0..0xBF  short LZ77 back-reference
0xC0..0xDF  medium LZ77 back-reference
0xFF        literal escape for the LZ77 stage
=========== ========================================================

"""


COMMANDS = {
    'm': 0x01,
    '{': 0x02,
    '}': 0x03,
    '|': 0x04,
    'dt': 0x05,
    'ht': 0x06,
    'tt': 0x07,
    'r': 0x08,
    'ks': 0x09,
    'ts': 0x0A,
    't': 0x0B,
    '/g': 0x0C,
    '/c': 0x0D,
    '/f': 0x0E,
    '$': 0x0F,
}

NOTE_LETTERS = 'cdefgab'

NOTES = {letter: 0x10 + index for index, letter in enumerate(NOTE_LETTERS)}

NOTE_WITH_OCTAVE_MIN = 0x20
NOTE_WITH_OCTAVE_MAX = 0x20 + 9 * 7 + 6

MODIFIERS = {
    '+': 0x80,
    '-': 0x81,
    '=': 0x82,
    '*2': 0x83,
    '*3': 0x84,
    '*4': 0x85,
    '*5': 0x86,
    '*6': 0x87,
    '/2': 0x88,
    '/4': 0x89,
    '.': 0x8A,
    '..': 0x8B,
    '@': 0x8C,
    '*': 0x8D,
    '/': 0x8E,
}

ACCIDENTALS = ('+', '-', '=')


class Special:
    """Markers for values that don't have a code of their own."""
    NUMBER = 0x90
    STRING_START = 0x91
    STRING_END = 0x92
    FRONTMATTER_KEY = 0x93
    NEGATIVE = 0x94
    HAS_COUNT = 0x95


LZ77_SHORT_MIN = 0xA0
LZ77_SHORT_MAX = 0xBF
LZ77_MEDIUM_MIN = 0xC0
LZ77_MEDIUM_MAX = 0xDF
LITERAL_ESCAPE = 0xFF


REVERSE_COMMANDS = {code: name for name, code in COMMANDS.items()}
REVERSE_NOTES = {code: letter for letter, code in NOTES.items()}
REVERSE_MODIFIERS = {code: name for name, code in MODIFIERS.items()}


def encode_note_octave(letter, octave):
    """Return the single byte for a note letter with an octave (0..9).

    Raises ValueError for an unknown letter or an octave out of range.

    """
    index = NOTE_LETTERS.find(letter.lower())
    if index == -1 or len(letter) != 1 or not 0 <= octave <= 9:
        raise ValueError("invalid note: {}{}".format(letter, octave))
    return NOTE_WITH_OCTAVE_MIN + octave * 7 + index


def decode_note_octave(byte):
    """Return the tuple (letter, octave) for a note byte, or None."""
    if is_note_with_octave(byte):
        octave, index = divmod(byte - NOTE_WITH_OCTAVE_MIN, 7)
        return NOTE_LETTERS[index], octave


def is_command(byte):
    return 0x01 <= byte <= 0x0F


def is_note(byte):
    return 0x10 <= byte <= 0x16


def is_note_with_octave(byte):
    return NOTE_WITH_OCTAVE_MIN <= byte <= NOTE_WITH_OCTAVE_MAX


def is_modifier(byte):
    return 0x80 <= byte <= 0x8E


def is_accidental(byte):
    return REVERSE_MODIFIERS.get(byte) in ACCIDENTALS


def is_lz77(byte):
    """Return True if the byte starts an LZ77 back-reference."""
    return LZ77_SHORT_MIN <= byte <= LZ77_MEDIUM_MAX
