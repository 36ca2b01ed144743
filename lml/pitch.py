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
Functions to deal with LML pitches.

A pitch is an integer semitone value, where middle C (C4) is 60, the same
numbering as MIDI key numbers. A note name is a string consisting of an
uppercase letter ``A``..``G``, an optional accidental (``#`` or ``b``) and an
octave number, e.g. ``"C4"``, ``"F#5"`` or ``"Bb3"``.

Note names without an octave (e.g. ``"F#"``) are used where the octave does not
matter, e.g. for scale and chord roots, or when an octave still needs to be
inferred from a reference pitch (see :func:`closest_octave`).

"""

import re

from parce.util import cached_func


#: The pitch of middle C.
MIDDLE_C_PITCH = 60

#: Semitones in an octave.
OCTAVE_SIZE = 12

#: The semitone offset of each letter from C.
OFFSETS = {
    'C': 0,
    'D': 2,
    'E': 4,
    'F': 5,
    'G': 7,
    'A': 9,
    'B': 11,
}

#: The letter for each semitone offset that is a "white key".
LETTERS = {offset: letter for letter, offset in OFFSETS.items()}

#: The index of each letter in the diatonic scale, used for staff positions.
NOTE_NAME_OFFSETS = {letter: index for index, letter in enumerate('CDEFGAB')}


_note_rx = re.compile(r'([A-G])(#|b)?(\d+)$')
_letter_rx = re.compile(r'([A-G])(#|b)?')
_letter_only_rx = re.compile(r'([A-G])(#|b)?$')
_staff_rx = re.compile(r'([A-G])[#b]?(\d+)')


class InvalidNoteFormat(ValueError):
    """Raised when a string can't be interpreted as a note name."""
    pass


def _alteration(accidental):
    """Return 1 for a sharp, -1 for a flat and 0 otherwise."""
    return 1 if accidental == '#' else -1 if accidental == 'b' else 0


@cached_func
def parse_note(note):
    """Return the pitch for a note name with octave, e.g. ``"C#4"`` -> 61.

    Raises :class:`InvalidNoteFormat` if the note name is not well-formed.

    """
    m = _note_rx.match(note)
    if not m:
        raise InvalidNoteFormat("parse_note: invalid note format '{}'".format(note))
    letter, accidental, octave = m.groups()
    return OFFSETS[letter] + (int(octave) + 1) * OCTAVE_SIZE + _alteration(accidental)


def note_name(pitch, sharpen=True):
    """Return the note name for the pitch.

    Black keys are spelled with a sharp, or with a flat if ``sharpen`` is
    False::

        >>> note_name(61)
        'C#4'
        >>> note_name(61, False)
        'Db4'

    """
    octave, offset = divmod(pitch, OCTAVE_SIZE)
    octave -= 1
    name = LETTERS.get(offset)
    if name is None:
        name = LETTERS[offset - 1] + '#' if sharpen else LETTERS[offset + 1] + 'b'
    return '{}{}'.format(name, octave)


def note_accidentals(note):
    """Return the alteration of the note name: 1 (sharp), -1 (flat) or 0."""
    m = _letter_rx.match(note)
    if not m:
        raise InvalidNoteFormat("invalid note format '{}'".format(note))
    return _alteration(m.group(2))


def note_offset(note):
    """Return the octave independent offset in semitones from C (0..11).

    The octave of the note name, if any, is ignored; Cb wraps to 11 and B# to 0.

    """
    m = _letter_rx.match(note)
    if not m:
        raise InvalidNoteFormat("invalid note format '{}'".format(note))
    letter, accidental = m.groups()
    return (OFFSETS[letter] + _alteration(accidental)) % OCTAVE_SIZE


def note_staff_offset(note):
    """Return the diatonic staff position of the note (octave * 7 + letter index)."""
    m = _staff_rx.match(note)
    if not m:
        raise InvalidNoteFormat("invalid note format '{}'".format(note))
    letter, octave = m.groups()
    return int(octave) * 7 + NOTE_NAME_OFFSETS[letter]


def notes_same(a, b):
    """Return True if the notes are the same, ignoring the octave.

    Enharmonic equivalents are the same: ``notes_same("C#4", "Db5")`` is True.

    """
    return note_offset(a) == note_offset(b)


def add_interval(note, semitones):
    """Return the note name ``semitones`` above (or below) the note."""
    return note_name(parse_note(note) + semitones)


def compare_notes(a, b):
    """Return a negative value if a is lower than b, 0 if they are the same,
    and a positive value if a is higher.
    """
    return parse_note(a) - parse_note(b)


def notes_less_than(a, b):
    """Return True if note a is lower than note b."""
    return compare_notes(a, b) < 0


def notes_greater_than(a, b):
    """Return True if note a is higher than note b."""
    return compare_notes(a, b) > 0


def closest_octave(letter, reference_pitch):
    """Return the note name with octave for ``letter`` that is the closest to
    the ``reference_pitch``.

    The ``letter`` is a note name without octave, e.g. ``"G"`` or ``"F#"``.
    The octave of the reference pitch and the octaves directly below and above
    it are tried; a neighbouring octave is only chosen when it is strictly
    closer, so when two candidates are equally far away, the octave of the
    reference pitch wins. For example::

        >>> closest_octave("G", 60)
        'G3'
        >>> closest_octave("C", 67)
        'C5'
        >>> closest_octave("F#", 60)
        'F#4'

    """
    if not _letter_only_rx.match(letter):
        raise InvalidNoteFormat("invalid note letter '{}'".format(letter))
    ref_octave = max(reference_pitch // OCTAVE_SIZE - 1, 0)
    best_octave = ref_octave
    best_distance = abs(parse_note('{}{}'.format(letter, ref_octave)) - reference_pitch)
    for octave in (ref_octave - 1, ref_octave + 1):
        if octave < 0:
            continue
        distance = abs(parse_note('{}{}'.format(letter, octave)) - reference_pitch)
        if distance < best_distance:
            best_octave, best_distance = octave, distance
    return '{}{}'.format(letter, best_octave)
