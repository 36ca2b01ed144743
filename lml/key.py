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
Classes and functions to deal with key signatures.

A key signature is described by an integer count of accidentals: positive
values are the number of sharps, negative values the number of flats. The
usual range is -6..5, from G-flat major to B major.

"""

import re

from parce.util import cached_method

from . import pitch


#: Major keys on the circle of fifths, starting at F (count -1).
FIFTHS = ('F', 'C', 'G', 'D', 'A', 'E', 'B', 'Gb', 'Db', 'Ab', 'Eb', 'Bb')

#: The order in which letters receive sharps (and, reversed, flats).
FIFTHS_TRUNCATED = ('F', 'C', 'G', 'D', 'A', 'E', 'B')


_letter_octave_rx = re.compile(r'([A-G])(\d+)?')


def transpose_key_signature(count, semitones):
    """Return the accidental count of the key signature ``count``, transposed
    by ``semitones``.

    Every semitone up moves seven steps clockwise on the circle of fifths. The
    result is normalized into the -6..5 range; transposing by whole octaves
    returns the count unchanged. For example::

        >>> transpose_key_signature(0, 1)     # C -> Db
        -5
        >>> transpose_key_signature(0, -1)    # C -> B
        5

    """
    if semitones % pitch.OCTAVE_SIZE == 0:
        return count
    return (count + semitones * 7 + 6) % 12 - 6


class KeySignature:
    """A key signature with ``count`` accidentals.

    The key signature knows which letters receive an accidental, and can
    convert between the letters a musician writes down and the notes that
    sound.

    """
    def __init__(self, count):
        self.count = count

    def __repr__(self):
        return '<{} {} ({})>'.format(type(self).__name__, self.name(), self.count)

    def __eq__(self, other):
        if isinstance(other, KeySignature):
            return self.count == other.count and self.is_chromatic() == other.is_chromatic()
        return NotImplemented

    def __hash__(self):
        return hash((self.count, self.is_chromatic()))

    def __str__(self):
        return self.name()

    @classmethod
    def all_key_signatures(cls):
        """Return a list of all regular key signatures (not the chromatic one)."""
        return [cls(count) for count in (0, 1, 2, 3, 4, 5, -1, -2, -3, -4, -5, -6)]

    @classmethod
    def for_count(cls, count):
        """Return a cached KeySignature for ``count``, or None if it is out of range."""
        try:
            return _key_signatures[count]
        except KeyError:
            return None

    def is_chromatic(self):
        return False

    def is_sharp(self):
        return self.count > 0

    def is_flat(self):
        return self.count < 0

    def name(self):
        """The name of the major key, e.g. ``"D"`` for two sharps."""
        return FIFTHS[(self.count + 1) % len(FIFTHS)]

    def scale_root(self):
        """The root of the default scale in this key."""
        return self.name()

    def default_scale(self):
        """Return the default (major) scale for this key."""
        from .scale import MajorScale
        return MajorScale(self)

    def enharmonic(self, note):
        """Return the note spelled with the kind of accidentals this key uses.

        In a flat key, a sharpened note is respelled with a flat, and vice versa.

        """
        if self.is_flat() and '#' in note:
            return pitch.note_name(pitch.parse_note(note), False)
        if self.is_sharp() and 'b' in note:
            return pitch.note_name(pitch.parse_note(note), True)
        return note

    @cached_method
    def accidental_notes(self):
        """Return the tuple of letters that receive an accidental in this key.

        Sharps are listed in the order they appear in the key signature; for
        flat keys the letters are listed from B downwards.

        """
        if self.count > 0:
            return FIFTHS_TRUNCATED[:self.count]
        elif self.count < 0:
            return tuple(reversed(FIFTHS_TRUNCATED[len(FIFTHS_TRUNCATED) + self.count:]))
        return ()

    def unconvert_note(self, note):
        """Add the accidental the key implies to a plain note name.

        The ``note`` is a letter with an optional octave, e.g. ``"F"`` or
        ``"F5"``, or a pitch value (which is first turned into a note name). In
        D major, ``"F5"`` becomes ``"F#5"``; letters without an implied
        accidental are returned unchanged.

        """
        if not isinstance(note, str):
            note = pitch.note_name(note)
        if self.count == 0:
            return note
        m = _letter_octave_rx.match(note)
        if not m:
            raise pitch.InvalidNoteFormat("can't unconvert note '{}'".format(note))
        letter, octave = m.groups()
        if letter in self.accidental_notes() and note[1:2] not in ('#', 'b'):
            return '{}{}{}'.format(letter, '#' if self.is_sharp() else 'b', octave or '')
        return note

    def accidentals_for_note(self, note):
        """Return the accidental that needs to be displayed for the note.

        Returns None if no accidental is needed, 0 if a natural sign is
        needed, 1 for a sharp and -1 for a flat. The ``note`` may also be a
        pitch value.

        """
        if not isinstance(note, str):
            note = pitch.note_name(note)
        alter = pitch.note_accidentals(note)
        letter = note[0]
        in_key = letter in self.accidental_notes()
        if alter > 0:
            return None if self.is_sharp() and in_key else 1
        elif alter < 0:
            return None if self.is_flat() and in_key else -1
        return 0 if in_key else None

    def notes_in_range(self, min_note, max_note):
        """Return the notes that carry the key's accidentals, placed within
        the range (min_note, max_note].

        The notes are returned as natural note names (the lines and spaces
        the accidentals are drawn on), in the order of the key signature.
        Both arguments may be note names or pitch values.

        """
        if self.count == 0:
            return []
        if isinstance(min_note, str):
            min_note = pitch.parse_note(min_note)
        if isinstance(max_note, str):
            max_note = pitch.parse_note(max_note)

        if self.count > 0:
            first, step = pitch.parse_note('F5'), 7
        else:
            first, step = pitch.parse_note('B5'), -7
        result = []
        for i in range(abs(self.count)):
            n = first + i * step
            while n <= min_note:
                n += pitch.OCTAVE_SIZE
            while n > max_note:
                n -= pitch.OCTAVE_SIZE
            result.append(pitch.note_name(n))
        return result


class ChromaticKeySignature(KeySignature):
    """A key signature for chromatic material, rendered as C major."""
    def __init__(self):
        super().__init__(0)

    def is_chromatic(self):
        return True

    def name(self):
        return "Chromatic"

    def scale_root(self):
        return "C"

    def default_scale(self):
        from .scale import ChromaticScale
        return ChromaticScale(self)


_key_signatures = {k.count: k for k in KeySignature.all_key_signatures()}
