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
A list of notes to be played in order, e.g. for sight-reading drills.

Every item of a :class:`NoteList` is a note name, or a list of note names
(a column) that should be played together.

"""

from . import pitch
from .scale import strip_octave


def _column(item):
    """Return the item as a list of note names."""
    return item if isinstance(item, (list, tuple)) else [item]


class NoteList(list):
    """A list of notes and columns of notes.

    ::

        >>> notes = NoteList(["C5", ["E5", "G5"], "D5"])
        >>> str(notes)
        'C5, E5 G5, D5'
        >>> notes.to_note_string()
        '72, 76 79, 74'

    """
    def __str__(self):
        return ", ".join(" ".join(_column(item)) for item in self)

    def filter_by_range(self, min_note, max_note):
        """Return a new NoteList with only the notes (or columns with all
        their notes) between min_note and max_note (inclusive).
        """
        low = pitch.parse_note(min_note)
        high = pitch.parse_note(max_note)
        return type(self)(item for item in self
            if all(low <= pitch.parse_note(n) <= high for n in _column(item)))

    def matches_head(self, notes, any_octave=False):
        """Return True if the notes are the notes of the first item.

        If ``any_octave`` is True, the octaves of the notes are not compared.

        """
        if isinstance(notes, str):
            raise TypeError("matches_head: notes should be a list")
        first = self[0]
        if isinstance(first, (list, tuple)):
            if len(first) != len(notes):
                return False
            if any_octave:
                names = set(map(strip_octave, notes))
                return all(strip_octave(n) in names for n in first)
            pitches = set(map(pitch.parse_note, notes))
            return all(pitch.parse_note(n) in pitches for n in first)
        if len(notes) != 1:
            return False
        if any_octave:
            return pitch.notes_same(notes[0], first)
        return pitch.parse_note(notes[0]) == pitch.parse_note(first)

    def current_column(self):
        """Return the first item as a list of note names."""
        return list(_column(self[0]))

    def in_head(self, note):
        """Return True if the note is (in) the first item."""
        return note in _column(self[0])

    def to_note_string(self):
        """Return the notes as pitch numbers, for quick comparisons."""
        return ", ".join(" ".join(str(pitch.parse_note(n)) for n in _column(item))
                         for item in self)
