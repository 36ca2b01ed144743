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
Scales and chords.

A :class:`Scale` is a root note name (without octave) and a list of steps in
semitones, which is cycled to generate notes over any range. A :class:`Chord`
is a scale whose steps are the intervals between the chord notes, closed with
the remaining interval back to the octave, so that cycling it generates
inversions and doubled chord notes in higher octaves.

"""

import logging
import re

from . import pitch
from .key import FIFTHS, KeySignature


logger = logging.getLogger(__name__)


_root_rx = re.compile(r'[A-G][b#]?$')
_octave_suffix_rx = re.compile(r'\d+$')
_note_octave_rx = re.compile(r'(\D+)(\d+)$')


class InvalidChordShape(KeyError):
    """Raised when an unknown chord shape name is used."""
    pass


def strip_octave(note):
    """Return the note name without its octave number."""
    return _octave_suffix_rx.sub('', note)


class Scale:
    """Base class for scales; subclasses define the ``steps``."""
    steps = ()
    minor = False
    chromatic = False

    def __init__(self, root):
        if isinstance(root, KeySignature):
            root = root.scale_root()
        if not _root_rx.match(root):
            raise pitch.InvalidNoteFormat("scale root not properly formed: {}".format(root))
        self.root = root

    def __repr__(self):
        return '<{} {}>'.format(type(self).__name__, self.root)

    def get_range(self, octave, count=None, offset=0):
        """Return ``count`` note names of the scale, starting at the root in
        ``octave``.

        By default, one full octave including the upper root is returned. A
        positive ``offset`` skips that many notes; a negative offset starts
        that many scale steps below the root.

        """
        steps = self.steps
        if count is None:
            count = len(steps) + 1
        current = pitch.parse_note('{}{}'.format(self.root, octave))
        sharpen = self.chromatic or not self.is_flat()
        k = 0
        while offset < 0:
            k -= 1
            current -= steps[k % len(steps)]
            offset += 1
        k %= len(steps)
        notes = []
        for i in range(count + offset):
            if i >= offset:
                notes.append(pitch.note_name(current, sharpen))
            current += steps[k % len(steps)]
            k += 1
        return notes

    def get_full_range(self):
        """Return all notes of the scale from octave 0 upwards."""
        return self.get_range(0, (len(self.steps) + 1) * 8)

    def get_loose_range(self, min_note, max_note):
        """Return all notes of the scale between min_note and max_note (inclusive)."""
        lower = pitch.parse_note(min_note)
        upper = pitch.parse_note(max_note)
        return [note for note in self.get_full_range()
                if lower <= pitch.parse_note(note) <= upper]

    def is_flat(self):
        """Return True if the key of this scale is written with flats."""
        offset = pitch.note_offset(self.root)
        idx = [pitch.note_offset(name) for name in FIFTHS].index(offset)
        if self.minor:
            idx = (idx - 3) % len(FIFTHS)
        return idx < 1 or idx > 6

    def _degree_offset(self, note):
        """Return (root offset, note offset) with the note moved within an
        octave above the root.
        """
        root = pitch.note_offset(self.root)
        offset = pitch.note_offset(note)
        while offset < root:
            offset += pitch.OCTAVE_SIZE
        while offset >= root + pitch.OCTAVE_SIZE:
            offset -= pitch.OCTAVE_SIZE
        return root, offset

    def contains_note(self, note):
        """Return True if the note (in any octave) belongs to the scale."""
        current, offset = self._degree_offset(note)
        i = 0
        while current <= offset:
            if current == offset:
                return True
            current += self.steps[i % len(self.steps)]
            i += 1
        return False

    def degree_to_name(self, degree):
        """Return the note name (without octave) of the 1-based ``degree``."""
        degree = (degree - 1) % len(self.steps) + 1
        return strip_octave(self.get_range(0, degree)[-1])

    def get_degree(self, note):
        """Return the 1-based degree of the note in this scale.

        Raises ValueError if the note is not in the scale.

        """
        current, offset = self._degree_offset(note)
        degree = 1
        if current == offset:
            return degree
        for step in self.steps:
            current += step
            degree += 1
            if current == offset:
                return degree
            if current > offset:
                break
        raise ValueError("{} is not in scale {}".format(note, self.root))

    def build_chord_steps(self, degree, count):
        """Return ``count`` intervals of a chord stacked in thirds on ``degree``.

        For example, ``MajorScale("C").build_chord_steps(1, 2)`` returns the
        intervals of a major triad, ``[4, 3]``.

        """
        steps = self.steps
        idx = degree - 1
        result = []
        for _ in range(count):
            result.append(steps[idx % len(steps)] + steps[(idx + 1) % len(steps)])
            idx += 2
        return result

    def all_chords(self, note_count=3):
        """Return the chords with ``note_count`` notes built on every degree."""
        return [Chord(self.degree_to_name(degree), self.build_chord_steps(degree, note_count - 1))
                for degree in range(1, len(self.steps) + 1)]


class MajorScale(Scale):
    steps = (2, 2, 1, 2, 2, 2, 1)


class MinorScale(Scale):
    """Natural minor."""
    minor = True
    steps = (2, 1, 2, 2, 1, 2, 2)


class HarmonicMinorScale(Scale):
    minor = True
    steps = (2, 1, 2, 2, 1, 3, 1)


class AscendingMelodicMinorScale(Scale):
    minor = True
    steps = (2, 1, 2, 2, 2, 2, 1)


class MajorBluesScale(Scale):
    """C, D, D#/Eb, E, G, A."""
    steps = (2, 1, 1, 3, 2, 3)


class MinorBluesScale(Scale):
    """C, D#/Eb, F, F#/Gb, G, Bb."""
    minor = True
    steps = (3, 2, 1, 1, 3, 2)


class ChromaticScale(Scale):
    chromatic = True
    steps = (1,) * 12


class Chord(Scale):
    """A chord on ``root``, with a shape name or a list of intervals.

    ::

        >>> Chord("C", "M").get_range(5, 3)
        ['C5', 'E5', 'G5']
        >>> str(Chord("A", "m7"))
        'Am7'

    """
    #: Known chord shapes, as intervals in semitones between the chord notes.
    SHAPES = {
        'M': (4, 3),
        'm': (3, 4),

        'dim': (3, 3),
        'dimM7': (3, 3, 5),
        'dim7': (3, 3, 3),

        'aug': (4, 4),
        'augM7': (4, 4, 3),

        'M6': (4, 3, 2),
        'm6': (3, 4, 2),

        'M7': (4, 3, 4),
        '7': (4, 3, 3),
        'm7': (3, 4, 3),
        'm7b5': (3, 3, 4),
        'mM7': (3, 4, 4),

        # exotic
        'Q': (5, 5),    # quartal
        'Qb4': (4, 5),
    }

    def __init__(self, root, intervals):
        super().__init__(root)
        if isinstance(intervals, str):
            try:
                intervals = self.SHAPES[intervals]
            except KeyError:
                raise InvalidChordShape("unknown chord shape: {}".format(intervals)) from None
        if not intervals:
            raise ValueError("missing intervals for chord")
        steps = list(intervals)
        steps.append(-sum(steps) % pitch.OCTAVE_SIZE)
        self.steps = tuple(steps)

    def __repr__(self):
        return '<{} {}>'.format(type(self).__name__, self)

    def __str__(self):
        name = self.chord_shape_name()
        if name is None:
            logger.warning("don't know name of chord %s %s", self.root, self.steps)
            name = ''
        elif name == 'M':
            name = ''
        return self.root + name

    @classmethod
    def notes(cls, note, shape, inversion=0, count=0):
        """Return the note names of the chord with ``shape`` on ``note``.

        The ``note`` includes the octave, e.g. ``Chord.notes("C5", "M", 1)``
        returns the first inversion of the C major chord: E5, G5, C6.

        """
        m = _note_octave_rx.match(note)
        if not m:
            raise pitch.InvalidNoteFormat("invalid note format '{}'".format(note))
        root, octave = m.groups()
        chord = cls(root, shape)
        if count == 0:
            count = len(chord.steps)
        return chord.get_range(int(octave), count, inversion)

    def chord_shape_name(self):
        """Return the name of the shape in :attr:`SHAPES`, or None."""
        intervals = self.steps[:-1]
        for name, shape in self.SHAPES.items():
            if shape == intervals:
                return name

    def is_dominant(self):
        """Return True for a major or dominant seventh chord."""
        return self.chord_shape_name() in ('M', '7')

    def get_secondary_dominant_targets(self, note_count=3):
        """Return the chords this (dominant) chord can resolve to.

        The targets are rooted a fourth above, as major and minor triads when
        ``note_count`` is 3 or as major and minor seventh chords when it is 4.

        """
        if not self.is_dominant():
            raise ValueError("chord is not dominant to begin with: {}".format(self.chord_shape_name()))
        new_root = strip_octave(pitch.add_interval('{}5'.format(self.root), 5))
        if note_count == 3:
            shapes = ('M', 'm')
        elif note_count == 4:
            shapes = ('M7', 'm7')
        else:
            raise ValueError("don't know how to get secondary dominant for note count: {}".format(note_count))
        return [Chord(new_root, shape) for shape in shapes]

    def contains_notes(self, notes):
        """Return True if all notes (and at least one) fit in this chord."""
        return bool(notes) and all(self.contains_note(note) for note in notes)

    def count_shared_notes(self, other):
        """Return how many notes (ignoring octaves) two chords have in common."""
        count = len(self.steps)
        mine = set(map(strip_octave, self.get_range(5, count)))
        shared = 0
        for note in map(strip_octave, other.get_range(5, count)):
            if note in mine:
                shared += 1
                mine.discard(note)
        return shared


class Staff:
    """A staff, with the notes on its lower and upper line and the clef note.

    ::

        >>> Staff.for_name("bass").clef_name()
        'F'

    """
    def __init__(self, name, lower_note, upper_note, clef_note):
        self.name = name
        self.lower_note = lower_note
        self.upper_note = upper_note
        self.clef_note = clef_note

    def __repr__(self):
        return '<{} {} {}-{}>'.format(type(self).__name__, self.name, self.lower_note, self.upper_note)

    @classmethod
    def all_staves(cls):
        """Return the known staves."""
        return [
            cls("treble", "E5", "F6", "G5"),
            cls("bass", "G3", "A4", "F4"),
        ]

    @classmethod
    def for_name(cls, name):
        """Return the staff with the specified name, or None."""
        for staff in cls.all_staves():
            if staff.name == name:
                return staff

    def clef_name(self):
        """The letter of the clef, e.g. ``"G"`` or ``"F"``."""
        return self.clef_note[0]
