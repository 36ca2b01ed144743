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
Generate accompaniment notes from chord markers.

Chord markers are written in LML as macros, e.g. ``$Am7``, and collected by
the compiler in the ``auto_chords`` log of the song. An :class:`AutoChords`
strategy turns every marker into notes on a new track, named
``"Autochords"``, below the melody notes that sound at the same time.

The strategies are :class:`RootAutoChords`, :class:`TriadAutoChords`,
:class:`Root5AutoChords`, :class:`ArpAutoChords` and
:class:`BossaNovaAutoChords` (the default). Use :func:`find_generator` to get
one by name::

    >>> from lml import load
    >>> song = load("$C c5*4", auto_chords="root")
    >>> [str(n) for n in song.tracks[2]]
    ['C4,0.0,4.0']

"""

import collections
import logging
import re

from . import pitch
from .scale import Chord
from .song import SongNote


logger = logging.getLogger(__name__)


#: The name of the track that receives the generated notes.
TRACK_NAME = "Autochords"

#: The highest pitch (exclusive) for chords when no melody is sounding.
DEFAULT_CEILING = pitch.MIDDLE_C_PITCH + 5


ChordBlock = collections.namedtuple("ChordBlock", "start stop chord")
ChordBlock.__doc__ = "The time span (in beats) a chord marker ``(root, shape)`` applies to."


_macro_rx = re.compile(r'([a-gA-G][#b]?)(.*)')


def coerce_chord(macro):
    """Return a tuple (root, shape) for a macro name like ``"Am7"``, or None.

    The root is capitalized; an empty shape means a major chord. None is
    returned when the shape is not one of :attr:`Chord.SHAPES
    <lml.scale.Chord.SHAPES>`.

    """
    m = _macro_rx.match(macro)
    if not m:
        return None
    root, shape = m.groups()
    root = root[0].upper() + root[1:]
    shape = shape or "M"
    if shape not in Chord.SHAPES:
        return None
    return root, shape


class AutoChords:
    """Base class for the auto chord strategies.

    A strategy is created with a :class:`~lml.song.MultiTrackSong` and an
    options dictionary, which may contain ``rate`` (the subdivision rate,
    default 1) and ``chord_min_spacing`` (semitones to keep below the melody,
    default 0). Calling :meth:`add_chords` adds the notes to the song.

    Subclasses implement :meth:`notes_for_chord`.

    """
    #: The name to find the strategy with, see :func:`find_generator`.
    name = None

    #: A human readable name.
    display_name = "Auto Chords"

    #: All the available strategies, set below.
    all_generators = ()

    def __init__(self, song, options=None):
        self.song = song
        self.options = dict(options or {})

    @staticmethod
    def default_chords(song, options=None):
        """Return the default strategy for the song."""
        return BossaNovaAutoChords(song, options)

    def beats_per_measure(self):
        """Return the beats per measure from the song metadata, or None."""
        return self.song.metadata.get('beatsPerMeasure')

    def find_chord_blocks(self):
        """Return a list of :class:`ChordBlock` tuples.

        Every chord lasts until the next chord, or until the end of the measure
        it starts in. Chords that would have no length are skipped.

        """
        bpm = self.beats_per_measure()
        if not bpm:
            raise ValueError("missing beats per measure for auto chords")
        if not self.song.auto_chords:
            raise ValueError("song has no chord markers")

        blocks = []
        until = None
        for start, chord in reversed(self.song.auto_chords):
            stop = (start // bpm + 1) * bpm
            if until is not None:
                stop = min(stop, until)
            if start >= stop:
                logger.warning("rejecting chord %s at %s-%s", chord, start, stop)
                continue
            blocks.append(ChordBlock(start, stop, chord))
            until = start
        blocks.reverse()
        return blocks

    def add_chords(self):
        """Generate the notes and add them to a new track of the song.

        Returns the number of the new track.

        """
        notes = []
        for block in self.find_chord_blocks():
            root, shape = block.chord
            notes.extend(self.notes_for_chord(root, shape, block.start, block.stop))

        track_idx = self.song.find_empty_track_idx()
        for note in notes:
            self.song.push_with_track(note, track_idx)
        self.song.get_track(track_idx).track_name = TRACK_NAME
        return track_idx

    def min_pitch_in_range(self, start, stop):
        """Return the ceiling for chord notes between start and stop.

        This is the lowest melody pitch sounding in that range (or
        :data:`DEFAULT_CEILING` when that is lower), minus the
        ``chord_min_spacing`` option. Generated notes stay below it.

        """
        pitches = [pitch.parse_note(n.note) for n in self.song.notes_in_range(start, stop)]
        ceiling = min(pitches + [DEFAULT_CEILING])
        return ceiling - (self.options.get('chord_min_spacing') or 0)

    def root_below(self, name, max_pitch):
        """Return the note name of the highest ``name`` note below max_pitch."""
        root_pitch = pitch.parse_note(name + "0")
        octaves = (max_pitch - 1 - root_pitch) // pitch.OCTAVE_SIZE
        return pitch.note_name(octaves * pitch.OCTAVE_SIZE + root_pitch)

    def chord_below(self, root, shape, max_pitch):
        """Return the note names of the chord in root position, with all notes
        below max_pitch.
        """
        notes = Chord.notes(self.root_below(root, max_pitch), shape)
        while max(map(pitch.parse_note, notes)) >= max_pitch:
            notes = [pitch.add_interval(n, -pitch.OCTAVE_SIZE) for n in notes]
        return notes

    def in_divisions(self, start, stop, count):
        """Yield (left, right, k) tuples dividing start..stop.

        Each division is ``beats_per_measure / 2 ** (count - 1)`` long; the last
        one is cut off at ``stop``, and ``k`` counts the divisions.

        """
        chunk = (self.beats_per_measure() or 4) / 2 ** (count - 1)
        left = start
        k = 0
        while True:
            right = min(stop, left + chunk)
            yield left, right, k
            if right >= stop:
                break
            left += chunk
            k += 1

    def notes_for_chord(self, root, shape, start, stop):
        """Return a list of :class:`~lml.song.SongNote` for one chord block."""
        raise NotImplementedError


class RootAutoChords(AutoChords):
    """Play the root of the chord."""
    name = "root"
    display_name = "Root"

    def notes_for_chord(self, root, shape, start, stop):
        max_pitch = self.min_pitch_in_range(start, stop)
        note = self.root_below(root, max_pitch)
        return [SongNote(note, left, right - left)
                for left, right, k in self.in_divisions(start, stop, self.options.get('rate') or 1)]


class TriadAutoChords(AutoChords):
    """Play all notes of the chord."""
    name = "triad"
    display_name = "Triad"

    def notes_for_chord(self, root, shape, start, stop):
        notes = self.chord_below(root, shape, self.min_pitch_in_range(start, stop))
        return [SongNote(note, left, right - left)
                for left, right, k in self.in_divisions(start, stop, self.options.get('rate') or 1)
                for note in notes]


class Root5AutoChords(AutoChords):
    """Alternate the root and the fifth of the chord."""
    name = "root5"
    display_name = "Root+5"

    def notes_for_chord(self, root, shape, start, stop):
        max_pitch = self.min_pitch_in_range(start, stop)
        chord_root = self.root_below(root, max_pitch)
        notes = Chord.notes(chord_root, shape)
        if pitch.parse_note(notes[2]) >= max_pitch:
            notes = Chord.notes(pitch.add_interval(chord_root, -pitch.OCTAVE_SIZE), shape)
        rate = self.options.get('rate') or 1
        bpm = self.beats_per_measure() or 2
        return [SongNote(notes[0] if k % bpm == 0 else notes[2], left, right - left)
                for left, right, k in self.in_divisions(start, stop, 1 + rate)]


class ArpAutoChords(AutoChords):
    """Play the chord as an arpeggio: root, third, seventh (or fifth), third."""
    name = "arp"
    display_name = "Arp"

    def notes_for_chord(self, root, shape, start, stop):
        notes = self.chord_below(root, shape, self.min_pitch_in_range(start, stop))
        pattern = (notes[0], notes[1], notes[3] if len(notes) > 3 else notes[2], notes[1])
        return [SongNote(pattern[k], left, right - left)
                for left, right, k in self.in_divisions(start, stop, 3)
                if k < len(pattern)]


class BossaNovaAutoChords(AutoChords):
    """A syncopated pattern of the root and the fifth."""
    name = "bossa_nova"
    display_name = "Bossa Nova"

    def notes_for_chord(self, root, shape, start, stop):
        max_pitch = self.min_pitch_in_range(start, stop)
        notes = Chord.notes(self.root_below(root, max_pitch), shape)
        one, two = notes[0], notes[2]
        if pitch.parse_note(two) >= max_pitch:
            one, two = pitch.add_interval(two, -pitch.OCTAVE_SIZE), notes[0]

        out = []
        for left, right, k in self.in_divisions(start, stop, 3):
            d = (right - left) / 2
            if k == 0:
                out.append(SongNote(one, left, d * 3))
            elif k == 1:
                out.append(SongNote(one, left + d, d))
            elif k == 2:
                out.append(SongNote(two, left, d * 3))
            elif k == 3:
                out.append(SongNote(two, left + d, d))
        return out


AutoChords.all_generators = (
    RootAutoChords,
    TriadAutoChords,
    Root5AutoChords,
    ArpAutoChords,
    BossaNovaAutoChords,
)


def find_generator(generator):
    """Return the AutoChords subclass for a name like ``"triad"``.

    A class is returned unchanged. Raises ValueError for an unknown name.

    """
    if isinstance(generator, type) and issubclass(generator, AutoChords):
        return generator
    for cls in AutoChords.all_generators:
        if cls.name == generator:
            return cls
    raise ValueError("unknown auto chords generator: {!r}".format(generator))
