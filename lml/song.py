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
The song model: notes with a start and duration in beats, and lists of them.

A :class:`SongNoteList` wraps a Python list of :class:`SongNote` objects and
carries the song metadata and the logs of changes over time (time and key
signatures, clefs, strings and chord markers). A :class:`MultiTrackSong` also
keeps a list of notes per track; a note in a track is the very same object as
the note in the song's flat list.

Notes are compared by identity, two notes with the same pitch and timing are
still two different notes.

"""

import collections
import copy
import math

from . import pitch
from .key import transpose_key_signature


Measure = collections.namedtuple("Measure", "start beats")
Measure.__doc__ = "A measure, starting at ``start`` with ``beats`` beats."


class SongNote:
    """A note with a name (e.g. ``"C4"``), a start and a duration in beats.

    The ``source_location`` is an optional tuple (start, end) with the
    position of the note in the LML text.

    """
    __slots__ = ('note', 'start', 'duration', 'source_location')

    def __init__(self, note, start, duration, source_location=None):
        self.note = note
        self.start = start
        self.duration = duration
        self.source_location = source_location

    def __repr__(self):
        return '<{} {}>'.format(type(self).__name__, self)

    def __str__(self):
        return '{},{},{}'.format(self.note, self.start, self.duration)

    def clone(self):
        """Return a copy of this note."""
        return type(self)(self.note, self.start, self.duration, self.source_location)

    def in_range(self, start, stop):
        """Return True if the note sounds somewhere between start and stop."""
        return start < self.get_stop() and stop > self.start

    def transpose(self, semitones):
        """Return a new note, transposed by ``semitones``."""
        return type(self)(pitch.note_name(pitch.parse_note(self.note) + semitones),
                          self.start, self.duration, self.source_location)

    def get_start(self):
        return self.start

    def get_stop(self):
        return self.start + self.duration

    def get_render_stop(self):
        return self.start + self.duration


class SongNoteList:
    """A list of notes, with metadata about the song or track.

    Iterating, indexing and ``len()`` work on the notes. The change logs are
    lists of tuples, the first item of each tuple is the beat:

    ``auto_chords``
        ``(beat, (root, shape))`` chord markers
    ``clefs``
        ``(beat, clef)`` clef changes, the clef being ``"g"``, ``"c"`` or ``"f"``
    ``strings``
        ``(beat, text)`` text annotations
    ``time_signatures``
        ``(beat, beats_per_measure)`` time signature changes
    ``key_signatures``
        ``(beat, count, (start, end))`` key signature changes, with their
        location in the LML text

    """
    #: Bucket size in beats for :meth:`match_note_fast`.
    bucket_size = 8

    def __init__(self, notes=()):
        self.notes = list(notes)
        self.metadata = {}
        self.auto_chords = []
        self.clefs = []
        self.strings = []
        self.time_signatures = []
        self.key_signatures = []
        self.track_name = None
        self._buckets = None

    def __repr__(self):
        return '<{} ({} notes)>'.format(type(self).__name__, len(self))

    def __len__(self):
        return len(self.notes)

    def __iter__(self):
        return iter(self.notes)

    def __getitem__(self, index):
        return self.notes[index]

    def append(self, note):
        """Append a note."""
        self.notes.append(note)
        return note

    push = append

    @classmethod
    def new_song(cls, note_tuples):
        """Return a new song from an iterable of (note, start, duration) tuples."""
        return cls(SongNote(*t) for t in note_tuples)

    def clone(self):
        """Return a new song with copies of all the notes."""
        return SongNoteList(note.clone() for note in self)

    def clear_cache(self):
        """Clear the bucket index used by :meth:`match_note_fast`.

        Call this after modifying the notes.

        """
        self._buckets = None

    def transpose(self, semitones=0):
        """Return a new song with all notes and key signatures transposed.

        Returns the song itself if ``semitones`` is 0. The time signatures,
        clefs, strings and chord markers do not change; the new song shares
        those lists with this one.

        """
        if semitones == 0:
            return self
        song = type(self)()
        self._transpose_notes_into(song, semitones)
        self._transpose_metadata_into(song, semitones)
        return song

    def _transpose_metadata_into(self, song, semitones):
        """Set the metadata and change logs of the other song from ours."""
        song.metadata = copy.deepcopy(self.metadata)
        if 'keySignature' in song.metadata:
            song.metadata['keySignature'] = transpose_key_signature(song.metadata['keySignature'], semitones)
        song.key_signatures = [(beat, transpose_key_signature(count, semitones), location)
                               for beat, count, location in self.key_signatures]
        song.time_signatures = self.time_signatures
        song.clefs = self.clefs
        song.strings = self.strings
        song.auto_chords = self.auto_chords
        song.track_name = self.track_name

    def _transpose_notes_into(self, song, semitones):
        """Add transposed copies of our notes to the other song."""
        for note in self:
            song.append(note.transpose(semitones))

    def notes_in_range(self, start, stop):
        """Return the list of notes that sound between start and stop."""
        return [note for note in self if note.in_range(start, stop)]

    def find_notes_for_selection(self, start, end):
        """Return the set of indices of notes whose source location overlaps
        the text range start..end.
        """
        return set(idx for idx, note in enumerate(self)
                   if note.source_location
                   and start <= note.source_location[1] and end >= note.source_location[0])

    def find_key_signatures_for_selection(self, start, end):
        """Return the key signature changes whose source location overlaps
        the text range start..end.
        """
        return [ks for ks in self.key_signatures
                if start <= ks[2][1] and end >= ks[2][0]]

    def get_stop_in_beats(self):
        """Return the end of the last sounding note, 0 for an empty song."""
        return max((note.get_stop() for note in self), default=0)

    def get_start_in_beats(self):
        """Return the start of the first note, 0 for an empty song."""
        return min((note.get_start() for note in self), default=0)

    def get_measures(self):
        """Return a list of :class:`Measure` tuples upto the end of the song.

        The number of beats of each measure follows the time signature changes.
        An empty song has no measures.

        """
        measures = []
        end = self.get_stop_in_beats()
        if end == 0:
            return measures
        signatures = self.time_signatures or [(0, 4)]
        beats = signatures[0][1]
        position = 0
        index = 0
        while position < end:
            while index < len(signatures) and signatures[index][0] <= position:
                beats = signatures[index][1]
                index += 1
            measures.append(Measure(position, beats))
            position += beats
        return measures

    def note_range(self):
        """Return a tuple (lowest, highest) note name, or None for an empty song."""
        if not self.notes:
            return None
        pitches = [pitch.parse_note(note.note) for note in self]
        return pitch.note_name(min(pitches)), pitch.note_name(max(pitches))

    def fitting_staff(self):
        """Return ``"treble"``, ``"bass"`` or ``"grand"``, the staff that best
        displays the notes.

        A single clef at the start of the song decides; otherwise the range of
        the notes does.

        The compiler logs clefs per track, so the ``clefs`` of a compiled
        :class:`MultiTrackSong` itself stay empty. Call this method on a track
        (e.g. ``song.tracks[0].fitting_staff()``) to have its clef honored.

        """
        if len(self.clefs) == 1:
            beat, clef = self.clefs[0]
            if not self.notes or self.notes[0].get_start() >= beat:
                if clef == "f":
                    return "bass"
                elif clef == "g":
                    return "treble"

        note_range = self.note_range()
        if not note_range:
            return "treble"
        low, high = map(pitch.parse_note, note_range)
        treble = high > pitch.MIDDLE_C_PITCH + 4
        bass = low < pitch.MIDDLE_C_PITCH - 4
        if treble and bass:
            return "grand"
        elif bass:
            return "bass"
        return "treble"

    def match_note(self, note, beat):
        """Return the index of the note with the same pitch as ``note``,
        starting closest to ``beat``, or None.
        """
        target = pitch.parse_note(note)
        found = None
        for idx, n in enumerate(self):
            if pitch.parse_note(n.note) == target:
                if found is None or abs(self[found].start - beat) > abs(n.start - beat):
                    found = idx
        return found

    def _bucket_range(self, start, stop):
        """Return the range of bucket indices the span touches."""
        return range(math.floor(start / self.bucket_size), math.ceil(stop / self.bucket_size))

    def _get_buckets(self):
        """Return the bucket index, building it if needed."""
        if self._buckets is None:
            buckets = collections.defaultdict(list)
            for idx, note in enumerate(self):
                for i in self._bucket_range(note.get_start(), note.get_stop()):
                    buckets[i].append(idx)
            self._buckets = dict(buckets)
        return self._buckets

    def match_note_fast(self, note, beat, wrap_right=None, wrap_left=None):
        """Return the index of the note with the same pitch as ``note``,
        starting closest to ``beat``, or None.

        Only notes in the buckets around ``beat`` are considered. If both
        ``wrap_right`` and ``wrap_left`` are given, e.g. for a looping region,
        and ``beat`` is close to ``wrap_right``, notes at the corresponding
        position after ``wrap_left`` are also considered.

        The bucket index is built on first use, call :meth:`clear_cache` after
        modifying the notes.

        """
        buckets = self._get_buckets()
        target = pitch.parse_note(note)
        found = None
        for i in self._bucket_range(beat - 1, beat + 1):
            for idx in buckets.get(i, ()):
                if idx == found or pitch.parse_note(self[idx].note) != target:
                    continue
                if found is None or abs(self[found].start - beat) > abs(self[idx].start - beat):
                    found = idx

        if wrap_right is not None and wrap_left is not None:
            delta = wrap_right - beat
            if delta < 2:
                wrap_beat = wrap_left - delta
                wrapped = self.match_note_fast(note, wrap_beat)
                if wrapped is not None:
                    if found is None or \
                            abs(self[wrapped].start - wrap_beat) < abs(self[found].start - beat):
                        found = wrapped
        return found


class MultiTrackSong(SongNoteList):
    """A song with notes in tracks.

    Tracks are :class:`SongNoteList` instances in the ``tracks`` dictionary,
    keyed by track number; track numbers need not be contiguous.

    """
    def __init__(self, notes=()):
        super().__init__(notes)
        self.tracks = {}

    def push_with_track(self, note, track):
        """Add the note to the song and to the track with number ``track``."""
        self.append(note)
        self.get_track(track).append(note)
        return note

    def get_track(self, idx):
        """Return the track with number ``idx``, creating it if needed."""
        try:
            return self.tracks[idx]
        except KeyError:
            track = self.tracks[idx] = SongNoteList()
            return track

    def find_empty_track_idx(self):
        """Return a track number that is not in use, e.g. for generated notes."""
        return max(self.tracks) + 2 if self.tracks else 1

    def _transpose_notes_into(self, song, semitones):
        """Transpose the notes and the tracks.

        Every note is transposed once, so a note in a transposed track is the
        same object as the note in the flat list of the transposed song.

        """
        transposed = {}
        for note in self:
            transposed[id(note)] = song.append(note.transpose(semitones))
        for idx, track in self.tracks.items():
            new_track = song.tracks[idx] = SongNoteList()
            for note in track:
                try:
                    new_note = transposed[id(note)]
                except KeyError:
                    new_note = transposed[id(note)] = note.transpose(semitones)
                new_track.append(new_note)
            track._transpose_metadata_into(new_track, semitones)
