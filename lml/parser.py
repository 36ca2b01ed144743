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
Compile the LML AST to a song.

The :class:`SongParser` walks the AST produced by :func:`lml.lang.lml.parse`
and keeps the current position, tempo, time signature, key signature, track
and the last pitch (for notes without octave) in a :class:`CompilerState`.
Every note becomes a :class:`~lml.song.SongNote` in a
:class:`~lml.song.MultiTrackSong`.

For example::

    >>> from lml.parser import SongParser
    >>> song = SongParser.load("ks2 c d e")
    >>> [str(n) for n in song]
    ['C#4,0.0,1.0', 'D4,1.0,1.0', 'E4,2.0,1.0']

A block (``{`` ... ``}``) gets a copy of the state; after the block only the
position and the last pitch are taken over, so e.g. a tempo or key signature
change in a block does not affect the notes after it. A ``|`` moves the
position back to where the block (or the song) started.

The module also contains some functions to handle single notes, used by
editors to modify a note in the text.

"""

import collections
import copy
import fractions
import logging
import re

from parce.util import Dispatcher

from . import duration, pitch
from .autochords import AutoChords, coerce_chord, find_generator
from .key import KeySignature
from .lang.lml import NOTE, parse, timing_options
from .song import MultiTrackSong, SongNote


logger = logging.getLogger(__name__)


#: The octave of notes without octave when there is no previous note.
DEFAULT_OCTAVE = 4

TEMPO_FACTORS = {
    'halfTime': fractions.Fraction(2),
    'doubleTime': fractions.Fraction(1, 2),
    'tripleTime': fractions.Fraction(1, 3),
}


class CompilerState:
    """The state while compiling.

    Positions and lengths are in ticks (see :data:`lml.duration.TICKS_PER_BEAT`).

    """
    __slots__ = (
        'start_position',
        'position',
        'ticks_per_note',
        'ticks_per_measure',
        'time_scale',
        'key_signature',
        'track',
        'last_measure',
        'next_measure_start',
        'last_pitch',
        'default_pitch',
    )

    def __init__(self, default_octave=DEFAULT_OCTAVE):
        self.start_position = 0
        self.position = 0
        self.ticks_per_note = duration.TICKS_PER_BEAT
        self.ticks_per_measure = duration.TICKS_PER_BEAT * duration.DEFAULT_BEATS_PER_MEASURE
        self.time_scale = fractions.Fraction(1)
        self.key_signature = KeySignature(0)
        self.track = 0
        self.last_measure = -1
        self.next_measure_start = 0
        self.last_pitch = None
        self.default_pitch = (default_octave + 1) * pitch.OCTAVE_SIZE

    def block(self):
        """Return a copy of the state for a block starting at the current position."""
        state = copy.copy(self)
        state.start_position = self.position
        return state

    def leave_block(self, state):
        """Take over the position and last pitch from the state of a block."""
        self.position = state.position
        self.last_pitch = state.last_pitch
        if state.ticks_per_measure != self.ticks_per_measure:
            measure_start = self.next_measure_start - self.ticks_per_measure
            self.next_measure_start = measure_start + state.ticks_per_measure
            self.ticks_per_measure = state.ticks_per_measure

    def beat(self):
        """The current position in beats."""
        return duration.ticks_to_beats(self.position)

    def note_ticks(self, opts):
        """Return the length in ticks of a note or rest with the timing opts."""
        ticks = self.ticks_per_note * self.time_scale
        if opts:
            if opts.get('duration'):
                ticks *= opts['duration']
            if opts.get('dots'):
                ticks *= duration.dotted_multiplier(opts['dots'])
        return duration.round_ticks(ticks)


class SongParser:
    """Parse and compile LML text.

    The options are the same as for :meth:`compile`.

    """
    def __init__(self, **options):
        self.options = options

    @classmethod
    def load(cls, text, **options):
        """Parse and compile text, and return a :class:`~lml.song.MultiTrackSong`."""
        parser = cls(**options)
        return parser.compile(parser.parse(text))

    def parse(self, text):
        """Return the AST for the text.

        Raises :class:`~lml.lang.lml.LmlSyntaxError` on invalid input.

        """
        return parse(text)

    def compile(self, ast, **options):
        """Compile the AST and return a :class:`~lml.song.MultiTrackSong`.

        Options given here override the options given on construction:

        ``default_octave``
            the octave of the first note written without octave (default: 4)
        ``auto_chords``
            None or True to generate accompaniment for chord macros with the
            default generator, False to not generate anything, or an
            :class:`~lml.autochords.AutoChords` subclass or its name
        ``auto_chords_settings``
            a dictionary with options for the auto chords generator

        """
        options = dict(self.options, **options)
        frontmatter = {node[1]: node[2] for node in ast if node[0] == "frontmatter"}

        state = CompilerState(options.get('default_octave', DEFAULT_OCTAVE))
        song = MultiTrackSong()
        self.compile_commands(ast, state, song)

        beats_per_measure = fractions.Fraction(state.ticks_per_measure) / duration.TICKS_PER_BEAT
        song.metadata = {
            'keySignature': state.key_signature.count,
            'beatsPerMeasure': int(beats_per_measure)
                if beats_per_measure.denominator == 1 else float(beats_per_measure),
        }
        if frontmatter:
            song.metadata['frontmatter'] = frontmatter

        if not song.time_signatures or song.time_signatures[0][0] > 0:
            song.time_signatures.insert(0, (0.0, duration.DEFAULT_BEATS_PER_MEASURE))

        generator = options.get('auto_chords')
        if song.auto_chords and generator is not False:
            settings = options.get('auto_chords_settings')
            if generator is None or generator is True:
                AutoChords.default_chords(song, settings).add_chords()
            else:
                find_generator(generator)(song, settings).add_chords()
        return song

    def compile_commands(self, commands, state, song):
        """Handle the AST nodes in commands, updating state and song."""
        for command in commands:
            self._command(command[0], command, state, song)

    ## command handlers
    @Dispatcher
    def _command(self, tag, command, state, song):
        """Called for unknown commands."""
        logger.warning("unknown command when compiling song: %r", command)

    @_command("frontmatter")
    def frontmatter_command(self, command, state, song):
        """Frontmatter is handled before compiling the commands."""
        pass

    @_command("restoreStartPosition")
    def restore_command(self, command, state, song):
        state.position = state.start_position

    @_command("block")
    def block_command(self, command, state, song):
        block_state = state.block()
        self.compile_commands(command[1], block_state, song)
        state.leave_block(block_state)

    @_command("halfTime", "doubleTime", "tripleTime")
    def tempo_command(self, command, state, song):
        count = command[1] if len(command) > 1 else 1
        state.time_scale *= TEMPO_FACTORS[command[0]] ** count

    @_command("measure")
    def measure_command(self, command, state, song):
        if len(command) > 1 and command[1] is not None:
            measure = command[1]
            state.last_measure = measure
            state.position = measure * state.ticks_per_measure
            state.next_measure_start = (measure + 1) * state.ticks_per_measure
        else:
            state.last_measure += 1
            state.position = max(state.next_measure_start, state.position)
            state.next_measure_start = state.position + state.ticks_per_measure

    @_command("setTrack")
    def track_command(self, command, state, song):
        state.track = int(command[1])

    @_command("clef")
    def clef_command(self, command, state, song):
        song.get_track(state.track).clefs.append((state.beat(), command[1]))

    @_command("note")
    def note_command(self, command, state, song):
        name = command[1]
        opts = command[2] if len(command) > 2 else None
        opts = opts or {}
        ticks = state.note_ticks(opts)

        if opts.get('sharp'):
            name = name[:1] + '#' + name[1:]
        elif opts.get('flat'):
            name = name[:1] + 'b' + name[1:]
        elif not opts.get('natural'):
            name = state.key_signature.unconvert_note(name)

        if not name[-1].isdigit():
            reference = state.default_pitch if state.last_pitch is None else state.last_pitch
            name = pitch.closest_octave(name, reference)

        if opts.get('start') is not None:
            start = duration.beats_to_ticks(opts['start'])
        else:
            start = state.position
            state.position += ticks

        state.last_pitch = pitch.parse_note(name)
        location = opts.get('location')
        song.push_with_track(SongNote(name,
            duration.ticks_to_beats(start),
            duration.ticks_to_beats(ticks),
            tuple(location) if location else None), state.track)

    @_command("rest")
    def rest_command(self, command, state, song):
        opts = command[1] if len(command) > 1 else None
        if opts and opts.get('start') is not None:
            return
        state.position += state.note_ticks(opts)

    @_command("keySignature")
    def key_signature_command(self, command, state, song):
        count = command[1]
        location = tuple(command[2]) if len(command) > 2 and command[2] else None
        state.key_signature = KeySignature(count)
        song.key_signatures.append((state.beat(), count, location))

    @_command("timeSignature")
    def time_signature_command(self, command, state, song):
        beats, note_value = command[1], command[2]
        state.ticks_per_note = fractions.Fraction(duration.TICKS_PER_BEAT * 4, note_value)
        state.ticks_per_measure = state.ticks_per_note * beats
        song.time_signatures.append((state.beat(), beats))

    @_command("macro")
    def macro_command(self, command, state, song):
        chord = coerce_chord(command[1])
        if chord:
            song.auto_chords.append((state.beat(), chord))

    @_command("string")
    def string_command(self, command, state, song):
        song.strings.append((state.beat(), command[1]))


ParsedNote = collections.namedtuple("ParsedNote", "name accidental octave duration dots start",
                                    defaults=(None, None, None, None, None))
ParsedNote.__doc__ = """A single note, as written in LML.

``name`` is the uppercase letter, ``accidental`` one of ``"+"``, ``"-"`` or
``"="``, ``octave`` a string, ``duration`` the multiplier (an integer for
``*N`` or a Fraction for ``/N``), ``dots`` the number of dots and ``start``
the explicit start beat. Absent values are None.

"""


_single_note_rx = re.compile(NOTE + r"$")


def parse_note_string(text):
    """Return a :class:`ParsedNote` for the text of a single note, or None.

    For example::

        >>> parse_note_string("c+5*2")
        ParsedNote(name='C', accidental='+', octave='5', duration=Fraction(2, 1), dots=None, start=None)
        >>> parse_note_string("c d") is None
        True

    """
    m = _single_note_rx.match(text)
    if not m:
        return None
    letter, accidental, octave, *timing = m.groups()
    try:
        opts = timing_options(*timing)
    except ZeroDivisionError:
        return None
    return ParsedNote(letter.upper(), accidental, octave, opts.get('duration'),
                      opts.get('dots'), opts.get('start'))


def serialize_note(note, lowercase=True):
    """Return the LML text for a :class:`ParsedNote`.

    Durations of 2 or more are written as ``*N`` and durations below 1 as
    ``/N``; a duration of 1 is not written.

    """
    result = [note.name.lower() if lowercase else note.name]
    if note.accidental:
        result.append(note.accidental)
    if note.octave:
        result.append(str(note.octave))
    if note.duration is not None:
        if note.duration >= 2 and note.duration == int(note.duration):
            result.append("*{}".format(int(note.duration)))
        elif 0 < note.duration < 1:
            result.append("/{}".format(round(1 / note.duration)))
    if note.dots:
        result.append("." * note.dots)
    if note.start is not None:
        result.append("@{}".format(note.start))
    return "".join(result)
