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
Test compiling LML to songs.
"""

from fractions import Fraction

import pytest

### find lml
import sys
sys.path.insert(0, '.')

import lml
from lml.parser import SongParser, ParsedNote, parse_note_string, serialize_note


def notes(text, **options):
    """Return the notes of the compiled text as strings."""
    return [str(note) for note in lml.load(text, **options)]


def check_relative_octaves():
    assert notes("ks2\nc d e f g a b") == [
        'C#4,0.0,1.0', 'D4,1.0,1.0', 'E4,2.0,1.0', 'F#4,3.0,1.0',
        'G4,4.0,1.0', 'A4,5.0,1.0', 'B4,6.0,1.0',
    ]
    assert notes("ks2\nc d e f g a b", default_octave=5) == [
        'C#5,0.0,1.0', 'D5,1.0,1.0', 'E5,2.0,1.0', 'F#5,3.0,1.0',
        'G5,4.0,1.0', 'A5,5.0,1.0', 'B5,6.0,1.0',
    ]
    assert notes("f+") == ['F#4,0.0,1.0']
    assert notes("c5 g") == ['C5,0.0,1.0', 'G4,1.0,1.0']
    assert notes("c5 e g c") == ['C5,0.0,1.0', 'E5,1.0,1.0', 'G5,2.0,1.0', 'C6,3.0,1.0']
    assert notes("b3 c") == ['B3,0.0,1.0', 'C4,1.0,1.0']


def check_accidentals():
    assert notes("ks2 f= f") == ['F4,0.0,1.0', 'F#4,1.0,1.0']
    assert notes("d-") == ['Db4,0.0,1.0']
    assert notes("ks-1 b4 b+4") == ['Bb4,0.0,1.0', 'B#4,1.0,1.0']
    assert notes("ks-1 B") == ['Bb3,0.0,1.0']


def check_durations():
    assert notes("c*2 d/2 e") == ['C4,0.0,2.0', 'D4,2.0,0.5', 'E4,2.5,1.0']
    assert notes("c. d") == ['C4,0.0,1.5', 'D4,1.5,1.0']
    assert notes("c*2.. d")[1] == 'D4,3.5,1.0'

    song = lml.load("c/3 d/3 e/3 f")
    assert song[1].start == 16 / 48
    assert song[3].start == 1.0
    song = lml.load("c/6 c/6 c/6 c/6 c/6 c/6 d")
    assert song[6].start == 1.0
    song = lml.load("c/7 d")
    assert song[1].start == 7 / 48


def check_tempo():
    assert notes("dt c d e") == ['C4,0.0,0.5', 'D4,0.5,0.5', 'E4,1.0,0.5']
    assert notes("ht c d") == ['C4,0.0,2.0', 'D4,2.0,2.0']
    assert lml.load("tt c c c d")[3].start == 1.0
    assert notes("dt2 c") == ['C4,0.0,0.25']
    assert notes("dt ht c") == ['C4,0.0,1.0']
    assert notes("ts6/8 c d") == ['C4,0.0,0.5', 'D4,0.5,0.5']


def check_blocks():
    # changes in a block don't leak out, the position does
    assert notes("{ ks2 f } f") == ['F#4,0.0,1.0', 'F4,1.0,1.0']
    assert notes("{ dt c d } e") == ['C4,0.0,0.5', 'D4,0.5,0.5', 'E4,1.0,1.0']
    # a pipe returns to the start of the song or block
    assert notes("c d | e f") == ['C4,0.0,1.0', 'D4,1.0,1.0', 'E4,0.0,1.0', 'F4,1.0,1.0']
    assert notes("a4 { c5 d | e } f") == [
        'A4,0.0,1.0', 'C5,1.0,1.0', 'D5,2.0,1.0', 'E5,1.0,1.0', 'F5,2.0,1.0',
    ]
    assert notes("{ c e g } | c5") == ['C4,0.0,1.0', 'E4,1.0,1.0', 'G4,2.0,1.0', 'C5,0.0,1.0']


def check_positions():
    assert notes("c r d") == ['C4,0.0,1.0', 'D4,2.0,1.0']
    assert notes("r*2 c") == ['C4,2.0,1.0']
    assert notes("c r@5 d") == ['C4,0.0,1.0', 'D4,1.0,1.0']
    assert notes("c r@0 d") == ['C4,0.0,1.0', 'D4,1.0,1.0']
    assert notes("c@4 d") == ['C4,4.0,1.0', 'D4,0.0,1.0']

    assert notes("m c m d") == ['C4,0.0,1.0', 'D4,4.0,1.0']
    assert notes("ts3/4 m c m1 d m e") == ['C4,0.0,1.0', 'D4,3.0,1.0', 'E4,6.0,1.0']
    assert notes("m2 c") == ['C4,8.0,1.0']
    assert notes("c*6 m d") == ['C4,0.0,6.0', 'D4,6.0,1.0']


def check_song_data():
    song = lml.load("ts3/4 ks-2 c")
    assert song.metadata == {'keySignature': -2, 'beatsPerMeasure': 3}
    assert song.time_signatures == [(0.0, 3)]
    assert lml.load("c").time_signatures == [(0.0, 4)]
    assert lml.load("c ts3/4 d").time_signatures == [(0.0, 4), (1.0, 3)]

    song = lml.load("# title: X\nc")
    assert song.metadata['frontmatter'] == {'title': 'X'}

    song = lml.load("ks2 c ks-1 d")
    assert song.key_signatures == [(0.0, 2, (0, 3)), (1.0, -1, (6, 10))]
    assert song.metadata['keySignature'] == -1

    song = lml.load("/f c /g d")
    assert song.tracks[0].clefs == [(0.0, 'f'), (1.0, 'g')]

    song = lml.load('"hello" c')
    assert song.strings == [(0.0, 'hello')]

    song = lml.load("$Am c $Bb7 d $foo", auto_chords=False)
    assert song.auto_chords == [(0.0, ('A', 'm')), (1.0, ('Bb', '7'))]
    assert len(song.tracks) == 1

    song = lml.load("c d")
    assert song[0].source_location == (0, 1)
    assert song[1].source_location == (2, 3)


def check_tracks():
    song = lml.load("t1 c t2 d e t1 f")
    assert sorted(song.tracks) == [1, 2]
    assert [str(n) for n in song.tracks[1]] == ['C4,0.0,1.0', 'F4,3.0,1.0']
    assert [str(n) for n in song.tracks[2]] == ['D4,1.0,1.0', 'E4,2.0,1.0']
    assert len(song) == 4
    song = lml.load("c")
    assert song.tracks[0][0] is song[0]


def test_main():
    check_relative_octaves()
    check_accidentals()
    check_durations()
    check_tempo()
    check_blocks()
    check_positions()
    check_song_data()
    check_tracks()


def test_compile_options():
    parser = SongParser(default_octave=3)
    ast = parser.parse("c d")
    assert [str(n) for n in parser.compile(ast)] == ['C3,0.0,1.0', 'D3,1.0,1.0']
    assert [str(n) for n in parser.compile(ast, default_octave=6)] == ['C6,0.0,1.0', 'D6,1.0,1.0']
    # unknown commands are skipped
    song = parser.compile([('bogus', 1), ('note', 'C4', {})])
    assert [str(n) for n in song] == ['C4,0.0,1.0']


def test_load_file(tmp_path):
    filename = tmp_path / "song.lml"
    filename.write_text("# title: Test\nc d e\n", encoding="utf-8")
    song = lml.load_file(str(filename))
    assert len(song) == 3
    assert song.metadata['frontmatter'] == {'title': 'Test'}
    with pytest.raises(OSError):
        lml.load_file(str(tmp_path / "missing.lml"))
    with pytest.raises(lml.LmlSyntaxError):
        lml.load("c { d")


def test_single_notes():
    note = parse_note_string("c+5*2..@3")
    assert note == ParsedNote('C', '+', '5', Fraction(2), 2, 3)
    assert serialize_note(note) == "c+5*2..@3"
    assert serialize_note(note, False) == "C+5*2..@3"
    assert serialize_note(parse_note_string("C/4")) == "c/4"
    assert parse_note_string("e") == ParsedNote('E')
    assert serialize_note(ParsedNote('E', duration=1)) == "e"
    assert parse_note_string("c d") is None
    assert parse_note_string("c/0") is None
    assert parse_note_string("x") is None


if __name__ == "__main__" and 'test_main' in globals():
    test_main()
