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
Test the song data model.
"""

### find lml
import sys
sys.path.insert(0, '.')

import lml
from lml.song import Measure, SongNote, SongNoteList, MultiTrackSong


def check_song_note():
    note = SongNote("C4", 0, 1, (3, 5))
    assert str(note) == "C4,0,1"
    copy = note.clone()
    assert copy is not note and str(copy) == str(note)
    assert copy.source_location == (3, 5)
    assert note.in_range(0, 1)
    assert note.in_range(0.5, 3)
    assert not note.in_range(1, 2)
    assert note.get_stop() == 1 and note.get_render_stop() == 1
    assert note.transpose(2).note == "D4"
    assert note.transpose(1).note == "C#4"
    assert note.transpose(-1).note == "B3"
    assert note.note == "C4"


def check_note_list():
    song = SongNoteList.new_song([("C4", 0, 1), ("E4", 1, 1), ("G4", 2, 2)])
    assert len(song) == 3
    assert song[1].note == "E4"
    assert song.get_start_in_beats() == 0
    assert song.get_stop_in_beats() == 4
    assert [n.note for n in song.notes_in_range(1.5, 2.5)] == ["E4", "G4"]
    assert song.note_range() == ("C4", "G4")
    assert song.get_measures() == [Measure(0, 4)]

    song.time_signatures = [(0, 3)]
    assert song.get_measures() == [Measure(0, 3), Measure(3, 3)]

    copy = song.clone()
    copy[0].note = "D4"
    assert song[0].note == "C4"

    empty = SongNoteList()
    assert empty.get_measures() == []
    assert empty.note_range() is None
    assert empty.get_stop_in_beats() == 0
    assert empty.fitting_staff() == "treble"

    song = SongNoteList.new_song([("C4", 0, 4), ("C4", 4, 4), ("E4", 9, 1)])
    song.time_signatures = [(0, 4), (4, 3)]
    assert song.get_measures() == [Measure(0, 4), Measure(4, 3), Measure(7, 3)]


def check_fitting_staff():
    assert SongNoteList.new_song([("C4", 0, 1), ("G4", 1, 1)]).fitting_staff() == "treble"
    assert SongNoteList.new_song([("C3", 0, 1), ("E3", 1, 1)]).fitting_staff() == "bass"
    assert SongNoteList.new_song([("C3", 0, 1), ("C5", 1, 1)]).fitting_staff() == "grand"
    song = SongNoteList.new_song([("C4", 0, 1), ("G4", 1, 1)])
    song.clefs = [(0, "f")]
    assert song.fitting_staff() == "bass"
    song.clefs = [(0, "f"), (1, "g")]
    assert song.fitting_staff() == "treble"

    # compiled clefs are logged on the track, not on the song
    song = lml.load("/f c5 d5")
    assert song.clefs == []
    assert song.fitting_staff() == "treble"
    assert song.tracks[0].clefs == [(0.0, "f")]
    assert song.tracks[0].fitting_staff() == "bass"


def check_transpose():
    song = lml.load("ks2 d f a")
    assert song.transpose(0) is song
    up = song.transpose(2)
    assert [n.note for n in up] == ["E4", "G#4", "B4"]
    assert [n.note for n in song] == ["D4", "F#4", "A4"]
    assert up.metadata['keySignature'] == 4
    assert up.key_signatures == [(0.0, 4, (0, 3))]
    assert up.time_signatures == song.time_signatures

    song = lml.load("t1 c t2 d")
    t = song.transpose(3)
    assert [n.note for n in t] == ["D#4", "F4"]
    assert t.tracks[1][0] is t[0]
    assert t.tracks[2][0] is t[1]
    assert song[0].note == "C4"
    assert song.tracks[1][0] is song[0]


def check_selection():
    song = lml.load("c d e")
    assert song.find_notes_for_selection(2, 4) == {1, 2}
    assert song.find_notes_for_selection(10, 12) == set()

    song = lml.load("ks2 c ks-1 d")
    assert song.find_key_signatures_for_selection(0, 2) == [(0.0, 2, (0, 3))]
    assert len(song.find_key_signatures_for_selection(0, 8)) == 2


def check_match_note():
    song = SongNoteList.new_song([("C4", 0, 1), ("E4", 1, 1), ("C4", 4, 1)])
    assert song.match_note("E4", 1.2) == 1
    assert song.match_note("C4", 3) == 2
    assert song.match_note("C4", 1) == 0
    assert song.match_note("E5", 1) is None

    assert song.match_note_fast("C4", 3) == 2
    assert song.match_note_fast("E4", 1.2) == 1
    assert song.match_note_fast("E5", 1) is None
    assert song.match_note_fast("C4", 30) is None

    song.append(SongNote("C4", 30, 1))
    assert song.match_note_fast("C4", 30) is None
    song.clear_cache()
    assert song.match_note_fast("C4", 30) == 3

    # looping region 0..8: near the end, notes at the start are found
    song = SongNoteList.new_song([("C4", 0, 1), ("C4", 5, 1)])
    assert song.match_note_fast("C4", 7.5) == 1
    assert song.match_note_fast("C4", 7.5, 8, 0) == 0


def check_tracks():
    song = MultiTrackSong()
    assert song.find_empty_track_idx() == 1
    note = song.push_with_track(SongNote("C4", 0, 1), 0)
    assert song.tracks[0][0] is note and song[0] is note
    assert song.find_empty_track_idx() == 2
    song.push_with_track(SongNote("D4", 1, 1), 3)
    assert song.find_empty_track_idx() == 5
    assert len(song) == 2
    assert len(song.get_track(7)) == 0


def test_main():
    check_song_note()
    check_note_list()
    check_fitting_staff()
    check_transpose()
    check_selection()
    check_match_note()
    check_tracks()


if __name__ == "__main__" and 'test_main' in globals():
    test_main()
