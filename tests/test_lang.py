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
Test the LML language definition and the transform to the AST.
"""

from fractions import Fraction

import pytest

### find lml
import sys
sys.path.insert(0, '.')

import parce

import lml
from lml.lang.lml import Lml, LmlSyntaxError, parse, timing_options


def check_notes():
    assert parse("") == []
    assert parse("  # only a comment\n") == []

    assert parse("ks2 c5*2 { d | e } $Gm") == [
        ('keySignature', 2, (0, 3)),
        ('note', 'C5', {'duration': Fraction(2), 'location': (4, 8)}),
        ('block', [
            ('note', 'D', {'location': (11, 12)}),
            ('restoreStartPosition',),
            ('note', 'E', {'location': (15, 16)}),
        ]),
        ('macro', 'Gm'),
    ]

    assert parse("F#") == [('note', 'F', {'location': (0, 1)})]
    ast = parse("c+ d- e=")
    assert ast[0] == ('note', 'C', {'sharp': True, 'location': (0, 2)})
    assert ast[1] == ('note', 'D', {'flat': True, 'location': (3, 5)})
    assert ast[2] == ('note', 'E', {'natural': True, 'location': (6, 8)})

    assert parse("g3/3..@4") == [
        ('note', 'G3', {'duration': Fraction(1, 3), 'dots': 2, 'start': 4, 'location': (0, 8)}),
    ]
    assert parse("a@0")[0][2]['start'] == 0


def check_rests():
    assert parse("r r*2 _/2. R@3") == [
        ('rest',),
        ('rest', {'duration': Fraction(2)}),
        ('rest', {'duration': Fraction(1, 2), 'dots': 1}),
        ('rest', {'start': 3}),
    ]


def check_commands():
    assert parse("ts3/4 dt ht2 tt m m3 t1 /F $Am7 \"hi\\n\" 'it\\'s'") == [
        ('timeSignature', 3, 4),
        ('doubleTime',),
        ('halfTime', 2),
        ('tripleTime',),
        ('measure',),
        ('measure', 3),
        ('setTrack', 1),
        ('clef', 'f'),
        ('macro', 'Am7'),
        ('string', 'hi\n'),
        ('string', "it's"),
    ]
    assert parse("ks-3") == [('keySignature', -3, (0, 4))]
    assert parse("c{d}|e")[1] == ('block', [('note', 'D', {'location': (2, 3)})])


def check_frontmatter():
    text = "# title: My Song\n# author : Me\nc\n# comment: not frontmatter\n"
    assert parse(text) == [
        ('frontmatter', 'title', 'My Song'),
        ('frontmatter', 'author', 'Me'),
        ('note', 'C', {'location': (31, 32)}),
    ]
    assert parse("# just a comment\n# key: value\nc") == [
        ('note', 'C', {'location': (30, 31)}),
    ]


def test_main():
    check_notes()
    check_rests()
    check_commands()
    check_frontmatter()


def test_timing_options():
    assert timing_options(None, None, "", None) == {}
    assert timing_options('*', '3', "..", "2") == {'duration': 3, 'dots': 2, 'start': 2}
    assert timing_options('/', '4', "", None) == {'duration': Fraction(1, 4)}
    with pytest.raises(ZeroDivisionError):
        timing_options('/', '0', "", None)


def test_errors():
    with pytest.raises(LmlSyntaxError) as e:
        parse("c x d")
    assert e.value.position == 2
    assert e.value.text == "x"
    assert "note" in e.value.expected

    with pytest.raises(LmlSyntaxError) as e:
        parse("c5x")
    assert e.value.position == 0

    with pytest.raises(LmlSyntaxError) as e:
        parse("{ c d")
    assert e.value.position == 5
    assert e.value.expected[0] == "'}'"
    assert e.value.text == ""

    with pytest.raises(LmlSyntaxError) as e:
        parse('c "abc')
    assert e.value.position == 6

    with pytest.raises(LmlSyntaxError) as e:
        parse("c/0")
    assert e.value.position == 0

    with pytest.raises(LmlSyntaxError) as e:
        parse("ts3/0")
    assert e.value.position == 0

    # the first error is reported
    with pytest.raises(LmlSyntaxError) as e:
        parse("c { d x")
    assert e.value.position == 6

    with pytest.raises(SyntaxError):
        parse("}")


def test_registry():
    assert parce.find("LML") is Lml.root
    assert parce.find(filename="song.lml") is Lml.root


if __name__ == "__main__" and 'test_main' in globals():
    test_main()
