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
Test compressing LML text.
"""

import re

import pytest

### find lml
import sys
sys.path.insert(0, '.')

import lml
from lml.compression import (
    CompressionError, Token, compress, decompress, tokenize, reconstruct, to_base64,
    from_base64, lz77,
)
from lml.compression.packer import Reader, encode_tokens, decode_tokens, encode_varint


CORPUS = [
    "c",
    "c d e | f g a",
    "{ c e g } | c5*4",
    "# title: Song\n# tempo: 120\nks2 ts3/4 c d e",
    "c+ d- e= f+5 g-3 a=9 b0",
    "r r*2 _/2 R. r*3..@4 r@0",
    "c. d.. e... f*3.... g/3.",
    "$Am7 c $G7 d $Bbm e",
    '"hello world" \'it\\\'s\' "line\\nbreak" "quote\\"d" "back\\\\slash"',
    "dt c ht2 d tt e m f m3 g t1 a t12 b /g /C /f",
    "ks-3 c ks0 d ks5 e",
    "c*200 d/100 e@1000 f*7",
    "# title: Für Elise\n\"Ünïcödé ♪\" e5",
    "a { b { c | d } | e } # nested\nf",
    "c d e f g a b c5 " * 50,
]


def check_tokenize():
    assert tokenize("ks2 c+5*2.@3 r/2 $Am \"a\\nb\" { } |") == [
        Token("command", "ks2"),
        Token("note", "c+5*2.@3", "c", "+", 5, "*2", 1, 3),
        Token("rest", "r/2", duration="/2"),
        Token("macro", "$Am"),
        Token("string", "a\nb"),
        Token("block_start", "{"),
        Token("block_end", "}"),
        Token("pipe", "|"),
    ]
    assert tokenize("# title: Test\nc") == [
        Token("frontmatter", "Test", key="title"),
        Token("note", "c", "c"),
    ]
    # commands are normalized
    assert [t.value for t in tokenize("/G t01 m02 ks02 dt03 m")] == ["/g", "t1", "m2", "ks2", "dt3", "m"]


def check_reconstruct():
    assert reconstruct(tokenize("# title: Test\nC+5*2  { d | E } # comment")) == \
        "# title: Test\nc+5*2 {d | e}"
    assert reconstruct(tokenize("c x d # comment\ne")) == "c d e"
    assert reconstruct(tokenize("'it\\'s'")) == '"it\'s"'
    assert reconstruct([]) == ""


def check_packing():
    def packed(text):
        return encode_tokens(tokenize(text))

    assert packed("") == b'LM\x10'
    assert packed("c") == b'LM\x10\x10'
    assert packed("c4") == bytes([0x4C, 0x4D, 0x10, 0x3C])
    assert packed("d+5*2") == b'LM\x10\x80\x44\x83'
    assert packed("ks-2") == b'LM\x10\x09\x94\x02'
    assert packed("ts3/4") == b'LM\x10\x0A\x03\x04'
    assert packed("m m3") == b'LM\x10\x01\x01\x95\x03'
    assert packed("c@200") == b'LM\x10\x10\x8C\xC8\x01'
    assert packed("r/3") == b'LM\x10\x08\x8E\x03'
    assert packed("c...") == b'LM\x10\x10\x8B\x8A'
    assert packed("{ | }") == b'LM\x10\x02\x04\x03'
    assert packed("$Am") == b'LM\x10\x0F\x02Am'
    assert packed('"hi"') == b'LM\x10\x91\x02\x00hi'
    assert packed("# a: b\nc") == b'LM\x11\x01\x01a\x01b\x10'

    for text in CORPUS:
        assert reconstruct(decode_tokens(packed(text))) == reconstruct(tokenize(text))


def test_main():
    check_tokenize()
    check_reconstruct()
    check_packing()


def test_round_trip():
    for text in CORPUS:
        normalized = reconstruct(tokenize(text))
        compressed = compress(text)
        assert re.fullmatch(r'[A-Za-z0-9_-]*', compressed)
        assert decompress(compressed) == normalized
        assert decompress(compress(text, False), False) == normalized
        # the normalized text is stable
        assert decompress(compress(normalized)) == normalized


def test_same_song():
    for text in CORPUS:
        expected = [str(note) for note in lml.load(text, auto_chords=False)]
        result = lml.load(decompress(compress(text)), auto_chords=False)
        assert [str(note) for note in result] == expected


def test_lz77():
    assert lz77.compress(b'') == b''
    assert lz77.compress(b'abcabc') == b'abc\xa2\x00'
    assert lz77.compress(b'aaaaaa') == b'a\xa0\x02'
    assert lz77.compress(b'\xa5') == b'\xff\xa5'
    assert lz77.compress(b'\xff') == b'\xff\xff'
    middle = b'0123456789ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefgh'
    assert lz77.compress(b'xyz' + middle + b'xyz') == b'xyz' + middle + b'\xc0\x00\x2f'

    samples = [
        b'abcabcabcabc',
        bytes(range(256)),
        b'\xff\xa0\xc0\xdf' * 20,
        b'q' * 100,
        bytes((i * 7) % 251 for i in range(5000)),
        bytes((i * i) % 256 for i in range(3000)) * 2,
    ]
    for data in samples:
        assert lz77.decompress(lz77.compress(data)) == data

    text = "c d e f g a b c5 " * 50
    assert len(compress(text)) < len(compress(text, use_lz77=False))


def test_varint():
    assert encode_varint(0) == [0]
    assert encode_varint(127) == [127]
    assert encode_varint(128) == [0x80, 0x01]
    assert encode_varint(300) == [0xAC, 0x02]
    assert encode_varint(148) == [0x94, 0x01]
    assert encode_varint(-5, True) == [0x94, 0x05]
    assert Reader(bytes([0xAC, 0x02])).varint() == 300
    assert Reader(bytes([0x94, 0x05])).varint(True) == -5
    assert Reader(bytes([0x94, 0x01])).varint() == 148
    with pytest.raises(CompressionError):
        encode_varint(-5)
    with pytest.raises(CompressionError):
        encode_varint(148, True)


def test_base64():
    assert to_base64(b'\xfb\xff') == '-_8'
    assert from_base64('-_8') == b'\xfb\xff'
    assert from_base64('-_8=') == b'\xfb\xff'
    assert to_base64(b'') == ''
    for n in range(1, 8):
        data = bytes(range(200, 200 + n))
        assert from_base64(to_base64(data)) == data


def test_errors():
    with pytest.raises(CompressionError):
        decode_tokens(b'XX\x10')
    with pytest.raises(CompressionError):
        decode_tokens(b'LM\x20')
    with pytest.raises(CompressionError):
        decode_tokens(b'LM\x10\x90')
    with pytest.raises(CompressionError):
        decode_tokens(b'LM\x10\x09')
    with pytest.raises(CompressionError):
        decode_tokens(b'LM\x10\x80\x01')
    with pytest.raises(CompressionError):
        decode_tokens(b'LM\x10\x91\x05\x00ab')
    with pytest.raises(CompressionError):
        lz77.decompress(b'\xa0')
    with pytest.raises(CompressionError):
        lz77.decompress(b'\xa5\x00')
    with pytest.raises(CompressionError):
        lz77.decompress(b'a\xc0\x00\x00')
    with pytest.raises(CompressionError):
        decompress("")
    with pytest.raises(CompressionError):
        decompress("A")
    with pytest.raises(ValueError):
        decompress(to_base64(b'LM\x10\x17'), False)


if __name__ == "__main__" and 'test_main' in globals():
    test_main()
