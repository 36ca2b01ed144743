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
LZ77 compression of packed LML data.

Repeated byte sequences are replaced by back-references into the preceding
4095 bytes:

* a short reference is two bytes: ``0xA0 + offset - 1`` and ``length - 3``,
  for an offset up to 32 and a length up to 10;
* a medium reference is three bytes: ``0xC0 + length - 3`` and the offset in
  twelve bits, high nibble first, for a length up to 34.

Literal bytes that fall in the range of the reference codes, or that are
equal to the escape byte ``0xFF``, are preceded by the escape byte.

"""

import collections

from .dictionary import (
    LZ77_SHORT_MIN, LZ77_SHORT_MAX, LZ77_MEDIUM_MIN, LZ77_MEDIUM_MAX,
    LITERAL_ESCAPE, is_lz77,
)
from .packer import CompressionError


WINDOW_SIZE = 4095
MIN_MATCH = 3
MAX_MATCH_SHORT = 10
MAX_MATCH_MEDIUM = 34
MAX_OFFSET_SHORT = 32


def find_match(data, pos, candidates=None):
    """Return the tuple (offset, length) of the longest match for the data at
    ``pos`` in the window before it, or None.

    Of matches with the same length, the most distant one is chosen. If
    given, ``candidates`` are the positions to try, in ascending order;
    by default all positions in the window are tried.

    """
    window_start = max(0, pos - WINDOW_SIZE)
    if candidates is None:
        candidates = range(window_start, pos)
    best_offset = best_length = 0
    end = min(len(data), pos + MAX_MATCH_MEDIUM)
    for i in candidates:
        if i < window_start:
            continue
        length = 0
        while pos + length < end and data[i + length] == data[pos + length]:
            length += 1
        if length > best_length:
            best_offset, best_length = pos - i, length
    if best_length >= MIN_MATCH:
        return best_offset, best_length


def encode_reference(offset, length):
    """Return the list of bytes for a back-reference."""
    if offset <= MAX_OFFSET_SHORT and length <= MAX_MATCH_SHORT:
        return [LZ77_SHORT_MIN + offset - 1, length - MIN_MATCH]
    return [LZ77_MEDIUM_MIN + length - MIN_MATCH, offset >> 8 & 0x0F, offset & 0xFF]


def compress(data):
    """Return the LZ77-compressed bytes of data."""
    result = bytearray()
    chains = collections.defaultdict(list)   # positions by their first bytes
    indexed = pos = 0
    while pos < len(data):
        while indexed < pos:
            chains[data[indexed:indexed + MIN_MATCH]].append(indexed)
            indexed += 1
        match = find_match(data, pos, chains.get(data[pos:pos + MIN_MATCH], ()))
        if match:
            result.extend(encode_reference(*match))
            pos += match[1]
        else:
            byte = data[pos]
            if is_lz77(byte) or byte == LITERAL_ESCAPE:
                result.append(LITERAL_ESCAPE)
            result.append(byte)
            pos += 1
    return bytes(result)


def decompress(data):
    """Return the decompressed bytes.

    Raises :class:`~.packer.CompressionError` for invalid data.

    """
    result = bytearray()
    pos = 0
    try:
        while pos < len(data):
            byte = data[pos]
            if byte == LITERAL_ESCAPE:
                result.append(data[pos + 1])
                pos += 2
                continue
            elif LZ77_SHORT_MIN <= byte <= LZ77_SHORT_MAX:
                offset = byte - LZ77_SHORT_MIN + 1
                length = data[pos + 1] + MIN_MATCH
                pos += 2
            elif LZ77_MEDIUM_MIN <= byte <= LZ77_MEDIUM_MAX:
                length = byte - LZ77_MEDIUM_MIN + MIN_MATCH
                offset = data[pos + 1] << 8 | data[pos + 2]
                pos += 3
            else:
                result.append(byte)
                pos += 1
                continue
            start = len(result) - offset
            if start < 0 or offset == 0:
                raise CompressionError("invalid LZ77 reference at {}".format(pos))
            for i in range(length):
                result.append(result[start + i])
    except IndexError:
        raise CompressionError("unexpected end of LZ77 data") from None
    return bytes(result)
