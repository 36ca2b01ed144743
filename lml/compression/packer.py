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
Encode a list of tokens to bytes, and back.

The packed data starts with the magic bytes ``LM`` and a byte containing the
format version in the high nibble and flags in the low nibble. When the
frontmatter flag is set, a count byte and length-prefixed key/value pairs
follow. The rest of the data is the stream of encoded tokens, see
:mod:`~lml.compression.dictionary` for the byte codes.

Numbers are written as variable-length integers: seven bits per byte, least
significant group first, the high bit set on every byte but the last. A
negative number is preceded by the :attr:`~.dictionary.Special.NEGATIVE`
byte.

"""

import logging

from . import dictionary as d
from .tokenizer import Token, note_text


logger = logging.getLogger(__name__)


MAGIC = b'LM'
VERSION = 1

FLAG_HAS_FRONTMATTER = 0x01


class CompressionError(ValueError):
    """Raised when data can't be compressed or decompressed."""
    pass


def encode_varint(n, signed=False):
    """Return the list of bytes encoding the integer ``n``."""
    if n < 0:
        if not signed:
            raise CompressionError("negative number not allowed here: {}".format(n))
        return [d.Special.NEGATIVE] + encode_varint(-n)
    result = []
    while True:
        byte = n & 0x7F
        n >>= 7
        if n:
            result.append(byte | 0x80)
        else:
            result.append(byte)
            break
    if signed and result[0] == d.Special.NEGATIVE:
        raise CompressionError("number can't be encoded as a signed value")
    return result


def _encode_text(text, size=1):
    """Return the UTF-8 bytes of the text, prefixed with their length.

    The length is written in ``size`` bytes, least significant byte first.

    """
    data = text.encode('utf-8')
    if len(data) >= 1 << (8 * size):
        raise CompressionError("text too long to encode: {!r}".format(text[:20]))
    return list(len(data).to_bytes(size, 'little')) + list(data)


def _encode_timing(token):
    """Return the bytes for the duration, dots and start of a note or rest."""
    result = []
    if token.duration:
        code = d.MODIFIERS.get(token.duration)
        if code:
            result.append(code)
        else:
            result.append(d.MODIFIERS[token.duration[0]])
            result.extend(encode_varint(int(token.duration[1:])))
    if token.dots:
        pairs, single = divmod(token.dots, 2)
        result.extend([d.MODIFIERS['..']] * pairs)
        if single:
            result.append(d.MODIFIERS['.'])
    if token.start is not None:
        result.append(d.MODIFIERS['@'])
        result.extend(encode_varint(token.start))
    return result


def _encode_count(command, count):
    """Return the bytes for a command with an optional count."""
    result = [d.COMMANDS[command]]
    if count:
        result.append(d.Special.HAS_COUNT)
        result.extend(encode_varint(int(count)))
    return result


def _encode_command(value):
    """Return the bytes for a command token."""
    if value.startswith('ks'):
        return [d.COMMANDS['ks']] + encode_varint(int(value[2:]), True)
    elif value.startswith('ts'):
        num, denom = value[2:].split('/')
        return [d.COMMANDS['ts']] + encode_varint(int(num)) + encode_varint(int(denom))
    elif value[:2] in ('dt', 'ht', 'tt'):
        return _encode_count(value[:2], value[2:])
    elif value.startswith('m'):
        return _encode_count('m', value[1:])
    elif value.startswith('t'):
        return [d.COMMANDS['t']] + encode_varint(int(value[1:]))
    elif value.lower() in d.COMMANDS:
        return [d.COMMANDS[value.lower()]]
    raise CompressionError("unknown command: {}".format(value))


def encode_tokens(tokens):
    """Return the bytes object with the encoded tokens."""
    frontmatter = [t for t in tokens if t.type == "frontmatter"]
    result = bytearray(MAGIC)
    result.append(VERSION << 4 | (FLAG_HAS_FRONTMATTER if frontmatter else 0))

    if frontmatter:
        if len(frontmatter) > 255:
            raise CompressionError("too many frontmatter fields")
        result.append(len(frontmatter))
        for token in frontmatter:
            result.extend(_encode_text(token.key))
            result.extend(_encode_text(token.value))

    for token in tokens:
        if token.type == "frontmatter":
            continue
        elif token.type == "block_start":
            result.append(d.COMMANDS['{'])
        elif token.type == "block_end":
            result.append(d.COMMANDS['}'])
        elif token.type == "pipe":
            result.append(d.COMMANDS['|'])
        elif token.type == "note":
            if token.accidental:
                result.append(d.MODIFIERS[token.accidental])
            if token.octave is None:
                result.append(d.NOTES[token.note_name.lower()])
            else:
                try:
                    result.append(d.encode_note_octave(token.note_name, token.octave))
                except ValueError as e:
                    raise CompressionError(str(e)) from None
            result.extend(_encode_timing(token))
        elif token.type == "rest":
            result.append(d.COMMANDS['r'])
            result.extend(_encode_timing(token))
        elif token.type == "command":
            result.extend(_encode_command(token.value))
        elif token.type == "macro":
            result.append(d.COMMANDS['$'])
            result.extend(_encode_text(token.value[1:]))
        elif token.type == "string":
            result.append(d.Special.STRING_START)
            result.extend(_encode_text(token.value, 2))
        else:
            raise CompressionError("unknown token type: {}".format(token.type))
    return bytes(result)


class Reader:
    """Reads bytes, numbers and texts from packed data."""
    def __init__(self, data, pos=0):
        self.data = data
        self.pos = pos

    def __bool__(self):
        """True if there is data left."""
        return self.pos < len(self.data)

    def peek(self):
        """Return the next byte without consuming it, or None at the end."""
        if self.pos < len(self.data):
            return self.data[self.pos]

    def byte(self):
        """Read one byte."""
        if self.pos >= len(self.data):
            raise CompressionError("unexpected end of data")
        self.pos += 1
        return self.data[self.pos - 1]

    def read(self, count):
        """Read ``count`` bytes."""
        if self.pos + count > len(self.data):
            raise CompressionError("unexpected end of data")
        self.pos += count
        return bytes(self.data[self.pos - count:self.pos])

    def varint(self, signed=False):
        """Read a variable-length integer."""
        negative = signed and self.peek() == d.Special.NEGATIVE
        if negative:
            self.pos += 1
        value = shift = 0
        while True:
            byte = self.byte()
            value |= (byte & 0x7F) << shift
            if not byte & 0x80:
                break
            shift += 7
        return -value if negative else value

    def text(self, size=1):
        """Read a length-prefixed UTF-8 text."""
        length = int.from_bytes(self.read(size), 'little')
        try:
            return self.read(length).decode('utf-8')
        except UnicodeDecodeError as e:
            raise CompressionError("invalid text: {}".format(e)) from None

    def count(self):
        """Read an optional count, return it as a string (empty if absent)."""
        if self.peek() == d.Special.HAS_COUNT:
            self.pos += 1
            return str(self.varint())
        return ""

    def timing(self):
        """Read the modifiers following a note or rest, return them as a dict."""
        fields = {}
        while self and d.is_modifier(self.peek()) and not d.is_accidental(self.peek()):
            modifier = d.REVERSE_MODIFIERS[self.byte()]
            if modifier in ('*', '/'):
                fields['duration'] = "{}{}".format(modifier, self.varint())
            elif modifier in ('.', '..'):
                fields['dots'] = fields.get('dots', 0) + len(modifier)
            elif modifier == '@':
                fields['start'] = self.varint()
            else:
                fields['duration'] = modifier
        return fields


def decode_tokens(data):
    """Return the list of tokens decoded from the bytes ``data``.

    Raises :class:`CompressionError` if the data is invalid.

    """
    if data[:2] != MAGIC:
        raise CompressionError("invalid LML compressed data: bad magic")
    reader = Reader(data, 2)
    version_flags = reader.byte()
    version, flags = version_flags >> 4, version_flags & 0x0F
    if version > VERSION:
        raise CompressionError("unsupported compression version: {}".format(version))

    tokens = []
    if flags & FLAG_HAS_FRONTMATTER:
        for _ in range(reader.byte()):
            key = reader.text()
            tokens.append(Token("frontmatter", reader.text(), key=key))

    while reader:
        byte = reader.byte()
        accidental = None
        if d.is_accidental(byte):
            accidental = d.REVERSE_MODIFIERS[byte]
            byte = reader.byte()
            if not (d.is_note(byte) or d.is_note_with_octave(byte)):
                raise CompressionError("accidental not followed by a note at {}".format(reader.pos - 1))

        if d.is_note(byte):
            tokens.append(_note(Token("note", "", d.REVERSE_NOTES[byte], accidental), reader))
        elif d.is_note_with_octave(byte):
            letter, octave = d.decode_note_octave(byte)
            tokens.append(_note(Token("note", "", letter, accidental, octave), reader))
        elif d.is_command(byte):
            tokens.append(_command(d.REVERSE_COMMANDS[byte], reader))
        elif byte == d.Special.STRING_START:
            tokens.append(Token("string", reader.text(2)))
        else:
            raise CompressionError("unexpected byte 0x{:02X} at {}".format(byte, reader.pos - 1))
    logger.debug("decoded %d tokens from %d bytes", len(tokens), len(data))
    return tokens


def _note(token, reader):
    """Complete a note or rest token with the timing modifiers that follow."""
    token = token._replace(**reader.timing())
    return token._replace(value=note_text(token))


def _command(command, reader):
    """Return the token for the command code that was read."""
    if command == '{':
        return Token("block_start", "{")
    elif command == '}':
        return Token("block_end", "}")
    elif command == '|':
        return Token("pipe", "|")
    elif command == 'r':
        return _note(Token("rest", ""), reader)
    elif command == 'ks':
        return Token("command", "ks{}".format(reader.varint(True)))
    elif command == 'ts':
        num = reader.varint()
        return Token("command", "ts{}/{}".format(num, reader.varint()))
    elif command in ('dt', 'ht', 'tt', 'm'):
        return Token("command", command + reader.count())
    elif command == 't':
        return Token("command", "t{}".format(reader.varint()))
    elif command == '$':
        return Token("macro", "$" + reader.text())
    return Token("command", command)
