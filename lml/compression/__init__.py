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
Compression of LML text to a short URL-safe string, and back.

The text is split into tokens (:mod:`.tokenizer`), the tokens are packed into
bytes (:mod:`.packer`), optionally compressed (:mod:`.lz77`) and finally
encoded with the URL-safe base64 alphabet, without padding::

    >>> from lml.compression import compress, decompress
    >>> decompress(compress("ks2  c d  e # comment"))
    'ks2 c d e'

Whitespace and comments are not preserved, but decompressing always returns
text that yields the same tokens as the original.

"""

import base64
import binascii
import logging

from . import lz77
from .packer import CompressionError, encode_tokens, decode_tokens
from .tokenizer import Token, tokenize, reconstruct


__all__ = ['compress', 'decompress', 'CompressionError', 'Token', 'tokenize', 'reconstruct']


logger = logging.getLogger(__name__)


def to_base64(data):
    """Return the URL-safe base64 string for the bytes, without padding."""
    return base64.urlsafe_b64encode(data).rstrip(b'=').decode('ascii')


def from_base64(text):
    """Return the bytes for a URL-safe base64 string with or without padding."""
    text = text.strip().rstrip('=')
    try:
        return base64.urlsafe_b64decode(text + '=' * (-len(text) % 4))
    except (binascii.Error, ValueError) as e:
        raise CompressionError("invalid base64 data: {}".format(e)) from None


def compress(text, use_lz77=True):
    """Compress LML text to a URL-safe string."""
    data = encode_tokens(tokenize(text))
    if use_lz77:
        packed = data
        data = lz77.compress(packed)
        logger.debug("lz77: %d -> %d bytes", len(packed), len(data))
    return to_base64(data)


def decompress(text, use_lz77=True):
    """Decompress a string created by :func:`compress` to LML text.

    The ``use_lz77`` argument must be the same as used when compressing.
    Raises :class:`CompressionError` if the string can't be decompressed.

    """
    data = from_base64(text)
    if use_lz77:
        data = lz77.decompress(data)
    return reconstruct(decode_tokens(data))
