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
The lml module.

LML is a compact text notation for music. This package parses LML text
(:mod:`lml.lang.lml`), compiles it to a song with timed notes
(:mod:`lml.parser`, :mod:`lml.song`), can add chord accompaniment
(:mod:`lml.autochords`) and compresses LML text to short strings
(:mod:`lml.compression`).

On first import, the LML language definition is added to the parce registry.

"""

from .lang.lml import parse, LmlSyntaxError
from .pkginfo import version, version_string
from .parser import SongParser


__all__ = ('load', 'load_file', 'parse', 'LmlSyntaxError', 'version', 'version_string')


def load(text, **options):
    """Parse and compile LML text and return a :class:`~lml.song.MultiTrackSong`.

    See :meth:`SongParser.compile() <lml.parser.SongParser.compile>` for the
    options. Raises :class:`~lml.lang.lml.LmlSyntaxError` on invalid input.

    """
    return SongParser.load(text, **options)


def load_file(filename, encoding='utf-8', **options):
    """Read LML text from ``filename`` and return the compiled song.

    Raises :class:`OSError` if the file can't be read.

    """
    with open(filename, encoding=encoding) as f:
        text = f.read()
    return load(text, **options)


## register the LML language
from parce.registry import register
register("lml.lang.lml.Lml.root",
    name = "LML",
    desc = "LML music notation",
    filenames = [("*.lml", 1)],
)

del register
