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
Functions to deal with LML durations and time positions.

Internally all positions and durations are counted in ticks, of which there
are :data:`TICKS_PER_BEAT` in one beat. Because 48 is divisible by 2, 3, 4, 6,
8, 12, 16 and 24, triplets and sixtuplets add up exactly. Intermediate
computations are done with :class:`~fractions.Fraction` values, and rounded to
whole ticks only at the end. At the public interface (e.g. in
:class:`~lml.song.SongNote`) positions and durations are floating point beats.

A duration multiplier, as written in LML with ``*N`` or ``/N``, is a Fraction
or integer, where 1 is the default note length.

"""

import fractions
import math


#: The number of ticks in one beat.
TICKS_PER_BEAT = 48

#: The number of beats in a measure when no time signature is given.
DEFAULT_BEATS_PER_MEASURE = 4


def dotted_multiplier(dots):
    """Return the multiplier (a Fraction) for a note with ``dots`` dots.

    Every dot adds half of the previous value::

        >>> dotted_multiplier(1)
        Fraction(3, 2)
        >>> dotted_multiplier(2)
        Fraction(7, 4)
        >>> dotted_multiplier(3)
        Fraction(15, 8)

    """
    return fractions.Fraction((2 << dots) - 1, 1 << dots)


def round_ticks(value):
    """Round a (Fraction) number of ticks to the nearest integer.

    Halves are rounded upwards, not to the nearest even number as Python's
    :func:`round` does.

    """
    return math.floor(value + fractions.Fraction(1, 2))


def beats_to_ticks(beats):
    """Return the number of ticks (a Fraction) for the number of beats."""
    return fractions.Fraction(beats) * TICKS_PER_BEAT


def ticks_to_beats(ticks):
    """Return the floating point number of beats for the number of ticks.

    The ticks may be an integer or a Fraction.

    """
    return float(fractions.Fraction(ticks) / TICKS_PER_BEAT)


def step_duration(current, delta, pow2=False):
    """Step a duration multiplier up (``delta`` > 0) or down.

    The ``current`` value is None (or 1) for the default duration, an integer
    N >= 2 for ``*N`` or a fraction 1/N for ``/N``. Stepping linearly walks
    the values ``... /3, /2, (default), *2, *3 ...``; if ``pow2`` is True, only
    powers of two are used: ``... /4, /2, (default), *2, *4 ...``.

    Returns None when the new duration is the default one. For example::

        >>> step_duration(None, 1)
        2
        >>> step_duration(2, -1)
        >>> step_duration(Fraction(1, 4), 1, True)
        Fraction(1, 2)

    """
    step_up = (lambda n: n * 2) if pow2 else (lambda n: n + 1)
    step_down = (lambda n: n // 2) if pow2 else (lambda n: n - 1)

    if current is None or current == 1:
        return 2 if delta > 0 else fractions.Fraction(1, 2)
    elif current >= 2:
        if delta > 0:
            return step_up(current)
        n = step_down(current)
        return n if n > 1 else None
    else:
        n = round(1 / fractions.Fraction(current))
        if delta > 0:
            n = step_down(n)
            return fractions.Fraction(1, n) if n > 1 else None
        return fractions.Fraction(1, step_up(n))
