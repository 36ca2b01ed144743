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
Meta-information about the LML package.

This information is used by the ``lml`` package itself and by the
documentation.

"""

name = "lml"

#: the current version
version = (0, 1, 0)

#: the version as a string
version_string = "{}.{}.{}".format(*version)

description = "Parser and compiler for the LML music notation"

maintainer = "The lml developers"

license = "GPL v3"
