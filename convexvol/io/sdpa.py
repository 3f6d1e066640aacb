#  Copyright (c) 2019 École Polytechnique
#
#  This Source Code Form is subject to the terms of the Mozilla Public License, v. 2.0.
#  If a copy of the MPL was not distributed with this file, you can obtain one at http://mozilla.org/MPL/2.0
#
#  Authors:
#        Luciano Di Palma <luciano.di-palma@polytechnique.edu>
#        Enhui Huang <enhui.huang@polytechnique.edu>
#
#  Description:
#  convexvol estimates the volume of high-dimensional convex bodies (H- and V-polytopes, zonotopes and spectrahedra)
#  by Markov Chain Monte Carlo sampling. Random walks (hit-and-run, ball walk, billiard walk and Hamiltonian Monte Carlo
#  with reflections) query a boundary oracle of the body in order to generate approximately uniform (or Boltzmann)
#  samples, which are then combined by a multiphase telescoping estimator into a single volume estimate. An optional
#  rounding step maps the body towards isotropic position before sampling in order to reduce the mixing time.
"""
Writer for the SDPA text format of semidefinite programs. An optimization problem over a spectrahedron

        minimize c^T x    s.t.    A_0 + x_1 A_1 + ... + x_m A_m >= 0

is written in the SDPA primal form 'F_1 x_1 + ... + F_m x_m - F_0 >= 0', i.e. with F_0 = -A_0 and F_i = A_i. The file
layout is:

        m                       number of variables
        1                       number of blocks
        k                       block sizes
        c_1 ... c_m             objective
        <matrix> <block> <row> <col> <value>      (sparse layout, upper triangle, 1-based indexes)

In the dense layout, each matrix F_0, ..., F_m is written row by row instead.
"""
from __future__ import annotations

import io
from typing import TextIO, Union

import numpy as np

from ..bodies import LMI, Spectrahedron
from ..bodies.base import as_vector
from ..errors import MalformedBodyError


def write_sdpa(stream: TextIO, lmi: Union[LMI, Spectrahedron], objective, sparse: bool = True) -> None:
    """
    :param stream: text stream to write to
    :param lmi: linear matrix inequality (or a spectrahedron)
    :param objective: objective vector c
    :param sparse: whether to use the sparse layout (only non-zero entries of the upper triangle are written)
    """
    if isinstance(lmi, Spectrahedron):
        lmi = lmi.lmi

    c = as_vector(objective, 'objective')
    if len(c) != lmi.dim:
        raise MalformedBodyError("Objective has size {}, expected {}".format(len(c), lmi.dim))

    stream.write("{}\n".format(lmi.dim))
    stream.write("1\n")
    stream.write("{}\n".format(lmi.size))
    stream.write("{}\n".format(' '.join(__format(v) for v in c)))

    matrices = [-lmi.A0] + list(lmi.coefficients)

    if sparse:
        __write_sparse(stream, matrices)
    else:
        __write_dense(stream, matrices)


def to_sdpa_string(lmi: Union[LMI, Spectrahedron], objective, sparse: bool = True) -> str:
    buffer = io.StringIO()
    write_sdpa(buffer, lmi, objective, sparse)
    return buffer.getvalue()


def __write_sparse(stream: TextIO, matrices) -> None:
    for n, F in enumerate(matrices):
        rows, cols = np.triu_indices(F.shape[0])
        for i, j in zip(rows, cols):
            if F[i, j] != 0:
                stream.write("{} 1 {} {} {}\n".format(n, i + 1, j + 1, __format(F[i, j])))


def __write_dense(stream: TextIO, matrices) -> None:
    for F in matrices:
        rows = ', '.join('{' + ', '.join(__format(v) for v in row) + '}' for row in F)
        stream.write('{' + rows + '}\n')


def __format(value: float) -> str:
    return repr(float(value)) if value != int(value) else str(int(value))
