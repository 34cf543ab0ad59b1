"""
Finite multi-matrix algebras and their commutants.

An algebra shape ``((dA_1, dY_1), ..., (dA_k, dY_k))`` describes the vertex
algebra S0 = (+)_i L(C^dA_i) (x) I_dY_i acting on C^n, n = sum_i dA_i*dY_i.
Its commutant is S1 = (+)_i I_dA_i (x) L(C^dY_i).  Tensor factors are ordered
A first, so that blocks are Kronecker products ``kron(a, y)``.

>>> from ncgraph import create_S0_S1
>>> (S0, S1) = create_S0_S1([[1, 2], [2, 1]])
>>> S0
<TensorSubspace of dim 5 over space (4, 4)>
>>> S1
<TensorSubspace of dim 5 over space (4, 4)>
"""

import numbers
import logging

import numpy as np
import scipy.linalg as linalg

from ncgraph.exceptions import ShapeError, AlgebraicAssertionError
from ncgraph.subspace import TensorSubspace

logger = logging.getLogger(__name__)

__all__ = ['algebra_shape', 'create_S0_S1', 'check_commutant', 'block_sizes', 'COMMUTE_TOL']

COMMUTE_TOL = 1e-9

_S0_S1_cache = {}

def algebra_shape(sig):
    """
    Validate an algebra shape and return it as a tuple of ``(dA, dY)`` int pairs.  Any nested
    sequence or 2-d integer array is accepted.

    >>> algebra_shape([[1, 2], [3, 1]])
    ((1, 2), (3, 1))
    >>> algebra_shape(np.array([[2, 2]]))
    ((2, 2),)
    >>> algebra_shape([[1, 0]])
    Traceback (most recent call last):
        ...
    ncgraph.exceptions.ShapeError: 'dimensions must be positive integers, got (1, 0)'
    """

    try:
        rows = [ tuple(row) for row in sig ]
    except TypeError:
        raise ShapeError('algebra shape must be a sequence of (dA, dY) rows')

    if len(rows) == 0:
        raise ShapeError('algebra shape has no blocks')

    out = []
    for row in rows:
        ok = all(isinstance(d, numbers.Integral) and not isinstance(d, (bool, np.bool_))
            for d in row)
        row = tuple(int(d) if isinstance(d, numbers.Integral) else d for d in row)
        if len(row) != 2:
            raise ShapeError('row length must be 2, got %r' % (row,))
        if not ok or min(row) <= 0:
            raise ShapeError('dimensions must be positive integers, got %r' % (row,))
        out.append(row)

    return tuple(out)

def block_sizes(sig):
    """
    Sizes dA*dY of the diagonal blocks of the algebra.

    >>> block_sizes([[1, 2], [3, 1]])
    [2, 3]
    """

    return [ dA*dY for (dA, dY) in algebra_shape(sig) ]

def create_S0_S1(sig):
    """
    Returns the pair ``(S0, S1)`` for the given algebra shape.  Results are cached, since every
    graph construction needs them.

    >>> (S0, S1) = create_S0_S1([[2, 3]])
    >>> (S0.dim(), S1.dim())
    (4, 9)
    >>> create_S0_S1([[1, 2, 3]])
    Traceback (most recent call last):
        ...
    ncgraph.exceptions.ShapeError: 'row length must be 2, got (1, 2, 3)'
    """

    sig = algebra_shape(sig)
    if sig in _S0_S1_cache:
        return _S0_S1_cache[sig]

    blocks0 = []
    blocks1 = []
    for (dA, dY) in sig:
        blk0 = TensorSubspace.full((dA, dA)).kron(np.eye(dY))
        blk1 = TensorSubspace.from_span([ np.eye(dA, dtype=complex) ]).kron(
            TensorSubspace.full((dY, dY)))
        blocks0.append(blk0)
        blocks1.append(blk1)

    S0 = TensorSubspace.block_diag(blocks0)
    S1 = TensorSubspace.block_diag(blocks1)
    n = S0.shape()[0]

    if not S0.contains(np.eye(n)):
        raise AlgebraicAssertionError('identity is not in S0')
    if not S1.contains(np.eye(n)):
        raise AlgebraicAssertionError('identity is not in S1')

    # S0 and S1 act on different tensor factors of each block, so they commute.  This just
    # guards against a broken construction.
    s0 = S0.random_vec()
    s1 = S1.random_vec()
    if linalg.norm(np.dot(s0, s1) - np.dot(s1, s0)) >= COMMUTE_TOL:
        raise AlgebraicAssertionError("S0 and S1 don't commute")

    logger.debug('built S0 (dim %d) and S1 (dim %d) for shape %s', S0.dim(), S1.dim(), sig)

    _S0_S1_cache[sig] = (S0, S1)
    return (S0, S1)

def check_commutant(sig, samples=100, rng=None):
    """
    Sample random pairs from S0 and S1 and return the largest commutator norm seen.  Raises
    ``AlgebraicAssertionError`` if it reaches ``COMMUTE_TOL``.

    >>> check_commutant([[2, 1], [1, 2]], samples=10) < COMMUTE_TOL
    True
    """

    (S0, S1) = create_S0_S1(sig)
    worst = 0.0
    for i in range(samples):
        s0 = S0.random_vec(rng)
        s1 = S1.random_vec(rng)
        worst = max(worst, linalg.norm(np.dot(s0, s1) - np.dot(s1, s0)))
    if worst >= COMMUTE_TOL:
        raise AlgebraicAssertionError("S0 and S1 don't commute: error %g" % worst)
    return float(worst)
