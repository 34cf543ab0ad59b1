"""
S0-graphs: noncommutative graphs relative to a vertex algebra S0, as defined by
Duan, Severini, Winter in arXiv:1002.2514 and generalized by Stahlke in
arXiv:1405.5254.

An S0-graph is an operator subspace S with S = S^dagger, S0 <= S and
S = S0 S S0.  Classical graphs on k vertices are the S0-graphs of the algebra
shape ``((1, 1),) * k``.

>>> from ncgraph import S0Graph, complement, vertex_graph
>>> G = S0Graph.pentagon()
>>> G
S0Graph(((1, 1), (1, 1), (1, 1), (1, 1), (1, 1)), <TensorSubspace of dim 15 over space (5, 5)>)
>>> complement(complement(G)) == G
True
>>> vertex_graph(G).S.equiv(G.S0)
True
"""

import functools
import logging

import numpy as np

from ncgraph.exceptions import ConstructionError
from ncgraph.subspace import TensorSubspace
from ncgraph.algebra import algebra_shape, create_S0_S1

logger = logging.getLogger(__name__)

__all__ = [
    'S0Graph',
    'vertex_graph',
    'forget_algebra',
    'forget_S0',
    'complement',
    'random_S0Graph',
    'get_block_spaces',
    'from_block_spaces',
]

class S0Graph(object):
    """
    An S0-graph over the algebra of the given shape.  The subspace is validated on construction
    and the object is not meant to be modified afterwards.

    Attributes: ``sig`` (the normalized algebra shape), ``n`` (the dimension of the underlying
    space), ``S``, ``S0`` and ``S1`` (the commutant of S0).

    >>> import numpy as np
    >>> S = TensorSubspace.from_span([ np.eye(2), np.array([[0, 1], [0, 0]]) ])
    >>> S0Graph([[1, 2]], S)
    Traceback (most recent call last):
        ...
    ncgraph.exceptions.ConstructionError: 'S is not an S0-graph: self-adjoint'
    """

    def __init__(self, sig, S):
        sig = algebra_shape(sig)
        (S0, S1) = create_S0_S1(sig)
        n = S0.shape()[0]

        if S.shape() != (n, n):
            raise ConstructionError('shape', 'S is over %s but the algebra acts on C^%d' %
                (S.shape(), n))
        if not S.equiv(S.adjoint()):
            raise ConstructionError('self-adjoint')
        if not S.contains(S0):
            raise ConstructionError('contains S0')
        if not S.equiv(S0.mul(S).mul(S0)):
            raise ConstructionError('S0-bimodule')

        self.n = n
        self.sig = sig
        self.S = S
        self.S0 = S0
        self.S1 = S1

    @classmethod
    def from_adjmat(cls, adj_mat):
        """
        Create a classical graph from its adjacency matrix.  Loops are added, so the diagonal of
        ``adj_mat`` is ignored.

        The given adjacency matrix must be symmetric.

        >>> import numpy as np
        >>> G = S0Graph.from_adjmat(np.array([[0, 1], [1, 0]]))
        >>> G.S.dim()
        4
        >>> G.sig
        ((1, 1), (1, 1))
        """

        # copy and cast to numpy
        adj_mat = np.array(adj_mat)

        if len(adj_mat.shape) != 2 or adj_mat.shape[0] != adj_mat.shape[1]:
            raise ValueError('adjacency matrix must be square')
        if not np.all(adj_mat == adj_mat.transpose()):
            raise ValueError('adjacency matrix must be symmetric')
        n = adj_mat.shape[0]

        adj_mat = adj_mat + np.eye(n, dtype=adj_mat.dtype)
        basis = []
        for (i, j) in np.transpose(adj_mat.nonzero()):
            m = np.zeros((n, n), dtype=complex)
            m[i, j] = 1
            basis.append(m)

        return cls(((1, 1),) * n, TensorSubspace.from_span(basis))

    @classmethod
    def pentagon(cls):
        """
        Create the 5-cycle graph.  Useful for testing.
        """

        # Adjacency matrix for the 5-cycle graph.
        adj_mat = np.array([
            [1, 1, 0, 0, 1],
            [1, 1, 1, 0, 0],
            [0, 1, 1, 1, 0],
            [0, 0, 1, 1, 1],
            [1, 0, 0, 1, 1]
        ])
        return cls.from_adjmat(adj_mat)

    @functools.cached_property
    def S_basis(self):
        """
        Hermitian basis of S, mapping real coefficient vectors into S.
        """

        return self.S.hermitian_basis()

    @functools.cached_property
    def block_spaces(self):
        return get_block_spaces(self)

    def num_blocks(self):
        return len(self.sig)

    def block_sizes(self):
        return [ dA*dY for (dA, dY) in self.sig ]

    def block_offsets(self):
        """
        Start index of each diagonal block, followed by ``n``.

        >>> S0Graph.pentagon().block_offsets()
        [0, 1, 2, 3, 4, 5]
        """

        return [ int(x) for x in np.concatenate(([0], np.cumsum(self.block_sizes()))) ]

    def __eq__(self, other):
        if not isinstance(other, S0Graph):
            return NotImplemented
        return bool(self.sig == other.sig and self.S.equiv(other.S))

    def __ne__(self, other):
        eq = self.__eq__(other)
        if eq is NotImplemented:
            return eq
        return not eq

    # Equality is only up to tolerance, so there is no consistent hash.
    __hash__ = None

    def __str__(self):
        return 'S0Graph('+str(self.sig)+', '+str(self.S)+')'

    def __repr__(self):
        return str(self)

def vertex_graph(g):
    """
    The graph whose subspace is S0 itself, the smallest S0-graph.
    """

    return S0Graph(g.sig, g.S0)

def forget_algebra(g):
    """
    The same subspace, regarded as a graph over the trivial algebra C*I.

    >>> G = forget_algebra(S0Graph.pentagon())
    >>> G.sig
    ((1, 5),)
    """

    return S0Graph(((1, g.n),), g.S)

forget_S0 = forget_algebra

def complement(g):
    """
    The complement graph, perp(S) + S0.  Taking the complement twice gives back the original
    graph.
    """

    return S0Graph(g.sig, g.S.perp().join(g.S0))

def _assemble(sig, blocks):
    """
    Tensor each ``blocks[row][col]`` with Full(dA_row, dA_col), assemble into a block matrix,
    and close up under adjoint and S0.
    """

    (S0, _S1) = create_S0_S1(sig)
    grid = [
        [ TensorSubspace.full((da_row, da_col)).kron(blocks[row][col])
            for (col, (da_col, _dy_col)) in enumerate(sig) ]
        for (row, (da_row, _dy_row)) in enumerate(sig)
    ]

    S = TensorSubspace.block_matrix(grid)
    S = S.join(S.adjoint())
    S = S.join(S0)

    return S0Graph(sig, S)

def random_S0Graph(sig, rng=None):
    """
    Random S0-graph over the given algebra.  Pass a ``numpy.random.RandomState`` as ``rng`` for a
    reproducible instance.

    >>> G = random_S0Graph([[1, 2], [2, 1]], rng=np.random.RandomState(1))
    >>> G.n
    4
    """

    sig = algebra_shape(sig)

    def block(row, col):
        (_da_row, dy_row) = sig[row]
        (_da_col, dy_col) = sig[col]
        # round() rounds half to even, so a 1x1 block gets dimension 0
        ds = int(round(np.sqrt(dy_row * dy_col) / 2.0))
        if row == col:
            return TensorSubspace.create_random_hermitian(dy_row, ds, rng=rng)
        elif row > col:
            return TensorSubspace.create_random((dy_row, dy_col), ds, rng=rng)
        else:
            return TensorSubspace.empty((dy_row, dy_col))

    num_blocks = len(sig)
    blocks = [ [ block(row, col) for col in range(num_blocks) ] for row in range(num_blocks) ]

    g = _assemble(sig, blocks)
    logger.debug('random S0-graph over %s has dim %d', sig, g.S.dim())
    return g

def get_block_spaces(g):
    """
    Returns the k-by-k list of subspaces obtained by restricting each basis element of S to
    the top-left dY_i-by-dY_j corner of block (i, j).

    >>> G = S0Graph.pentagon()
    >>> B = get_block_spaces(G)
    >>> [ [ B[i][j].dim() for j in range(5) ] for i in range(2) ]
    [[1, 1, 0, 0, 1], [1, 1, 1, 0, 0]]
    """

    offsets = g.block_offsets()
    dy_sizes = [ dY for (_dA, dY) in g.sig ]

    blkspaces = []
    for (blki, oi) in enumerate(offsets[:-1]):
        row = []
        for (blkj, oj) in enumerate(offsets[:-1]):
            blkbasis = [ m[oi:oi+dy_sizes[blki], oj:oj+dy_sizes[blkj]] for m in g.S ]
            row.append(TensorSubspace.from_span(blkbasis))
        blkspaces.append(row)

    return blkspaces

def from_block_spaces(sig, blkspaces):
    """
    Rebuild the S0-graph whose block spaces are ``blkspaces``.  This inverts
    ``get_block_spaces``.

    >>> G = random_S0Graph([[2, 2]], rng=np.random.RandomState(3))
    >>> from_block_spaces(G.sig, get_block_spaces(G)) == G
    True
    """

    sig = algebra_shape(sig)
    k = len(sig)
    if len(blkspaces) != k or any(len(row) != k for row in blkspaces):
        raise ValueError('need a %dx%d array of block spaces' % (k, k))

    return _assemble(sig, blkspaces)
