"""
The Duan-Severini-Winter number of an S0-graph and its antiblocker.

Both are computed by semidefinite programs built around the Schur complement
condition [[lambda, vec(w)^dagger], [vec(w), Z]] >= 0, with Z ranging over
(a restriction of) S (x) L(C^n) and w the partial trace of Z.

>>> import numpy as np
>>> from ncgraph import S0Graph, dsw
>>> G = S0Graph.pentagon()
>>> abs(dsw(G, np.eye(5)).value - 5**0.5) < 1e-5
True
"""

import collections
import logging

import numpy as np
import scipy.linalg as linalg

from ncgraph.exceptions import SolverStatusError
from ncgraph.subspace import TensorSubspace, _kron_stack
from ncgraph.sdp import SdpVariables, psd, nonneg, zero, minimize, maximize, \
    partial_trace, kron_eye, block_diag, bmat, vec, real_inner

logger = logging.getLogger(__name__)

__all__ = [
    'Psi',
    'SchurSdp',
    'DswResult',
    'AntiblockerResult',
    'dsw_schur',
    'dsw_schur2',
    'dsw',
    'dsw_min_X_diag',
    'dsw_antiblocker',
]

# w must lie in S1 to this relative precision for the block-optimized encoding to be exact.
S1_TOL = 1e-8

SchurSdp = collections.namedtuple('SchurSdp', ['lam', 'w', 'Z', 'constraints'])

DswResult = collections.namedtuple('DswResult', ['value', 'x', 'Z', 'solution'])

AntiblockerResult = collections.namedtuple('AntiblockerResult', ['value', 'x', 'solution'])

def Psi(g, w):
    r"""
    For each algebra block i, trace out the A factor of the i-th diagonal block of ``w``, scale
    by 1/dY_i, and tensor back with the identity on A.  The result is block diagonal and lies in
    S1.  ``w`` may be a numpy array or an ``AffineExpr``.

    >>> from ncgraph import S0Graph
    >>> G = S0Graph(((1, 1), (2, 1)), TensorSubspace.full((3, 3)))
    >>> np.allclose(Psi(G, np.arange(9.0).reshape(3, 3)), np.diag([0, 12, 12]))
    True
    >>> G = S0Graph(((1, 2),), TensorSubspace.full((2, 2)))
    >>> np.allclose(Psi(G, np.diag([1.0, 3.0])), np.diag([0.5, 1.5]))
    True
    """

    blocks = []
    k = 0
    for (dai, dyi) in g.sig:
        ni = dai * dyi
        TrAi = partial_trace(w[k:k+ni, k:k+ni], (dai, dyi))
        blocks.append(kron_eye(TrAi / dyi, dai))
        k += ni
    assert k == g.n
    return block_diag(*blocks)

def _schur_lmi(lam, wv, Z):
    return psd(bmat([ [ lam.reshape((1, 1)), wv.H ], [ wv, Z ] ]))

def dsw_schur(g, variables):
    """
    Generic Schur complement scaffold.  Z = sum_m m (x) Z_m over a Hermitian basis {m} of S,
    with each Z_m a free Hermitian n-by-n matrix, and w = Tr_1 Z.
    """

    n = g.n

    # Each pair (m, h) with h in a Hermitian basis of L(C^n) gives one real variable.
    Lb = TensorSubspace.full((n, n)).hermitian_basis()
    Z = variables.from_basis(_kron_stack(g.S_basis, Lb))

    lam = variables.scalar()
    w = partial_trace(Z, (n, n))
    wv = vec(w).reshape((n*n, 1))

    logger.debug('dsw_schur: Z is %dx%d with %d variables', n*n, n*n, Z.nvars)

    return SchurSdp(lam, w, Z, (_schur_lmi(lam, wv, Z),))

def dsw_schur2(g, variables):
    """
    Like ``dsw_schur`` but much faster when S0 is not C*I, at the cost of constraining w to S1.

    Z is Hermitian of size sum_i dY_i^2 with block (i, j) ranging over B_ij (x) L(C^dY_j, C^dY_i),
    where B is ``get_block_spaces(g)``.  Then w_i = Tr_1 Z_ii and w is the direct sum of
    I_dA_i (x) w_i.
    """

    dy_sizes = [ dY for (_dA, dY) in g.sig ]
    da_sizes = [ dA for (dA, _dY) in g.sig ]
    blkspaces = g.block_spaces

    grid = [
        [ blkspaces[i][j].kron(TensorSubspace.full((dy_sizes[i], dy_sizes[j])))
            for j in range(len(dy_sizes)) ]
        for i in range(len(dy_sizes))
    ]
    Zspace = TensorSubspace.block_matrix(grid)
    Z = variables.from_basis(Zspace.hermitian_basis())

    blkw = []
    offset = 0
    for dy in dy_sizes:
        ni = dy**2
        blkw.append(partial_trace(Z[offset:offset+ni, offset:offset+ni], (dy, dy)))
        offset += ni
    assert offset == Zspace.shape()[0]

    lam = variables.scalar()
    wv = bmat([ [ vec(wi).reshape((dy**2, 1)) ] for (wi, dy) in zip(blkw, dy_sizes) ])
    w = block_diag(*[ kron_eye(wi, da) for (wi, da) in zip(blkw, da_sizes) ])

    logger.debug('dsw_schur2: Z is %dx%d with %d variables', offset, offset, Z.nvars)

    return SchurSdp(lam, w, Z, (_schur_lmi(lam, wv, Z),))

def _check_weight(g, W):
    W = np.asarray(W)
    if W.shape != (g.n, g.n):
        raise ValueError('weight matrix has shape %s, expected %s' % (W.shape, (g.n, g.n)))
    if linalg.norm(W - W.conj().T) > 1e-10 * max(1.0, linalg.norm(W)):
        raise ValueError('weight matrix must be Hermitian')
    # remove rounding error, the solver wants exactly Hermitian data
    return (W + W.conj().T) / 2

def _in_S1(g, W):
    return linalg.norm(W - g.S1.project(W)) <= S1_TOL * max(1.0, linalg.norm(W))

def _solve_or_raise(problem, what, options):
    sol = problem.solve(**options)
    if not sol.is_optimal():
        raise SolverStatusError(sol, '%s: SDP solver returned status %r' % (what, sol.status))
    return sol

def dsw(g, w, use_diag_optimization=True, **options):
    r"""
    Weighted DSW number: minimize lambda subject to x >= w over the Schur complement scaffold.

    With ``use_diag_optimization`` the block-optimized scaffold ``dsw_schur2`` is used.  It is
    exact only for w in S1; for other w a warning is logged and the generic scaffold is used
    instead.  Other keyword arguments are cvxopt solver options.

    Returns ``DswResult(value, x, Z, solution)``.  Raises ``SolverStatusError`` if the solve is
    not optimal.

    >>> from ncgraph import S0Graph
    >>> G = S0Graph.from_adjmat(np.zeros((2, 2)))
    >>> abs(dsw(G, np.eye(2)).value - 2) < 1e-5
    True
    """

    w = _check_weight(g, w)

    if use_diag_optimization and not _in_S1(g, w):
        logger.warning('weight is not in S1, using the generic DSW encoding')
        use_diag_optimization = False

    variables = SdpVariables()
    if use_diag_optimization:
        scaffold = dsw_schur2(g, variables)
    else:
        scaffold = dsw_schur(g, variables)

    problem = minimize(scaffold.lam, scaffold.constraints + (psd(scaffold.w - w),))
    sol = _solve_or_raise(problem, 'dsw', options)

    return DswResult(sol.value, sol.evaluate(scaffold.w), sol.evaluate(scaffold.Z), sol)

def dsw_min_X_diag(g, w, **options):
    """
    ``dsw`` using the block-optimized scaffold.
    """

    return dsw(g, w, use_diag_optimization=True, **options)

def dsw_antiblocker(g, w, use_diag_optimization=True, **options):
    r"""
    Antiblocker of the weighted DSW number:

        max{ <w, z> : Psi(g, z) = y, dsw(g, y) <= 1, z >= 0 }

    where dsw(g, y) <= 1 is expressed as lambda <= 1 on the Schur complement scaffold, whose
    x plays the role of y.  With ``use_diag_optimization`` the scaffold is ``dsw_schur2`` and
    y is confined to S1, which loses nothing since the extreme points lie there.  Otherwise
    the scaffold is ``dsw_schur``.  For w >= 0 this satisfies
    ``dsw_antiblocker(complement(g), w) == dsw(g, w)``.

    Returns ``AntiblockerResult(value, x, solution)`` where x is the optimal y.

    >>> from ncgraph import S0Graph, complement
    >>> G = S0Graph.from_adjmat(np.zeros((2, 2)))
    >>> abs(dsw_antiblocker(complement(G), np.eye(2)).value - 2) < 1e-5
    True
    """

    w = _check_weight(g, w)

    variables = SdpVariables()
    if use_diag_optimization:
        scaffold = dsw_schur2(g, variables)
    else:
        scaffold = dsw_schur(g, variables)

    (z, z_psd) = variables.psd_hermitian(g.n)
    constraints = scaffold.constraints + (
        nonneg(1 - scaffold.lam),
        z_psd,
        zero(Psi(g, z) - scaffold.w),
    )
    problem = maximize(real_inner(w, z), constraints)
    sol = _solve_or_raise(problem, 'dsw_antiblocker', options)

    return AntiblockerResult(sol.value, sol.evaluate(scaffold.w), sol)
