"""
Semidefinite programs over complex Hermitian matrices, solved with cvxopt.

Decision variables are real scalars ``x``.  Every quantity that depends on
them is an :class:`AffineExpr`, an array whose last axis holds the constant
term followed by one coefficient per variable (the same layout as the
``x_to_Y`` arrays used to set up cvxopt problems by hand).  Linear maps that
act on the leading axes of a numpy array therefore act on an ``AffineExpr``
unchanged, which is how the graph code applies the same function to numeric
matrices and to variables.

>>> import numpy as np
>>> from ncgraph.sdp import SdpVariables, psd, nonneg, minimize
>>> variables = SdpVariables()
>>> t = variables.scalar()
>>> X = variables.hermitian(2)
>>> prob = minimize(t, [psd(t*np.eye(2) - X), psd(X - np.diag([1.0, 3.0]))])
>>> sol = prob.solve()
>>> sol.status
'optimal'
>>> abs(sol.value - 3) < 1e-6
True
"""

import collections
import logging

import numpy as np
import scipy.linalg as linalg
import cvxopt.base
import cvxopt.solvers

from ncgraph.exceptions import SolverStatusError
from ncgraph.subspace import TensorSubspace

logger = logging.getLogger(__name__)

__all__ = [
    'AffineExpr',
    'SdpVariables',
    'Constraint',
    'Problem',
    'SdpSolution',
    'psd',
    'nonneg',
    'zero',
    'minimize',
    'maximize',
    'solve',
    'partial_trace',
    'kron_eye',
    'block_diag',
    'bmat',
    'vec',
    'trace',
    'real_inner',
    'DEFAULT_SOLVER_OPTIONS',
    'OPTIMAL',
    'INFEASIBLE',
    'UNBOUNDED',
    'INACCURATE',
]

# Keys are those of cvxopt.solvers.options.  Passed per call, so the global
# cvxopt options are never touched.
DEFAULT_SOLVER_OPTIONS = {
    'show_progress': False,
    'abstol': 1e-8,
    'reltol': 1e-8,
    'feastol': 1e-8,
    'maxiters': 100,
}

OPTIMAL = 'optimal'
INFEASIBLE = 'infeasible'
UNBOUNDED = 'unbounded'
INACCURATE = 'inaccurate'

_CVXOPT_STATUS = {
    'optimal': OPTIMAL,
    'primal infeasible': INFEASIBLE,
    'dual infeasible': UNBOUNDED,
    'unknown': INACCURATE,
}

### Affine expressions ###

class AffineExpr(object):
    """
    An array-valued affine function of the real decision vector ``x``.

    ``data[..., 0]`` is the constant term and ``data[..., 1+i]`` the
    coefficient of ``x[i]``.  Expressions built at different times may have
    different numbers of trailing coefficients; they are zero padded when
    combined.
    """

    # Make numpy defer to our reflected operators, so that e.g. ``W - X`` works for an
    # ndarray ``W``.
    __array_ufunc__ = None

    def __init__(self, data):
        data = np.asarray(data)
        if data.dtype.kind != 'c':
            data = data.astype(complex)
        assert len(data.shape) >= 1
        self.data = data

    @classmethod
    def constant(cls, value):
        value = np.asarray(value, dtype=complex)
        return cls(value[..., np.newaxis])

    @property
    def shape(self):
        return self.data.shape[:-1]

    @property
    def nvars(self):
        return self.data.shape[-1] - 1

    def padded(self, nvars):
        """
        The data array with the coefficient axis extended to ``nvars`` variables.
        """

        extra = nvars - self.nvars
        assert extra >= 0
        if extra == 0:
            return self.data
        pad = np.zeros(self.shape + (extra,), dtype=self.data.dtype)
        return np.concatenate((self.data, pad), axis=-1)

    def _broadcast_with(self, other):
        other = as_affine(other)
        nv = max(self.nvars, other.nvars)
        shp = np.broadcast_shapes(self.shape, other.shape)
        def fit(e):
            d = e.padded(nv)
            d = d.reshape((1,)*(len(shp)-len(e.shape)) + d.shape)
            return np.broadcast_to(d, shp + (nv+1,))
        return (fit(self), fit(other))

    def __add__(self, other):
        (a, b) = self._broadcast_with(other)
        return AffineExpr(a + b)

    def __radd__(self, other):
        return self + other

    def __sub__(self, other):
        (a, b) = self._broadcast_with(other)
        return AffineExpr(a - b)

    def __rsub__(self, other):
        (a, b) = self._broadcast_with(other)
        return AffineExpr(b - a)

    def __neg__(self):
        return AffineExpr(-self.data)

    def __mul__(self, other):
        if isinstance(other, AffineExpr):
            raise TypeError('product of two affine expressions is not affine')
        other = np.asarray(other)
        if other.shape == ():
            return AffineExpr(self.data * other)
        if self.shape == ():
            # scalar expression times a constant array
            return AffineExpr(np.multiply.outer(other, self.data))
        raise TypeError('affine expressions can only be scaled by scalars')

    def __rmul__(self, other):
        return self * other

    def __truediv__(self, other):
        return self * (1.0 / other)

    def __getitem__(self, key):
        # Indexing applies to the leading axes only.
        if not isinstance(key, tuple):
            key = (key,)
        assert len(key) <= len(self.shape)
        return AffineExpr(self.data[key])

    @property
    def T(self):
        assert len(self.shape) == 2
        return AffineExpr(self.data.transpose(1, 0, 2))

    @property
    def H(self):
        # Conjugation commutes with evaluation because x is real.
        assert len(self.shape) == 2
        return AffineExpr(self.data.conj().transpose(1, 0, 2))

    def conj(self):
        return AffineExpr(self.data.conj())

    def reshape(self, shape):
        return AffineExpr(self.data.reshape(tuple(shape) + (self.nvars+1,)))

    def transpose(self, axes):
        return AffineExpr(self.data.transpose(tuple(axes) + (len(self.shape),)))

    def apply(self, f):
        """
        Apply a linear map ``f`` that acts on the leading axes of a numpy array and passes
        trailing axes through.
        """

        return AffineExpr(f(self.data))

    def value(self, x):
        """
        Evaluate at the real vector ``x``.
        """

        x = np.asarray(x, dtype=float)
        if len(x) < self.nvars:
            raise ValueError('expression has %d variables, got a vector of length %d' %
                (self.nvars, len(x)))
        return self.data[..., 0] + np.dot(self.data[..., 1:], x[:self.nvars])

    def __str__(self):
        return '<AffineExpr of shape '+str(self.shape)+' in '+str(self.nvars)+' variables>'

    def __repr__(self):
        return str(self)

def as_affine(a):
    if isinstance(a, AffineExpr):
        return a
    return AffineExpr.constant(a)

def _lift(args):
    """
    If any argument is an AffineExpr, return the data arrays of all of them (padded to a common
    number of variables) and True.  Otherwise return them as numpy arrays and False.
    """

    if any(isinstance(a, AffineExpr) for a in args if a is not None):
        exprs = [ None if a is None else as_affine(a) for a in args ]
        nv = max(e.nvars for e in exprs if e is not None)
        return ([ None if e is None else e.padded(nv) for e in exprs ], True)
    return ([ None if a is None else np.asarray(a) for a in args ], False)

def _linear(f):
    """
    Extend a linear map on numpy arrays (with pass-through trailing axes) to AffineExpr.
    """

    def wrapper(a, *args):
        if isinstance(a, AffineExpr):
            return a.apply(lambda d: f(d, *args))
        return f(np.asarray(a), *args)
    wrapper.__name__ = f.__name__
    wrapper.__doc__ = f.__doc__
    return wrapper

@_linear
def partial_trace(a, dims):
    """
    Trace out the first factor of an operator on C^d1 (x) C^d2, with ``dims = (d1, d2)``.

    >>> x = np.kron(np.diag([1, 2]), np.eye(3))
    >>> np.allclose(partial_trace(x, (2, 3)), 3*np.eye(3))
    True
    """

    (d1, d2) = dims
    rest = a.shape[2:]
    assert a.shape[:2] == (d1*d2, d1*d2)
    return np.trace(a.reshape((d1, d2, d1, d2) + rest), axis1=0, axis2=2)

@_linear
def kron_eye(a, d):
    """
    Returns ``kron(I_d, a)``.

    >>> np.allclose(kron_eye(np.ones((2, 2)), 3), np.kron(np.eye(3), np.ones((2, 2))))
    True
    """

    (p, q) = a.shape[:2]
    rest = a.shape[2:]
    out = np.einsum('ij,rs...->irjs...', np.eye(d), a)
    return out.reshape((d*p, d*q) + rest)

@_linear
def vec(a):
    """
    Stack the columns of a matrix into a vector.

    >>> vec(np.array([[1, 2], [3, 4]]))
    array([1, 3, 2, 4])
    """

    (p, q) = a.shape[:2]
    return np.swapaxes(a, 0, 1).reshape((p*q,) + a.shape[2:])

@_linear
def trace(a):
    return np.trace(a, axis1=0, axis2=1)

def bmat(rows):
    """
    Assemble a block matrix.  Blocks may be numpy arrays or AffineExpr; ``None`` stands for a
    zero block whose size is taken from the rest of its row and column.
    """

    rows = [ list(r) for r in rows ]
    ncols = len(rows[0])
    for r in rows:
        assert len(r) == ncols
    flat = [ b for r in rows for b in r ]
    (flat, is_expr) = _lift(flat)
    grid = [ flat[i*ncols:(i+1)*ncols] for i in range(len(rows)) ]

    heights = [ next(b.shape[0] for b in r if b is not None) for r in grid ]
    widths = [ next(grid[i][j].shape[1] for i in range(len(grid)) if grid[i][j] is not None)
        for j in range(ncols) ]
    some = next(b for b in flat if b is not None)
    rest = some.shape[2:]

    out_rows = []
    for (i, r) in enumerate(grid):
        blks = []
        for (j, b) in enumerate(r):
            if b is None:
                b = np.zeros((heights[i], widths[j]) + rest, dtype=some.dtype)
            assert b.shape[:2] == (heights[i], widths[j])
            blks.append(b)
        out_rows.append(np.concatenate(blks, axis=1))
    out = np.concatenate(out_rows, axis=0)
    return AffineExpr(out) if is_expr else out

def block_diag(*blocks):
    """
    Block diagonal matrix with the given diagonal blocks.

    >>> block_diag(np.eye(1), 2*np.eye(2))
    array([[1., 0., 0.],
           [0., 2., 0.],
           [0., 0., 2.]])
    """

    k = len(blocks)
    return bmat([ [ blocks[i] if i == j else None for j in range(k) ] for i in range(k) ])

def real_inner(a, b):
    """
    Returns Re(sum(conj(a) * b)), i.e. the real part of Tr(a^dagger b).  At most one argument
    may be an AffineExpr.
    """

    if isinstance(a, AffineExpr):
        if isinstance(b, AffineExpr):
            raise TypeError('inner product of two affine expressions is not affine')
        # Re <a, b> = Re <b, a>
        (a, b) = (b, a)
    a = np.asarray(a)
    if isinstance(b, AffineExpr):
        assert a.shape == b.shape
        nd = len(a.shape)
        d = np.tensordot(a.conj(), b.data, axes=(list(range(nd)), list(range(nd))))
        return AffineExpr(d.real)
    return np.sum(a.conj() * np.asarray(b)).real

### Variables, constraints, problems ###

class SdpVariables(object):
    """
    Allocates the real decision variables of one SDP.  Each call returns an AffineExpr over the
    variables allocated so far.
    """

    def __init__(self):
        self.count = 0

    def from_basis(self, basis):
        r"""
        Fresh variables ``x_i`` and the expression :math:`\sum_i x_i B_i` for the given basis,
        whose first axis indexes the basis elements.
        """

        basis = np.asarray(basis)
        k = basis.shape[0]
        shp = basis.shape[1:]
        data = np.zeros(shp + (1 + self.count + k,), dtype=complex)
        data[..., 1+self.count:] = np.moveaxis(basis, 0, -1)
        self.count += k
        return AffineExpr(data)

    def scalar(self):
        return self.from_basis(np.ones(1))

    def hermitian(self, n):
        """
        A free Hermitian n-by-n matrix.
        """

        return self.from_basis(TensorSubspace.full((n, n)).hermitian_basis())

    def psd_hermitian(self, n):
        """
        A Hermitian n-by-n matrix and the constraint that it be positive semidefinite.
        """

        X = self.hermitian(n)
        return (X, psd(X))

Constraint = collections.namedtuple('Constraint', ['kind', 'expr'])

def psd(M):
    """
    The constraint that the Hermitian matrix ``M`` is positive semidefinite.
    """

    M = as_affine(M)
    assert len(M.shape) == 2 and M.shape[0] == M.shape[1]
    return Constraint('psd', M)

def nonneg(e):
    """
    The constraint that the real scalar ``e`` is non-negative.
    """

    e = as_affine(e)
    assert e.shape == ()
    return Constraint('nonneg', e)

def zero(e):
    """
    The constraint that every entry of ``e`` vanishes.
    """

    return Constraint('zero', as_affine(e))

class Problem(object):
    """
    An SDP: a real affine objective, a sense, and a tuple of constraints.
    """

    def __init__(self, objective, constraints, sense):
        assert sense in ('minimize', 'maximize')
        self.objective = as_affine(objective)
        self.constraints = tuple(constraints)
        self.sense = sense
        assert self.objective.shape == ()
        for c in self.constraints:
            assert isinstance(c, Constraint)
        self.nvars = max([self.objective.nvars] + [ c.expr.nvars for c in self.constraints ])

    def __str__(self):
        return '<Problem: %s in %d variables with %d constraints>' % \
            (self.sense, self.nvars, len(self.constraints))

    def __repr__(self):
        return str(self)

    def solve(self, **options):
        """
        Solve with cvxopt (see :func:`solve` for the options).  The returned solution carries a
        status; this method does not raise for a non-optimal status.
        """

        return solve(self, **options)

def minimize(objective, constraints):
    return Problem(objective, constraints, 'minimize')

def maximize(objective, constraints):
    return Problem(objective, constraints, 'maximize')

class SdpSolution(object):
    """
    The outcome of a solve.  ``status`` is one of ``OPTIMAL``, ``INFEASIBLE``, ``UNBOUNDED``,
    ``INACCURATE``.  ``x`` and ``value`` are None when the solver produced no primal point.
    """

    def __init__(self, status, value, x, sdp_stats):
        self.status = status
        self.value = value
        self.x = x
        self.sdp_stats = sdp_stats

    def is_optimal(self):
        return self.status == OPTIMAL

    def evaluate(self, expr):
        """
        Numeric value of an expression at the solution point.
        """

        if self.x is None:
            raise SolverStatusError(self, 'no primal point available, status '+repr(self.status))
        if not isinstance(expr, AffineExpr):
            return np.asarray(expr)
        return expr.value(self.x)

    def __str__(self):
        return '<SdpSolution status=%s value=%s>' % (self.status, self.value)

    def __repr__(self):
        return str(self)

### Some helper functions for cvxopt ###

def mat_cplx_to_real(cmat):
    return np.block([[cmat.real, -cmat.imag], [cmat.imag, cmat.real]]) / np.sqrt(2)

def mat_real_to_cplx(rmat):
    w = rmat.shape[0] // 2
    h = rmat.shape[1] // 2
    return (rmat[:w,:h] + rmat[w:,h:] + 1j*rmat[w:,:h] - 1j*rmat[:w,h:]) / np.sqrt(2)

def make_F_real(Fx_list, F0_list):
    '''
    Convert F0, Fx arrays to real if needed, by considering C as a vector space
    over R.  This is needed because cvxopt cannot handle complex inputs.
    '''

    F0_list_real = []
    Fx_list_real = []
    for (F0, Fx) in zip(F0_list, Fx_list):
        if np.any(np.imag(F0)) or np.any(np.imag(Fx)):
            F0_list_real.append(mat_cplx_to_real(F0))

            mr = np.zeros((Fx.shape[0]*2, Fx.shape[1]*2, Fx.shape[2]))
            for i in range(Fx.shape[2]):
                mr[:, :, i] = mat_cplx_to_real(Fx[:, :, i])
            Fx_list_real.append(mr)
        else:
            F0_list_real.append(np.real(F0))
            Fx_list_real.append(np.real(Fx))

    assert len(F0_list_real) == len(F0_list)
    assert len(Fx_list_real) == len(Fx_list)
    return (Fx_list_real, F0_list_real)

def _dmatrix(a):
    return cvxopt.base.matrix(np.ascontiguousarray(a, dtype=float))

def call_sdp(c, Fx_list, F0_list, Gl=None, hl=None, A=None, b=None, options=None):
    r'''
    Solve the SDP which minimizes $c^T x$ under the constraints
    $F0 - \sum_i Fx_i x_i \succeq 0$ for all (Fx, F0) in (Fx_list, F0_list),
    $hl - Gl x \ge 0$ and $A x = b$.
    '''

    for (k, (F0, Fx)) in enumerate(zip(F0_list, Fx_list)):
        assert linalg.norm(F0 - F0.conj().T) < 1e-10
        for i in range(Fx.shape[2]):
            assert linalg.norm(Fx[:,:,i] - Fx[:,:,i].conj().T) < 1e-10

    (Fx_list, F0_list) = make_F_real(Fx_list, F0_list)
    Gs = [ _dmatrix(Fx.reshape(Fx.shape[0]**2, Fx.shape[2])) for Fx in Fx_list ]
    hs = [ _dmatrix(F0) for F0 in F0_list ]

    kwargs = {}
    if Gl is not None and len(Gl):
        kwargs['Gl'] = _dmatrix(Gl)
        kwargs['hl'] = _dmatrix(np.reshape(hl, (-1, 1)))
    if A is not None and len(A):
        kwargs['A'] = _dmatrix(A)
        kwargs['b'] = _dmatrix(np.reshape(b, (-1, 1)))
    if options is not None:
        kwargs['options'] = options

    sol = cvxopt.solvers.sdp(_dmatrix(np.reshape(c, (-1, 1))), Gs=Gs, hs=hs, **kwargs)
    xvec = None if sol['x'] is None else np.array(sol['x']).flatten()

    sol['Gs'] = Gs
    sol['hs'] = hs

    if sol['status'] == 'optimal':
        for (G, h) in zip(Gs, hs):
            G = np.array(G)
            h = np.array(h)
            M = np.dot(G, xvec).reshape(h.shape)
            err = linalg.eigvalsh(h-M)[0]
            if err < -1e-7:
                logger.warning('solution violates an LMI by %g', -err)

    return (xvec, sol)

def _independent_rows(A, b, tol=1e-10):
    """
    Replace the consistent system A x = b by an equivalent one with linearly independent rows.
    Returns (A', b', residual) where a residual above tolerance means A x = b has no solution.
    """

    (U, s, Vh) = linalg.svd(A, full_matrices=False)
    scale = s[0] if len(s) else 0
    r = int(np.sum(s > tol * max(1, scale)))
    Ur = U[:, :r]
    b_proj = np.dot(Ur.T, b)
    resid = linalg.norm(b - np.dot(Ur, b_proj))
    return (Vh[:r], b_proj / s[:r], resid)

def _converged(sdp_stats, tol):
    """
    cvxopt stops with status 'unknown' when the KKT system becomes singular, which on
    degenerate problems often happens only once the iterate is already within tolerance.
    """

    pinf = sdp_stats.get('primal infeasibility')
    dinf = sdp_stats.get('dual infeasibility')
    gap = sdp_stats.get('gap')
    relgap = sdp_stats.get('relative gap')
    if pinf is None or dinf is None or pinf > tol or dinf > tol:
        return False
    return (gap is not None and gap <= tol) or (relgap is not None and relgap <= tol)

def solve(problem, accept_tol=1e-6, **options):
    """
    Translate ``problem`` to cvxopt form, solve it, and wrap the result in an ``SdpSolution``.

    Keyword arguments are cvxopt solver options and override ``DEFAULT_SOLVER_OPTIONS``.  A
    solve that cvxopt ends with status 'unknown' is reported as ``OPTIMAL`` only if the final
    infeasibilities and gap are all below ``accept_tol``, and as ``INACCURATE`` otherwise.
    """

    opts = DEFAULT_SOLVER_OPTIONS.copy()
    opts.update(options)
    nv = problem.nvars

    obj = problem.objective.padded(nv).real
    c = obj[1:] if problem.sense == 'minimize' else -obj[1:]

    Fx_list = []
    F0_list = []
    Gl_rows = []
    hl_rows = []
    A_rows = []
    b_rows = []
    for con in problem.constraints:
        d = con.expr.padded(nv)
        if con.kind == 'psd':
            F0_list.append(d[:, :, 0])
            Fx_list.append(-d[:, :, 1:])
        elif con.kind == 'nonneg':
            assert linalg.norm(d.imag) < 1e-10
            hl_rows.append(d[0].real)
            Gl_rows.append(-d[1:].real)
        elif con.kind == 'zero':
            d = d.reshape(-1, nv+1)
            d = np.concatenate((d.real, d.imag), axis=0)
            A_rows.append(d[:, 1:])
            b_rows.append(-d[:, 0])
        else:
            raise ValueError('unknown constraint kind: '+repr(con.kind))

    Gl = np.array(Gl_rows) if Gl_rows else None
    hl = np.array(hl_rows) if hl_rows else None
    A = None
    b = None
    if A_rows:
        (A, b, resid) = _independent_rows(np.concatenate(A_rows), np.concatenate(b_rows))
        if resid > 1e-8:
            logger.warning('equality constraints are inconsistent (residual %g)', resid)
            return SdpSolution(INFEASIBLE, None, None, None)

    logger.debug('solving %s with %d variables, %d LMI blocks, %d inequalities, %d equalities',
        problem.sense, nv, len(Fx_list), len(hl_rows), 0 if A is None else len(A))

    (xvec, sdp_stats) = call_sdp(c, Fx_list, F0_list, Gl, hl, A, b, options=opts)

    status = _CVXOPT_STATUS[sdp_stats['status']]
    if status == INACCURATE and xvec is not None and _converged(sdp_stats, accept_tol):
        logger.debug('accepting cvxopt early termination within tolerance %g', accept_tol)
        status = OPTIMAL
    if status != OPTIMAL:
        logger.warning('cvxopt.sdp returned status %r', sdp_stats['status'])
    else:
        logger.debug('cvxopt.sdp converged in %s iterations', sdp_stats.get('iterations'))

    # For an unbounded problem cvxopt's x is a certificate (a ray), not a feasible point.
    value = None
    if status == UNBOUNDED:
        xvec = None
    elif xvec is not None:
        value = float(obj[0] + np.dot(obj[1:], xvec))

    return SdpSolution(status, value, xvec, sdp_stats)
