"""
Subspaces of vectors, matrices, and tensors.

This is the linear algebra layer underneath the noncommutative graph code:
spans, orthogonal complements, membership tests, Kronecker products and block
assembly of operator subspaces.
"""

import numpy as np
import numpy.linalg as linalg

from ncgraph.exceptions import SubspaceError

# This is the only thing that is exported.
__all__ = ['TensorSubspace']

def _unreduce_v1(basis, perp_basis, tol, dtype):
    """
    This is the function that handles restoring a pickle.
    """

    return TensorSubspace(basis, perp_basis, tol, dtype)

def _kron_stack(a, b):
    """
    Kronecker products of every matrix in stack ``a`` with every matrix in stack ``b``.
    """

    (ka, p, q) = a.shape
    (kb, r, s) = b.shape
    return np.einsum('iab,jcd->ijacbd', a, b).reshape(ka*kb, p*r, q*s)

class TensorSubspace(object):
    """
    Represents a subspace of vectors, matrices, or tensors.

    Methods are available for projecting to this subspace, computing span and intersection of
    subspaces, etc.  All operations are named methods; a subspace also acts like a read-only
    list of orthonormal basis elements.

    >>> import numpy
    >>> from ncgraph import TensorSubspace
    >>> x = TensorSubspace.from_span(numpy.random.randn(4,5,10))
    >>> x
    <TensorSubspace of dim 4 over space (5, 10)>
    >>> x.dim()
    4
    >>> x[0] in x
    True
    >>> x.perp()[0] in x
    False
    >>> y = TensorSubspace.from_span(numpy.random.randn(30,5,10))
    >>> x.join(y)
    <TensorSubspace of dim 34 over space (5, 10)>
    >>> y.minus(x)
    <TensorSubspace of dim 26 over space (5, 10)>
    >>> y.contains(x.intersection(y))
    True
    """

    def __init__(self, basis, perp_basis, tol, dtype, validate=False):
        """
        Don't directly instantiate this class using this constructor, use the
        ``TensorSubspace.from_span`` factory method instead.

        :param basis: an orthonormal basis for this subspace
        :type basis: list of numpy arrays, or numpy array whose first axis indexes the operators
        :param perp_basis: an orthonormal basis for the perpendicular subspace
        :param tol: tolerance to use for checking whether vectors are perpendicular
        :param dtype: the numpy dtype to use
        :param validate: if true, a check is made that the arguments indeed represent an
            orthonormal basis
        """

        assert dtype is not None

        basis = np.array(basis, dtype=dtype)
        perp_basis = np.array(perp_basis, dtype=dtype)

        # basis and perp_basis must be arrays of the appropriate shape, even if they are empty.
        # If one of them is empty, then copy the shape from the other one.
        if basis.shape[0] == 0:
            basis = np.zeros(((0,)+perp_basis.shape[1:]), basis.dtype)
        if perp_basis.shape[0] == 0:
            perp_basis = np.zeros(((0,)+basis.shape[1:]), basis.dtype)

        self._tol = tol
        self._dtype = dtype
        self._basis = basis
        self._perp_basis = perp_basis
        self._dim = basis.shape[0]
        self._col_shp = basis.shape[1:]
        self._col_dim = int(np.prod(self._col_shp))
        self._perp_cache = None
        self._hermit_cache = None
        # can be passed to constructor to make a space with similar configuration
        self._config_kw = { 'tol': tol, 'dtype': dtype }

        assert basis.shape[1:] == perp_basis.shape[1:]
        assert self._dim + perp_basis.shape[0] == self._col_dim

        # These contain a copy of the basis and perpendicular basis in which each basis element
        # has been flattened into a vector.
        self._basis_flat = basis.reshape((self._dim, self._col_dim))
        self._perp_basis_flat = perp_basis.reshape(((self._col_dim-self._dim), self._col_dim))

        if validate:
            products = np.dot(self._basis_flat.conj(), self._basis_flat.T)
            assert linalg.norm(products - np.eye(self._dim)) < self._tol

            products = np.dot(self._perp_basis_flat.conj(), self._perp_basis_flat.T)
            assert linalg.norm(products - np.eye(self._col_dim - self._dim)) < self._tol

            products = np.dot(self._basis_flat.conj(), self._perp_basis_flat.T)
            assert linalg.norm(products) < self._tol

    def __reduce__(self):
        """
        Tells pickle how to store this object.

        >>> import pickle
        >>> S = TensorSubspace.from_span(np.random.randn(2,3,3)); S
        <TensorSubspace of dim 2 over space (3, 3)>
        >>> T = pickle.loads(pickle.dumps(S)); T
        <TensorSubspace of dim 2 over space (3, 3)>
        >>> S.equiv(T)
        True
        """

        return _unreduce_v1, (
            self._basis,
            self._perp_basis,
            self._tol,
            self._dtype,
            )

    @classmethod
    def from_span(cls, X, tol=1e-10, dtype=None):
        """
        Construct a ``TensorSubspace`` that represents the span of the given operators.

        :param X: the operators to take the span of.
        :type X: list of numpy arrays, or numpy array whose first axis indexes the operators
        :param tol: tolerance for determining whether operators are perpendicular
        :param dtype: the datatype (default is to use the datatype of the input operators)

        >>> x = np.random.randn(3, 5)
        >>> y = np.random.randn(3, 5)
        >>> TensorSubspace.from_span([x, y])
        <TensorSubspace of dim 2 over space (3, 5)>
        >>> TensorSubspace.from_span([x, y, 2*x+0.3*y])
        <TensorSubspace of dim 2 over space (3, 5)>
        >>> TensorSubspace.from_span(x)
        <TensorSubspace of dim 3 over space (5,)>
        >>> [0,1,-1] in TensorSubspace.from_span([[1,1,0], [1,0,1]])
        True
        >>> [0,1,1]  in TensorSubspace.from_span([[1,1,0], [1,0,1]])
        False
        """

        if not isinstance(X, np.ndarray):
            X = list(X)
            if len(X) == 0:
                raise SubspaceError('cannot infer the shape of the span of nothing')

        # Let numpy choose a dtype if none was specified.
        X = np.array(X, dtype=dtype)
        if dtype is None:
            dtype = X.dtype

        # Minimum type is float (i.e. avoid integer types)
        dtype = np.promote_types(dtype, np.float32)
        X = X.astype(dtype)

        assert len(X.shape) >= 2

        # First axis of X enumerates the basis elements, remaining axes belong to the basis
        # elements themselves.
        col_shp = X.shape[1:]
        num_bases = X.shape[0]
        element_dimension = int(np.prod(col_shp))

        if num_bases == 0:
            return cls.empty(col_shp, tol=tol, dtype=dtype)

        # Now convert X to a rank 2 tensor.  Each basis element is treated as a vector.
        X = X.reshape(num_bases, element_dimension)

        # The SVD gives an orthonormal basis for both the span and its complement.
        (_U, s, V) = linalg.svd(X, full_matrices=True)
        dim = int(np.sum(s > tol))
        basis      = V[:dim, :].reshape((dim,)+col_shp)
        perp_basis = V[dim:, :].reshape((element_dimension-dim,)+col_shp)

        return cls(basis, perp_basis, tol=tol, dtype=dtype)

    @classmethod
    def empty(cls, col_shp, tol=1e-10, dtype=complex):
        """
        Constructs the empty subspace of the given dimension.

        >>> TensorSubspace.empty((3,5))
        <TensorSubspace of dim 0 over space (3, 5)>
        """

        col_shp = tuple(col_shp)
        n = int(np.prod(col_shp))
        basis = np.zeros((0,)+col_shp, dtype=dtype)
        perp_basis = np.eye(n, dtype=dtype).reshape((n,)+col_shp)
        return cls(basis, perp_basis, tol=tol, dtype=dtype)

    @classmethod
    def full(cls, col_shp, tol=1e-10, dtype=complex):
        """
        Constructs the full subspace of the given dimension.

        >>> TensorSubspace.full((3,5))
        <TensorSubspace of dim 15 over space (3, 5)>
        """

        return cls.empty(col_shp, tol=tol, dtype=dtype).perp()

    @classmethod
    def create_random(cls, col_shp, opspc_dim, rng=None):
        """
        Create a random complex subspace of the given dimension.  ``rng`` may be a
        ``numpy.random.RandomState``; by default the global numpy generator is used.

        >>> TensorSubspace.create_random((2, 3), 4)
        <TensorSubspace of dim 4 over space (2, 3)>
        >>> TensorSubspace.create_random((2, 3), 0)
        <TensorSubspace of dim 0 over space (2, 3)>
        """

        if rng is None:
            rng = np.random

        col_shp = tuple(col_shp)
        if opspc_dim == 0:
            return cls.empty(col_shp)

        ops = rng.standard_normal(size=(opspc_dim,)+col_shp) + \
            rng.standard_normal(size=(opspc_dim,)+col_shp)*1j
        S = cls.from_span(ops)

        assert S.dim() == opspc_dim

        return S

    @classmethod
    def create_random_hermitian(cls, n, opspc_dim, tracefree=False, rng=None):
        r"""
        Create an operator subspace :math:`S \subseteq \mathcal{L}(\mathbb{C}^n)` such that
        :math:`S = S^\dagger`.  The argument ``opspc_dim`` sets the dimension of ``S``.
        The ``tracefree`` parameter allows creation of a trace-free space.

        >>> S = TensorSubspace.create_random_hermitian(3, 4)
        >>> S
        <TensorSubspace of dim 4 over space (3, 3)>
        >>> S.is_hermitian()
        True
        >>> T = TensorSubspace.create_random_hermitian(4, 2, tracefree=True)
        >>> T.is_hermitian()
        True
        >>> np.eye(4) in T.perp()
        True
        """

        if rng is None:
            rng = np.random

        if opspc_dim == 0:
            return cls.empty((n, n))

        ops = []
        for i in range(opspc_dim):
            M = rng.standard_normal(size=(n,n)) + \
                rng.standard_normal(size=(n,n))*1j
            M += M.conj().T
            if tracefree:
                M -= np.eye(n) * np.trace(M) / n
            ops.append(M)
        S = cls.from_span(ops)

        assert S.dim() == opspc_dim

        return S

    @classmethod
    def block_matrix(cls, blocks):
        """
        Assemble a grid of matrix subspaces into a subspace of block matrices.  Entry
        ``blocks[i][j]`` gives the allowed values of block ``(i, j)``; every block of the
        result varies independently.

        >>> A = TensorSubspace.full((1, 1))
        >>> B = TensorSubspace.empty((1, 2))
        >>> C = TensorSubspace.from_span([np.eye(2)])
        >>> TensorSubspace.block_matrix([[A, B], [B.adjoint(), C]])
        <TensorSubspace of dim 2 over space (3, 3)>
        """

        blocks = [ list(row) for row in blocks ]
        heights = [ row[0].shape()[0] for row in blocks ]
        widths = [ S.shape()[1] for S in blocks[0] ]
        for (i, row) in enumerate(blocks):
            if len(row) != len(widths):
                raise SubspaceError('block grid is not rectangular')
            for (j, S) in enumerate(row):
                if S.shape() != (heights[i], widths[j]):
                    raise SubspaceError('block (%d, %d) has shape %s, expected %s' %
                        (i, j, S.shape(), (heights[i], widths[j])))

        row_offsets = np.concatenate(([0], np.cumsum(heights)))
        col_offsets = np.concatenate(([0], np.cumsum(widths)))
        shp = (int(row_offsets[-1]), int(col_offsets[-1]))
        dtype = np.result_type(*[ S._dtype for row in blocks for S in row ])
        tol = blocks[0][0]._tol

        # Embedding preserves orthonormality, so the bases can be assembled directly.
        def embed(i, j, ops):
            out = np.zeros((len(ops),)+shp, dtype=dtype)
            out[:, row_offsets[i]:row_offsets[i+1], col_offsets[j]:col_offsets[j+1]] = ops
            return out

        basis = []
        perp_basis = []
        for (i, row) in enumerate(blocks):
            for (j, S) in enumerate(row):
                basis.append(embed(i, j, S._basis))
                perp_basis.append(embed(i, j, S._perp_basis))

        return cls(np.concatenate(basis, axis=0), np.concatenate(perp_basis, axis=0),
            tol=tol, dtype=dtype)

    @classmethod
    def block_diag(cls, spaces):
        """
        Direct sum of matrix subspaces, placed along the diagonal.

        >>> A = TensorSubspace.full((2, 2))
        >>> B = TensorSubspace.from_span([np.eye(3)])
        >>> TensorSubspace.block_diag([A, B])
        <TensorSubspace of dim 5 over space (5, 5)>
        """

        spaces = list(spaces)
        grid = [
            [ S if i == j else cls.empty((S.shape()[0], T.shape()[1]), dtype=S._dtype)
                for (j, T) in enumerate(spaces) ]
            for (i, S) in enumerate(spaces)
        ]
        return cls.block_matrix(grid)

    def basis(self):
        """
        Returns an orthonormal basis for this subspace.

        You can also just directly treat a TensorSubspace object as a list, to the same effect.
        """

        return list(self)

    def shape(self):
        """
        The shape of the elements of this subspace.

        >>> TensorSubspace.full((3,5)).shape()
        (3, 5)
        """

        return self._col_shp

    def assert_compatible(self, other):
        """
        Raise error if ``other`` is not a subspace of the same space as this one.

        >>> spc1 = TensorSubspace.full((3,5))
        >>> spc2 = TensorSubspace.empty((3,5))
        >>> spc3 = TensorSubspace.empty((3,6))
        >>> spc1.assert_compatible(spc2)
        >>> spc1.assert_compatible(spc3)
        Traceback (most recent call last):
            ...
        ncgraph.exceptions.SubspaceError: 'subspaces over (3, 5) and (3, 6)'
        """

        if not isinstance(other, TensorSubspace):
            raise TypeError('other object is not a TensorSubspace')

        if self._col_shp != other._col_shp:
            raise SubspaceError('subspaces over %s and %s' % (self._col_shp, other._col_shp))

    def perp(self):
        """
        Returns orthogonal complement of this space.

        >>> x = np.random.randn(3, 5)
        >>> y = np.random.randn(3, 5)
        >>> spc = TensorSubspace.from_span([x, y]); spc
        <TensorSubspace of dim 2 over space (3, 5)>
        >>> spc.perp()
        <TensorSubspace of dim 13 over space (3, 5)>
        >>> spc.equiv(spc.perp().perp())
        True
        >>> TensorSubspace.full((3,5)).perp().equiv(TensorSubspace.empty((3,5)))
        True
        """

        if self._perp_cache is None:
            self._perp_cache = TensorSubspace(self._perp_basis, self._basis, **self._config_kw)
            self._perp_cache._perp_cache = self
        return self._perp_cache

    def _str_inner(self):
        return "dim "+str(self._dim)+" over space "+str(self._col_shp)

    def __str__(self):
        """
        Returns string representation.

        >>> spc = TensorSubspace.full((3, 5))
        >>> str(spc)
        '<TensorSubspace of dim 15 over space (3, 5)>'
        """

        return "<TensorSubspace of "+self._str_inner()+">"

    def __repr__(self):
        return str(self)

    def join(self, other):
        """
        Span of union of spaces.

        >>> x = TensorSubspace.from_span(np.random.randn(4,5,10))
        >>> y = TensorSubspace.from_span(np.random.randn(30,5,10))
        >>> z = TensorSubspace.from_span(np.random.randn(30,5,10))
        >>> x.join(y)
        <TensorSubspace of dim 34 over space (5, 10)>
        >>> y.join(z)
        <TensorSubspace of dim 50 over space (5, 10)>
        >>> y.contains(x.join(y))
        False
        >>> x.join(y).contains(y)
        True
        """

        self.assert_compatible(other)
        b_cat = np.concatenate((self._basis, other._basis), axis=0)
        cfg = self._config_kw.copy()
        cfg['dtype'] = np.result_type(self._dtype, other._dtype)
        return self.from_span(b_cat, **cfg)

    def intersection(self, other):
        """
        Intersection of spaces.

        >>> x = TensorSubspace.from_span(np.random.randn(4,5,10))
        >>> y = TensorSubspace.from_span(np.random.randn(30,5,10))
        >>> z = TensorSubspace.from_span(np.random.randn(30,5,10))
        >>> y.intersection(z)
        <TensorSubspace of dim 10 over space (5, 10)>
        >>> y.contains(x.intersection(y))
        True
        """

        return self.perp().join(other.perp()).perp()

    def minus(self, other):
        """
        Subspace of first space perpendicular to second space.

        >>> x = TensorSubspace.from_span(np.random.randn(4,5,10))
        >>> y = TensorSubspace.from_span(np.random.randn(30,5,10))
        >>> y.minus(x)
        <TensorSubspace of dim 26 over space (5, 10)>
        """

        return self.intersection(other.perp())

    def mul(self, other):
        """
        Returns span{ x.y : x in self, y in other } for matrix subspaces, where ``other``
        is either a ``TensorSubspace`` or a single matrix.

        >>> S = TensorSubspace.from_span(np.random.randn(2,3,3))
        >>> T = TensorSubspace.from_span(np.random.randn(2,3,3))
        >>> U1 = S.mul(T); U1
        <TensorSubspace of dim 4 over space (3, 3)>
        >>> U2 = TensorSubspace.from_span([ np.dot(x, y) for x in S for y in T ])
        >>> U1.equiv(U2)
        True
        >>> S.mul(-2*np.eye(3)).equiv(S)
        True
        """

        if isinstance(other, TensorSubspace):
            if len(self._col_shp) != 2 or len(other._col_shp) != 2 or \
                    self._col_shp[1] != other._col_shp[0]:
                raise SubspaceError('cannot multiply subspaces over %s and %s' %
                    (self._col_shp, other._col_shp))
            out_shp = (self._col_shp[0], other._col_shp[1])
            if self.dim() == 0 or other.dim() == 0:
                return TensorSubspace.empty(out_shp, **self._config_kw)
            products = np.einsum('iab,jbc->ijac', self._basis, other._basis)
            products = products.reshape((self.dim()*other.dim(),)+out_shp)
        else:
            other = np.asarray(other)
            out_shp = (self._col_shp[0], other.shape[1])
            if self.dim() == 0:
                return TensorSubspace.empty(out_shp, **self._config_kw)
            products = np.array([ np.dot(x, other) for x in self ])
        return TensorSubspace.from_span(products, tol=self._tol)

    def adjoint(self):
        """
        Returns span{ x^dagger : x in self }.

        >>> rho = np.random.randn(3, 4) + 1j*np.random.randn(3, 4)
        >>> S = TensorSubspace.from_span([ rho ])
        >>> S.adjoint()
        <TensorSubspace of dim 1 over space (4, 3)>
        >>> S.adjoint().equiv( TensorSubspace.from_span([ rho.conj().T ]) )
        True
        """

        # The adjoint is an isometry, so the bases map directly.
        return self._nomath_map(lambda x: x.conj().T)

    def kron(self, other):
        """
        Kronecker product of matrix subspaces: span{ kron(x, y) : x in self, y in other }.
        If ``other`` is a single matrix then this is span{ kron(x, other) : x in self }.

        >>> S = TensorSubspace.full((2, 2))
        >>> T = TensorSubspace.from_span(np.random.randn(3, 3, 2))
        >>> S.kron(T)
        <TensorSubspace of dim 12 over space (6, 4)>
        >>> S.kron(np.eye(3))
        <TensorSubspace of dim 4 over space (6, 6)>
        >>> np.eye(6) in S.kron(np.eye(3))
        True
        """

        if not isinstance(other, TensorSubspace):
            other = np.asarray(other)
            return self.kron(TensorSubspace.from_span([ other ], tol=self._tol))

        if len(self._col_shp) != 2 or len(other._col_shp) != 2:
            raise SubspaceError('kron is only defined for matrix subspaces')

        b_b = _kron_stack(self._basis, other._basis)
        # this is simpler, but computing perp_basis manually avoids an svd call
        #return TensorSubspace.from_span(b_b, **self._config_kw)
        bp_b  = _kron_stack(self._perp_basis, other._basis)
        b_bp  = _kron_stack(self._basis, other._perp_basis)
        bp_bp = _kron_stack(self._perp_basis, other._perp_basis)
        b_b_p = np.concatenate((bp_b, b_bp, bp_bp), axis=0)
        cfg = self._config_kw.copy()
        cfg['dtype'] = np.result_type(self._dtype, other._dtype)
        return TensorSubspace(b_b, b_b_p, **cfg)

    def to_basis(self, x):
        """
        Returns a representation of tensor ``x`` as a vector in the basis of
        this subspace.  If ``x`` is not in this subspace, the orthogonal
        projection is used (i.e. the element of the subspace closest to ``x``).

        >>> spc = TensorSubspace.from_span(np.random.randn(4,5,10))
        >>> np.allclose(spc.to_basis(spc[0]), np.array([1,0,0,0]))
        True
        >>> v = np.random.randn(5,10)
        >>> spc.to_basis(v).shape
        (4,)
        >>> w = spc.from_basis(spc.to_basis(v))
        >>> np.allclose(w, spc.project(v))
        True
        """

        x = np.asarray(x)
        if x.shape != self._col_shp:
            raise SubspaceError('element of shape %s is not in a space of shape %s' %
                (x.shape, self._col_shp))
        return np.dot(self._basis_flat.conj(), x.reshape(self._col_dim))

    def from_basis(self, v):
        """
        Returns the element of this subspace corresponding to the given vector,
        which is to be expressed in this subspace's basis.

        >>> spc = TensorSubspace.from_span(np.random.randn(4,5,10))
        >>> np.allclose(spc[1], spc.from_basis([0,1,0,0]))
        True
        """

        v = np.array(v)
        assert len(v.shape) == 1
        assert v.shape[0] == self._dim
        return np.tensordot(v, self._basis, axes=((0,),(0,)))

    def project(self, x):
        """
        Returns the element of this subspace that is the closest to the given
        tensor.

        >>> spc = TensorSubspace.from_span(np.random.randn(4,5,10))
        >>> np.allclose(spc[0], spc.project(spc[0]))
        True
        >>> np.allclose(np.ones((5,10)), spc.project(np.ones((5,10))))
        False
        """

        return self.from_basis(self.to_basis(x))

    def is_perp(self, other):
        """
        Tests whether the given TensorSubspace or vector is perpendicular to this space.

        >>> x = TensorSubspace.from_span(np.random.randn(4,5,10))
        >>> y = TensorSubspace.from_span(np.random.randn(30,5,10))
        >>> x.is_perp(y)
        False
        >>> x.is_perp(x.perp())
        True
        >>> y.minus(x).is_perp(x[0])
        True
        """

        if isinstance(other, TensorSubspace):
            self.assert_compatible(other)
            products = np.dot(self._basis_flat.conj(), other._basis_flat.T)
            return bool(linalg.norm(products) < self._tol)
        else:
            return bool(linalg.norm(self.to_basis(other)) < self._tol)

    def contains(self, other):
        """
        Tests whether the given TensorSubspace or vector is contained in this space.
        Equivalent to ``other in self``.

        >>> x = TensorSubspace.from_span(np.random.randn(4,5,10))
        >>> y = TensorSubspace.from_span(np.random.randn(30,5,10))
        >>> y.contains(x)
        False
        >>> y.join(x).contains(x)
        True
        >>> y.contains(y[0])
        True
        """

        return self.perp().is_perp(other)

    def equiv(self, other):
        """
        Tests whether this subspace is equal to ``other``, to within an error tolerance.

        >>> x = TensorSubspace.from_span(np.random.randn(4,5,10))
        >>> y = TensorSubspace.from_span(np.random.randn(30,5,10))
        >>> x.equiv(y)
        False
        >>> x.intersection(y).equiv(x.perp().join(y.perp()).perp())
        True
        """

        return self.contains(other) and other.contains(self)

    def is_hermitian(self):
        r"""
        A subspace S is Hermitian if :math:`x \in S \iff x^\dagger \in S`.

        >>> S = TensorSubspace.from_span(np.random.randn(4,10,10))
        >>> S.is_hermitian()
        False
        >>> S.join(S.adjoint()).is_hermitian()
        True
        """

        if len(self._col_shp) != 2 or self._col_shp[0] != self._col_shp[1]:
            return False

        for x in self._basis:
            if not self.contains(x.conj().T):
                return False
        return True

    def hermitian_basis(self):
        """
        Compute a basis consisting of Hermitian operators.  This is only allowed for Hermitian
        subspaces (see ``is_hermitian``).  This basis can be used to map real vectors to
        complex operators.

        >>> S = TensorSubspace.from_span(np.random.randn(4,10,10))
        >>> S.hermitian_basis() # S is not Hermitian
        Traceback (most recent call last):
            ...
        ncgraph.exceptions.SubspaceError: 'subspace is not Hermitian'
        >>> T = S.join(S.adjoint())
        >>> hbas = T.hermitian_basis()
        >>> hbas.shape[0] == T.dim()
        True
        >>> x = np.tensordot(np.random.randn(hbas.shape[0]), hbas, axes=([0],[0]))
        >>> np.allclose(x, x.transpose().conjugate())
        True
        >>> x in T
        True
        """

        if self._hermit_cache is not None:
            return self._hermit_cache

        if not self.is_hermitian():
            raise SubspaceError('subspace is not Hermitian')

        n = self._col_shp[0]

        if self._dim == 0:
            self._hermit_cache = np.zeros((0, n, n), dtype=complex)
            return self._hermit_cache

        # x_to_S = [ |a>, <a| ; Si ]
        x_to_S = self._basis.astype(complex).transpose([1, 2, 0])
        # project onto Hermitian space while simulating complex values with
        # reals on the x side
        x_to_S_1  = x_to_S    + np.transpose(x_to_S,    [1, 0, 2]).conj()
        x_to_S_1j = x_to_S*1j + np.transpose(x_to_S*1j, [1, 0, 2]).conj()
        x_to_S = np.concatenate((x_to_S_1, x_to_S_1j), axis=2)

        # decrease parameters by only taking linearly independent subspace
        sqrmat = np.array([x_to_S.real, x_to_S.imag]).reshape(2*(n**2), 2*self._dim)
        (U, s, _V) = linalg.svd(sqrmat)
        n_indep = int(np.sum(s > self._tol))
        S_basis = U[:, :n_indep]
        x_to_S_reduced_real = S_basis.reshape(2,n,n, n_indep)
        x_to_S_reduced = x_to_S_reduced_real[0] + 1j*x_to_S_reduced_real[1]

        hbasis = x_to_S_reduced.transpose([2, 0, 1])
        # correct for numerical error and make it exactly Hermitian
        hbasis = (hbasis + hbasis.conj().transpose([0, 2, 1])) / 2
        assert n_indep == self._dim

        self._hermit_cache = hbasis
        return self._hermit_cache

    def map(self, f):
        r"""
        Returns span{ f(x) : x \in S }.
        """

        if self.dim() == 0:
            return self

        return TensorSubspace.from_span([ f(m) for m in self ], tol=self._tol)

    def _nomath_map(self, f):
        """
        Like map, but assumes the operation preserves orthogonality.
        """

        b_new  = np.array([f(m) for m in self ])
        bp_new = np.array([f(m) for m in self.perp() ])

        if len(b_new) == 0:
            b_new = np.zeros((0,)+bp_new.shape[1:], dtype=bp_new.dtype)
        if len(bp_new) == 0:
            bp_new = np.zeros((0,)+b_new.shape[1:], dtype=b_new.dtype)

        cfg = self._config_kw.copy()
        cfg['dtype'] = np.result_type(b_new.dtype, bp_new.dtype)

        return TensorSubspace(b_new, bp_new, **cfg)

    def transpose(self, axes):
        return self._nomath_map(lambda m: m.transpose(axes))

    def reshape(self, shape):
        return self._nomath_map(lambda m: m.reshape(shape))

    def random_vec(self, rng=None):
        """
        Returns a random vector in this subspace.

        >>> x = TensorSubspace.from_span(np.random.randn(4,5,10))
        >>> v = x.random_vec()
        >>> v in x
        True
        >>> bool(abs(1 - np.linalg.norm(v)) < 1e-13)
        True
        >>> x.equiv(TensorSubspace.from_span([ x.random_vec() for i in range(x.dim()) ]))
        True
        """

        if rng is None:
            rng = np.random

        if self._basis.dtype.kind == 'c':
            v = rng.randn(self._dim) + 1j*rng.randn(self._dim)
        else:
            # if it is not complex or float, then how to make a random number?
            assert self._basis.dtype.kind == 'f'
            v = rng.randn(self._dim)
        v /= linalg.norm(v)
        return self.from_basis(v)

    def random_hermit(self, rng=None):
        """
        Returns a random Hermitian vector in this subspace.

        >>> S = TensorSubspace.from_span(np.random.randn(4,10,10))
        >>> T = S.join(S.adjoint())
        >>> v = T.random_hermit()
        >>> np.allclose(v, v.transpose().conjugate())
        True
        >>> v in T
        True
        """

        if rng is None:
            rng = np.random

        hb = self.hermitian_basis()
        v = rng.randn(len(hb))
        v /= linalg.norm(v)
        return np.tensordot(v, hb, axes=([0],[0]))

    def dim(self):
        """
        Returns the dimension of this subspace.

        >>> x = TensorSubspace.from_span(np.random.randn(4,10,10))
        >>> x.dim()
        4
        """

        return self._dim

    def __len__(self):
        """
        Returns the dimension of this subspace.
        Equivalent to ``self.dim()``.  This method is here because this class
        emulates an array, returning basis vectors with syntax like ``self[0]``.
        """

        return self._dim

    def __getitem__(self, i):
        """
        Returns a basis vector of this subspace.

        >>> S = TensorSubspace.from_span(np.random.randn(4,10,10))
        >>> S[0] in S
        True
        >>> S.equiv(TensorSubspace.from_span([ x for x in S ]))
        True
        """

        return self._basis[i]

    def __iter__(self):
        return iter(self._basis)

    def __contains__(self, other):
        """
        Alias for self.contains(other).

        >>> x = TensorSubspace.from_span(np.random.randn(4,5,10))
        >>> y = TensorSubspace.from_span(np.random.randn(30,5,10))
        >>> y[0] in x
        False
        >>> y[0] in y
        True
        """

        return self.contains(other)
