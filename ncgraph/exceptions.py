"""
Various exceptions that can be raised by ncgraph functions.
"""

__all__ = [
    'NcGraphError',
    'ShapeError',
    'ConstructionError',
    'AlgebraicAssertionError',
    'SubspaceError',
    'SolverStatusError',
]

class NcGraphError(Exception):
    """
    The generic exception used by ncgraph.  All of this package's other
    exceptions derive from this one.
    """

    def __init__(self, msg):
        Exception.__init__(self, msg)
        self.msg = msg

    def __str__(self):
        return repr(self.msg)

class ShapeError(NcGraphError, ValueError):
    """
    Raised when an algebra shape is malformed: a row that is not a pair, a
    non-positive or non-integer dimension, or no rows at all.

    >>> from ncgraph import create_S0_S1
    >>> create_S0_S1([[1, 2, 3]])
    Traceback (most recent call last):
        ...
    ncgraph.exceptions.ShapeError: 'row length must be 2, got (1, 2, 3)'
    """

    def __init__(self, msg):
        NcGraphError.__init__(self, msg)
        ValueError.__init__(self, msg)

class ConstructionError(NcGraphError, ValueError):
    """
    Raised when a candidate subspace is not an S0-graph.  The attribute
    ``invariant`` names the violated condition: ``'self-adjoint'``,
    ``'contains S0'`` or ``'S0-bimodule'``.
    """

    def __init__(self, invariant, msg=None):
        if msg is None:
            msg = 'S is not an S0-graph: '+invariant
        NcGraphError.__init__(self, msg)
        ValueError.__init__(self, msg)
        self.invariant = invariant

class AlgebraicAssertionError(NcGraphError, AssertionError):
    """
    Raised when the vertex algebra or its commutant fails a self-check.  This
    signals a bug in the construction, not bad input.
    """

    def __init__(self, msg):
        NcGraphError.__init__(self, msg)
        AssertionError.__init__(self, msg)

class SubspaceError(NcGraphError, ValueError):
    """
    Raised when two subspaces are not over the same space, or when an
    operation needing a Hermitian subspace is applied to one that isn't.
    """

    def __init__(self, msg):
        NcGraphError.__init__(self, msg)
        ValueError.__init__(self, msg)

class SolverStatusError(NcGraphError):
    """
    Raised when an SDP did not solve to optimality.  The full solution object,
    including whatever numbers the solver did produce, is kept in
    ``solution`` so that the caller can still inspect it.
    """

    def __init__(self, solution, msg=None):
        if msg is None:
            msg = 'SDP solver returned status '+repr(solution.status)
        NcGraphError.__init__(self, msg)
        self.solution = solution
        self.status = solution.status
