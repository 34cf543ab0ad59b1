r"""
Noncommutative graphs and the Duan-Severini-Winter number in Python

An S0-graph is an operator subspace S <= L(C^n) that is closed under adjoint,
contains a finite-dimensional von Neumann algebra S0, and is an S0-bimodule.
Classical graphs are the case where S0 is the algebra of diagonal matrices.
This package builds such graphs, decomposes them into blocks, and computes the
weighted DSW number (a quantum generalization of the Lovasz theta function) and
its antiblocker by semidefinite programming.

* Vertex algebras are described by a shape ``((dA_1, dY_1), ..., (dA_k, dY_k))``
  (see ``create_S0_S1``).
* Operator subspaces are ``TensorSubspace`` objects with named set operations
  (``join``, ``perp``, ``contains``, ``adjoint``, ...).
* SDPs are solved with cvxopt; the modelling layer lives in ``ncgraph.sdp``.

>>> import numpy as np
>>> from ncgraph import S0Graph, dsw, dsw_antiblocker, complement
>>> G = S0Graph.pentagon()
>>> abs(dsw(G, np.eye(5)).value - 5**0.5) < 1e-5
True
"""

__version__ = "0.1dev"

########################################
from ncgraph.exceptions import *
from ncgraph.subspace import *
import ncgraph.sdp
from ncgraph.algebra import *
from ncgraph.graph import *
# The star import below rebinds ncgraph.dsw to the function of that name.
from ncgraph import dsw as dsw_module
from ncgraph.dsw import *

__all__ = \
    ncgraph.exceptions.__all__ + \
    ncgraph.subspace.__all__ + \
    ncgraph.algebra.__all__ + \
    ncgraph.graph.__all__ + \
    dsw_module.__all__

def doctest_modules():
    """The modules whose docstrings carry doctests."""

    return [
        ncgraph,
        ncgraph.exceptions,
        ncgraph.subspace,
        ncgraph.sdp,
        ncgraph.algebra,
        ncgraph.graph,
        dsw_module,
    ]

def doctest():
    """Runs all doctests and unit tests."""

    import doctest
    import unittest
    import ncgraph.tests.test_subspace
    import ncgraph.tests.test_sdp
    import ncgraph.tests.test_algebra
    import ncgraph.tests.test_graph
    import ncgraph.tests.test_dsw
    import ncgraph.tests.test_package

    print("\nRunning doctests...")
    for m in doctest_modules():
        print(m.__name__, ('.'*(45-len(m.__name__))), doctest.testmod(m))

    print("\nRunning unit tests...")
    suite = unittest.TestSuite([
        ncgraph.tests.test_subspace.suite(),
        ncgraph.tests.test_sdp.suite(),
        ncgraph.tests.test_algebra.suite(),
        ncgraph.tests.test_graph.suite(),
        ncgraph.tests.test_dsw.suite(),
        ncgraph.tests.test_package.suite(),
    ])
    unittest.TextTestRunner().run(suite)
