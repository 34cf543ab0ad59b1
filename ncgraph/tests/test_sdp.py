#!/usr/bin/python

import unittest

import numpy as np
import numpy.linalg as linalg

from ncgraph.sdp import *
from ncgraph.sdp import AffineExpr, mat_cplx_to_real, mat_real_to_cplx
from ncgraph.exceptions import SolverStatusError

class AffineExprTests(unittest.TestCase):
    def testArithmetic(self):
        v = SdpVariables()
        X = v.hermitian(2)
        t = v.scalar()
        W = np.array([[1, 2j], [-2j, 3]])
        E = t*np.eye(2) - X + W
        self.assertEqual(E.shape, (2, 2))
        self.assertEqual(E.nvars, 5)
        x = np.arange(5.0)
        expected = x[4]*np.eye(2) - X.value(x) + W
        self.assertTrue(np.allclose(E.value(x), expected))
        self.assertTrue(np.allclose((W - X).value(x), W - X.value(x)))
        self.assertTrue(np.allclose((-X / 2).value(x), -X.value(x) / 2))

    def testHermitianVariable(self):
        v = SdpVariables()
        X = v.hermitian(3)
        self.assertEqual(X.nvars, 9)
        x = np.random.RandomState(1).randn(9)
        Xv = X.value(x)
        self.assertTrue(np.allclose(Xv, Xv.conj().T))

    def testProductOfExpressionsRejected(self):
        v = SdpVariables()
        t = v.scalar()
        self.assertRaises(TypeError, lambda: t * t)

    def testLinearHelpers(self):
        v = SdpVariables()
        X = v.hermitian(4)
        x = np.random.RandomState(2).randn(16)
        Xv = X.value(x)
        self.assertTrue(np.allclose(partial_trace(X, (2, 2)).value(x), partial_trace(Xv, (2, 2))))
        self.assertTrue(np.allclose(kron_eye(X, 2).value(x), np.kron(np.eye(2), Xv)))
        self.assertTrue(np.allclose(vec(X).value(x), Xv.T.reshape(16)))
        self.assertAlmostEqual(trace(X).value(x).real, np.trace(Xv).real)
        self.assertTrue(np.allclose(X.H.value(x), Xv.conj().T))
        self.assertTrue(np.allclose(block_diag(X, np.eye(1)).value(x)[:4, :4], Xv))
        self.assertTrue(np.allclose(block_diag(X, np.eye(1)).value(x)[4, :4], 0))
        W = np.diag([1.0, 2, 3, 4])
        self.assertAlmostEqual(real_inner(W, X).value(x).real, np.trace(np.dot(W, Xv)).real)

    def testViews(self):
        rng = np.random.RandomState(4)
        basis = rng.randn(3, 2, 3) + 1j*rng.randn(3, 2, 3)
        M = SdpVariables().from_basis(basis)
        x = rng.randn(3)
        Mv = M.value(x)
        self.assertEqual(M.T.shape, (3, 2))
        self.assertTrue(np.allclose(M.T.value(x), Mv.T))
        self.assertTrue(np.allclose(M.conj().value(x), Mv.conj()))
        self.assertTrue(np.allclose(M.H.value(x), Mv.conj().T))
        self.assertTrue(np.allclose(M.reshape((6,)).value(x), Mv.reshape(6)))
        self.assertTrue(np.allclose(M.reshape((3, 2)).transpose((1, 0)).value(x),
            Mv.reshape(3, 2).T))
        self.assertTrue(np.allclose(M.apply(lambda a: 2*a[::-1]).value(x), 2*Mv[::-1]))

    def testPartialTraceNumeric(self):
        a = np.diag([1.0, 2.0])
        b = np.array([[1, 1j], [-1j, 2]])
        self.assertTrue(np.allclose(partial_trace(np.kron(a, b), (2, 2)), 3*b))

    def testBmatZeroBlocks(self):
        M = bmat([[np.eye(2), None], [None, 3*np.eye(1)]])
        self.assertTrue(np.allclose(M, np.diag([1, 1, 3])))

    def testRealEmbedding(self):
        rng = np.random.RandomState(3)
        M = rng.randn(3, 3) + 1j*rng.randn(3, 3)
        M = M + M.conj().T
        R = mat_cplx_to_real(M)
        self.assertTrue(np.allclose(R, R.T))
        self.assertTrue(np.allclose(mat_real_to_cplx(R), M))
        # eigenvalues are those of M/sqrt(2), each doubled
        ev = np.sort(linalg.eigvalsh(M)) / np.sqrt(2)
        self.assertTrue(np.allclose(np.sort(linalg.eigvalsh(R)), np.sort(np.concatenate((ev, ev)))))

class SolveTests(unittest.TestCase):
    def testLargestEigenvalue(self):
        v = SdpVariables()
        t = v.scalar()
        M = np.array([[2, 1j], [-1j, 2]])
        sol = minimize(t, [psd(t*np.eye(2) - M)]).solve()
        self.assertEqual(sol.status, OPTIMAL)
        self.assertAlmostEqual(sol.value, 3, places=5)

    def testMaximizeTrace(self):
        # max Tr(W X) over density matrices is the largest eigenvalue of W
        v = SdpVariables()
        (X, X_psd) = v.psd_hermitian(2)
        W = np.array([[1, 1], [1, 1]])
        prob = maximize(real_inner(W, X), [X_psd, zero(trace(X) - 1)])
        sol = prob.solve()
        self.assertTrue(sol.is_optimal())
        self.assertAlmostEqual(sol.value, 2, places=5)
        Xv = sol.evaluate(X)
        self.assertAlmostEqual(np.trace(Xv).real, 1, places=5)

    def testNonneg(self):
        v = SdpVariables()
        t = v.scalar()
        sol = maximize(t, [nonneg(1 - t), nonneg(t)]).solve()
        self.assertEqual(sol.status, OPTIMAL)
        self.assertAlmostEqual(sol.value, 1, places=5)

    def testInconsistentEqualities(self):
        v = SdpVariables()
        t = v.scalar()
        sol = minimize(t, [zero(t - 1), zero(t - 2)]).solve()
        self.assertEqual(sol.status, INFEASIBLE)
        self.assertTrue(sol.x is None)
        self.assertRaises(SolverStatusError, sol.evaluate, t)

    def testUnbounded(self):
        v = SdpVariables()
        (X, X_psd) = v.psd_hermitian(2)
        sol = maximize(real_inner(np.eye(2), X), [X_psd]).solve()
        self.assertEqual(sol.status, UNBOUNDED)
        self.assertTrue(sol.value is None)

    def testOptionsOverride(self):
        v = SdpVariables()
        t = v.scalar()
        M = np.diag([1.0, 5.0])
        sol = minimize(t, [psd(t*np.eye(2) - M)]).solve(maxiters=1)
        self.assertNotEqual(sol.status, OPTIMAL)

    def testProblemIsImmutableValue(self):
        v = SdpVariables()
        t = v.scalar()
        cons = [nonneg(t - 1)]
        prob = minimize(t, cons)
        cons.append(nonneg(t - 5))
        self.assertEqual(len(prob.constraints), 1)
        self.assertAlmostEqual(prob.solve().value, 1, places=5)

def suite():
    return unittest.TestSuite(map(unittest.TestLoader().loadTestsFromTestCase, [
        AffineExprTests,
        SolveTests,
    ]))

if __name__ == "__main__":
    unittest.TextTestRunner().run(suite())
