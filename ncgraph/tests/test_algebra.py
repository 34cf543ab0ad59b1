#!/usr/bin/python

import unittest

import numpy as np
import numpy.linalg as linalg

from ncgraph.algebra import *
from ncgraph.exceptions import ShapeError

class AlgebraTests(unittest.TestCase):
    shapes = [
        ((1, 2),),
        ((2, 1),),
        ((2, 1), (1, 2)),
        ((1, 1), (1, 1), (1, 1)),
        ((2, 3),),
    ]

    def testIdentity(self):
        for sig in self.shapes:
            (S0, S1) = create_S0_S1(sig)
            n = sum(block_sizes(sig))
            self.assertEqual(S0.shape(), (n, n))
            self.assertTrue(np.eye(n) in S0)
            self.assertTrue(np.eye(n) in S1)

    def testDimensions(self):
        for sig in self.shapes:
            (S0, S1) = create_S0_S1(sig)
            self.assertEqual(S0.dim(), sum(dA**2 for (dA, dY) in sig))
            self.assertEqual(S1.dim(), sum(dY**2 for (dA, dY) in sig))

    def testCommute(self):
        rng = np.random.RandomState(5)
        for sig in self.shapes:
            err = check_commutant(sig, samples=100, rng=rng)
            self.assertTrue(err < COMMUTE_TOL)

    def testCommutantErrorIsFloat(self):
        err = check_commutant(((2, 1), (1, 2)), samples=5, rng=np.random.RandomState(6))
        self.assertIs(type(err), float)

    def testKroneckerOrder(self):
        # A is the slow index, Y the fast one
        (S0, S1) = create_S0_S1([[2, 3]])
        a = np.array([[1, 2], [3, 4]])
        y = np.array([[1, 2, 0], [0, 1, 5], [7, 0, 1]])
        self.assertTrue(np.kron(a, np.eye(3)) in S0)
        self.assertTrue(np.kron(np.eye(2), y) in S1)
        self.assertFalse(np.kron(np.eye(3), a) in S0)

    def testBlockDiagonal(self):
        (S0, S1) = create_S0_S1([[1, 2], [1, 1]])
        m = np.zeros((3, 3))
        m[0, 2] = 1
        self.assertFalse(m in S0)
        self.assertFalse(m in S1)
        self.assertTrue(np.diag([1, 1, 2]) in S0)

    def testCached(self):
        (S0, S1) = create_S0_S1([[1, 2]])
        (T0, T1) = create_S0_S1(np.array([[1, 2]]))
        self.assertTrue(S0 is T0)
        self.assertTrue(S1 is T1)

    def testNormalize(self):
        self.assertEqual(algebra_shape([[1, 2], [3, 4]]), ((1, 2), (3, 4)))
        self.assertEqual(algebra_shape(np.array([[2, 2]], dtype=np.int64)), ((2, 2),))

    def testBadShapes(self):
        for sig in [
            [[1, 2, 3]],
            [[1]],
            [],
            [[0, 1]],
            [[1, -2]],
            [[1.5, 2]],
            [[True, 1]],
            5,
        ]:
            self.assertRaises(ShapeError, create_S0_S1, sig)

    def testShapeErrorIsValueError(self):
        self.assertRaises(ValueError, algebra_shape, [[1, 2, 3]])

    def testRowLengthMessage(self):
        try:
            create_S0_S1([[1, 2, 3]])
        except ShapeError as e:
            self.assertEqual(e.msg, 'row length must be 2, got (1, 2, 3)')
        else:
            self.fail('no exception raised')

def suite():
    return unittest.TestSuite(map(unittest.TestLoader().loadTestsFromTestCase, [
        AlgebraTests,
    ]))

if __name__ == "__main__":
    unittest.TextTestRunner().run(suite())
