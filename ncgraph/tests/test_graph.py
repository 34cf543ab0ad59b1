#!/usr/bin/python

import unittest

import numpy as np

from ncgraph.subspace import TensorSubspace
from ncgraph.graph import *
from ncgraph.exceptions import ConstructionError, ShapeError

def is_S0_graph(g):
    S = g.S
    return S.equiv(S.adjoint()) and S.contains(g.S0) and S.equiv(g.S0.mul(S).mul(g.S0))

class GraphTests(unittest.TestCase):
    shapes = [
        ((1, 2),),
        ((2, 1), (1, 2)),
        ((1, 3),),
        ((2, 2), (1, 1)),
    ]

    def setUp(self):
        self.rng = np.random.RandomState(11)

    def testRandomIsValid(self):
        for sig in self.shapes:
            g = random_S0Graph(sig, rng=self.rng)
            self.assertEqual(g.sig, sig)
            self.assertTrue(is_S0_graph(g))

    def testRandomReproducible(self):
        g1 = random_S0Graph([[1, 2], [1, 2]], rng=np.random.RandomState(4))
        g2 = random_S0Graph([[1, 2], [1, 2]], rng=np.random.RandomState(4))
        self.assertTrue(g1 == g2)

    def testComplement(self):
        for sig in self.shapes:
            g = random_S0Graph(sig, rng=self.rng)
            c = complement(g)
            self.assertTrue(is_S0_graph(c))
            self.assertTrue(complement(c) == g)
            self.assertEqual(c.S.dim(), g.n**2 - g.S.dim() + g.S0.dim())

    def testVertexGraph(self):
        for sig in self.shapes:
            g = random_S0Graph(sig, rng=self.rng)
            v = vertex_graph(g)
            self.assertTrue(v.S.equiv(g.S0))
            f = forget_algebra(v)
            self.assertEqual(f.sig, ((1, g.n),))
            self.assertTrue(f.S.equiv(g.S0))
            (T0, T1) = (f.S0, f.S1)
            self.assertEqual(T0.dim(), 1)
            self.assertEqual(T1.dim(), g.n**2)

    def testForgetAlgebraKeepsS(self):
        g = S0Graph.pentagon()
        f = forget_S0(g)
        self.assertTrue(f.S.equiv(g.S))
        self.assertNotEqual(f, g)

    def testComplementOfClassical(self):
        g = S0Graph.pentagon()
        c = complement(g)
        # the complement of the 5-cycle is again a 5-cycle
        self.assertEqual(c.S.dim(), 15)
        m = np.zeros((5, 5))
        m[0, 2] = 1
        self.assertTrue(m in c.S)
        self.assertFalse(m in g.S)

    def testFromAdjmat(self):
        g = S0Graph.from_adjmat(np.array([[0, 1, 0], [1, 0, 0], [0, 0, 0]]))
        self.assertEqual(g.sig, ((1, 1),) * 3)
        self.assertEqual(g.S.dim(), 5)
        self.assertRaises(ValueError, S0Graph.from_adjmat, np.array([[0, 1], [0, 0]]))

    def testEquality(self):
        g = S0Graph.pentagon()
        h = S0Graph(g.sig, TensorSubspace.from_span(list(g.S)[::-1]))
        self.assertTrue(g == h)
        self.assertFalse(g != h)
        self.assertNotEqual(g, complement(g))
        self.assertNotEqual(g, 'pentagon')

    def testEqualityIsPlainBool(self):
        g = S0Graph.pentagon()
        self.assertIs(type(g == S0Graph.pentagon()), bool)
        self.assertIs(type(g == complement(g)), bool)
        self.assertIs(type(g != complement(g)), bool)

    def testCachedProperties(self):
        g = random_S0Graph(((2, 1), (1, 2)), rng=self.rng)
        self.assertIs(g.block_spaces, g.block_spaces)
        self.assertIs(g.S_basis, g.S_basis)
        self.assertEqual(g.S_basis.shape, (g.S.dim(), g.n, g.n))

    def testNotSelfAdjoint(self):
        S = TensorSubspace.from_span([ np.eye(2), np.array([[0, 1], [0, 0]]) ])
        try:
            S0Graph([[1, 2]], S)
        except ConstructionError as e:
            self.assertEqual(e.invariant, 'self-adjoint')
        else:
            self.fail('no exception raised')

    def testMissingS0(self):
        # Hermitian, but without the identity
        S = TensorSubspace.from_span([ np.array([[1, 0], [0, -1]]) ])
        try:
            S0Graph([[1, 2]], S)
        except ConstructionError as e:
            self.assertEqual(e.invariant, 'contains S0')
        else:
            self.fail('no exception raised')

    def testNotBimodule(self):
        # Contains S0 = diagonals and is Hermitian, but S0 S S0 is larger than S.
        S = TensorSubspace.from_span([
            np.diag([1, 0]), np.diag([0, 1]), np.array([[0, 1], [1, 0]]) ])
        try:
            S0Graph([[1, 1], [1, 1]], S)
        except ConstructionError as e:
            self.assertEqual(e.invariant, 'S0-bimodule')
        else:
            self.fail('no exception raised')

    def testWrongSize(self):
        self.assertRaises(ConstructionError, S0Graph, [[1, 3]], TensorSubspace.full((2, 2)))

    def testBadShape(self):
        self.assertRaises(ShapeError, random_S0Graph, [[1, 2, 3]])

class BlockSpaceTests(unittest.TestCase):
    shapes = [
        ((1, 2),),
        ((2, 1), (1, 2)),
        ((2, 2), (1, 3)),
    ]

    def setUp(self):
        self.rng = np.random.RandomState(23)

    def testShapes(self):
        g = random_S0Graph(((2, 2), (1, 3)), rng=self.rng)
        B = get_block_spaces(g)
        self.assertEqual(len(B), 2)
        self.assertEqual(B[0][1].shape(), (2, 3))
        self.assertEqual(B[1][0].shape(), (3, 2))
        self.assertTrue(np.eye(2) in B[0][0])
        self.assertTrue(np.eye(3) in B[1][1])

    def testBlocksAreAdjoint(self):
        g = random_S0Graph(((2, 1), (1, 2)), rng=self.rng)
        B = get_block_spaces(g)
        self.assertTrue(B[1][0].equiv(B[0][1].adjoint()))

    def testReconstruct(self):
        for sig in self.shapes:
            g = random_S0Graph(sig, rng=self.rng)
            self.assertTrue(from_block_spaces(sig, get_block_spaces(g)) == g)

    def testDecompose(self):
        # a self-adjoint block array with the identity in each diagonal block
        rng = self.rng
        sig = ((1, 2), (2, 2))
        R = TensorSubspace.create_random((2, 2), 1, rng=rng)
        D0 = TensorSubspace.from_span([ np.eye(2), np.diag([1, -1]) ])
        D1 = TensorSubspace.from_span([ np.eye(2) ])
        B = [[D0, R.adjoint()], [R, D1]]
        g = from_block_spaces(sig, B)
        B2 = get_block_spaces(g)
        for i in range(2):
            for j in range(2):
                self.assertTrue(B2[i][j].equiv(B[i][j]))

    def testDecomposeAfterReconstruct(self):
        for sig in self.shapes:
            g = random_S0Graph(sig, rng=self.rng)
            B = get_block_spaces(g)
            B2 = get_block_spaces(from_block_spaces(sig, B))
            for (row, row2) in zip(B, B2):
                for (b, b2) in zip(row, row2):
                    self.assertTrue(b.equiv(b2))

    def testPentagonBlocks(self):
        g = S0Graph.pentagon()
        B = get_block_spaces(g)
        dims = np.array([ [ b.dim() for b in row ] for row in B ])
        adj = np.array([
            [1, 1, 0, 0, 1],
            [1, 1, 1, 0, 0],
            [0, 1, 1, 1, 0],
            [0, 0, 1, 1, 1],
            [1, 0, 0, 1, 1]
        ])
        self.assertTrue(np.all(dims == adj))

    def testWrongGridSize(self):
        g = random_S0Graph(((1, 2),), rng=self.rng)
        self.assertRaises(ValueError, from_block_spaces, ((1, 2), (1, 1)), get_block_spaces(g))

def suite():
    return unittest.TestSuite(map(unittest.TestLoader().loadTestsFromTestCase, [
        GraphTests,
        BlockSpaceTests,
    ]))

if __name__ == "__main__":
    unittest.TextTestRunner().run(suite())
