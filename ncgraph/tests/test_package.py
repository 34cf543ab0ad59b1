#!/usr/bin/python

import doctest
import types
import unittest

import ncgraph

class PackageTests(unittest.TestCase):
    def testTopLevelNames(self):
        # the dsw function shadows the module of the same name
        self.assertTrue(callable(ncgraph.dsw))
        self.assertFalse(isinstance(ncgraph.dsw, types.ModuleType))
        for name in ['S0Graph', 'TensorSubspace', 'create_S0_S1', 'dsw', 'dsw_antiblocker',
                'complement', 'NcGraphError']:
            self.assertTrue(name in ncgraph.__all__, name)
            self.assertTrue(hasattr(ncgraph, name), name)

    def testDoctestModules(self):
        mods = ncgraph.doctest_modules()
        self.assertEqual(len(mods), 7)
        for m in mods:
            self.assertIsInstance(m, types.ModuleType)
        self.assertEqual(mods[-1].__name__, 'ncgraph.dsw')

    def testDoctestsPass(self):
        for m in ncgraph.doctest_modules():
            result = doctest.testmod(m)
            self.assertEqual(result.failed, 0, m.__name__)
            self.assertTrue(result.attempted > 0, m.__name__)

def suite():
    return unittest.TestSuite(map(unittest.TestLoader().loadTestsFromTestCase, [
        PackageTests,
    ]))

if __name__ == "__main__":
    unittest.TextTestRunner().run(suite())
