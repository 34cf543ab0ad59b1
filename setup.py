#!/usr/bin/env python

from setuptools import setup
from setuptools import Command
import re

version = [m.group(1) for m in [re.search('__version__ = "(.*)"', line) for line in open('ncgraph/__init__.py').readlines()] if m is not None][0]

cmdclass = { }

######################################################################

# Adapted from sympy
class test_ncgraph(Command):
    """Runs tests."""

    description = "Automatically run the test suite for ncgraph."
    user_options = []  # setuptools complains if this is not here.

    def initialize_options(self):  # setuptools wants this
        pass

    def finalize_options(self):    # this too
        pass

    def run(self):
        import ncgraph
        ncgraph.doctest()

cmdclass.update({'test': test_ncgraph})

######################################################################

setup(
    name = 'ncgraph',
    version = version,
    license = 'BSD',
    keywords = ['quantum', 'graph', 'semidefinite programming', 'numpy'],
    description = 'Noncommutative graphs and the Duan-Severini-Winter number',
    long_description = '''
Noncommutative graphs (S0-graphs) are operator subspaces that are closed under
adjoint and are bimodules over a finite-dimensional algebra S0.  They describe
the confusability structure of quantum channels, generalizing classical graphs.

* Vertex algebras S0 and their commutants are built from a list of block shapes.
* Graphs can be complemented, randomly generated, and decomposed into blocks.
* The weighted Duan-Severini-Winter number and its antiblocker are computed by
  semidefinite programming with cvxopt, with a block-diagonal reduction that is
  much faster when S0 is not trivial.
    ''',
    classifiers=[
        'Development Status :: 3 - Alpha',
        'Intended Audience :: Science/Research',
        'License :: OSI Approved :: BSD License',
        'Operating System :: OS Independent',
        'Programming Language :: Python :: 3',
        'Topic :: Scientific/Engineering :: Mathematics',
        'Topic :: Scientific/Engineering :: Physics',
        ],
    packages = [
        'ncgraph',
        'ncgraph.tests',
    ],
    python_requires = '>=3.8',
    install_requires = [
        'numpy',
        'scipy',
        'cvxopt',
    ],
    extras_require = {
        'test': ['pytest'],
    },
    cmdclass = cmdclass,
)
