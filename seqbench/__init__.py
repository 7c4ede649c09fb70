"""
seqbench - an experiment harness for classifiers over labeled numeric sequences.
"""

__version__ = "0.1.0"
