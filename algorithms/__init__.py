"""
Algorithms package for the OS Concepts Simulator.
Contains Banker's Algorithm, page replacement and CPU scheduling implementations.
"""
