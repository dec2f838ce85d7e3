"""
Algorithms package for the OS Resource Simulator.
Contains CPU scheduling, wait-for-graph cycle detection and Banker's avoidance.
"""
