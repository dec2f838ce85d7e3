"""
Models package for the OS Resource Simulator.
Contains process, resource, timeline and Banker's matrix data types.
"""
