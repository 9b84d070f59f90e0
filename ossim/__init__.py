"""
Operating-system resource simulator.

Pure simulation engines for CPU scheduling, fixed-partition memory
allocation, disk-head scheduling and a toy file directory, plus a small
command-line front end for experimenting with them.
"""

__all__ = ["cli", "cpu_scheduling", "disk_scheduling", "files", "memory_allocation"]
