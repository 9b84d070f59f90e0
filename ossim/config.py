"""
Default values used by the command-line front end.
"""

# CPU scheduling
DEFAULT_QUANTUM = 2
DEFAULT_COMPARE_POLICIES = ["fcfs", "sjf-np", "sjf-p", "priority-np", "priority-p", "round-robin"]

# Memory allocation (fixed partitions, in KB)
DEFAULT_BLOCK_SIZES = (500, 300, 200, 400, 600, 250, 350)
DEFAULT_ALLOCATION_POLICY = "first-fit"

# Disk scheduling
DEFAULT_HEAD_POSITION = 53
DEFAULT_MAX_CYLINDER = 199
DEFAULT_DISK_POLICY = "fcfs"
DEFAULT_DIRECTION = "right"

# Step-by-step replay
DEFAULT_STEP_DELAY = 0.3
