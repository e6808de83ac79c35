"""
ecsweep: sweep erasure-coding shard splits and report storage overhead
and read quorum for each one.
"""
__version__ = "0.1.0"
