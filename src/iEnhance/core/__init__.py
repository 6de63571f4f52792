"""Core enhancement pipeline: pixel kernels, background execution and codec."""
