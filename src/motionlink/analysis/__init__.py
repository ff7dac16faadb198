"""Signal analysis for one completed window.

:mod:`fft` holds the in-place radix-2 transform, :mod:`spectral` extracts the
dominant frequency and peak magnitude per axis, and :mod:`features` derives
the orientation class and magnitude ratios. These modules only touch NumPy
arrays so they can be reused from scripts and tests without any link or
sensor plumbing.
"""
