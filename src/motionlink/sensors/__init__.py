"""Accelerometer sample sources.

:mod:`accelerometer` turns JSON or CSV text lines into :class:`Sample`
objects, :mod:`source` runs a line stream (stdin, a file, or a remote logger
over SSH) on a background thread, and :mod:`synthetic` generates sinusoidal
test signals.
"""
