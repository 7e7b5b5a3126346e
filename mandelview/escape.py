"""Escape-time evaluation of the Mandelbrot iteration."""

from __future__ import annotations

ESCAPE_RADIUS_SQUARED = 4.0


def escape_time(c: complex, max_iterations: int) -> int:
    """Return the first iteration at which the orbit of ``c`` leaves radius 2.

    The orbit starts at ``z = c`` and is tested before each squaring, so a
    point with ``|c| > 2`` escapes at iteration 0. Points that stay bounded
    for ``max_iterations`` steps return ``max_iterations``.
    """

    c_re = c.real
    c_im = c.imag
    z_re = c_re
    z_im = c_im
    for i in range(max_iterations):
        re2 = z_re * z_re
        im2 = z_im * z_im
        if re2 + im2 > ESCAPE_RADIUS_SQUARED:
            return i
        z_im = 2.0 * z_re * z_im + c_im
        z_re = re2 - im2 + c_re
    return max_iterations
