"""
Model evaluation functions
==========================

Free-function entry points to the model algebra. Each function dispatches on
the analyticity of the model it is given: closed-form expressions are used on
``IsAnalytic`` axes and the gridded FFT path on ``NotAnalytic`` ones, node by
node through composite trees.

Usage Example
-------------
>>> from vismodel import Disk, Gaussian, smoothed
>>> from vismodel.core import flux, visibility, intensitymap
>>> m = smoothed(Disk(radius=1e-9), 2e-10) + Gaussian(sigma=5e-10)
>>> round(float(flux(m)), 6)
2.0
>>> img = intensitymap(m, 6e-9, 6e-9, 128, 128)
>>> img.image.shape
(128, 128)
"""

import logging
from typing import Optional

import numpy as np

from .exceptions import CapabilityError, ShapeMismatchError
from .fourier import DEFAULT_ALG, FFTAlg, ImageGrid, IntensityMap
from .models.base.composite import components
from .models.base.model import AbstractModel

logger = logging.getLogger(__name__)

__all__ = [
    'visibility', 'visibilities', 'intensity', 'intensities',
    'intensitymap', 'fouriermap', 'flux', 'radialextent', 'components',
    'modelimage',
]


def _check_pair(a, b, names: str):
    if np.shape(a) != np.shape(b):
        raise ShapeMismatchError(f"{names} have different shapes {np.shape(a)} and {np.shape(b)}")


def _grid(m: AbstractModel, fovx: float, fovy: float, nx: int, ny: int) -> ImageGrid:
    grid = ImageGrid(fovx, fovy, nx, ny)
    extent = float(m.radialextent())
    if 2 * extent > min(fovx, fovy):
        logger.warning("Field of view %.3g x %.3g rad is smaller than the diameter %.3g rad of %s; "
                       "emission will be cut off or aliased", fovx, fovy, 2 * extent, type(m).__name__)
    return grid


def visibility(m: AbstractModel, u: float, v: float) -> complex:
    """
    Complex visibility of ``m`` at a single spatial frequency.

    Parameters
    ----------
    m : AbstractModel
        Model to evaluate. Its visibility axis must be ``IsAnalytic``.
    u, v : float
        Spatial frequency in wavelengths.

    Raises
    ------
    CapabilityError
        If ``m`` has no closed-form visibility; use :func:`visibilities`.
    """
    if not m.visanalytic:
        raise CapabilityError(
            f"{type(m).__name__} has no closed-form visibility; use visibilities() on arrays")
    return m.visibility_point(u, v)


def visibilities(m: AbstractModel, u, v, alg: Optional[FFTAlg] = None) -> np.ndarray:
    """
    Complex visibilities of ``m`` over paired arrays of spatial frequencies.

    Works for every model. Non-analytic models are rendered on a grid and
    the FFT is interpolated at ``(u, v)``.

    Parameters
    ----------
    u, v : array_like
        Spatial frequencies in wavelengths, same shape.
    alg : FFTAlg, optional
        Settings for the numerical path. Defaults to ``DEFAULT_ALG``.

    Returns
    -------
    vis : ndarray
        Complex visibilities with the shape of ``u``.
    """
    _check_pair(u, v, "u and v")
    return m.visibilities(u, v, alg or DEFAULT_ALG)


def intensity(m: AbstractModel, x: float, y: float) -> float:
    """
    Intensity of ``m`` at sky position ``(x, y)`` in radians.

    Raises ``CapabilityError`` if ``m`` has no closed-form intensity, in
    which case :func:`intensitymap` renders it on a grid.
    """
    if not m.imanalytic:
        raise CapabilityError(
            f"{type(m).__name__} has no closed-form intensity; use intensitymap()")
    return m.intensity_point(x, y)


def intensities(m: AbstractModel, x, y) -> np.ndarray:
    """Intensities of ``m`` over paired arrays of sky positions."""
    _check_pair(x, y, "x and y")
    return m.intensities(x, y)


def intensitymap(m: AbstractModel, fovx: float, fovy: float, nx: int, ny: int,
                 alg: Optional[FFTAlg] = None) -> IntensityMap:
    """
    Image of ``m`` as pixel fluxes on an ``nx x ny`` grid centred on the origin.

    Parameters
    ----------
    fovx, fovy : float
        Field of view in radians.
    nx, ny : int
        Number of pixels along x and y.
    alg : FFTAlg, optional
        Settings for the numerical path. Defaults to ``DEFAULT_ALG``.
    """
    return m.intensitymap(_grid(m, fovx, fovy, nx, ny), alg or DEFAULT_ALG)


def fouriermap(m: AbstractModel, fovx: float, fovy: float, nx: int, ny: int,
               alg: Optional[FFTAlg] = None) -> np.ndarray:
    """
    Visibilities of ``m`` on the Fourier grid of an ``nx x ny`` image grid.

    The result is a ``(ny, nx)`` complex array in ``fftshift`` order, sampled
    at ``ImageGrid(fovx, fovy, nx, ny).uvgrid()``.
    """
    return m.fouriermap(_grid(m, fovx, fovy, nx, ny), alg or DEFAULT_ALG)


def flux(m: AbstractModel):
    """Total flux of ``m``."""
    return m.flux()


def radialextent(m: AbstractModel):
    """Radius in radians outside of which ``m`` has negligible emission."""
    return m.radialextent()


def modelimage(m: AbstractModel, grid: ImageGrid, alg: Optional[FFTAlg] = None) -> AbstractModel:
    """
    Copy of ``m`` with every non-analytic leaf pre-rendered on ``grid``.

    Analytic subtrees are shared with ``m``, which is left untouched.
    """
    return m.modelimage(grid, alg or DEFAULT_ALG)
