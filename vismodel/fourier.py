"""
Fourier Engine
==============

Grid containers and the FFT machinery behind the non-analytic evaluation path.

The composite models never transform anything themselves: they produce
correctly combined Fourier-domain grids and hand them to the functions in this
module, which take care of phase centring, padding and the (inverse) FFT.

Conventions
-----------
- Image coordinates ``x, y`` are in radians, Fourier coordinates ``u, v`` in
  wavelengths.
- Images are ``(ny, nx)`` arrays of *pixel fluxes*, sampled at pixel centres,
  so that ``image.sum()`` is the total flux.
- ``V(u, v) = sum_j F_j exp(-2 pi i (u x_j + v y_j))``. Fourier grids are
  ordered with the zero frequency in the middle (``fftshift`` order).

Usage Example
-------------
>>> grid = ImageGrid(fovx=1e-9, fovy=1e-9, nx=128, ny=128)
>>> vis = np.ones(grid.shape, dtype=complex)      # a point source of unit flux
>>> img = ifft_fouriermap(vis, grid)
>>> round(float(img.flux()), 6)
1.0
"""

import logging
from dataclasses import dataclass
from typing import Callable, Optional, Tuple

import numpy as np
from scipy.fft import fft2, ifft2, fftfreq, fftshift, ifftshift
from scipy.interpolate import RegularGridInterpolator

from .exceptions import ShapeMismatchError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FFTAlg:
    """Settings for the numerical Fourier path"""
    padfac: int = 2  # Zero-padding factor applied before the forward FFT
    npix: int = 256  # Pixels per side of the transient grids built for batch visibilities
    workers: Optional[int] = None  # Forwarded to scipy.fft, None means single threaded

    def __post_init__(self):
        if int(self.padfac) != self.padfac or self.padfac < 1:
            raise ValueError(f"padfac must be a positive integer, got {self.padfac}")
        if int(self.npix) != self.npix or self.npix < 2:
            raise ValueError(f"npix must be an integer >= 2, got {self.npix}")


DEFAULT_ALG = FFTAlg()


@dataclass(frozen=True)
class ImageGrid:
    """
    Regular image grid of ``nx x ny`` pixels covering ``fovx x fovy`` radians,
    centred on the origin.
    """
    fovx: float
    fovy: float
    nx: int
    ny: int

    def __post_init__(self):
        if not (self.fovx > 0 and self.fovy > 0):
            raise ValueError(f"Field of view must be positive, got ({self.fovx}, {self.fovy})")
        if self.nx < 1 or self.ny < 1:
            raise ValueError(f"Grid needs at least one pixel per side, got ({self.nx}, {self.ny})")

    @classmethod
    def covering(cls, extent: float, npix: int) -> "ImageGrid":
        """Square grid whose field of view is the diameter ``2 * extent``."""
        if not extent > 0:
            raise ValueError(f"Cannot build a grid around a model of radial extent {extent}")
        return cls(2 * float(extent), 2 * float(extent), npix, npix)

    @property
    def shape(self) -> Tuple[int, int]:
        return (self.ny, self.nx)

    @property
    def dx(self) -> float:
        return self.fovx / self.nx

    @property
    def dy(self) -> float:
        return self.fovy / self.ny

    @property
    def xitr(self) -> np.ndarray:
        """Pixel-centre x coordinates."""
        return -self.fovx / 2 + self.dx / 2 + self.dx * np.arange(self.nx)

    @property
    def yitr(self) -> np.ndarray:
        """Pixel-centre y coordinates."""
        return -self.fovy / 2 + self.dy / 2 + self.dy * np.arange(self.ny)

    @property
    def uitr(self) -> np.ndarray:
        """u frequencies sampled by an FFT of this grid, ascending."""
        return fftshift(fftfreq(self.nx, self.dx))

    @property
    def vitr(self) -> np.ndarray:
        """v frequencies sampled by an FFT of this grid, ascending."""
        return fftshift(fftfreq(self.ny, self.dy))

    def imagegrid(self) -> Tuple[np.ndarray, np.ndarray]:
        """``(X, Y)`` pixel-centre coordinates, each of shape ``(ny, nx)``."""
        return np.meshgrid(self.xitr, self.yitr)

    def uvgrid(self) -> Tuple[np.ndarray, np.ndarray]:
        """``(U, V)`` Fourier coordinates, each of shape ``(ny, nx)``."""
        return np.meshgrid(self.uitr, self.vitr)

    def scaled(self, alpha: float, beta: float) -> "ImageGrid":
        """Same pixel counts, field of view multiplied by ``(alpha, beta)``."""
        return ImageGrid(self.fovx * alpha, self.fovy * beta, self.nx, self.ny)


@dataclass(frozen=True)
class IntensityMap:
    """Pixel-flux image on an :class:`ImageGrid`."""
    image: np.ndarray
    grid: ImageGrid

    def __post_init__(self):
        if np.shape(self.image) != self.grid.shape:
            raise ShapeMismatchError(
                f"Image of shape {np.shape(self.image)} does not match grid shape {self.grid.shape}")

    def flux(self) -> float:
        return self.image.sum()

    def combine(self, other: "IntensityMap", f: Callable) -> "IntensityMap":
        """Combine two maps on the same grid elementwise with the binary operator ``f``."""
        if self.grid.shape != other.grid.shape:
            raise ShapeMismatchError(
                f"Cannot combine images of shape {self.grid.shape} and {other.grid.shape}")
        return IntensityMap(f(self.image, other.image), self.grid)


def _phase(U, V, x0: float, y0: float, sign: int) -> np.ndarray:
    return np.exp(sign * 2j * np.pi * (U * x0 + V * y0))


def phasecenter(vis: np.ndarray, grid: ImageGrid) -> np.ndarray:
    """
    Move the phase reference of a raw FFT from the corner pixel to the origin.

    Parameters
    ----------
    vis : ndarray, shape (ny, nx)
        Fourier grid in ``fftshift`` order, referenced to pixel ``[0, 0]``.
    grid : ImageGrid
        Grid the image was sampled on.
    """
    U, V = grid.uvgrid()
    return vis * _phase(U, V, grid.xitr[0], grid.yitr[0], -1)


def phasedecenter(vis: np.ndarray, grid: ImageGrid) -> np.ndarray:
    """Inverse of :func:`phasecenter`, applied before an inverse FFT."""
    U, V = grid.uvgrid()
    return vis * _phase(U, V, grid.xitr[0], grid.yitr[0], 1)


class FourierCache:
    """
    Centred Fourier grid of a rendered image together with an interpolator.

    Parameters
    ----------
    vis : ndarray, shape (nv, nu)
        Complex visibilities in ``fftshift`` order.
    uitr, vitr : ndarray
        Ascending frequency axes of ``vis``.
    """

    def __init__(self, vis: np.ndarray, uitr: np.ndarray, vitr: np.ndarray):
        self.vis = vis
        self.uitr = uitr
        self.vitr = vitr
        # Real and imaginary parts are interpolated separately
        self._real = RegularGridInterpolator((vitr, uitr), vis.real, method='linear',
                                             bounds_error=False, fill_value=0.0)
        self._imag = RegularGridInterpolator((vitr, uitr), vis.imag, method='linear',
                                             bounds_error=False, fill_value=0.0)

    def interpolate(self, u, v) -> np.ndarray:
        """Visibilities at arbitrary ``(u, v)``; zero outside the sampled band."""
        u = np.asarray(u, dtype=float)
        v = np.asarray(v, dtype=float)
        if u.shape != v.shape:
            raise ShapeMismatchError(f"u and v have different shapes {u.shape} and {v.shape}")
        if u.size and (u.min() < self.uitr[0] or u.max() > self.uitr[-1]
                       or v.min() < self.vitr[0] or v.max() > self.vitr[-1]):
            logger.warning("Requested uv points beyond the cached band (|u| <= %.3g, |v| <= %.3g); "
                           "they are set to zero", self.uitr[-1], self.vitr[-1])
        points = np.stack([v.ravel(), u.ravel()], axis=-1)
        out = self._real(points) + 1j * self._imag(points)
        return out.reshape(u.shape)


def _forward(image: np.ndarray, grid: ImageGrid, x0: float, y0: float, workers) -> np.ndarray:
    vis = fftshift(fft2(image, workers=workers))
    U, V = grid.uvgrid()
    return vis * _phase(U, V, x0, y0, -1)


def fft_intensitymap(img: IntensityMap, alg: FFTAlg = DEFAULT_ALG) -> FourierCache:
    """
    Zero-pad an intensity map by ``alg.padfac`` and transform it.

    Padding refines the uv sampling so the cache interpolates accurately
    between frequencies.
    """
    ny, nx = img.grid.shape
    pny, pnx = alg.padfac * ny, alg.padfac * nx
    oy, ox = (pny - ny) // 2, (pnx - nx) // 2
    padded = np.zeros((pny, pnx), dtype=np.result_type(img.image, float))
    padded[oy:oy + ny, ox:ox + nx] = img.image
    pgrid = ImageGrid(pnx * img.grid.dx, pny * img.grid.dy, pnx, pny)

    # Phase reference is the centre of padded[0, 0]
    x0 = img.grid.xitr[0] - ox * img.grid.dx
    y0 = img.grid.yitr[0] - oy * img.grid.dy
    logger.debug("FFT of %dx%d image padded to %dx%d", nx, ny, pnx, pny)
    vis = _forward(padded, pgrid, x0, y0, alg.workers)
    return FourierCache(vis, pgrid.uitr, pgrid.vitr)


def fouriermap_from_image(img: IntensityMap, alg: FFTAlg = DEFAULT_ALG) -> np.ndarray:
    """Unpadded FFT of an intensity map, sampled exactly on ``img.grid.uvgrid()``."""
    return phasecenter(fftshift(fft2(img.image, workers=alg.workers)), img.grid)


def ifft_fouriermap(vis: np.ndarray, grid: ImageGrid, alg: FFTAlg = DEFAULT_ALG) -> IntensityMap:
    """
    Turn a centred Fourier grid into an intensity map.

    The grid is phase-decentred, shifted so the zero frequency sits at index
    ``[0, 0]``, transformed with an unnormalized inverse FFT and divided by
    ``nx * ny``.
    """
    vis = np.asarray(vis)
    if vis.shape != grid.shape:
        raise ShapeMismatchError(f"Fourier grid of shape {vis.shape} does not match image grid {grid.shape}")
    shifted = ifftshift(phasedecenter(vis, grid))
    img = ifft2(shifted, norm='forward', workers=alg.workers)
    return IntensityMap(np.real(img) / (grid.nx * grid.ny), grid)
