"""
Brightness Distribution Models
==============================

This module defines :class:`AbstractModel`, the contract every model in the
package satisfies, whether it is a primitive (a disk, a Gaussian, ...) or a
composite built from other models with ``+``, :func:`convolved` or
:func:`smoothed`.

A model describes a sky brightness distribution I(x, y) and, equivalently,
its visibility function

    V(u, v) = ∫ dx dy I(x, y) exp(-2πi(ux + vy))

so that V(0, 0) is the total flux. Each of the two domains carries an
analyticity trait (see :mod:`vismodel.models.base.analyticity`). On an
``IsAnalytic`` axis the model provides a pointwise formula; on a
``NotAnalytic`` axis it is evaluated on a grid and Fourier transformed.

Methods to Implement
--------------------
flux : Total flux of the model
radialextent : Radius enclosing the emission, used to size grids
get_params : Parameters of the model as a dict
visibility_point : Closed-form visibility, when ``visanalytic`` is ``IsAnalytic``
intensity_point : Closed-form intensity, when ``imanalytic`` is ``IsAnalytic``
intensitymap : Image on a grid, required when ``imanalytic`` is ``NotAnalytic``

Provided Methods
----------------
visibilities, intensities : Batch evaluation over arrays
fouriermap : Visibilities sampled on the Fourier grid of an image grid
modelimage : Tree with pre-rendered grids substituted for non-analytic leaves
visibility_squared, visibility_squared_jacobian : |V|² and its gradient

Notes
-----
- Image coordinates are in radians, Fourier coordinates in wavelengths.
- Models are immutable once built. Anything that looks like a modification
  (``with_params``, ``modelimage``) returns a new model.
"""

import logging
import numbers
from abc import ABC, abstractmethod
from typing import Any, Callable, Dict

import numpy as np
import jax
import jax.numpy as jnp

from ...exceptions import CapabilityError, ConstructionError, ShapeMismatchError
from ...fourier import DEFAULT_ALG, FFTAlg, ImageGrid, IntensityMap, fouriermap_from_image
from .analyticity import IsAnalytic

logger = logging.getLogger(__name__)


def _elementwise(f: Callable, a, b, dtype) -> np.ndarray:
    """Evaluate a scalar function over paired arrays, one point at a time."""
    a = np.asarray(a)
    b = np.asarray(b)
    if a.shape != b.shape:
        raise ShapeMismatchError(f"Paired arrays have different shapes {a.shape} and {b.shape}")
    out = np.empty(a.shape, dtype=dtype)
    for idx in np.ndindex(a.shape):
        out[idx] = f(a[idx], b[idx])
    return out


def _positive(value) -> bool:
    """True if value > 0. Traced values (inside jax transformations) are not checked."""
    try:
        return bool(value > 0)
    except jax.errors.ConcretizationTypeError:
        return True


def _params_equal(p1, p2) -> bool:
    if isinstance(p1, dict) or isinstance(p2, dict):
        if not (isinstance(p1, dict) and isinstance(p2, dict)) or p1.keys() != p2.keys():
            return False
        return all(_params_equal(p1[k], p2[k]) for k in p1)
    return np.array_equal(np.asarray(p1), np.asarray(p2))


def _params_key(params):
    if isinstance(params, dict):
        return tuple((k, _params_key(params[k])) for k in sorted(params))
    arr = np.asarray(params)
    return (arr.shape, tuple(arr.ravel().tolist()))


def _format_param(value) -> str:
    arr = np.asarray(value)
    return repr(arr.item()) if arr.size == 1 else repr(arr)


class AbstractModel(ABC):
    """
    Abstract base class for sky brightness models.

    Subclasses fix ``visanalytic`` and ``imanalytic`` as class attributes, so
    the evaluation strategy is known from the type alone. Composite models
    override them with values computed once at construction.
    """

    visanalytic = IsAnalytic
    imanalytic = IsAnalytic

    dtype = np.dtype(np.float64)

    def _set_dtype(self, dtype) -> None:
        dtype = np.dtype(dtype)
        if not np.issubdtype(dtype, np.floating):
            raise ConstructionError(f"Model parameters must be real floating point, got {dtype}")
        self.dtype = dtype

    def _param(self, value):
        """Cast a parameter to the model precision."""
        return jnp.asarray(value, dtype=self.dtype)

    @property
    def complex_dtype(self) -> np.dtype:
        return np.result_type(self.dtype, np.complex64)

    @abstractmethod
    def flux(self):
        """
        Total flux F = ∫ I(x, y) dx dy, equal to V(0, 0).

        Returns
        -------
        flux : float
            Total flux of the model.
        """
        pass

    @abstractmethod
    def radialextent(self):
        """
        Radius (radians) outside of which the model has negligible emission.

        Used to choose fields of view for grid-based evaluation.
        """
        pass

    @abstractmethod
    def get_params(self) -> Dict[str, Any]:
        """
        Return the parameters that define the model.

        The keys must match the constructor arguments so that
        :meth:`with_params` can rebuild the model.
        """
        pass

    def with_params(self, params: Dict[str, Any]) -> "AbstractModel":
        """New model of the same type built from ``params``; ``self`` is untouched."""
        return type(self)(**params, dtype=self.dtype)

    def visibility_point(self, u, v):
        """
        Closed-form visibility at spatial frequency (u, v).

        Only defined for models whose ``visanalytic`` is ``IsAnalytic``.
        """
        raise CapabilityError(
            f"{type(self).__name__} has no closed-form visibility; evaluate it in batch "
            "with visibilities() or on a grid with fouriermap()")

    def intensity_point(self, x, y):
        """
        Closed-form intensity at sky position (x, y).

        Only defined for models whose ``imanalytic`` is ``IsAnalytic``.
        """
        raise CapabilityError(
            f"{type(self).__name__} has no closed-form intensity; evaluate it on a grid "
            "with intensitymap()")

    def visibilities(self, u, v, alg: FFTAlg = DEFAULT_ALG):
        """
        Visibilities over paired arrays of spatial frequencies.

        The default calls :meth:`visibility_point` once per point. Models
        without a closed form are rendered on a transient grid covering
        their radial extent and the FFT of that image is interpolated.

        Parameters
        ----------
        u, v : array_like
            Spatial frequencies in wavelengths, same shape.
        alg : FFTAlg, optional
            Settings for the transient grid and its FFT when the model has
            no closed-form visibility.

        Returns
        -------
        vis : ndarray
            Complex visibilities with the shape of ``u``.
        """
        if self.visanalytic:
            return _elementwise(self.visibility_point, u, v, self.complex_dtype)
        return self._visibilities_numeric(u, v, alg)

    def _visibilities_numeric(self, u, v, alg: FFTAlg):
        from ..sources.grid_source import ModelImage

        grid = ImageGrid.covering(self.radialextent(), alg.npix)
        logger.debug("Rendering %s on a transient %dx%d grid, fov %.3g rad",
                     type(self).__name__, grid.nx, grid.ny, grid.fovx)
        return ModelImage(self, grid, alg).visibilities(u, v)

    def intensities(self, x, y):
        """Intensities over paired arrays of sky positions (radians)."""
        if self.imanalytic:
            return _elementwise(self.intensity_point, x, y, self.dtype)
        raise CapabilityError(
            f"{type(self).__name__} has no closed-form intensity; use intensitymap()")

    def fouriermap(self, grid: ImageGrid, alg: FFTAlg = DEFAULT_ALG) -> np.ndarray:
        """
        Visibilities on the Fourier grid matching an image grid.

        Parameters
        ----------
        grid : ImageGrid
            Image grid; the frequencies are ``grid.uvgrid()``.
        alg : FFTAlg, optional
            Settings for the FFT when the model has no closed-form visibility.

        Returns
        -------
        vis : ndarray, shape (ny, nx)
            Complex visibilities in ``fftshift`` order.
        """
        if self.visanalytic:
            U, V = grid.uvgrid()
            return np.asarray(self.visibilities(U, V))
        return fouriermap_from_image(self.intensitymap(grid, alg), alg)

    def intensitymap(self, grid: ImageGrid, alg: FFTAlg = DEFAULT_ALG) -> IntensityMap:
        """
        Image of the model on ``grid`` as pixel fluxes.

        Models with a closed-form intensity are sampled at the pixel centres
        and multiplied by the pixel area. Others must override this method.
        """
        if self.imanalytic:
            X, Y = grid.imagegrid()
            return IntensityMap(np.asarray(self.intensities(X, Y)) * grid.dx * grid.dy, grid)
        raise CapabilityError(f"{type(self).__name__} does not provide an intensity map")

    def modelimage(self, grid: ImageGrid, alg: FFTAlg = DEFAULT_ALG) -> "AbstractModel":
        """
        Model with a pre-rendered image substituted for a non-analytic model.

        Analytic models are returned unchanged.
        """
        if self.visanalytic:
            return self
        from ..sources.grid_source import ModelImage

        return ModelImage(self, grid, alg)

    def visibility_squared(self, u, v, params: dict = None):
        """
        Squared visibility magnitude |V(u, v)|².

        Parameters
        ----------
        u, v : float
            Spatial frequency in wavelengths.
        params : dict, optional
            Model parameters. If None, uses current model parameters.
        """
        model = self if params is None else self.with_params(params)
        return jnp.abs(model.visibility_point(u, v))**2

    def visibility_squared_jacobian(self, u, v, params: dict = None):
        """
        Jacobian of |V|² with respect to the model parameters.

        Returns
        -------
        jacobian : dict
            Same structure as :meth:`get_params`, holding the partial
            derivatives of |V|².
        """
        if not self.visanalytic:
            raise CapabilityError(f"{type(self).__name__} has no closed-form visibility to differentiate")

        def pure_visibility_squared(params):
            return self.visibility_squared(u, v, params)

        if params is None:
            params = self.get_params()

        return jax.jacrev(pure_visibility_squared)(params)

    def __add__(self, other):
        if not isinstance(other, AbstractModel):
            return NotImplemented
        from .composite import added
        return added(self, other)

    def __sub__(self, other):
        if not isinstance(other, AbstractModel):
            return NotImplemented
        from .composite import subtract
        return subtract(self, other)

    def __mul__(self, other):
        if not isinstance(other, numbers.Real):
            return NotImplemented
        from ..modifiers import renormed
        return renormed(self, other)

    __rmul__ = __mul__

    def __neg__(self):
        from ..modifiers import renormed
        return renormed(self, -1.0)

    def __eq__(self, other):
        if type(self) is not type(other):
            return NotImplemented
        return self.dtype == other.dtype and _params_equal(self.get_params(), other.get_params())

    def __hash__(self):
        return hash((type(self), _params_key(self.get_params())))

    def __repr__(self):
        args = ", ".join(f"{k}={_format_param(v)}" for k, v in self.get_params().items())
        return f"{type(self).__name__}({args})"
