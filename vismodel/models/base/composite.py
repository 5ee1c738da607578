"""
Composite Models
================

Binary combinators over models. A composite node owns two sub-models and a
pair of combination rules, one for the visibility domain and one for the
intensity domain. The rules belong to the variant:

============  ==================  ==================  ===========================
variant       uv_combinator       xy_combinator       flux
============  ==================  ==================  ===========================
AddModel      ``+``               ``+``               flux(m1) + flux(m2)
Convolved     ``*``               (none)              flux(m1) * flux(m2)
============  ==================  ==================  ===========================

Analyticity is derived at construction: each axis is the AND of the
children's, except that a convolution is never analytic in the image domain,
because convolved intensities have no generic closed form. Every evaluation
method branches on the node's own analyticity, so arbitrarily nested trees
mix closed-form and FFT evaluation node by node.

>>> from vismodel import Disk, Gaussian, components, convolved
>>> m = Gaussian() + Disk(radius=2.0)
>>> components(m)
(Gaussian(flux_density=1.0, sigma=1.0), Disk(flux_density=1.0, radius=2.0))
>>> float(convolved(m, Gaussian(flux_density=2.0)).flux())
4.0
"""

import logging
import operator
from abc import abstractmethod
from typing import Callable, Tuple

import numpy as np

from ...exceptions import CapabilityError, ConstructionError, ShapeMismatchError
from ...fourier import DEFAULT_ALG, FFTAlg, ImageGrid, IntensityMap, ifft_fouriermap
from ..modifiers import renormed, stretched
from ..sources.simple import Gaussian
from .analyticity import Analyticity, NotAnalytic
from .model import AbstractModel

logger = logging.getLogger(__name__)


class CompositeModel(AbstractModel):
    """
    Abstract binary node combining two models.

    Implementations define :meth:`uv_combinator`, :meth:`xy_combinator` and
    :meth:`flux`, and may refine the analyticity propagation and the
    numerical intensity path.

    Parameters
    ----------
    m1, m2 : AbstractModel
        The left and right sub-models. They must share the same precision.
    """

    def __init__(self, m1: AbstractModel, m2: AbstractModel):
        for m in (m1, m2):
            if not isinstance(m, AbstractModel):
                raise ConstructionError(f"Cannot combine {type(self).__name__} with non-model {m!r}")
        if m1.dtype != m2.dtype:
            raise ConstructionError(
                f"Cannot combine models of different precision ({m1.dtype} and {m2.dtype})")
        self._m1 = m1
        self._m2 = m2
        self._visanalytic = self._propagate_visanalytic(m1, m2)
        self._imanalytic = self._propagate_imanalytic(m1, m2)

    @property
    def m1(self) -> AbstractModel:
        return self._m1

    @property
    def m2(self) -> AbstractModel:
        return self._m2

    left = m1
    right = m2

    @property
    def visanalytic(self) -> Analyticity:
        return self._visanalytic

    @property
    def imanalytic(self) -> Analyticity:
        return self._imanalytic

    @property
    def dtype(self) -> np.dtype:
        return self._m1.dtype

    @staticmethod
    def _propagate_visanalytic(m1, m2) -> Analyticity:
        return m1.visanalytic * m2.visanalytic

    @staticmethod
    def _propagate_imanalytic(m1, m2) -> Analyticity:
        return m1.imanalytic * m2.imanalytic

    @abstractmethod
    def uv_combinator(self) -> Callable:
        """Binary operator combining the children's visibilities."""
        pass

    @abstractmethod
    def xy_combinator(self) -> Callable:
        """Binary operator combining the children's intensities."""
        pass

    def with_components(self, m1: AbstractModel, m2: AbstractModel) -> "CompositeModel":
        """Node of the same variant over new children; ``self`` is untouched."""
        return type(self)(m1, m2)

    def get_params(self) -> dict:
        return {'m1': self._m1.get_params(), 'm2': self._m2.get_params()}

    def with_params(self, params: dict) -> "CompositeModel":
        return self.with_components(self._m1.with_params(params['m1']),
                                    self._m2.with_params(params['m2']))

    def radialextent(self):
        return max(self._m1.radialextent(), self._m2.radialextent())

    def visibility_point(self, u, v):
        if not self.visanalytic:
            raise CapabilityError(
                f"{type(self).__name__} contains a model without closed-form visibility; "
                "evaluate it in batch with visibilities()")
        f = self.uv_combinator()
        return f(self._m1.visibility_point(u, v), self._m2.visibility_point(u, v))

    def visibilities(self, u, v, alg: FFTAlg = DEFAULT_ALG):
        f = self.uv_combinator()
        if self.visanalytic:
            return f(self._m1.visibilities(u, v, alg), self._m2.visibilities(u, v, alg))
        # Each child evaluates the whole batch so grid setup happens once per child
        logger.debug("Numerical visibilities through %s", type(self).__name__)
        vis1 = np.asarray(self._m1.visibilities(u, v, alg))
        vis2 = np.asarray(self._m2.visibilities(u, v, alg))
        return f(vis1, vis2)

    def intensity_point(self, x, y):
        if not self.imanalytic:
            raise CapabilityError(
                f"{type(self).__name__} has no closed-form intensity; use intensitymap()")
        f = self.xy_combinator()
        return f(self._m1.intensity_point(x, y), self._m2.intensity_point(x, y))

    def intensities(self, x, y):
        if not self.imanalytic:
            raise CapabilityError(
                f"{type(self).__name__} has no closed-form intensity; use intensitymap()")
        f = self.xy_combinator()
        return f(self._m1.intensities(x, y), self._m2.intensities(x, y))

    def fouriermap(self, grid: ImageGrid, alg: FFTAlg = DEFAULT_ALG) -> np.ndarray:
        vis1 = np.asarray(self._m1.fouriermap(grid, alg))
        vis2 = np.asarray(self._m2.fouriermap(grid, alg))
        if vis1.shape != vis2.shape:
            raise ShapeMismatchError(f"Fourier grids of shape {vis1.shape} and {vis2.shape} cannot be combined")
        return self.uv_combinator()(vis1, vis2)

    def intensitymap(self, grid: ImageGrid, alg: FFTAlg = DEFAULT_ALG) -> IntensityMap:
        if self.imanalytic:
            return super().intensitymap(grid, alg)
        return self._intensitymap_numeric(grid, alg)

    def _intensitymap_numeric(self, grid: ImageGrid, alg: FFTAlg) -> IntensityMap:
        logger.debug("Intensity map of %s through the Fourier domain", type(self).__name__)
        return ifft_fouriermap(self.fouriermap(grid, alg), grid, alg)

    def modelimage(self, grid: ImageGrid, alg: FFTAlg = DEFAULT_ALG) -> AbstractModel:
        if self.visanalytic:
            return self
        return self.with_components(self._m1.modelimage(grid, alg), self._m2.modelimage(grid, alg))

    def __eq__(self, other):
        if type(self) is not type(other):
            return NotImplemented
        return self._m1 == other._m1 and self._m2 == other._m2

    def __hash__(self):
        return hash((type(self), self._m1, self._m2))

    def __repr__(self):
        return f"{type(self).__name__}({self._m1!r}, {self._m2!r})"


class AddModel(CompositeModel):
    """
    Pointwise addition of two models in the image and visibility domains.

    An end user should instead call :func:`added` or use ``+``.

    Examples
    --------
    >>> from vismodel import Disk, Gaussian
    >>> m = Gaussian() + Disk()
    >>> complex(m.visibility_point(0.1, 0.2)) == complex(
    ...     Gaussian().visibility_point(0.1, 0.2) + Disk().visibility_point(0.1, 0.2))
    True
    """

    def uv_combinator(self) -> Callable:
        return operator.add

    def xy_combinator(self) -> Callable:
        return operator.add

    def flux(self):
        return self._m1.flux() + self._m2.flux()

    def _intensitymap_numeric(self, grid: ImageGrid, alg: FFTAlg) -> IntensityMap:
        # Each child picks its own path, analytic children are sampled directly
        img1 = self._m1.intensitymap(grid, alg)
        img2 = self._m2.intensitymap(grid, alg)
        return img1.combine(img2, self.xy_combinator())


class ConvolvedModel(CompositeModel):
    """
    Convolution of two models.

    Visibilities multiply (convolution theorem). Intensities are always
    computed numerically: both Fourier grids are multiplied and inverse
    transformed. An end user should instead call :func:`convolved`, or
    :func:`smoothed` to convolve with a Gaussian kernel.
    """

    @staticmethod
    def _propagate_imanalytic(m1, m2) -> Analyticity:
        return NotAnalytic

    def uv_combinator(self) -> Callable:
        return operator.mul

    def xy_combinator(self) -> Callable:
        raise CapabilityError("A convolution has no pointwise image-domain combinator")

    def flux(self):
        return self._m1.flux() * self._m2.flux()


def added(m1: AbstractModel, m2: AbstractModel) -> AddModel:
    """
    Combine two models into an :class:`AddModel`, adding them pointwise.

    ``visibility(added(m1, m2), u, v) == visibility(m1, u, v) + visibility(m2, u, v)``
    """
    return AddModel(m1, m2)


add = added


def subtract(m1: AbstractModel, m2: AbstractModel) -> AddModel:
    """``m1 - m2``, built as ``AddModel(m1, renormed(m2, -1))``."""
    return AddModel(m1, renormed(m2, -1.0))


def convolved(m1: AbstractModel, m2: AbstractModel) -> ConvolvedModel:
    """Convolve two models into a :class:`ConvolvedModel`."""
    return ConvolvedModel(m1, m2)


def smoothed(m: AbstractModel, sigma: float) -> ConvolvedModel:
    """
    Smooth a model with a unit-flux Gaussian kernel of standard deviation ``sigma``.

    Equivalent to ``convolved(m, stretched(Gaussian(), sigma, sigma))``.
    """
    if not sigma > 0:
        raise ValueError(f"Smoothing kernel width must be positive, got {sigma}")
    return convolved(m, stretched(Gaussian(dtype=m.dtype), sigma, sigma))


def components(m: AbstractModel) -> Tuple[AbstractModel, ...]:
    """
    The leaves of a model tree, left to right.

    Returns ``(m,)`` for anything that is not a composite node.

    >>> from vismodel import Disk, Gaussian
    >>> a, b, c = Gaussian(), Disk(), Gaussian(sigma=3.0)
    >>> components((a + b) + c) == components(a + (b + c)) == (a, b, c)
    True
    """
    if isinstance(m, CompositeModel):
        return components(m.m1) + components(m.m2)
    return (m,)
