"""
Model Modifiers
===============

Unary wrappers used by the combinators: :class:`ScaledModel` gives every model
a scalar multiplication (and therefore subtraction), and
:class:`StretchedModel` turns the unit Gaussian into the smoothing kernel of
:func:`~vismodel.models.base.composite.smoothed`.

A modifier keeps the analyticity of the model it wraps and counts as a single
leaf for :func:`~vismodel.models.base.composite.components`.
"""

import numpy as np
import jax.numpy as jnp

from ..exceptions import ConstructionError
from ..fourier import DEFAULT_ALG, FFTAlg, ImageGrid, IntensityMap
from .base.analyticity import Analyticity
from .base.model import AbstractModel, _positive


class _Modifier(AbstractModel):
    """Shared plumbing for models wrapping a single inner model."""

    def __init__(self, model: AbstractModel):
        if not isinstance(model, AbstractModel):
            raise ConstructionError(f"{type(self).__name__} expects a model, got {model!r}")
        self.model = model
        self._set_dtype(model.dtype)

    @property
    def visanalytic(self) -> Analyticity:
        return self.model.visanalytic

    @property
    def imanalytic(self) -> Analyticity:
        return self.model.imanalytic

    def __repr__(self):
        params = self.get_params()
        args = ", ".join(f"{k}={float(np.asarray(v))!r}" for k, v in params.items() if k != 'model')
        return f"{type(self).__name__}({self.model!r}, {args})"


class ScaledModel(_Modifier):
    """
    Model multiplied by a constant factor in both domains.

    Negative factors are accepted; they are what ``m1 - m2`` is built from.

    Parameters
    ----------
    model : AbstractModel
        Model to scale.
    scale : float
        Multiplicative factor applied to flux, intensity and visibility.
    """

    def __init__(self, model: AbstractModel, scale: float):
        super().__init__(model)
        self.scale = self._param(scale)

    def get_params(self) -> dict:
        return {'model': self.model.get_params(), 'scale': self.scale}

    def with_params(self, params: dict) -> "ScaledModel":
        return ScaledModel(self.model.with_params(params['model']), params['scale'])

    def flux(self):
        return self.scale * self.model.flux()

    def radialextent(self):
        return self.model.radialextent()

    def visibility_point(self, u, v):
        return self.scale * self.model.visibility_point(u, v)

    def visibilities(self, u, v, alg: FFTAlg = DEFAULT_ALG):
        return self.scale * self.model.visibilities(u, v, alg)

    def intensity_point(self, x, y):
        return self.scale * self.model.intensity_point(x, y)

    def intensities(self, x, y):
        return self.scale * self.model.intensities(x, y)

    def fouriermap(self, grid: ImageGrid, alg: FFTAlg = DEFAULT_ALG) -> np.ndarray:
        return np.asarray(self.scale) * np.asarray(self.model.fouriermap(grid, alg))

    def intensitymap(self, grid: ImageGrid, alg: FFTAlg = DEFAULT_ALG) -> IntensityMap:
        img = self.model.intensitymap(grid, alg)
        return IntensityMap(np.asarray(self.scale) * img.image, grid)

    def modelimage(self, grid: ImageGrid, alg: FFTAlg = DEFAULT_ALG) -> AbstractModel:
        inner = self.model.modelimage(grid, alg)
        return self if inner is self.model else ScaledModel(inner, self.scale)

    def __eq__(self, other):
        if type(self) is not type(other):
            return NotImplemented
        return self.model == other.model and bool(np.asarray(self.scale) == np.asarray(other.scale))

    __hash__ = AbstractModel.__hash__


class StretchedModel(_Modifier):
    """
    Model stretched by ``alpha`` along x and ``beta`` along y.

    I'(x, y) = I(x/α, y/β) / (αβ) and V'(u, v) = V(αu, βv), so the flux is
    unchanged.

    Parameters
    ----------
    model : AbstractModel
        Model to stretch.
    alpha, beta : float
        Positive stretch factors.
    """

    def __init__(self, model: AbstractModel, alpha: float, beta: float):
        super().__init__(model)
        if not (_positive(alpha) and _positive(beta)):
            raise ValueError(f"Stretch factors must be positive, got ({alpha}, {beta})")
        self.alpha = self._param(alpha)
        self.beta = self._param(beta)

    def get_params(self) -> dict:
        return {'model': self.model.get_params(), 'alpha': self.alpha, 'beta': self.beta}

    def with_params(self, params: dict) -> "StretchedModel":
        return StretchedModel(self.model.with_params(params['model']), params['alpha'], params['beta'])

    def _inner_grid(self, grid: ImageGrid) -> ImageGrid:
        return grid.scaled(1.0 / float(self.alpha), 1.0 / float(self.beta))

    def flux(self):
        return self.model.flux()

    def radialextent(self):
        return jnp.maximum(self.alpha, self.beta) * self.model.radialextent()

    def visibility_point(self, u, v):
        return self.model.visibility_point(self.alpha * u, self.beta * v)

    def visibilities(self, u, v, alg: FFTAlg = DEFAULT_ALG):
        return self.model.visibilities(self.alpha * jnp.asarray(u), self.beta * jnp.asarray(v), alg)

    def intensity_point(self, x, y):
        return self.model.intensity_point(x / self.alpha, y / self.beta) / (self.alpha * self.beta)

    def intensities(self, x, y):
        return self.model.intensities(jnp.asarray(x) / self.alpha,
                                      jnp.asarray(y) / self.beta) / (self.alpha * self.beta)

    def fouriermap(self, grid: ImageGrid, alg: FFTAlg = DEFAULT_ALG) -> np.ndarray:
        # The inner grid of fov/alpha samples V at alpha * u
        return self.model.fouriermap(self._inner_grid(grid), alg)

    def intensitymap(self, grid: ImageGrid, alg: FFTAlg = DEFAULT_ALG) -> IntensityMap:
        # Pixel fluxes are invariant under stretching the pixels with the model
        img = self.model.intensitymap(self._inner_grid(grid), alg)
        return IntensityMap(img.image, grid)

    def modelimage(self, grid: ImageGrid, alg: FFTAlg = DEFAULT_ALG) -> AbstractModel:
        inner = self.model.modelimage(self._inner_grid(grid), alg)
        return self if inner is self.model else StretchedModel(inner, self.alpha, self.beta)

    def __eq__(self, other):
        if type(self) is not type(other):
            return NotImplemented
        return (self.model == other.model
                and bool(np.asarray(self.alpha) == np.asarray(other.alpha))
                and bool(np.asarray(self.beta) == np.asarray(other.beta)))

    __hash__ = AbstractModel.__hash__


def renormed(m: AbstractModel, scale: float) -> ScaledModel:
    """Multiply a model by ``scale``; also available as ``scale * m``."""
    return ScaledModel(m, scale)


def stretched(m: AbstractModel, alpha: float, beta: float) -> StretchedModel:
    """Stretch a model by ``alpha`` along x and ``beta`` along y."""
    return StretchedModel(m, alpha, beta)
