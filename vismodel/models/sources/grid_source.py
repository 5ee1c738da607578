"""
Source Model for a rendered intensity grid
==========================================

:class:`ModelImage` pairs a model that has no closed-form visibility with an
image of it on a fixed grid and the padded FFT of that image. Visibilities
are then interpolated from the cached Fourier grid, so the transform is paid
once per model and grid rather than once per evaluation.

ModelImages are normally created by :meth:`AbstractModel.modelimage`, which
substitutes them for every non-analytic leaf of a model tree.
"""

import logging

import numpy as np

from ...exceptions import ConstructionError
from ...fourier import DEFAULT_ALG, FFTAlg, ImageGrid, IntensityMap, fft_intensitymap, fouriermap_from_image
from ..base.analyticity import Analyticity, NotAnalytic
from ..base.model import AbstractModel

logger = logging.getLogger(__name__)


class ModelImage(AbstractModel):
    """
    Pre-rendered model with an FFT cache.

    Parameters
    ----------
    model : AbstractModel
        Model to render. It must be able to produce an intensity map.
    grid : ImageGrid
        Grid the model is rendered on. Its field of view limits the uv
        resolution and its pixel size the largest frequency in the cache.
    alg : FFTAlg, optional
        FFT settings, in particular the zero-padding factor.
    """

    visanalytic = NotAnalytic

    def __init__(self, model: AbstractModel, grid: ImageGrid, alg: FFTAlg = DEFAULT_ALG):
        if not isinstance(model, AbstractModel):
            raise ConstructionError(f"ModelImage expects a model, got {model!r}")
        self.model = model
        self.grid = grid
        self.alg = alg
        self._set_dtype(model.dtype)

        self.image = model.intensitymap(grid, alg)
        self.cache = fft_intensitymap(self.image, alg)
        logger.debug("Rendered %s on a %dx%d grid (padfac %d)",
                     type(model).__name__, grid.nx, grid.ny, alg.padfac)

    @property
    def imanalytic(self) -> Analyticity:
        return self.model.imanalytic

    def get_params(self) -> dict:
        return {'model': self.model.get_params()}

    def with_params(self, params: dict) -> "ModelImage":
        return ModelImage(self.model.with_params(params['model']), self.grid, self.alg)

    def flux(self):
        return self.model.flux()

    def radialextent(self):
        return self.model.radialextent()

    def intensity_point(self, x, y):
        return self.model.intensity_point(x, y)

    def intensities(self, x, y):
        return self.model.intensities(x, y)

    def visibilities(self, u, v, alg: FFTAlg = DEFAULT_ALG):
        # Served from the cache built with self.alg
        return self.cache.interpolate(u, v)

    def fouriermap(self, grid: ImageGrid, alg: FFTAlg = DEFAULT_ALG) -> np.ndarray:
        if grid == self.grid:
            return fouriermap_from_image(self.image, alg)
        U, V = grid.uvgrid()
        return self.cache.interpolate(U, V)

    def intensitymap(self, grid: ImageGrid, alg: FFTAlg = DEFAULT_ALG) -> IntensityMap:
        if grid == self.grid:
            return self.image
        return self.model.intensitymap(grid, alg)

    def modelimage(self, grid: ImageGrid, alg: FFTAlg = DEFAULT_ALG) -> AbstractModel:
        if grid == self.grid and alg == self.alg:
            return self
        return ModelImage(self.model, grid, alg)

    def __eq__(self, other):
        if type(self) is not type(other):
            return NotImplemented
        return self.model == other.model and self.grid == other.grid and self.alg == other.alg

    def __hash__(self):
        return hash((type(self), self.model, self.grid, self.alg))

    def __repr__(self):
        return f"ModelImage({self.model!r}, {self.grid!r})"
