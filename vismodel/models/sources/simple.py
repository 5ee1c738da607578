import numpy as np
import jax
import jax.numpy as jnp
from jax import pure_callback
from functools import partial

from scipy.special import j1, jv

from ...exceptions import ShapeMismatchError
from ...fourier import DEFAULT_ALG, FFTAlg, ImageGrid, IntensityMap
from ..base.analyticity import NotAnalytic
from ..base.model import AbstractModel, _positive


@partial(jax.custom_jvp, nondiff_argnums=())
def _j1(x):
    """First-order Bessel function J1 using scipy.special.j1"""
    result_shape = jax.ShapeDtypeStruct(x.shape, x.dtype)
    return pure_callback(
        lambda x: j1(np.asarray(x)).astype(x.dtype),
        result_shape,
        x,
        vmap_method='sequential'
    )


@_j1.defjvp
def _j1_jvp(primals, tangents):
    """Custom JVP rule for J1"""
    x, = primals
    dx, = tangents
    y = _j1(x)

    # Also need to wrap jv for the derivative
    result_shape = jax.ShapeDtypeStruct(x.shape, x.dtype)
    jv2 = pure_callback(
        lambda x: jv(2, np.asarray(x)).astype(x.dtype),
        result_shape,
        x,
        vmap_method='sequential'
    )

    dy = y/x - jv2
    return y, dy * dx


class AnalyticModel(AbstractModel):
    """
    Primitive whose point formulas are written with ``jax.numpy`` and
    broadcast over arrays, so batch evaluation is a single call.
    """

    def visibilities(self, u, v, alg: FFTAlg = DEFAULT_ALG):
        u, v = jnp.asarray(u), jnp.asarray(v)
        if u.shape != v.shape:
            raise ShapeMismatchError(f"u and v have different shapes {u.shape} and {v.shape}")
        return self.visibility_point(u, v)

    def intensities(self, x, y):
        x, y = jnp.asarray(x), jnp.asarray(y)
        if x.shape != y.shape:
            raise ShapeMismatchError(f"x and y have different shapes {x.shape} and {y.shape}")
        return self.intensity_point(x, y)


class Gaussian(AnalyticModel):
    """
    Circular Gaussian centred on the origin.

    I(x, y) = F / (2πσ²) exp(-(x² + y²) / 2σ²)

    V(u, v) = F exp(-2π²σ²(u² + v²))

    Parameters
    ----------
    flux_density : float, optional
        Total flux F. Default is 1.
    sigma : float, optional
        Standard deviation σ in radians. Default is 1.
    dtype : numpy dtype, optional
        Precision of the parameters. Default is float64.

    Examples
    --------
    >>> from vismodel import Gaussian
    >>> g = Gaussian(flux_density=2.0, sigma=1e-9)
    >>> float(abs(g.visibility_point(0.0, 0.0)))
    2.0
    """

    def __init__(self, flux_density: float = 1.0, sigma: float = 1.0, dtype=np.float64):
        self._set_dtype(dtype)
        if not _positive(sigma):
            raise ValueError(f"Gaussian width must be positive, got {sigma}")
        self.flux_density = self._param(flux_density)
        self.sigma = self._param(sigma)

    def get_params(self) -> dict:
        return {
            'flux_density': self.flux_density,
            'sigma': self.sigma
        }

    def flux(self):
        return self.flux_density

    def radialextent(self):
        return 5 * self.sigma

    def visibility_point(self, u, v):
        k2 = u**2 + v**2
        return self.flux_density * jnp.exp(-2 * jnp.pi**2 * self.sigma**2 * k2) + 0.0j

    def intensity_point(self, x, y):
        r2 = x**2 + y**2
        norm = self.flux_density / (2 * jnp.pi * self.sigma**2)
        return norm * jnp.exp(-r2 / (2 * self.sigma**2))


class Disk(AnalyticModel):
    """
    Uniform circular disk.

    The intensity is constant, I₀ = F/(πR²), inside radius R and zero
    outside. The visibility is the Airy function

        V(k) = F 2J₁(2πkR) / (2πkR),   k = √(u² + v²)

    whose first zero is at k = 1.22/(2R).

    Parameters
    ----------
    flux_density : float, optional
        Total flux F. Default is 1.
    radius : float, optional
        Angular radius R in radians. Default is 1.
    dtype : numpy dtype, optional
        Precision of the parameters. Default is float64.

    Attributes
    ----------
    surface_brightness : float
        Uniform surface brightness I₀.
    """

    def __init__(self, flux_density: float = 1.0, radius: float = 1.0, dtype=np.float64):
        self._set_dtype(dtype)
        if not _positive(radius):
            raise ValueError(f"Disk radius must be positive, got {radius}")
        self.flux_density = self._param(flux_density)
        self.radius = self._param(radius)

    @property
    def surface_brightness(self):
        return self.flux_density / (jnp.pi * self.radius**2)

    def get_params(self) -> dict:
        return {
            'flux_density': self.flux_density,
            'radius': self.radius
        }

    def flux(self):
        return self.flux_density

    def radialextent(self):
        return self.radius

    def visibility_point(self, u, v):
        k = jnp.sqrt(jnp.asarray(u)**2 + jnp.asarray(v)**2)
        zeta = 2 * jnp.pi * k * self.radius
        # Keep the Bessel argument away from zero so gradients stay finite
        safe_zeta = jnp.where(zeta == 0, 1.0, zeta)
        airy = jnp.where(zeta == 0, 1.0, 2 * _j1(safe_zeta) / safe_zeta)
        return self.flux_density * airy + 0.0j

    def intensity_point(self, x, y):
        r = jnp.sqrt(x**2 + y**2)
        return jnp.where(r <= self.radius, self.surface_brightness, 0.0)


def _nearest_origin(itr):
    dist = np.abs(itr)
    return np.flatnonzero(np.isclose(dist, dist.min(), rtol=1e-9, atol=0.0))


class PointSource(AnalyticModel):
    """
    Unresolved point source at the origin.

    The visibility is the constant F. The intensity is a Dirac delta, which
    has no pointwise value, so the image axis is ``NotAnalytic`` and
    :meth:`intensitymap` deposits the flux in the pixel nearest to the
    origin. On an even axis the origin lies on a pixel edge and the flux is
    split evenly between the two pixels next to it, so the image stays
    centred on the origin like the constant Fourier grid.

    Parameters
    ----------
    flux_density : float, optional
        Total flux F. Default is 1.
    """

    imanalytic = NotAnalytic

    def __init__(self, flux_density: float = 1.0, dtype=np.float64):
        self._set_dtype(dtype)
        self.flux_density = self._param(flux_density)

    def get_params(self) -> dict:
        return {'flux_density': self.flux_density}

    def flux(self):
        return self.flux_density

    def radialextent(self):
        return 0.0

    def visibility_point(self, u, v):
        shape = jnp.broadcast_shapes(jnp.shape(u), jnp.shape(v))
        return self.flux_density * jnp.ones(shape, dtype=self.complex_dtype)

    def intensitymap(self, grid: ImageGrid, alg: FFTAlg = DEFAULT_ALG) -> IntensityMap:
        image = np.zeros(grid.shape, dtype=self.dtype)
        iy = _nearest_origin(grid.yitr)
        ix = _nearest_origin(grid.xitr)
        image[np.ix_(iy, ix)] = np.asarray(self.flux_density) / (len(iy) * len(ix))
        return IntensityMap(image, grid)

