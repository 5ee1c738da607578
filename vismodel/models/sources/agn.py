"""
AGN Accretion Disk Model

Thermal accretion disk whose intensity has a closed form but whose
visibility does not. It is the primitive that exercises the numerical
(FFT) visibility path.
"""

import numpy as np
from scipy.integrate import quad

from ...exceptions import ShapeMismatchError
from ..base.analyticity import IsAnalytic, NotAnalytic
from ..base.model import AbstractModel


class ShakuraSunyaevDisk(AbstractModel):
    """
    Simplified Shakura-Sunyaev accretion disk

    I(R) = I₀ [e^f(R) - 1]^(-1)
    f(R) = [(R₀/R)^n (1 - √(R_in/R))]^(-1/4)

    with R in units of GM/c². There is no emission inside R_in. The disk is
    viewed at inclination i with its major axis along x.
    """

    visanalytic = NotAnalytic
    imanalytic = IsAnalytic

    def __init__(self, I_0: float, R_0: float, R_in: float, n: float = 3.0,
                 inclination: float = 0.0, distance: float = 1.0,
                 GM_over_c2: float = 1.0, dtype=np.float64):
        """
        Parameters:
        -----------
        I_0 : float
            Normalization intensity [W m^-2 Hz^-1 sr^-1]
        R_0 : float
            Characteristic radius in units of GM/c² [dimensionless]
        R_in : float
            Inner disk radius in units of GM/c² [dimensionless]
        n : float, optional
            Power law index (default: 3.0 for standard SS disk)
        inclination : float, optional
            Disk inclination angle [radians], below π/2
        distance : float, optional
            Distance to source [m]
        GM_over_c2 : float, optional
            Gravitational radius GM/c² [m]
        """
        self._set_dtype(dtype)
        if not R_0 > 0:
            raise ValueError(f"R_0 must be positive, got {R_0}")
        if R_in < 0:
            raise ValueError(f"R_in must be non-negative, got {R_in}")
        if not abs(inclination) < np.pi / 2:
            raise ValueError(f"Inclination must be below pi/2 to see the disk, got {inclination}")

        cast = self.dtype.type
        self.I_0 = cast(I_0)
        self.R_0 = cast(R_0)
        self.R_in = cast(R_in)
        self.n = cast(n)
        self.inclination = cast(inclination)
        self.distance = cast(distance)
        self.GM_over_c2 = cast(GM_over_c2)

        # Precompute cos(i) and the angular size of GM/c² for efficiency
        self.cos_i = np.cos(self.inclination)
        self.angular_scale = self.GM_over_c2 / self.distance

    def get_params(self) -> dict:
        return {
            'I_0': self.I_0,
            'R_0': self.R_0,
            'R_in': self.R_in,
            'n': self.n,
            'inclination': self.inclination,
            'distance': self.distance,
            'GM_over_c2': self.GM_over_c2
        }

    def _disk_intensity(self, R):
        """Disk intensity I(R), R in GM/c² units"""
        R = np.asarray(R, dtype=float)
        emitting = R > self.R_in
        # Placeholder radius where there is no emission, masked out below
        R_safe = np.where(emitting, R, 2 * self.R_in + self.R_0)
        f = ((self.R_0 / R_safe)**self.n * (1 - np.sqrt(self.R_in / R_safe)))**(-0.25)
        with np.errstate(over='ignore'):
            intensity = self.I_0 / np.expm1(f)
        return np.where(emitting, intensity, 0.0)

    def intensity_point(self, x, y):
        """
        Intensity at sky position (x, y) in radians.

        The y axis is foreshortened by cos(i) in the disk plane.
        """
        x = np.asarray(x, dtype=float)
        y = np.asarray(y, dtype=float)
        x_prime = x / self.angular_scale
        y_prime = y / (self.cos_i * self.angular_scale)
        return self._disk_intensity(np.sqrt(x_prime**2 + y_prime**2))

    def intensities(self, x, y):
        if np.shape(x) != np.shape(y):
            raise ShapeMismatchError(f"x and y have different shapes {np.shape(x)} and {np.shape(y)}")
        return self.intensity_point(x, y)

    def flux(self):
        """Total flux by integrating the radial profile over the disk"""
        def integrand(R):
            return R * float(self._disk_intensity(R))

        flux, _ = quad(integrand, self.R_in, 100 * self.R_0, epsrel=1e-6, limit=200)
        return 2 * np.pi * flux * self.angular_scale**2 * self.cos_i

    def radialextent(self):
        # For n = 3 the intensity is below 1e-4 I_0 beyond 20 R_0
        return 20 * self.R_0 * self.angular_scale
