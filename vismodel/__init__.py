"""
Library of composable sky brightness and visibility models for interferometry
=============================================================================

Models are built from primitives with ``+``, ``-``, scalar ``*``,
:func:`convolved` and :func:`smoothed`, and evaluated in either the image or
the Fourier domain. Closed-form expressions are used wherever every part of
the tree has one; the rest goes through a gridded FFT.
"""

import logging

import jax

# Models default to float64 parameters
jax.config.update("jax_enable_x64", True)

from .exceptions import VisModelError, CapabilityError, ShapeMismatchError, ConstructionError
from .fourier import FFTAlg, DEFAULT_ALG, ImageGrid, IntensityMap, FourierCache
from .models import (
    Analyticity, IsAnalytic, NotAnalytic, visanalytic, imanalytic,
    AbstractModel, CompositeModel, AddModel, ConvolvedModel,
    add, added, subtract, convolved, smoothed, components,
    ScaledModel, StretchedModel, renormed, stretched,
    Gaussian, Disk, PointSource, ShakuraSunyaevDisk, ModelImage,
)
from .core import (visibility, visibilities, intensity, intensities, intensitymap,
                   fouriermap, flux, radialextent, modelimage)
from .units import uas2rad, mas2rad, rad2uas

logging.getLogger(__name__).addHandler(logging.NullHandler())

__version__ = '0.1.0'

__all__ = [
    'VisModelError', 'CapabilityError', 'ShapeMismatchError', 'ConstructionError',
    'FFTAlg', 'DEFAULT_ALG', 'ImageGrid', 'IntensityMap', 'FourierCache',
    'Analyticity', 'IsAnalytic', 'NotAnalytic', 'visanalytic', 'imanalytic',
    'AbstractModel', 'CompositeModel', 'AddModel', 'ConvolvedModel',
    'add', 'added', 'subtract', 'convolved', 'smoothed', 'components',
    'ScaledModel', 'StretchedModel', 'renormed', 'stretched',
    'Gaussian', 'Disk', 'PointSource', 'ShakuraSunyaevDisk', 'ModelImage',
    'visibility', 'visibilities', 'intensity', 'intensities', 'intensitymap',
    'fouriermap', 'flux', 'radialextent', 'modelimage',
    'uas2rad', 'mas2rad', 'rad2uas',
]
