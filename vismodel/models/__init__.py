from .base import (Analyticity, IsAnalytic, NotAnalytic, visanalytic, imanalytic,
                   AbstractModel, CompositeModel, AddModel, ConvolvedModel,
                   add, added, subtract, convolved, smoothed, components)
from .modifiers import ScaledModel, StretchedModel, renormed, stretched
from .sources import Gaussian, Disk, PointSource, ShakuraSunyaevDisk, ModelImage
