from .simple import Gaussian, Disk, PointSource
from .agn import ShakuraSunyaevDisk
from .grid_source import ModelImage

__all__ = ['Gaussian', 'Disk', 'PointSource', 'ShakuraSunyaevDisk', 'ModelImage']
