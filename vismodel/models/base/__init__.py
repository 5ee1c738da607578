from .analyticity import Analyticity, IsAnalytic, NotAnalytic, visanalytic, imanalytic
from .model import AbstractModel
from .composite import (CompositeModel, AddModel, ConvolvedModel, add, added, subtract,
                        convolved, smoothed, components)
