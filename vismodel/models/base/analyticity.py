"""
Analyticity traits
==================

Every model carries two independent classifications, one for the visibility
(Fourier) domain and one for the intensity (image) domain. ``IsAnalytic``
means the model has a closed-form pointwise expression on that axis;
``NotAnalytic`` means it must be evaluated on a grid and transformed.

Primitive models fix both as class attributes. Composite models derive theirs
once, at construction, from their children, so the evaluation code can choose
a path without looking at the values being evaluated.

>>> IsAnalytic * NotAnalytic
<Analyticity.NOT_ANALYTIC: False>
"""

import enum


class Analyticity(enum.Enum):
    """Two-valued analyticity trait. ``*`` is logical AND."""

    IS_ANALYTIC = True
    NOT_ANALYTIC = False

    def __mul__(self, other: "Analyticity") -> "Analyticity":
        if not isinstance(other, Analyticity):
            return NotImplemented
        return Analyticity(self.value and other.value)

    def __bool__(self) -> bool:
        return self.value


IsAnalytic = Analyticity.IS_ANALYTIC
NotAnalytic = Analyticity.NOT_ANALYTIC


def visanalytic(model) -> Analyticity:
    """Visibility-domain analyticity of a model instance or primitive model class."""
    return model.visanalytic


def imanalytic(model) -> Analyticity:
    """Intensity-domain analyticity of a model instance or primitive model class."""
    return model.imanalytic
