"""
Angular unit conversions
========================

Models work in radians. These helpers convert the angular sizes that are
usually quoted for compact sources.

>>> round(float(rad2uas(uas2rad(25.0))), 9)
25.0
"""

import astropy.units as u


def uas2rad(x):
    """Microarcseconds to radians."""
    return (x * u.uas).to_value(u.rad)


def mas2rad(x):
    """Milliarcseconds to radians."""
    return (x * u.mas).to_value(u.rad)


def rad2uas(x):
    """Radians to microarcseconds."""
    return (x * u.rad).to_value(u.uas)
