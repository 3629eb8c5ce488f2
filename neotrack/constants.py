"""
Physical, time and scene constants for neotrack.

This module contains all constants used throughout the propagation and
approach-analysis code.
"""

import math

# Basic astronomical and time constants
KMPAU = 149597870.7  # km per AU
DAY = 86400.0  # seconds per day
YEAR_DAYS = 365.25  # days per Julian year
YEAR = YEAR_DAYS * DAY  # seconds per year
TWO_PI = 2.0 * math.pi

# Julian Day references
JD_UNIX_EPOCH = 2440587.5  # Julian Day of 1970-01-01T00:00:00 UTC
JD_J2000 = 2451545.0  # Julian Day of J2000.0

# Earth and Moon
R_EARTH = 6371.0  # km (mean radius)
LUNAR_DISTANCE = 384400.0  # km

# Rendering
SCENE_UNITS_PER_AU = 5.0  # linear scene scale
