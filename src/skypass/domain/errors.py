# Copyright (c) 2026 Jeroen Visser. All rights reserved.
# Licensed under the MIT License — see LICENSE.
"""
Typed errors raised by the propagation and visibility engine.

Input validation errors subclass ValueError so callers that already
catch ValueError keep working.
"""


class InvalidOrbitError(ValueError):
    """Orbital elements or state outside the domain of the requested path."""


class EscapeTrajectoryError(InvalidOrbitError):
    """A state vector describes an unbound (e >= 1) trajectory."""


class InvalidSpacecraftError(ValueError):
    """Non-finite or non-positive spacecraft physical properties."""


class InvalidStationError(ValueError):
    """Ground station with non-finite or out-of-range coordinates."""


class PropagationCancelled(RuntimeError):
    """A propagation run was cancelled or superseded before completing."""
