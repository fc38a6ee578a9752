"""
Physics calculations for dijet processing.

Provides four-vector construction for jets, conversion from polar
kinematics, and the row-major pair-mass grid used by the scanner.
"""
import logging
from typing import Mapping, Optional, Sequence

import numpy as np
import vector

from domain.errors import NumericDegenerateError
from domain.events import Jet
from services.calculations import consts


def jets_to_vectors(jets: Sequence[Jet]) -> vector.MomentumNumpy4D:
    """Build a numpy-backed four-vector array from jets."""
    return vector.array({
        "px": np.array([jet.px for jet in jets], dtype=np.float64),
        "py": np.array([jet.py for jet in jets], dtype=np.float64),
        "pz": np.array([jet.pz for jet in jets], dtype=np.float64),
        "E": np.array([jet.e for jet in jets], dtype=np.float64),
    })


def jets_from_components(
    components: Mapping[str, np.ndarray],
    coordinate_system: str
) -> tuple[Jet, ...]:
    """
    Build jets from per-quantity arrays of one event.

    Args:
        components: Quantity name to array, keyed by the canonical names
            in ``consts.KINEMATIC_SYSTEMS``
        coordinate_system: "cartesian" or "polar"

    Returns:
        Tuple of jets in collection order
    """
    if coordinate_system not in consts.KINEMATIC_SYSTEMS:
        raise ValueError(f"Unknown coordinate system: {coordinate_system}")

    arrays = {
        name: np.asarray(components[name], dtype=np.float64)
        for name in consts.KINEMATIC_SYSTEMS[coordinate_system]
    }
    lengths = {len(arr) for arr in arrays.values()}
    if len(lengths) > 1:
        raise ValueError(f"Kinematic arrays have mismatched lengths: {sorted(lengths)}")
    if lengths == {0}:
        return ()

    if coordinate_system == "cartesian":
        px, py, pz, e = arrays["px"], arrays["py"], arrays["pz"], arrays["E"]
    else:
        momenta = vector.array({
            "pt": arrays["pt"],
            "eta": arrays["eta"],
            "phi": arrays["phi"],
            "mass": arrays["mass"],
        })
        px, py, pz, e = momenta.px, momenta.py, momenta.pz, momenta.E

    return tuple(
        Jet(px=float(x), py=float(y), pz=float(z), e=float(t))
        for x, y, z, t in zip(px, py, pz, e)
    )


def pair_mass_squares(jets: Sequence[Jet]) -> np.ndarray:
    """
    Mass squared of every ordered jet pair, including self-pairs.

    The result is row-major over the N x N grid:
    (0,0), (0,1), ..., (0,N-1), (1,0), ..., (N-1,N-1).
    """
    n_jets = len(jets)
    if n_jets == 0:
        return np.empty(0, dtype=np.float64)

    p4 = jets_to_vectors(jets)
    components = {"px": p4.px, "py": p4.py, "pz": p4.pz, "E": p4.E}

    # outer index repeats, inner index cycles
    first = vector.array({k: np.repeat(v, n_jets) for k, v in components.items()})
    second = vector.array({k: np.tile(v, n_jets) for k, v in components.items()})

    return np.asarray((first + second).mass2, dtype=np.float64)


def clamp_masses(
    mass2: np.ndarray,
    strict: bool = False,
    event_index: Optional[int] = None
) -> tuple[np.ndarray, int]:
    """
    Take the square root of mass squared values, clamping negatives to zero.

    Args:
        mass2: Array of invariant masses squared
        strict: Raise instead of clamping
        event_index: Event index used in log and error messages

    Returns:
        Tuple of (masses, number of clamped values)

    Raises:
        NumericDegenerateError: If strict and any value is negative
    """
    mass2 = np.asarray(mass2, dtype=np.float64)
    negative = mass2 < 0.0
    n_degenerate = int(np.count_nonzero(negative))

    if n_degenerate:
        worst = float(mass2[negative].min())
        if strict:
            raise NumericDegenerateError(worst, event_index=event_index)
        logging.warning(
            f"Clamped {n_degenerate} negative mass squared value(s) to zero "
            f"in event {event_index} (most negative: {worst:g})"
        )

    return np.sqrt(np.where(negative, 0.0, mass2)), n_degenerate


def pair_masses(
    jets: Sequence[Jet],
    strict: bool = False,
    event_index: Optional[int] = None
) -> tuple[np.ndarray, int]:
    """Row-major dijet masses of every ordered jet pair, with clamp count."""
    return clamp_masses(pair_mass_squares(jets), strict=strict, event_index=event_index)
