"""
Module: type1_sdt.py

### About This Module
Type 1 signal detection point estimates from confidence-rating counts.

Counts are given as two vectors `nR_S1` and `nR_S2` of length 2R, one per
stimulus class. S1 responses come first, ordered from high to low confidence,
followed by S2 responses ordered from low to high confidence, e.g. with three
ratings:

    nR_S1 = [100, 50, 20, 10, 5, 1]
    responded S1 rating=3 : 100, rating=2 : 50, rating=1 : 20
    responded S2 rating=1 : 10, rating=2 : 5, rating=3 : 1

Point estimates use counts with a small additive correction (1 / 2R per cell)
so that no cumulative rate is 0 or 1.

### Functions:
- check_counts: Validates and converts the count vectors.
- cumulative_rates: Cumulative hit and false alarm rates at every response
  boundary.
- type1_sdt: Type 1 d' and criterion at the S1/S2 response boundary.
"""

import numpy as np
from scipy.stats import norm

from errors import DomainError, InvalidInput


def check_counts(nR_S1, nR_S2):
    """
    Validate a pair of response-count vectors.

    Args:
        nR_S1 (array-like):
            Response counts for S1 stimulus trials.
        nR_S2 (array-like):
            Response counts for S2 stimulus trials.

    Returns:
        tuple: The two count vectors as integer numpy arrays.

    Raises:
        InvalidInput: If the vectors differ in length, have an odd length,
            describe fewer than two ratings, or contain negative or
            non-integer entries.
    """
    nR_S1 = np.asarray(nR_S1, dtype=float)
    nR_S2 = np.asarray(nR_S2, dtype=float)

    if nR_S1.ndim != 1 or nR_S2.ndim != 1:
        raise InvalidInput("input arrays must be one-dimensional")
    if len(nR_S1) != len(nR_S2):
        raise InvalidInput("input arrays must have the same number of elements")
    if len(nR_S1) % 2 != 0:
        raise InvalidInput("input arrays must have an even number of elements")
    if len(nR_S1) < 4:
        raise InvalidInput("at least two confidence ratings are required")

    counts = np.concatenate([nR_S1, nR_S2])
    if not np.all(np.isfinite(counts)) or np.any(counts != np.round(counts)):
        raise InvalidInput("response counts must be integers")
    if np.any(counts < 0):
        raise InvalidInput("response counts must be non-negative")

    return nR_S1.astype(int), nR_S2.astype(int)


def cumulative_rates(nR_S1, nR_S2, adjust=True):
    """
    Compute cumulative hit and false alarm rates for every response boundary.

    For boundary c = 2..2R the hit rate is the share of S2 trials with a
    response at or above category c, and the false alarm rate the same share
    for S1 trials.

    Args:
        nR_S1 (ndarray):
            Response counts for S1 stimulus trials.
        nR_S2 (ndarray):
            Response counts for S2 stimulus trials.
        adjust (bool, optional):
            Add 1 / len(nR_S1) to each cell before computing the rates.

    Returns:
        tuple: (ratingHR, ratingFAR), arrays of length 2R - 1.
    """
    nR_S1 = np.asarray(nR_S1, dtype=float)
    nR_S2 = np.asarray(nR_S2, dtype=float)

    if adjust:
        adj_f = 1 / len(nR_S1)
        nR_S1 = nR_S1 + adj_f
        nR_S2 = nR_S2 + adj_f

    # Tail sums from each boundary to the end, dropping the full total.
    tail_S2 = np.cumsum(nR_S2[::-1])[::-1][1:]
    tail_S1 = np.cumsum(nR_S1[::-1])[::-1][1:]

    ratingHR = tail_S2 / nR_S2.sum()
    ratingFAR = tail_S1 / nR_S1.sum()

    return ratingHR, ratingFAR


def type1_sdt(nR_S1, nR_S2, fninv=None):
    """
    Estimate type 1 d' and criterion from adjusted response counts.

    The estimate is taken at the boundary between S1 and S2 responses, using
    the adjusted cumulative rates. The criterion follows the convention of the
    meta-d' model, where the hit rate is Phi(d1/2 - c1) and the false alarm
    rate is Phi(-d1/2 - c1).

    Args:
        nR_S1 (array-like):
            Response counts for S1 stimulus trials.
        nR_S2 (array-like):
            Response counts for S2 stimulus trials.
        fninv (callable, optional):
            Inverse CDF of the type 1 distribution, defaults to the standard
            normal quantile function.

    Returns:
        dict: 'd1', 'c1', the adjusted 'ratingHR' and 'ratingFAR' vectors and
        't1_index', the position of the type 1 boundary in those vectors.

    Raises:
        InvalidInput: If the count vectors are malformed.
        DomainError: If a rate at the type 1 boundary is 0 or 1.
    """
    if fninv is None:
        fninv = norm.ppf

    nR_S1, nR_S2 = check_counts(nR_S1, nR_S2)
    nRatings = len(nR_S1) // 2

    ratingHR, ratingFAR = cumulative_rates(nR_S1, nR_S2, adjust=True)

    rates = np.concatenate([ratingHR, ratingFAR])
    if np.any(rates <= 0) or np.any(rates >= 1):
        raise DomainError("cumulative rates must lie strictly between 0 and 1")

    t1_index = nRatings - 1
    z_HR = fninv(ratingHR[t1_index])
    z_FAR = fninv(ratingFAR[t1_index])
    if not (np.isfinite(z_HR) and np.isfinite(z_FAR)):
        raise DomainError("inverse CDF of the type 1 rates is not finite")

    d1 = float(z_HR - z_FAR)
    c1 = float(-(z_HR + z_FAR) / 2)

    return {
        "d1": d1,
        "c1": c1,
        "ratingHR": ratingHR,
        "ratingFAR": ratingFAR,
        "t1_index": t1_index,
    }
