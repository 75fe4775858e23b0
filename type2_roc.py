"""
Module: type2_roc.py

### About This Module
Observed and model-implied type 2 ROC points for S1 and S2 responses.

For each response category the trials are split into correct trials
(stimulus matches the response) and incorrect trials. A type 2 hit is a high
confidence correct response and a type 2 false alarm a high confidence
incorrect response; with R ratings there are R - 1 such points per response.

Estimated rates are obtained from the fitted model: two equal-variance
distributions with means -meta_d/2 and +meta_d/2, cut at the type 1 and type 2
criteria. The same routine serves both response categories, and both the
pooled model (one meta-d') and the response-conditional model (one meta-d' per
response).

### Functions:
- type2_count_groups: Correct and incorrect count groups for one response.
- observed_type2_rates: Observed type 2 hit and false alarm rates.
- estimated_type2_rates: Model-implied type 2 hit and false alarm rates.
- type2_roc: All observed and estimated rates for both responses.
"""

import numpy as np
from scipy.stats import norm

from errors import DivisionByZero, InvalidInput

RESPONSES = ("rS1", "rS2")


def _check_response(response):
    if response not in RESPONSES:
        raise InvalidInput(f"response must be one of {RESPONSES}, got {response!r}")


def type2_count_groups(nR_S1, nR_S2, response):
    """
    Split raw counts of one response category into correct and incorrect groups.

    Args:
        nR_S1 (array-like):
            Response counts for S1 stimulus trials.
        nR_S2 (array-like):
            Response counts for S2 stimulus trials.
        response (str):
            'rS1' or 'rS2'.

    Returns:
        tuple: (correct, incorrect) count arrays of length R, ordered from the
        lowest to the highest confidence rating.
    """
    _check_response(response)
    nR_S1 = np.asarray(nR_S1)
    nR_S2 = np.asarray(nR_S2)
    nRatings = len(nR_S1) // 2

    if response == "rS1":
        correct = nR_S1[:nRatings][::-1]
        incorrect = nR_S2[:nRatings][::-1]
    else:
        correct = nR_S2[nRatings:]
        incorrect = nR_S1[nRatings:]

    return correct, incorrect


def _tail_rates(group):
    total = group.sum()
    if total == 0:
        raise DivisionByZero("type 2 count group is empty")
    # Share of trials at or above each confidence boundary 2..R.
    return np.cumsum(group[::-1])[::-1][1:] / total


def observed_type2_rates(nR_S1, nR_S2, response):
    """
    Compute observed type 2 hit and false alarm rates from raw counts.

    Args:
        nR_S1 (array-like):
            Response counts for S1 stimulus trials.
        nR_S2 (array-like):
            Response counts for S2 stimulus trials.
        response (str):
            'rS1' or 'rS2'.

    Returns:
        tuple: (obs_HR2, obs_FAR2), arrays of length R - 1.

    Raises:
        DivisionByZero: If the correct or incorrect group has no trials.
    """
    correct, incorrect = type2_count_groups(nR_S1, nR_S2, response)
    correct = np.asarray(correct, dtype=float)
    incorrect = np.asarray(incorrect, dtype=float)
    return _tail_rates(correct), _tail_rates(incorrect)


def estimated_type2_rates(meta_d, c1, t2ca, response, fncdf=None, s=1):
    """
    Compute model-implied type 2 hit and false alarm rates for one response.

    Args:
        meta_d (float):
            Meta-d' governing this response category.
        c1 (float):
            Type 1 criterion.
        t2ca (array-like):
            Type 2 criteria of this response category, in ascending order
            (t2ca_rS1 below c1, t2ca_rS2 above c1).
        response (str):
            'rS1' or 'rS2'.
        fncdf (callable, optional):
            CDF called as fncdf(x, mu, sd), defaults to the normal CDF.
        s (float, optional):
            Ratio of the S1 to the S2 standard deviation.

    Returns:
        tuple: (est_HR2, est_FAR2), arrays of length R - 1 ordered from the
        lowest to the highest confidence boundary.

    Raises:
        DivisionByZero: If the area on the response side of c1 is zero.
    """
    _check_response(response)
    if fncdf is None:
        fncdf = norm.cdf

    S1mu = -meta_d / 2
    S1sd = 1
    S2mu = meta_d / 2
    S2sd = S1sd / s

    # Correct responses come from the stimulus matching the response.
    if response == "rS1":
        C_mu, C_sd, I_mu, I_sd = S1mu, S1sd, S2mu, S2sd
        # Criteria closest to c1 first.
        criteria = np.asarray(t2ca, dtype=float)[::-1]

        def mass(x, mu, sd):
            return fncdf(x, mu, sd)

    else:
        C_mu, C_sd, I_mu, I_sd = S2mu, S2sd, S1mu, S1sd
        criteria = np.asarray(t2ca, dtype=float)

        def mass(x, mu, sd):
            return 1 - fncdf(x, mu, sd)

    C_area = mass(c1, C_mu, C_sd)
    I_area = mass(c1, I_mu, I_sd)
    if C_area == 0 or I_area == 0:
        raise DivisionByZero(f"zero model area for {response} responses")

    est_HR2 = np.array([mass(t2c, C_mu, C_sd) for t2c in criteria]) / C_area
    est_FAR2 = np.array([mass(t2c, I_mu, I_sd) for t2c in criteria]) / I_area

    return est_HR2, est_FAR2


def type2_roc(
    nR_S1,
    nR_S2,
    meta_d_rS1,
    meta_d_rS2,
    c1,
    t2ca_rS1,
    t2ca_rS2,
    fncdf=None,
    s=1,
):
    """
    Compute observed and estimated type 2 ROC points for both responses.

    For the pooled model pass the same meta-d' as `meta_d_rS1` and
    `meta_d_rS2`.

    Args:
        nR_S1 (array-like):
            Raw response counts for S1 stimulus trials.
        nR_S2 (array-like):
            Raw response counts for S2 stimulus trials.
        meta_d_rS1 (float):
            Meta-d' for S1 responses.
        meta_d_rS2 (float):
            Meta-d' for S2 responses.
        c1 (float):
            Type 1 criterion.
        t2ca_rS1 (array-like):
            Type 2 criteria for S1 responses.
        t2ca_rS2 (array-like):
            Type 2 criteria for S2 responses.
        fncdf (callable, optional):
            CDF called as fncdf(x, mu, sd), defaults to the normal CDF.
        s (float, optional):
            Ratio of the S1 to the S2 standard deviation.

    Returns:
        dict: 'obs_HR2_rS1', 'est_HR2_rS1', 'obs_FAR2_rS1', 'est_FAR2_rS1' and
        the same four keys for 'rS2'.
    """
    branches = {
        "rS1": (meta_d_rS1, t2ca_rS1),
        "rS2": (meta_d_rS2, t2ca_rS2),
    }

    roc = {}
    for response, (meta_d, t2ca) in branches.items():
        obs_HR2, obs_FAR2 = observed_type2_rates(nR_S1, nR_S2, response)
        est_HR2, est_FAR2 = estimated_type2_rates(
            meta_d, c1, t2ca, response, fncdf=fncdf, s=s
        )
        roc[f"obs_HR2_{response}"] = obs_HR2
        roc[f"est_HR2_{response}"] = est_HR2
        roc[f"obs_FAR2_{response}"] = obs_FAR2
        roc[f"est_FAR2_{response}"] = est_FAR2

    return roc
