"""
Module: models_definitions.py

### Context and Source
The models follow the single-subject meta-d' models of the HMeta-d toolbox:

Fleming (2017) HMeta-d: hierarchical Bayesian estimation of metacognitive
efficiency from confidence ratings. Neuroscience of Consciousness.
https://github.com/smfleming/HMeta-d

The signal detection model of metacognitive sensitivity is described in:

Maniscalco & Lau (2012) A signal detection theoretic approach for estimating
metacognitive sensitivity from confidence ratings. Consciousness and Cognition.

The response-conditional variant is described in:

Maniscalco & Lau (2014) Signal detection theory analysis of Type 1 and Type 2
data: meta-d', response-specific meta-d' and the unequal variance SDT model.

### About This Module
This module declares the meta-d' models in PyMC. Priors given as precisions
in the HMeta-d JAGS models are converted to standard deviations.

Response counts are ordered as [nR_S1, nR_S2] and split into four blocks:
correct S1 responses (S1 stimulus), incorrect S2 responses (S1 stimulus),
incorrect S1 responses (S2 stimulus) and correct S2 responses (S2 stimulus).
Each block is modelled as a multinomial over confidence ratings, with cell
probabilities given by the meta-d' distributions cut at the type 2 criteria
and normalized by the area on the corresponding side of the type 1 criterion.

### Models:
- `model_metad`: meta-d' shared across S1 and S2 responses.
- `model_metad_rc`: response-conditional model with separate meta-d' for S1
  responses (`meta_d_rS1`) and S2 responses (`meta_d_rS2`).
"""

import numpy as np
import pymc as pm
import pytensor.tensor as pt


def phi(x):
    """Standard normal CDF."""
    return pm.math.invprobit(x)


def type1_block_totals(counts, nratings):
    """
    Split the counts into the four response blocks and their totals.

    Args:
        counts (ndarray): Response counts ordered as [nR_S1, nR_S2].
        nratings (int): Number of confidence ratings.

    Returns:
        dict: Count blocks 'nC_rS1', 'nI_rS2', 'nI_rS1', 'nC_rS2' and the
        type 1 totals 'CR', 'FA', 'M', 'H', 'N', 'S'.
    """
    counts = np.asarray(counts, dtype=int)
    R = nratings
    blocks = {
        "nC_rS1": counts[:R],
        "nI_rS2": counts[R : 2 * R],
        "nI_rS1": counts[2 * R : 3 * R],
        "nC_rS2": counts[3 * R : 4 * R],
    }
    totals = {
        "CR": int(blocks["nC_rS1"].sum()),
        "FA": int(blocks["nI_rS2"].sum()),
        "M": int(blocks["nI_rS1"].sum()),
        "H": int(blocks["nC_rS2"].sum()),
    }
    totals["N"] = totals["CR"] + totals["FA"]
    totals["S"] = totals["M"] + totals["H"]
    return {**blocks, **totals}


def _clip_normalize(pr, tol):
    # Avoid underflow of cell probabilities.
    prT = pt.maximum(pr, tol)
    return prT / pt.sum(prT)


def rS1_probabilities(meta_d, c1, cS1, tol):
    """
    Cell probabilities of S1 responses for correct and incorrect trials.

    Args:
        meta_d: Meta-d' governing S1 responses.
        c1: Type 1 criterion.
        cS1: Sorted type 2 criteria for S1 responses (all below c1).
        tol (float): Lower bound for each cell probability.

    Returns:
        tuple: (probabilities for nC_rS1, probabilities for nI_rS1), each
        ordered from high to low confidence.
    """
    S1mu = -meta_d / 2
    S2mu = meta_d / 2

    # Normalisation constants.
    C_area_rS1 = phi(c1 - S1mu)
    I_area_rS1 = phi(c1 - S2mu)

    # CDF at each boundary, from -inf up to the type 1 criterion.
    cdf_S1 = pt.concatenate([pt.zeros(1), phi(cS1 - S1mu), pt.stack([phi(c1 - S1mu)])])
    cdf_S2 = pt.concatenate([pt.zeros(1), phi(cS1 - S2mu), pt.stack([phi(c1 - S2mu)])])

    pr_C = pt.diff(cdf_S1) / C_area_rS1
    pr_I = pt.diff(cdf_S2) / I_area_rS1

    return _clip_normalize(pr_C, tol), _clip_normalize(pr_I, tol)


def rS2_probabilities(meta_d, c1, cS2, tol):
    """
    Cell probabilities of S2 responses for correct and incorrect trials.

    Args:
        meta_d: Meta-d' governing S2 responses.
        c1: Type 1 criterion.
        cS2: Sorted type 2 criteria for S2 responses (all above c1).
        tol (float): Lower bound for each cell probability.

    Returns:
        tuple: (probabilities for nC_rS2, probabilities for nI_rS2), each
        ordered from low to high confidence.
    """
    S1mu = -meta_d / 2
    S2mu = meta_d / 2

    # Normalisation constants.
    C_area_rS2 = 1 - phi(c1 - S2mu)
    I_area_rS2 = 1 - phi(c1 - S1mu)

    # Survival function at each boundary, from the type 1 criterion up to +inf.
    sf_S2 = pt.concatenate(
        [pt.stack([1 - phi(c1 - S2mu)]), 1 - phi(cS2 - S2mu), pt.zeros(1)]
    )
    sf_S1 = pt.concatenate(
        [pt.stack([1 - phi(c1 - S1mu)]), 1 - phi(cS2 - S1mu), pt.zeros(1)]
    )

    pr_C = (sf_S2[:-1] - sf_S2[1:]) / C_area_rS2
    pr_I = (sf_S1[:-1] - sf_S1[1:]) / I_area_rS2

    return _clip_normalize(pr_C, tol), _clip_normalize(pr_I, tol)


def _type1_sdt(data):
    """
    Declare the type 1 parameters and likelihood inside the active model.

    With fixed `d1`/`c1` in `data` the parameters are recorded as
    deterministics so they can still be monitored.
    """
    blocks = type1_block_totals(data["counts"], data["nratings"])

    if "d1" in data and "c1" in data:
        d1 = pm.Deterministic("d1", pt.as_tensor_variable(np.float64(data["d1"])))
        c1 = pm.Deterministic("c1", pt.as_tensor_variable(np.float64(data["c1"])))
    else:
        # Type 1 priors.
        c1 = pm.Normal("c1", mu=0, sigma=1 / np.sqrt(2))
        d1 = pm.Normal("d1", mu=0, sigma=np.sqrt(2))

    # Type 1 SDT binomial likelihood.
    h = phi(d1 / 2 - c1)
    f = phi(-d1 / 2 - c1)
    pm.Binomial("H", n=blocks["S"], p=h, observed=blocks["H"])
    pm.Binomial("FA", n=blocks["N"], p=f, observed=blocks["FA"])

    return d1, c1, blocks


def _type2_criteria(c1, tol):
    """Declare ordered type 2 criteria bounded by the type 1 criterion."""
    mu_c2 = pm.Normal("mu_c2", mu=0, sigma=10)
    sigma_c2 = pm.HalfNormal("sigma_c2", sigma=10)

    cS1_raw = pm.TruncatedNormal(
        "cS1_raw", mu=-mu_c2, sigma=sigma_c2, upper=c1 - tol, dims="criteria"
    )
    cS2_raw = pm.TruncatedNormal(
        "cS2_raw", mu=mu_c2, sigma=sigma_c2, lower=c1 + tol, dims="criteria"
    )

    cS1 = pm.Deterministic("cS1", pt.sort(cS1_raw), dims="criteria")
    cS2 = pm.Deterministic("cS2", pt.sort(cS2_raw), dims="criteria")

    return cS1, cS2


def _type2_likelihood(blocks, probs_rS1, probs_rS2):
    """Declare the four multinomial likelihoods of the confidence counts."""
    pr_C_rS1, pr_I_rS1 = probs_rS1
    pr_C_rS2, pr_I_rS2 = probs_rS2

    pm.Multinomial("nC_rS1", n=blocks["CR"], p=pr_C_rS1, observed=blocks["nC_rS1"])
    pm.Multinomial("nI_rS2", n=blocks["FA"], p=pr_I_rS2, observed=blocks["nI_rS2"])
    pm.Multinomial("nI_rS1", n=blocks["M"], p=pr_I_rS1, observed=blocks["nI_rS1"])
    pm.Multinomial("nC_rS2", n=blocks["H"], p=pr_C_rS2, observed=blocks["nC_rS2"])


def _coords(data):
    return {"criteria": np.arange(data["nratings"] - 1)}


def model_metad(data):
    """
    Define a PyMC model for meta-d' of a single observer.

    The model includes the following main parameters:
    - `d1` (-∞ - ∞): Type 1 sensitivity.
    - `c1` (-∞ - ∞): Type 1 criterion.
    - `meta_d` (-∞ - ∞): Metacognitive sensitivity, centred on d1.
    - `cS1`, `cS2`: Type 2 criteria for S1 and S2 responses.

    Args:
        data (dict): A dictionary containing:
            - 'counts' (ndarray): Response counts ordered as [nR_S1, nR_S2].
            - 'nratings' (int): Number of confidence ratings.
            - 'nTot' (int): Total number of trials.
            - 'Tol' (float): Lower bound for cell probabilities.
            - 'd1', 'c1' (float, optional): Fixed type 1 parameters.

    Returns:
        pm.Model: A PyMC model object representing the statistical structure.
    """
    with pm.Model(coords=_coords(data)) as model:

        d1, c1, blocks = _type1_sdt(data)

        # Prior on meta-d'.
        meta_d = pm.Normal("meta_d", mu=d1, sigma=np.sqrt(2))

        cS1, cS2 = _type2_criteria(c1, data["Tol"])

        # Likelihood.
        _type2_likelihood(
            blocks,
            rS1_probabilities(meta_d, c1, cS1, data["Tol"]),
            rS2_probabilities(meta_d, c1, cS2, data["Tol"]),
        )

        return model


def model_metad_rc(data):
    """
    Define a PyMC model for response-conditional meta-d' of a single observer.

    Same as `model_metad`, except that S1 responses are governed by
    `meta_d_rS1` and S2 responses by `meta_d_rS2`, both centred on d1.

    Args:
        data (dict): See `model_metad`.

    Returns:
        pm.Model: A PyMC model object representing the statistical structure.
    """
    with pm.Model(coords=_coords(data)) as model:

        d1, c1, blocks = _type1_sdt(data)

        # Priors on response-conditional meta-d'.
        meta_d_rS1 = pm.Normal("meta_d_rS1", mu=d1, sigma=np.sqrt(2))
        meta_d_rS2 = pm.Normal("meta_d_rS2", mu=d1, sigma=np.sqrt(2))

        cS1, cS2 = _type2_criteria(c1, data["Tol"])

        # Likelihood.
        _type2_likelihood(
            blocks,
            rS1_probabilities(meta_d_rS1, c1, cS1, data["Tol"]),
            rS2_probabilities(meta_d_rS2, c1, cS2, data["Tol"]),
        )

        return model
