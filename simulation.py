"""
Module: simulation.py

### About This Module
Generates confidence-rating counts from the meta-d' generative model. Type 1
responses are drawn from an equal-variance SDT observer with sensitivity `d`
and criterion `c`; confidence ratings within each response are drawn from the
meta-d' distributions cut at the type 2 criteria. Simulated counts are used to
demonstrate and check the fitting procedure.

### Functions:
- type2_cell_probabilities: Rating probabilities of the four response blocks.
- metad_sim: Simulates nR_S1 and nR_S2 counts for one observer.
"""

import numpy as np
from scipy.stats import norm

from errors import InvalidInput


def type2_cell_probabilities(meta_d, c, c1, c2):
    """
    Rating probabilities within each response block under the meta-d' model.

    Args:
        meta_d (float):
            Metacognitive sensitivity.
        c (float):
            Type 1 criterion.
        c1 (array-like):
            Ascending type 2 criteria for S1 responses, all below `c`.
        c2 (array-like):
            Ascending type 2 criteria for S2 responses, all above `c`.

    Returns:
        dict: Probability vectors 'nC_rS1', 'nI_rS1' (high to low confidence)
        and 'nC_rS2', 'nI_rS2' (low to high confidence).
    """
    S1mu = -meta_d / 2
    S2mu = meta_d / 2

    # CDF at the S1 response boundaries and survival at the S2 boundaries.
    edges_rS1 = np.concatenate([[-np.inf], c1, [c]])
    edges_rS2 = np.concatenate([[c], c2, [np.inf]])

    def block(edges, mu, below):
        if below:
            mass = np.diff(norm.cdf(edges, mu, 1))
        else:
            sf = norm.sf(edges, mu, 1)
            mass = sf[:-1] - sf[1:]
        return mass / mass.sum()

    return {
        "nC_rS1": block(edges_rS1, S1mu, True),
        "nI_rS1": block(edges_rS1, S2mu, True),
        "nC_rS2": block(edges_rS2, S2mu, False),
        "nI_rS2": block(edges_rS2, S1mu, False),
    }


def metad_sim(d, metad, c, c1, c2, ntrials, rng=None):
    """
    Simulate response counts from the meta-d' model.

    Args:
        d (float):
            Type 1 sensitivity.
        metad (float):
            Metacognitive sensitivity.
        c (float):
            Type 1 criterion.
        c1 (array-like):
            Ascending type 2 criteria for S1 responses, all below `c`.
        c2 (array-like):
            Ascending type 2 criteria for S2 responses, all above `c`.
        ntrials (int):
            Total number of trials, split evenly between S1 and S2.
        rng (numpy.random.Generator, optional):
            Random number generator.

    Returns:
        tuple: (nR_S1, nR_S2) integer count arrays of length 2R with
        R = len(c1) + 1.
    """
    if rng is None:
        rng = np.random.default_rng()

    c1 = np.asarray(c1, dtype=float)
    c2 = np.asarray(c2, dtype=float)
    if len(c1) != len(c2) or len(c1) < 1:
        raise InvalidInput("c1 and c2 must hold the same number (>= 1) of criteria")
    if np.any(np.diff(c1) < 0) or np.any(np.diff(c2) < 0):
        raise InvalidInput("type 2 criteria must be in ascending order")
    if np.any(c1 >= c) or np.any(c2 <= c):
        raise InvalidInput("type 2 criteria must lie on their side of c")

    n_S1 = ntrials // 2
    n_S2 = ntrials - n_S1

    # Type 1 responses.
    HR = norm.cdf(d / 2 - c)
    FAR = norm.cdf(-d / 2 - c)
    H = rng.binomial(n_S2, HR)
    FA = rng.binomial(n_S1, FAR)
    CR = n_S1 - FA
    M = n_S2 - H

    # Confidence ratings within each response block.
    pr = type2_cell_probabilities(metad, c, c1, c2)
    nC_rS1 = rng.multinomial(CR, pr["nC_rS1"])
    nI_rS2 = rng.multinomial(FA, pr["nI_rS2"])
    nI_rS1 = rng.multinomial(M, pr["nI_rS1"])
    nC_rS2 = rng.multinomial(H, pr["nC_rS2"])

    nR_S1 = np.concatenate([nC_rS1, nI_rS2])
    nR_S2 = np.concatenate([nI_rS1, nC_rS2])

    return nR_S1, nR_S2
