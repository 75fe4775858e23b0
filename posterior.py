"""
Module: posterior.py

### About This Module
Reduces posterior samples of the meta-d' models to point estimates of
metacognitive sensitivity and efficiency.

M-ratio (meta-d' / d') and M-diff (meta-d' - d') are averaged over matched
draws, i.e. the same chain and iteration of meta-d' and d'.

### Functions:
- safe_dprime: Replaces draws of d' that are exactly zero.
- metacognitive_efficiency: M-ratio and M-diff from matched draws.
- reduce_posterior: Meta-d' and efficiency estimates for the pooled or the
  response-conditional model.
"""

import numpy as np

from errors import InvalidInput

# Substitute for d' draws of exactly zero when computing ratios.
DPRIME_FLOOR = 1e-4


def safe_dprime(d1_samples):
    """Flatten d' draws and replace exact zeros with `DPRIME_FLOOR`."""
    d1_samples = np.array(d1_samples, dtype=float).ravel()
    d1_samples[d1_samples == 0] = DPRIME_FLOOR
    return d1_samples


def metacognitive_efficiency(meta_d_samples, d1_samples):
    """
    Compute M-ratio and M-diff over matched posterior draws.

    Args:
        meta_d_samples (ndarray):
            Draws of meta-d', shape (chains, draws) or flattened.
        d1_samples (ndarray):
            Draws of d' with the same shape as `meta_d_samples`.

    Returns:
        tuple: (M_ratio, M_diff) as floats.
    """
    meta_d_samples = np.asarray(meta_d_samples, dtype=float)
    d1_samples = np.asarray(d1_samples, dtype=float)

    if d1_samples.size == 1 and meta_d_samples.size > 1:
        # Broadcast a fixed d'.
        d1_samples = np.full(meta_d_samples.shape, float(d1_samples.ravel()[0]))

    if meta_d_samples.shape != d1_samples.shape:
        raise InvalidInput(
            f"meta-d' draws {meta_d_samples.shape} and d' draws "
            f"{d1_samples.shape} are not matched"
        )

    meta_d_samples = meta_d_samples.ravel()
    M_ratio = np.mean(meta_d_samples / safe_dprime(d1_samples))
    M_diff = np.mean(meta_d_samples - d1_samples.ravel())

    return float(M_ratio), float(M_diff)


def reduce_posterior(samples, stats, response_conditional=False):
    """
    Summarize meta-d' and metacognitive efficiency from posterior samples.

    Args:
        samples (dict):
            Posterior draws keyed by parameter name.
        stats (dict):
            Sampler statistics with posterior means under 'mean'.
        response_conditional (bool, optional):
            Whether the samples come from the response-conditional model.

    Returns:
        dict: 'meta_d', 'M_ratio' and 'M_diff' for the pooled model, or the
        same quantities with '_rS1' and '_rS2' suffixes for the
        response-conditional model.
    """
    d1_samples = samples["d1"]

    if not response_conditional:
        M_ratio, M_diff = metacognitive_efficiency(samples["meta_d"], d1_samples)
        return {
            "meta_d": stats["mean"]["meta_d"],
            "M_ratio": M_ratio,
            "M_diff": M_diff,
        }

    reduced = {}
    for response in ("rS1", "rS2"):
        name = f"meta_d_{response}"
        M_ratio, M_diff = metacognitive_efficiency(samples[name], d1_samples)
        reduced[name] = stats["mean"][name]
        reduced[f"M_ratio_{response}"] = M_ratio
        reduced[f"M_diff_{response}"] = M_diff

    return reduced
