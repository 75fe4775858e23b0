"""
Module: fit_meta_d_mcmc.py

### Context and Source
Given data from an experiment where an observer discriminates between two
stimulus alternatives on every trial and provides confidence ratings, this
module fits both d' and meta-d' with MCMC.

For the type 1 d' model see:
Lee (2008) BayesSDT: Software for Bayesian inference with signal detection
theory. Behavior Research Methods 40 (2), 450-456.

For the meta-d' model see:
Maniscalco & Lau (2012) A signal detection theoretic approach for estimating
metacognitive sensitivity from confidence ratings. Consciousness and Cognition.

The response-conditional variant fits meta-d' separately for S1 and S2
responses, see Maniscalco & Lau (2014).

### About This Module
The fit proceeds in four steps:
1. Type 1 point estimates from adjusted counts (`type1_sdt`).
2. Packaging of the counts for the selected model (`model_data`).
3. Posterior sampling (`run_pymc.sampling_fun` or any compatible sampler).
4. Reduction of the samples to meta-d', M-ratio and M-diff (`posterior`) and
   reconstruction of observed and estimated type 2 ROC points (`type2_roc`).

All parameter values in the returned fit are posterior means; the full
posterior draws are kept under fit['mcmc']['samples'].

### Functions:
- resolve_mcmc_params: Merges user MCMC options with the defaults.
- fit_meta_d_mcmc: Fits d' and meta-d' for one observer.
"""

import numbers

import numpy as np
from scipy.stats import norm

from errors import InvalidInput
from model_data import package_model_data
from posterior import reduce_posterior
from run_pymc import print_version_info, sampling_fun
from type1_sdt import check_counts, type1_sdt
from type2_roc import type2_roc

# Default MCMC parameters.
DEFAULT_MCMC_PARAMS = {
    "response_conditional": False,  # Fit response-conditional meta-d'?
    "estimate_dprime": True,  # Also estimate d' in the same model?
    "nchains": 3,  # How many chains?
    "nburnin": 3000,  # How many burn-in samples?
    "nsamples": 10000,  # How many recorded samples?
    "nthin": 1,  # How often is a sample recorded?
    "doparallel": False,  # Parallel option.
    "dic": True,  # Save DIC.
    "init0": None,  # Initial values, one dictionary per chain.
    "seed": None,
    "verbosity": 1,
}

# Equal variance of the S1 and S2 distributions.
S_RATIO = 1


def resolve_mcmc_params(mcmc_params=None):
    """
    Merge user MCMC options over `DEFAULT_MCMC_PARAMS`.

    Args:
        mcmc_params (dict, optional):
            Partial or complete MCMC options.

    Returns:
        dict: Complete MCMC options, with `init0` expanded to one dictionary
        per chain.

    Raises:
        InvalidInput: If an option is unknown or out of range.
    """
    mcmc_params = dict(mcmc_params or {})

    unknown = sorted(set(mcmc_params) - set(DEFAULT_MCMC_PARAMS))
    if unknown:
        raise InvalidInput(f"unknown MCMC options: {unknown}")

    params = {**DEFAULT_MCMC_PARAMS, **mcmc_params}

    for key in ("nchains", "nsamples", "nthin", "nburnin"):
        value = params[key]
        if isinstance(value, bool) or not isinstance(value, numbers.Integral):
            raise InvalidInput(f"{key} must be an integer, got {value!r}")
        params[key] = int(value)

    for key in ("nchains", "nsamples", "nthin"):
        if params[key] < 1:
            raise InvalidInput(f"{key} must be at least 1")
    if params["nburnin"] < 0:
        raise InvalidInput("nburnin must be non-negative")

    for key in ("response_conditional", "estimate_dprime", "doparallel", "dic"):
        params[key] = bool(params[key])

    if params["init0"] is None:
        params["init0"] = [{} for _ in range(params["nchains"])]
    else:
        params["init0"] = [dict(init) for init in params["init0"]]
        if len(params["init0"]) != params["nchains"]:
            raise InvalidInput("init0 must hold one dictionary per chain")

    return params


def fit_meta_d_mcmc(nR_S1, nR_S2, mcmc_params=None, fncdf=None, fninv=None, sampler=None):
    """
    Fit type 1 d' and meta-d' of one observer with MCMC.

    Args:
        nR_S1 (array-like):
            Response counts for S1 stimulus trials, S1 responses first (high to
            low confidence), then S2 responses (low to high confidence).
        nR_S2 (array-like):
            Response counts for S2 stimulus trials, in the same order.
        mcmc_params (dict, optional):
            MCMC options overriding `DEFAULT_MCMC_PARAMS`.
        fncdf (callable, optional):
            CDF of the type 1 distribution, called as fncdf(x, mu, sd).
            Defaults to the normal CDF.
        fninv (callable, optional):
            Inverse CDF of the type 1 distribution, defaults to the standard
            normal quantile function.
        sampler (callable, optional):
            Posterior sampler with the signature of `run_pymc.sampling_fun`.

    Returns:
        dict: The fit, with keys
            - 'd1', 'c1': type 1 d' and criterion.
            - 'meta_d', 'M_ratio', 'M_diff' (pooled model) or 'meta_d_rS1',
              'meta_d_rS2', 'M_ratio_rS1', 'M_ratio_rS2', 'M_diff_rS1',
              'M_diff_rS2' (response-conditional model).
            - 't2ca_rS1', 't2ca_rS2': type 2 criteria for S1 and S2 responses.
            - 'mcmc': 'dic', 'Rhat', 'samples' and 'params'.
            - 'obs_HR2_rS1', 'est_HR2_rS1', 'obs_FAR2_rS1', 'est_FAR2_rS1' and
              the same for 'rS2': observed and estimated type 2 rates.
            - 'd1_point', 'c1_point': point estimates from adjusted counts.
            - 'response_conditional': model variant flag.

    Raises:
        InvalidInput: If the counts or options are malformed.
        DomainError: If a type 1 rate is degenerate.
        DivisionByZero: If a type 2 count group is empty.
        SamplerFailure: If sampling fails.
    """
    if fncdf is None:
        fncdf = norm.cdf
    if fninv is None:
        fninv = norm.ppf
    if sampler is None:
        sampler = sampling_fun

    nR_S1, nR_S2 = check_counts(nR_S1, nR_S2)
    params = resolve_mcmc_params(mcmc_params)

    if params["verbosity"] > 0:
        print("----------------------------------------")
        print("Bayesian meta-d' model")
        print("----------------------------------------")
        if params["verbosity"] > 1:
            print_version_info()

    # Type 1 point estimates.
    type1 = type1_sdt(nR_S1, nR_S2, fninv=fninv)

    # Assign data and select the model and monitored parameters.
    packaged = package_model_data(
        nR_S1,
        nR_S2,
        estimate_dprime=params["estimate_dprime"],
        response_conditional=params["response_conditional"],
        d1=type1["d1"],
        c1=type1["c1"],
    )

    # Sample.
    samples, stats = sampler(
        data=packaged["data"],
        model_name=packaged["model_name"],
        init0=params["init0"],
        monitorparams=packaged["monitorparams"],
        nchains=params["nchains"],
        nburnin=params["nburnin"],
        nsamples=params["nsamples"],
        nthin=params["nthin"],
        doparallel=params["doparallel"],
        dic=params["dic"],
        seed=params["seed"],
        verbosity=params["verbosity"],
    )

    # Package output.
    fit = {
        "d1": float(stats["mean"]["d1"]),
        "c1": float(stats["mean"]["c1"]),
        "t2ca_rS1": np.atleast_1d(np.asarray(stats["mean"]["cS1"], dtype=float)),
        "t2ca_rS2": np.atleast_1d(np.asarray(stats["mean"]["cS2"], dtype=float)),
        "d1_point": type1["d1"],
        "c1_point": type1["c1"],
        "response_conditional": params["response_conditional"],
        "mcmc": {
            "dic": stats.get("dic"),
            "Rhat": stats["Rhat"],
            "samples": samples,
            "params": params,
        },
    }

    fit.update(reduce_posterior(samples, stats, params["response_conditional"]))

    # Estimated type 2 rates from either the pooled or the response-conditional model.
    if params["response_conditional"]:
        meta_d_rS1, meta_d_rS2 = fit["meta_d_rS1"], fit["meta_d_rS2"]
    else:
        meta_d_rS1 = meta_d_rS2 = fit["meta_d"]

    fit.update(
        type2_roc(
            nR_S1,
            nR_S2,
            meta_d_rS1,
            meta_d_rS2,
            fit["c1"],
            fit["t2ca_rS1"],
            fit["t2ca_rS2"],
            fncdf=fncdf,
            s=S_RATIO,
        )
    )

    return fit


if __name__ == "__main__":

    # Toy data.
    nR_S1 = [1552, 933, 954, 720, 448, 220, 78, 27]
    nR_S2 = [33, 77, 213, 469, 729, 1013, 975, 1559]

    fit = fit_meta_d_mcmc(nR_S1, nR_S2, {"seed": 42})
    print(f"d' = {fit['d1']:.3f}, meta-d' = {fit['meta_d']:.3f}")
    print(f"M-ratio = {fit['M_ratio']:.3f}, M-diff = {fit['M_diff']:.3f}")
    print(f"DIC = {fit['mcmc']['dic']:.1f}")
