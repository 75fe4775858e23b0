"""
Module: run_pymc.py

### About This Module
This module manages the Bayesian sampling process for the meta-d' models. It
resolves a model definition by name, builds the model from the packaged data,
runs the PyMC sampler and reduces the resulting InferenceData to plain sample
arrays and summary statistics (posterior means, Rhat and DIC).

Any other sampler can be used by the fitting pipeline as long as it accepts the
same keyword arguments as `sampling_fun` and returns the same
`(samples, stats)` pair.

### Functions:
- print_version_info: Prints interpreter, PyMC and ArviZ versions.
- sampling_fun: Executes the sampling process for a specified model and
  returns monitored samples and their statistics.
- summarize_samples: Posterior means and Rhat for the monitored parameters.
- compute_dic: Deviance information criterion from the log-likelihood group.
"""

import importlib
import platform
import sys
import time

import arviz as az
import numpy as np
import pymc as pm
import xarray as xr
from pymc.exceptions import SamplingError

from errors import SamplerFailure


def print_version_info():
    """Print version information for Python, PyMC and ArviZ."""
    # Print the path to the Python interpreter.
    print(f"Python Interpreter Path: {sys.executable}")

    # Print the Python version.
    print(f"Python Version: {platform.python_version()}")

    # Print the PyMC and ArviZ versions.
    print(f"PyMC version: {pm.__version__}")
    print(f"ArviZ version: {az.__version__}")


def _as_value(xarr):
    values = np.asarray(xarr.values, dtype=float)
    return float(values) if values.ndim == 0 else values


def summarize_samples(posterior, var_names):
    """
    Compute posterior means and Rhat for the monitored parameters.

    Args:
        posterior (xarray.Dataset):
            Posterior group with 'chain' and 'draw' dimensions.
        var_names (list):
            Names of the parameters to summarize.

    Returns:
        tuple: (mean, Rhat) dictionaries keyed by parameter name, holding
        floats for scalar parameters and arrays otherwise. Parameters that are
        constant across all draws (fixed d1 and c1) get an Rhat of 1.
    """
    subset = posterior[var_names]
    means = subset.mean(dim=("chain", "draw"))

    constant = [
        name for name in var_names if bool((subset[name].max() == subset[name].min()).all())
    ]
    varying = [name for name in var_names if name not in constant]

    Rhat = {}
    if varying:
        rhat = az.rhat(subset[varying])
        Rhat.update({name: _as_value(rhat[name]) for name in varying})
    for name in constant:
        Rhat[name] = _as_value(xr.ones_like(means[name]))

    mean = {name: _as_value(means[name]) for name in var_names}
    Rhat = {name: Rhat[name] for name in var_names}
    return mean, Rhat


def compute_dic(log_likelihood):
    """
    Compute the deviance information criterion.

    The deviance of each draw is -2 times the total log-likelihood of the
    observed data; DIC is the mean deviance plus the effective number of
    parameters, taken as half the deviance variance.

    Args:
        log_likelihood (xarray.Dataset):
            Pointwise log-likelihood with 'chain' and 'draw' dimensions.

    Returns:
        float: The DIC value.
    """
    total = 0
    for name in log_likelihood.data_vars:
        ll = log_likelihood[name]
        extra_dims = [dim for dim in ll.dims if dim not in ("chain", "draw")]
        total = total + (ll.sum(dim=extra_dims) if extra_dims else ll)

    deviance = -2 * np.asarray(total.values, dtype=float).ravel()
    return float(deviance.mean() + deviance.var() / 2)


def sampling_fun(
    data,
    model_name,
    init0=None,
    monitorparams=None,
    nchains=3,
    nburnin=3000,
    nsamples=10000,
    nthin=1,
    doparallel=False,
    dic=True,
    seed=None,
    verbosity=1,
    model_module_name="models_definitions",
):
    """
    Execute model sampling for Bayesian inference using PyMC.

    This function dynamically imports a model definition from a specified module,
    creates the model with the provided data and samples its posterior with
    NUTS. `nsamples` draws are recorded per chain after keeping every `nthin`-th
    draw, and `nburnin` tuning draws are discarded.

    Args:
        data (dict):
            The dictionary containing the data needed by the model.
        model_name (str):
            The name of the function within the module that returns the PyMC model.
        init0 (list, optional):
            One dictionary of initial values per chain.
        monitorparams (list, optional):
            Parameters to return, defaults to all free and deterministic
            variables of the model.
        nchains (int, optional):
            Number of chains.
        nburnin (int, optional):
            Number of tuning draws per chain.
        nsamples (int, optional):
            Number of recorded draws per chain.
        nthin (int, optional):
            Thinning interval.
        doparallel (bool, optional):
            Run chains in parallel processes.
        dic (bool, optional):
            Compute the deviance information criterion.
        seed (int, optional):
            Random seed for reproducibility.
        verbosity (int, optional):
            0 silences progress output.
        model_module_name (str, optional):
            The name of the Python module where the model function is defined.

    Returns:
        tuple: (samples, stats) where `samples` maps each monitored parameter to
        an array of shape (chains, draws, ...) and `stats` holds 'mean',
        'Rhat' and 'dic'. Rhat is 1 for parameters held fixed in the model.

    Raises:
        SamplerFailure: If the model cannot be built or sampled.
    """
    # Dynamically import the model definition module.
    try:
        model_module = importlib.import_module(model_module_name)
        model_func = getattr(model_module, model_name)
    except (ImportError, AttributeError) as err:
        raise SamplerFailure(
            f"model {model_module_name}.{model_name} not found"
        ) from err

    # Use the function to create the model.
    try:
        model = model_func(data)
    except (ValueError, TypeError, KeyError) as err:
        raise SamplerFailure(f"could not build model {model_name}") from err

    if monitorparams is None:
        monitorparams = [rv.name for rv in model.free_RVs + model.deterministics]

    if init0 is not None and not any(init0):
        init0 = None

    if verbosity > 0:
        print(f"Running PyMC with model {model_name} ...")
    start = time.perf_counter()

    with model:
        try:
            idata = pm.sample(
                tune=nburnin,
                draws=nsamples * nthin,
                chains=nchains,
                cores=nchains if doparallel else 1,
                initvals=init0,
                random_seed=seed,
                progressbar=verbosity > 0,
                return_inferencedata=True,
                compute_convergence_checks=False,
                discard_tuned_samples=True,
                idata_kwargs={"log_likelihood": bool(dic)},
            )
        except (
            SamplingError,
            RuntimeError,
            ValueError,
            TypeError,
            KeyError,
            FloatingPointError,
        ) as err:
            raise SamplerFailure(f"sampling failed for model {model_name}") from err

    if verbosity > 0:
        print(f"Elapsed time is {time.perf_counter() - start:.2f} seconds.")

    # Keep every nthin-th draw.
    posterior = idata.posterior.isel(draw=slice(None, None, nthin))

    missing = [name for name in monitorparams if name not in posterior]
    if missing:
        raise SamplerFailure(f"monitored parameters not in posterior: {missing}")

    samples = {name: np.asarray(posterior[name].values) for name in monitorparams}
    for name, values in samples.items():
        if not np.all(np.isfinite(values)):
            raise SamplerFailure(f"non-finite posterior samples for {name}")

    mean, Rhat = summarize_samples(posterior, monitorparams)

    stats = {"mean": mean, "Rhat": Rhat, "dic": None}
    if dic:
        log_likelihood = idata.log_likelihood.isel(draw=slice(None, None, nthin))
        stats["dic"] = compute_dic(log_likelihood)

    return samples, stats
