"""
Module: convergence.py

### About This Module
Diagnostics for meta-d' fits. It converts the posterior samples stored in a fit
into ArviZ InferenceData, prints and returns convergence statistics (R̂, ESS)
for the monitored parameters, and draws trace plots and type 2 ROC plots to
visually assess MCMC mixing and model fit.

### Functions:
- fit_to_inference_data: Wraps fit['mcmc']['samples'] as InferenceData.
- posterior_frame: Posterior draws as a DataFrame, chains and draws collapsed.
- convergence_summary: ArviZ summary table of the monitored parameters.
- convergence_plots: Trace and density plots of the monitored parameters.
- plot_type2_roc: Observed and estimated type 2 ROC curves for S1 and S2
  responses.
"""

import os

import arviz as az
import matplotlib.pyplot as plt
import numpy as np
import pandas as pd
import seaborn as sns

# Colours for S1 and S2 responses.
color_responses = {"rS1": "#56B4E9", "rS2": "#D55E00"}


def fit_to_inference_data(fit):
    """
    Convert the posterior samples of a fit into an InferenceData object.

    Args:
        fit (dict):
            Output of `fit_meta_d_mcmc`.

    Returns:
        arviz.InferenceData: Posterior group with 'chain' and 'draw' dims.
    """
    samples = {
        name: np.asarray(values) for name, values in fit["mcmc"]["samples"].items()
    }
    return az.from_dict(posterior=samples)


def posterior_frame(fit):
    """
    Collect scalar posterior draws in a DataFrame, one row per draw.

    Vector parameters are expanded into one column per element, e.g.
    'cS1[0]', 'cS1[1]'.
    """
    columns = {}
    for name, values in fit["mcmc"]["samples"].items():
        values = np.asarray(values)
        flat = values.reshape(values.shape[0] * values.shape[1], -1)
        if values.ndim == 2:
            columns[name] = flat[:, 0]
        else:
            for i in range(flat.shape[1]):
                columns[f"{name}[{i}]"] = flat[:, i]
    return pd.DataFrame(columns)


def convergence_summary(fit, verbose=True):
    """
    Compute convergence statistics for the monitored parameters.

    Args:
        fit (dict):
            Output of `fit_meta_d_mcmc`.
        verbose (bool, optional):
            Print the summary table.

    Returns:
        pandas.DataFrame: ArviZ summary with means, HDIs, ESS and R̂.
    """
    idata = fit_to_inference_data(fit)
    summary = az.summary(idata, var_names=list(fit["mcmc"]["samples"]))
    if verbose:
        print("Convergence statistics for meta-d' fit:\n", summary)
    return summary


def convergence_plots(fit, output_dir="Plots/Convergence", name="metad"):
    """
    Generate and save trace plots for MCMC convergence diagnostics.

    Args:
        fit (dict):
            Output of `fit_meta_d_mcmc`.
        output_dir (str, optional):
            Directory where the plot will be saved.
        name (str, optional):
            Prefix of the plot file name.

    Returns:
        str: Path of the saved plot.
    """
    os.makedirs(output_dir, exist_ok=True)

    # Plot parameters' traces.
    az.plot_trace(
        fit_to_inference_data(fit),
        var_names=list(fit["mcmc"]["samples"]),
        compact=True,
        combined=False,
        figsize=(8, 12),
    )

    plt.tight_layout()

    # Save plot in output directory.
    path = os.path.join(output_dir, f"{name}_trace.png")
    plt.savefig(path, dpi=300)
    plt.close()

    return path


def plot_type2_roc(fit, axes=None, output_file=None):
    """
    Plot observed and estimated type 2 ROC curves for both response categories.

    Each curve runs from (0, 0) through the type 2 (FAR, HR) points, ordered
    from the most to the least confident boundary, to (1, 1).

    Args:
        fit (dict):
            Output of `fit_meta_d_mcmc`.
        axes (array of matplotlib.axes.Axes, optional):
            Two axes, for S1 and S2 responses.
        output_file (str, optional):
            Save the figure to this path.

    Returns:
        matplotlib.figure.Figure: The figure holding the plots.
    """
    sns.set_style("whitegrid")
    if axes is None:
        fig, axes = plt.subplots(1, 2, figsize=(10, 5))
    else:
        fig = axes[0].figure

    for ax, response in zip(axes, ("rS1", "rS2")):
        color = color_responses[response]
        for kind, marker, linestyle in (("obs", "o", "none"), ("est", None, "-")):
            far = np.concatenate([[0], fit[f"{kind}_FAR2_{response}"][::-1], [1]])
            hr = np.concatenate([[0], fit[f"{kind}_HR2_{response}"][::-1], [1]])
            ax.plot(
                far,
                hr,
                color=color,
                marker=marker,
                linestyle=linestyle,
                label="Observed" if kind == "obs" else "Estimated",
            )

        ax.plot([0, 1], [0, 1], color="grey", linestyle="--", linewidth=0.8)
        ax.set_xlim(0, 1)
        ax.set_ylim(0, 1)
        ax.set_aspect("equal")
        ax.set_xlabel("Type 2 false alarm rate")
        ax.set_ylabel("Type 2 hit rate")
        ax.set_title(f"{response} responses")
        ax.legend(loc="lower right")

    fig.tight_layout()
    if output_file is not None:
        fig.savefig(output_file, dpi=300)

    return fig
