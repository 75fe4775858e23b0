"""
Module: model_data.py

### About This Module
Assembles the data dictionary consumed by the meta-d' models and selects the
model variant and the parameters to monitor.

### Functions:
- package_model_data: Builds the model input dictionary, model name and list
  of monitored parameters.
"""

import numpy as np

from errors import InvalidInput
from type1_sdt import check_counts

# Tolerance used by the models to keep cell probabilities above zero.
TOL = 1e-05

# Model function names in models_definitions and their monitored parameters.
MODELS = {
    False: ("model_metad", ["meta_d", "d1", "c1", "cS1", "cS2"]),
    True: ("model_metad_rc", ["meta_d_rS1", "meta_d_rS2", "d1", "c1", "cS1", "cS2"]),
}


def package_model_data(
    nR_S1,
    nR_S2,
    estimate_dprime=True,
    response_conditional=False,
    d1=None,
    c1=None,
    tol=TOL,
):
    """
    Package response counts for the meta-d' samplers.

    When `estimate_dprime` is true the model estimates d1 and c1 jointly with
    meta-d'; otherwise the point estimates are passed as fixed inputs.

    Args:
        nR_S1 (array-like):
            Response counts for S1 stimulus trials.
        nR_S2 (array-like):
            Response counts for S2 stimulus trials.
        estimate_dprime (bool, optional):
            Estimate type 1 d' and criterion inside the model.
        response_conditional (bool, optional):
            Fit meta-d' separately for S1 and S2 responses.
        d1 (float, optional):
            Fixed type 1 d', required when `estimate_dprime` is false.
        c1 (float, optional):
            Fixed type 1 criterion, required when `estimate_dprime` is false.
        tol (float, optional):
            Lower bound for model cell probabilities.

    Returns:
        dict: 'data' (model input dictionary), 'model_name' and
        'monitorparams'.
    """
    nR_S1, nR_S2 = check_counts(nR_S1, nR_S2)

    counts = np.concatenate([nR_S1, nR_S2])
    data = {
        "counts": counts,
        "nratings": len(nR_S1) // 2,
        "nTot": int(counts.sum()),
        "Tol": tol,
    }

    if not estimate_dprime:
        if d1 is None or c1 is None:
            raise InvalidInput("fixed d1 and c1 are required when not estimating d'")
        data["d1"] = float(d1)
        data["c1"] = float(c1)

    model_name, monitorparams = MODELS[bool(response_conditional)]

    return {
        "data": data,
        "model_name": model_name,
        "monitorparams": list(monitorparams),
    }
