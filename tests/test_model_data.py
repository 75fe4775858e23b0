import numpy as np
import pytest

from errors import InvalidInput
from model_data import TOL, package_model_data


def test_pooled_model_selection(toy_counts):
    packaged = package_model_data(*toy_counts)
    assert packaged["model_name"] == "model_metad"
    assert packaged["monitorparams"] == ["meta_d", "d1", "c1", "cS1", "cS2"]


def test_response_conditional_model_selection(toy_counts):
    packaged = package_model_data(*toy_counts, response_conditional=True)
    assert packaged["model_name"] == "model_metad_rc"
    assert packaged["monitorparams"] == ["meta_d_rS1", "meta_d_rS2", "d1", "c1", "cS1", "cS2"]


def test_payload_when_estimating_dprime(toy_counts):
    nR_S1, nR_S2 = toy_counts
    data = package_model_data(nR_S1, nR_S2)["data"]
    np.testing.assert_array_equal(data["counts"], nR_S1 + nR_S2)
    assert data["nratings"] == 4
    assert data["nTot"] == sum(nR_S1) + sum(nR_S2)
    assert data["Tol"] == TOL
    assert "d1" not in data
    assert "c1" not in data


def test_payload_with_fixed_dprime(toy_counts):
    data = package_model_data(*toy_counts, estimate_dprime=False, d1=2.0, c1=-0.1)["data"]
    assert data["d1"] == 2.0
    assert data["c1"] == -0.1


def test_fixed_dprime_requires_values(toy_counts):
    with pytest.raises(InvalidInput):
        package_model_data(*toy_counts, estimate_dprime=False)


def test_monitorparams_are_not_shared_between_calls(toy_counts):
    first = package_model_data(*toy_counts)
    first["monitorparams"].append("mu_c2")
    second = package_model_data(*toy_counts)
    assert "mu_c2" not in second["monitorparams"]
