import numpy as np
import pytensor.tensor as pt
import pytest

from model_data import package_model_data
from models_definitions import (
    model_metad,
    model_metad_rc,
    rS1_probabilities,
    rS2_probabilities,
    type1_block_totals,
)
from simulation import type2_cell_probabilities


def _free_names(model):
    return {rv.name for rv in model.free_RVs}


def test_block_totals(toy_counts):
    nR_S1, nR_S2 = toy_counts
    blocks = type1_block_totals(nR_S1 + nR_S2, 4)
    np.testing.assert_array_equal(blocks["nC_rS1"], [1552, 933, 954, 720])
    np.testing.assert_array_equal(blocks["nI_rS2"], [448, 220, 78, 27])
    np.testing.assert_array_equal(blocks["nI_rS1"], [33, 77, 213, 469])
    np.testing.assert_array_equal(blocks["nC_rS2"], [729, 1013, 975, 1559])
    assert blocks["N"] == sum(nR_S1)
    assert blocks["S"] == sum(nR_S2)
    assert blocks["H"] == 729 + 1013 + 975 + 1559


def test_pooled_model_structure(toy_counts):
    data = package_model_data(*toy_counts)["data"]
    model = model_metad(data)

    assert {"d1", "c1", "meta_d", "mu_c2", "sigma_c2", "cS1_raw", "cS2_raw"} == _free_names(model)
    assert {"cS1", "cS2"} <= {rv.name for rv in model.deterministics}
    assert {"H", "FA", "nC_rS1", "nI_rS2", "nI_rS1", "nC_rS2"} == {
        rv.name for rv in model.observed_RVs
    }
    assert np.isfinite(model.compile_logp()(model.initial_point()))


def test_response_conditional_model_structure(toy_counts):
    data = package_model_data(*toy_counts, response_conditional=True)["data"]
    model = model_metad_rc(data)

    names = _free_names(model)
    assert {"meta_d_rS1", "meta_d_rS2"} <= names
    assert "meta_d" not in names
    assert np.isfinite(model.compile_logp()(model.initial_point()))


def test_fixed_dprime_is_not_sampled(toy_counts):
    data = package_model_data(*toy_counts, estimate_dprime=False, d1=2.0, c1=0.0)["data"]
    model = model_metad(data)

    assert "d1" not in _free_names(model)
    assert "c1" not in _free_names(model)
    assert {"d1", "c1"} <= {rv.name for rv in model.deterministics}


def test_cell_probabilities_match_normal_areas():
    meta_d, c1 = 1.5, 0.1
    cS1 = np.array([-1.2, -0.6, -0.2])
    cS2 = np.array([0.4, 0.9, 1.5])

    pr_C_rS1, pr_I_rS1 = rS1_probabilities(meta_d, c1, pt.as_tensor_variable(cS1), 1e-05)
    pr_C_rS2, pr_I_rS2 = rS2_probabilities(meta_d, c1, pt.as_tensor_variable(cS2), 1e-05)
    expected = type2_cell_probabilities(meta_d, c1, cS1, cS2)

    np.testing.assert_allclose(pr_C_rS1.eval(), expected["nC_rS1"], rtol=1e-6)
    np.testing.assert_allclose(pr_I_rS1.eval(), expected["nI_rS1"], rtol=1e-6)
    np.testing.assert_allclose(pr_C_rS2.eval(), expected["nC_rS2"], rtol=1e-6)
    np.testing.assert_allclose(pr_I_rS2.eval(), expected["nI_rS2"], rtol=1e-6)


def test_cell_probabilities_are_bounded_below():
    pr_C, pr_I = rS2_probabilities(4.0, 0.0, pt.as_tensor_variable(np.array([3.0, 8.0])), 1e-05)
    pr_C = pr_C.eval()
    pr_I = pr_I.eval()
    assert pr_I.min() >= 1e-05 / (1 + 3e-05)
    assert pr_C.sum() == pytest.approx(1.0)
    assert pr_I.sum() == pytest.approx(1.0)
