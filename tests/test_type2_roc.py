import numpy as np
import pytest
from scipy.stats import norm

from errors import DivisionByZero, InvalidInput
from type2_roc import (
    estimated_type2_rates,
    observed_type2_rates,
    type2_count_groups,
    type2_roc,
)


def test_count_groups_are_ordered_from_low_to_high_confidence(toy_counts):
    nR_S1, nR_S2 = toy_counts
    correct, incorrect = type2_count_groups(nR_S1, nR_S2, "rS1")
    np.testing.assert_array_equal(correct, [720, 954, 933, 1552])
    np.testing.assert_array_equal(incorrect, [469, 213, 77, 33])

    correct, incorrect = type2_count_groups(nR_S1, nR_S2, "rS2")
    np.testing.assert_array_equal(correct, [729, 1013, 975, 1559])
    np.testing.assert_array_equal(incorrect, [448, 220, 78, 27])


def test_unknown_response_is_rejected(toy_counts):
    with pytest.raises(InvalidInput):
        type2_count_groups(*toy_counts, "rS3")


def test_observed_rates_on_toy_data(toy_counts):
    nR_S1, nR_S2 = toy_counts
    for response in ("rS1", "rS2"):
        obs_HR2, obs_FAR2 = observed_type2_rates(nR_S1, nR_S2, response)
        assert len(obs_HR2) == 3
        assert len(obs_FAR2) == 3
        assert np.all(np.diff(obs_HR2) <= 0)
        assert np.all(np.diff(obs_FAR2) <= 0)
        # Above-chance metacognition.
        assert np.all(obs_HR2 > obs_FAR2)


def test_observed_rates_use_raw_counts():
    obs_HR2, obs_FAR2 = observed_type2_rates([4, 3, 2, 1], [1, 2, 3, 4], "rS2")
    np.testing.assert_allclose(obs_HR2, [4 / 7])
    np.testing.assert_allclose(obs_FAR2, [1 / 3])


def test_empty_count_group_raises_division_by_zero():
    # No incorrect S2 responses.
    with pytest.raises(DivisionByZero):
        observed_type2_rates([5, 5, 0, 0], [1, 2, 3, 4], "rS2")
    # Zeros in a non-empty group are fine.
    obs_HR2, obs_FAR2 = observed_type2_rates([5, 5, 0, 1], [1, 2, 3, 4], "rS2")
    np.testing.assert_allclose(obs_FAR2, [1.0])


def test_estimated_rates_match_normal_areas():
    meta_d, c1 = 1.5, 0.2
    t2ca_rS1 = [-1.0, -0.5]
    t2ca_rS2 = [0.8, 1.4]

    est_HR2, est_FAR2 = estimated_type2_rates(meta_d, c1, t2ca_rS1, "rS1")
    expected_HR2 = norm.cdf([-0.5, -1.0], -0.75, 1) / norm.cdf(c1, -0.75, 1)
    expected_FAR2 = norm.cdf([-0.5, -1.0], 0.75, 1) / norm.cdf(c1, 0.75, 1)
    np.testing.assert_allclose(est_HR2, expected_HR2)
    np.testing.assert_allclose(est_FAR2, expected_FAR2)

    est_HR2, est_FAR2 = estimated_type2_rates(meta_d, c1, t2ca_rS2, "rS2")
    expected_HR2 = norm.sf([0.8, 1.4], 0.75, 1) / norm.sf(c1, 0.75, 1)
    expected_FAR2 = norm.sf([0.8, 1.4], -0.75, 1) / norm.sf(c1, -0.75, 1)
    np.testing.assert_allclose(est_HR2, expected_HR2)
    np.testing.assert_allclose(est_FAR2, expected_FAR2)


def test_estimated_rates_decrease_with_confidence():
    for response, t2ca in (("rS1", [-1.5, -1.0, -0.5]), ("rS2", [0.5, 1.0, 1.5])):
        est_HR2, est_FAR2 = estimated_type2_rates(2.0, 0.0, t2ca, response)
        assert np.all(np.diff(est_HR2) < 0)
        assert np.all(np.diff(est_FAR2) < 0)
        assert np.all(est_HR2 > est_FAR2)


def test_zero_meta_d_gives_chance_roc():
    est_HR2, est_FAR2 = estimated_type2_rates(0.0, 0.0, [0.5, 1.0], "rS2")
    np.testing.assert_allclose(est_HR2, est_FAR2)


def test_custom_cdf_is_used():
    calls = []

    def fncdf(x, mu, sd):
        calls.append((x, mu, sd))
        return norm.cdf(x, mu, sd)

    estimated_type2_rates(1.0, 0.0, [0.5], "rS2", fncdf=fncdf)
    assert calls


def test_type2_roc_uses_meta_d_of_each_response(toy_counts):
    nR_S1, nR_S2 = toy_counts
    t2ca_rS1 = [-1.5, -1.0, -0.5]
    t2ca_rS2 = [0.5, 1.0, 1.5]

    roc = type2_roc(nR_S1, nR_S2, 1.0, 2.5, 0.0, t2ca_rS1, t2ca_rS2)
    assert len(roc) == 8
    for key, values in roc.items():
        assert len(values) == 3, key

    est_HR2_rS1, _ = estimated_type2_rates(1.0, 0.0, t2ca_rS1, "rS1")
    est_HR2_rS2, _ = estimated_type2_rates(2.5, 0.0, t2ca_rS2, "rS2")
    np.testing.assert_allclose(roc["est_HR2_rS1"], est_HR2_rS1)
    np.testing.assert_allclose(roc["est_HR2_rS2"], est_HR2_rS2)

    # Symmetric criteria, so only meta-d' separates the two responses.
    assert not np.allclose(roc["est_HR2_rS1"], roc["est_HR2_rS2"])


def test_type2_roc_is_repeatable(toy_counts):
    args = (*toy_counts, 1.8, 1.8, 0.1, [-1.2, -0.7, -0.3], [0.4, 0.9, 1.3])
    first = type2_roc(*args)
    second = type2_roc(*args)
    for key in first:
        np.testing.assert_array_equal(first[key], second[key])
