import numpy as np
import pytest

# Toy data with four ratings.
TOY_nR_S1 = [1552, 933, 954, 720, 448, 220, 78, 27]
TOY_nR_S2 = [33, 77, 213, 469, 729, 1013, 975, 1559]


class StubSampler:
    """Deterministic stand-in for `run_pymc.sampling_fun`."""

    def __init__(self, d1=2.0, c1=0.05, meta_d=1.6, meta_d_rS1=1.2, meta_d_rS2=1.9):
        self.values = {
            "d1": d1,
            "c1": c1,
            "meta_d": meta_d,
            "meta_d_rS1": meta_d_rS1,
            "meta_d_rS2": meta_d_rS2,
        }
        self.calls = []

    def __call__(
        self,
        data,
        model_name,
        init0,
        monitorparams,
        nchains,
        nburnin,
        nsamples,
        nthin,
        doparallel,
        dic,
        seed,
        verbosity,
    ):
        self.calls.append({"data": data, "model_name": model_name, "monitorparams": monitorparams})

        values = dict(self.values)
        if "d1" in data:
            values["d1"] = data["d1"]
            values["c1"] = data["c1"]

        jitter = np.linspace(-0.1, 0.1, nchains * nsamples).reshape(nchains, nsamples)
        offsets = np.arange(data["nratings"] - 1, 0, -1) * 0.5

        samples = {}
        for name in monitorparams:
            if name == "cS1":
                samples[name] = values["c1"] - offsets[None, None, :] + jitter[..., None]
            elif name == "cS2":
                samples[name] = values["c1"] + offsets[::-1][None, None, :] + jitter[..., None]
            else:
                samples[name] = values[name] + jitter

        mean = {}
        for name, draws in samples.items():
            m = draws.mean(axis=(0, 1))
            mean[name] = float(m) if np.ndim(m) == 0 else m
        Rhat = {name: 1.0 for name in monitorparams}

        return samples, {"mean": mean, "Rhat": Rhat, "dic": 123.4 if dic else None}


@pytest.fixture
def toy_counts():
    return list(TOY_nR_S1), list(TOY_nR_S2)


@pytest.fixture
def stub_sampler():
    return StubSampler()


@pytest.fixture
def quick_params():
    return {"nchains": 2, "nsamples": 50, "nburnin": 10, "verbosity": 0}


@pytest.fixture
def make_stub_sampler():
    """Factory for fresh stub samplers, optionally with other central values."""
    return StubSampler
