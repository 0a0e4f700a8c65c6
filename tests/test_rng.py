"""Tests for quarantine_epi.rng — seeded RNG hierarchy."""

import numpy as np

from quarantine_epi.rng import (
    STREAM_NAMES,
    create_rng_hierarchy,
    default_rng,
)


class TestCreateRngHierarchy:
    def test_returns_correct_keys(self):
        rngs = create_rng_hierarchy(42)
        assert set(rngs) == {'global', 'motion', 'epidemic'}
        assert tuple(rngs) == STREAM_NAMES

    def test_generators_are_independent(self):
        """Different streams produce different sequences."""
        rngs = create_rng_hierarchy(42)
        vals = {name: rng.random() for name, rng in rngs.items()}
        unique_vals = set(vals.values())
        assert len(unique_vals) == len(vals), "RNG streams produced duplicate values"

    def test_reproducibility(self):
        """Same seed produces identical sequences."""
        rngs1 = create_rng_hierarchy(42)
        rngs2 = create_rng_hierarchy(42)

        for name in rngs1:
            v1 = rngs1[name].random(100)
            v2 = rngs2[name].random(100)
            np.testing.assert_array_equal(v1, v2)

    def test_different_seeds_differ(self):
        rngs1 = create_rng_hierarchy(42)
        rngs2 = create_rng_hierarchy(43)
        assert not np.array_equal(rngs1['motion'].random(10),
                                  rngs2['motion'].random(10))

    def test_unseeded(self):
        """seed=None → entropy-seeded, still a full hierarchy."""
        rngs = create_rng_hierarchy(None)
        assert len(rngs) == 3
        for rng in rngs.values():
            assert isinstance(rng, np.random.Generator)

    def test_motion_draws_dont_perturb_epidemic(self):
        rngs1 = create_rng_hierarchy(7)
        rngs2 = create_rng_hierarchy(7)
        rngs1['motion'].random(1000)
        np.testing.assert_array_equal(rngs1['epidemic'].random(20),
                                      rngs2['epidemic'].random(20))


class TestDefaultRng:
    def test_shared_instance(self):
        assert default_rng() is default_rng()
        assert isinstance(default_rng(), np.random.Generator)


class TestPCG64Properties:
    def test_generator_type(self):
        rngs = create_rng_hierarchy(42)
        for rng in rngs.values():
            assert isinstance(rng.bit_generator, np.random.PCG64)

    def test_large_sample_uniformity(self):
        """Basic statistical check: uniform samples should have mean ~0.5."""
        rngs = create_rng_hierarchy(42)
        samples = rngs['epidemic'].random(100_000)
        assert abs(samples.mean() - 0.5) < 0.01
        assert abs(samples.std() - (1.0 / 12**0.5)) < 0.01
