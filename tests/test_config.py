"""Tests for quarantine_epi.config — configuration loading and validation."""

from pathlib import Path

import pytest
import yaml

from quarantine_epi.config import (
    EpidemicSection,
    QuarantineSection,
    SimulationConfig,
    SimulationSection,
    config_to_dict,
    deep_merge,
    default_config,
    load_config,
    validate_config,
)


# ── deep_merge tests ──────────────────────────────────────────────────

class TestDeepMerge:
    def test_simple_override(self):
        base = {'a': 1, 'b': 2}
        override = {'b': 3}
        result = deep_merge(base, override)
        assert result == {'a': 1, 'b': 3}

    def test_nested_merge(self):
        base = {'x': {'a': 1, 'b': 2}, 'y': 10}
        override = {'x': {'b': 3, 'c': 4}}
        result = deep_merge(base, override)
        assert result == {'x': {'a': 1, 'b': 3, 'c': 4}, 'y': 10}

    def test_new_key(self):
        base = {'a': 1}
        result = deep_merge(base, {'b': 2})
        assert result == {'a': 1, 'b': 2}

    def test_override_dict_with_scalar(self):
        base = {'a': {'nested': 1}}
        result = deep_merge(base, {'a': 'replaced'})
        assert result == {'a': 'replaced'}

    def test_list_replaced_not_merged(self):
        base = {'zones': {'healthy': [1, 2, 3, 4]}}
        result = deep_merge(base, {'zones': {'healthy': [5, 6, 7, 8]}})
        assert result['zones']['healthy'] == [5, 6, 7, 8]

    def test_empty_override(self):
        base = {'a': 1, 'b': 2}
        assert deep_merge(base, {}) == {'a': 1, 'b': 2}


# ── default_config tests ─────────────────────────────────────────────

class TestDefaultConfig:
    def test_creates_valid_config(self):
        config = default_config()
        assert isinstance(config, SimulationConfig)

    def test_default_values(self):
        config = default_config()
        assert config.simulation.seed == 42
        assert config.arena.width == 800.0
        assert config.arena.height == 500.0
        assert config.arena.agent_radius == 4.5
        assert config.zones.healthy == [150.0, 150.0, 150.0, 100.0]
        assert config.zones.infected == [500.0, 250.0, 150.0, 100.0]
        assert config.population.n_agents == 200
        assert config.epidemic.recovery_seconds == 10.0
        assert config.epidemic.death_model == "flat"
        assert config.epidemic.quarantine_entry_prob == 0.55

    def test_both_death_models_configurable(self):
        config = default_config()
        config.epidemic.death_model = "escalating"
        validate_config(config)

    def test_sections_independent(self):
        a, b = SimulationConfig(), SimulationConfig()
        a.zones.healthy[0] = 0.0
        assert b.zones.healthy[0] == 150.0

    def test_config_to_dict(self):
        d = config_to_dict(default_config())
        assert set(d) == {'simulation', 'arena', 'zones', 'population',
                          'epidemic', 'quarantine'}
        assert d['quarantine']['start_tick'] == 300
        # plain data, dumpable as YAML
        assert yaml.safe_load(yaml.safe_dump(d)) == d


# ── YAML loading tests ───────────────────────────────────────────────

def _write_yaml(path, data):
    with open(path, 'w') as f:
        yaml.dump(data, f)
    return path


class TestLoadConfig:
    def test_load_from_yaml(self, tmp_path):
        """Load a minimal YAML config."""
        config_path = _write_yaml(tmp_path / "test.yaml", {
            'simulation': {'seed': 99, 'n_ticks': 500},
            'population': {'n_agents': 50},
        })
        config = load_config(config_path)
        assert config.simulation.seed == 99
        assert config.simulation.n_ticks == 500
        assert config.population.n_agents == 50
        # Unspecified sections get defaults
        assert config.epidemic == EpidemicSection()
        assert config.quarantine == QuarantineSection()

    def test_empty_file_gives_defaults(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("")
        config = load_config(path)
        assert config.simulation == SimulationSection()

    def test_unknown_keys_ignored(self, tmp_path):
        path = _write_yaml(tmp_path / "extra.yaml", {
            'simulation': {'seed': 1, 'frame_rate': 60},
            'rendering': {'canvas': 'main'},
        })
        config = load_config(path)
        assert config.simulation.seed == 1
        assert not hasattr(config.simulation, 'frame_rate')

    def test_load_with_scenario_override(self, tmp_path):
        """Scenario YAML overrides base."""
        base_path = _write_yaml(tmp_path / "base.yaml", {
            'epidemic': {'death_model': 'flat', 'recovery_seconds': 10.0},
        })
        scen_path = _write_yaml(tmp_path / "scenario.yaml", {
            'epidemic': {'death_model': 'escalating'},
        })
        config = load_config(base_path, scenario_path=scen_path)
        assert config.epidemic.death_model == 'escalating'
        assert config.epidemic.recovery_seconds == 10.0  # unchanged

    def test_missing_scenario_warns(self, tmp_path):
        base_path = _write_yaml(tmp_path / "base.yaml", {'simulation': {'seed': 3}})
        with pytest.warns(UserWarning, match="not found"):
            config = load_config(base_path, scenario_path=tmp_path / "nope.yaml")
        assert config.simulation.seed == 3

    def test_overrides_applied_last(self, tmp_path):
        base_path = _write_yaml(tmp_path / "base.yaml", {'simulation': {'seed': 42}})
        config = load_config(base_path, overrides={'simulation': {'seed': 123}})
        assert config.simulation.seed == 123

    def test_file_not_found(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_config(tmp_path / "nonexistent.yaml")

    def test_invalid_yaml_values_rejected(self, tmp_path):
        path = _write_yaml(tmp_path / "bad.yaml", {
            'epidemic': {'death_model': 'sudden'},
        })
        with pytest.raises(ValueError, match="death_model"):
            load_config(path)

    def test_load_real_configs(self):
        """Load the shipped configs/ files."""
        root = Path(__file__).parent.parent / "configs"
        config = load_config(root / "default.yaml")
        assert config == default_config()

        scenario = load_config(root / "default.yaml", root / "no_quarantine.yaml")
        assert scenario.quarantine.enabled is False
        assert scenario.epidemic.death_model == "escalating"


# ── Validation tests ──────────────────────────────────────────────────

class TestValidation:
    def test_overlapping_zones(self):
        config = default_config()
        config.zones.infected = [200.0, 200.0, 150.0, 100.0]
        with pytest.raises(ValueError, match="overlap"):
            validate_config(config)

    def test_zone_outside_arena(self):
        config = default_config()
        config.zones.infected = [700.0, 250.0, 150.0, 100.0]
        with pytest.raises(ValueError, match="zones.infected"):
            validate_config(config)

    def test_zone_too_close_to_edge(self):
        config = default_config()
        config.zones.healthy = [150.0, 10.0, 150.0, 100.0]
        with pytest.raises(ValueError, match="zones.healthy .* arena edge"):
            validate_config(config)

    @pytest.mark.parametrize("rect", [
        [20.0, 150.0, 150.0, 100.0],
        [500.0, 250.0, 280.0, 100.0],
        [500.0, 380.0, 150.0, 100.0],
    ])
    def test_edge_clearance_every_side(self, rect):
        config = default_config()
        config.zones.infected = rect
        with pytest.raises(ValueError, match="zones.infected"):
            validate_config(config)

    def test_edge_clearance_includes_radius(self):
        config = default_config()
        config.zones.healthy = [150.0, 34.5, 150.0, 100.0]
        validate_config(config)  # exactly margin + radius
        config.arena.agent_radius = 5.0
        with pytest.raises(ValueError, match="zones.healthy"):
            validate_config(config)

    def test_zone_shape(self):
        config = default_config()
        config.zones.healthy = [150.0, 150.0, 150.0]
        with pytest.raises(ValueError, match="zones.healthy"):
            validate_config(config)

    def test_degenerate_zone(self):
        config = default_config()
        config.zones.healthy = [150.0, 150.0, 0.0, 100.0]
        with pytest.raises(ValueError, match="positive"):
            validate_config(config)

    def test_close_zones_warn(self):
        config = default_config()
        config.zones.infected = [310.0, 150.0, 150.0, 100.0]
        with pytest.warns(UserWarning, match="apart"):
            validate_config(config)

    def test_seeding_exceeds_population(self):
        config = default_config()
        config.population.n_agents = 10
        config.population.initial_infected = 8
        config.population.initial_immune = 5
        with pytest.raises(ValueError, match="exceeds n_agents"):
            validate_config(config)

    @pytest.mark.parametrize("value", [-0.1, 1.5])
    def test_entry_probability_range(self, value):
        config = default_config()
        config.epidemic.quarantine_entry_prob = value
        with pytest.raises(ValueError, match="quarantine_entry_prob"):
            validate_config(config)

    def test_healthy_fraction_range(self):
        config = default_config()
        config.quarantine.healthy_fraction = 2.0
        with pytest.raises(ValueError, match="healthy_fraction"):
            validate_config(config)

    def test_record_interval(self):
        config = default_config()
        config.simulation.record_interval = 0
        with pytest.raises(ValueError, match="record_interval"):
            validate_config(config)

    def test_tick_seconds(self):
        config = default_config()
        config.simulation.tick_seconds = 0.0
        with pytest.raises(ValueError, match="tick_seconds"):
            validate_config(config)

    def test_negative_seed(self):
        config = default_config()
        config.simulation.seed = -1
        with pytest.raises(ValueError, match="seed"):
            validate_config(config)

    def test_agent_radius(self):
        config = default_config()
        config.arena.agent_radius = 0.0
        with pytest.raises(ValueError, match="agent_radius"):
            validate_config(config)

    def test_none_seed_valid(self):
        config = default_config()
        config.simulation.seed = None
        validate_config(config)  # should not raise
