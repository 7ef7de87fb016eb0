"""
Unit tests for run parameters.
"""

import pytest
import sys
import os

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from plane_ransac.config import RansacParameters, load_parameters, parameters_from_dict
from plane_ransac.exceptions import InvalidParameterError

PACKAGE_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))


class TestRansacParameters:
    """Tests for RansacParameters."""

    def test_defaults(self):
        params = RansacParameters().validate()
        assert params.epsilon == 0.1
        assert params.pass_count == 3
        assert params.confidence == 0.99
        assert params.inlier_ratio == 0.1
        assert params.min_support == 0

    @pytest.mark.parametrize('field, value', [
        ('epsilon', 0.0),
        ('epsilon', -1.0),
        ('pass_count', 0),
        ('confidence', 1.0),
        ('inlier_ratio', 0.0),
        ('min_support', -5),
        ('log_level', 'LOUD'),
    ])
    def test_invalid_values(self, field, value):
        with pytest.raises(InvalidParameterError):
            RansacParameters(**{field: value}).validate()

    def test_with_overrides_ignores_none(self):
        params = RansacParameters(epsilon=0.2).with_overrides(epsilon=None, pass_count=5)
        assert params.epsilon == 0.2
        assert params.pass_count == 5

    def test_from_dict_with_section(self):
        params = parameters_from_dict({'plane_ransac': {'epsilon': 0.05, 'random_seed': 3}})
        assert params.epsilon == 0.05
        assert params.random_seed == 3

    def test_from_bare_dict(self):
        assert parameters_from_dict({'pass_count': 2}).pass_count == 2

    def test_unknown_keys_rejected(self):
        with pytest.raises(InvalidParameterError, match='max_iterations'):
            parameters_from_dict({'plane_ransac': {'max_iterations': 10}})

    def test_non_mapping_rejected(self):
        with pytest.raises(InvalidParameterError):
            parameters_from_dict([1, 2, 3])

    def test_load_yaml(self, tmp_path):
        path = tmp_path / 'params.yaml'
        path.write_text('plane_ransac:\n  epsilon: 0.02\n  pass_count: 4\n')
        params = load_parameters(str(path))
        assert params.epsilon == 0.02
        assert params.pass_count == 4
        assert params.confidence == 0.99

    def test_load_empty_yaml(self, tmp_path):
        path = tmp_path / 'params.yaml'
        path.write_text('')
        assert load_parameters(str(path)) == RansacParameters()

    def test_load_invalid_yaml_values(self, tmp_path):
        path = tmp_path / 'params.yaml'
        path.write_text('plane_ransac:\n  inlier_ratio: 1.0\n')
        with pytest.raises(InvalidParameterError):
            load_parameters(str(path))

    @pytest.mark.parametrize('text', [
        'epsilon: abc',
        'pass_count: 2.5',
        'log_level: 10',
        'random_seed: 1.5',
        'min_support: true',
    ])
    def test_load_wrongly_typed_values(self, tmp_path, text):
        path = tmp_path / 'params.yaml'
        path.write_text(f'plane_ransac:\n  {text}\n')
        with pytest.raises(InvalidParameterError):
            load_parameters(str(path))

    def test_integer_accepted_for_float_fields(self):
        params = parameters_from_dict({'epsilon': 1, 'confidence': 0.9}).validate()
        assert params.epsilon == 1.0
        assert isinstance(params.epsilon, float)

    def test_shipped_params_file(self):
        params = load_parameters(os.path.join(PACKAGE_ROOT, 'config', 'ransac_params.yaml'))
        assert params == RansacParameters()


if __name__ == '__main__':
    pytest.main([__file__, '-v'])
