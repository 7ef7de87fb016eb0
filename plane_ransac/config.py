"""
Parameters for plane extraction runs.

Parameters can be read from a YAML file holding a top-level
``plane_ransac`` mapping (see config/ransac_params.yaml).
"""

from dataclasses import asdict, dataclass, fields, replace
from typing import Any, Dict, Optional

import yaml

from .exceptions import InvalidParameterError
from .ransac_core import (
    DEFAULT_CONFIDENCE,
    DEFAULT_EPSILON,
    DEFAULT_INLIER_RATIO,
    DEFAULT_PASS_COUNT,
)

PARAMS_SECTION = 'plane_ransac'
LOG_LEVELS = ('DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL')
FLOAT_FIELDS = ('epsilon', 'confidence', 'inlier_ratio')
INT_FIELDS = ('pass_count', 'min_support')


@dataclass
class RansacParameters:
    """Settings consumed by the extractor and the command-line driver."""
    epsilon: float = DEFAULT_EPSILON
    pass_count: int = DEFAULT_PASS_COUNT
    confidence: float = DEFAULT_CONFIDENCE
    inlier_ratio: float = DEFAULT_INLIER_RATIO
    random_seed: Optional[int] = None
    min_support: int = 0  # 0 disables early stopping
    log_level: str = 'INFO'

    def validate(self) -> 'RansacParameters':
        """
        Check every parameter range.

        Returns:
            self, to allow chaining

        Raises:
            InvalidParameterError: On the first invalid value
        """
        self._check_types()
        if not self.epsilon > 0.0:
            raise InvalidParameterError(f'epsilon must be positive, got {self.epsilon}')
        if self.pass_count < 1:
            raise InvalidParameterError(f'pass_count must be at least 1, got {self.pass_count}')
        if not (0.0 < self.confidence < 1.0):
            raise InvalidParameterError(f'confidence must be in (0, 1), got {self.confidence}')
        if not (0.0 < self.inlier_ratio < 1.0):
            raise InvalidParameterError(f'inlier_ratio must be in (0, 1), got {self.inlier_ratio}')
        if self.min_support < 0:
            raise InvalidParameterError(f'min_support must be non-negative, got {self.min_support}')
        if self.log_level.upper() not in LOG_LEVELS:
            raise InvalidParameterError(f'Unknown log level {self.log_level!r}')
        return self

    def _check_types(self):
        """Reject values of the wrong type; ints are accepted for float fields."""
        for name in FLOAT_FIELDS:
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                raise InvalidParameterError(f'{name} must be a number, got {value!r}')
            setattr(self, name, float(value))
        for name in INT_FIELDS:
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int):
                raise InvalidParameterError(f'{name} must be an integer, got {value!r}')
        if self.random_seed is not None and (
                isinstance(self.random_seed, bool) or not isinstance(self.random_seed, int)):
            raise InvalidParameterError(f'random_seed must be an integer or null, got {self.random_seed!r}')
        if not isinstance(self.log_level, str):
            raise InvalidParameterError(f'log_level must be a string, got {self.log_level!r}')

    def with_overrides(self, **overrides: Any) -> 'RansacParameters':
        """Copy with the given fields replaced; None values are ignored."""
        return replace(self, **{k: v for k, v in overrides.items() if v is not None})

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def parameters_from_dict(data: Dict[str, Any]) -> RansacParameters:
    """
    Build parameters from a mapping.

    Accepts either the bare mapping or one nested under ``plane_ransac``.

    Raises:
        InvalidParameterError: On unknown keys or a non-mapping section
    """
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise InvalidParameterError('Parameter file must contain a mapping')
    if PARAMS_SECTION in data:
        data = data[PARAMS_SECTION] or {}
        if not isinstance(data, dict):
            raise InvalidParameterError(f'{PARAMS_SECTION!r} section must be a mapping')

    known = {f.name for f in fields(RansacParameters)}
    unknown = sorted(set(data) - known)
    if unknown:
        raise InvalidParameterError(f'Unknown parameters: {", ".join(unknown)}')

    return RansacParameters(**data)


def load_parameters(path: str) -> RansacParameters:
    """
    Load parameters from a YAML file.

    Args:
        path: YAML file path

    Returns:
        Validated RansacParameters
    """
    with open(path, 'r', encoding='utf-8') as f:
        try:
            data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise InvalidParameterError(f'{path}: {e}') from e
    return parameters_from_dict(data).validate()
