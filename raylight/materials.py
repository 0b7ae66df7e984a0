"""
Phong material model.

A material holds the per-channel coefficients used by the shader:
- ka: ambient
- kd: diffuse
- ks: specular
- kt: transparency (refraction)
- kr: reflectivity
and the shininess exponent of the specular highlight.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Union

from .errors import ConfigurationError
from .vec3 import Double3

Coefficient = Union[Double3, float]


@dataclass
class Material:
    """Shading coefficients of a geometry.

    Scalars are accepted for every coefficient and broadcast to all three
    channels.
    """
    ka: Coefficient = 1.0
    kd: Coefficient = 0.0
    ks: Coefficient = 0.0
    kt: Coefficient = 0.0
    kr: Coefficient = 0.0
    shininess: int = 0

    def __post_init__(self):
        self.ka = Double3.of(self.ka)
        self.kd = Double3.of(self.kd)
        self.ks = Double3.of(self.ks)
        self.kt = Double3.of(self.kt)
        self.kr = Double3.of(self.kr)
        for name in ('ka', 'kd', 'ks', 'kt', 'kr'):
            if any(c < 0 for c in getattr(self, name)):
                raise ConfigurationError(f"Material coefficient {name} must be non-negative")
        if self.shininess < 0:
            raise ConfigurationError("Material shininess must be non-negative")
