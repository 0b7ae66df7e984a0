"""
RayLight - A Python Ray Tracing Engine

Recursive Phong ray tracing with support for:
- Planes, spheres, polygons, triangles, tubes and cylinders
- Bounding boxes and a surface-area-heuristic BVH
- Ambient, point, spot and directional lights
- Shadows through transparent occluders, with optional soft shadows
- Reflection and refraction
- Sequential, data-parallel and thread-pool rendering
"""

__version__ = "0.1.0"
__author__ = "RayLight Team"

from .errors import ConfigurationError, ZeroVectorError
from .vec3 import Vec3, Point, Vector, Double3, Color, is_zero, align_zero
from .ray import Ray
from .materials import Material
from .shapes import (
    AABB, Intersection, Intersectable, Geometry,
    Plane, Sphere, Polygon, Triangle, Tube, Cylinder, Geometries
)
from .bvh import BVH, BVHNode, build_bvh
from .sampling import disk_points
from .lights import AmbientLight, LightSource, PointLight, SpotLight, DirectionalLight
from .scene import Scene
from .tracer import RayTracerBase, RayTracerType, SimpleRayTracer, create_ray_tracer
from .pixel_manager import PixelManager
from .renderer import RenderStrategy, RenderSettings, Renderer, to_ldr, save_image
from .camera import Camera, CameraBuilder
