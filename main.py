#!/usr/bin/env python3
"""
RayLight - A Python Ray Tracing Engine

Main entry point for rendering the demo scenes.
"""

import argparse
import logging
import sys
from pathlib import Path

from raylight.vec3 import Point, Vector, Color, Double3
from raylight.materials import Material
from raylight.shapes import Sphere, Triangle, Cylinder
from raylight.ray import Ray
from raylight.lights import AmbientLight, PointLight, SpotLight
from raylight.scene import Scene
from raylight.bvh import build_bvh
from raylight.camera import Camera
from raylight.renderer import RenderStrategy

BLUE = Color(0, 0, 255)
RED = Color(255, 0, 0)


def create_spheres_scene(soft_light_radius: float) -> tuple[Scene, float, float]:
    """A transparent sphere around an opaque one, lit by a spot light."""
    scene = Scene("spheres")
    scene.geometries.add(
        Sphere(Point(0, 0, -50), 50.0, emission=BLUE,
               material=Material(kd=0.4, ks=0.3, shininess=100, kt=0.3)),
        Sphere(Point(0, 0, -50), 25.0, emission=RED,
               material=Material(kd=0.5, ks=0.5, shininess=100)),
    )
    scene.add_light(SpotLight(Color(1000, 600, 0), Point(-100, -100, 500), Vector(-1, -1, -2),
                              kl=0.0004, kq=0.0000006, radius=soft_light_radius))
    return scene, 1000.0, 150.0


def create_mirrors_scene(soft_light_radius: float) -> tuple[Scene, float, float]:
    """Two spheres in front of two facing mirrors."""
    scene = Scene("mirrors")
    scene.geometries.add(
        Sphere(Point(-950, -900, -1000), 400.0, emission=Color(0, 50, 100),
               material=Material(kd=0.25, ks=0.25, shininess=20, kt=Double3(0.5, 0, 0))),
        Sphere(Point(-950, -900, -1000), 200.0, emission=Color(100, 50, 20),
               material=Material(kd=0.25, ks=0.25, shininess=20)),
        Triangle(Point(1500, -1500, -1500), Point(-1500, 1500, -1500), Point(670, 670, 3000),
                 emission=Color(20, 20, 20), material=Material(kr=1.0)),
        Triangle(Point(1500, -1500, -1500), Point(-1500, 1500, -1500), Point(-1500, -1500, -2000),
                 emission=Color(20, 20, 20), material=Material(kr=Double3(0.5, 0, 0.4))),
    )
    scene.set_ambient_light(AmbientLight(Color(26, 26, 26)))
    scene.add_light(SpotLight(Color(1020, 400, 400), Point(-750, -750, -150), Vector(-1, -1, -4),
                              kl=0.00001, kq=0.000005, radius=soft_light_radius))
    return scene, 10000.0, 2500.0


def create_shadow_scene(soft_light_radius: float) -> tuple[Scene, float, float]:
    """A floor, a standing cylinder and a translucent sphere casting shadows."""
    floor = Material(kd=0.5, ks=0.5, shininess=60)
    scene = Scene("shadow")
    scene.geometries.add(
        Triangle(Point(-150, -150, -115), Point(150, -150, -135), Point(75, 75, -150), material=floor),
        Triangle(Point(-150, -150, -115), Point(-70, 70, -140), Point(75, 75, -150), material=floor),
        Sphere(Point(60, 50, -50), 30.0, emission=BLUE,
               material=Material(kd=0.2, ks=0.2, shininess=30, kt=0.6)),
        Cylinder(60.0, Ray(Point(-60, -60, -125), Vector(0, 0, 1)), 15.0, emission=Color(80, 80, 80),
                 material=Material(kd=0.7, ks=0.3, shininess=40)),
    )
    scene.set_ambient_light(AmbientLight(Color(38, 38, 38)))
    scene.add_light(PointLight(Color(700, 400, 400), Point(60, 50, 0), kl=4e-5, kq=2e-7,
                               radius=soft_light_radius))
    return scene, 1000.0, 200.0


SCENES = {
    'spheres': create_spheres_scene,
    'mirrors': create_mirrors_scene,
    'shadow': create_shadow_scene,
}


def main():
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description='RayLight - A Python Ray Tracing Engine',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog='''
Examples:
  python main.py --scene spheres --output spheres.png
  python main.py --scene shadow --soft-shadows --light-radius 10 --strategy thread_pool
  python main.py --scene mirrors --width 500 --height 500 --bvh
        '''
    )

    parser.add_argument('--width', type=int, default=200, help='Image width (default: 200)')
    parser.add_argument('--height', type=int, default=200, help='Image height (default: 200)')
    parser.add_argument('--scene', type=str, default='spheres', choices=sorted(SCENES),
                        help='Scene to render (default: spheres)')
    parser.add_argument('--strategy', type=str, default='sequential',
                        choices=[s.value for s in RenderStrategy], help='Threading strategy')
    parser.add_argument('--threads', type=int, default=0, help='Number of threads (0=auto)')
    parser.add_argument('--soft-shadows', action='store_true', help='Sample lights with a radius')
    parser.add_argument('--light-radius', type=float, default=0.0, help='Radius of the scene light')
    parser.add_argument('--grid', type=int, default=5, help='Soft shadow grid resolution (default: 5)')
    parser.add_argument('--bvh', action='store_true', help='Accelerate the scene with a BVH')
    parser.add_argument('--progress', type=float, default=10.0, help='Progress log interval in percent')
    parser.add_argument('--output', type=str, default='output/render.png', help='Output filename')
    parser.add_argument('-v', '--verbose', action='store_true', help='Debug logging')

    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format='%(asctime)s %(levelname)s %(name)s: %(message)s'
    )
    logger = logging.getLogger('raylight.main')

    scene, distance, size = SCENES[args.scene](args.light_radius)
    if args.bvh:
        scene.set_geometries(build_bvh(scene.geometries))
    logger.info("Scene %s with %d lights", scene.name, len(scene.lights))

    camera = Camera.builder() \
        .set_location(Point(0, 0, distance)) \
        .set_direction_to(Point.ZERO, Vector.AXIS_Y) \
        .set_vp_distance(distance) \
        .set_vp_size(size, size) \
        .set_resolution(args.width, args.height) \
        .set_ray_tracer(scene) \
        .set_soft_shadows(args.soft_shadows) \
        .set_grid_resolution(args.grid) \
        .set_multithreading(RenderStrategy(args.strategy), args.threads) \
        .set_debug_print(args.progress) \
        .build()

    camera.render_image()

    # Ensure output directory exists
    output_path = Path(args.output)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    camera.write_to_image(str(output_path))
    return 0


if __name__ == '__main__':
    sys.exit(main())
