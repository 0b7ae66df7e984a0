"""Tests for geometric shapes."""

import pytest
from raylight.errors import ConfigurationError
from raylight.vec3 import Point, Vector, is_zero
from raylight.ray import Ray
from raylight.shapes import Plane, Sphere, Polygon, Triangle, Tube, Cylinder, Geometries, Intersection
from raylight.materials import Material


def points(shape, ray):
    return shape.find_intersections(ray)


class TestPlane:
    """Test Plane class."""

    def test_three_points_normal(self):
        a, b, c = Point(0.5, 2.3, 3.4), Point(1.7, 6.1, 9), Point(5, 2, 3)
        plane = Plane.from_points(a, b, c)
        n = plane.normal()
        assert n.length() == pytest.approx(1.0)
        assert is_zero(n.dot(a - b))
        assert is_zero(n.dot(b - c))

    @pytest.mark.parametrize("a, b, c", [
        (Point(0.5, 2.3, 3.4), Point(0.5, 2.3, 3.4), Point(5, 2, 3)),
        (Point(0.5, 2.3, 3.4), Point(5, 2, 3), Point(5, 2, 3)),
        (Point(0.5, 2.3, 3.4), Point(5, 2, 3), Point(0.5, 2.3, 3.4)),
        (Point(1, 1, 1), Point(1, 1, 1), Point(1, 1, 1)),
        (Point(1, 1, 1), Point(2, 2, 2), Point(3, 3, 3)),
    ])
    def test_degenerate_points_rejected(self, a, b, c):
        with pytest.raises(ConfigurationError):
            Plane.from_points(a, b, c)

    def test_normal_is_normalized(self):
        plane = Plane(Point.ZERO, Vector(0, 0, 5))
        assert plane.normal(Point(3, 4, 0)) == Vector(0, 0, 1)

    def test_ray_crosses_plane(self):
        plane = Plane(Point(1, 0, 0), Vector(0, 0, 1))
        assert points(plane, Ray(Point(0, 0, 1), Vector(1, 1, -1))) == [Point(1, 1, 0)]

    def test_ray_away_from_plane(self):
        plane = Plane(Point(1, 0, 0), Vector(0, 0, 1))
        assert points(plane, Ray(Point(0, 0, 1), Vector(1, 1, 1))) == []

    def test_parallel_ray_in_plane(self):
        plane = Plane(Point(1, 0, 0), Vector(0, 0, 1))
        assert points(plane, Ray(Point(1, 1, 0), Vector(1, 1, 0))) == []

    def test_parallel_ray_outside_plane(self):
        plane = Plane(Point(1, 0, 0), Vector(0, 0, 1))
        assert points(plane, Ray(Point(0, 0, 1), Vector(1, 1, 0))) == []

    def test_orthogonal_ray_after_plane(self):
        plane = Plane(Point(1, 0, 0), Vector(0, 0, 1))
        assert points(plane, Ray(Point(0, 0, 1), Vector(0, 0, 1))) == []

    def test_orthogonal_ray_starts_in_plane(self):
        plane = Plane(Point(1, 0, 0), Vector(0, 0, 1))
        assert points(plane, Ray(Point(1, 1, 0), Vector(0, 0, 1))) == []

    def test_ray_before_plane(self):
        plane = Plane(Point(1, 0, 0), Vector(0, 0, 1))
        assert points(plane, Ray(Point(1, 0, -1), Vector(0, 1, 1))) == [Point(1, 1, 0)]

    def test_ray_from_reference_point(self):
        plane = Plane(Point(1, 0, 0), Vector(0, 0, 1))
        assert points(plane, Ray(Point(1, 0, 0), Vector(1, 1, 1))) == []

    def test_ray_from_plane(self):
        plane = Plane(Point(1, 0, 0), Vector(0, 0, 1))
        assert points(plane, Ray(Point(2, 1, 0), Vector(1, 1, 1))) == []

    def test_unbounded(self):
        assert Plane(Point.ZERO, Vector(0, 0, 1)).bounding_box() is None


class TestSphere:
    """Test Sphere class."""

    sphere = Sphere(Point(1, 0, 0), 1.0)
    gp1 = Point(0.0651530771650466, 0.355051025721682, 0)
    gp2 = Point(1.53484692283495, 0.844948974278318, 0)
    gp3 = Point(0.5, 0.86602540378443864676372317075294, 0)
    up = Vector(0, 1, 0)
    down = Vector(0, -1, 0)

    def test_invalid_radius(self):
        with pytest.raises(ConfigurationError):
            Sphere(Point.ZERO, 0)
        with pytest.raises(ConfigurationError):
            Sphere(Point.ZERO, -1)

    def test_normal(self):
        sphere = Sphere(Point(1, 1, 1), 5)
        assert sphere.normal(Point(6, 1, 1)) == Vector(1, 0, 0)

    def test_normal_parallel_to_radius(self):
        sphere = Sphere(Point(1, 2, 3), 2)
        p = Point(1, 2, 3) + Vector(1, 1, 1).normalize() * 2
        n = sphere.normal(p)
        assert n.length() == pytest.approx(1.0)
        assert n == (p - sphere.center).normalize()

    def test_line_outside(self):
        assert points(self.sphere, Ray(Point(-1, 0, 0), Vector(1, 1, 0))) == []

    def test_crosses_sphere(self):
        result = points(self.sphere, Ray(Point(-1, 0, 0), Vector(3, 1, 0)))
        assert result == [self.gp1, self.gp2]

    def test_starts_inside(self):
        assert points(self.sphere, Ray(Point(0.5, 0.5, 0), self.up)) == [self.gp3]

    def test_starts_after(self):
        assert points(self.sphere, Ray(Point(0.5, 2, 0), self.up)) == []

    def test_starts_on_surface_going_inside(self):
        result = points(self.sphere, Ray(self.gp3, self.down))
        assert result == [Point(0.5, -0.86602540378443864676372317075294, 0)]

    def test_starts_on_surface_going_outside(self):
        assert points(self.sphere, Ray(self.gp3, self.up)) == []

    def test_through_center_from_before(self):
        result = points(self.sphere, Ray(Point(1, 2, 0), self.down))
        assert result == [Point(1, 1, 0), Point(1, -1, 0)]

    def test_through_center_from_surface_inwards(self):
        assert points(self.sphere, Ray(Point(1, 1, 0), self.down)) == [Point(1, -1, 0)]

    def test_through_center_from_inside(self):
        assert points(self.sphere, Ray(Point(1, 0.5, 0), self.up)) == [Point(1, 1, 0)]

    def test_from_center(self):
        assert points(self.sphere, Ray(Point(1, 0, 0), self.up)) == [Point(1, 1, 0)]

    def test_through_center_from_surface_outwards(self):
        assert points(self.sphere, Ray(Point(1, 1, 0), self.up)) == []

    def test_through_center_after_sphere(self):
        assert points(self.sphere, Ray(Point(1, 2, 0), self.up)) == []

    @pytest.mark.parametrize("origin", [Point(2, -1, 0), Point(2, 0, 0), Point(2, 1, 0)])
    def test_tangent(self, origin):
        assert points(self.sphere, Ray(origin, self.up)) == []

    def test_orthogonal_to_center_line_outside(self):
        assert points(self.sphere, Ray(Point(3, 0, 0), self.up)) == []

    def test_orthogonal_to_center_line_inside(self):
        assert points(self.sphere, Ray(Point(0.5, 0, 0), self.up)) == [self.gp3]

    def test_bounding_box(self):
        box = Sphere(Point(1, 2, 3), 2).bounding_box()
        assert box.minimum == Point(-1, 0, 1)
        assert box.maximum == Point(3, 4, 5)

    def test_intersection_carries_geometry_and_material(self):
        material = Material(kd=0.5)
        sphere = Sphere(Point.ZERO, 1.0, material=material)
        hit = sphere.intersect(Ray(Point(0, 0, -5), Vector(0, 0, 1)))[0]
        assert hit.geometry is sphere
        assert hit.material is material


class TestPolygon:
    """Test Polygon construction and intersection."""

    def test_valid_quadrangle(self):
        Polygon(Point(0, 0, 1), Point(1, 0, 0), Point(0, 1, 0), Point(-1, 1, 1))

    def test_too_few_vertices(self):
        with pytest.raises(ConfigurationError):
            Polygon(Point(0, 0, 1), Point(1, 0, 0))

    def test_wrong_vertex_order(self):
        with pytest.raises(ConfigurationError):
            Polygon(Point(0, 0, 1), Point(0, 1, 0), Point(1, 0, 0), Point(-1, 1, 1))

    def test_not_coplanar(self):
        with pytest.raises(ConfigurationError):
            Polygon(Point(0, 0, 1), Point(1, 0, 0), Point(0, 1, 0), Point(0, 2, 2))

    def test_concave(self):
        with pytest.raises(ConfigurationError):
            Polygon(Point(0, 0, 0), Point(2, 0, 0), Point(2, 2, 0), Point(1, 0.5, 0))

    def test_vertex_on_side(self):
        with pytest.raises(ConfigurationError):
            Polygon(Point(0, 0, 1), Point(1, 0, 0), Point(0, 1, 0), Point(0, 0.5, 0.5))

    def test_last_point_equals_first(self):
        with pytest.raises(ConfigurationError):
            Polygon(Point(0, 0, 1), Point(1, 0, 0), Point(0, 1, 0), Point(0, 0, 1))

    def test_colocated_points(self):
        with pytest.raises(ConfigurationError):
            Polygon(Point(0, 0, 1), Point(1, 0, 0), Point(1, 0, 0), Point(0, 1, 0))

    def test_normal(self):
        polygon = Polygon(Point(0, 0, 1), Point(1, 0, 0), Point(0, 1, 0), Point(-1, 1, 1))
        n = polygon.normal(Point(0, 0, 1))
        assert n.length() == pytest.approx(1.0)
        assert is_zero(n.dot(Vector(1, -1, 0)))
        assert is_zero(n.dot(Vector(0, 1, -1)))

    def _square(self):
        return Polygon(Point(0, 0, 0), Point(2, 0, 0), Point(2, 2, 0), Point(0, 2, 0))

    def test_hit_inside(self):
        assert points(self._square(), Ray(Point(0.5, 1.5, -1), Vector(0, 0, 1))) == [Point(0.5, 1.5, 0)]

    def test_miss_outside(self):
        assert points(self._square(), Ray(Point(3, 1, -1), Vector(0, 0, 1))) == []

    def test_edge_excluded(self):
        assert points(self._square(), Ray(Point(2, 1, -1), Vector(0, 0, 1))) == []

    def test_vertex_excluded(self):
        assert points(self._square(), Ray(Point(2, 2, -1), Vector(0, 0, 1))) == []

    def test_bounding_box(self):
        box = self._square().bounding_box()
        assert box.minimum == Point(0, 0, 0)
        assert box.maximum == Point(2, 2, 0)


class TestTriangle:
    """Test Triangle class."""

    triangle = Triangle(Point(0.2, 0, 0), Point(2, 0, 0), Point(0.2, 2, 0))
    z = Vector(0, 0, 1)

    def test_normal(self):
        triangle = Triangle(Point(1, 0, 0), Point(0, 1, 0), Point(0, 0, 1))
        n = triangle.normal(Point(1, 0, 0))
        assert n.length() == pytest.approx(1.0)
        assert is_zero(n.dot(Vector(1, -1, 0)))
        assert is_zero(n.dot(Vector(0, 1, -1)))

    def test_collinear_vertices_rejected(self):
        with pytest.raises(ConfigurationError):
            Triangle(Point(0, 0, 0), Point(1, 1, 1), Point(2, 2, 2))

    def test_inside(self):
        assert points(self.triangle, Ray(Point(0.5, 0.5, -1), self.z)) == [Point(0.5, 0.5, 0)]

    def test_outside_against_side(self):
        assert points(self.triangle, Ray(Point(-0.5, 0.5, -1), self.z)) == []

    def test_outside_against_vertex(self):
        assert points(self.triangle, Ray(Point(-0.5, -0.5, -1), self.z)) == []

    def test_on_vertex(self):
        assert points(self.triangle, Ray(Point(2, 0, -1), self.z)) == []

    def test_on_edge(self):
        assert points(self.triangle, Ray(Point(1, 0, -1), self.z)) == []

    def test_on_edge_continuation(self):
        assert points(self.triangle, Ray(Point(3, 0, -1), self.z)) == []

    def test_origin_in_plane(self):
        assert points(self.triangle, Ray(Point(1, 0, 0), self.z)) == []

    def test_origin_at_vertex(self):
        assert points(self.triangle, Ray(Point(2, 0, 0), Vector(-1, 0.1, 0.5))) == []


class TestTube:
    """Test Tube class."""

    tube = Tube(1.0, Ray(Point.ZERO, Vector(0, 0, 1)))

    def test_invalid_radius(self):
        with pytest.raises(ConfigurationError):
            Tube(0, Ray(Point.ZERO, Vector(0, 0, 1)))

    def test_normal(self):
        assert self.tube.normal(Point(1, 0, 5)) == Vector(1, 0, 0)

    def test_normal_level_with_axis_origin(self):
        assert self.tube.normal(Point(0, 1, 0)) == Vector(0, 1, 0)

    def test_crosses_tube(self):
        result = points(self.tube, Ray(Point(-5, 0, 3), Vector(1, 0, 0)))
        assert result == [Point(-1, 0, 3), Point(1, 0, 3)]

    def test_oblique_crossing(self):
        result = points(self.tube, Ray(Point(-5, 0, 0), Vector(1, 0, 1)))
        assert result == [Point(-1, 0, 4), Point(1, 0, 6)]

    def test_from_inside(self):
        assert points(self.tube, Ray(Point(0.5, 0, 0), Vector(1, 0, 0))) == [Point(1, 0, 0)]

    def test_tangent(self):
        assert points(self.tube, Ray(Point(-5, 1, 0), Vector(1, 0, 0))) == []

    def test_parallel_to_axis(self):
        assert points(self.tube, Ray(Point(0.5, 0, 0), Vector(0, 0, 1))) == []

    def test_behind(self):
        assert points(self.tube, Ray(Point(5, 0, 0), Vector(1, 0, 0))) == []

    def test_unbounded(self):
        assert self.tube.bounding_box() is None


class TestCylinder:
    """Test Cylinder class."""

    cylinder = Cylinder(6, Ray(Point(4, 0, 0), Vector(1, 0, 0)), 2)

    def test_invalid_height(self):
        with pytest.raises(ConfigurationError):
            Cylinder(0, Ray(Point.ZERO, Vector(1, 0, 0)), 1)

    def test_casing_normal(self):
        assert self.cylinder.normal(Point(7, 2, 0)) == Vector(0, 1, 0)

    def test_first_base_normal(self):
        assert self.cylinder.normal(Point(4, 0, 1)) == Vector(-1, 0, 0)

    def test_second_base_normal(self):
        assert self.cylinder.normal(Point(10, 0, 1)) == Vector(1, 0, 0)

    def test_base_center_normals(self):
        assert self.cylinder.normal(Point(4, 0, 0)) == Vector(-1, 0, 0)
        assert self.cylinder.normal(Point(10, 0, 0)) == Vector(1, 0, 0)

    def test_base_edge_normals(self):
        assert self.cylinder.normal(Point(4, 2, 0)) == Vector(-1, 0, 0)
        assert self.cylinder.normal(Point(10, 2, 0)) == Vector(1, 0, 0)

    def test_crosses_casing(self):
        result = points(self.cylinder, Ray(Point(7, -5, 0), Vector(0, 1, 0)))
        assert result == [Point(7, -2, 0), Point(7, 2, 0)]

    def test_along_axis_hits_both_caps(self):
        result = points(self.cylinder, Ray(Point(0, 0, 0), Vector(1, 0, 0)))
        assert result == [Point(4, 0, 0), Point(10, 0, 0)]

    def test_cap_and_casing(self):
        result = points(self.cylinder, Ray(Point(0, 0, 0), Vector(4, 1, 0)))
        assert result == [Point(4, 1, 0), Point(8, 2, 0)]

    def test_beyond_height(self):
        assert points(self.cylinder, Ray(Point(12, -5, 0), Vector(0, 1, 0))) == []

    def test_parallel_outside(self):
        assert points(self.cylinder, Ray(Point(0, 5, 0), Vector(1, 0, 0))) == []

    def test_bounding_box(self):
        box = self.cylinder.bounding_box()
        assert box.minimum == Point(4, -2, -2)
        assert box.maximum == Point(10, 2, 2)


class TestGeometries:
    """Test the flat collection."""

    def test_empty(self):
        geometries = Geometries()
        assert geometries.is_empty()
        assert geometries.find_intersections(Ray(Point.ZERO, Vector(1, 0, 0))) == []
        assert geometries.bounding_box() is None

    def test_merges_results(self):
        geometries = Geometries(
            Sphere(Point(0, 0, 5), 1.0),
            Triangle(Point(-1, -1, 10), Point(1, -1, 10), Point(0, 1, 10)),
            Sphere(Point(10, 10, 10), 1.0),
        )
        result = geometries.find_intersections(Ray(Point.ZERO, Vector(0, 0, 1)))
        assert len(result) == 3

    def test_single_hit(self):
        geometries = Geometries(Sphere(Point(0, 0, 5), 1.0), Sphere(Point(10, 10, 10), 1.0))
        assert len(geometries.find_intersections(Ray(Point(0, 0, 5), Vector(0, 0, 1)))) == 1

    def test_no_hit(self):
        geometries = Geometries(Sphere(Point(0, 0, 5), 1.0), Sphere(Point(10, 10, 10), 1.0))
        assert geometries.find_intersections(Ray(Point.ZERO, Vector(0, 1, 0))) == []

    def test_box_covers_members(self):
        geometries = Geometries(Sphere(Point(0, 0, 0), 1.0), Sphere(Point(5, 5, 5), 1.0))
        box = geometries.bounding_box()
        assert box.minimum == Point(-1, -1, -1)
        assert box.maximum == Point(6, 6, 6)

    def test_unbounded_member_drops_box(self):
        geometries = Geometries(Sphere(Point(0, 0, 0), 1.0), Plane(Point.ZERO, Vector(0, 0, 1)))
        assert geometries.bounding_box() is None

    def test_add_invalidates_box(self):
        geometries = Geometries(Sphere(Point(0, 0, 0), 1.0))
        assert geometries.bounding_box().maximum == Point(1, 1, 1)
        geometries.add(Sphere(Point(5, 0, 0), 1.0))
        assert geometries.bounding_box().maximum == Point(6, 1, 1)
        geometries.clear()
        assert geometries.bounding_box() is None

    def test_box_rejects_far_rays_without_losing_hits(self):
        geometries = Geometries(Sphere(Point(0, 0, 5), 1.0))
        assert geometries.find_intersections(Ray(Point(10, 10, 0), Vector(0, 0, 1))) == []
        assert len(geometries.find_intersections(Ray(Point.ZERO, Vector(0, 0, 1)))) == 2

    def test_prepare_reaches_inner_shapes(self):
        polygon = Polygon(Point(0, 0, 0), Point(2, 0, 0), Point(2, 2, 0), Point(0, 2, 0))
        triangle = Triangle(Point(-1, -1, 10), Point(1, -1, 10), Point(0, 1, 10))
        cylinder = Cylinder(2, Ray(Point(5, 0, 0), Vector(0, 1, 0)), 1)
        inner = [polygon.plane, triangle.plane, cylinder.tube, cylinder.bottom_cap, cylinder.top_cap]
        assert not any(shape._bbox_ready for shape in inner)

        Geometries(polygon, Geometries(triangle, cylinder)).prepare()

        for shape in [polygon, triangle, cylinder] + inner:
            assert shape._bbox_ready


class TestIntersection:
    """Test Intersection equality."""

    def test_same_geometry_and_point(self):
        sphere = Sphere(Point.ZERO, 1.0)
        assert Intersection(sphere, Point(1, 0, 0)) == Intersection(sphere, Point(1, 0, 0))

    def test_different_geometry(self):
        a, b = Sphere(Point.ZERO, 1.0), Sphere(Point.ZERO, 1.0)
        assert Intersection(a, Point(1, 0, 0)) != Intersection(b, Point(1, 0, 0))
