"""
Bounding Volume Hierarchy (BVH) for accelerating ray-object intersection.

BVH is a binary tree where each node holds an AABB and either:
- Two child nodes (interior node), whose boxes it combines
- A short list of primitives (leaf node)

Splits are chosen with the surface area heuristic. Every box is computed
while building, so a finished tree is only ever read.
"""

from __future__ import annotations
import logging
from typing import Iterable, Optional

import numpy as np

from .errors import ConfigurationError
from .ray import Ray
from .shapes import AABB, Intersectable, Intersection

logger = logging.getLogger(__name__)


class BVHNode(Intersectable):
    """A node in the Bounding Volume Hierarchy tree.

    Interior nodes have two children; leaf nodes contain primitives.
    """

    def __init__(
        self,
        objects: Optional[list[Intersectable]] = None,
        left: Optional[BVHNode] = None,
        right: Optional[BVHNode] = None
    ):
        self.objects = objects
        self.left = left
        self.right = right
        self.bounding_box()

    @property
    def is_leaf(self) -> bool:
        return self.objects is not None

    def _intersect(self, ray: Ray) -> list[Intersection]:
        if self.is_leaf:
            intersections: list[Intersection] = []
            for obj in self.objects:
                intersections.extend(obj.intersect(ray))
            return intersections
        return self.left.intersect(ray) + self.right.intersect(ray)

    def _calculate_bounding_box(self) -> Optional[AABB]:
        if self.is_leaf:
            boxes = [obj.bounding_box() for obj in self.objects]
            box = boxes[0]
            for other in boxes[1:]:
                box = AABB.combine(box, other)
            return box
        return AABB.combine(self.left.bounding_box(), self.right.bounding_box())

    def count(self) -> tuple[int, int, int]:
        """Return (nodes, leaves, depth) of the subtree."""
        if self.is_leaf:
            return 1, 1, 1
        ln, ll, ld = self.left.count()
        rn, rl, rd = self.right.count()
        return ln + rn + 1, ll + rl, max(ld, rd) + 1


def _surface_areas(mins: np.ndarray, maxs: np.ndarray) -> np.ndarray:
    ext = maxs - mins
    return 2.0 * (ext[:, 0] * ext[:, 1] + ext[:, 0] * ext[:, 2] + ext[:, 1] * ext[:, 2])


def _best_split(mins: np.ndarray, maxs: np.ndarray) -> tuple[np.ndarray, int]:
    """Find the SAH-optimal partition.

    For every axis, primitives are ordered by box centroid and every split
    index is scored as SA(left) * n_left + SA(right) * n_right.

    Returns:
        The primitive order along the winning axis and the split index
    """
    n = len(mins)
    centroids = (mins + maxs) / 2
    counts = np.arange(1, n)

    best_cost = np.inf
    best_order = np.arange(n)
    best_index = n // 2

    for axis in range(3):
        order = np.argsort(centroids[:, axis], kind='stable')
        mn, mx = mins[order], maxs[order]

        left = _surface_areas(np.minimum.accumulate(mn), np.maximum.accumulate(mx))[:-1]
        right = _surface_areas(
            np.minimum.accumulate(mn[::-1])[::-1],
            np.maximum.accumulate(mx[::-1])[::-1]
        )[1:]

        costs = left * counts + right * (n - counts)
        i = int(np.argmin(costs))
        if costs[i] < best_cost:
            best_cost = costs[i]
            best_order = order
            best_index = i + 1

    return best_order, best_index


def _build_node(objects: list[Intersectable], max_leaf_size: int) -> BVHNode:
    if len(objects) <= max_leaf_size:
        return BVHNode(objects=list(objects))

    mins = np.array([obj.bounding_box().minimum.to_array() for obj in objects])
    maxs = np.array([obj.bounding_box().maximum.to_array() for obj in objects])
    order, index = _best_split(mins, maxs)
    ordered = [objects[i] for i in order]

    return BVHNode(
        left=_build_node(ordered[:index], max_leaf_size),
        right=_build_node(ordered[index:], max_leaf_size)
    )


class BVH(Intersectable):
    """Bounding Volume Hierarchy acceleration structure.

    Unbounded objects (planes, tubes) cannot be placed in a box; they are
    kept beside the tree and tested on every ray.
    """

    def __init__(self, objects: Iterable[Intersectable], max_leaf_size: int = 2):
        """Build a BVH from a list of objects.

        Args:
            objects: Intersectable objects to accelerate
            max_leaf_size: Maximum objects per leaf node
        """
        if max_leaf_size < 1:
            raise ConfigurationError("max_leaf_size must be at least 1")

        self.objects = list(objects)
        for obj in self.objects:
            obj.prepare()

        bounded = [obj for obj in self.objects if obj.bounding_box() is not None]
        self.unbounded = [obj for obj in self.objects if obj.bounding_box() is None]
        self.root = _build_node(bounded, max_leaf_size) if bounded else None
        self.bounding_box()

        nodes, leaves, depth = self.stats()
        logger.debug(
            "Built BVH over %d objects (%d unbounded): %d nodes, %d leaves, depth %d",
            len(self.objects), len(self.unbounded), nodes, leaves, depth
        )

    def _intersect(self, ray: Ray) -> list[Intersection]:
        intersections = self.root.intersect(ray) if self.root is not None else []
        for obj in self.unbounded:
            intersections.extend(obj.intersect(ray))
        return intersections

    def _calculate_bounding_box(self) -> Optional[AABB]:
        if self.unbounded or self.root is None:
            return None
        return self.root.bounding_box()

    def stats(self) -> tuple[int, int, int]:
        """Return (nodes, leaves, depth) of the tree."""
        if self.root is None:
            return 0, 0, 0
        return self.root.count()

    def prepare(self) -> None:
        for obj in self.unbounded:
            obj.prepare()

    def __len__(self) -> int:
        """Return the number of objects in the BVH."""
        return len(self.objects)

    def __repr__(self) -> str:
        return f"BVH({len(self.objects)} objects)"


def build_bvh(objects: Iterable[Intersectable], max_leaf_size: int = 2) -> BVH:
    """Convenience function to build a BVH from any iterable of objects,
    including a Geometries collection.

    Args:
        objects: The primitives to organize
        max_leaf_size: Maximum objects per leaf node

    Returns:
        A BVH acceleration structure
    """
    return BVH(list(objects), max_leaf_size)
