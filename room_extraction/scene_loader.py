"""
Scene asset loading with object name preservation.

A scene asset is the captured room as an ordered collection of named
objects, each optionally backed by a mesh.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Optional, Tuple

import numpy as np
import trimesh

from .errors import InvalidInputAssetError
from .geometry import BoundingBox


# Rotates Y-up content so that +Y becomes +Z
Y_UP_TO_Z_UP = trimesh.transformations.rotation_matrix(np.pi / 2, [1, 0, 0])


@dataclass(frozen=True)
class SceneObject:
    """A named object of a scene asset."""
    name: str
    mesh: Optional[trimesh.Trimesh] = None

    @property
    def has_mesh(self) -> bool:
        return self.mesh is not None

    @property
    def vertices(self) -> Optional[np.ndarray]:
        """Nx3 vertex positions, or None when the object has no usable position data."""
        if self.mesh is None or len(self.mesh.vertices) == 0:
            return None
        return np.asarray(self.mesh.vertices, dtype=np.float64)

    @property
    def bounds(self) -> Optional[BoundingBox]:
        vertices = self.vertices
        if vertices is None:
            return None
        return BoundingBox.from_array([vertices.min(axis=0), vertices.max(axis=0)])


@dataclass(frozen=True)
class SceneAsset:
    """The raw captured scene: a name and its objects in scene order."""
    name: str
    objects: Tuple[SceneObject, ...]

    def __post_init__(self):
        object.__setattr__(self, "objects", tuple(self.objects))

    @property
    def is_empty(self) -> bool:
        return len(self.objects) == 0

    def mesh_objects(self):
        """Objects backed by a mesh with vertex data, in scene order."""
        return [obj for obj in self.objects if obj.vertices is not None]


def scene_asset_from_meshes(
    meshes: Dict[str, Optional[trimesh.Trimesh]],
    name: str = "room"
) -> SceneAsset:
    """
    Build a scene asset from a mapping of object name to mesh.

    Args:
        meshes: Object names mapped to meshes (None for objects without geometry)
        name: Display name of the asset

    Returns:
        SceneAsset preserving the mapping's order
    """
    return SceneAsset(
        name=name,
        objects=tuple(SceneObject(name=obj_name, mesh=mesh) for obj_name, mesh in meshes.items())
    )


def scene_asset_from_trimesh(
    scene: trimesh.Scene,
    name: str = "room",
    y_up: bool = False
) -> SceneAsset:
    """
    Convert a trimesh scene into a scene asset.

    Every geometry instance in the scene graph becomes one object named after
    its graph node, with the node's world transform baked into the mesh.
    Non-mesh geometry (paths, point clouds) becomes an object without a mesh.

    Args:
        scene: Loaded trimesh scene
        name: Display name of the asset
        y_up: Convert Y-up content to the Z-up room frame

    Returns:
        SceneAsset with one object per scene graph instance
    """
    objects = []

    for node_name in scene.graph.nodes_geometry:
        transform, geometry_name = scene.graph[node_name]
        geometry = scene.geometry.get(geometry_name)

        if not isinstance(geometry, trimesh.Trimesh):
            objects.append(SceneObject(name=str(node_name)))
            continue

        mesh = geometry.copy()
        mesh.apply_transform(transform)
        if y_up:
            mesh.apply_transform(Y_UP_TO_Z_UP)

        objects.append(SceneObject(name=str(node_name), mesh=mesh))

    return SceneAsset(name=name, objects=tuple(objects))


def load_scene_asset(path: str, y_up: bool = False) -> SceneAsset:
    """
    Load a scene file and return its named objects.

    Args:
        path: Path to a scene file in any format trimesh can load as a scene
        y_up: Convert Y-up content to the Z-up room frame

    Returns:
        SceneAsset named after the file stem
    """
    scene_path = Path(path)
    if not scene_path.is_file():
        raise InvalidInputAssetError(f"Scene file not found: {path}")

    try:
        loaded = trimesh.load(str(scene_path), force='scene')
    except Exception as exc:
        raise InvalidInputAssetError(f"Failed to load scene file {path}: {exc}") from exc

    if isinstance(loaded, trimesh.Trimesh):
        # Single mesh, no object names
        loaded = trimesh.Scene({scene_path.stem: loaded})

    if not isinstance(loaded, trimesh.Scene):
        raise InvalidInputAssetError(f"Unsupported scene content in {path}: {type(loaded).__name__}")

    return scene_asset_from_trimesh(loaded, name=scene_path.stem, y_up=y_up)
