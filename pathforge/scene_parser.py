"""
Scene description parser.

Scenes are JSON documents with:
- Camera configuration
- Render settings
- Materials library
- Objects (shapes with materials)

Example scene file:
```json
{
  "camera": {"vfov": 60, "origin": [0, 0.75, 3], "pitch": -10, "yaw": 0},
  "render": {"width": 400, "aspect_ratio": 1.7778, "samples": 100, "max_depth": 50},
  "materials": {
    "ground": {"type": "textured", "texture": "tiles.png", "scale": 1.0},
    "glass": {"type": "dielectric", "ior": 1.5},
    "matte": {"type": "lambertian", "albedo": [0.51, 0.31, 0.21]}
  },
  "objects": [
    {"type": "plane", "y": -0.5, "material": "ground"},
    {"type": "sphere", "center": [1.2, 0, 0], "radius": 0.5, "material": "glass"},
    {"type": "sphere", "center": [-0.51, 0, -1], "radius": 0.5,
     "material": {"type": "metal", "albedo": [0.2, 0.2, 0.7], "fuzz": 0.1}}
  ]
}
```

Texture paths are resolved relative to the scene file.
"""

from __future__ import annotations
import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

from .vec3 import Vec3, Point3, Color
from .camera import Camera
from .shapes import Sphere, Plane, HittableList
from .materials import Material, Lambertian, Metal, Dielectric, TexturedLambertian
from .textures import ImageTexture, TextureError
from .renderer import RenderSettings

logger = logging.getLogger(__name__)


class SceneParseError(Exception):
    """Error during scene parsing."""
    pass


class SceneParser:
    """Parser for scene description files."""

    def __init__(self, base_dir: Optional[Path] = None):
        self.base_dir = Path(base_dir) if base_dir is not None else Path.cwd()
        self.materials: Dict[str, Material] = {}
        self.objects: HittableList = HittableList()
        self.camera: Optional[Camera] = None
        self.settings: Optional[RenderSettings] = None

    def parse_file(self, filepath: str) -> Tuple[HittableList, Camera, RenderSettings]:
        """Parse a scene file.

        Args:
            filepath: Path to the JSON scene file

        Returns:
            Tuple of (scene, camera, settings)
        """
        path = Path(filepath)
        if not path.exists():
            raise SceneParseError(f"Scene file not found: {filepath}")

        try:
            data = json.loads(path.read_text())
        except json.JSONDecodeError as e:
            raise SceneParseError(f"Invalid JSON in {filepath}: {e}") from e

        self.base_dir = path.parent
        return self.parse_dict(data)

    def parse_dict(self, data: Dict[str, Any]) -> Tuple[HittableList, Camera, RenderSettings]:
        """Parse a scene from a dictionary.

        Args:
            data: Scene description dictionary

        Returns:
            Tuple of (scene, camera, settings)
        """
        if not isinstance(data, dict):
            raise SceneParseError(f"Scene must be an object, got {type(data).__name__}")

        # Settings first: the camera takes its aspect ratio from them
        try:
            self._parse_settings(self._section(data, 'render', dict))
        except (TypeError, ValueError) as e:
            raise SceneParseError(f"Invalid render settings: {e}") from e

        # Parse materials before objects (objects reference them)
        self._parse_materials(self._section(data, 'materials', dict))
        self._parse_objects(self._section(data, 'objects', list))
        self._parse_camera(self._section(data, 'camera', dict))

        logger.info(
            f"Parsed scene: {len(self.objects)} objects, {len(self.materials)} materials"
        )
        return self.objects, self.camera, self.settings

    @staticmethod
    def _section(data: Dict[str, Any], key: str, kind: type) -> Any:
        value = data.get(key, kind())
        if not isinstance(value, kind):
            raise SceneParseError(f"'{key}' must be a {kind.__name__}, got {type(value).__name__}")
        return value

    @staticmethod
    def _number(data: Dict[str, Any], key: str, default: float) -> float:
        """Read an optional numeric field, rejecting anything float() cannot take."""
        value = data.get(key, default)
        try:
            return float(value)
        except (TypeError, ValueError) as e:
            raise SceneParseError(f"'{key}' must be a number, got {value!r}") from e

    @staticmethod
    def _floats(values: Any, what: str) -> Tuple[float, float, float]:
        try:
            x, y, z = (float(v) for v in values)
        except (TypeError, ValueError) as e:
            raise SceneParseError(f"{what} components must be numbers, got {values!r}") from e
        return x, y, z

    def _parse_vec3(self, data: Any) -> Vec3:
        """Parse a Vec3 from a list or an {x, y, z} object."""
        if isinstance(data, (list, tuple)):
            if len(data) != 3:
                raise SceneParseError(f"Vec3 must have 3 components, got {len(data)}")
            return Vec3(*self._floats(data, "Vec3"))
        elif isinstance(data, dict):
            return Vec3(*self._floats([data.get(k, 0) for k in 'xyz'], "Vec3"))
        else:
            raise SceneParseError(f"Cannot parse Vec3 from: {data}")

    def _parse_color(self, data: Any) -> Color:
        """Parse a Color from a list, an {r, g, b} object or a hex string."""
        if isinstance(data, (list, tuple)):
            if len(data) != 3:
                raise SceneParseError(f"Color must have 3 components, got {len(data)}")
            return Color(*self._floats(data, "Color"))
        elif isinstance(data, dict):
            return Color(*self._floats([data.get(k, 0) for k in 'rgb'], "Color"))
        elif isinstance(data, str):
            if data.startswith('#') and len(data) == 7:
                try:
                    r, g, b = (int(data[i:i + 2], 16) / 255.0 for i in (1, 3, 5))
                except ValueError as e:
                    raise SceneParseError(f"Invalid hex color: {data}") from e
                return Color(r, g, b)
            raise SceneParseError(f"Cannot parse color from string: {data}")
        else:
            raise SceneParseError(f"Cannot parse Color from: {data}")

    def _parse_material(self, mat_data: Dict[str, Any]) -> Material:
        if not isinstance(mat_data, dict):
            raise SceneParseError(f"Material must be an object, got {mat_data!r}")
        mat_type = str(mat_data.get('type', 'lambertian')).lower()

        if mat_type == 'lambertian':
            return Lambertian(self._parse_color(mat_data.get('albedo', [0.5, 0.5, 0.5])))

        elif mat_type == 'metal':
            albedo = self._parse_color(mat_data.get('albedo', [0.8, 0.8, 0.8]))
            fuzz = self._number(mat_data, 'fuzz', 0.0)
            return Metal(albedo, fuzz)

        elif mat_type == 'dielectric':
            return Dielectric(self._number(mat_data, 'ior', 1.5))

        elif mat_type == 'textured':
            if not isinstance(mat_data.get('texture'), str):
                raise SceneParseError("Textured material needs a 'texture' path")
            path = self.base_dir / mat_data['texture']
            scale = self._number(mat_data, 'scale', 1.0)
            try:
                texture = ImageTexture(path, scale)
            except (FileNotFoundError, TextureError, ValueError) as e:
                raise SceneParseError(str(e)) from e
            return TexturedLambertian(texture)

        else:
            raise SceneParseError(f"Unknown material type: {mat_type}")

    def _parse_materials(self, materials_data: Dict[str, Any]) -> None:
        """Parse materials section."""
        for name, mat_data in materials_data.items():
            self.materials[name] = self._parse_material(mat_data)

    def _get_material(self, mat_ref: Any) -> Optional[Material]:
        """Get a material by name or inline definition."""
        if mat_ref is None:
            return None
        if isinstance(mat_ref, str):
            if mat_ref not in self.materials:
                raise SceneParseError(f"Unknown material: {mat_ref}")
            return self.materials[mat_ref]
        elif isinstance(mat_ref, dict):
            return self._parse_material(mat_ref)
        else:
            raise SceneParseError(f"Invalid material reference: {mat_ref}")

    def _parse_objects(self, objects_data: list) -> None:
        """Parse objects section."""
        for obj_data in objects_data:
            if not isinstance(obj_data, dict):
                raise SceneParseError(f"Object must be an object, got {obj_data!r}")
            obj_type = str(obj_data.get('type', 'sphere')).lower()
            material = self._get_material(obj_data.get('material'))

            if obj_type == 'sphere':
                center = self._parse_vec3(obj_data.get('center', [0, 0, 0]))
                radius = self._number(obj_data, 'radius', 1.0)
                self.objects.add(Sphere(center, radius, material))

            elif obj_type == 'plane':
                self.objects.add(Plane(self._number(obj_data, 'y', 0.0), material))

            else:
                raise SceneParseError(f"Unknown object type: {obj_type}")

    def _parse_camera(self, camera_data: Dict[str, Any]) -> None:
        """Parse camera section."""
        vfov = self._number(camera_data, 'vfov', 60.0)
        origin = self._parse_vec3(camera_data.get('origin', [0, 0, 0]))
        pitch = self._number(camera_data, 'pitch', 0.0)
        yaw = self._number(camera_data, 'yaw', 0.0)
        try:
            self.camera = Camera(
                aspect_ratio=self.settings.width / self.settings.height,
                vfov=vfov,
                origin=origin,
                pitch=pitch,
                yaw=yaw
            )
        except ValueError as e:
            raise SceneParseError(f"Invalid camera: {e}") from e

    def _parse_settings(self, settings_data: Dict[str, Any]) -> None:
        """Parse render settings section."""
        seed = settings_data.get('seed')
        self.settings = RenderSettings(
            width=int(settings_data.get('width', 400)),
            aspect_ratio=float(settings_data.get('aspect_ratio', 16 / 9)),
            height=int(settings_data.get('height', 0)),
            samples_per_pixel=int(settings_data.get('samples', 100)),
            max_depth=int(settings_data.get('max_depth', 50)),
            epsilon=float(settings_data.get('epsilon', 0.001)),
            num_threads=int(settings_data.get('threads', 1)),
            seed=int(seed) if seed is not None else None
        )


def load_scene(filepath: str) -> Tuple[HittableList, Camera, RenderSettings]:
    """Convenience function to load a scene file.

    Args:
        filepath: Path to the scene file

    Returns:
        Tuple of (scene, camera, settings)
    """
    parser = SceneParser()
    return parser.parse_file(filepath)


def parse_scene(data: Dict[str, Any], base_dir: Optional[Path] = None) -> Tuple[HittableList, Camera, RenderSettings]:
    """Convenience function to parse a scene from a dictionary.

    Args:
        data: Scene description dictionary
        base_dir: Directory that texture paths are relative to

    Returns:
        Tuple of (scene, camera, settings)
    """
    parser = SceneParser(base_dir)
    return parser.parse_dict(data)
