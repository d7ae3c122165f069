#!/usr/bin/env python3
"""
PathForge - A Python Path Tracer

Main entry point for rendering scenes.
"""

import argparse
import logging
import sys
import time
from pathlib import Path
from typing import Optional

from pathforge.vec3 import Color, Point3
from pathforge.camera import Camera
from pathforge.shapes import Sphere, Plane, HittableList
from pathforge.materials import Lambertian, Metal, Dielectric, TexturedLambertian
from pathforge.textures import ImageTexture, TextureError
from pathforge.renderer import Renderer, RenderSettings
from pathforge.scene_parser import SceneParseError, load_scene
from pathforge.image_io import save_image

logger = logging.getLogger("pathforge")


def create_default_scene(texture_path: Optional[str] = None, texture_scale: float = 1.0) -> HittableList:
    """Create the showcase scene: seven spheres over a ground plane.

    The ground is textured when `texture_path` is given and plain grey
    otherwise.
    """
    brown_matte = Lambertian(Color(0.51, 0.31, 0.21))
    clear_metal = Metal(Color(1.0, 1.0, 1.0), 0.0)
    blue_metal = Metal(Color(0.20, 0.20, 0.70), 0.0)
    green_metal = Metal(Color(0.0, 0.70, 0.0), 0.1)
    black_metal = Metal(Color(0.1, 0.1, 0.1), 0.0)
    glass = Dielectric(1.5)

    if texture_path:
        ground = TexturedLambertian(ImageTexture(texture_path, texture_scale))
    else:
        ground = Lambertian(Color(0.5, 0.5, 0.5))

    world = HittableList()
    world.add(Sphere(Point3(-0.51, 0.0, -1.0), 0.5, brown_matte))
    world.add(Sphere(Point3(0.51, 0.0, -1.0), 0.5, blue_metal))
    world.add(Sphere(Point3(-0.1, -0.35, 0.2), 0.15, clear_metal))
    world.add(Sphere(Point3(-1.2, 0.0, 0.0), 0.5, green_metal))
    world.add(Sphere(Point3(1.2, 0.0, 0.0), 0.5, glass))
    world.add(Sphere(Point3(0.5, -0.35, -0.3), 0.15, black_metal))
    world.add(Sphere(Point3(-0.7, -0.35, -0.48), 0.15, green_metal))
    world.add(Plane(-0.5, ground))
    return world


def create_two_spheres() -> HittableList:
    """Create a minimal scene: a diffuse sphere resting on a huge one."""
    world = HittableList()
    world.add(Sphere(Point3(0, 0, -1), 0.5, Lambertian(Color(0.7, 0.3, 0.3))))
    world.add(Sphere(Point3(0, -100.5, -1), 100, Lambertian(Color(0.8, 0.8, 0.0))))
    return world


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description='PathForge - A Python Path Tracer',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog='''
Examples:
  python main.py --output render.ppm
  python main.py --width 640 --samples 200 --texture img/tiles.jpg --output tiles.png
  python main.py --scene-file scenes/showcase.json --threads 0 --output showcase.png
        '''
    )

    parser.add_argument('--width', type=int, default=400, help='Image width (default: 400)')
    parser.add_argument('--aspect', type=float, default=16.0 / 9.0, help='Aspect ratio (default: 16/9)')
    parser.add_argument('--samples', type=int, default=100, help='Samples per pixel (default: 100)')
    parser.add_argument('--depth', type=int, default=50, help='Max ray depth (default: 50)')
    parser.add_argument('--epsilon', type=float, default=0.001, help='Minimum hit distance (default: 0.001)')
    parser.add_argument('--threads', type=int, default=1, help='Number of threads (0=auto, default: 1)')
    parser.add_argument('--seed', type=int, default=None, help='Random seed for reproducible renders')
    parser.add_argument('--fov', type=float, default=60.0, help='Vertical field of view in degrees (default: 60)')
    parser.add_argument('--origin', type=float, nargs=3, default=[0.0, 0.75, 3.0], metavar=('X', 'Y', 'Z'),
                        help='Camera position (default: 0 0.75 3)')
    parser.add_argument('--pitch', type=float, default=0.0, help='Camera pitch in degrees (default: 0)')
    parser.add_argument('--yaw', type=float, default=0.0, help='Camera yaw in degrees (default: 0)')
    parser.add_argument('--scene', type=str, default='default', choices=['default', 'spheres'],
                        help='Built-in scene to render (default: default)')
    parser.add_argument('--scene-file', type=str, default=None,
                        help='JSON scene description (overrides --scene and the render/camera flags)')
    parser.add_argument('--texture', type=str, default=None, help='Ground texture for the default scene')
    parser.add_argument('--texture-scale', type=float, default=1.0,
                        help='World units covered by one copy of the texture (default: 1)')
    parser.add_argument('--output', type=str, default='output/render.ppm', help='Output filename')
    parser.add_argument('-v', '--verbose', action='store_true', help='Enable debug logging')
    return parser


def main(argv=None):
    """Main entry point."""
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format='%(asctime)s %(levelname)s %(name)s: %(message)s'
    )

    # Print header
    print("=" * 60)
    print("PathForge Path Tracer")
    print("=" * 60)

    # Build everything that can fail before any rendering starts
    try:
        if args.scene_file:
            print(f"\nLoading scene file: {args.scene_file}")
            world, camera, settings = load_scene(args.scene_file)
        else:
            settings = RenderSettings(
                width=args.width,
                aspect_ratio=args.aspect,
                samples_per_pixel=args.samples,
                max_depth=args.depth,
                epsilon=args.epsilon,
                num_threads=args.threads,
                seed=args.seed
            )
            print(f"\nCreating scene: {args.scene}")
            if args.scene == 'spheres':
                world = create_two_spheres()
            else:
                world = create_default_scene(args.texture, args.texture_scale)
            camera = Camera(
                aspect_ratio=settings.width / settings.height,
                vfov=args.fov,
                origin=Point3(*args.origin),
                pitch=args.pitch,
                yaw=args.yaw
            )
    except (SceneParseError, TextureError, FileNotFoundError, ValueError) as e:
        logger.error(f"Cannot set up render: {e}")
        return 1

    print(f"\nRender Settings:")
    print(f"  Resolution: {settings.width}x{settings.height}")
    print(f"  Samples: {settings.samples_per_pixel}")
    print(f"  Max Depth: {settings.max_depth}")
    print(f"  Threads: {settings.num_threads}")
    print(f"  Objects in scene: {len(world)}")

    renderer = Renderer(settings)

    # Progress tracking
    last_progress = [0]

    def progress_callback(progress: float):
        pct = int(progress * 100)
        if pct > last_progress[0]:
            last_progress[0] = pct
            bar_len = 40
            filled = int(bar_len * progress)
            bar = '#' * filled + '-' * (bar_len - filled)
            print(f'\rRendering: [{bar}] {pct}%', end='', flush=True)

    renderer.set_progress_callback(progress_callback)

    # Render
    print("\nRendering...")
    start_time = time.time()

    pixels = renderer.render(world, camera)

    elapsed = time.time() - start_time
    print(f"\nRender completed in {elapsed:.2f} seconds")
    print(f"  Samples per second: {(settings.width * settings.height * settings.samples_per_pixel) / max(elapsed, 1e-9):.0f}")

    # Ensure output directory exists
    output_path = Path(args.output)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    print(f"\nSaving to: {args.output}")
    save_image(output_path, pixels, settings.width, settings.height)

    print("\nDone!")
    return 0


if __name__ == '__main__':
    sys.exit(main())
