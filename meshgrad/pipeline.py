"""Mesh gradient vectorization pipeline with save stages."""
import logging
import time
from pathlib import Path
from typing import Dict, Optional, Union

import numpy as np
from PIL import Image

from meshgrad.debug_visualization import visualize_classes, visualize_mesh, visualize_points
from meshgrad.delaunay import build_triangles
from meshgrad.mood import mood_label, mood_to_min_distance, mood_to_settings
from meshgrad.pixel_sampler import PixelSampler
from meshgrad.poisson import adaptive_poisson_sampling, add_boundary_points
from meshgrad.raster_ingest import create_smoothed_buffer, ingest, ingest_from_array
from meshgrad.scene import compose_scene
from meshgrad.shape_classifier import classify_shapes
from meshgrad.svg_export import save_svg, scene_to_svg
from meshgrad.types import MeshConfig, Scene

logger = logging.getLogger(__name__)


class MeshGradientPipeline:
    """Raster to layered mesh gradient SVG."""

    def __init__(self, config: Optional[MeshConfig] = None):
        """
        Initialize mesh gradient pipeline.

        Args:
            config: Configuration (uses defaults if None)
        """
        self.config = config or MeshConfig()
        self.stages_dir = Path(self.config.save_stages) if self.config.save_stages else None
        if self.stages_dir:
            self.stages_dir.mkdir(parents=True, exist_ok=True)
        self._rng = np.random.default_rng(self.config.seed)

    def preprocess(self, image: np.ndarray) -> np.ndarray:
        """Denoise an (H, W, 3) uint8 image if configured."""
        if not self.config.smooth_input:
            return image
        return create_smoothed_buffer(
            image, scale=self.config.input_scale, blur_sigma=self.config.blur_sigma
        )

    def vectorize(
        self,
        sampler: PixelSampler,
        mood: float = 50,
        image: Optional[np.ndarray] = None
    ) -> Scene:
        """
        Run the core pipeline on a pixel source.

        Args:
            sampler: Pixel source
            mood: Mood control, 0-100
            image: Array behind the sampler, used only for stage plots

        Returns:
            Composed scene
        """
        w, h = sampler.width, sampler.height
        settings = mood_to_settings(mood)
        min_dist = mood_to_min_distance(mood, w, h, self.config.min_distance_floor)

        points = adaptive_poisson_sampling(
            sampler, min_dist, settings,
            max_attempts=self.config.max_attempts,
            rng=self._rng,
        )
        sampled_count = len(points)
        points = add_boundary_points(points, w, h, min_dist)
        logger.info(f"Sampled {sampled_count} points (+{len(points) - sampled_count} boundary)")

        triangles = build_triangles(
            points, sampler,
            cull_ratio=self.config.cull_ratio,
            super_scale=self.config.super_triangle_scale,
        )
        logger.info(f"Mesh: {len(triangles)} triangles after culling")

        scene = compose_scene(triangles, w, h, mood, sampler, settings)

        if self.stages_dir:
            if image is None:
                image = self._render_source(sampler)
            self._save_stage(visualize_points, image, points, len(points) - sampled_count,
                             filename="stage_02_points.png")
            self._save_stage(visualize_mesh, image, triangles, filename="stage_03_mesh.png")
            primary, detail = classify_shapes(triangles, settings.merge_threshold)
            self._save_stage(visualize_classes, image, primary, detail,
                             filename="stage_04_classes.png")

        return scene

    def process(
        self,
        input_path: Union[str, Path],
        output_path: Optional[Union[str, Path]] = None,
        mood: float = 50
    ) -> str:
        """
        Process an image file through the mesh gradient pipeline.

        Args:
            input_path: Path to input image
            output_path: Optional path for output SVG
            mood: Mood control, 0 (Structured) to 100 (Organic)

        Returns:
            SVG document
        """
        timings: Dict[str, float] = {}
        tick = time.perf_counter()

        def lap(step: str):
            nonlocal tick
            now = time.perf_counter()
            timings[step] = now - tick
            tick = now

        print("Step 1/4: Ingesting image...")
        ingest_result = ingest(Path(input_path))
        print(f"  Image: {ingest_result.width}x{ingest_result.height}")
        if self.stages_dir:
            self._save_stage_image(ingest_result.image, "stage_01_input.png")
        lap("ingest")

        print(f"Step 2/4: Sampling and triangulating (mood {mood:g}, {mood_label(mood)})...")
        image = self.preprocess(ingest_result.image)
        scene = self.vectorize(PixelSampler.from_array(image), mood, image)
        print(f"  {len(scene.primary)} primary shapes, {len(scene.detail)} detail shapes")
        lap("mesh")

        print("Step 3/4: Generating SVG...")
        svg_string = scene_to_svg(scene, self.config.precision)
        lap("svg")

        print("Step 4/4: Saving...")
        if output_path:
            save_svg(svg_string, output_path)
            print(f"  Saved SVG to: {output_path}")
        lap("save")

        if self.stages_dir:
            self._save_stage_text(svg_string, "stage_05_scene.svg")
            self._save_timing_report(timings, {
                "Image size": f"{ingest_result.width}x{ingest_result.height}",
                "Sampled size": f"{scene.width}x{scene.height}",
                "Mood": f"{mood:g} ({mood_label(mood)})",
                "Seed": self.config.seed,
                "Primary shapes": len(scene.primary),
                "Detail shapes": len(scene.detail),
            }, "stage_06_timing.txt")

        print(f"\nCompleted in {sum(timings.values()):.2f}s")
        return svg_string

    def _render_source(self, sampler: PixelSampler) -> np.ndarray:
        """Read the sampler back into an array for stage plots."""
        image = np.zeros((sampler.height, sampler.width, 3), dtype=np.uint8)
        for y in range(sampler.height):
            for x in range(sampler.width):
                c = sampler.sample(x, y)
                image[y, x] = (c.r, c.g, c.b)
        return image

    def _save_stage(self, visualize, *args, filename: str):
        # Debug output never aborts the run
        try:
            output_path = self.stages_dir / filename
            visualize(*args, output_path)
            print(f"  Saved stage: {output_path}")
        except Exception as e:
            logger.warning(f"Failed to save stage {filename}: {e}")

    def _save_stage_image(self, image: np.ndarray, filename: str):
        self._save_stage(lambda path: Image.fromarray(image).save(path), filename=filename)

    def _save_stage_text(self, text: str, filename: str):
        self._save_stage(lambda path: path.write_text(text, encoding='utf-8'), filename=filename)

    def _save_timing_report(self, timings: Dict[str, float], metadata: dict, filename: str):
        """Write per-step durations followed by run metadata."""
        lines = ["Mesh Gradient Timing", "===================="]
        lines.extend(f"{step:<8} {seconds:8.3f}s" for step, seconds in timings.items())
        lines.append(f"{'total':<8} {sum(timings.values()):8.3f}s")
        lines.extend(["", "Run:"])
        lines.extend(f"  {key}: {value}" for key, value in metadata.items())
        self._save_stage_text('\n'.join(lines) + '\n', filename)


def vectorize_image(
    image: np.ndarray,
    mood: float = 50,
    config: Optional[MeshConfig] = None
) -> Scene:
    """
    Vectorize an in-memory image into a scene.

    Convenience function for one-off processing.

    Args:
        image: (H, W), (H, W, 3) or (H, W, 4) sRGB array
        mood: Mood control, 0-100
        config: Optional configuration object

    Returns:
        Composed scene

    Example:
        >>> scene = vectorize_image(pixels, mood=70)
        >>> svg = scene_to_svg(scene)
    """
    pipeline = MeshGradientPipeline(config)
    ingest_result = ingest_from_array(image)
    image = pipeline.preprocess(ingest_result.image)
    return pipeline.vectorize(PixelSampler.from_array(image), mood, image)


def process_image(
    image_path: Union[str, Path],
    output_path: Optional[Union[str, Path]] = None,
    mood: float = 50,
    config: Optional[MeshConfig] = None
) -> str:
    """
    Process an image file into a mesh gradient SVG.

    Example:
        >>> svg = process_image("input.jpg", "output.svg", mood=30)
    """
    return MeshGradientPipeline(config).process(image_path, output_path, mood)
