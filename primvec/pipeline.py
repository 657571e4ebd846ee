"""Main pipeline: load a target, run the optimizer, export the result."""
import logging
from pathlib import Path
from typing import Callable, Dict, List, Optional, Union

from PIL import Image

from primvec.config import PrimitiveConfig
from primvec.optimizer import Optimizer
from primvec.quality import validate
from primvec.raster import Raster, load_target
from primvec.state import State
from primvec.step import Step
from primvec.svg_export import SvgDocument, build_svg, save_svg, svg_to_string

logger = logging.getLogger(__name__)


class PrimitivePipeline:
    """Image to primitive-shape SVG pipeline."""

    def __init__(self, config: Optional[PrimitiveConfig] = None):
        """
        Initialize pipeline with configuration.

        Args:
            config: Pipeline configuration. Uses defaults if None.
        """
        self.config = config or PrimitiveConfig()
        self.document = SvgDocument()
        self.target: Optional[Raster] = None
        self.state: Optional[State] = None
        self.optimizer: Optional[Optimizer] = None
        self.steps: List[Step] = []

    def process(
        self,
        source: Union[str, Path, Image.Image],
        output_path: Optional[Union[str, Path]] = None,
        raster_path: Optional[Union[str, Path]] = None,
        on_step: Optional[Callable[[Optional[Step]], object]] = None,
    ) -> str:
        """
        Approximate an image with primitive shapes.

        Args:
            source: Input image path or PIL image
            output_path: Optional path to save SVG output
            raster_path: Optional path to save the composed raster (PNG)
            on_step: Optional observer called once per iteration

        Returns:
            SVG string

        Raises:
            FileNotFoundError: If input file doesn't exist
            VectorizationError: If loading, configuration or export fails
        """
        self.target = load_target(source, self.config.compute_size)
        self.steps = []

        optimizer = Optimizer(self.target, self.config, self.document)
        self.optimizer = optimizer

        def collect(step: Optional[Step]) -> None:
            if step is not None:
                self.steps.append(step)
            if on_step is not None:
                on_step(step)

        optimizer.on_step = collect
        self.state = optimizer.start()
        logger.info(
            f"Accepted {len(self.steps)} of {optimizer.iterations} steps "
            f"in {optimizer.elapsed:.2f}s"
        )

        svg = svg_to_string(build_svg(
            self.steps,
            self.target.width,
            self.target.height,
            optimizer.fill,
            self.document,
            view_size=self.config.view_size,
        ))

        if output_path:
            save_svg(svg, output_path)
            logger.info(f"Saved SVG to {output_path}")

        if raster_path:
            self.state.canvas.to_image(self.config.view_size).save(raster_path)
            logger.info(f"Saved raster to {raster_path}")

        return svg

    def validate(self) -> Dict[str, object]:
        """Compare the last composition with its target."""
        if self.state is None:
            raise RuntimeError("process() must be called before validate()")
        return validate(self.state.target, self.state.canvas)


def process_image(
    source: Union[str, Path, Image.Image],
    output_path: Optional[Union[str, Path]] = None,
    config: Optional[PrimitiveConfig] = None,
) -> str:
    """
    Approximate an image with primitive shapes.

    Convenience function for one-off processing.

    Example:
        >>> svg = process_image("input.jpg", "output.svg")
        >>> svg = process_image("input.jpg", config=PrimitiveConfig(steps=100))
    """
    pipeline = PrimitivePipeline(config)
    return pipeline.process(source, output_path)
