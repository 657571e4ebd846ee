"""primvec: approximate raster images with primitive shapes."""
from primvec.types import (
    BBox,
    OptimizerPhase,
    VectorizationError,
    ConfigurationError,
    RasterError,
)
from primvec.config import PrimitiveConfig
from primvec.optimizer import Optimizer
from primvec.pipeline import PrimitivePipeline, process_image

__version__ = "0.1.0"

__all__ = [
    "BBox",
    "OptimizerPhase",
    "VectorizationError",
    "ConfigurationError",
    "RasterError",
    "PrimitiveConfig",
    "Optimizer",
    "PrimitivePipeline",
    "process_image",
]
