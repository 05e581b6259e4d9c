"""
Vision pre/post-processing around opaque inference engines.

Turns RGBA/RGB images into normalized NCHW tensors and decodes raw outputs into
boxes, mattes, keypoint correspondences and FLAME meshes. Only NumPy is needed
at import time; OpenCV is used for resizing and onnxruntime is optional.
"""

from .types import BoundingBox, FlameOutput, GluedPair, ScalePlan
from .errors import (
    InferenceFailureError,
    InvalidInputError,
    MissingOutputError,
    ShapeMismatchError,
    VisionKitError,
)
from .scale import get_scale_factor, plan_scale
from .tensor import SYMMETRIC, UNIT, Normalization, prepare, prepare_batch
from .postprocess import DetectionDecodeConfig, DetectionDecoder, decode_detections
from .nms import iou, nms, nms_indices
from .mask import decode_masks, resize_mask
from .correspondence import extract_correspondences, unique_pairs
from .mesh import FlameInput, decode_flame_output, prepare_flame_input
from .families import FLAME, LIGHTGLUE, MODNET, YOLO_V8, ModelFamily, get_family, require_outputs
from .metadata import COCO_CLASSES, class_name, load_class_names
from .config import PipelineConfig, load_pipeline_config
from .runtime import (
    CorrespondencePipeline,
    DetectionPipeline,
    InferenceEngine,
    MattingPipeline,
    MeshPipeline,
    load_engine,
    resolve_model_path,
    run_inference,
)

__all__ = [
    "BoundingBox",
    "FlameOutput",
    "GluedPair",
    "ScalePlan",
    "InferenceFailureError",
    "InvalidInputError",
    "MissingOutputError",
    "ShapeMismatchError",
    "VisionKitError",
    "get_scale_factor",
    "plan_scale",
    "SYMMETRIC",
    "UNIT",
    "Normalization",
    "prepare",
    "prepare_batch",
    "DetectionDecodeConfig",
    "DetectionDecoder",
    "decode_detections",
    "iou",
    "nms",
    "nms_indices",
    "decode_masks",
    "resize_mask",
    "extract_correspondences",
    "unique_pairs",
    "FlameInput",
    "decode_flame_output",
    "prepare_flame_input",
    "FLAME",
    "LIGHTGLUE",
    "MODNET",
    "YOLO_V8",
    "ModelFamily",
    "get_family",
    "require_outputs",
    "COCO_CLASSES",
    "class_name",
    "load_class_names",
    "PipelineConfig",
    "load_pipeline_config",
    "CorrespondencePipeline",
    "DetectionPipeline",
    "InferenceEngine",
    "MattingPipeline",
    "MeshPipeline",
    "load_engine",
    "resolve_model_path",
    "run_inference",
]
