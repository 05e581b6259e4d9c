from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, List, Mapping, Optional, Protocol, Sequence, Tuple, Union

import numpy as np

from .config import PipelineConfig
from .correspondence import extract_correspondences, unique_pairs
from .errors import InferenceFailureError, InvalidInputError, VisionKitError
from .families import FLAME, LIGHTGLUE, MODNET, YOLO_V8, ModelFamily, require_outputs
from .mask import decode_masks, resize_mask
from .mesh import FlameInput, decode_flame_output, prepare_flame_input
from .nms import nms
from .postprocess import DetectionDecodeConfig, DetectionDecoder
from .tensor import prepare, prepare_batch, validate_image
from .types import BoundingBox, FlameOutput, GluedPair

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


class InferenceEngine(Protocol):
    """
    Anything that runs a model: named tensors in, named tensors out.

    One call, one response. Whether concurrent calls are allowed is up to the
    engine; pipelines only borrow the tensors for the duration of a call.
    """

    def run(self, inputs: Mapping[str, np.ndarray]) -> Mapping[str, np.ndarray]:
        ...


def resolve_model_path(path: PathLike, root: Optional[PathLike] = None) -> Path:
    """
    Absolute model paths pass through. Relative ones are joined onto `root`,
    or onto the closest ancestor of the working directory holding a
    pyproject.toml or .git (the working directory itself if none does).
    """

    p = Path(path)
    if p.is_absolute():
        return p
    if root is None:
        cwd = Path.cwd().resolve()
        root = next(
            (d for d in (cwd, *cwd.parents) if (d / "pyproject.toml").exists() or (d / ".git").exists()),
            cwd,
        )
    return (Path(root) / p).resolve()


def run_inference(
    engine: InferenceEngine,
    inputs: Mapping[str, np.ndarray],
    family: ModelFamily,
) -> Dict[str, np.ndarray]:
    """
    Single blocking call into the engine.

    Engine errors are re-raised as InferenceFailureError (original chained);
    a response lacking one of the family's outputs raises MissingOutputError.
    """

    logger.debug(
        "Running %s with inputs %s",
        family.name,
        {name: tuple(np.shape(t)) for name, t in inputs.items()},
    )
    try:
        outputs = engine.run(inputs)
    except VisionKitError:
        raise
    except Exception as e:
        raise InferenceFailureError(f"{family.name} inference failed: {e}") from e

    if not isinstance(outputs, Mapping):
        raise InferenceFailureError(
            f"{family.name} engine returned {type(outputs).__name__}, expected a mapping of named tensors"
        )
    return require_outputs(outputs, family)


class DetectionPipeline:
    """
    YOLOv8 detection: resize -> infer -> decode -> class-wise NMS.

    Expects RGBA/RGB uint8 images and returns boxes in source image coordinates.
    """

    family = YOLO_V8

    def __init__(self, engine: InferenceEngine, cfg: PipelineConfig = PipelineConfig()):
        self.engine = engine
        self.cfg = cfg
        self.decoder = DetectionDecoder(DetectionDecodeConfig(conf_threshold=cfg.conf_threshold))

    def preprocess(self, image: np.ndarray) -> np.ndarray:
        model_w, model_h = self.cfg.model_size
        return prepare(image, model_w, model_h, self.family.normalization, self.family.interpolation)

    def __call__(self, image: np.ndarray) -> List[BoundingBox]:
        blob = self.preprocess(image)
        outputs = run_inference(self.engine, {"images": blob}, self.family)

        height, width = image.shape[:2]
        boxes = self.decoder.process(outputs["output0"], image_size=(width, height), model_size=self.cfg.model_size)
        if self.cfg.apply_nms:
            boxes = nms(boxes, self.cfg.iou_threshold)
        return boxes


class MattingPipeline:
    """
    MODNet portrait matting for a batch of images sharing one resize plan.
    """

    family = MODNET

    def __init__(self, engine: InferenceEngine, cfg: PipelineConfig = PipelineConfig()):
        self.engine = engine
        self.cfg = cfg

    def __call__(self, images: Sequence[np.ndarray], resize_to_source: bool = False) -> List[np.ndarray]:
        blob, plan = prepare_batch(
            images,
            ref_size=self.cfg.ref_size,
            max_size=self.cfg.max_size,
            normalization=self.family.normalization,
            interpolation=self.family.interpolation,
            stride=self.cfg.stride,
            max_workers=self.cfg.max_workers,
        )
        outputs = run_inference(self.engine, {"input": blob}, self.family)
        masks = decode_masks(outputs["output"], max_workers=self.cfg.max_workers)
        if len(masks) != len(images):
            raise InferenceFailureError(f"Expected {len(images)} mattes, engine returned {len(masks)}")

        if resize_to_source:
            masks = [resize_mask(m, img.shape[1], img.shape[0]) for m, img in zip(masks, images)]
        return masks


class MeshPipeline:
    """
    FLAME head model: parameter blocks in, flattened vertices/landmarks out.
    """

    family = FLAME

    def __init__(self, engine: InferenceEngine):
        self.engine = engine

    def __call__(self, flame_input: Optional[FlameInput] = None) -> FlameOutput:
        tensors = prepare_flame_input(flame_input if flame_input is not None else FlameInput())
        outputs = run_inference(self.engine, tensors, self.family)
        return decode_flame_output(outputs["vertices"], outputs["landmarks"])


class CorrespondencePipeline:
    """
    LightGlue keypoint matching over every unordered image pair (i < j).
    """

    family = LIGHTGLUE

    def __init__(self, engine: InferenceEngine):
        self.engine = engine

    def _prepare(self, image: np.ndarray) -> np.ndarray:
        height, width = image.shape[:2]
        return prepare(image, width, height, self.family.normalization)

    def __call__(self, images: Sequence[np.ndarray]) -> Dict[Tuple[int, int], List[GluedPair]]:
        if images is None or len(images) == 0:
            raise InvalidInputError("No images provided.")
        for image in images:
            validate_image(image)

        prepared: Dict[int, np.ndarray] = {}
        results: Dict[Tuple[int, int], List[GluedPair]] = {}
        for i, j in unique_pairs(len(images)):
            for idx in (i, j):
                if idx not in prepared:
                    prepared[idx] = self._prepare(images[idx])

            outputs = run_inference(self.engine, {"image0": prepared[i], "image1": prepared[j]}, self.family)
            results[(i, j)] = extract_correspondences(outputs["kpts0"], outputs["kpts1"], outputs["matches0"])
            logger.debug("Pair (%d, %d): %d correspondences", i, j, len(results[(i, j)]))
        return results


def load_engine(model_path: PathLike, *, root: Optional[PathLike] = None) -> InferenceEngine:
    """
    Create an ONNX Runtime engine for an .onnx file; see `resolve_model_path` for relative paths.
    """

    resolved = resolve_model_path(model_path, root=root)
    suffix = resolved.suffix.lower()
    if suffix != ".onnx":
        raise ValueError(f"Only .onnx models are supported (got '{suffix}').")

    from .backends.onnxruntime_backend import OnnxRuntimeBackend

    engine = OnnxRuntimeBackend(resolved)
    logger.debug("Loaded %s with providers %s", resolved, engine.providers_in_use)
    return engine
