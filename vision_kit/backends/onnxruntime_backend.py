from __future__ import annotations

from pathlib import Path
from typing import Dict, Mapping, Sequence, Union

import numpy as np


PathLike = Union[str, Path]


class OnnxRuntimeBackend:
    """
    Minimal ONNX Runtime engine implementing `run(named_inputs) -> named_outputs`.

    Uses onnxruntime's default session options and providers. `InferenceSession.run`
    is safe to call from several threads, so no lock is held here.
    """

    def __init__(self, model_path: PathLike):
        try:
            import onnxruntime as ort  # type: ignore
        except Exception as e:  # pragma: no cover
            raise ImportError(
                "onnxruntime is required for the ONNX backend. Install it with `pip install onnxruntime` "
                "(or `onnxruntime-gpu`)."
            ) from e

        self.model_path = Path(model_path)
        if not self.model_path.exists():
            raise FileNotFoundError(str(self.model_path))

        self.session = ort.InferenceSession(str(self.model_path))
        self.input_names = tuple(i.name for i in self.session.get_inputs())
        self.output_names = tuple(o.name for o in self.session.get_outputs())

    @property
    def providers_in_use(self) -> Sequence[str]:
        return tuple(self.session.get_providers())

    def run(self, inputs: Mapping[str, np.ndarray]) -> Dict[str, np.ndarray]:
        outputs = self.session.run(list(self.output_names), dict(inputs))
        return dict(zip(self.output_names, outputs))
