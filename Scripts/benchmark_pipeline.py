from __future__ import annotations

import argparse
import time
from dataclasses import dataclass
from typing import Callable, List

import numpy as np

from vision_kit import decode_detections, decode_masks, nms, prepare_batch


@dataclass(frozen=True)
class TimingSummary:
    n: int
    mean_ms: float
    p50_ms: float
    p90_ms: float
    p95_ms: float


def _summarize_ms(values_s: List[float]) -> TimingSummary:
    ms = np.asarray(values_s, dtype=np.float64) * 1000.0
    p50, p90, p95 = np.percentile(ms, [50, 90, 95])
    return TimingSummary(n=int(ms.size), mean_ms=float(ms.mean()), p50_ms=float(p50), p90_ms=float(p90), p95_ms=float(p95))


def _format_summary(label: str, s: TimingSummary) -> str:
    return (
        f"{label}: n={s.n} mean={s.mean_ms:.3f}ms p50={s.p50_ms:.3f}ms "
        f"p90={s.p90_ms:.3f}ms p95={s.p95_ms:.3f}ms"
    )


def _time(fn: Callable[[], object], warmup: int, repeats: int) -> TimingSummary:
    for _ in range(warmup):
        fn()
    samples: List[float] = []
    for _ in range(repeats):
        t0 = time.perf_counter()
        fn()
        samples.append(time.perf_counter() - t0)
    return _summarize_ms(samples)


def main() -> int:
    parser = argparse.ArgumentParser(
        description="Benchmark vision_kit pre/post-processing on synthetic frames (no model needed)."
    )
    parser.add_argument("--streams", type=int, default=16, help="Images per matting batch.")
    parser.add_argument("--width", type=int, default=1920, help="Source frame width.")
    parser.add_argument("--height", type=int, default=1080, help="Source frame height.")
    parser.add_argument(
        "--max-size",
        type=int,
        nargs=2,
        default=[512, 512],
        metavar=("W", "H"),
        help="Max-size bound for matting inputs.",
    )
    parser.add_argument("--ref-size", type=int, default=512, help="Reference size for matting inputs.")
    parser.add_argument("--anchors", type=int, default=8400, help="Anchors in the synthetic detection output.")
    parser.add_argument("--classes", type=int, default=80, help="Classes in the synthetic detection output.")
    parser.add_argument("--iou", type=float, default=0.45, help="IoU threshold for NMS.")
    parser.add_argument("--workers", type=int, default=None, help="Thread pool size (default: executor default).")
    parser.add_argument("--warmup", type=int, default=2, help="Warmup runs, not recorded.")
    parser.add_argument("--repeats", type=int, default=10, help="Recorded runs per stage.")
    args = parser.parse_args()

    if args.streams < 1:
        raise ValueError("--streams must be >= 1")
    if args.repeats < 1:
        raise ValueError("--repeats must be >= 1")
    if args.warmup < 0:
        raise ValueError("--warmup must be >= 0")

    rng = np.random.default_rng(0)
    frame = rng.integers(0, 256, size=(args.height, args.width, 4), dtype=np.uint8)
    images = [frame] * int(args.streams)
    max_size = (int(args.max_size[0]), int(args.max_size[1]))

    blob, plan = prepare_batch(images, ref_size=args.ref_size, max_size=max_size, max_workers=args.workers)
    print(f"matting plan: {plan.target_width}x{plan.target_height} batch={blob.shape[0]}")

    pre = _time(
        lambda: prepare_batch(images, ref_size=args.ref_size, max_size=max_size, max_workers=args.workers),
        args.warmup,
        args.repeats,
    )

    matte = rng.uniform(-0.1, 1.1, size=(blob.shape[0], 1, blob.shape[2], blob.shape[3])).astype(np.float32)
    masks = _time(lambda: decode_masks(matte, max_workers=args.workers), args.warmup, args.repeats)

    # (1, 4 + C, A): boxes spread over a 640x640 model input, sparse confident scores
    det = np.zeros((1, 4 + int(args.classes), int(args.anchors)), dtype=np.float32)
    det[0, 0:2, :] = rng.uniform(0, 640, size=(2, args.anchors))
    det[0, 2:4, :] = rng.uniform(8, 120, size=(2, args.anchors))
    det[0, 4:, :] = rng.uniform(0.0, 0.6, size=(args.classes, args.anchors)) ** 2 / 0.36

    def _detect():
        boxes = decode_detections(det, args.width, args.height, 640, 640)
        return nms(boxes, args.iou)

    post = _time(_detect, args.warmup, args.repeats)

    print(_format_summary("prepare_batch", pre))
    print(_format_summary("decode_masks", masks))
    print(_format_summary("decode_detections+nms", post))
    print(f"surviving_boxes={len(_detect())}")

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
