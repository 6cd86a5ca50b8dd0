"""
Main pipeline orchestrator for tracepage.

Runs rasterize -> binarize -> skeletonize -> contours -> simplify -> render
on one image. Every stage allocates its own arrays, so nothing produced by
one run is shared with another.
"""

import os
from contextlib import contextmanager

from tracepage.config import load_config
from tracepage.exceptions import ImageDecodeError, PipelineError, TracePageError
from tracepage.io.load_image import load_image, validate_image_inputs
from tracepage.io.save_artifacts import DebugArtifactWriter, encode_png, save_json, write_png
from tracepage.models import ImageMeta, PageSummary, generate_page_id
from tracepage.preprocess.binarize import binarize, get_ink_ratio
from tracepage.preprocess.rasterize import SUPPORTED_CHANNELS, rasterize
from tracepage.render.dashed import render_dashed
from tracepage.strokes.contours import extract_contours
from tracepage.strokes.simplify import simplify_contours
from tracepage.strokes.skeletonize import skeletonize
from tracepage.tracer import get_tracer, trace


@contextmanager
def _stage(name):
    """Trace a stage and fold unexpected errors into PipelineError."""
    with get_tracer().span(name, module="pipeline"):
        try:
            yield
        except TracePageError:
            raise
        except Exception as e:
            raise PipelineError(name, f"{type(e).__name__}: {e}") from e


@trace(label="process_image")
def process_image(img, config=None, debug_writer=None, source_path=""):
    """
    Turn a decoded image into a tracing page.

    Args:
        img: uint8 array, (H, W) or (H, W, 1) gray, (H, W, 2) gray+alpha,
            (H, W, 3) RGB or (H, W, 4) RGBA
        config: PipelineConfig (defaults if None)
        debug_writer: optional DebugArtifactWriter
        source_path: recorded in the summary

    Returns:
        (page, summary): opaque RGB page at working resolution and a
        PageSummary

    Raises ImageDecodeError for an image without pixels or with an
    unsupported channel count, and PipelineError for any other failure;
    no page is returned in either case.
    """
    tracer = get_tracer()

    if config is None:
        config = load_config()

    if img is None or img.ndim < 2 or img.shape[0] == 0 or img.shape[1] == 0:
        raise ImageDecodeError(source_path or "<array>", "image has no pixels")

    channels = 1 if img.ndim == 2 else img.shape[2]
    if img.ndim > 3 or channels not in SUPPORTED_CHANNELS:
        raise ImageDecodeError(source_path or "<array>", f"unsupported channel count {channels}")

    source = ImageMeta(
        width=img.shape[1],
        height=img.shape[0],
        channels=channels,
        source_path=source_path,
    )

    with _stage("rasterize"):
        working, scale = rasterize(img, config, debug_writer)
    height, width = working.shape[:2]

    with _stage("binarize"):
        mask = binarize(working, config, debug_writer)
        ink_ratio = get_ink_ratio(mask)
    del working

    with _stage("skeletonize"):
        skeleton, iterations = skeletonize(mask, config, debug_writer)
        skeleton_pixels = int(skeleton.astype(bool).sum())
    del mask

    with _stage("contours"):
        contours, found = extract_contours(skeleton, config, debug_writer)

    with _stage("simplify"):
        polylines = simplify_contours(contours, config, debug_writer, base_img=skeleton)
    del skeleton

    with _stage("render"):
        page, style = render_dashed(polylines, width, height, config, debug_writer)

    summary = PageSummary(
        page_id=generate_page_id(img, source_path),
        source=source,
        width=width,
        height=height,
        scale=scale,
        ink_ratio=ink_ratio,
        skeleton_iterations=iterations,
        skeleton_pixels=skeleton_pixels,
        contours_found=found,
        contours_kept=len(contours),
        polylines_rendered=len(polylines),
        dash=style,
    )

    tracer.event(
        f"Page complete: {width}x{height}, {len(polylines)} polylines",
        summary=summary,
    )

    return page, summary


def render_tracing_page(img, config=None):
    """Run the pipeline on a decoded image and return the page as PNG bytes."""
    page, _ = process_image(img, config)
    return encode_png(page)


@trace(label="run_pipeline", arg_names=["input_path", "out_path"])
def run_pipeline(input_path, out_path, config=None, config_path=None, debug=False, summary=False):
    """
    Read an image file, build its tracing page and write it as PNG.

    Args:
        input_path: source image file
        out_path: destination PNG path
        config: PipelineConfig object (optional)
        config_path: path to YAML config file (optional)
        debug: write per-stage debug artifacts next to the output
        summary: also write <stem>.summary.json next to the output

    Returns:
        PageSummary for the run
    """
    tracer = get_tracer()

    if config is None:
        config = load_config(config_path)

    config.debug.enabled = debug or config.debug.enabled

    errors = validate_image_inputs([input_path])
    if errors:
        for error in errors:
            tracer.event(error, level="ERROR")
        raise ImageDecodeError(input_path, "; ".join(errors))

    img, _ = load_image(input_path)
    out_dir = os.path.dirname(os.path.abspath(out_path))

    debug_writer = DebugArtifactWriter(
        out_dir,
        generate_page_id(img, os.path.abspath(input_path)),
        enabled=True,
        max_edge=config.debug.max_edge_scale,
    ) if config.debug.enabled else None

    page, page_summary = process_image(
        img, config, debug_writer, source_path=os.path.abspath(input_path)
    )
    del img

    write_png(page, out_path)

    if summary:
        save_json(page_summary, os.path.splitext(out_path)[0] + ".summary.json")

    return page_summary
