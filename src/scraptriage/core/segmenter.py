"""
Inventory slot segmentation.

Finds candidate item slots in a screenshot without assuming a fixed grid:
every bright blob (icon, stack count, label) is labeled as a connected
component, filtered by size and shape, stitched back together when it was
split across UI seams, and returned in reading order.
"""

from __future__ import annotations

import logging
from typing import Any, List, Sequence, Tuple

import numpy as np

from .types import Region

log = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------

DEFAULT_THRESHOLD = 45  # luminance cut; slot art sits above the dark backdrop
DILATE_RADIUS = 3
MIN_AREA_RATIO = 0.005  # below this a blob is noise
MAX_AREA_RATIO = 0.30  # above this it is the whole panel, not a slot
MIN_ASPECT = 0.4
MAX_ASPECT = 3.0
EDGE_MARGIN = 2  # blobs touching the frame border are cut-off slots
MERGE_MARGIN = 5
CONTAIN_TOLERANCE = 2
ROW_TOLERANCE_RATIO = 0.05

LUMA_WEIGHTS = (0.299, 0.587, 0.114)


# ---------------------------------------------------------------------------
# Union-find arena
# ---------------------------------------------------------------------------


class UnionFind:
    """Disjoint sets over a fixed, index-addressed parent array."""

    def __init__(self, size: int):
        self.parent: List[int] = list(range(size))

    def __len__(self) -> int:
        return len(self.parent)

    def find(self, index: int) -> int:
        parent = self.parent
        root = index
        while parent[root] != root:
            root = parent[root]
        # Path compression
        while parent[index] != root:
            next_index = parent[index]
            parent[index] = root
            index = next_index
        return root

    def union(self, a: int, b: int) -> int:
        root_a = self.find(a)
        root_b = self.find(b)
        if root_a != root_b:
            self.parent[root_b] = root_a
        return root_a


# ---------------------------------------------------------------------------
# Mask stages
# ---------------------------------------------------------------------------


def _as_rgb(pixels: Any, width: int, height: int) -> np.ndarray:
    """
    View the pixel buffer as an (h, w, c) uint8 array.

    Raises ValueError when the buffer does not fit the given dimensions.
    """
    if isinstance(pixels, (bytes, bytearray, memoryview)):
        flat = np.frombuffer(pixels, dtype=np.uint8)
    else:
        flat = np.asarray(pixels, dtype=np.uint8).reshape(-1)

    plane = width * height
    if plane <= 0 or flat.size % plane != 0:
        raise ValueError(
            f"buffer of {flat.size} bytes does not match {width}x{height}"
        )
    channels = flat.size // plane
    if channels not in (3, 4):
        raise ValueError(f"unsupported channel count {channels}")
    return flat.reshape(height, width, channels)


def binarize(image: np.ndarray, threshold: float) -> np.ndarray:
    """1 where luminance > threshold, else 0."""
    r = image[:, :, 0].astype(np.float32)
    g = image[:, :, 1].astype(np.float32)
    b = image[:, :, 2].astype(np.float32)
    wr, wg, wb = LUMA_WEIGHTS
    luma = wr * r + wg * g + wb * b
    return (luma > threshold).astype(np.uint8)


def _sliding_any(mask: np.ndarray, radius: int, axis: int) -> np.ndarray:
    """
    1 where any pixel within `radius` along `axis` is set.

    Window popcount from a prefix sum, so the cost does not grow with radius.
    """
    n = mask.shape[axis]
    pad = [(0, 0), (0, 0)]
    pad[axis] = (1, 0)
    prefix = np.pad(np.cumsum(mask, axis=axis, dtype=np.int32), pad)

    idx = np.arange(n)
    hi = np.minimum(idx + radius + 1, n)
    lo = np.maximum(idx - radius, 0)
    counts = np.take(prefix, hi, axis=axis) - np.take(prefix, lo, axis=axis)
    return (counts > 0).astype(np.uint8)


def dilate(mask: np.ndarray, radius: int = DILATE_RADIUS) -> np.ndarray:
    """Square dilation as a horizontal pass followed by a vertical pass."""
    if radius <= 0 or mask.size == 0:
        return mask.copy()
    horizontal = _sliding_any(mask, radius, axis=1)
    return _sliding_any(horizontal, radius, axis=0)


def _extract_runs(mask: np.ndarray) -> Tuple[List[int], List[int], List[int]]:
    """
    Horizontal foreground runs in row-major order.

    Returns (rows, starts, ends) with `ends` exclusive.
    """
    h, w = mask.shape
    padded = np.zeros((h, w + 2), dtype=np.int8)
    padded[:, 1:-1] = mask
    edges = np.diff(padded, axis=1)
    rows, starts = np.nonzero(edges == 1)
    _, ends = np.nonzero(edges == -1)
    return rows.tolist(), starts.tolist(), ends.tolist()


def label_components(mask: np.ndarray) -> List[Region]:
    """
    Two-pass 4-connected component labeling.

    Provisional labels are assigned per horizontal run (a run already joins
    each pixel to its left neighbour); the first pass unions every run with
    the runs it touches in the row above. The second pass resolves each
    label to its root and grows one bounding box per root.
    """
    if mask.size == 0:
        return []
    h, w = mask.shape
    rows, starts, ends = _extract_runs(mask)
    n = len(rows)
    if n == 0:
        return []

    sets = UnionFind(n)
    row_offsets = np.searchsorted(np.asarray(rows), np.arange(h + 1)).tolist()

    # Pass 1: provisional labels + unions with the row above
    for y in range(1, h):
        prev_lo, prev_hi = row_offsets[y - 1], row_offsets[y]
        cur_lo, cur_hi = row_offsets[y], row_offsets[y + 1]
        i, j = prev_lo, cur_lo
        while i < prev_hi and j < cur_hi:
            if starts[i] < ends[j] and starts[j] < ends[i]:
                sets.union(i, j)
            if ends[i] < ends[j]:
                i += 1
            else:
                j += 1

    # Pass 2: resolve roots, accumulate bounding boxes
    roots = np.fromiter((sets.find(k) for k in range(n)), dtype=np.int64, count=n)
    row_arr = np.asarray(rows, dtype=np.int64)
    min_x = np.full(n, w, dtype=np.int64)
    max_x = np.zeros(n, dtype=np.int64)
    min_y = np.full(n, h, dtype=np.int64)
    max_y = np.zeros(n, dtype=np.int64)
    np.minimum.at(min_x, roots, np.asarray(starts, dtype=np.int64))
    np.maximum.at(max_x, roots, np.asarray(ends, dtype=np.int64))
    np.minimum.at(min_y, roots, row_arr)
    np.maximum.at(max_y, roots, row_arr)

    regions: List[Region] = []
    for root in np.unique(roots).tolist():
        regions.append(
            Region(
                x=int(min_x[root]),
                y=int(min_y[root]),
                width=int(max_x[root] - min_x[root]),
                height=int(max_y[root] - min_y[root] + 1),
            )
        )
    return regions


# ---------------------------------------------------------------------------
# Rectangle stages
# ---------------------------------------------------------------------------


def gap_between(a: Region, b: Region) -> int:
    """Chebyshev gap between two rectangles; 0 when they touch or overlap."""
    gap_x = max(b.x - a.right, a.x - b.right, 0)
    gap_y = max(b.y - a.bottom, a.y - b.bottom, 0)
    return max(gap_x, gap_y)


def enclose(a: Region, b: Region) -> Region:
    x = min(a.x, b.x)
    y = min(a.y, b.y)
    return Region(x, y, max(a.right, b.right) - x, max(a.bottom, b.bottom) - y)


def merge_regions(regions: Sequence[Region], margin: int = MERGE_MARGIN) -> List[Region]:
    """Union rectangles closer than `margin` until nothing else merges."""
    merged = list(regions)
    changed = True
    while changed:
        changed = False
        i = 0
        while i < len(merged):
            j = i + 1
            while j < len(merged):
                if gap_between(merged[i], merged[j]) <= margin:
                    merged[i] = enclose(merged[i], merged[j])
                    del merged[j]
                    changed = True
                else:
                    j += 1
            i += 1
    return merged


def _contains(outer: Region, inner: Region, tolerance: int) -> bool:
    return (
        inner.x >= outer.x - tolerance
        and inner.y >= outer.y - tolerance
        and inner.right <= outer.right + tolerance
        and inner.bottom <= outer.bottom + tolerance
    )


def prune_contained(
    regions: Sequence[Region], tolerance: int = CONTAIN_TOLERANCE
) -> List[Region]:
    """Drop rectangles lying inside a larger retained one."""
    kept: List[Region] = []
    for region in sorted(regions, key=lambda r: r.area, reverse=True):
        if any(_contains(outer, region, tolerance) for outer in kept):
            continue
        kept.append(region)
    return kept


def reading_order(regions: Sequence[Region], row_tolerance: float) -> List[Region]:
    """
    Sort into rows (top to bottom), each row left to right.

    A region joins the current row while its vertical center stays within
    `row_tolerance` of the row's first center.
    """
    ordered: List[Region] = []
    row: List[Region] = []
    anchor = 0.0
    for region in sorted(regions, key=lambda r: (r.center[1], r.x)):
        cy = region.center[1]
        if row and abs(cy - anchor) >= row_tolerance:
            ordered.extend(sorted(row, key=lambda r: r.x))
            row = []
        if not row:
            anchor = cy
        row.append(region)
    ordered.extend(sorted(row, key=lambda r: r.x))
    return ordered


# ---------------------------------------------------------------------------
# Segmenter
# ---------------------------------------------------------------------------


class SlotSegmenter:
    """
    Union-find slot detector.

    Holds configuration only; every `segment` call allocates its own mask,
    run and parent arrays, so one instance can serve concurrent callers.
    """

    def __init__(
        self,
        dilate_radius: int = DILATE_RADIUS,
        min_area_ratio: float = MIN_AREA_RATIO,
        max_area_ratio: float = MAX_AREA_RATIO,
        min_aspect: float = MIN_ASPECT,
        max_aspect: float = MAX_ASPECT,
        edge_margin: int = EDGE_MARGIN,
        merge_margin: int = MERGE_MARGIN,
        contain_tolerance: int = CONTAIN_TOLERANCE,
        row_tolerance_ratio: float = ROW_TOLERANCE_RATIO,
    ):
        """
        Args:
            dilate_radius: Half-size of the square dilation window
            min_area_ratio: Noise floor as a fraction of the image area
            max_area_ratio: Whole-frame ceiling as a fraction of the image area
            min_aspect: Minimum width/height ratio of a slot
            max_aspect: Maximum width/height ratio of a slot
            edge_margin: Blobs within this many pixels of the border are dropped
                (negative disables the check)
            merge_margin: Maximum gap (px) between fragments of one slot
            contain_tolerance: Slack (px) when testing containment
            row_tolerance_ratio: Same-row tolerance as a fraction of image height
        """
        self.dilate_radius = dilate_radius
        self.min_area_ratio = min_area_ratio
        self.max_area_ratio = max_area_ratio
        self.min_aspect = min_aspect
        self.max_aspect = max_aspect
        self.edge_margin = edge_margin
        self.merge_margin = merge_margin
        self.contain_tolerance = contain_tolerance
        self.row_tolerance_ratio = row_tolerance_ratio

    def segment(
        self,
        pixels: Any,
        width: int,
        height: int,
        threshold: float = DEFAULT_THRESHOLD,
    ) -> List[Region]:
        """
        Detect item slots in a decoded RGBA (or RGB) pixel buffer.

        Returns an empty list when nothing survives; degenerate input is
        logged and also yields an empty list.
        """
        try:
            threshold = float(threshold)
        except (TypeError, ValueError):
            log.warning("Ignoring non-numeric threshold %r", threshold)
            return []
        try:
            image = _as_rgb(pixels, int(width), int(height))
        except (TypeError, ValueError) as exc:
            log.warning("Cannot segment pixel buffer: %s", exc)
            return []

        mask = binarize(image, threshold)
        if not mask.any():
            log.debug("No pixel above threshold %.1f", threshold)
            return []

        dilated = dilate(mask, self.dilate_radius)
        components = label_components(dilated)
        candidates = self._filter(components, image.shape[1], image.shape[0])
        merged = merge_regions(candidates, self.merge_margin)
        kept = prune_contained(merged, self.contain_tolerance)
        ordered = reading_order(kept, self.row_tolerance_ratio * image.shape[0])
        log.debug(
            "Segmented %d components -> %d candidates -> %d slots",
            len(components),
            len(candidates),
            len(ordered),
        )
        return ordered

    def _filter(self, components: Sequence[Region], width: int, height: int) -> List[Region]:
        image_area = width * height
        min_area = image_area * self.min_area_ratio
        max_area = image_area * self.max_area_ratio
        margin = self.edge_margin

        survivors: List[Region] = []
        for region in components:
            if region.area < min_area or region.area > max_area:
                continue
            if region.aspect < self.min_aspect or region.aspect > self.max_aspect:
                continue
            if margin >= 0 and (
                region.x <= margin
                or region.y <= margin
                or region.right >= width - margin
                or region.bottom >= height - margin
            ):
                continue
            survivors.append(region)
        return survivors


def segment(
    pixels: Any,
    width: int,
    height: int,
    threshold: float = DEFAULT_THRESHOLD,
) -> List[Region]:
    """Segment with the default configuration."""
    return SlotSegmenter().segment(pixels, width, height, threshold)
