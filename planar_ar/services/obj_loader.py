"""Wavefront OBJ reader for wireframe overlays.

Only ``v`` and ``f`` records are interpreted. Face tokens may be ``i``,
``i/t``, ``i/t/n`` or ``i//n``; only the leading vertex index is used.
Quads are fan-split into two triangles, anything else is skipped.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable

import numpy as np

from ..ar_types import Model
from ..errors import IoFailure, ParseFailure


logger = logging.getLogger(__name__)


def _parse_vertex(line: str) -> tuple[float, float, float] | None:
    tokens = line.split()[1:]
    if len(tokens) < 3:
        return None
    try:
        return float(tokens[0]), float(tokens[1]), float(tokens[2])
    except ValueError:
        return None


def _parse_face(line: str, lineno: int) -> list[int] | None:
    indices: list[int] = []
    for token in line.split()[1:]:
        head = token.split("/")[0]
        try:
            index = int(head)
        except ValueError:
            logger.warning("line %d: bad face index token %r", lineno, token)
            return None
        if index <= 0:
            # relative (negative) references are not supported
            logger.warning("line %d: face index %d out of range", lineno, index)
            return None
        indices.append(index - 1)
    return indices


def _triangulate(indices: list[int]) -> list[tuple[int, int, int]]:
    if len(indices) == 3:
        return [(indices[0], indices[1], indices[2])]
    if len(indices) == 4:
        return [
            (indices[0], indices[1], indices[2]),
            (indices[0], indices[2], indices[3]),
        ]
    return []


def parse_obj_lines(lines: Iterable[str], source: str = "<memory>") -> Model:
    vertices: list[tuple[float, float, float]] = []
    faces: list[tuple[int, int, int]] = []

    for lineno, raw in enumerate(lines, 1):
        line = raw.rstrip("\r\n")
        if not line.strip():
            continue

        if line.startswith("v "):
            v = _parse_vertex(line)
            if v is None:
                logger.warning("line %d: error parsing vertex: %s", lineno, line)
                continue
            vertices.append(v)
        elif line.startswith("f "):
            indices = _parse_face(line, lineno)
            if indices is None:
                continue
            tris = _triangulate(indices)
            if not tris:
                logger.warning(
                    "line %d: face with unsupported number of vertices: %d",
                    lineno, len(indices),
                )
                continue
            faces.extend(tris)

    # faces may reference vertices declared later, so bounds are checked last
    n = len(vertices)
    kept = []
    for tri in faces:
        if max(tri) >= n:
            logger.warning("face %s references a missing vertex (have %d)", tri, n)
            continue
        kept.append(tri)

    if not vertices or not kept:
        raise ParseFailure(
            f"No usable geometry in {source}: {n} vertices, {len(kept)} faces"
        )

    model = Model(
        vertices=np.array(vertices, dtype=np.float64),
        faces=np.array(kept, dtype=np.int32),
    )
    logger.info(
        "OBJ loaded: %d vertices, %d faces from %s",
        model.vertex_count, model.face_count, source,
    )
    return model


def _decode_lines(raw_lines: list[bytes]) -> list[str]:
    lines = []
    for lineno, raw in enumerate(raw_lines, 1):
        try:
            lines.append(raw.decode("utf-8"))
        except UnicodeDecodeError:
            logger.warning("line %d: not valid UTF-8, skipped", lineno)
            lines.append("")  # keeps later line numbers aligned
    return lines


def load_obj(path: str | Path) -> Model:
    p = Path(path)
    try:
        with p.open("rb") as fp:
            raw_lines = fp.readlines()
    except OSError as exc:
        raise IoFailure(f"Could not open OBJ file: {p}") from exc

    logger.info("Loading OBJ file: %s", p)
    return parse_obj_lines(_decode_lines(raw_lines), source=str(p))
