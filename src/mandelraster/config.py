"""Configuration objects, argument parsing helpers and YAML loading for renders."""

from __future__ import annotations

from dataclasses import asdict, dataclass, replace
from pathlib import Path
from typing import Callable, Dict, List, Optional, Tuple, TypeVar

import yaml

from .geometry import ImageBounds, PlaneRegion

T = TypeVar("T")

SCHEDULES = ("serial", "static", "dynamic", "numba")


@dataclass(frozen=True)
class RenderConfig:
    """Runtime configuration for a single render."""

    output: str
    width: int
    height: int
    upper_left: complex
    lower_right: complex
    workers: int = 4
    chunk_size: int = 16
    schedule: str = "serial"  # one of SCHEDULES

    @property
    def bounds(self) -> ImageBounds:
        return ImageBounds(self.width, self.height)

    @property
    def region(self) -> PlaneRegion:
        return PlaneRegion(self.upper_left, self.lower_right)

    @property
    def total_chunks(self) -> int:
        return (self.height + self.chunk_size - 1) // self.chunk_size

    @property
    def image_size(self) -> str:
        return f"{self.width}x{self.height}"

    @property
    def run_name(self) -> str:
        """Run name embedding the parameters that change the work split."""
        if self.schedule in ("serial", "numba"):
            return f"{self.schedule}_{self.image_size}"
        return f"{self.schedule}_w{self.workers}_c{self.chunk_size}_{self.image_size}"

    def to_dict(self) -> dict:
        data = asdict(self)
        data["upper_left"] = format_complex(self.upper_left)
        data["lower_right"] = format_complex(self.lower_right)
        return data

    def validate(self) -> "RenderConfig":
        """Raise ``ValueError`` for settings that cannot be rendered."""
        if self.width <= 0 or self.height <= 0:
            raise ValueError(f"Image size must be positive, got {self.image_size}")
        if not self.region.is_proper():
            raise ValueError(
                f"Upper left corner {format_complex(self.upper_left)} must lie above and to the "
                f"left of lower right corner {format_complex(self.lower_right)}"
            )
        if self.schedule not in SCHEDULES:
            raise ValueError(f"Unknown schedule {self.schedule!r}, expected one of {', '.join(SCHEDULES)}")
        if self.workers <= 0:
            raise ValueError(f"workers must be positive, got {self.workers}")
        if self.chunk_size <= 0:
            raise ValueError(f"chunk_size must be positive, got {self.chunk_size}")
        return self


DEFAULT_RENDER_CONFIG = RenderConfig(
    output="mandel.png",
    width=1000,
    height=750,
    upper_left=complex(-1.20, 0.35),
    lower_right=complex(-1.0, 0.20),
)


def default_render_config(**overrides: object) -> RenderConfig:
    """Return the canonical default config optionally overridden with kwargs."""
    return replace(DEFAULT_RENDER_CONFIG, **_coerce_fields(overrides))


def parse_pair(s: str, separator: str, convert: Callable[[str], T]) -> Optional[Tuple[T, T]]:
    """Split ``s`` at the first ``separator`` and convert both halves.

    Returns ``None`` when the separator is missing. Raises ``ValueError`` when
    either half cannot be converted.
    """
    index = s.find(separator)
    if index < 0:
        return None
    left, right = s[:index], s[index + 1 :]
    try:
        return convert(left), convert(right)
    except ValueError:
        raise ValueError(f"Error parsing {s!r} with separator {separator!r}") from None


def parse_complex(s: str) -> Optional[complex]:
    pair = parse_pair(s, ",", float)
    if pair is None:
        return None
    return complex(*pair)


def parse_image_size(value: str) -> Tuple[int, int]:
    pair = parse_pair(value.lower(), "x", lambda part: int(part.strip()))
    if pair is None:
        raise ValueError(f"Image size {value!r} must look like WIDTHxHEIGHT")
    return pair


def format_complex(value: complex) -> str:
    return f"{value.real},{value.imag}"


def load_render_configs(yaml_path: str | Path) -> List[RenderConfig]:
    """Load a YAML file and build one validated config per ``renders`` entry.

    Keys under the top-level ``defaults`` apply to every entry unless the
    entry overrides them.
    """
    with open(yaml_path) as f:
        cfg = yaml.safe_load(f) or {}

    if not isinstance(cfg, dict):
        raise ValueError(f"{yaml_path}: expected a mapping at the top level")

    defaults: Dict[str, object] = cfg.get("defaults", {}) or {}
    renders = cfg.get("renders") or []
    if not isinstance(renders, list):
        raise ValueError(f"{yaml_path}: 'renders' must be a list")

    configs: List[RenderConfig] = []
    for idx, entry in enumerate(renders):
        if not isinstance(entry, dict):
            raise ValueError(f"{yaml_path}: render #{idx} must be a mapping, got {entry!r}")
        # each layer is normalized on its own so an entry image_size replaces inherited width/height
        data = {**_coerce_fields(defaults), **_coerce_fields(entry)}
        configs.append(default_render_config(**data).validate())
    return configs


def _coerce_fields(data: Dict[str, object]) -> Dict[str, object]:
    result = dict(data)
    image = result.pop("image_size", None)
    if image is not None:
        width, height = _normalize_shape_entry(image)
        result.setdefault("width", width)
        result.setdefault("height", height)
    for key in ("width", "height", "workers", "chunk_size"):
        if key in result:
            result[key] = int(result[key])
    for key in ("upper_left", "lower_right"):
        if key in result:
            result[key] = _normalize_point(result[key])
    if "output" in result:
        result["output"] = str(result["output"])
    if "schedule" in result:
        result["schedule"] = str(result["schedule"]).lower()
    unknown = set(result) - set(RenderConfig.__dataclass_fields__)
    if unknown:
        raise ValueError(f"Unknown render settings: {', '.join(sorted(unknown))}")
    return result


def _normalize_shape_entry(entry: object) -> Tuple[int, int]:
    if isinstance(entry, dict):
        width = entry.get("width")
        height = entry.get("height")
        if width is None or height is None:
            raise ValueError("image_size dict must include 'width' and 'height'")
        return int(width), int(height)
    if isinstance(entry, (list, tuple)) and len(entry) == 2:
        return int(entry[0]), int(entry[1])
    if isinstance(entry, str):
        return parse_image_size(entry)
    raise ValueError(f"Unsupported image size specification: {entry!r}")


def _normalize_point(entry: object) -> complex:
    if isinstance(entry, complex):
        return entry
    if isinstance(entry, (list, tuple)) and len(entry) == 2:
        return complex(float(entry[0]), float(entry[1]))
    if isinstance(entry, str):
        point = parse_complex(entry)
        if point is not None:
            return point
    raise ValueError(f"Unsupported point specification: {entry!r}")
