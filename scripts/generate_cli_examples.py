from __future__ import annotations

import shutil
import subprocess
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable

EXAMPLES_ROOT = Path("examples/cli-options")
BASE_ARGS = ["--width", "160", "--height", "120", "--pixel-pitch", "0.02", "--max-iterations", "500"]


@dataclass
class Expected:
    path: Path


@dataclass
class Example:
    name: str
    args: list[str]
    expected: list[Expected]
    clean: list[Path] | None = None

    def full_args(self) -> list[str]:
        return [sys.executable, "render.py", *self.args]


def _example(name: str, filename: str, *args: str) -> Example:
    output = EXAMPLES_ROOT / name / filename
    return Example(
        name=name,
        args=[*BASE_ARGS, *args, "--output", str(output)],
        expected=[Expected(output)],
        clean=[EXAMPLES_ROOT / name],
    )


EXAMPLES: list[Example] = [
    _example("default", "gradient.png"),
    _example("center", "seahorse-valley.png", "--center-real", "-0.743643887037151", "--center-imag", "0.131825904205330",
             "--pixel-pitch", "0.00002"),
    _example("max-iterations", "high-iterations.png", "--max-iterations", "3500"),
    _example("linear", "linear.png", "--palette", "linear", "--low-color", "#00ff00", "--high-color", "#ff0000"),
    _example("stops", "three-stops.png", "--stop", "0.05:#ffd700", "--stop", "0.3:#ff00ff", "--stop", "0.8:white"),
    _example("sentinels", "sentinels-only.png", "--palette", "gradient", "--stop", "0.5:#808080",
             "--min-color", "navy", "--max-color", "orange"),
    _example("colormap", "inferno.png", "--palette", "colormap", "--colormap", "inferno", "--colormap-stops", "32"),
    _example("invert", "inverted.png", "--palette", "colormap", "--invert"),
    _example("in-set-color", "custom-interior.png", "--in-set-color", "#0a3ba0"),
    _example("python-engine", "python-engine.png", "--engine", "python", "--width", "48", "--height", "36",
             "--pixel-pitch", "0.06"),
    _example("workers", "single-worker.png", "--workers", "1"),
    _example("format", "frame.jpg", "--format", "jpg"),
    _example("verbose", "diagnostic.png", "--verbose"),
]


def _ensure_clean(paths: Iterable[Path]) -> None:
    for path in paths:
        if path.exists():
            if path.is_dir():
                shutil.rmtree(path)
            else:
                path.unlink()


def _prepare(example: Example) -> None:
    clean = example.clean or []
    _ensure_clean(clean)
    for expected in example.expected:
        expected.path.parent.mkdir(parents=True, exist_ok=True)


def _verify(example: Example) -> None:
    for expected in example.expected:
        if not expected.path.is_file():
            raise RuntimeError(f"Expected file {expected.path} was not created")


def main() -> None:
    EXAMPLES_ROOT.mkdir(parents=True, exist_ok=True)
    for example in EXAMPLES:
        print(f"\n[cli-example] {example.name}")
        _prepare(example)
        completed = subprocess.run(example.full_args(), check=True)
        if completed.returncode != 0:
            raise RuntimeError(f"Example {example.name} failed with {completed.returncode}")
        _verify(example)
    print("\nAll CLI examples generated successfully.")


if __name__ == "__main__":
    main()
