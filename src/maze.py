import argparse
import logging
from dataclasses import dataclass, fields
from typing import Dict, Iterator, List, Optional, Sequence, Tuple

import numpy as np
from omegaconf import OmegaConf

logger = logging.getLogger(__name__)

START_X = 1
START_Y = 1
MIN_SIZE = 3

# Row and column count the application starts with
DEFAULT_ROWS = 999
DEFAULT_COLS = 99


class CellSet:
    """Insertion-ordered set of cell keys with uniform random selection."""

    def __init__(self):
        self._keys: List[int] = []
        self._index: Dict[int, int] = {}

    def add(self, key: int) -> bool:
        """Add a key, returns False if it was already present."""
        if key in self._index:
            return False
        self._index[key] = len(self._keys)
        self._keys.append(key)
        return True

    def discard(self, key: int):
        idx = self._index.pop(key, None)
        if idx is None:
            return
        # Swap the last key into the hole so removal stays O(1)
        last = self._keys.pop()
        if idx < len(self._keys):
            self._keys[idx] = last
            self._index[last] = idx

    def random_element(self, rng: np.random.Generator) -> int:
        if not self._keys:
            raise IndexError("random_element from an empty CellSet")
        return self._keys[int(rng.integers(len(self._keys)))]

    def __contains__(self, key) -> bool:
        return key in self._index

    def __len__(self) -> int:
        return len(self._keys)

    def __iter__(self) -> Iterator[int]:
        return iter(list(self._keys))


@dataclass(frozen=True)
class MazeDescriptor:
    """Flattened maze handed to renderers.

    data holds one flag per cell in row-major order, True for wall.
    """
    data: Tuple[bool, ...]
    cols: int
    rows: int

    def as_array(self) -> np.ndarray:
        return np.array(self.data, dtype=bool).reshape(self.rows, self.cols)

    def is_wall(self, x: int, y: int) -> bool:
        if not (0 <= x < self.cols and 0 <= y < self.rows):
            raise IndexError(f"cell ({x}, {y}) outside {self.cols}x{self.rows} maze")
        return self.data[y * self.cols + x]

    def open_cells(self) -> List[Tuple[int, int]]:
        """All open cells as (x, y), row by row."""
        return [(i % self.cols, i // self.cols)
                for i, wall in enumerate(self.data) if not wall]


def _check_size(name: str, value) -> int:
    if isinstance(value, bool) or not isinstance(value, (int, np.integer)):
        raise TypeError(f"{name} must be an integer, got {type(value).__name__}")
    if value < MIN_SIZE:
        raise ValueError(f"{name} must be >= {MIN_SIZE}, got {value}")
    return int(value)


class PrimsMaze:
    # (dx, dy) for top, left, right, bottom
    directions = [(0, -2), (-2, 0), (2, 0), (0, 2)]

    def __init__(self, row_count: int, column_count: int,
                 rng: Optional[np.random.Generator] = None, seed: Optional[int] = None):
        """
        Set up a fully walled grid of row_count x column_count cells.
        Pass either an explicit numpy Generator or a seed for one, not both.
        """
        if rng is not None and seed is not None:
            raise ValueError("pass either rng or seed, not both")
        self.rows = _check_size("row_count", row_count)
        self.cols = _check_size("column_count", column_count)
        self.rng = rng if rng is not None else np.random.default_rng(seed)

        self.walls = np.ones((self.rows, self.cols), dtype=bool)
        self.visited = CellSet()
        self.frontiers = CellSet()
        self.iterations = 0
        self._generated = False

    def key(self, x: int, y: int) -> int:
        return y * self.cols + x

    def cell(self, key: int) -> Tuple[int, int]:
        return key % self.cols, key // self.cols

    def is_room(self, x: int, y: int) -> bool:
        """Check that (x, y) lies inside the border, where rooms may be carved."""
        return 1 <= x <= self.cols - 2 and 1 <= y <= self.rows - 2

    def mark_open(self, x: int, y: int):
        self.walls[y, x] = False

    def add_frontiers(self, x: int, y: int):
        """Record walled rooms two steps away from (x, y) as frontiers."""
        for dx, dy in self.directions:
            nx, ny = x + dx, y + dy
            if self.is_room(nx, ny) and self.walls[ny, nx]:
                self.frontiers.add(self.key(nx, ny))

    def visited_neighbours(self, x: int, y: int) -> List[int]:
        neighbours = []
        for dx, dy in self.directions:
            nx, ny = x + dx, y + dy
            if self.is_room(nx, ny):
                key = self.key(nx, ny)
                if key in self.visited:
                    neighbours.append(key)
        return neighbours

    def connect(self, x1: int, y1: int, x2: int, y2: int):
        """Open the connector cell midway between two rooms."""
        self.mark_open((x1 + x2) // 2, (y1 + y2) // 2)

    def visit(self, x: int, y: int):
        key = self.key(x, y)
        self.frontiers.discard(key)
        self.visited.add(key)
        self.mark_open(x, y)
        self.add_frontiers(x, y)

    def generate(self) -> MazeDescriptor:
        """Grow the maze from (1, 1) with randomized Prim's algorithm."""
        if self._generated:
            raise RuntimeError("PrimsMaze.generate() may only run once per instance")
        self._generated = True

        self.visit(START_X, START_Y)
        logger.debug("initial frontiers: %s", [self.cell(k) for k in self.frontiers])

        while len(self.frontiers) > 0:
            fx, fy = self.cell(self.frontiers.random_element(self.rng))

            neighbours = self.visited_neighbours(fx, fy)
            if not neighbours:
                raise RuntimeError(f"frontier ({fx}, {fy}) has no visited neighbour")
            vx, vy = self.cell(neighbours[int(self.rng.integers(len(neighbours)))])

            self.connect(vx, vy, fx, fy)
            self.visit(fx, fy)
            self.iterations += 1

        logger.debug("generated %dx%d maze in %d iterations, %d open cells",
                     self.cols, self.rows, self.iterations, int((~self.walls).sum()))
        return self.descriptor()

    def descriptor(self) -> MazeDescriptor:
        return MazeDescriptor(data=tuple(bool(v) for v in self.walls.ravel()),
                              cols=self.cols, rows=self.rows)


def generate_maze(row_count: int, column_count: int,
                  rng: Optional[np.random.Generator] = None,
                  seed: Optional[int] = None) -> MazeDescriptor:
    return PrimsMaze(row_count, column_count, rng=rng, seed=seed).generate()


@dataclass
class MazeConfig:
    rows: int = DEFAULT_ROWS
    cols: int = DEFAULT_COLS
    seed: Optional[int] = None

    def __post_init__(self) -> None:
        _check_size("rows", self.rows)
        _check_size("cols", self.cols)
        if self.seed is not None and (isinstance(self.seed, bool) or not isinstance(self.seed, int)):
            raise TypeError(f"seed must be an integer, got {type(self.seed).__name__}")


def load_config(path: str) -> MazeConfig:
    """Load a YAML file with rows/cols/seed keys into a MazeConfig."""
    cfg = OmegaConf.to_container(OmegaConf.load(path), resolve=True)
    if not isinstance(cfg, dict):
        raise TypeError(f"Expected mapping at {path}, got {type(cfg)}")
    known = {f.name for f in fields(MazeConfig)}
    unknown = set(cfg) - known
    if unknown:
        raise ValueError(f"Unknown maze config keys in {path}: {sorted(unknown)}")
    return MazeConfig(**cfg)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Generate and draw a randomized Prim's maze")
    parser.add_argument("--config", type=str, default=None, help="YAML file with rows/cols/seed")
    parser.add_argument("--rows", type=int, default=None)
    parser.add_argument("--cols", type=int, default=None)
    parser.add_argument("--seed", type=int, default=None)
    parser.add_argument("--text", action="store_true", help="print the maze instead of plotting it")
    parser.add_argument("--save", type=str, default=None, help="save the plot to this path")
    parser.add_argument("--no-show", action="store_true", help="do not open a plot window")
    parser.add_argument("--log-level", type=str.upper, default="WARNING",
                        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"])
    return parser


def main(argv: Optional[Sequence[str]] = None) -> MazeDescriptor:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(level=args.log_level,
                        format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    try:
        cfg = load_config(args.config) if args.config else MazeConfig()
        overrides = {k: getattr(args, k) for k in ("rows", "cols", "seed") if getattr(args, k) is not None}
        if overrides:
            cfg = MazeConfig(**{**cfg.__dict__, **overrides})
    except (TypeError, ValueError) as exc:
        parser.error(str(exc))

    maze = generate_maze(cfg.rows, cfg.cols, seed=cfg.seed)

    # visualizer imports this module, so it cannot be imported at the top
    from visualizer import MazeVisualizer, render_text

    if args.text:
        print(render_text(maze))
    else:
        viz = MazeVisualizer(maze)
        if args.save:
            viz.save(args.save)
        if not args.no_show:
            viz.show()
    return maze


if __name__ == "__main__":
    main()
