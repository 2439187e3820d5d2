from typing import Optional

import matplotlib.pyplot as plt
from matplotlib.axes import Axes

from maze import MazeDescriptor


def draw_maze(maze: MazeDescriptor, ax: Optional[Axes] = None) -> Axes:
    """Paint walls dark and open cells light on a matplotlib Axes."""
    if ax is None:
        _, ax = plt.subplots(figsize=(10, 10))
    ax.imshow(maze.as_array(), cmap='binary', interpolation='nearest')
    ax.grid(False)
    ax.axis('off')
    ax.set_title(f"Prim's Maze ({maze.cols}x{maze.rows})")
    return ax


def render_text(maze: MazeDescriptor, wall: str = "#", open_: str = " ") -> str:
    rows = []
    for y in range(maze.rows):
        row = maze.data[y * maze.cols:(y + 1) * maze.cols]
        rows.append("".join(wall if cell else open_ for cell in row))
    return "\n".join(rows)


class MazeVisualizer:
    def __init__(self, maze: MazeDescriptor):
        self.maze = maze
        # Keep tall mazes readable by following the grid's aspect ratio
        scale = 10.0 / max(maze.rows, maze.cols)
        self.fig, self.ax = plt.subplots(figsize=(max(maze.cols * scale, 2.0),
                                                  max(maze.rows * scale, 2.0)))
        draw_maze(maze, self.ax)

    def save(self, path: str, dpi: int = 300):
        self.fig.savefig(path, bbox_inches='tight', dpi=dpi)

    def show(self):
        plt.show()

    def close(self):
        plt.close(self.fig)
