#Lightning maze
#A random maze is generated, then a breadth first search grows down from the top middle cell
#until it touches the bottom row. The route back from the deepest cell is traced as the "strike",
#flashed, and then the cells are cleared so the same maze can be struck again, forever.

#To watch it, open terminal, follow directories to where the files are then run "python3 lightning.py --mode visual"
#To collect metrics for several mazes, run "python3 lightning.py --mode cli --runs 10 --csv-output results.csv"

from __future__ import annotations

import argparse
import math
import random
import time
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Iterator, List, Optional, Tuple

Coord = Tuple[int, int]

WIDTH = 64
HEIGHT = 128
MAX_ATTEMPTS = 1000
STRIKE_BATCH = 10


def top_wall_probability(width: int, height: int) -> float:
    #Tends to 1 as the maze gets wider and to 0 as it gets taller
    return math.sqrt(width) / (math.sqrt(width) + math.sqrt(height))


def entry_cell(width: int) -> Coord:
    return (0, width // 2)


P_TOP = top_wall_probability(WIDTH, HEIGHT)
START = entry_cell(WIDTH)


class Kind(Enum):
    EMPTY = "empty"
    START = "start"
    PATH = "path"
    STRIKE = "strike"
    FLASH = "flash"


class Phase(Enum):
    START = "start"
    PATH = "path"
    STRIKE = "strike"
    FLASH = "flash"


#Minimum spacing between two advance() calls while in each phase
PHASE_DELAYS_MS: Dict[Phase, int] = {
    Phase.START: 200,
    Phase.PATH: 20,
    Phase.STRIKE: 0,
    Phase.FLASH: 200,
}


class MazeGenerationError(RuntimeError):
    pass


@dataclass(frozen=True)
class Walls:
    top: bool
    left: bool


@dataclass(frozen=True)
class CellState:
    kind: Kind
    # brightness from 0.0 to 1.0, only set on path cells
    weight: Optional[float] = None
    # coordinates of the next cell towards the entry
    next: Optional[Coord] = None


EMPTY = CellState(Kind.EMPTY)
START_STATE = CellState(Kind.START)
FLASH_STATE = CellState(Kind.FLASH)


@dataclass(frozen=True)
class CellView:
    has_top_wall: bool
    has_left_wall: bool
    state: CellState


class Grid:
#Rows of cells with fixed walls and a mutable state per cell
#Only the top and left wall of each cell is stored, the right and bottom edges belong to the neighbours

    def __init__(self, walls: List[List[Walls]], entry: Optional[Coord] = None):
        self.height = len(walls)
        self.width = len(walls[0]) if walls else 0
        self.walls = walls
        self.entry = entry if entry is not None else entry_cell(self.width)
        self.states: List[List[CellState]] = [
            [EMPTY for _ in range(self.width)] for _ in range(self.height)
        ]
        self.reset()

    @classmethod
    def open_grid(cls, width: int, height: int, entry: Optional[Coord] = None) -> "Grid":
        walls = [[Walls(False, False) for _ in range(width)] for _ in range(height)]
        return cls(walls, entry)

    def dimensions(self) -> Tuple[int, int]:
        return self.width, self.height

    def within_bounds(self, row: int, col: int) -> bool:
        return 0 <= row < self.height and 0 <= col < self.width

    def cell_at(self, row: int, col: int) -> CellView:
        walls = self.walls[row][col]
        return CellView(walls.top, walls.left, self.states[row][col])

    def state(self, cell: Coord) -> CellState:
        return self.states[cell[0]][cell[1]]

    def set_state(self, cell: Coord, state: CellState) -> None:
        self.states[cell[0]][cell[1]] = state

    def reset(self) -> None:
        for row in self.states:
            for col in range(self.width):
                row[col] = EMPTY
        self.set_state(self.entry, START_STATE)

    def open_neighbors(self, cell: Coord) -> List[Coord]:
        #Down, right, up, left. Moving up or left crosses the current cell's own walls
        r, c = cell
        neighbors = []
        if self.within_bounds(r + 1, c) and not self.walls[r + 1][c].top:
            neighbors.append((r + 1, c))
        if self.within_bounds(r, c + 1) and not self.walls[r][c + 1].left:
            neighbors.append((r, c + 1))
        if self.within_bounds(r - 1, c) and not self.walls[r][c].top:
            neighbors.append((r - 1, c))
        if self.within_bounds(r, c - 1) and not self.walls[r][c].left:
            neighbors.append((r, c - 1))
        return neighbors

    def count(self, kind: Kind) -> int:
        return sum(1 for row in self.states for state in row if state.kind is kind)

    def to_grid(self) -> List[List[int]]:
        #1 is floor, 0 is wall. The bottom edge is left open, it is where the strike lands
        grid_w = self.width * 2 + 1
        grid_h = self.height * 2 + 1
        grid = [[0 for _ in range(grid_w)] for _ in range(grid_h)]
        for r in range(self.height):
            for c in range(self.width):
                walls = self.walls[r][c]
                gy, gx = 2 * r + 1, 2 * c + 1
                grid[gy][gx] = 1
                if not walls.top:
                    grid[gy - 1][gx] = 1
                if not walls.left:
                    grid[gy][gx - 1] = 1
        for c in range(self.width):
            grid[grid_h - 1][2 * c + 1] = 1
        return grid


#Maze generation

class MazeGenerator:
    #Random top and left walls, retried until a route from the entry reaches the bottom row
    def __init__(
        self,
        width: int = WIDTH,
        height: int = HEIGHT,
        rng: Optional[random.Random] = None,
        max_attempts: int = MAX_ATTEMPTS,
    ):
        self.width = width
        self.height = height
        self.rng = rng or random.Random()
        self.max_attempts = max_attempts
        self.p_top = top_wall_probability(width, height)
        self.attempts = 0

    def random_grid(self) -> Grid:
        walls: List[List[Walls]] = []
        for r in range(self.height):
            row: List[Walls] = []
            for c in range(self.width):
                # avoid closed cells: skip the top wall if the cell above is already shut on its other three sides
                guard = True
                if r > 0:
                    above = walls[r - 1][c]
                    above_right_left = walls[r - 1][c + 1].left if c + 1 < self.width else False
                    guard = not above.top or not above.left or not above_right_left
                top = guard and self.rng.random() < self.p_top
                left = self.rng.random() < 1 - self.p_top
                row.append(Walls(top, left))
            walls.append(row)
        return Grid(walls, entry_cell(self.width))

    def generate(self) -> Grid:
        self.attempts = 0
        while self.attempts < self.max_attempts:
            self.attempts += 1
            grid = self.random_grid()
            strike = search(grid)
            if strike[0] == grid.height - 1:
                grid.reset()
                return grid
        raise MazeGenerationError(
            f"could not generate a valid {self.width}x{self.height} maze after {self.max_attempts} attempts"
        )


#Search

def strike_weight(strike_row: int, row: int, height: int) -> float:
    # 100% at the strike row, fading to 0 over a quarter of the height
    return min(1.0, max(0.0, 1 - 4 * (strike_row - row) / height))


class PathSearch:
    #BFS by whole frontiers: every round expands all cells found in the previous round at once
    #Each call to step() is one round, so the search can be animated
    def __init__(self, grid: Grid, source: Optional[Coord] = None):
        self.grid = grid
        self.source = source if source is not None else grid.entry
        # the source counts as visited, so no neighbour can point back into it
        if grid.state(self.source).kind is Kind.EMPTY:
            grid.set_state(self.source, START_STATE)
        self.frontier: List[Coord] = [self.source]
        self.strike: Coord = self.source
        self.rounds = 0

    @property
    def finished(self) -> bool:
        if not self.frontier:
            return True
        return self.rounds > 0 and self.strike[0] == self.grid.height - 1

    def step(self) -> Optional[Coord]:
        if self.finished:
            return None
        grid = self.grid
        strike = self.frontier[0]
        for cell in self.frontier:
            if cell[0] > strike[0]:
                strike = cell

        admitted: Dict[Coord, Coord] = {}
        for cell in self.frontier:
            for nxt in grid.open_neighbors(cell):
                if nxt in admitted or grid.state(nxt).kind is not Kind.EMPTY:
                    continue
                admitted[nxt] = cell

        for cell, prev in admitted.items():
            grid.set_state(
                cell,
                CellState(Kind.PATH, weight=strike_weight(strike[0], cell[0], grid.height), next=prev),
            )
        self.frontier = list(admitted)
        self.strike = strike
        self.rounds += 1
        return strike

    def __iter__(self) -> Iterator[Coord]:
        return self

    def __next__(self) -> Coord:
        strike = self.step()
        if strike is None:
            raise StopIteration
        return strike


def search(grid: Grid, source: Optional[Coord] = None) -> Coord:
    path_search = PathSearch(grid, source)
    for _ in path_search:
        pass
    return path_search.strike


#Tracing the strike back to the entry

def _struck(state: CellState) -> CellState:
    return CellState(Kind.STRIKE, next=state.next)


def _flashed(state: CellState) -> CellState:
    return FLASH_STATE


class _Trace:
    source_kind = Kind.PATH
    mark = staticmethod(_struck)
    batch = 1

    def __init__(self, grid: Grid, strike: Coord):
        self.grid = grid
        self.cursor = strike
        self.visited = 0
        self.finished = False

    def step(self) -> Optional[Coord]:
        if self.finished:
            return None
        state = self.grid.state(self.cursor)
        while state.kind is self.source_kind:
            current = self.cursor
            self.grid.set_state(current, self.mark(state))
            self.visited += 1
            self.cursor = state.next
            state = self.grid.state(self.cursor)
            if self.visited % self.batch == 0:
                return current
        self.finished = True
        if self.visited % self.batch != 0:
            return self.cursor
        return None

    @property
    def exhausted(self) -> bool:
        #True once every cell of the route has been converted, even before step() reports the end
        return self.finished or self.grid.state(self.cursor).kind is not self.source_kind

    def __iter__(self) -> Iterator[Coord]:
        return self

    def __next__(self) -> Coord:
        cell = self.step()
        if cell is None:
            raise StopIteration
        return cell


class StrikeTrace(_Trace):
    #Path -> Strike, reported in batches so the route is drawn a few rows at a time
    source_kind = Kind.PATH
    mark = staticmethod(_struck)
    batch = STRIKE_BATCH


class FlashTrace(_Trace):
    source_kind = Kind.STRIKE
    mark = staticmethod(_flashed)
    batch = 1


def trace_strike(grid: Grid, strike: Coord) -> StrikeTrace:
    return StrikeTrace(grid, strike)


def trace_flash(grid: Grid, strike: Coord) -> FlashTrace:
    return FlashTrace(grid, strike)


#Animation state machine

class LightningCycle:
    #Start -> Path -> Strike -> Flash -> reset -> Start ...
    #advance() runs exactly one step and returns the phase it belongs to
    def __init__(
        self,
        grid: Optional[Grid] = None,
        rng: Optional[random.Random] = None,
        max_attempts: int = MAX_ATTEMPTS,
    ):
        self.attempts = 0
        if grid is None:
            generator = MazeGenerator(rng=rng, max_attempts=max_attempts)
            grid = generator.generate()
            self.attempts = generator.attempts
        grid.reset()
        self.grid = grid
        self.phase: Optional[Phase] = None
        self.cycles = 0
        self.strike: Coord = grid.entry
        self.rounds = 0
        self.route_length = 0
        self._search: Optional[PathSearch] = None
        self._trace: Optional[_Trace] = None

    @property
    def struck(self) -> bool:
        #The whole route is marked as strike and the flash has not started yet
        return self.phase is Phase.STRIKE and self._trace.exhausted

    def delay_ms(self) -> int:
        if self.phase is None or (self.phase is Phase.START and self.cycles == 0):
            return 0
        return PHASE_DELAYS_MS[self.phase]

    def advance(self) -> Phase:
        if self.phase is None:
            return self._enter_start()

        if self.phase is Phase.START:
            self._search = PathSearch(self.grid)
            self.phase = Phase.PATH

        if self.phase is Phase.PATH:
            if self._search.step() is not None:
                self.rounds = self._search.rounds
                return Phase.PATH
            self.strike = self._search.strike
            self._search = None
            self._trace = trace_strike(self.grid, self.strike)
            self.phase = Phase.STRIKE

        if self.phase is Phase.STRIKE:
            if self._trace.step() is not None:
                self.route_length = self._trace.visited
                return Phase.STRIKE
            self.route_length = self._trace.visited
            self._trace = trace_flash(self.grid, self.strike)
            self.phase = Phase.FLASH

        if self._trace.step() is not None:
            return Phase.FLASH
        self.grid.reset()
        self.cycles += 1
        return self._enter_start()

    def _enter_start(self) -> Phase:
        self._trace = None
        self._search = None
        self.phase = Phase.START
        return Phase.START

    def run_cycle(self) -> None:
        #Drive one whole cycle without any waiting, ends on the following Start
        target = self.cycles + 1
        while self.cycles < target:
            self.advance()


#Text output

STATE_CHARS = {
    Kind.EMPTY: " ",
    Kind.START: "S",
    Kind.PATH: ".",
    Kind.STRIKE: "*",
    Kind.FLASH: "!",
}


def render_text(grid: Grid) -> str:
    layout = grid.to_grid()
    chars = [["#" if value == 0 else " " for value in row] for row in layout]
    for r in range(grid.height):
        for c in range(grid.width):
            chars[2 * r + 1][2 * c + 1] = STATE_CHARS[grid.states[r][c].kind]
    return "\n".join("".join(row) for row in chars)


#CLI + visualization

def resolve_seed(args) -> int:
    return args.seed if args.seed is not None else random.randint(0, 1_000_000_000)


def run_visual_mode(args):
    from visualizer import LightningVisualizer

    seed = resolve_seed(args)
    print(f"Generating maze {WIDTH}x{HEIGHT} | seed: {seed}")
    cycle = LightningCycle(rng=random.Random(seed), max_attempts=args.max_attempts)
    print(f"Valid maze after {cycle.attempts} attempt(s)")
    viewer = LightningVisualizer(
        cycle,
        tile_size=args.tile_size,
        fps=args.fps,
        title_suffix=f" - seed {seed}",
    )
    viewer.run()


def measure_run(run_idx: int, seed: int, max_attempts: int, show: bool = False) -> Dict[str, object]:
    start_time = time.perf_counter()
    cycle = LightningCycle(rng=random.Random(seed), max_attempts=max_attempts)
    generated = time.perf_counter() - start_time
    while not cycle.struck:
        cycle.advance()
    if show:
        print(render_text(cycle.grid))
    cycle.run_cycle()
    elapsed = time.perf_counter() - start_time
    return {
        "run": run_idx + 1,
        "seed": seed,
        "attempts": cycle.attempts,
        "rounds": cycle.rounds,
        "strike_row": cycle.strike[0],
        "strike_col": cycle.strike[1],
        "route_length": cycle.route_length,
        "generation_time": f"{generated:.6f}",
        "elapsed": f"{elapsed:.6f}",
    }


def run_cli_mode(args):
    rows = []
    for run_idx in range(args.runs):
        seed = resolve_seed(args) if args.seed is None else args.seed + run_idx
        seed_desc = seed if args.seed is not None else f"random({seed})"
        row = measure_run(run_idx, seed, args.max_attempts, show=args.show)
        print(
            f"Run {run_idx + 1}/{args.runs} | maze {WIDTH}x{HEIGHT} | seed: {seed_desc} | attempts={row['attempts']} "
            f"rounds={row['rounds']} strike=({row['strike_row']}, {row['strike_col']}) "
            f"route_len={row['route_length']} elapsed={float(row['elapsed']):.3f}s"
        )
        rows.append(row)

    if args.csv_output:
        import csv

        fieldnames = [
            "run",
            "seed",
            "attempts",
            "rounds",
            "strike_row",
            "strike_col",
            "route_length",
            "generation_time",
            "elapsed",
        ]
        with open(args.csv_output, "w", newline="") as f:
            writer = csv.DictWriter(f, fieldnames=fieldnames)
            writer.writeheader()
            writer.writerows(rows)
        print(f"\nWrote {len(rows)} rows to {args.csv_output}")
    return rows


def prompt_for_mode():
    response = input("Run visualizer? (y/n): ").strip().lower()
    return "visual" if response.startswith("y") else "cli"


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Lightning strike through a random maze.")
    parser.add_argument("--mode", choices=["visual", "cli"], help="Choose 'visual' for the pygame animation or 'cli' for text metrics.")
    parser.add_argument("--seed", type=int, default=None, help="Seed for maze generation (default: random). CLI runs use seed, seed+1, ...")
    parser.add_argument("--runs", type=int, default=1, help="Number of mazes to generate and strike in CLI mode.")
    parser.add_argument("--max-attempts", type=int, default=MAX_ATTEMPTS, help="Give up after this many mazes without a route to the bottom.")
    parser.add_argument("--tile-size", type=int, default=6, help="Cell size in pixels for visual mode; auto-scales to fit the screen.")
    parser.add_argument("--fps", type=int, default=60, help="Frame rate of the visual mode.")
    parser.add_argument("--show", action="store_true", help="Print each struck maze as text in CLI mode.")
    parser.add_argument("--csv-output", type=str, default=None, help="Path to write CSV metrics.")
    return parser.parse_args(argv)


def main(argv=None):
    args = parse_args(argv)
    mode = args.mode or prompt_for_mode()
    if mode == "visual":
        run_visual_mode(args)
    else:
        run_cli_mode(args)


if __name__ == "__main__":
    main()
