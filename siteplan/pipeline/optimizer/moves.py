"""Neighbourhood moves for the layout optimizer.

Every move takes the current block list and a random source and returns
``(candidate_blocks, move_label)``.  Moves never mutate their input: the
candidate is a deep copy.  Lists too short for a move come back
unchanged with the label ``"noop"``.
"""

from __future__ import annotations

import random
from typing import Callable

from siteplan.pipeline.config import LAYOUT_RULES
from siteplan.pipeline.layout.models import Block, clone_blocks


Move = Callable[[list[Block], random.Random], tuple[list[Block], str]]

NOOP = "noop"

# Cardinal directions: (dx, dy)
DIRS = ((1, 0), (-1, 0), (0, 1), (0, -1))


def swap(blocks: list[Block], rng: random.Random) -> tuple[list[Block], str]:
    """Exchange the positions of two distinct blocks."""
    n = len(blocks)
    if n < 2:
        return blocks, NOOP
    i = rng.randrange(n)
    j = rng.randrange(n)
    if j == i:
        j = (j + 1) % n
    nb = clone_blocks(blocks)
    nb[i].x, nb[i].y, nb[j].x, nb[j].y = nb[j].x, nb[j].y, nb[i].x, nb[i].y
    return nb, f"swap({i},{j})"


def make_shift(grid_step: float) -> Move:
    """Move one block by exactly *grid_step* in a cardinal direction."""

    def shift(blocks: list[Block], rng: random.Random) -> tuple[list[Block], str]:
        if not blocks:
            return blocks, NOOP
        i = rng.randrange(len(blocks))
        dx, dy = DIRS[rng.randrange(len(DIRS))]
        nb = clone_blocks(blocks)
        nb[i].x = max(0.0, nb[i].x + dx * grid_step)
        nb[i].y = max(0.0, nb[i].y + dy * grid_step)
        return nb, f"shift({i},{dx},{dy})"

    return shift


def rotate(blocks: list[Block], rng: random.Random) -> tuple[list[Block], str]:
    """Turn one block by 90° by swapping its width and height.

    The top-left corner stays put, so the block's centre moves.
    """
    if not blocks:
        return blocks, NOOP
    i = rng.randrange(len(blocks))
    nb = clone_blocks(blocks)
    b = nb[i]
    b.w, b.h = b.h, b.w
    b.rotation = 0 if b.rotation == 90 else 90
    return nb, f"rotate({i})"


def make_pull_together(gap: float = LAYOUT_RULES.pull_together_gap_m) -> Move:
    """Butt two list-adjacent blocks against each other.

    Block ``i`` ends at the midpoint of the pair's x coordinates, block
    ``i + 1`` starts *gap* metres after it, and both take the mean y.
    """

    def pull_together(blocks: list[Block], rng: random.Random) -> tuple[list[Block], str]:
        if len(blocks) < 2:
            return blocks, NOOP
        i = rng.randrange(len(blocks) - 1)
        j = i + 1
        nb = clone_blocks(blocks)
        cx = (nb[i].x + nb[j].x) / 2
        cy = (nb[i].y + nb[j].y) / 2
        nb[i].x = cx - nb[i].w
        nb[j].x = cx + gap
        nb[i].y = cy
        nb[j].y = cy
        return nb, f"pullTogether({i},{j})"

    return pull_together


def default_moves(grid_step: float) -> list[Move]:
    """The generator set the optimizer draws from uniformly."""
    return [swap, make_shift(grid_step), rotate, make_pull_together()]
