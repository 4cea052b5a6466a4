"""Pipeline stages — layout, grid, optimizer, review.

Each stage consumes the previous stage's objects.  The stages in order:

  layout     — parse / validate the initial plan (blocks, walkways)
  grid       — rasterise corridors into an occupancy path mask
  context    — split corridor blocks off and assemble the ScoreContext
  optimizer  — legality gate, layout cost, local search
  review     — rule findings for display next to a plan
"""
