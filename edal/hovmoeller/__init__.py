"""Hovmoeller Bounded Context.

Data sampled along a path over time:
- Value Objects: HovmoellerCell, HovmoellerPosition, HovmoellerDomain,
  HovmoellerFeature
- Services: strip layout, value padding, axis label helpers
"""
