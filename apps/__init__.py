"""Interactive front ends built on the interaction engine."""
