"""Allow `python -m scripts` by running the seed script."""

from scripts.seed import run_seed

run_seed()
