"""Engine domain: condition variants, score entries, review cadence."""

from .scheduling import is_due, is_review_tick  # noqa: F401 – re-export for convenience
