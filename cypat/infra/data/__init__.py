"""Data files for checks: closed value type and layered JSON/YAML/TOML lookup."""

from .reader import DataFormat, DataReader, load_document  # noqa: F401 – re-export for convenience
from .values import Float, Integer, Number, Value, to_python, to_value  # noqa: F401
