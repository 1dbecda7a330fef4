"""Demonstrates how to enable and configure logging in cartkit.

cartkit logging is disabled by default. Users opt in by calling ``enable_logging()``,
which returns a ``LoggingHandle``. The handle can be used as a context manager
(``with enable_logging(): ...``) or disabled manually via ``handle.disable()``.
When the last active handle is disabled, cartkit logging is automatically turned off.

Key concepts shown here:

- ``level``: controls the minimum log level. The custom ``INDUCTION`` level
  (numeric value 25, between INFO and WARNING) surfaces one line per tree
  build and is the default. ``DEBUG`` adds every split decision and leaf;
  ``TRACE`` adds every scored candidate question.
- ``log_format``: ``"short"`` shows ``timestamp | level | function - message``;
  ``"full"`` adds the module and line number.
- Error logging: a failed induction is logged at WARNING before the error propagates.
"""

import polars as pl

from cartkit import Record, build_tree, build_tree_result, enable_logging
from cartkit.exceptions import TypeMismatchError

df_fruit = pl.DataFrame({
    "color": ["green", "yellow", "red", "red", "yellow"],
    "diameter": [3, 3, 1, 1, 3],
    "fruit": ["Apple", "Apple", "Grape", "Grape", "Lemon"],
})

# Enable logging at DEBUG level with full log format to see each split decision
with enable_logging(level="DEBUG", log_format="full"):
    result = build_tree_result(df_fruit, "fruit")

    print(f"\n{result.tree.render()}\n")
    for rule in result.rules:
        print(rule)
    print(f"\nTraining accuracy: {result.accuracy:.0%}\n")

# A feature whose values mix integers and strings cannot be induced on
with enable_logging():
    mixed = [
        Record(features={"size": 3}, label="a"),
        Record(features={"size": "big"}, label="b"),
    ]
    try:
        build_tree(mixed)
    except TypeMismatchError as exc:
        print(f"Induction failed: {exc}")

# Logging automatically disabled here
