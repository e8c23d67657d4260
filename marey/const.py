"""
Shared constants.
"""

HEADER_DELIMITER = "---"
COMMENT_PREFIX = "#"

DEFAULT_TRAIN_LINE_FILE = "train-line.txt"
DEFAULT_TOPOLOGY_FILE = "topology.txt"

WARNING_PREFIX = "Warning: "

# High-contrast base palette for line colours
PALETTE = [
    "#1f77b4",
    "#ff7f0e",
    "#2ca02c",
    "#d62728",
    "#9467bd",
    "#8c564b",
    "#e377c2",
    "#7f7f7f",
    "#bcbd22",
    "#17becf",
]
