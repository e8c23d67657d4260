"""
Shared type definitions.
"""

import logging
import dataclasses


@dataclasses.dataclass
class PipelineContext:
    """
    Pipeline Context.
    """

    logger: logging.Logger
