# Author: Green Mountain Systems AI Inc.
# Donated to IAB Tech Lab

"""CrewAI tools for the OpenRTB inspector."""

from .validation import BidRequestValidationTool

__all__ = [
    # Validation tools
    "BidRequestValidationTool",
]
