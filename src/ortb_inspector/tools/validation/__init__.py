# Author: Green Mountain Systems AI Inc.
# Donated to IAB Tech Lab

"""Validation tools for agents."""

from .bid_request_validation import BidRequestValidationInput, BidRequestValidationTool

__all__ = ["BidRequestValidationInput", "BidRequestValidationTool"]
