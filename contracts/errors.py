"""Failure taxonomy for reviewer passes.

None of these propagate past a reviewer's `review()` boundary; they are
converted into degraded findings there.
"""


class ReviewError(Exception):
    """Base class for reviewer pass failures."""


class ProviderCallFailure(ReviewError):
    """The inference call failed: network, timeout, non-success or empty content."""


class ReviewCancelled(ProviderCallFailure):
    """The caller cancelled the review or its deadline passed."""


class ResponseParseFailure(ReviewError):
    """No recoverable JSON could be extracted from the model's text."""

    def __init__(self, message: str, raw_text: str = ""):
        super().__init__(message)
        self.raw_text = raw_text


class PartialDataFailure(ResponseParseFailure):
    """JSON parsed, but the keys the pass expects are absent."""
