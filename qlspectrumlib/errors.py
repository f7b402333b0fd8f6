from __future__ import annotations


class SpectrogramError(Exception):
    """Base class for failures of a single spectrogram generation request.

    All subclasses are terminal for the request that raised them; nothing
    retries automatically.
    """
    kind = "error"


class DecodeFailed(SpectrogramError):
    """The audio source cannot be opened or read."""
    kind = "decode_failed"


class EmptySelection(SpectrogramError):
    """The resolved time range contains no extractable samples."""
    kind = "empty_selection"


class RenderUnavailable(SpectrogramError):
    """There are no frames or no bins to render."""
    kind = "render_unavailable"
