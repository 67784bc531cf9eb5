"""External encoder wrappers."""

from video_subtitler.media.transcoder import MediaTranscoder

__all__ = ["MediaTranscoder"]
