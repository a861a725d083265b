"""
Video utility functions
"""
import ffmpeg
import structlog

logger = structlog.get_logger()


def get_video_duration(video_path: str) -> int:
    """
    Extract video duration in seconds using ffmpeg

    Args:
        video_path: Path to the video file

    Returns:
        Duration in seconds (rounded to nearest integer), 0 if it cannot be probed
    """
    try:
        probe = ffmpeg.probe(video_path)
        duration = float(probe['format']['duration'])
        return int(round(duration))
    except (ffmpeg.Error, OSError, KeyError, ValueError, TypeError) as e:
        logger.warning("Could not probe video duration", path=video_path, error=str(e))
        return 0
