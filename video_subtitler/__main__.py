"""Package entry point for ``python -m video_subtitler``."""

from video_subtitler.cli import main

if __name__ == "__main__":
    main()
