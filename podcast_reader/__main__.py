"""Package entry point for ``python -m podcast_reader``."""

from podcast_reader.cli import main

if __name__ == "__main__":
    main()
