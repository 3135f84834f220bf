"""Entry point for running authprofile as a module."""

from authprofile.cli import main

if __name__ == "__main__":
    main()
