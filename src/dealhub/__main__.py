"""Entry point for 'python -m dealhub' command."""

from dealhub.cli import main

if __name__ == "__main__":
    main()
