"""Entry point for `python -m docquery`."""

from docquery.shell import main

if __name__ == "__main__":
    main()
