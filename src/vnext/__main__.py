"""Allow ``python -m vnext``."""

from vnext.cli.app import main

if __name__ == "__main__":
    main()
