"""Allow ``python -m proxyswitch``."""

from proxyswitch.cli.main import main

if __name__ == "__main__":
    main()
