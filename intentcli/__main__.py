"""Main entry point when executing intentcli as a package.

This allows running the package using python -m intentcli.
"""

from intentcli.main import cli_entry_point

if __name__ == "__main__":
    cli_entry_point()
