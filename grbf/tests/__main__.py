"""
Run the grbf test-suite from a source checkout::

    python -m grbf.tests [pytest args]

Extra arguments are handed to pytest unchanged. Installed wheels do not
ship the ``test/`` folder, so this only works next to the repository.
"""
import pathlib
import sys
import pytest

TEST_DIR = pathlib.Path(__file__).resolve().parents[2] / "test"


def run(args=None):
    """
    Run pytest on the repository test folder and return its exit code.
    """
    if not TEST_DIR.is_dir():
        print("grbf: no test folder at {}; run from a source checkout.".format(TEST_DIR),
              file=sys.stderr)
        return 1
    return pytest.main([str(TEST_DIR)] + list(sys.argv[1:] if args is None else args))


if __name__ == "__main__":
    sys.exit(run())
