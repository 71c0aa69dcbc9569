"""Launch the 'wait' sub-command of the released binary."""

import sys

from actionkit.core.workflow import configure_logging
from actionkit.launcher import launch

if __name__ == "__main__":
    configure_logging()
    sys.exit(launch(__file__))
