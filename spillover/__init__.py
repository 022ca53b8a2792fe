"""Report JIRA issues that spilled over across more than one sprint"""

from spillover.config import PROGRAM_VERSION as __version__
