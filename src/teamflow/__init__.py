"""teamflow: small-team organisation with self-healing team sizes.

Teams of up to four members, the tasks their members own, and a reactive
policy that merges or splits teams whenever a membership change pushes a
team outside the stable 2..4 band.
"""

__version__ = "0.1.0"
