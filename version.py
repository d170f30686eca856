"""Project version constants.

These constants are used in logs so that a merged artifact can be traced back
to the tool version that produced it.
"""

ENGINE_NAME: str = "txhashmerge"
ENGINE_VERSION: str = "0.1.0"
