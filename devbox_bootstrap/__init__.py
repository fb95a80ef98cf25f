"""
Bootstrap prerequisite tooling on a Windows development or CI machine.
"""

__version__ = "0.3.0"
