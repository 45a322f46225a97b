"""
vfpipe: run ordered compute pipelines stored in a content-store container.
"""

__version__ = "0.1.0"
