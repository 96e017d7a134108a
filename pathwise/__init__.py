"""
Pathwise: progress tracking for project and study-plan trees.

Progress flows bottom-up from leaves (subtasks, lectures) to the root
document, and every node's status is derived from its progress.
"""

__version__ = "0.1.0"
