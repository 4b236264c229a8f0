"""
ecstrace - timeline viewer for ECS tasks.

A command-line tool that merges ECS service events and the CloudWatch Logs
of a task's containers into one chronologically ordered timeline.
"""

__version__ = "0.1.0"
__author__ = "ecstrace Contributors"
