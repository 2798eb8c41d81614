"""
meetingscheduler - free-slot and meeting suggestion engine.
"""

__version__ = "0.1.0"
