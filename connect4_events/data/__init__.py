"""
connect4_events.data - Event storage for Connect Four

Keeps the event log that the rules engine's state is replayed from.
"""

from connect4_events.data.event_log import EventLog

__all__ = ['EventLog']
