"""
connect4_events - Event-sourced rules engine for Connect Four

Player commands are validated against the current state, accepted commands
become events, and game state is derived only by replaying those events.
"""

# Version number
__version__ = '0.1.0'
