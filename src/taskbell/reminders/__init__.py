"""
Reminder subsystem.

Components:
- reminder_loop.py: polling loop that fires each due task once per session
- notifiers.py: notification channels (system alert, toast, audio) and the fan-out dispatcher
"""
