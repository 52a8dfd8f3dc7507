"""Calendar Trello Sync.

Mirrors Google Calendar events into a Trello board's "Today" and "Tomorrow"
lists and advances them with a daily rollover.
"""

__version__ = "0.1.0"
