"""Constants for taskplanner.

This module centralizes default values used throughout the application.
"""

# Lists
DEFAULT_LIST_NAME = "Inbox"
DEFAULT_LIST_COLOR = "#3b82f6"
DEFAULT_LIST_ICON = "📥"

# Labels
DEFAULT_LABEL_COLOR = "#6b7280"
DEFAULT_LABEL_ICON = "🏷️"

# Change log
CHANGE_LOG_ACTOR = "user"

# Task views
UPCOMING_WINDOW_DAYS = 7
