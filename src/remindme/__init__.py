"""remindme: reminders embedded in markdown notes."""
