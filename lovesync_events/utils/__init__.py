"""Text, date and geometry helpers."""
