"""Formatting helpers for countdown values."""


def format_time(seconds: int) -> str:
    """Render seconds as MM:SS, or HH:MM:SS once an hour or more remains."""
    seconds = max(0, int(seconds))
    hours, rest = divmod(seconds, 3600)
    minutes, secs = divmod(rest, 60)
    if hours > 0:
        return f"{hours:02d}:{minutes:02d}:{secs:02d}"
    return f"{minutes:02d}:{secs:02d}"
