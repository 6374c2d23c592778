def format_elapsed(seconds: int) -> str:
    """Format seconds as ``MM:SS``; minutes keep growing past 59, no hours."""
    seconds = max(0, int(seconds))
    minutes, remainder = divmod(seconds, 60)
    return f"{minutes:02d}:{remainder:02d}"
