from shiftboard.scheduling.errors import InvalidRange

def validate_time_range(start, end) -> None:
    # times or instants; no overnight blocks yet
    if end <= start:
        raise InvalidRange()
