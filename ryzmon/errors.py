"""Exception taxonomy for sampling failures."""


class RyzmonError(Exception):
    """Base class for all ryzmon errors."""


class SourceReadError(RyzmonError):
    """A counter source could not be read or a process could not be spawned."""


class ParseError(RyzmonError):
    """A source was read but its content is not in the expected shape."""


class ProcessTimeout(RyzmonError):
    """A subprocess exceeded its wall-clock bound."""


class SchedulerError(RyzmonError):
    """Timers could not be armed."""
