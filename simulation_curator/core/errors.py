class CuratorError(Exception):
    """Base class for every error raised by the curation pipeline."""


class FatalInputError(CuratorError):
    """Input is inconsistent; the run is aborted before anything is written."""


class MissingAttachment(FatalInputError):
    def __init__(self, block_id: str, shape_id: str, sequence: int):
        super().__init__(f"Block {block_id}: shape point ({shape_id}, {sequence}) has no resolved radio cell")
        self.block_id = block_id
        self.shape_id = shape_id
        self.sequence = sequence


class InconsistentSchedule(FatalInputError):
    pass


class EmptyWindow(CuratorError):
    def __init__(self, block_id: str):
        super().__init__(f"No shape points in time window found for block {block_id}")
        self.block_id = block_id


class MalformedTimeString(CuratorError, ValueError):
    def __init__(self, value: str):
        super().__init__(f"Invalid time format: {value!r} (expected HH:MM:SS)")
        self.value = value
