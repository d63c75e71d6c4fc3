"""Exception hierarchy for coursetree."""


class CoursetreeError(Exception):
    """Base class for all coursetree errors."""


class DocumentFormatError(CoursetreeError):
    """An import document could not be parsed."""


class DuplicateItemError(CoursetreeError):
    """A curriculum item id is already present in the tree."""


class HierarchyError(CoursetreeError):
    """A node type is not allowed at the requested position."""


class ProgramNotFoundError(CoursetreeError):
    """No program with the given id exists."""


class ProgressNotFoundError(CoursetreeError):
    """No curriculum progress exists for the given enrollment."""


class RepositoryError(CoursetreeError):
    """Reading or writing a persisted collection failed."""
