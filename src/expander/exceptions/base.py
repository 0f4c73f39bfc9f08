from __future__ import annotations


class ExpanderError(Exception):
    """Base exception class for all Expander-specific errors.

    All custom exceptions in Expander inherit from this class, which allows
    catching every Expander error at the CLI boundary while letting system
    exceptions propagate naturally.

    Attributes:
        message: Human-readable error message describing what went wrong.

    Example:
        ```python
        try:
            processor.process_file(path)
        except ExpanderError as e:
            logger.error("processing_failed", error=e.message)
            sys.exit(1)
        ```
    """

    def __init__(self, message: str) -> None:
        """Initialize the ExpanderError.

        Args:
            message: Human-readable error message.
        """
        self.message = message
        super().__init__(message)
