"""Exceptions raised by the provider automation engine"""

from typing import Optional


class ReadAllError(Exception):
    """Base class for all automation errors"""


class ControlNotFoundError(ReadAllError):
    """A required control could not be located after exhausting the fallback chain"""

    def __init__(self, control: str, hint: Optional[str] = None):
        """
        Args:
            control: Human-readable name of the missing control
            hint: Optional extra guidance appended to the message
        """
        self.control = control
        self.hint = hint
        message = f"Could not find {control}."
        if hint:
            message = f"{message} {hint}"
        super().__init__(message)
