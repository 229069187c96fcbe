"""Exceptions shared by the workspace and runtime tool packages."""

import logging
mylogger = logging.getLogger()


class NimsforestError(Exception):
    """Base exception with a message. Logged on construction if ``log`` is set."""
    def __init__(self, message="A nimsforest error occurred", log=False):
        self.message = message
        super().__init__(self.message)
        if log:
            mylogger.error(message)


class FormatError(NimsforestError):
    """Grammar violation in a workspace descriptor.

    ``line`` is the 1-based line number the problem was found at.
    """
    def __init__(self, message: str, line: int, log=False):
        self.reason = message
        self.line = line
        super().__init__(f"line {line}: {message}", log=log)


class ValidationError(NimsforestError):
    """A well-formed model refers to missing paths or lacks required fields.

    ``problems`` lists every individual failure; ``message`` joins them.
    """
    def __init__(self, message: str, problems: list[str] | None = None, log=False):
        self.problems = list(problems) if problems else [message]
        super().__init__(message, log=log)


class ResolutionError(NimsforestError):
    """The executable path of a tool entry cannot be determined."""


class ToolValidationError(ResolutionError, ValidationError):
    """A resolved tool path does not exist or is not executable."""
    def __init__(self, message: str, path: str = "", log=False):
        self.path = path
        ValidationError.__init__(self, message, log=log)


class ExecutionError(NimsforestError):
    """A tool exited non-zero or could not be spawned at all."""
    def __init__(self, message: str, exit_code: int = 1, log=False):
        self.exit_code = exit_code
        super().__init__(message, log=log)


class WorkspaceNotFoundError(NimsforestError):
    """No workspace descriptor file where one was expected."""


class ToolNotFoundError(NimsforestError):
    """A tool name is unknown to the workspace or registry."""
    def __init__(self, name: str, where: str = "workspace", log=False):
        self.name = name
        super().__init__(f"tool {name} not found in {where}", log=log)


class ToolAlreadyRegisteredError(NimsforestError):
    def __init__(self, name: str, log=False):
        self.name = name
        super().__init__(f"tool {name} is already registered", log=log)


class CapabilityError(NimsforestError):
    """A registered tool does not provide the requested capability."""
