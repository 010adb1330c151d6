"""Exception hierarchy for Kiln.

Every error carries a ``context`` dictionary so that the phase, step, target,
variant and underlying diagnostic travel with the exception up to the CLI.
"""

from typing import Any


class KilnError(Exception):
    """Base class for all Kiln errors."""

    def __init__(self, message: str, context: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.context: dict[str, Any] = dict(context or {})

    def add_context(self, **context: Any) -> "KilnError":
        """Attach context keys that are not already present."""
        for key, value in context.items():
            self.context.setdefault(key, value)
        return self

    def __str__(self) -> str:
        if not self.context:
            return self.message
        details = ", ".join(
            f"{key}={value}"
            for key, value in self.context.items()
            if key != "diagnostic" and value is not None
        )
        return f"{self.message} ({details})" if details else self.message


class ConfigurationError(KilnError):
    """Invalid project configuration or unknown target/variant reference."""


class BuildError(KilnError):
    """Toolchain invocation for one (target, variant) pair failed."""

    def __init__(
        self,
        target: str,
        variant: str,
        diagnostic: str,
        return_code: int | None = None,
        command: list[str] | None = None,
    ) -> None:
        message = f"Build of {target}/{variant} failed"
        if return_code is not None:
            message += f" with exit code {return_code}"
        super().__init__(
            message,
            {
                "target": target,
                "variant": variant,
                "return_code": return_code,
                "command": " ".join(command) if command else None,
                "diagnostic": diagnostic,
            },
        )
        self.target = target
        self.variant = variant
        self.diagnostic = diagnostic
        self.return_code = return_code
        self.command = command or []


class MetadataError(KilnError):
    """A metadata generator failed on missing or malformed input."""

    def __init__(
        self, generator: str, message: str, context: dict[str, Any] | None = None
    ) -> None:
        super().__init__(message, {"generator": generator, **(context or {})})
        self.generator = generator


class VersionResolutionError(KilnError):
    """No version could be resolved from version-control metadata."""

    def __init__(self, message: str, diagnostic: str | None = None) -> None:
        super().__init__(message, {"diagnostic": diagnostic} if diagnostic else None)
        self.diagnostic = diagnostic


class TaskError(KilnError):
    """A subsystem check, lint or doc routine exited unsuccessfully."""

    def __init__(
        self,
        subsystem: str,
        capability: str,
        diagnostic: str,
        return_code: int | None = None,
        command: list[str] | None = None,
    ) -> None:
        super().__init__(
            f"{capability} routine of subsystem '{subsystem}' failed",
            {
                "subsystem": subsystem,
                "capability": capability,
                "return_code": return_code,
                "command": " ".join(command) if command else None,
                "diagnostic": diagnostic,
            },
        )
        self.subsystem = subsystem
        self.capability = capability
        self.diagnostic = diagnostic
        self.return_code = return_code


__all__ = [
    "BuildError",
    "ConfigurationError",
    "KilnError",
    "MetadataError",
    "TaskError",
    "VersionResolutionError",
]
