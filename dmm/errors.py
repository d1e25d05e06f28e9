from __future__ import annotations


class LauncherError(RuntimeError):
    code: str
    context: dict[str, object]

    def __init__(
        self,
        message: str,
        *,
        code: str,
        context: dict[str, object] | None = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.context = dict(context or {})

    def as_metadata(self) -> dict[str, object]:
        return {
            "code": self.code,
            "message": str(self),
            "context": self.context,
        }


class ConfigError(LauncherError):
    pass


class DiscoveryError(LauncherError):
    pass


class SelectorError(LauncherError):
    pass


class SelectorNotFoundError(SelectorError):
    pass
