class ActionExecutionError(Exception):
    """Base class for failures the executor turns into a failed ActionResult."""


class DispatchError(ActionExecutionError):
    pass


class PermissionDeniedError(ActionExecutionError):
    def __init__(self, kind: str, category: str):
        self.kind = kind
        self.category = category
        super().__init__(f"{kind} permission denied for {category} action")
