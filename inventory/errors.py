"""Domain error raised by inventory operations."""


class InventarioError(Exception):
    """Inventory failure carrying an HTTP status and a stable machine code.

    Views translate ``status_code``/``code``/``message`` into the response;
    raising inside ``transaction.atomic`` rolls back every write of the operation.
    """

    def __init__(self, message: str, status_code: int = 400, code: str = "INVENTARIO_ERROR"):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.code = code

    def __repr__(self) -> str:  # pragma: no cover
        return f"InventarioError(code={self.code!r}, status_code={self.status_code}, message={self.message!r})"

    def as_dict(self) -> dict:
        return {"detail": self.message, "code": self.code}
