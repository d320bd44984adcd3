"""Service-level exceptions."""


class CloudbaseError(Exception):
    """Base exception for all Cloudbase service errors."""


class ForecastDecodeError(CloudbaseError):
    """Raised when a forecast payload cannot be normalized."""


class SheetFormatError(CloudbaseError):
    """Raised when a sheet response has no usable ``values`` table."""

    def __init__(self, sheet: str, detail: str):
        self.sheet = sheet
        super().__init__(f"{sheet}: {detail}")


class FavoriteExistsError(CloudbaseError):
    """Raised when adding a favorite that is already saved."""

    def __init__(self, favorite_type: str, favorite_id: str):
        self.favorite_type = favorite_type
        self.favorite_id = favorite_id
        super().__init__(f"{favorite_type} favorite {favorite_id!r} already exists")


class FavoriteNotFoundError(CloudbaseError):
    """Raised when removing or moving a favorite that is not saved."""

    def __init__(self, favorite_type: str, favorite_id: str):
        self.favorite_type = favorite_type
        self.favorite_id = favorite_id
        super().__init__(f"{favorite_type} favorite {favorite_id!r} not found")
